from __future__ import annotations

from typing import Any

import asyncio

import httpx
import pytest
import pytest_asyncio

from hue_groups.config import AppConfig
from hue_groups.hue_client import HueClient, HueUpstreamError


class FakeBridge:
    """Serves CLIP v2 collections from dicts and records every requested path."""

    def __init__(self) -> None:
        self.collections: dict[str, list[dict[str, Any]]] = {}
        self.failures: dict[str, int] = {}
        self.calls: list[str] = []

    def set(self, rtype: str, items: list[dict[str, Any]]) -> None:
        self.collections[rtype] = items

    def fail(self, path: str, status_code: int = 503) -> None:
        self.failures[path] = status_code

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append(path)
        if path in self.failures:
            return httpx.Response(self.failures[path], json={"errors": [{"description": "boom"}], "data": []})

        prefix = "/clip/v2/resource/"
        if request.method != "GET" or not path.startswith(prefix):
            return httpx.Response(404, json={"errors": [{"description": "not found"}], "data": []})

        parts = path[len(prefix) :].split("/")
        items = self.collections.get(parts[0], [])
        if len(parts) == 2:
            items = [item for item in items if item.get("id") == parts[1]]
        return httpx.Response(200, json={"errors": [], "data": items})



class FailingLightsApi:
    """Fails the light listing at once; every other non-group fetch is slow."""

    def __init__(self, groups: dict[str, list[dict[str, Any]]]) -> None:
        self.groups = groups
        self.finished: list[str] = []
        self.cancelled: list[str] = []

    async def send_request(self, method: str, path: str) -> Any:
        if path == "/resource/light":
            raise HueUpstreamError(status_code=503, body="busy")
        if path in self.groups:
            return {"errors": [], "data": self.groups[path]}
        try:
            await asyncio.sleep(0.2)
        except asyncio.CancelledError:
            self.cancelled.append(path)
            raise
        self.finished.append(path)
        return {"errors": [], "data": []}

@pytest.fixture
def config() -> AppConfig:
    return AppConfig(
        bridge_host="bridge.test",
        application_key="abc",
        retry_max_attempts=1,
        retry_base_delay_ms=1,
    )


@pytest.fixture
def bridge() -> FakeBridge:
    return FakeBridge()


@pytest_asyncio.fixture
async def hue(config: AppConfig, bridge: FakeBridge):
    client = HueClient.from_config(config, transport=httpx.MockTransport(bridge.handler))
    try:
        yield client
    finally:
        await client.close()


def ref(rid: str, rtype: str) -> dict[str, str]:
    return {"rid": rid, "rtype": rtype}


def light(rid: str, name: str | None = None, *, owner: str | None = None) -> dict[str, Any]:
    obj: dict[str, Any] = {
        "id": rid,
        "type": "light",
        "metadata": {"name": name or rid, "archetype": "classic_bulb"},
        "on": {"on": True},
        "dimming": {"brightness": 80.0},
    }
    if owner:
        obj["owner"] = ref(owner, "device")
    return obj


def device(rid: str, light_ids: list[str]) -> dict[str, Any]:
    services = [ref(light_id, "light") for light_id in light_ids]
    services.append(ref(f"zb-{rid}", "zigbee_connectivity"))
    return {"id": rid, "type": "device", "metadata": {"name": rid}, "services": services}


def grouped_light(rid: str, *, on: bool = False) -> dict[str, Any]:
    return {"id": rid, "type": "grouped_light", "on": {"on": on}, "dimming": {"brightness": 50.0}}


def group(
    rid: str,
    group_type: str,
    *,
    children: list[dict[str, str]],
    services: list[dict[str, str]],
    name: str | None = None,
) -> dict[str, Any]:
    return {
        "id": rid,
        "id_v1": f"/groups/{rid}",
        "type": group_type,
        "metadata": {"name": name or rid, "archetype": "living_room"},
        "children": children,
        "services": services,
    }
