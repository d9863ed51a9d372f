from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import httpx
import asyncio
import logging
import random

from hue_groups.config import AppConfig


logger = logging.getLogger("hue_groups")

CLIP_V2_PREFIX = "/clip/v2"

_RETRYABLE_METHODS = frozenset({"GET"})


class HueTransportError(Exception):
    pass


class HueUpstreamError(Exception):
    def __init__(self, *, status_code: int, body: Any) -> None:
        super().__init__(f"Hue upstream error: {status_code}")
        self.status_code = status_code
        self.body = body


class ResourceApi(Protocol):
    async def send_request(self, method: str, path: str) -> Any: ...


@dataclass(frozen=True)
class HueJSONishResult:
    status_code: int
    body: Any


class HueClient:
    """CLIP v2 transport: base URL, application key header, retries.

    Paths passed to :meth:`send_request` are relative to ``/clip/v2``.
    """

    def __init__(
        self,
        *,
        bridge_host: str | None,
        application_key: str | None,
        retry_max_attempts: int = 3,
        retry_base_delay_ms: int = 200,
        timeout: httpx.Timeout | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._bridge_host = bridge_host
        self._application_key = application_key
        self._retry_max_attempts = max(1, retry_max_attempts)
        self._retry_base_delay_ms = retry_base_delay_ms
        self._timeout = timeout or httpx.Timeout(10.0, connect=3.0)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(cls, config: AppConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> "HueClient":
        return cls(
            bridge_host=config.bridge_host,
            application_key=config.application_key,
            retry_max_attempts=config.retry_max_attempts,
            retry_base_delay_ms=config.retry_base_delay_ms,
            timeout=httpx.Timeout(config.timeout_seconds, connect=config.connect_timeout_seconds),
            transport=transport,
        )

    async def __aenter__(self) -> "HueClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def bridge_host(self) -> str | None:
        return self._bridge_host

    def _base_url(self) -> str:
        if not self._bridge_host:
            raise HueTransportError("bridge_host not configured")
        return f"https://{self._bridge_host}{CLIP_V2_PREFIX}"

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client:
            return self._client
        headers = {"Accept": "application/json"}
        if self._application_key:
            headers["hue-application-key"] = self._application_key
        self._client = httpx.AsyncClient(
            base_url=self._base_url(),
            verify=False,
            timeout=self._timeout,
            headers=headers,
            transport=self._transport,
        )
        return self._client

    async def request_jsonish(
        self,
        *,
        method: str,
        path: str,
        retry: bool = False,
        max_attempts: int = 3,
        base_delay_ms: int = 200,
    ) -> HueJSONishResult:
        client = await self._get_client()
        attempts = max_attempts if retry else 1

        last_transport_error: Exception | None = None
        last_upstream_error: HueUpstreamError | None = None

        for attempt in range(1, attempts + 1):
            try:
                resp = await client.request(method, path)
            except (httpx.ConnectError, httpx.ConnectTimeout, httpx.ReadTimeout, httpx.NetworkError) as exc:
                last_transport_error = exc
                if attempt == attempts:
                    raise HueTransportError(str(exc)) from exc
                logger.debug("%s %s failed (%s), attempt %d/%d", method, path, exc, attempt, attempts)
                await self._sleep_backoff(attempt=attempt, base_delay_ms=base_delay_ms)
                continue

            body: Any
            content_type = resp.headers.get("content-type", "")
            if "application/json" in content_type:
                try:
                    body = resp.json()
                except ValueError:
                    body = resp.text
            else:
                body = resp.text

            if resp.status_code >= 400:
                err = HueUpstreamError(status_code=resp.status_code, body=body)
                last_upstream_error = err
                should_retry = retry and (resp.status_code == 429 or 500 <= resp.status_code <= 599)
                if should_retry and attempt < attempts:
                    logger.debug("%s %s -> %s, attempt %d/%d", method, path, resp.status_code, attempt, attempts)
                    await self._sleep_backoff(attempt=attempt, base_delay_ms=base_delay_ms)
                    continue
                raise err

            return HueJSONishResult(status_code=resp.status_code, body=body)

        if last_upstream_error:
            raise last_upstream_error
        if last_transport_error:
            raise HueTransportError(str(last_transport_error)) from last_transport_error
        raise HueTransportError("request failed")

    async def _sleep_backoff(self, *, attempt: int, base_delay_ms: int) -> None:
        # Exponential backoff with jitter.
        delay = (base_delay_ms / 1000.0) * (2 ** (attempt - 1))
        delay = delay * (0.5 + random.random())
        await asyncio.sleep(min(delay, 5.0))

    async def send_request(self, method: str, path: str) -> Any:
        method = method.upper()
        result = await self.request_jsonish(
            method=method,
            path=path,
            retry=method in _RETRYABLE_METHODS,
            max_attempts=self._retry_max_attempts,
            base_delay_ms=self._retry_base_delay_ms,
        )
        return result.body
