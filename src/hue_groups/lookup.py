from __future__ import annotations

from typing import Iterable, Protocol, Sequence, TypeVar

from hue_groups.models import DeviceResource, ResourceIdentifier


class _HasId(Protocol):
    @property
    def id(self) -> str: ...


R = TypeVar("R", bound=_HasId)


def index_by_id(resources: Iterable[R]) -> dict[str, R]:
    # Later duplicates win, matching a dict built from the bridge list.
    return {resource.id: resource for resource in resources}


def refs_of_type(refs: Iterable[ResourceIdentifier], rtype: str) -> list[ResourceIdentifier]:
    return [ref for ref in refs if ref.rtype == rtype]


def has_ref_of_type(refs: Iterable[ResourceIdentifier], rtype: str) -> bool:
    return any(ref.rtype == rtype for ref in refs)


def device_light_index(devices: Iterable[DeviceResource]) -> dict[str, list[str]]:
    """Map each device id to the ids of the light services it exposes."""
    return {device.id: [ref.rid for ref in refs_of_type(device.services, "light")] for device in devices}


def dedupe_by_id(resources: Sequence[R]) -> list[R]:
    seen: set[str] = set()
    out: list[R] = []
    for resource in resources:
        if resource.id in seen:
            continue
        seen.add(resource.id)
        out.append(resource)
    return out
