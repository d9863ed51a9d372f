from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable

from hue_groups.errors import GroupNotFoundError, ServerConsistencyError
from hue_groups.hue_client import ResourceApi
from hue_groups.lights import LightResourceApi
from hue_groups.lookup import dedupe_by_id, device_light_index, has_ref_of_type, index_by_id, refs_of_type
from hue_groups.models import (
    GROUP_TYPES,
    CombinedGroupMetadata,
    CombinedGroupResource,
    DeviceResource,
    GroupedLightResource,
    GroupResource,
    LightResource,
)
from hue_groups.resources import fetch_resource, fetch_resources


logger = logging.getLogger("hue_groups")


@dataclass(frozen=True)
class LightIndexes:
    """Per-call snapshot the child resolvers read from."""

    lights_by_id: dict[str, LightResource]
    device_light_ids: dict[str, list[str]]


def _lookup_lights(group: GroupResource, light_ids: Iterable[str], indexes: LightIndexes) -> list[LightResource]:
    lights: list[LightResource] = []
    for light_id in light_ids:
        light = indexes.lights_by_id.get(light_id)
        if light is None:
            # Deleted between fetches; only this group's light list shrinks.
            logger.warning("%s %s: light %s not found, skipping", group.type, group.id, light_id)
            continue
        lights.append(light)
    return lights


def resolve_zone_lights(group: GroupResource, indexes: LightIndexes) -> list[LightResource]:
    return _lookup_lights(group, (ref.rid for ref in refs_of_type(group.children, "light")), indexes)


def resolve_room_lights(group: GroupResource, indexes: LightIndexes) -> list[LightResource]:
    light_ids: list[str] = []
    for ref in refs_of_type(group.children, "device"):
        device_lights = indexes.device_light_ids.get(ref.rid)
        if device_lights is None:
            logger.warning("room %s: device %s not found, skipping", group.id, ref.rid)
            continue
        light_ids.extend(device_lights)
    # Devices in one room may expose the same light.
    return dedupe_by_id(_lookup_lights(group, light_ids, indexes))


@dataclass(frozen=True)
class ResolutionStrategy:
    child_rtype: str
    needs_devices: bool
    resolve: Callable[[GroupResource, LightIndexes], list[LightResource]]


STRATEGIES: dict[str, ResolutionStrategy] = {
    "zone": ResolutionStrategy(child_rtype="light", needs_devices=False, resolve=resolve_zone_lights),
    "room": ResolutionStrategy(child_rtype="device", needs_devices=True, resolve=resolve_room_lights),
}


async def gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """Like ``asyncio.gather`` but cancels the remaining awaitables once one fails."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def _strategy_for(group_type: str) -> ResolutionStrategy:
    strategy = STRATEGIES.get(group_type)
    if strategy is None:
        raise ValueError(f"group_type must be one of {', '.join(GROUP_TYPES)}, got {group_type!r}")
    return strategy


def _combine(
    group: GroupResource,
    *,
    grouped_lights: list[GroupedLightResource],
    lights: list[LightResource],
) -> CombinedGroupResource:
    return CombinedGroupResource(
        id=group.id,
        id_v1=group.id_v1,
        type=group.type,
        metadata=CombinedGroupMetadata(name=group.metadata.name),
        lights=lights,
        grouped_lights=grouped_lights,
    )


class GroupAggregator:
    """Joins rooms/zones with their grouped lights and member lights.

    Every call fetches a fresh snapshot from the bridge; nothing is cached
    between calls.
    """

    def __init__(self, api: ResourceApi, *, lights: LightResourceApi | None = None) -> None:
        self.api = api
        self.lights = lights or LightResourceApi(api)

    async def list_groups(self, group_type: str) -> list[CombinedGroupResource]:
        strategy = _strategy_for(group_type)
        groups = await fetch_resources(self.api, f"/resource/{group_type}", GroupResource)
        if not groups:
            return []

        grouped_lights, lights, devices = await gather_or_cancel(
            self._get_grouped_lights(),
            self.lights.list_lights(),
            self._get_devices(strategy),
        )
        grouped_light_by_id = index_by_id(grouped_lights)
        indexes = LightIndexes(lights_by_id=index_by_id(lights), device_light_ids=device_light_index(devices))

        result: list[CombinedGroupResource] = []
        for group in groups:
            if not has_ref_of_type(group.services, "grouped_light"):
                continue
            if not has_ref_of_type(group.children, strategy.child_rtype):
                continue
            result.append(
                _combine(
                    group,
                    grouped_lights=self._resolve_grouped_lights(group, grouped_light_by_id),
                    lights=strategy.resolve(group, indexes),
                )
            )

        logger.debug("list_groups(%s): %d of %d group(s) usable", group_type, len(result), len(groups))
        return result

    async def get_group(self, entity_id: str, group_type: str) -> CombinedGroupResource:
        strategy = _strategy_for(group_type)
        group = await fetch_resource(self.api, f"/resource/{group_type}/{entity_id}", GroupResource)
        if group is None:
            raise GroupNotFoundError(entity_id, group_type)

        refs = refs_of_type(group.services, "grouped_light")
        grouped_lights, lights, devices = await gather_or_cancel(
            gather_or_cancel(*(self._get_grouped_light(ref.rid) for ref in refs)),
            self.lights.list_lights(),
            self._get_devices(strategy),
        )
        indexes = LightIndexes(lights_by_id=index_by_id(lights), device_light_ids=device_light_index(devices))

        resolved: list[GroupedLightResource] = []
        for ref, grouped_light in zip(refs, grouped_lights):
            if grouped_light is None:
                logger.warning("%s %s: grouped_light %s not found, omitting", group.type, group.id, ref.rid)
                continue
            resolved.append(grouped_light)

        return _combine(group, grouped_lights=resolved, lights=strategy.resolve(group, indexes))

    def _resolve_grouped_lights(
        self,
        group: GroupResource,
        grouped_light_by_id: dict[str, GroupedLightResource],
    ) -> list[GroupedLightResource]:
        resolved: list[GroupedLightResource] = []
        for ref in refs_of_type(group.services, "grouped_light"):
            grouped_light = grouped_light_by_id.get(ref.rid)
            if grouped_light is None:
                logger.error("%s %s references missing grouped_light %s", group.type, group.id, ref.rid)
                raise ServerConsistencyError(
                    f"Grouped light resource not found for group {group.id}",
                    details={"groupId": group.id, "groupType": group.type, "groupedLightId": ref.rid},
                )
            resolved.append(grouped_light)
        return resolved

    async def _get_grouped_lights(self) -> list[GroupedLightResource]:
        return await fetch_resources(self.api, "/resource/grouped_light", GroupedLightResource)

    async def _get_grouped_light(self, grouped_light_id: str) -> GroupedLightResource | None:
        return await fetch_resource(self.api, f"/resource/grouped_light/{grouped_light_id}", GroupedLightResource)

    async def _get_devices(self, strategy: ResolutionStrategy) -> list[DeviceResource]:
        if not strategy.needs_devices:
            return []
        return await fetch_resources(self.api, "/resource/device", DeviceResource)
