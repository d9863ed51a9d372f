from __future__ import annotations

from hue_groups.errors import LightNotFoundError
from hue_groups.hue_client import ResourceApi
from hue_groups.models import LightResource
from hue_groups.resources import fetch_resource, fetch_resources


class LightResourceApi:
    def __init__(self, api: ResourceApi) -> None:
        self.api = api

    async def list_lights(self) -> list[LightResource]:
        return await fetch_resources(self.api, "/resource/light", LightResource)

    async def get_light(self, light_id: str) -> LightResource:
        light = await fetch_resource(self.api, f"/resource/light/{light_id}", LightResource)
        if light is None:
            raise LightNotFoundError(light_id)
        return light
