from __future__ import annotations

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field


GroupType = Literal["room", "zone"]

GROUP_TYPES: tuple[GroupType, ...] = ("room", "zone")


class ResourceIdentifier(BaseModel):
    rid: str = Field(..., description="Id of the referenced resource.")
    rtype: str = Field(..., description="Collection the id belongs to (light, device, grouped_light, ...).")


class ErrorDescriptor(BaseModel):
    model_config = ConfigDict(extra="allow")

    description: str = ""


T = TypeVar("T")


class ResourceEnvelope(BaseModel, Generic[T]):
    errors: list[ErrorDescriptor] = Field(default_factory=list)
    data: list[T] = Field(default_factory=list)


class GroupMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    archetype: str | None = None


class GroupResource(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    id_v1: str | None = None
    children: list[ResourceIdentifier] = Field(default_factory=list)
    services: list[ResourceIdentifier] = Field(default_factory=list)
    type: GroupType
    metadata: GroupMetadata


class DeviceResource(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    id_v1: str | None = None
    metadata: dict[str, Any] | None = None
    product_data: dict[str, Any] | None = None
    services: list[ResourceIdentifier] = Field(default_factory=list)
    type: str = "device"


class OnState(BaseModel):
    on: bool


class Dimming(BaseModel):
    model_config = ConfigDict(extra="allow")

    brightness: float
    min_dim_level: float | None = None


class LightMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    archetype: str | None = None
    function: str | None = None


class LightResource(BaseModel):
    """A single light service as returned by ``/resource/light``.

    Only the fields the aggregation relies on are typed. Everything else the
    bridge sends (effects, dynamics, powerup, ...) is kept as extra data.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    id_v1: str | None = None
    owner: ResourceIdentifier | None = None
    metadata: LightMetadata
    on: OnState | None = None
    dimming: Dimming | None = None
    color: dict[str, Any] | None = None
    color_temperature: dict[str, Any] | None = None
    type: str = "light"


class GroupedLightResource(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    id_v1: str | None = None
    owner: ResourceIdentifier | None = None
    on: OnState | None = None
    dimming: Dimming | None = None
    type: str = "grouped_light"


class CombinedGroupMetadata(BaseModel):
    name: str


class CombinedGroupResource(BaseModel):
    id: str
    id_v1: str | None = None
    type: GroupType
    metadata: CombinedGroupMetadata
    lights: list[LightResource] = Field(default_factory=list)
    grouped_lights: list[GroupedLightResource] = Field(default_factory=list)
