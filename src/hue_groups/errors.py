from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal


Retryable = Literal[True, False, "maybe"]


@dataclass(frozen=True)
class ErrorRegistryEntry:
    code: str
    http_status: int
    retryable: Retryable


ERROR_CODE_REGISTRY: tuple[ErrorRegistryEntry, ...] = (
    ErrorRegistryEntry(code="not_found", http_status=404, retryable=False),
    ErrorRegistryEntry(code="bridge_inconsistent", http_status=502, retryable="maybe"),
    ErrorRegistryEntry(code="invalid_response", http_status=502, retryable=False),
)

_REGISTRY_BY_CODE = {entry.code: entry for entry in ERROR_CODE_REGISTRY}


class HueError(Exception):
    code = "internal_error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def status_code(self) -> int:
        entry = _REGISTRY_BY_CODE.get(self.code)
        return entry.http_status if entry else 500

    @property
    def retryable(self) -> Retryable:
        entry = _REGISTRY_BY_CODE.get(self.code)
        return entry.retryable if entry else "maybe"


class ResourceNotFoundError(HueError):
    code = "not_found"


class GroupNotFoundError(ResourceNotFoundError):
    def __init__(self, group_id: str, group_type: str) -> None:
        super().__init__(
            f"Group resource not found: {group_type} {group_id}",
            details={"groupId": group_id, "groupType": group_type},
        )


class LightNotFoundError(ResourceNotFoundError):
    def __init__(self, light_id: str) -> None:
        super().__init__(f"Light resource not found: {light_id}", details={"lightId": light_id})


class ServerConsistencyError(HueError):
    """A reference in one bridge collection points at an id missing from another."""

    code = "bridge_inconsistent"


class InvalidResponseError(HueError):
    code = "invalid_response"
