from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from hue_groups.errors import InvalidResponseError
from hue_groups.hue_client import ResourceApi
from hue_groups.models import ResourceEnvelope


logger = logging.getLogger("hue_groups")

M = TypeVar("M", bound=BaseModel)


def parse_envelope(payload: Any, model: type[M], *, path: str) -> list[M]:
    """Validate a CLIP v2 ``{"errors": [...], "data": [...]}`` body into ``model`` items.

    The ``errors`` list is not interpreted; callers decide what an empty ``data``
    means for them.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        raise InvalidResponseError(
            f"Unexpected response shape from {path}",
            details={"path": path, "bodyType": type(payload).__name__},
        )
    try:
        envelope = ResourceEnvelope[model].model_validate(payload)
    except ValidationError as exc:
        raise InvalidResponseError(
            f"Invalid {model.__name__} payload from {path}",
            details={"path": path, "errors": exc.errors(include_url=False, include_context=False)},
        ) from exc
    if envelope.errors:
        logger.debug("%s reported errors: %s", path, [e.description for e in envelope.errors])
    return envelope.data


async def fetch_resources(api: ResourceApi, path: str, model: type[M]) -> list[M]:
    payload = await api.send_request("GET", path)
    items = parse_envelope(payload, model, path=path)
    logger.debug("GET %s -> %d item(s)", path, len(items))
    return items


async def fetch_resource(api: ResourceApi, path: str, model: type[M]) -> M | None:
    items = await fetch_resources(api, path, model)
    return items[0] if items else None
