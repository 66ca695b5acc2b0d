"""Vehicle command endpoint.

Endpoint:
  - POST /vehicles/{id}/command/{name}

Command failures come back as ``{"result": false, "reason": "..."}``
with HTTP 200; they are returned, not raised, unless the caller asks.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pyfla._api._common import call_json, vehicle_endpoint
from pyfla._transport import Transport
from pyfla.exceptions import FlaApiError
from pyfla.models.command import CommandResponse

_logger = logging.getLogger(__name__)


async def send_command(
    transport: Transport,
    vehicle_id: int,
    command: str,
    parameters: Mapping[str, Any] | None = None,
) -> CommandResponse:
    endpoint = vehicle_endpoint(vehicle_id, f"/command/{command}")
    decoded = await call_json(transport, "POST", endpoint, vehicle_id=vehicle_id, json_body=dict(parameters or {}))
    if not isinstance(decoded, dict):
        raise FlaApiError(f"{endpoint} returned an invalid command result", error="invalid_response", endpoint=endpoint)
    response = CommandResponse.model_validate(decoded)
    if not response.result:
        _logger.debug("Command %s on vehicle %s rejected: %s", command, vehicle_id, response.reason)
    return response
