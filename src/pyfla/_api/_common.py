"""Shared helpers for owner API endpoint modules.

This module centralizes:
- unwrapping the ``{response, error, error_description}`` envelope
- mapping HTTP 404 on vehicle endpoints to :class:`FlaUnknownVehicleError`

It is internal to pyfla and may change at any time.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pyfla._transport import Transport
from pyfla.exceptions import FlaApiError, FlaTransportError, FlaUnknownVehicleError


def vehicle_endpoint(vehicle_id: int, suffix: str = "") -> str:
    return f"/vehicles/{int(vehicle_id)}{suffix}"


def unwrap_response(endpoint: str, body: dict[str, Any]) -> Any:
    """Return ``body["response"]``, raising on a non-empty ``error``."""
    error = body.get("error")
    if error:
        description = body.get("error_description") or error
        raise FlaApiError(f"{endpoint} failed: {description}", error=str(error), endpoint=endpoint)
    if "response" not in body:
        raise FlaApiError(f"{endpoint} returned no response", error="invalid_response", endpoint=endpoint)
    return body["response"]


async def call_json(
    transport: Transport,
    method: str,
    endpoint: str,
    *,
    vehicle_id: int | None = None,
    params: Mapping[str, str] | None = None,
    json_body: Mapping[str, Any] | None = None,
) -> Any:
    """Issue a request and return the unwrapped ``response`` payload."""
    try:
        body = await transport.request(method, endpoint, params=params, json_body=json_body)
    except FlaTransportError as exc:
        if exc.status_code == 404 and vehicle_id is not None:
            raise FlaUnknownVehicleError(f"Vehicle {vehicle_id} not found", vehicle_id=vehicle_id) from exc
        raise
    return unwrap_response(endpoint, body)
