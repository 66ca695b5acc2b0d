"""Vehicle read endpoints.

Endpoints:
  - GET /vehicles
  - GET /vehicles/{id}
  - GET /vehicles/{id}/vehicle_data
  - POST /vehicles/{id}/wake_up
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pyfla._api._common import call_json, vehicle_endpoint
from pyfla._transport import Transport
from pyfla.models._base import StateSection
from pyfla.models.vehicle import VehicleDefinition, VehicleState, parse_vehicle_state

_logger = logging.getLogger(__name__)


async def fetch_vehicle_list(transport: Transport) -> list[VehicleDefinition]:
    """Fetch all vehicles on the account."""
    decoded = await call_json(transport, "GET", "/vehicles")
    items = decoded if isinstance(decoded, list) else []
    _logger.debug("Vehicle list response decoded count=%d", len(items))
    return [VehicleDefinition.parse(item) for item in items]


async def fetch_vehicle(transport: Transport, vehicle_id: int) -> VehicleDefinition:
    decoded = await call_json(transport, "GET", vehicle_endpoint(vehicle_id), vehicle_id=vehicle_id)
    return VehicleDefinition.parse(decoded)


async def fetch_vehicle_data(
    transport: Transport,
    vehicle_id: int,
    *,
    endpoints: Iterable[StateSection | str] | None = None,
) -> VehicleState:
    """Fetch a full snapshot, optionally restricted to some sections.

    *endpoints* takes :class:`StateSection` names plus ``location_data``,
    which releases drive_state coordinates.  Sections left out by the
    backend are still present on the returned :class:`VehicleState`, with
    every field unset.
    """
    params = None
    if endpoints is not None:
        params = {"endpoints": ";".join(str(name) for name in endpoints)}
    decoded = await call_json(
        transport,
        "GET",
        vehicle_endpoint(vehicle_id, "/vehicle_data"),
        vehicle_id=vehicle_id,
        params=params,
    )
    return parse_vehicle_state(decoded)


async def wake_vehicle(transport: Transport, vehicle_id: int) -> VehicleDefinition:
    """Wake a vehicle through ``POST /vehicles/{id}/wake_up``."""
    decoded = await call_json(transport, "POST", vehicle_endpoint(vehicle_id, "/wake_up"), vehicle_id=vehicle_id)
    return VehicleDefinition.parse(decoded)
