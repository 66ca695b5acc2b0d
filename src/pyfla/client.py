"""High-level async client for the owner API."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import aiohttp

from pyfla._api import commands as _commands_api
from pyfla._api import vehicles as _vehicles_api
from pyfla._transport import HttpTransport, Transport
from pyfla.config import FlaConfig
from pyfla.exceptions import FlaError
from pyfla.models._base import StateSection
from pyfla.models.command import CommandResponse, VehicleCommand
from pyfla.models.vehicle import VehicleDefinition, VehicleState
from pyfla.streaming.client import VehicleStream

_logger = logging.getLogger(__name__)


class FlaClient:
    """Async client for the owner REST and streaming API.

    Usage::

        async with FlaClient(FlaConfig(access_token=token)) as client:
            vehicles = await client.get_vehicles()
            state = await client.get_vehicle_data(vehicles[0].id)

    The same client talks to the manufacturer backend or to the bundled
    simulator; only ``base_url`` and ``streaming_url`` differ.
    """

    def __init__(
        self,
        config: FlaConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config or FlaConfig.from_env()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport

    @property
    def config(self) -> FlaConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FlaClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        if self._transport is None:
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
        self._http_session = None
        self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise FlaError("Client not initialized. Use 'async with FlaClient(...) as client:'")
        return self._transport

    def _require_http_session(self) -> aiohttp.ClientSession:
        if self._http_session is None:
            raise FlaError("Client not initialized. Use 'async with FlaClient(...) as client:'")
        return self._http_session

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_vehicles(self) -> list[VehicleDefinition]:
        """List the vehicles on the account."""
        return await _vehicles_api.fetch_vehicle_list(self._require_transport())

    async def get_vehicle(self, vehicle_id: int) -> VehicleDefinition:
        """Fetch one vehicle's listing entry (does not wake it)."""
        return await _vehicles_api.fetch_vehicle(self._require_transport(), vehicle_id)

    async def get_vehicle_data(
        self,
        vehicle_id: int,
        *,
        endpoints: Iterable[StateSection | str] | None = None,
    ) -> VehicleState:
        """Fetch a full :class:`VehicleState` snapshot.

        Raises :class:`FlaUnknownVehicleError` for an unknown id and
        :class:`FlaSchemaMismatchError` when a strongly typed field holds an
        uninterpretable value.
        """
        return await _vehicles_api.fetch_vehicle_data(self._require_transport(), vehicle_id, endpoints=endpoints)

    async def wake(self, vehicle_id: int) -> VehicleDefinition:
        """Wake a vehicle through the dedicated endpoint and return its listing entry."""
        return await _vehicles_api.wake_vehicle(self._require_transport(), vehicle_id)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def send_command(
        self,
        vehicle_id: int,
        command: VehicleCommand | str,
        parameters: Mapping[str, Any] | None = None,
        *,
        raise_on_failure: bool = False,
    ) -> CommandResponse:
        """Send a command.

        Rejections come back as ``CommandResponse(result=False, reason=...)``.
        With ``raise_on_failure=True`` they are raised as the matching
        :class:`FlaCommandError` subclass instead.
        """
        name = str(command)
        response = await _commands_api.send_command(self._require_transport(), vehicle_id, name, parameters)
        if raise_on_failure:
            response.raise_for_failure(vehicle_id=vehicle_id, command=name)
        return response

    async def wake_up(self, vehicle_id: int, *, raise_on_failure: bool = False) -> CommandResponse:
        return await self.send_command(vehicle_id, VehicleCommand.WAKE_UP, raise_on_failure=raise_on_failure)

    async def charge_start(self, vehicle_id: int, *, raise_on_failure: bool = False) -> CommandResponse:
        return await self.send_command(vehicle_id, VehicleCommand.CHARGE_START, raise_on_failure=raise_on_failure)

    async def charge_stop(self, vehicle_id: int, *, raise_on_failure: bool = False) -> CommandResponse:
        return await self.send_command(vehicle_id, VehicleCommand.CHARGE_STOP, raise_on_failure=raise_on_failure)

    async def drive_start(self, vehicle_id: int, *, raise_on_failure: bool = False) -> CommandResponse:
        return await self.send_command(vehicle_id, VehicleCommand.DRIVE_START, raise_on_failure=raise_on_failure)

    async def drive_stop(self, vehicle_id: int, *, raise_on_failure: bool = False) -> CommandResponse:
        return await self.send_command(vehicle_id, VehicleCommand.DRIVE_STOP, raise_on_failure=raise_on_failure)

    async def set_charge_limit(
        self,
        vehicle_id: int,
        percent: int,
        *,
        raise_on_failure: bool = False,
    ) -> CommandResponse:
        """Set the charge target (50-100 percent)."""
        return await self.send_command(
            vehicle_id,
            VehicleCommand.SET_CHARGE_LIMIT,
            {"percent": percent},
            raise_on_failure=raise_on_failure,
        )

    async def door_lock(self, vehicle_id: int, *, raise_on_failure: bool = False) -> CommandResponse:
        return await self.send_command(vehicle_id, VehicleCommand.DOOR_LOCK, raise_on_failure=raise_on_failure)

    async def door_unlock(self, vehicle_id: int, *, raise_on_failure: bool = False) -> CommandResponse:
        return await self.send_command(vehicle_id, VehicleCommand.DOOR_UNLOCK, raise_on_failure=raise_on_failure)

    async def auto_conditioning_start(self, vehicle_id: int, *, raise_on_failure: bool = False) -> CommandResponse:
        return await self.send_command(
            vehicle_id,
            VehicleCommand.AUTO_CONDITIONING_START,
            raise_on_failure=raise_on_failure,
        )

    async def auto_conditioning_stop(self, vehicle_id: int, *, raise_on_failure: bool = False) -> CommandResponse:
        return await self.send_command(
            vehicle_id,
            VehicleCommand.AUTO_CONDITIONING_STOP,
            raise_on_failure=raise_on_failure,
        )

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def stream(self, vehicle_id: int, fields: Iterable[str]) -> VehicleStream:
        """Create a streaming session; open it with ``async with``."""
        return VehicleStream(self._require_http_session(), self._config, vehicle_id, fields)
