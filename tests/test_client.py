"""Tests for the REST client layer using a fake transport."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from pyfla import FlaClient, FlaConfig
from pyfla.exceptions import (
    FlaApiError,
    FlaError,
    FlaInvalidStateError,
    FlaSchemaMismatchError,
    FlaTransportError,
    FlaUnknownVehicleError,
)
from pyfla.models import StateSection
from pyfla.simulator.defaults import default_vehicle_payload

VEHICLE_ID = 999_456_789


class FakeTransport:
    """Records requests and replays canned envelopes keyed by endpoint."""

    def __init__(self, responses: Mapping[str, Any]) -> None:
        self.responses = dict(responses)
        self.calls: list[tuple[str, str, dict[str, str] | None, dict[str, Any] | None]] = []

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        self.calls.append((method, endpoint, dict(params) if params else None, dict(json_body) if json_body else None))
        response = self.responses[endpoint]
        if isinstance(response, Exception):
            raise response
        return response


def _ok(response: Any) -> dict[str, Any]:
    return {"response": response, "error": None, "error_description": None, "messages": None}


def _client(transport: FakeTransport) -> FlaClient:
    return FlaClient(FlaConfig(access_token="t"), transport=transport)


@pytest.mark.asyncio
async def test_get_vehicle_data_parses_snapshot() -> None:
    endpoint = f"/vehicles/{VEHICLE_ID}/vehicle_data"
    transport = FakeTransport({endpoint: _ok(default_vehicle_payload(VEHICLE_ID, 0))})
    async with _client(transport) as client:
        state = await client.get_vehicle_data(VEHICLE_ID)
    assert state.charge_state.battery_level == 42
    assert transport.calls == [("GET", endpoint, None, None)]


@pytest.mark.asyncio
async def test_endpoints_are_joined_with_semicolons() -> None:
    endpoint = f"/vehicles/{VEHICLE_ID}/vehicle_data"
    transport = FakeTransport({endpoint: _ok({"id": VEHICLE_ID, "charge_state": {"battery_level": 10}})})
    async with _client(transport) as client:
        state = await client.get_vehicle_data(VEHICLE_ID, endpoints=[StateSection.CHARGE, "location_data"])
    assert transport.calls[0][2] == {"endpoints": "charge_state;location_data"}
    assert state.charge_state.battery_level == 10
    assert state.climate_state.inside_temp is None


@pytest.mark.asyncio
async def test_schema_mismatch_propagates() -> None:
    endpoint = f"/vehicles/{VEHICLE_ID}/vehicle_data"
    transport = FakeTransport({endpoint: _ok({"id": VEHICLE_ID, "charge_state": {"battery_level": {"x": 1}}})})
    async with _client(transport) as client:
        with pytest.raises(FlaSchemaMismatchError) as exc_info:
            await client.get_vehicle_data(VEHICLE_ID)
    assert exc_info.value.field == "battery_level"


@pytest.mark.asyncio
async def test_envelope_error_raises_api_error() -> None:
    transport = FakeTransport(
        {"/vehicles": {"response": None, "error": "vehicle unavailable", "error_description": "asleep"}}
    )
    async with _client(transport) as client:
        with pytest.raises(FlaApiError) as exc_info:
            await client.get_vehicles()
    assert exc_info.value.error == "vehicle unavailable"
    assert exc_info.value.endpoint == "/vehicles"


@pytest.mark.asyncio
async def test_not_found_maps_to_unknown_vehicle() -> None:
    endpoint = f"/vehicles/{VEHICLE_ID}"
    transport = FakeTransport({endpoint: FlaTransportError("HTTP 404", status_code=404, endpoint=endpoint)})
    async with _client(transport) as client:
        with pytest.raises(FlaUnknownVehicleError) as exc_info:
            await client.get_vehicle(VEHICLE_ID)
    assert exc_info.value.vehicle_id == VEHICLE_ID


@pytest.mark.asyncio
async def test_other_transport_errors_propagate() -> None:
    transport = FakeTransport({"/vehicles": FlaTransportError("HTTP 500", status_code=500, endpoint="/vehicles")})
    async with _client(transport) as client:
        with pytest.raises(FlaTransportError):
            await client.get_vehicles()


@pytest.mark.asyncio
async def test_command_posts_parameters() -> None:
    endpoint = f"/vehicles/{VEHICLE_ID}/command/set_charge_limit"
    transport = FakeTransport({endpoint: _ok({"result": True, "reason": None})})
    async with _client(transport) as client:
        response = await client.set_charge_limit(VEHICLE_ID, 75)
    assert response.result is True
    assert transport.calls == [("POST", endpoint, None, {"percent": 75})]


@pytest.mark.asyncio
async def test_command_failure_returned_or_raised() -> None:
    endpoint = f"/vehicles/{VEHICLE_ID}/command/charge_stop"
    transport = FakeTransport({endpoint: _ok({"result": False, "reason": "invalid_state"})})
    async with _client(transport) as client:
        response = await client.charge_stop(VEHICLE_ID)
        assert response.reason == "invalid_state"
        with pytest.raises(FlaInvalidStateError):
            await client.charge_stop(VEHICLE_ID, raise_on_failure=True)


@pytest.mark.asyncio
async def test_malformed_command_result() -> None:
    endpoint = f"/vehicles/{VEHICLE_ID}/command/charge_stop"
    transport = FakeTransport({endpoint: _ok(["unexpected"])})
    async with _client(transport) as client:
        with pytest.raises(FlaApiError):
            await client.charge_stop(VEHICLE_ID)


@pytest.mark.asyncio
async def test_client_requires_context_manager() -> None:
    client = FlaClient(FlaConfig())
    with pytest.raises(FlaError, match="not initialized"):
        await client.get_vehicles()
