"""Tests for the simulator registry (locking, lazy creation, change notification)."""

from __future__ import annotations

import asyncio
import logging

import pytest

from pyfla.config import SimulatorConfig
from pyfla.exceptions import FlaUnknownVehicleError
from pyfla.models import CommandRequest, OnlineState
from pyfla.simulator import SimulationState, VehicleSimulator

VEHICLE_ID = 999_456_789
OTHER_ID = 999_456_000


def _simulator(**overrides: object) -> VehicleSimulator:
    config = SimulatorConfig(tick_interval=0, **overrides)  # type: ignore[arg-type]
    return VehicleSimulator(config, clock=lambda: 1_700_000_000.0)


@pytest.mark.asyncio
async def test_vehicle_created_lazily_asleep() -> None:
    simulator = _simulator()
    state = await simulator.snapshot(VEHICLE_ID)
    assert state.id == VEHICLE_ID
    assert state.state == OnlineState.ASLEEP
    assert simulator.simulation_state(VEHICLE_ID) is SimulationState.ASLEEP


@pytest.mark.asyncio
async def test_unknown_vehicle_command_fails() -> None:
    simulator = _simulator()
    response = await simulator.command(123, "wake_up")
    assert response.result is False
    assert response.reason == "unknown_vehicle"


@pytest.mark.asyncio
async def test_unknown_vehicle_read_raises() -> None:
    simulator = _simulator()
    with pytest.raises(FlaUnknownVehicleError):
        await simulator.snapshot(123)


@pytest.mark.asyncio
async def test_execute_returns_updated_state() -> None:
    simulator = _simulator()
    response = await simulator.execute(CommandRequest(vehicle_id=VEHICLE_ID, command="wake_up"))
    assert response.result is True
    assert response.state is not None
    assert response.state.state == OnlineState.ONLINE


@pytest.mark.asyncio
async def test_rejected_command_is_a_failed_response() -> None:
    simulator = _simulator()
    response = await simulator.command(VEHICLE_ID, "charge_start")
    assert response.to_wire() == {"result": False, "reason": "vehicle_asleep"}
    assert simulator.revision(VEHICLE_ID) == 0


@pytest.mark.asyncio
async def test_vehicles_are_independent() -> None:
    simulator = _simulator()
    await simulator.command(VEHICLE_ID, "wake_up")
    assert simulator.simulation_state(VEHICLE_ID) is SimulationState.ONLINE
    assert simulator.simulation_state(OTHER_ID) is SimulationState.ASLEEP


@pytest.mark.asyncio
async def test_snapshot_is_a_copy() -> None:
    simulator = _simulator()
    await simulator.command(VEHICLE_ID, "wake_up")
    snapshot = await simulator.snapshot(VEHICLE_ID)
    snapshot.charge_state.battery_level = 1
    again = await simulator.snapshot(VEHICLE_ID)
    assert again.charge_state.battery_level == 42


@pytest.mark.asyncio
async def test_reads_do_not_reset_idle_timer() -> None:
    simulator = _simulator(idle_timeout=60.0)
    await simulator.command(VEHICLE_ID, "wake_up")
    await simulator.tick(VEHICLE_ID, 30.0)
    await simulator.snapshot(VEHICLE_ID)
    await simulator.tick(VEHICLE_ID, 30.0)
    assert simulator.simulation_state(VEHICLE_ID) is SimulationState.ASLEEP


@pytest.mark.asyncio
async def test_scenario_charge_progress() -> None:
    simulator = _simulator()
    await simulator.command(VEHICLE_ID, "wake_up")
    before = (await simulator.snapshot(VEHICLE_ID)).charge_state.battery_level
    assert (await simulator.command(VEHICLE_ID, "charge_start")).result is True
    for _ in range(5):
        await simulator.tick(VEHICLE_ID, 120.0)
    charging = (await simulator.snapshot(VEHICLE_ID)).charge_state.battery_level
    assert charging > before

    assert (await simulator.command(VEHICLE_ID, "charge_stop")).result is True
    assert simulator.simulation_state(VEHICLE_ID) is SimulationState.ONLINE
    await simulator.tick(VEHICLE_ID, 30.0)
    assert (await simulator.snapshot(VEHICLE_ID)).charge_state.battery_level == charging


@pytest.mark.asyncio
async def test_wait_for_change_wakes_on_command() -> None:
    simulator = _simulator()
    assert await simulator.wait_for_change(VEHICLE_ID, -1) == 0

    waiter = asyncio.create_task(simulator.wait_for_change(VEHICLE_ID, 0))
    await asyncio.sleep(0)
    assert not waiter.done()
    await simulator.command(VEHICLE_ID, "wake_up")
    assert await asyncio.wait_for(waiter, timeout=1.0) == 1


@pytest.mark.asyncio
async def test_concurrent_commands_are_serialised() -> None:
    simulator = _simulator()
    await simulator.command(VEHICLE_ID, "wake_up")
    results = await asyncio.gather(*(simulator.command(VEHICLE_ID, "charge_start") for _ in range(10)))
    assert sum(result.result for result in results) == 1
    assert {result.reason for result in results if not result.result} == {"invalid_state"}


@pytest.mark.asyncio
async def test_list_vehicles() -> None:
    simulator = _simulator()
    vehicles = await simulator.list_vehicles()
    assert [vehicle.id for vehicle in vehicles] == [VEHICLE_ID, OTHER_ID]
    assert all(vehicle.state == OnlineState.ASLEEP for vehicle in vehicles)


@pytest.mark.asyncio
async def test_background_ticker_advances_time() -> None:
    config = SimulatorConfig(tick_interval=0.01, idle_timeout=0.02)
    async with VehicleSimulator(config) as simulator:
        await simulator.command(VEHICLE_ID, "wake_up")
        for _ in range(200):
            if simulator.simulation_state(VEHICLE_ID) is SimulationState.ASLEEP:
                break
            await asyncio.sleep(0.01)
        assert simulator.simulation_state(VEHICLE_ID) is SimulationState.ASLEEP


@pytest.mark.asyncio
async def test_tick_all_advances_every_created_vehicle() -> None:
    simulator = _simulator(charge_rate=36_000.0)
    for vehicle_id in (VEHICLE_ID, OTHER_ID):
        await simulator.command(vehicle_id, "wake_up")
        await simulator.command(vehicle_id, "charge_start")

    await simulator.tick_all(1.0)

    for vehicle_id in (VEHICLE_ID, OTHER_ID):
        state = await simulator.snapshot(vehicle_id)
        assert state.charge_state.battery_level == 52


@pytest.mark.asyncio
async def test_background_ticker_drives_charging() -> None:
    config = SimulatorConfig(tick_interval=0.01, charge_rate=360_000.0)
    async with VehicleSimulator(config) as simulator:
        await simulator.command(VEHICLE_ID, "wake_up")
        await simulator.command(VEHICLE_ID, "charge_start")
        revision = simulator.revision(VEHICLE_ID)
        await asyncio.wait_for(simulator.wait_for_change(VEHICLE_ID, revision), timeout=5)
        state = await simulator.snapshot(VEHICLE_ID)
    assert state.charge_state.battery_level > 42


@pytest.mark.asyncio
async def test_tick_failure_does_not_stall_other_vehicles(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    simulator = _simulator(charge_rate=36_000.0)
    for vehicle_id in (VEHICLE_ID, OTHER_ID):
        await simulator.command(vehicle_id, "wake_up")
        await simulator.command(vehicle_id, "charge_start")

    def broken_tick(elapsed: float) -> bool:
        raise RuntimeError("engine fault")

    monkeypatch.setattr(simulator._slots[VEHICLE_ID].engine, "tick", broken_tick)

    with caplog.at_level(logging.ERROR, logger="pyfla.simulator.registry"):
        await simulator.tick_all(1.0)

    assert (await simulator.snapshot(OTHER_ID)).charge_state.battery_level == 52
    assert (await simulator.snapshot(VEHICLE_ID)).charge_state.battery_level == 42
    assert f"Simulator tick failed for vehicle {VEHICLE_ID}" in caplog.text
