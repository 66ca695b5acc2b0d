"""Simulator registry: vehicle id -> engine, lock and change notification."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pyfla.config import SimulatorConfig
from pyfla.exceptions import FlaCommandError, FlaUnknownVehicleError
from pyfla.models.command import CommandRequest, CommandResponse
from pyfla.models.vehicle import VehicleDefinition, VehicleState
from pyfla.simulator.engine import SimulationState, VehicleEngine

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _VehicleSlot:
    engine: VehicleEngine
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    changed: asyncio.Event = field(default_factory=asyncio.Event)


class VehicleSimulator:
    """Authoritative in-memory state for every simulated vehicle.

    A vehicle is known when its id is listed in
    :attr:`SimulatorConfig.vehicle_ids`; its state is created on first
    reference.  Commands and ticks for one vehicle are serialised by that
    vehicle's lock.  Reads copy the state under the same lock, so a
    snapshot always reflects exactly one revision.

    Usage::

        async with VehicleSimulator(SimulatorConfig(tick_interval=0)) as sim:
            await sim.command(999456789, "wake_up")
            await sim.tick(999456789, 60.0)
    """

    def __init__(
        self,
        config: SimulatorConfig | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or SimulatorConfig()
        self._clock = clock
        self._known = frozenset(self._config.vehicle_ids)
        self._slots: dict[int, _VehicleSlot] = {}
        self._ticker: asyncio.Task[None] | None = None

    @property
    def config(self) -> SimulatorConfig:
        return self._config

    @property
    def vehicle_ids(self) -> tuple[int, ...]:
        return self._config.vehicle_ids

    def is_known(self, vehicle_id: int) -> bool:
        return vehicle_id in self._known

    def _slot(self, vehicle_id: int) -> _VehicleSlot:
        slot = self._slots.get(vehicle_id)
        if slot is not None:
            return slot
        if vehicle_id not in self._known:
            raise FlaUnknownVehicleError(f"Vehicle {vehicle_id} not found", vehicle_id=vehicle_id)
        slot = _VehicleSlot(VehicleEngine(vehicle_id, self._config, clock=self._clock))
        self._slots[vehicle_id] = slot
        _logger.debug("Created simulated vehicle %s", vehicle_id)
        return slot

    @staticmethod
    def _notify(slot: _VehicleSlot) -> None:
        event, slot.changed = slot.changed, asyncio.Event()
        event.set()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def execute(self, request: CommandRequest) -> CommandResponse:
        """Apply a command; validation failures become failed responses."""
        try:
            slot = self._slot(request.vehicle_id)
            async with slot.lock:
                before = slot.engine.revision
                slot.engine.apply(request.command, request.parameters)
                state = slot.engine.snapshot()
                if slot.engine.revision != before:
                    self._notify(slot)
        except FlaCommandError as exc:
            _logger.debug("Rejected %s for vehicle %s: %s", request.command, request.vehicle_id, exc.reason)
            return CommandResponse.failure(exc)
        return CommandResponse.success(state)

    async def command(
        self,
        vehicle_id: int,
        command: str,
        parameters: Mapping[str, Any] | None = None,
    ) -> CommandResponse:
        request = CommandRequest(vehicle_id=vehicle_id, command=command, parameters=dict(parameters or {}))
        return await self.execute(request)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def snapshot_with_revision(self, vehicle_id: int) -> tuple[VehicleState, int]:
        slot = self._slot(vehicle_id)
        async with slot.lock:
            return slot.engine.snapshot(), slot.engine.revision

    async def snapshot(self, vehicle_id: int) -> VehicleState:
        """Consistent deep copy of the vehicle's state (never mutates it)."""
        state, _ = await self.snapshot_with_revision(vehicle_id)
        return state

    def revision(self, vehicle_id: int) -> int:
        return self._slot(vehicle_id).engine.revision

    def simulation_state(self, vehicle_id: int) -> SimulationState:
        return self._slot(vehicle_id).engine.sim_state

    async def list_vehicles(self) -> list[VehicleDefinition]:
        return [(await self.snapshot(vehicle_id)).definition() for vehicle_id in self._config.vehicle_ids]

    async def wait_for_change(self, vehicle_id: int, last_revision: int) -> int:
        """Wait until the revision moves past *last_revision* and return it."""
        slot = self._slot(vehicle_id)
        while slot.engine.revision <= last_revision:
            await slot.changed.wait()
        return slot.engine.revision

    # ------------------------------------------------------------------
    # Time evolution
    # ------------------------------------------------------------------

    async def tick(self, vehicle_id: int, elapsed: float) -> bool:
        """Advance one vehicle by *elapsed* seconds."""
        slot = self._slot(vehicle_id)
        async with slot.lock:
            changed = slot.engine.tick(elapsed)
            if changed:
                self._notify(slot)
        return changed

    async def tick_all(self, elapsed: float) -> None:
        """Advance every vehicle created so far.

        A vehicle whose tick fails is logged and skipped for this pass; the
        others still advance.
        """
        for vehicle_id in list(self._slots):
            try:
                await self.tick(vehicle_id, elapsed)
            except Exception:
                _logger.exception("Simulator tick failed for vehicle %s", vehicle_id)

    async def _run_ticker(self) -> None:
        loop = asyncio.get_running_loop()
        interval = self._config.tick_interval
        last = loop.time()
        while True:
            await asyncio.sleep(interval)
            now = loop.time()
            elapsed, last = now - last, now
            await self.tick_all(elapsed)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the background tick scheduler (no-op when ``tick_interval`` is 0)."""
        if self._ticker is not None or self._config.tick_interval <= 0:
            return
        self._ticker = asyncio.get_running_loop().create_task(self._run_ticker())
        _logger.info("Simulator started vehicles=%s tick_interval=%.2fs", self._config.vehicle_ids, self._config.tick_interval)

    async def close(self) -> None:
        ticker, self._ticker = self._ticker, None
        if ticker is None:
            return
        ticker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await ticker
        _logger.info("Simulator stopped")

    async def __aenter__(self) -> VehicleSimulator:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()
