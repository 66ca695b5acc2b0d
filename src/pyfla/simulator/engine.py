"""Per-vehicle simulation state machine.

:class:`VehicleEngine` owns one :class:`VehicleState` and is the only
code allowed to mutate it.  It is synchronous and not thread-safe; the
registry serialises access with a per-vehicle lock.

States::

    asleep --wake_up--> online --charge_start--> charging --charge_stop--> online
                          |  ^
               drive_start|  |drive_stop (or empty battery)
                          v  |
                        driving

    online --(idle_timeout without a command)--> asleep

Commands are validated completely before anything is written, so a
rejected command leaves the state untouched.
"""

from __future__ import annotations

import enum
import logging
import math
import time
from collections.abc import Callable, Mapping
from typing import Any

from pyfla._constants import CHARGE_LIMIT_MAX, CHARGE_LIMIT_MIN
from pyfla.config import SimulatorConfig
from pyfla.exceptions import (
    FlaInvalidParameterError,
    FlaInvalidStateError,
    FlaTypeCoercionError,
    FlaUnknownCommandError,
    FlaVehicleAsleepError,
)
from pyfla.models._base import StateSection
from pyfla.models.charge import ChargingState
from pyfla.models.command import VehicleCommand
from pyfla.models.drive import ShiftState
from pyfla.models.values import NormalizedValue
from pyfla.models.vehicle import OnlineState, VehicleState
from pyfla.simulator.defaults import PACK_CAPACITY_KWH, RANGE_PER_PERCENT, default_vehicle_state

_logger = logging.getLogger(__name__)

# Degrees of latitude per mile.
_MILES_PER_DEGREE = 69.0
# Cabin temperature change while conditioning, degrees C per minute.
_CLIMATE_RATE = 0.5
_CHARGER_VOLTAGE = 240


class SimulationState(enum.StrEnum):
    ASLEEP = "asleep"
    ONLINE = "online"
    CHARGING = "charging"
    DRIVING = "driving"


_TRANSITIONS: dict[VehicleCommand, tuple[SimulationState, SimulationState]] = {
    VehicleCommand.CHARGE_START: (SimulationState.ONLINE, SimulationState.CHARGING),
    VehicleCommand.CHARGE_STOP: (SimulationState.CHARGING, SimulationState.ONLINE),
    VehicleCommand.DRIVE_START: (SimulationState.ONLINE, SimulationState.DRIVING),
    VehicleCommand.DRIVE_STOP: (SimulationState.DRIVING, SimulationState.ONLINE),
}


def _infer_simulation_state(state: VehicleState) -> SimulationState:
    if state.state == OnlineState.ASLEEP:
        return SimulationState.ASLEEP
    if state.charge_state.charging_state in (ChargingState.CHARGING, ChargingState.COMPLETE):
        return SimulationState.CHARGING
    if state.drive_state.shift_state in (ShiftState.DRIVE, ShiftState.REVERSE):
        return SimulationState.DRIVING
    return SimulationState.ONLINE


class VehicleEngine:
    """State machine and time evolution for a single simulated vehicle.

    Parameters
    ----------
    vehicle_id : int
        Id the vehicle answers to.
    config : SimulatorConfig
        Rates and timeouts used by :meth:`tick`.
    clock : callable
        Epoch-seconds time source used for section timestamps.
    state : VehicleState, optional
        Initial state; defaults to the parked, asleep vehicle.
    """

    def __init__(
        self,
        vehicle_id: int,
        config: SimulatorConfig,
        *,
        clock: Callable[[], float] = time.time,
        state: VehicleState | None = None,
    ) -> None:
        self.vehicle_id = vehicle_id
        self._config = config
        self._clock = clock
        self.state = state if state is not None else default_vehicle_state(vehicle_id, self._now_ms())
        self.sim_state = _infer_simulation_state(self.state)
        self.revision = 0
        self.idle_elapsed = 0.0
        # Fractional battery level; the wire field only carries whole percents.
        self._level = float(self.state.charge_state.battery_level or 0)

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _changed(self, *sections: StateSection) -> None:
        now = self._now_ms()
        for section in sections:
            self.state.section(section).timestamp = now
        self.revision += 1

    def snapshot(self) -> VehicleState:
        """Deep copy of the current state."""
        return self.state.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def apply(self, command: str, parameters: Mapping[str, Any] | None = None) -> None:
        """Apply *command* or raise the matching :class:`FlaCommandError`."""
        try:
            cmd = VehicleCommand(command)
        except ValueError:
            raise FlaUnknownCommandError(
                f"Unknown command {command!r}", vehicle_id=self.vehicle_id, command=command
            ) from None
        params = parameters or {}

        if cmd is VehicleCommand.WAKE_UP:
            self._wake_up()
            return
        if self.sim_state is SimulationState.ASLEEP:
            raise FlaVehicleAsleepError(f"Vehicle {self.vehicle_id} is asleep", vehicle_id=self.vehicle_id, command=cmd)

        transition = _TRANSITIONS.get(cmd)
        if transition is not None:
            source, target = transition
            if self.sim_state is not source:
                raise FlaInvalidStateError(
                    f"{cmd} is not allowed while {self.sim_state}", vehicle_id=self.vehicle_id, command=cmd
                )
            self._enter(target)
        elif cmd is VehicleCommand.SET_CHARGE_LIMIT:
            self._set_charge_limit(self._percent_parameter(cmd, params))
        elif cmd in (VehicleCommand.DOOR_LOCK, VehicleCommand.DOOR_UNLOCK):
            self.state.vehicle_state.locked = cmd is VehicleCommand.DOOR_LOCK
            self._changed(StateSection.VEHICLE)
        else:
            self._set_climate(cmd is VehicleCommand.AUTO_CONDITIONING_START)
        self.idle_elapsed = 0.0

    def _percent_parameter(self, cmd: VehicleCommand, params: Mapping[str, Any]) -> int:
        if "percent" not in params:
            raise FlaInvalidParameterError("Missing 'percent'", vehicle_id=self.vehicle_id, command=cmd)
        try:
            percent = NormalizedValue(params["percent"]).as_int()
        except FlaTypeCoercionError:
            raise FlaInvalidParameterError(
                f"Invalid percent {params['percent']!r}", vehicle_id=self.vehicle_id, command=cmd
            ) from None
        if not CHARGE_LIMIT_MIN <= percent <= CHARGE_LIMIT_MAX:
            raise FlaInvalidParameterError(
                f"percent must be between {CHARGE_LIMIT_MIN} and {CHARGE_LIMIT_MAX}",
                vehicle_id=self.vehicle_id,
                command=cmd,
            )
        return percent

    def _wake_up(self) -> None:
        self.idle_elapsed = 0.0
        if self.sim_state is not SimulationState.ASLEEP:
            return
        self.sim_state = SimulationState.ONLINE
        self.state.state = OnlineState.ONLINE.value
        self._changed()
        _logger.debug("vehicle %s: asleep -> online", self.vehicle_id)

    def _enter(self, target: SimulationState) -> None:
        previous = self.sim_state
        self.sim_state = target
        charge = self.state.charge_state
        drive = self.state.drive_state

        if target is SimulationState.CHARGING:
            self._level = float(charge.battery_level or 0)
            charge.charge_port_door_open = True
            charge.conn_charge_cable = "SAE"
            charge.charge_energy_added = 0.0
            charge.charge_miles_added_rated = 0.0
            charge.charge_miles_added_ideal = 0.0
            self._update_charging()
            self._changed(StateSection.CHARGE)
        elif target is SimulationState.DRIVING:
            drive.shift_state = ShiftState.DRIVE.value
            drive.speed = round(self._config.drive_speed)
            drive.power = round(self._config.drive_speed * 0.3)
            self._changed(StateSection.DRIVE)
        elif previous is SimulationState.CHARGING:
            charge.charging_state = ChargingState.STOPPED.value
            self._stop_charger()
            self._changed(StateSection.CHARGE)
        else:
            self._park()
            self._changed(StateSection.DRIVE)
        _logger.debug("vehicle %s: %s -> %s", self.vehicle_id, previous, target)

    def _park(self) -> None:
        drive = self.state.drive_state
        drive.shift_state = ShiftState.PARK.value
        drive.speed = 0
        drive.power = 0

    def _stop_charger(self) -> None:
        charge = self.state.charge_state
        charge.charger_power = 0
        charge.charger_actual_current = 0
        charge.charger_voltage = 2
        charge.charge_rate = 0
        charge.time_to_full_charge = 0.0
        charge.minutes_to_full_charge = 0

    def _set_charge_limit(self, percent: int) -> None:
        self.state.charge_state.charge_limit_soc = percent
        if self.sim_state is SimulationState.CHARGING:
            self._update_charging()
        self._changed(StateSection.CHARGE)

    def _set_climate(self, on: bool) -> None:
        climate = self.state.climate_state
        climate.is_climate_on = on
        climate.is_auto_conditioning_on = on
        climate.fan_status = 4 if on else 0
        self._changed(StateSection.CLIMATE)

    # ------------------------------------------------------------------
    # Time evolution
    # ------------------------------------------------------------------

    def tick(self, elapsed: float) -> bool:
        """Advance the simulation by *elapsed* seconds.

        Returns ``True`` when the state changed (and the revision advanced).
        """
        if elapsed <= 0 or self.sim_state is SimulationState.ASLEEP:
            return False
        before = self.revision
        self._tick_climate(elapsed)
        if self.sim_state is SimulationState.CHARGING:
            self._tick_charging(elapsed)
        elif self.sim_state is SimulationState.DRIVING:
            self._tick_driving(elapsed)
        else:
            self._tick_idle(elapsed)
        return self.revision != before

    def _charge_limit(self) -> int:
        return self.state.charge_state.charge_limit_soc or CHARGE_LIMIT_MAX

    def _update_charging(self) -> None:
        """Refresh charger fields from the current level and limit."""
        charge = self.state.charge_state
        remaining = max(0.0, self._charge_limit() - self._level)
        if remaining <= 0:
            charge.charging_state = ChargingState.COMPLETE.value
            self._stop_charger()
            return
        rate = self._config.charge_rate
        hours = remaining / rate if rate > 0 else 0.0
        charge.charging_state = ChargingState.CHARGING.value
        charge.charger_power = self._config.charge_power_kw
        charge.charger_voltage = _CHARGER_VOLTAGE
        charge.charger_actual_current = round(self._config.charge_power_kw * 1000 / _CHARGER_VOLTAGE)
        charge.charge_rate = round(rate * RANGE_PER_PERCENT, 1)
        charge.time_to_full_charge = round(hours, 2)
        charge.minutes_to_full_charge = round(hours * 60)

    def _set_level(self, level: float) -> None:
        charge = self.state.charge_state
        self._level = level
        whole = math.floor(level)
        charge.battery_level = whole
        charge.usable_battery_level = whole
        battery_range = round(level * RANGE_PER_PERCENT, 2)
        charge.battery_range = battery_range
        charge.ideal_battery_range = battery_range
        charge.est_battery_range = battery_range

    def _tick_charging(self, elapsed: float) -> None:
        limit = self._charge_limit()
        if self._level >= limit:
            if self.state.charge_state.charging_state != ChargingState.COMPLETE:
                self._update_charging()
                self._changed(StateSection.CHARGE)
            return
        gained = min(limit - self._level, self._config.charge_rate * elapsed / 3600)
        if gained <= 0:
            return
        charge = self.state.charge_state
        self._set_level(self._level + gained)
        charge.charge_energy_added = round((charge.charge_energy_added or 0.0) + gained / 100 * PACK_CAPACITY_KWH, 2)
        added = round(charge.charge_miles_added_rated.optional(float) or 0.0, 2) + gained * RANGE_PER_PERCENT
        charge.charge_miles_added_rated = round(added, 2)
        charge.charge_miles_added_ideal = round(added, 2)
        self._update_charging()
        self._changed(StateSection.CHARGE)

    def _tick_driving(self, elapsed: float) -> None:
        drive = self.state.drive_state
        distance = self._config.drive_speed * elapsed / 3600
        if distance <= 0:
            return
        heading = math.radians(drive.heading or 0)
        latitude = drive.latitude or 0.0
        longitude = drive.longitude or 0.0
        latitude += distance / _MILES_PER_DEGREE * math.cos(heading)
        longitude += distance / (_MILES_PER_DEGREE * max(math.cos(math.radians(latitude)), 0.01)) * math.sin(heading)
        drive.latitude = latitude
        drive.longitude = longitude
        drive.native_latitude = latitude
        drive.native_longitude = longitude
        drive.gps_as_of = self._now_ms() // 1000

        status = self.state.vehicle_state
        status.odometer = round((status.odometer or 0.0) + distance, 3)
        self._set_level(max(0.0, self._level - distance * self._config.drive_consumption))

        if self._level <= 0:
            self.sim_state = SimulationState.ONLINE
            self._park()
            _logger.debug("vehicle %s: driving -> online (battery empty)", self.vehicle_id)
        self._changed(StateSection.DRIVE, StateSection.VEHICLE, StateSection.CHARGE)

    def _tick_idle(self, elapsed: float) -> None:
        timeout = self._config.idle_timeout
        if timeout <= 0 or self.state.climate_state.is_climate_on:
            return
        self.idle_elapsed += elapsed
        if self.idle_elapsed < timeout:
            return
        self.sim_state = SimulationState.ASLEEP
        self.state.state = OnlineState.ASLEEP.value
        self.idle_elapsed = 0.0
        self._changed()
        _logger.debug("vehicle %s: online -> asleep (idle %.0fs)", self.vehicle_id, timeout)

    def _tick_climate(self, elapsed: float) -> None:
        climate = self.state.climate_state
        if not climate.is_climate_on or climate.inside_temp is None or climate.driver_temp_setting is None:
            return
        delta = climate.driver_temp_setting - climate.inside_temp
        if delta == 0:
            return
        step = min(abs(delta), _CLIMATE_RATE * elapsed / 60)
        climate.inside_temp = round(climate.inside_temp + math.copysign(step, delta), 2)
        self._changed(StateSection.CLIMATE)
