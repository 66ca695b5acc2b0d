"""Charge state section."""

from __future__ import annotations

import enum
from typing import ClassVar

from pyfla.models._base import FlaBaseModel, StateSection, WireBool, WireFloat, WireInt, WireStr, tolerant
from pyfla.models.values import NormalizedValue


class ChargingState(enum.StrEnum):
    """Values observed in ``charge_state.charging_state``.

    The field itself stays a plain string so values added by newer
    backends still parse.
    """

    STARTING = "Starting"
    CHARGING = "Charging"
    COMPLETE = "Complete"
    STOPPED = "Stopped"
    DISCONNECTED = "Disconnected"
    NO_POWER = "NoPower"


class ChargeState(FlaBaseModel):
    """Battery and charger telemetry."""

    _SECTION: ClassVar[str] = StateSection.CHARGE

    battery_heater_on: WireBool = None
    battery_level: WireInt = None
    """State of charge (0-100 %)."""
    battery_range: WireFloat = None
    """Rated range (miles)."""
    est_battery_range: WireFloat = None
    ideal_battery_range: WireFloat = None
    usable_battery_level: WireInt = None
    charge_amps: WireInt = None
    charge_current_request: WireInt = None
    charge_current_request_max: WireInt = None
    charge_enable_request: WireBool = None
    charge_energy_added: WireFloat = None
    """Energy added during the current session (kWh)."""
    charge_limit_soc: WireInt = None
    """Configured charge target (%)."""
    charge_limit_soc_max: WireInt = None
    charge_limit_soc_min: WireInt = None
    charge_limit_soc_std: WireInt = None
    charge_port_door_open: WireBool = None
    charge_port_latch: WireStr = None
    charger_actual_current: WireInt = None
    charger_pilot_current: WireInt = None
    charger_power: WireInt = None
    """Charger power (kW)."""
    charger_voltage: WireInt = None
    charging_state: WireStr = None
    """One of :class:`ChargingState` on current backends."""
    conn_charge_cable: WireStr = None
    fast_charger_present: WireBool = None
    minutes_to_full_charge: WireInt = None
    scheduled_charging_pending: WireBool = None
    time_to_full_charge: WireFloat = None
    """Hours until the charge target is reached."""
    timestamp: WireInt = None

    # Fields whose wire type has changed between backend versions.
    charge_rate: NormalizedValue = tolerant()
    charge_miles_added_ideal: NormalizedValue = tolerant()
    charge_miles_added_rated: NormalizedValue = tolerant()
    charger_phases: NormalizedValue = tolerant()
    charge_port_cold_weather_mode: NormalizedValue = tolerant()
    managed_charging_active: NormalizedValue = tolerant()
    managed_charging_start_time: NormalizedValue = tolerant()
    scheduled_charging_start_time: NormalizedValue = tolerant()
    user_charge_enable_request: NormalizedValue = tolerant()

    @property
    def is_charging(self) -> bool:
        return self.charging_state == ChargingState.CHARGING
