"""Climate state section."""

from __future__ import annotations

from typing import ClassVar

from pyfla.models._base import FlaBaseModel, StateSection, WireBool, WireFloat, WireInt, WireStr, tolerant
from pyfla.models.values import NormalizedValue


class ClimateState(FlaBaseModel):
    """Cabin climate telemetry (temperatures in °C)."""

    _SECTION: ClassVar[str] = StateSection.CLIMATE

    inside_temp: WireFloat = None
    outside_temp: WireFloat = None
    driver_temp_setting: WireFloat = None
    passenger_temp_setting: WireFloat = None
    max_avail_temp: WireFloat = None
    min_avail_temp: WireFloat = None
    is_climate_on: WireBool = None
    is_auto_conditioning_on: WireBool = None
    is_front_defroster_on: WireBool = None
    is_rear_defroster_on: WireBool = None
    is_preconditioning: WireBool = None
    battery_heater: WireBool = None
    fan_status: WireInt = None
    defrost_mode: WireInt = None
    seat_heater_left: WireInt = None
    seat_heater_right: WireInt = None
    climate_keeper_mode: WireStr = None
    cabin_overheat_protection: WireStr = None
    timestamp: WireInt = None

    battery_heater_no_power: NormalizedValue = tolerant()
    steering_wheel_heat_level: NormalizedValue = tolerant()
    auto_seat_climate_left: NormalizedValue = tolerant()
    auto_seat_climate_right: NormalizedValue = tolerant()
    cabin_overheat_protection_actively_cooling: NormalizedValue = tolerant()
