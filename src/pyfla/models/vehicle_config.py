"""Vehicle configuration section."""

from __future__ import annotations

from typing import ClassVar

from pyfla.models._base import FlaBaseModel, StateSection, WireBool, WireInt, WireStr, tolerant
from pyfla.models.values import NormalizedValue


class VehicleConfigState(FlaBaseModel):
    """Static build configuration of the vehicle.

    ``seat_type``, ``sun_roof_installed``, ``key_version`` and
    ``badge_version`` have been sent both as small integers and as their
    string form.
    """

    _SECTION: ClassVar[str] = StateSection.CONFIG

    car_type: WireStr = None
    car_special_type: WireStr = None
    charge_port_type: WireStr = None
    driver_assist: WireStr = None
    exterior_color: WireStr = None
    wheel_type: WireStr = None
    trim_badging: WireStr = None
    roof_color: WireStr = None
    spoiler_type: WireStr = None
    can_actuate_trunks: WireBool = None
    can_accept_navigation_requests: WireBool = None
    eu_vehicle: WireBool = None
    has_air_suspension: WireBool = None
    has_ludicrous_mode: WireBool = None
    motorized_charge_port: WireBool = None
    plg: WireBool = None
    pws: WireBool = None
    rhd: WireBool = None
    rear_seat_heaters: WireInt = None
    rear_seat_type: WireInt = None
    utc_offset: WireInt = None
    timestamp: WireInt = None

    seat_type: NormalizedValue = tolerant()
    sun_roof_installed: NormalizedValue = tolerant()
    key_version: NormalizedValue = tolerant()
    badge_version: NormalizedValue = tolerant()
    aux_park_lamps: NormalizedValue = tolerant()
    exterior_trim: NormalizedValue = tolerant()
    performance_package: NormalizedValue = tolerant()
    third_row_seats: NormalizedValue = tolerant()
