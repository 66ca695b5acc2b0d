"""Drive state section."""

from __future__ import annotations

import enum
from typing import ClassVar

from pyfla.models._base import FlaBaseModel, StateSection, WireFloat, WireInt, WireStr, tolerant
from pyfla.models.values import NormalizedValue


class ShiftState(enum.StrEnum):
    """Gear selector values carried by ``drive_state.shift_state``."""

    PARK = "P"
    DRIVE = "D"
    REVERSE = "R"
    NEUTRAL = "N"


class DriveState(FlaBaseModel):
    """Location and motion telemetry.

    ``speed``, ``power`` and ``shift_state`` are ``null`` while parked on
    some backends and numbers or strings on others, so they are tolerant.
    """

    _SECTION: ClassVar[str] = StateSection.DRIVE

    latitude: WireFloat = None
    longitude: WireFloat = None
    native_latitude: WireFloat = None
    native_longitude: WireFloat = None
    native_location_supported: WireInt = None
    native_type: WireStr = None
    heading: WireInt = None
    elevation: WireInt = None
    """Metres above sea level."""
    gps_as_of: WireInt = None
    active_route_latitude: WireFloat = None
    active_route_longitude: WireFloat = None
    timestamp: WireInt = None

    speed: NormalizedValue = tolerant()
    power: NormalizedValue = tolerant()
    shift_state: NormalizedValue = tolerant()
    active_route_traffic_minutes_delay: NormalizedValue = tolerant()
