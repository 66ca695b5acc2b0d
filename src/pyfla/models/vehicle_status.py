"""Vehicle status section (``vehicle_state`` on the wire)."""

from __future__ import annotations

from typing import ClassVar

from pyfla.models._base import FlaBaseModel, StateSection, WireBool, WireFloat, WireInt, WireStr, tolerant
from pyfla.models.values import NormalizedValue


class VehicleStatus(FlaBaseModel):
    """Body, lock and software status.

    Door flags (``df``, ``dr``, ``pf``, ``pr``) and trunk flags (``ft``,
    ``rt``) are ``0`` when closed.  Nested objects such as ``media_info``
    are kept as extra fields.
    """

    _SECTION: ClassVar[str] = StateSection.VEHICLE

    api_version: WireInt = None
    car_version: WireStr = None
    odometer: WireFloat = None
    """Odometer (miles)."""
    locked: WireBool = None
    is_user_present: WireBool = None
    valet_mode: WireBool = None
    remote_start: WireBool = None
    df: WireInt = None
    dr: WireInt = None
    pf: WireInt = None
    pr: WireInt = None
    ft: WireInt = None
    rt: WireInt = None
    fd_window: WireInt = None
    fp_window: WireInt = None
    rd_window: WireInt = None
    rp_window: WireInt = None
    center_display_state: WireInt = None
    timestamp: WireInt = None

    sentry_mode: NormalizedValue = tolerant()
    sentry_mode_available: NormalizedValue = tolerant()
    vehicle_name: NormalizedValue = tolerant()
    homelink_device_count: NormalizedValue = tolerant()
    homelink_nearby: NormalizedValue = tolerant()
    vehicle_self_test_progress: NormalizedValue = tolerant()
