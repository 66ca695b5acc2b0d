"""GUI settings section."""

from __future__ import annotations

from typing import ClassVar

from pyfla.models._base import FlaBaseModel, StateSection, WireBool, WireInt, WireStr


class GuiSettings(FlaBaseModel):
    """Display unit preferences."""

    _SECTION: ClassVar[str] = StateSection.GUI

    gui_24_hour_time: WireBool = None
    gui_charge_rate_units: WireStr = None
    gui_distance_units: WireStr = None
    gui_range_display: WireStr = None
    gui_temperature_units: WireStr = None
    gui_tirepressure_units: WireStr = None
    show_range_units: WireBool = None
    timestamp: WireInt = None
