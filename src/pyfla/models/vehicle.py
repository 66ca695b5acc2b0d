"""Vehicle definition and the ``vehicle_data`` root aggregate."""

from __future__ import annotations

import enum
from typing import Any, ClassVar

from pydantic import Field, model_validator

from pyfla.models._base import FlaBaseModel, StateSection, WireBool, WireInt, WireStr, tolerant
from pyfla.models.charge import ChargeState
from pyfla.models.climate import ClimateState
from pyfla.models.drive import DriveState
from pyfla.models.gui import GuiSettings
from pyfla.models.values import NormalizedValue
from pyfla.models.vehicle_config import VehicleConfigState
from pyfla.models.vehicle_status import VehicleStatus


class OnlineState(enum.StrEnum):
    """Connectivity state reported in the root ``state`` field."""

    ONLINE = "online"
    ASLEEP = "asleep"
    OFFLINE = "offline"


SECTION_MODELS: dict[StateSection, type[FlaBaseModel]] = {
    StateSection.CHARGE: ChargeState,
    StateSection.CLIMATE: ClimateState,
    StateSection.DRIVE: DriveState,
    StateSection.GUI: GuiSettings,
    StateSection.CONFIG: VehicleConfigState,
    StateSection.VEHICLE: VehicleStatus,
}


class VehicleDefinition(FlaBaseModel):
    """A vehicle as listed by ``/vehicles``.

    ``id`` addresses the owner API, ``vehicle_id`` the streaming API.
    """

    id: int
    vehicle_id: WireInt = None
    vin: WireStr = None
    display_name: WireStr = None
    option_codes: WireStr = None
    tokens: list[str] = Field(default_factory=list)
    state: WireStr = None
    """One of :class:`OnlineState` on current backends."""
    in_service: WireBool = None
    id_s: WireStr = None
    calendar_enabled: WireBool = None
    api_version: WireInt = None

    color: NormalizedValue = tolerant()
    backseat_token: NormalizedValue = tolerant()
    backseat_token_updated_at: NormalizedValue = tolerant()

    @property
    def is_online(self) -> bool:
        return self.state == OnlineState.ONLINE


class VehicleState(VehicleDefinition):
    """Full ``vehicle_data`` snapshot for one vehicle.

    Every section is always present: sections the backend omits or sends
    as ``null`` are materialised with all fields unset, so callers never
    need to check for a missing section.
    """

    _SECTION: ClassVar[str] = "vehicle"

    user_id: WireInt = None
    access_type: WireStr = None

    charge_state: ChargeState = Field(default_factory=ChargeState)
    climate_state: ClimateState = Field(default_factory=ClimateState)
    drive_state: DriveState = Field(default_factory=DriveState)
    gui_settings: GuiSettings = Field(default_factory=GuiSettings)
    vehicle_config: VehicleConfigState = Field(default_factory=VehicleConfigState)
    vehicle_state: VehicleStatus = Field(default_factory=VehicleStatus)

    @model_validator(mode="before")
    @classmethod
    def _fill_missing_sections(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        if not any(values.get(section.value) is None for section in StateSection):
            return values
        filled = dict(values)
        for section in StateSection:
            if filled.get(section.value) is None:
                filled[section.value] = {}
        return filled

    def section(self, section: StateSection | str) -> FlaBaseModel:
        """Return the section model named *section*."""
        return getattr(self, StateSection(section).value)

    def sections(self) -> dict[StateSection, FlaBaseModel]:
        return {section: self.section(section) for section in StateSection}

    def definition(self) -> VehicleDefinition:
        """Project the snapshot down to its ``/vehicles`` listing entry."""
        wire = self.to_wire()
        for section in StateSection:
            wire.pop(section.value, None)
        wire.pop("user_id", None)
        wire.pop("access_type", None)
        return VehicleDefinition.model_validate(wire)

    def restricted(self, sections: set[StateSection] | frozenset[StateSection]) -> dict[str, Any]:
        """Serialise with only *sections* populated; the others are sent as ``null``."""
        wire = self.to_wire()
        for section in StateSection:
            if section not in sections:
                wire[section.value] = None
        return wire


def parse_vehicle_state(raw: Any) -> VehicleState:
    """Parse a raw ``vehicle_data`` payload into a :class:`VehicleState`."""
    return VehicleState.parse(raw)


def serialize_vehicle_state(state: VehicleState) -> dict[str, Any]:
    """Serialise a :class:`VehicleState` back to its wire payload."""
    return state.to_wire()
