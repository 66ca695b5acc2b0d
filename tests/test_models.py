"""Tests for payload models: tolerant parsing, schema mismatch and round trips."""

from __future__ import annotations

import pytest

from pyfla.exceptions import (
    FlaInvalidStateError,
    FlaSchemaMismatchError,
    FlaTypeCoercionError,
    FlaVehicleAsleepError,
)
from pyfla.models import (
    SECTION_MODELS,
    ChargeState,
    CommandResponse,
    OnlineState,
    StateSection,
    VehicleDefinition,
    VehicleState,
    parse_vehicle_state,
    serialize_vehicle_state,
)
from pyfla.models.values import NormalizedValue
from pyfla.simulator.defaults import default_vehicle_payload

_TS = 1_700_000_000_000


def _payload(**sections: dict) -> dict:
    payload = default_vehicle_payload(999_456_789, _TS)
    for name, updates in sections.items():
        payload[name].update(updates)
    return payload


# ------------------------------------------------------------------
# Parsing
# ------------------------------------------------------------------


class TestParse:
    def test_parses_full_payload(self) -> None:
        state = parse_vehicle_state(_payload())
        assert state.id == 999_456_789
        assert state.state == OnlineState.ASLEEP
        assert state.charge_state.battery_level == 42
        assert state.vehicle_state.locked is True
        assert state.drive_state.shift_state.is_null

    def test_numeric_strings_accepted_on_strong_fields(self) -> None:
        state = parse_vehicle_state(_payload(charge_state={"battery_level": "57", "battery_range": "120.5"}))
        assert state.charge_state.battery_level == 57
        assert state.charge_state.battery_range == pytest.approx(120.5)

    def test_blank_sentinels_become_none(self) -> None:
        state = parse_vehicle_state(_payload(charge_state={"battery_level": "--", "charger_power": ""}))
        assert state.charge_state.battery_level is None
        assert state.charge_state.charger_power is None

    def test_every_section_always_present(self) -> None:
        raw = _payload()
        del raw["climate_state"]
        raw["gui_settings"] = None
        state = parse_vehicle_state(raw)
        for section in StateSection:
            assert isinstance(state.section(section), SECTION_MODELS[section])
        assert state.climate_state.inside_temp is None
        assert state.gui_settings.gui_distance_units is None

    def test_minimal_payload(self) -> None:
        state = VehicleState.parse({"id": 1})
        assert set(state.sections()) == set(StateSection)

    def test_unknown_fields_preserved(self) -> None:
        raw = _payload(charge_state={"brand_new_field": {"nested": [1, 2]}})
        raw["granular_access"] = {"hide_private": False}
        state = parse_vehicle_state(raw)
        assert state.charge_state.raw_value("brand_new_field") == {"nested": [1, 2]}
        wire = serialize_vehicle_state(state)
        assert wire["granular_access"] == {"hide_private": False}
        assert wire["charge_state"]["brand_new_field"] == {"nested": [1, 2]}


class TestTolerantFields:
    @pytest.mark.parametrize("wire", [0, "0", 1.5, "1.5", True, None, "abc"])
    def test_tolerant_parse_never_fails(self, wire: object) -> None:
        sections = {
            section.value: {name: wire for name in model.tolerant_fields()} for section, model in SECTION_MODELS.items()
        }
        state = parse_vehicle_state(_payload(**sections))
        for section, model in SECTION_MODELS.items():
            owner = state.section(section)
            for name in model.tolerant_fields():
                assert getattr(owner, name).wire == wire

    def test_wire_type_preserved_on_serialize(self) -> None:
        state = parse_vehicle_state(_payload(charge_state={"charge_rate": "0", "charger_phases": 3}))
        wire = serialize_vehicle_state(state)
        assert wire["charge_state"]["charge_rate"] == "0"
        assert wire["charge_state"]["charger_phases"] == 3

    def test_int_and_string_forms_compare_equal(self) -> None:
        as_int = parse_vehicle_state(_payload(charge_state={"charger_phases": 1}))
        as_str = parse_vehicle_state(_payload(charge_state={"charger_phases": "1"}))
        assert as_int.charge_state.charger_phases == as_str.charge_state.charger_phases
        assert as_int == as_str

    def test_typed_access(self) -> None:
        state = parse_vehicle_state(_payload(charge_state={"charger_phases": "3", "charge_rate": "fast"}))
        assert state.charge_state.get_as("charger_phases", int) == 3
        with pytest.raises(FlaTypeCoercionError):
            state.charge_state.get_as("charge_rate", float)

    def test_typed_access_on_strong_field(self) -> None:
        state = parse_vehicle_state(_payload())
        assert state.charge_state.get_as("battery_level", int) == 42
        assert state.charge_state.get_as("battery_level", str) == "42"

    def test_assignment_wraps_value(self) -> None:
        charge = ChargeState()
        charge.charge_rate = 12
        assert isinstance(charge.charge_rate, NormalizedValue)
        assert charge.charge_rate == "12"


class TestSchemaMismatch:
    def test_object_on_numeric_field(self) -> None:
        with pytest.raises(FlaSchemaMismatchError) as exc_info:
            parse_vehicle_state(_payload(charge_state={"battery_level": {"value": 42}}))
        err = exc_info.value
        assert err.section == "charge_state"
        assert err.field == "battery_level"
        assert err.expected_kind == "int"
        assert err.actual_kind == "object"
        assert err.recoverable is False

    def test_non_numeric_string_on_numeric_field(self) -> None:
        with pytest.raises(FlaSchemaMismatchError) as exc_info:
            parse_vehicle_state(_payload(drive_state={"latitude": "north"}))
        assert exc_info.value.section == "drive_state"
        assert exc_info.value.expected_kind == "float"
        assert exc_info.value.actual_kind == "str"

    def test_bool_field(self) -> None:
        with pytest.raises(FlaSchemaMismatchError) as exc_info:
            parse_vehicle_state(_payload(vehicle_state={"locked": [True]}))
        assert exc_info.value.section == "vehicle_state"
        assert exc_info.value.field == "locked"
        assert exc_info.value.expected_kind == "bool"
        assert exc_info.value.actual_kind == "array"

    def test_section_not_an_object(self) -> None:
        raw = _payload()
        raw["charge_state"] = 5
        with pytest.raises(FlaSchemaMismatchError) as exc_info:
            parse_vehicle_state(raw)
        assert exc_info.value.section == "vehicle"
        assert exc_info.value.field == "charge_state"
        assert exc_info.value.expected_kind == "object"

    def test_missing_id(self) -> None:
        raw = _payload()
        del raw["id"]
        with pytest.raises(FlaSchemaMismatchError) as exc_info:
            parse_vehicle_state(raw)
        assert exc_info.value.field == "id"
        assert exc_info.value.actual_kind == "missing"


# ------------------------------------------------------------------
# Serialisation
# ------------------------------------------------------------------


class TestRoundTrip:
    def test_serialize_then_parse_is_identity(self) -> None:
        state = parse_vehicle_state(_payload(charge_state={"charge_rate": "7", "charger_phases": None}))
        assert parse_vehicle_state(serialize_vehicle_state(state)) == state

    def test_round_trip_after_retype(self) -> None:
        state = parse_vehicle_state(_payload(charge_state={"charger_phases": "3"}))
        state.charge_state.charger_phases = state.charge_state.charger_phases.retype(int)
        wire = serialize_vehicle_state(state)
        assert wire["charge_state"]["charger_phases"] == 3
        assert parse_vehicle_state(wire) == state

    def test_restricted_nulls_other_sections(self) -> None:
        state = parse_vehicle_state(_payload())
        wire = state.restricted(frozenset({StateSection.CHARGE}))
        assert wire["charge_state"]["battery_level"] == 42
        assert wire["drive_state"] is None
        reparsed = parse_vehicle_state(wire)
        assert reparsed.charge_state == state.charge_state
        assert reparsed.drive_state.latitude is None

    def test_definition_projection(self) -> None:
        state = parse_vehicle_state(_payload())
        definition = state.definition()
        assert type(definition) is VehicleDefinition
        assert definition.id == state.id
        assert "charge_state" not in definition.to_wire()


class TestCommandResponse:
    def test_success_wire_shape(self) -> None:
        assert CommandResponse.success().to_wire() == {"result": True, "reason": None}

    def test_failure_from_error(self) -> None:
        response = CommandResponse.failure(FlaVehicleAsleepError())
        assert response.to_wire() == {"result": False, "reason": "vehicle_asleep"}

    def test_raise_for_failure_maps_reason(self) -> None:
        response = CommandResponse(result=False, reason="invalid_state")
        with pytest.raises(FlaInvalidStateError) as exc_info:
            response.raise_for_failure(vehicle_id=1, command="charge_stop")
        assert exc_info.value.vehicle_id == 1
        assert exc_info.value.command == "charge_stop"
        assert exc_info.value.recoverable is True

    def test_state_not_serialized(self) -> None:
        state = parse_vehicle_state(_payload())
        assert "state" not in CommandResponse.success(state).to_wire()
