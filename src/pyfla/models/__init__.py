"""Data models for owner API payloads."""

from pyfla.models._base import FlaBaseModel, StateSection
from pyfla.models.charge import ChargeState, ChargingState
from pyfla.models.climate import ClimateState
from pyfla.models.command import CommandRequest, CommandResponse, VehicleCommand
from pyfla.models.drive import DriveState, ShiftState
from pyfla.models.gui import GuiSettings
from pyfla.models.streaming import (
    ErrorMessage,
    HelloMessage,
    StreamingErrorType,
    StreamingFrame,
    StreamingMessageType,
    SubscribeMessage,
    parse_server_message,
    parse_subscribe_message,
)
from pyfla.models.values import NormalizedValue, ValueKind
from pyfla.models.vehicle import (
    SECTION_MODELS,
    OnlineState,
    VehicleDefinition,
    VehicleState,
    parse_vehicle_state,
    serialize_vehicle_state,
)
from pyfla.models.vehicle_config import VehicleConfigState
from pyfla.models.vehicle_status import VehicleStatus

__all__ = [
    "SECTION_MODELS",
    "ChargeState",
    "ChargingState",
    "ClimateState",
    "CommandRequest",
    "CommandResponse",
    "DriveState",
    "ErrorMessage",
    "FlaBaseModel",
    "GuiSettings",
    "HelloMessage",
    "NormalizedValue",
    "OnlineState",
    "ShiftState",
    "StateSection",
    "StreamingErrorType",
    "StreamingFrame",
    "StreamingMessageType",
    "SubscribeMessage",
    "ValueKind",
    "VehicleCommand",
    "VehicleConfigState",
    "VehicleDefinition",
    "VehicleState",
    "VehicleStatus",
    "parse_server_message",
    "parse_subscribe_message",
    "parse_vehicle_state",
    "serialize_vehicle_state",
]
