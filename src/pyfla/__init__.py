"""pyfla - Async Python client and simulator for the vehicle owner API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyfla")
except PackageNotFoundError:
    __version__ = "0+local"
from pyfla.client import FlaClient
from pyfla.config import FlaConfig, SimulatorConfig
from pyfla.exceptions import (
    FlaApiError,
    FlaCommandError,
    FlaConfigError,
    FlaError,
    FlaFrameLengthMismatchError,
    FlaInvalidParameterError,
    FlaInvalidStateError,
    FlaSchemaMismatchError,
    FlaStreamingClosedError,
    FlaStreamingError,
    FlaTransportError,
    FlaTypeCoercionError,
    FlaUnknownCommandError,
    FlaUnknownVehicleError,
    FlaVehicleAsleepError,
)
from pyfla.models import (
    ChargeState,
    ChargingState,
    ClimateState,
    CommandRequest,
    CommandResponse,
    DriveState,
    GuiSettings,
    NormalizedValue,
    OnlineState,
    StateSection,
    VehicleCommand,
    VehicleConfigState,
    VehicleDefinition,
    VehicleState,
    VehicleStatus,
    parse_vehicle_state,
    serialize_vehicle_state,
)
from pyfla.streaming import StreamingSession, StreamingUpdate, VehicleStream

__all__ = [
    "__version__",
    "ChargeState",
    "ChargingState",
    "ClimateState",
    "CommandRequest",
    "CommandResponse",
    "DriveState",
    "FlaApiError",
    "FlaClient",
    "FlaCommandError",
    "FlaConfig",
    "FlaConfigError",
    "FlaError",
    "FlaFrameLengthMismatchError",
    "FlaInvalidParameterError",
    "FlaInvalidStateError",
    "FlaSchemaMismatchError",
    "FlaStreamingClosedError",
    "FlaStreamingError",
    "FlaTransportError",
    "FlaTypeCoercionError",
    "FlaUnknownCommandError",
    "FlaUnknownVehicleError",
    "FlaVehicleAsleepError",
    "GuiSettings",
    "NormalizedValue",
    "OnlineState",
    "SimulatorConfig",
    "StateSection",
    "StreamingSession",
    "StreamingUpdate",
    "VehicleCommand",
    "VehicleConfigState",
    "VehicleDefinition",
    "VehicleState",
    "VehicleStatus",
    "VehicleStream",
    "parse_vehicle_state",
    "serialize_vehicle_state",
]
