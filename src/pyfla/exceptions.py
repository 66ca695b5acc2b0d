"""Custom exception hierarchy for pyfla."""

from __future__ import annotations

from typing import Any, ClassVar


class FlaError(Exception):
    """Base exception for all pyfla errors."""

    recoverable: ClassVar[bool] = False
    """Whether the caller can fix the condition by issuing a different request."""


class FlaConfigError(FlaError):
    """Invalid or missing configuration."""


class FlaTransportError(FlaError):
    """HTTP-level failure (network, unexpected status, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class FlaApiError(FlaError):
    """The backend envelope carried a non-empty ``error``."""

    def __init__(
        self,
        message: str,
        *,
        error: str = "",
        endpoint: str = "",
    ) -> None:
        self.error = error
        self.endpoint = endpoint
        super().__init__(message)


# ------------------------------------------------------------------
# Data model errors (not retryable)
# ------------------------------------------------------------------


class FlaSchemaMismatchError(FlaError):
    """A strongly typed field arrived with a value that cannot be interpreted.

    This points at a schema-version bug rather than a transient condition,
    so it is never silently dropped.
    """

    def __init__(self, *, section: str, field: str, expected_kind: str, actual_kind: str) -> None:
        self.section = section
        self.field = field
        self.expected_kind = expected_kind
        self.actual_kind = actual_kind
        super().__init__(f"{section}.{field}: expected {expected_kind}, got {actual_kind}")


class FlaTypeCoercionError(FlaError, TypeError):
    """A typed accessor was requested that the stored value cannot satisfy."""

    def __init__(self, kind: str, value: Any) -> None:
        self.kind = kind
        self.value = value
        super().__init__(f"cannot read {value!r} as {kind}")


# ------------------------------------------------------------------
# Command validation errors (recoverable)
# ------------------------------------------------------------------


class FlaCommandError(FlaError):
    """A command was rejected by the vehicle state machine."""

    recoverable = True
    reason: ClassVar[str] = "command_failed"

    def __init__(self, message: str = "", *, vehicle_id: int | None = None, command: str = "") -> None:
        self.vehicle_id = vehicle_id
        self.command = command
        super().__init__(message or self.reason)


class FlaInvalidStateError(FlaCommandError):
    """The command is not allowed from the vehicle's current state."""

    reason = "invalid_state"


class FlaVehicleAsleepError(FlaCommandError):
    """The vehicle is asleep and only ``wake_up`` is accepted."""

    reason = "vehicle_asleep"


class FlaUnknownVehicleError(FlaCommandError):
    """No vehicle with the requested id exists."""

    reason = "unknown_vehicle"


class FlaUnknownCommandError(FlaCommandError):
    """The command name is not supported."""

    reason = "invalid_command"


class FlaInvalidParameterError(FlaCommandError):
    """A command parameter is missing or out of range."""

    reason = "invalid_parameter"


_COMMAND_ERRORS: dict[str, type[FlaCommandError]] = {
    cls.reason: cls
    for cls in (
        FlaInvalidStateError,
        FlaVehicleAsleepError,
        FlaUnknownVehicleError,
        FlaUnknownCommandError,
        FlaInvalidParameterError,
    )
}


def command_error_for_reason(reason: str | None) -> type[FlaCommandError]:
    """Return the exception class matching a wire ``reason`` string."""
    if reason is None:
        return FlaCommandError
    return _COMMAND_ERRORS.get(reason, FlaCommandError)


# ------------------------------------------------------------------
# Streaming errors
# ------------------------------------------------------------------


class FlaStreamingError(FlaError):
    """Streaming session failure."""


class FlaFrameLengthMismatchError(FlaStreamingError):
    """A frame's arity does not match the negotiated field list.

    The session is desynchronised and must be re-negotiated; the frame is
    never partially applied.
    """

    def __init__(self, *, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"frame carries {actual} values, session negotiated {expected} fields")


class FlaStreamingClosedError(FlaStreamingError):
    """The server closed the session or reported an error."""

    def __init__(self, message: str, *, error_type: str = "") -> None:
        self.error_type = error_type
        super().__init__(message)
