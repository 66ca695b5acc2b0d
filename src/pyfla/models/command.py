"""Command request/response envelopes."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyfla.exceptions import FlaCommandError, command_error_for_reason
from pyfla.models.vehicle import VehicleState


class VehicleCommand(enum.StrEnum):
    """Command names accepted by ``/vehicles/{id}/command/{name}``."""

    WAKE_UP = "wake_up"
    CHARGE_START = "charge_start"
    CHARGE_STOP = "charge_stop"
    DRIVE_START = "drive_start"
    DRIVE_STOP = "drive_stop"
    SET_CHARGE_LIMIT = "set_charge_limit"
    DOOR_LOCK = "door_lock"
    DOOR_UNLOCK = "door_unlock"
    AUTO_CONDITIONING_START = "auto_conditioning_start"
    AUTO_CONDITIONING_STOP = "auto_conditioning_stop"


class CommandRequest(BaseModel):
    """A command addressed to one vehicle."""

    model_config = ConfigDict(frozen=True)

    vehicle_id: int
    command: str
    parameters: dict[str, Any] = Field(default_factory=dict)

    @field_validator("command")
    @classmethod
    def _normalize_command(cls, value: str) -> str:
        command = value.strip()
        if not command:
            raise ValueError("command must be non-empty")
        return command


class CommandResponse(BaseModel):
    """Outcome of a command.

    On the wire only ``result`` and ``reason`` are sent.  The simulator
    additionally attaches the post-command snapshot as ``state``.
    """

    model_config = ConfigDict(frozen=True)

    result: bool
    reason: str | None = None
    state: VehicleState | None = Field(default=None, exclude=True)

    @classmethod
    def success(cls, state: VehicleState | None = None) -> CommandResponse:
        return cls(result=True, reason=None, state=state)

    @classmethod
    def failure(cls, error: FlaCommandError) -> CommandResponse:
        return cls(result=False, reason=error.reason)

    def raise_for_failure(self, *, vehicle_id: int | None = None, command: str = "") -> None:
        """Raise the :class:`FlaCommandError` subclass matching ``reason``."""
        if self.result:
            return
        error_cls = command_error_for_reason(self.reason)
        raise error_cls(self.reason or "", vehicle_id=vehicle_id, command=command)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
