"""Streaming protocol messages.

One websocket carries JSON text messages tagged by ``msg_type``::

    client -> {"msg_type": "data:subscribe", "vehicle_id": 1, "fields": ["soc", "speed"]}
    server <- {"msg_type": "control:hello", "fields": ["soc", "speed"], "connection_timeout": 30000}
    server <- {"msg_type": "data:update", "tag": 1, "seq": 1, "values": [42, null]}
    server <- {"msg_type": "data:error", "error_type": "client_error", "value": "..."}

Frames never repeat field names; values are positional against the
acknowledged ``fields`` list.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from pyfla.exceptions import FlaStreamingError
from pyfla.models.values import NormalizedValue


class StreamingMessageType(enum.StrEnum):
    SUBSCRIBE = "data:subscribe"
    HELLO = "control:hello"
    UPDATE = "data:update"
    ERROR = "data:error"


class StreamingErrorType(enum.StrEnum):
    VEHICLE_DISCONNECTED = "vehicle_disconnected"
    VEHICLE_ERROR = "vehicle_error"
    CLIENT_ERROR = "client_error"


class _StreamingMessage(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    def dump(self) -> str:
        return self.model_dump_json()


class SubscribeMessage(_StreamingMessage):
    """Session-open request sent by the client."""

    msg_type: Literal["data:subscribe"] = "data:subscribe"
    vehicle_id: int
    fields: list[str]
    token: str | None = None

    @field_validator("fields")
    @classmethod
    def _require_fields(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("fields must not be empty")
        if len(set(value)) != len(value):
            raise ValueError("fields must not repeat a name")
        return value


class HelloMessage(_StreamingMessage):
    """Acknowledgement echoing the negotiated field order."""

    msg_type: Literal["control:hello"] = "control:hello"
    fields: list[str]
    connection_timeout: int = 30000


class StreamingFrame(_StreamingMessage):
    """One positional data frame."""

    msg_type: Literal["data:update"] = "data:update"
    tag: int | None = None
    """Vehicle id the frame belongs to."""
    seq: int
    values: list[NormalizedValue]


class ErrorMessage(_StreamingMessage):
    """Server-side error; the server closes the socket after sending it."""

    msg_type: Literal["data:error"] = "data:error"
    tag: int | None = None
    error_type: str = StreamingErrorType.CLIENT_ERROR
    value: str = ""


ServerMessage = Annotated[HelloMessage | StreamingFrame | ErrorMessage, Field(discriminator="msg_type")]

_SERVER_ADAPTER: TypeAdapter[HelloMessage | StreamingFrame | ErrorMessage] = TypeAdapter(ServerMessage)


def parse_server_message(data: str | bytes | dict[str, Any]) -> HelloMessage | StreamingFrame | ErrorMessage:
    """Parse a message received from the streaming server."""
    try:
        if isinstance(data, dict):
            return _SERVER_ADAPTER.validate_python(data)
        return _SERVER_ADAPTER.validate_json(data)
    except ValidationError as exc:
        raise FlaStreamingError(f"Invalid streaming message: {exc.errors()[0]['msg']}") from exc


def parse_subscribe_message(data: str | bytes | dict[str, Any]) -> SubscribeMessage:
    """Parse the session-open message received by the streaming server."""
    try:
        if isinstance(data, dict):
            return SubscribeMessage.model_validate(data)
        return SubscribeMessage.model_validate_json(data)
    except ValidationError as exc:
        raise FlaStreamingError(f"Invalid subscribe message: {exc.errors()[0]['msg']}") from exc
