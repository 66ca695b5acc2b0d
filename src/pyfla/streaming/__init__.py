"""Streaming transport: positional frame codec and client session."""

from pyfla.streaming.codec import (
    FieldRef,
    StreamingSession,
    StreamingUpdate,
    apply_update,
    decode_frame,
    encode_frame,
    resolve_field,
    resolve_fields,
)
from pyfla.streaming.client import VehicleStream

__all__ = [
    "FieldRef",
    "StreamingSession",
    "StreamingUpdate",
    "VehicleStream",
    "apply_update",
    "decode_frame",
    "encode_frame",
    "resolve_field",
    "resolve_fields",
]
