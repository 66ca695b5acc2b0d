"""Positional frame codec shared by the streaming client and server.

A session fixes an ordered list of field names at negotiation time.
Frames carry only values, aligned by position to that list, so encoder
and decoder must agree on the list; :func:`decode_frame` refuses any
frame whose arity differs.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Sequence
from typing import Any

from pyfla._constants import STREAMING_ALIASES
from pyfla.exceptions import FlaFrameLengthMismatchError, FlaStreamingError
from pyfla.models._base import FlaBaseModel, StateSection
from pyfla.models.streaming import StreamingFrame
from pyfla.models.values import NormalizedValue
from pyfla.models.vehicle import SECTION_MODELS, VehicleState


@dataclasses.dataclass(frozen=True, slots=True)
class FieldRef:
    """Location of a streaming field inside :class:`VehicleState`."""

    section: StateSection | None
    field: str

    def read(self, state: VehicleState) -> NormalizedValue:
        owner: FlaBaseModel = state if self.section is None else state.section(self.section)
        return owner.field_value(self.field)


def _root_fields() -> frozenset[str]:
    sections = {section.value for section in StateSection}
    return frozenset(name for name in VehicleState.model_fields if name not in sections)


_ROOT_FIELDS = _root_fields()


def resolve_field(name: str) -> FieldRef:
    """Map a subscribed field name to its location.

    Accepts manufacturer aliases (``soc``), dotted names
    (``drive_state.timestamp``), root fields (``state``) and plain section
    field names, searched in :class:`StateSection` order.
    """
    target = STREAMING_ALIASES.get(name, name)
    if "." in target:
        section_name, _, field = target.partition(".")
        try:
            section = StateSection(section_name)
        except ValueError:
            raise FlaStreamingError(f"Unknown streaming field {name!r}") from None
        if field not in SECTION_MODELS[section].model_fields:
            raise FlaStreamingError(f"Unknown streaming field {name!r}")
        return FieldRef(section, field)
    if target in _ROOT_FIELDS:
        return FieldRef(None, target)
    for section, model in SECTION_MODELS.items():
        if target in model.model_fields:
            return FieldRef(section, target)
    raise FlaStreamingError(f"Unknown streaming field {name!r}")


def resolve_fields(names: Iterable[str]) -> tuple[FieldRef, ...]:
    """Resolve a subscription; names must be unique so frames decode by position."""
    names = tuple(names)
    if not names:
        raise FlaStreamingError("A streaming session needs at least one field")
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise FlaStreamingError(f"Streaming field {name!r} subscribed twice")
        seen.add(name)
    return tuple(resolve_field(name) for name in names)


@dataclasses.dataclass
class StreamingSession:
    """Negotiated streaming session state.

    ``seq`` increases by one for every frame and starts over on each new
    session; ``last_revision`` is the vehicle revision of the last frame.
    """

    vehicle_id: int
    subscribed_fields: tuple[str, ...]
    seq: int = 0
    last_revision: int = -1
    refs: tuple[FieldRef, ...] = dataclasses.field(default=(), repr=False)

    def __post_init__(self) -> None:
        if not self.refs:
            self.refs = resolve_fields(self.subscribed_fields)

    def next_seq(self) -> int:
        self.seq += 1
        return self.seq


@dataclasses.dataclass(frozen=True)
class StreamingUpdate:
    """Decoded frame: subscribed field name -> value."""

    vehicle_id: int | None
    seq: int
    values: dict[str, NormalizedValue]

    def __getitem__(self, name: str) -> NormalizedValue:
        return self.values[name]

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def apply_to(self, state: VehicleState) -> VehicleState:
        """Return a copy of *state* with the streamed fields replaced.

        Strongly typed fields are re-validated, so an uninterpretable value
        raises :class:`FlaSchemaMismatchError`.
        """
        return apply_update(state, self)


def encode_frame(state: VehicleState, session: StreamingSession) -> StreamingFrame:
    """Assemble the next frame for *session* from a consistent snapshot."""
    values = [ref.read(state) for ref in session.refs]
    return StreamingFrame(tag=session.vehicle_id, seq=session.next_seq(), values=values)


def decode_frame(frame: StreamingFrame, fields: Sequence[str], *, vehicle_id: int | None = None) -> StreamingUpdate:
    """Align *frame* values with the negotiated *fields*."""
    if len(set(fields)) != len(fields):
        raise FlaStreamingError("Negotiated fields repeat a name")
    if len(frame.values) != len(fields):
        raise FlaFrameLengthMismatchError(expected=len(fields), actual=len(frame.values))
    owner = frame.tag if frame.tag is not None else vehicle_id
    return StreamingUpdate(vehicle_id=owner, seq=frame.seq, values=dict(zip(fields, frame.values, strict=True)))


def apply_update(state: VehicleState, update: StreamingUpdate) -> VehicleState:
    wire = state.to_wire()
    for name, value in update.values.items():
        ref = resolve_field(name)
        target = wire if ref.section is None else wire[ref.section.value]
        target[ref.field] = value.wire
    return VehicleState.parse(wire)
