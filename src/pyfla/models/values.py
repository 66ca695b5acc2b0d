"""Tolerant wire values.

The owner API changes the representation of some fields between backend
versions (``0`` one month, ``"0"`` the next).  Such fields are stored as a
:class:`NormalizedValue`, which keeps the value exactly as received and
offers explicit, fallible typed accessors:

* ``NormalizedValue(1) == NormalizedValue("1")`` is ``True``
* ``NormalizedValue("abc").as_int()`` raises :class:`FlaTypeCoercionError`
* serialisation emits the original wire value unless :meth:`retype` was used
"""

from __future__ import annotations

import enum
import math
from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from pyfla.exceptions import FlaTypeCoercionError


class ValueKind(enum.StrEnum):
    """Wire representation held by a :class:`NormalizedValue`."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STR = "str"
    OTHER = "other"


def kind_of(value: Any) -> str:
    """Describe the JSON kind of a raw wire value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "str"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


def parse_numeric(text: str) -> int | float | None:
    """Parse a numeric string, returning ``None`` when it is not one."""
    stripped = text.strip()
    if not stripped or "_" in stripped:
        return None
    try:
        return int(stripped)
    except ValueError:
        pass
    try:
        result = float(stripped)
    except ValueError:
        return None
    if not math.isfinite(result):
        return None
    return result


def _kind(wire: Any) -> ValueKind:
    if wire is None:
        return ValueKind.NULL
    if isinstance(wire, bool):
        return ValueKind.BOOL
    if isinstance(wire, int):
        return ValueKind.INT
    if isinstance(wire, float):
        return ValueKind.FLOAT
    if isinstance(wire, str):
        return ValueKind.STR
    return ValueKind.OTHER


class NormalizedValue:
    """A wire value whose type is allowed to drift.

    Instances are immutable.  Equality and hashing use a normalised key so
    that numeric strings equal the numbers they spell.
    """

    __slots__ = ("_wire", "_kind")

    def __init__(self, wire: Any = None) -> None:
        if isinstance(wire, NormalizedValue):
            wire = wire.wire
        if isinstance(wire, tuple):
            wire = list(wire)
        object.__setattr__(self, "_wire", wire)
        object.__setattr__(self, "_kind", _kind(wire))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("NormalizedValue is immutable")

    @classmethod
    def null(cls) -> NormalizedValue:
        return cls(None)

    @property
    def wire(self) -> Any:
        """The value exactly as it will be serialised."""
        return self._wire

    @property
    def kind(self) -> ValueKind:
        return self._kind

    @property
    def is_null(self) -> bool:
        return self._kind is ValueKind.NULL

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    def as_int(self) -> int:
        """Return the value as an integer.

        Accepts integers, integral floats and numeric strings that spell an
        integral number.  Booleans and null are rejected.
        """
        wire = self._wire
        if self._kind is ValueKind.INT:
            return int(wire)
        if self._kind is ValueKind.FLOAT and wire.is_integer():
            return int(wire)
        if self._kind is ValueKind.STR:
            number = parse_numeric(wire)
            if isinstance(number, int):
                return number
            if isinstance(number, float) and number.is_integer():
                return int(number)
        raise FlaTypeCoercionError("int", wire)

    def as_float(self) -> float:
        """Return the value as a float (numbers and numeric strings)."""
        wire = self._wire
        if self._kind in (ValueKind.INT, ValueKind.FLOAT):
            return float(wire)
        if self._kind is ValueKind.STR:
            number = parse_numeric(wire)
            if number is not None:
                return float(number)
        raise FlaTypeCoercionError("float", wire)

    def as_str(self) -> str:
        """Return the value as a string.

        Numbers are rendered in their wire form; booleans and null are rejected.
        """
        wire = self._wire
        if self._kind is ValueKind.STR:
            return str(wire)
        if self._kind in (ValueKind.INT, ValueKind.FLOAT):
            return str(wire)
        raise FlaTypeCoercionError("str", wire)

    def as_bool(self) -> bool:
        """Return the value as a boolean (``true``/``false`` strings accepted)."""
        wire = self._wire
        if self._kind is ValueKind.BOOL:
            return bool(wire)
        if self._kind is ValueKind.STR and wire.strip().lower() in ("true", "false"):
            return wire.strip().lower() == "true"
        raise FlaTypeCoercionError("bool", wire)

    def as_type(self, target: type) -> Any:
        """Dispatch to the accessor for *target* (``int``, ``float``, ``str`` or ``bool``)."""
        if target is bool:
            return self.as_bool()
        if target is int:
            return self.as_int()
        if target is float:
            return self.as_float()
        if target is str:
            return self.as_str()
        raise FlaTypeCoercionError(getattr(target, "__name__", str(target)), self._wire)

    def optional(self, target: type) -> Any:
        """Like :meth:`as_type` but returns ``None`` for a null value."""
        if self.is_null:
            return None
        return self.as_type(target)

    def retype(self, target: type) -> NormalizedValue:
        """Return a copy whose wire representation is converted to *target*."""
        if self.is_null:
            return self
        return NormalizedValue(self.as_type(target))

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def _key(self) -> tuple[str, Any]:
        kind = self._kind
        wire = self._wire
        if kind is ValueKind.NULL:
            return ("null", None)
        if kind is ValueKind.BOOL:
            return ("bool", wire)
        if kind in (ValueKind.INT, ValueKind.FLOAT):
            return ("num", wire)
        if kind is ValueKind.STR:
            number = parse_numeric(wire)
            if number is not None:
                return ("num", number)
            return ("str", wire)
        return ("other", repr(wire))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NormalizedValue):
            if other is None or isinstance(other, (bool, int, float, str)):
                other = NormalizedValue(other)
            else:
                return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"NormalizedValue({self._wire!r})"

    def __reduce__(self) -> tuple[Any, ...]:
        return (NormalizedValue, (self._wire,))

    # ------------------------------------------------------------------
    # Pydantic integration
    # ------------------------------------------------------------------

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls,
            serialization=core_schema.plain_serializer_function_ser_schema(lambda value: value.wire),
        )
