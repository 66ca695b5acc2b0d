"""Base model for owner API payloads.

Every section model inherits from :class:`FlaBaseModel`, which provides:

* ``extra="allow"`` so fields the backend adds later survive a
  parse/serialise round trip untouched.
* ``validate_assignment=True`` so the simulator can update a section in
  place and tolerant fields are wrapped in :class:`NormalizedValue`.
* :meth:`FlaBaseModel.parse`, which turns a pydantic ``ValidationError``
  into a :class:`FlaSchemaMismatchError` naming the offending section and
  field.

Two field categories exist.  *Strongly typed* fields use the ``Wire*``
aliases below and must hold an interpretable value; *tolerant* fields are
declared as :class:`NormalizedValue` with :func:`tolerant` and accept any
representation.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, ClassVar, Self, get_args, get_origin

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from pyfla.exceptions import FlaSchemaMismatchError
from pyfla.models.values import NormalizedValue, kind_of

# Sentinel strings the owner API uses for "not available" on numeric fields.
_SENTINELS = frozenset({"", "--"})


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() in _SENTINELS:
        return None
    return value


WireInt = Annotated[int | None, BeforeValidator(_blank_to_none)]
"""Strongly typed integer; accepts numeric strings, blank sentinels become ``None``."""
WireFloat = Annotated[float | None, BeforeValidator(_blank_to_none)]
"""Strongly typed float; accepts numeric strings, blank sentinels become ``None``."""
WireStr = str | None
WireBool = bool | None


def tolerant() -> Any:
    """Field default for a tolerant (``NormalizedValue``) field."""
    return Field(default_factory=NormalizedValue.null)


class StateSection(enum.StrEnum):
    """Named sections of the ``vehicle_data`` payload, in resolution order."""

    CHARGE = "charge_state"
    CLIMATE = "climate_state"
    DRIVE = "drive_state"
    GUI = "gui_settings"
    CONFIG = "vehicle_config"
    VEHICLE = "vehicle_state"


def _annotation_kind(annotation: Any) -> str:
    if annotation is NormalizedValue:
        return "tolerant"
    args = [arg for arg in get_args(annotation) if arg is not type(None)]
    base = args[0] if args and get_origin(annotation) is not list else annotation
    origin = get_origin(base)
    if origin is list:
        return "array"
    if origin is dict:
        return "object"
    if isinstance(base, type):
        if issubclass(base, BaseModel):
            return "object"
        for candidate, name in ((bool, "bool"), (int, "int"), (float, "float"), (str, "str")):
            if issubclass(base, candidate):
                return name
    return str(base)


class FlaBaseModel(BaseModel):
    """Base for owner API payload models."""

    _SECTION: ClassVar[str] = "vehicle"
    """Section name reported in schema mismatch errors."""

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        validate_assignment=True,
        coerce_numbers_to_str=True,
    )

    # ------------------------------------------------------------------
    # Field classification
    # ------------------------------------------------------------------

    @classmethod
    def field_kind(cls, name: str) -> str:
        """Return the declared kind of field *name* (``"tolerant"`` for drift-prone fields)."""
        info = cls.model_fields.get(name)
        if info is None:
            return "unknown"
        return _annotation_kind(info.annotation)

    @classmethod
    def tolerant_fields(cls) -> frozenset[str]:
        return frozenset(name for name, info in cls.model_fields.items() if info.annotation is NormalizedValue)

    @classmethod
    def strong_fields(cls) -> frozenset[str]:
        return frozenset(cls.model_fields) - cls.tolerant_fields()

    # ------------------------------------------------------------------
    # Parsing / serialisation
    # ------------------------------------------------------------------

    @classmethod
    def parse(cls, raw: Any) -> Self:
        """Validate a raw wire payload.

        Raises :class:`FlaSchemaMismatchError` when a strongly typed field
        holds a value that cannot be interpreted.  Tolerant fields never fail.
        """
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            raise cls._schema_mismatch(exc, raw) from exc

    @classmethod
    def _schema_mismatch(cls, exc: ValidationError, raw: Any) -> FlaSchemaMismatchError:
        errors = exc.errors()
        if not errors or not errors[0]["loc"]:
            return FlaSchemaMismatchError(
                section=cls._SECTION,
                field="",
                expected_kind="object",
                actual_kind=kind_of(raw),
            )
        error = errors[0]
        loc = error["loc"]
        model: type[FlaBaseModel] = cls
        # Descend into nested section models so the innermost owner is reported.
        while len(loc) > 1:
            info = model.model_fields.get(str(loc[0]))
            annotation = info.annotation if info is not None else None
            if not (isinstance(annotation, type) and issubclass(annotation, FlaBaseModel)):
                break
            model = annotation
            loc = loc[1:]
        field = str(loc[0])
        actual = "missing" if error["type"] == "missing" else kind_of(error.get("input"))
        return FlaSchemaMismatchError(
            section=model._SECTION,
            field=field,
            expected_kind=model.field_kind(field),
            actual_kind=actual,
        )

    def to_wire(self) -> dict[str, Any]:
        """Serialise back to the wire shape, preserving tolerant wire types."""
        return self.model_dump(mode="json")

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def raw_value(self, name: str) -> Any:
        """Return the stored value of *name* (declared or extra field)."""
        if name in type(self).model_fields:
            return getattr(self, name)
        extra = self.__pydantic_extra__ or {}
        if name in extra:
            return extra[name]
        raise KeyError(name)

    def field_value(self, name: str) -> NormalizedValue:
        """Return field *name* wrapped as a :class:`NormalizedValue`."""
        return NormalizedValue(self.raw_value(name))

    def get_as(self, name: str, target: type) -> Any:
        """Typed accessor: read field *name* as *target* or raise ``FlaTypeCoercionError``."""
        value = self.raw_value(name)
        if not isinstance(value, NormalizedValue):
            if type(value) is target:
                return value
            value = NormalizedValue(value)
        return value.as_type(target)
