"""
Typed field values.

Every value stored on an entity is one of a closed set of variants. Each
variant is a frozen pydantic model carrying a ``kind`` discriminator, so
equality is structural and values can be used as dict keys or set members.

Usage:
    name = StringValue(value="Acme Corp")
    deal = CurrencyValue(amount=Decimal("5000.00"), code="USD")
    owner = ReferenceValue(entity_id="person.john_doe")
    due = DateTimeValue(date=date(2024, 3, 1), offset=timedelta(0))

    # Convenience conversion from plain Python values
    coerce_value(["a", 1])  # ListValue(items=(StringValue("a"), IntegerValue(1)))
"""

from __future__ import annotations

import datetime as dt
import re
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ids import decompose_entity_id, is_identifier

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

CURRENCY_CODE_PATTERN = re.compile(r"[A-Z]{3,4}")

MIDNIGHT = dt.time(0, 0)
MAX_OFFSET = dt.timedelta(hours=24)


class FieldType(str, Enum):
    """Type tags shared by field values and schema declarations."""

    BOOLEAN = "boolean"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    CURRENCY = "currency"
    REFERENCE = "reference"
    LIST = "list"
    DATETIME = "datetime"
    PATH = "path"

    def __str__(self) -> str:
        return self.value


class _Value(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    @property
    def field_type(self) -> FieldType:
        return FieldType(self.kind)  # type: ignore[attr-defined]


class StringValue(_Value):
    kind: Literal["string"] = "string"
    value: str

    def __str__(self) -> str:
        return self.value


class IntegerValue(_Value):
    kind: Literal["integer"] = "integer"
    value: int = Field(ge=INT64_MIN, le=INT64_MAX)

    def __str__(self) -> str:
        return str(self.value)


class FloatValue(_Value):
    kind: Literal["float"] = "float"
    value: float = Field(allow_inf_nan=False)

    def __str__(self) -> str:
        return str(self.value)


class BooleanValue(_Value):
    kind: Literal["boolean"] = "boolean"
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


class CurrencyValue(_Value):
    """
    A monetary amount with its currency code.

    The amount is kept as a Decimal with the precision it was written in.
    Values with different codes are never equal.
    """

    kind: Literal["currency"] = "currency"
    amount: Decimal
    code: str

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("Currency amount must be finite")
        return v

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        if not CURRENCY_CODE_PATTERN.fullmatch(v):
            raise ValueError(f"Currency code '{v}' must be 3-4 uppercase letters")
        return v

    def __str__(self) -> str:
        return f"{self.amount} {self.code}"


class DateTimeValue(_Value):
    """
    A calendar date with a time of day and an optional UTC offset.

    A missing offset means the zone is unspecified, not UTC. Comparison is
    component-wise: ``10:00 UTC+1`` and ``09:00 UTC`` are different values.
    """

    kind: Literal["datetime"] = "datetime"
    date: dt.date
    time: dt.time = MIDNIGHT
    offset: dt.timedelta | None = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: dt.date) -> dt.date:
        # datetime is a subclass of date
        if isinstance(v, dt.datetime):
            raise ValueError("Pass a date; use time and offset for the rest")
        return v

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: dt.time) -> dt.time:
        if v.tzinfo is not None:
            raise ValueError("Time of day must be naive; use offset for the zone")
        if v.microsecond:
            raise ValueError("Time of day has at most second precision")
        return v

    @field_validator("offset")
    @classmethod
    def validate_offset(cls, v: dt.timedelta | None) -> dt.timedelta | None:
        if v is None:
            return v
        if abs(v) >= MAX_OFFSET:
            raise ValueError("UTC offset must be less than 24 hours")
        if v.total_seconds() % 60:
            raise ValueError("UTC offset must be a whole number of minutes")
        return v

    @classmethod
    def from_datetime(cls, value: dt.datetime) -> DateTimeValue:
        offset = value.utcoffset()
        return cls(
            date=value.date(),
            time=value.time().replace(microsecond=0, tzinfo=None),
            offset=offset,
        )

    def as_datetime(self) -> dt.datetime:
        """Combine into a ``datetime``; aware only when an offset is known."""
        tz = dt.timezone(self.offset) if self.offset is not None else None
        return dt.datetime.combine(self.date, self.time, tzinfo=tz)

    def __str__(self) -> str:
        return format_datetime(self)


class ListValue(_Value):
    """An ordered list of values. Items may be of mixed kinds."""

    kind: Literal["list"] = "list"
    items: tuple[FieldValue, ...] = ()

    @field_validator("items", mode="before")
    @classmethod
    def coerce_items(cls, v: Any) -> Any:
        if isinstance(v, list):
            return tuple(v)
        return v

    def __str__(self) -> str:
        return ", ".join(str(item) for item in self.items)


class ReferenceValue(_Value):
    """
    A pointer to another entity, or to one field of another entity.

    ``entity_id`` is the fully qualified ``type.id``; ``field_id`` is set
    for field references written as ``type.id.field``.
    """

    kind: Literal["reference"] = "reference"
    entity_id: str
    field_id: str | None = None

    @field_validator("entity_id")
    @classmethod
    def validate_entity_id(cls, v: str) -> str:
        entity_type, local_id = decompose_entity_id(v)
        if "." not in v or not (is_identifier(entity_type) and is_identifier(local_id)):
            raise ValueError(f"Reference target '{v}' must have the form type.id")
        return v

    @field_validator("field_id")
    @classmethod
    def validate_field_id(cls, v: str | None) -> str | None:
        if v is not None and not is_identifier(v):
            raise ValueError(f"Referenced field '{v}' is not an identifier")
        return v

    @property
    def is_field_reference(self) -> bool:
        return self.field_id is not None

    def __str__(self) -> str:
        if self.field_id:
            return f"{self.entity_id}.{self.field_id}"
        return self.entity_id


class PathValue(_Value):
    """A relative file path. Stored as written; never resolved or read."""

    kind: Literal["path"] = "path"
    path: str

    def __str__(self) -> str:
        return self.path


FieldValue = Annotated[
    Union[
        StringValue,
        IntegerValue,
        FloatValue,
        BooleanValue,
        CurrencyValue,
        DateTimeValue,
        ListValue,
        ReferenceValue,
        PathValue,
    ],
    Field(discriminator="kind"),
]

VALUE_TYPES: tuple[type[_Value], ...] = (
    StringValue,
    IntegerValue,
    FloatValue,
    BooleanValue,
    CurrencyValue,
    DateTimeValue,
    ListValue,
    ReferenceValue,
    PathValue,
)

ListValue.model_rebuild()


def is_field_value(obj: object) -> bool:
    return isinstance(obj, VALUE_TYPES)


def format_offset(offset: dt.timedelta) -> str:
    """Render an offset as ``UTC``, ``UTC+2`` or ``UTC-5:30``."""
    total_minutes = int(offset.total_seconds()) // 60
    if total_minutes == 0:
        return "UTC"
    sign = "+" if total_minutes > 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    if minutes:
        return f"UTC{sign}{hours}:{minutes:02d}"
    return f"UTC{sign}{hours}"


def format_datetime(value: DateTimeValue) -> str:
    """Render a datetime in DSL form: ``YYYY-MM-DD[ at HH:MM[:SS]][ TZ]``."""
    text = value.date.isoformat()
    if value.time != MIDNIGHT:
        if value.time.second:
            text += f" at {value.time:%H:%M:%S}"
        else:
            text += f" at {value.time:%H:%M}"
    if value.offset is not None:
        text += f" {format_offset(value.offset)}"
    return text


def coerce_value(obj: Any) -> FieldValue:
    """
    Convert a plain Python value into a field value.

    Field values pass through unchanged. ``bool`` is checked before ``int``
    because it is an ``int`` subclass.

    Raises:
        TypeError: if the object has no field value equivalent
    """
    if is_field_value(obj):
        return obj
    if isinstance(obj, bool):
        return BooleanValue(value=obj)
    if isinstance(obj, int):
        return IntegerValue(value=obj)
    if isinstance(obj, float):
        return FloatValue(value=obj)
    if isinstance(obj, str):
        return StringValue(value=obj)
    if isinstance(obj, dt.datetime):
        return DateTimeValue.from_datetime(obj)
    if isinstance(obj, dt.date):
        return DateTimeValue(date=obj)
    if isinstance(obj, (list, tuple)):
        return ListValue(items=tuple(coerce_value(item) for item in obj))
    raise TypeError(f"Cannot convert {type(obj).__name__} to a field value")
