"""
Literal classification.

Maps literal syntax nodes to field values. Classification depends only on
the literal's syntax, never on a schema: ``42`` is always an integer and
``"42"`` always a string.

Literals that have the right shape for a token but cannot denote a value
(``10.00 usd``, ``2024-02-30``, ``a.b.c.d``) raise ``LiteralTypeError``.
"""

from __future__ import annotations

import datetime as dt
import re
import textwrap
from decimal import Decimal
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from firm.core.errors import make_literal_error
from firm.core.ids import compose_entity_id
from firm.core.values import (
    INT64_MAX,
    INT64_MIN,
    BooleanValue,
    CurrencyValue,
    DateTimeValue,
    FieldValue,
    FloatValue,
    IntegerValue,
    ListValue,
    PathValue,
    ReferenceValue,
    StringValue,
)

from .syntax import ListLiteral, LiteralKind, LiteralNode, ReferenceLiteral, ScalarLiteral

INTEGER_PATTERN = re.compile(r"-?[0-9]+")
FLOAT_PATTERN = re.compile(r"-?[0-9]+\.[0-9]+")
CURRENCY_CODE_PATTERN = re.compile(r"[A-Z]{3,4}")

DATETIME_PATTERN = re.compile(
    r"(?P<date>[0-9]{4}-[0-9]{2}-[0-9]{2})"
    r"(?:[ \t]+at[ \t]+(?P<hour>[0-9]{1,2}):(?P<minute>[0-9]{2})(?::(?P<second>[0-9]{2}))?)?"
    r"(?:[ \t]+(?P<tz>UTC(?:[+-][0-9]{1,2}(?::[0-9]{2})?)?|[+-][0-9]{2}:[0-9]{2}))?"
)
OFFSET_PATTERN = re.compile(r"(?:UTC)?(?:(?P<sign>[+-])(?P<hours>[0-9]{1,2})(?::(?P<minutes>[0-9]{2}))?)?")

REFERENCE_PARTS = (2, 3)


def parse_integer(text: str) -> int:
    value = int(text)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValueError(f"Integer {text} is outside the 64-bit range")
    return value


def parse_offset(text: str) -> dt.timedelta:
    """Parse ``UTC``, ``UTC+2``, ``UTC-5:30`` or ``+02:00`` into an offset."""
    match = OFFSET_PATTERN.fullmatch(text)
    if not match:
        raise ValueError(f"Invalid timezone '{text}'")
    if not match.group("sign"):
        return dt.timedelta(0)
    hours = int(match.group("hours"))
    minutes = int(match.group("minutes") or 0)
    if hours > 23 or minutes > 59:
        raise ValueError(f"Timezone offset '{text}' is out of range")
    offset = dt.timedelta(hours=hours, minutes=minutes)
    return -offset if match.group("sign") == "-" else offset


def parse_datetime(text: str) -> DateTimeValue:
    """
    Parse ``YYYY-MM-DD[ at HH:MM[:SS]][ TZ]``.

    A missing time means midnight; a missing zone leaves the offset unset.
    """
    match = DATETIME_PATTERN.fullmatch(text)
    if not match:
        raise ValueError(f"Invalid date '{text}'; expected YYYY-MM-DD[ at HH:MM][ UTC+H]")
    date = dt.date.fromisoformat(match.group("date"))
    time = dt.time(0, 0)
    if match.group("hour") is not None:
        time = dt.time(
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second") or 0),
        )
    offset = parse_offset(match.group("tz")) if match.group("tz") else None
    return DateTimeValue(date=date, time=time, offset=offset)


def parse_currency(text: str) -> CurrencyValue:
    amount_text, _, code = text.partition(" ")
    if not (INTEGER_PATTERN.fullmatch(amount_text) or FLOAT_PATTERN.fullmatch(amount_text)):
        raise ValueError(f"Invalid currency amount '{amount_text}'")
    if not CURRENCY_CODE_PATTERN.fullmatch(code):
        raise ValueError(f"Invalid currency code '{code}'; expected 3-4 uppercase letters")
    return CurrencyValue(amount=Decimal(amount_text), code=code)


def dedent_multiline(raw: str) -> str:
    """Remove common indentation from a triple-quoted string, then strip it."""
    return textwrap.dedent(raw).strip()


def _classify_scalar(node: ScalarLiteral) -> FieldValue:
    kind = node.kind
    text = node.text
    if kind == LiteralKind.STRING:
        return StringValue(value=text)
    if kind == LiteralKind.MULTILINE_STRING:
        return StringValue(value=dedent_multiline(text))
    if kind == LiteralKind.BOOLEAN:
        return BooleanValue(value=text == "true")
    if kind == LiteralKind.PATH:
        return PathValue(path=text)
    if kind == LiteralKind.NUMBER:
        if INTEGER_PATTERN.fullmatch(text):
            return IntegerValue(value=parse_integer(text))
        if FLOAT_PATTERN.fullmatch(text):
            return FloatValue(value=float(text))
        raise ValueError(f"Invalid number '{text}'")
    if kind == LiteralKind.CURRENCY:
        return parse_currency(text)
    if kind == LiteralKind.DATETIME:
        return parse_datetime(text)
    raise ValueError(f"Unsupported literal kind {kind}")


def _classify_reference(node: ReferenceLiteral) -> ReferenceValue:
    if len(node.parts) not in REFERENCE_PARTS:
        raise ValueError(
            f"Reference '{node.text}' must have the form type.id or type.id.field"
        )
    entity_id = compose_entity_id(node.parts[0], node.parts[1])
    field_id = node.parts[2] if len(node.parts) == 3 else None
    return ReferenceValue(entity_id=entity_id, field_id=field_id)


def classify(node: LiteralNode, file: Path | None = None) -> FieldValue:
    """
    Classify a literal node into a field value.

    Raises:
        LiteralTypeError: If the literal does not denote a valid value
    """
    if isinstance(node, ListLiteral):
        return ListValue(items=tuple(classify(item, file) for item in node.items))
    try:
        if isinstance(node, ReferenceLiteral):
            return _classify_reference(node)
        return _classify_scalar(node)
    except PydanticValidationError as e:
        message = e.errors()[0]["msg"]
        raise make_literal_error(message, file, node.line, node.column) from e
    except ValueError as e:
        raise make_literal_error(str(e), file, node.line, node.column) from e


__all__ = ["classify", "parse_datetime", "parse_currency", "parse_offset", "dedent_multiline"]
