"""
Entity identifiers.

Entity ids are stored in fully qualified form ``type.id``. Both halves are
plain identifiers; the entity type is open-ended.
"""

import re

UNKNOWN_TYPE = "unknown"

_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_IDENT = re.compile(r"[^0-9a-zA-Z]+")


def to_snake_case(text: str) -> str:
    """
    Normalise a display name into an identifier.

    >>> to_snake_case("John Doe")
    'john_doe'
    >>> to_snake_case("AcmeCorp")
    'acme_corp'
    """
    text = _WORD_BOUNDARY.sub(r"\1_\2", text.strip())
    text = _NON_IDENT.sub("_", text)
    return text.strip("_").lower()


def compose_entity_id(entity_type: str, entity_id: str) -> str:
    """Join an entity type and a local id into ``type.id``."""
    return f"{entity_type}.{entity_id}"


def decompose_entity_id(value: str) -> tuple[str, str]:
    """
    Split a fully qualified id into ``(type, id)``.

    Ids without a type prefix are reported under the ``unknown`` type.
    """
    entity_type, sep, local_id = value.partition(".")
    if not sep:
        return UNKNOWN_TYPE, value
    return entity_type, local_id


def is_identifier(text: str) -> bool:
    return bool(text) and re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", text) is not None
