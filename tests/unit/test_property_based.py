"""
Property-based tests using Hypothesis.

Generation and parsing are inverses: any entity the grammar can represent
renders to source that parses back to an equal entity.
"""

import datetime as dt

from hypothesis import given, settings
from hypothesis import strategies as st

from firm.core.entity import Entity
from firm.core.errors import FirmError
from firm.core.values import (
    BooleanValue,
    CurrencyValue,
    DateTimeValue,
    FloatValue,
    IntegerValue,
    ListValue,
    PathValue,
    ReferenceValue,
    StringValue,
)
from firm.lang import FieldOrder, GeneratorOptions, IndentStyle, generate, parse

# =============================================================================
# Strategies
# =============================================================================

identifiers = st.from_regex(r"[a-z_][a-z0-9_]{0,11}", fullmatch=True)
entity_types = identifiers.filter(lambda s: s != "schema")

text = st.text(
    alphabet=st.sampled_from("abcXYZ 019_-.,:;!?'\"\\\t\n{}[]=/"),
    max_size=40,
)

offsets = st.integers(min_value=-(23 * 60 + 59), max_value=23 * 60 + 59).map(
    lambda minutes: dt.timedelta(minutes=minutes)
)

scalars = st.one_of(
    st.builds(StringValue, value=text),
    st.builds(IntegerValue, value=st.integers(min_value=-(2**63), max_value=2**63 - 1)),
    st.builds(FloatValue, value=st.floats(allow_nan=False, allow_infinity=False)),
    st.builds(BooleanValue, value=st.booleans()),
    st.builds(
        CurrencyValue,
        amount=st.decimals(allow_nan=False, allow_infinity=False, places=2, max_value=10**12, min_value=-(10**12)),
        code=st.from_regex(r"[A-Z]{3,4}", fullmatch=True),
    ),
    st.builds(
        DateTimeValue,
        date=st.dates(min_value=dt.date(1, 1, 1), max_value=dt.date(9999, 12, 31)),
        time=st.times().map(lambda t: t.replace(microsecond=0)),
        offset=st.none() | offsets,
    ),
    st.builds(
        ReferenceValue,
        entity_id=st.builds(lambda t, i: f"{t}.{i}", identifiers, identifiers),
        field_id=st.none() | identifiers,
    ),
    st.builds(PathValue, path=text),
)

values = st.recursive(
    scalars,
    lambda children: st.builds(ListValue, items=st.lists(children, max_size=4).map(tuple)),
    max_leaves=8,
)

entities = st.builds(
    lambda entity_type, local_id, fields: Entity(
        id=f"{entity_type}.{local_id}", type=entity_type, fields=fields
    ),
    entity_types,
    identifiers,
    st.dictionaries(identifiers, values, max_size=6),
)

options = st.builds(
    GeneratorOptions,
    indent=st.sampled_from([IndentStyle.spaces(), IndentStyle.spaces(2), IndentStyle.tabs()]),
    field_order=st.sampled_from(list(FieldOrder)),
)


# =============================================================================
# Properties
# =============================================================================


class TestRoundTrip:
    @given(entities, options)
    @settings(max_examples=300)
    def test_generate_then_parse(self, entity: Entity, opts: GeneratorOptions) -> None:
        """Invariant: parse(generate(e)) yields exactly [e] with no errors."""
        result = parse(generate(entity, opts))
        assert result.errors == []
        assert result.entities == [entity]

    @given(entities)
    @settings(max_examples=100)
    def test_insertion_order_survives(self, entity: Entity) -> None:
        """Invariant: field order is kept through a round trip."""
        parsed = parse(generate(entity)).entities[0]
        assert list(parsed.fields) == list(entity.fields)

    @given(st.lists(entities, max_size=5, unique_by=lambda e: e.id))
    @settings(max_examples=50)
    def test_many_blocks(self, batch: list[Entity]) -> None:
        """Invariant: concatenated blocks parse back in order."""
        source = "\n".join(generate(entity) for entity in batch)
        assert parse(source).entities == batch


class TestParserRobustness:
    @given(st.text(max_size=300))
    @settings(max_examples=300)
    def test_parse_never_crashes(self, source: str) -> None:
        """Invariant: arbitrary input yields errors, never an unexpected exception."""
        result = parse(source)
        for error in result.errors:
            assert isinstance(error, FirmError)
