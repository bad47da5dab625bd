"""Tests for the entity model and id helpers."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from firm.core.entity import Entity
from firm.core.ids import compose_entity_id, decompose_entity_id, to_snake_case
from firm.core.values import IntegerValue, StringValue


class TestEntity:
    def test_new(self):
        entity = Entity.new("person", "john_doe")
        assert entity.id == "person.john_doe"
        assert entity.type == "person"
        assert entity.local_id == "john_doe"
        assert entity.fields == {}

    def test_with_field_returns_new_entity(self, john):
        updated = john.with_field("age", 42)
        assert "age" in updated
        assert "age" not in john
        assert updated.get_field("age") == IntegerValue(value=42)

    def test_with_field_keeps_position(self):
        entity = Entity.new("t", "x").with_field("a", 1).with_field("b", 2).with_field("a", 3)
        assert list(entity.fields) == ["a", "b"]
        assert entity.fields["a"] == IntegerValue(value=3)

    def test_without_field(self, john):
        assert john.without_field("name").fields == {}

    def test_is_frozen(self, john):
        with pytest.raises(PydanticValidationError):
            john.type = "organization"

    def test_fields_are_read_only(self, john):
        with pytest.raises(TypeError):
            john.fields["name"] = StringValue(value="Jane")
        with pytest.raises(TypeError):
            Entity.new("person", "blank").fields["name"] = StringValue(value="Jane")
        assert john.fields["name"] == StringValue(value="John Doe")

    def test_fields_do_not_alias_the_input(self):
        source = {"name": StringValue(value="John Doe")}
        entity = Entity(id="person.john_doe", type="person", fields=source)
        source["age"] = IntegerValue(value=42)
        assert "age" not in entity

    def test_dump_gives_plain_dict(self, john):
        assert john.model_dump()["fields"] == {"name": {"kind": "string", "value": "John Doe"}}

    def test_id_must_match_type(self):
        with pytest.raises(PydanticValidationError):
            Entity(id="organization.acme", type="person")

    @pytest.mark.parametrize("field_name", ["has space", "1st", ""])
    def test_field_names_are_identifiers(self, john, field_name):
        with pytest.raises(PydanticValidationError):
            john.with_field(field_name, "x")

    def test_types_are_open_ended(self):
        assert Entity.new("spaceship", "enterprise").type == "spaceship"

    def test_case_is_kept(self):
        assert Entity.new("Person", "JohnDoe").id == "Person.JohnDoe"

    def test_equality_and_hash(self, john):
        same = Entity(id="person.john_doe", type="person", fields={"name": StringValue(value="John Doe")})
        assert same == john
        assert hash(same) == hash(john)
        assert john != john.with_field("age", 1)


class TestIds:
    def test_compose_and_decompose(self):
        assert compose_entity_id("task", "t1") == "task.t1"
        assert decompose_entity_id("task.t1") == ("task", "t1")

    def test_decompose_without_type(self):
        assert decompose_entity_id("orphan") == ("unknown", "orphan")

    @pytest.mark.parametrize(
        "text,expected",
        [("John Doe", "john_doe"), ("AcmeCorp", "acme_corp"), ("  Q1 -- Goals! ", "q1_goals")],
    )
    def test_to_snake_case(self, text, expected):
        assert to_snake_case(text) == expected
