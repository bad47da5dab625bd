"""Tests for the entity graph: lifecycle, edges, queries and reference resolution."""

import pytest

from firm.core.entity import Entity
from firm.core.errors import (
    CyclicReferenceError,
    DanglingFieldError,
    DanglingReferenceError,
    DuplicateIdError,
    InvalidStateError,
    MaxDepthExceededError,
    MissingRequiredFieldError,
    NotAReferenceError,
    NotFoundError,
)
from firm.core.graph import Direction, EntityGraph, FieldReferencePolicy, GraphState
from firm.core.schema import SchemaRegistry
from firm.core.values import IntegerValue, ReferenceValue, StringValue


def ref(entity_id: str, field_id: str | None = None) -> ReferenceValue:
    return ReferenceValue(entity_id=entity_id, field_id=field_id)


@pytest.fixture
def contact(john, acme) -> Entity:
    return (
        Entity.new("contact", "john_at_acme")
        .with_field("person_ref", ref(john.id))
        .with_field("organization_ref", ref(acme.id))
    )


# =============================================================================
# Lifecycle
# =============================================================================


class TestLifecycle:
    def test_states(self, john):
        graph = EntityGraph()
        assert graph.state == GraphState.EMPTY
        graph.add_entity(john)
        assert graph.state == GraphState.POPULATED
        graph.build()
        assert graph.state == GraphState.BUILT

    def test_query_before_build(self, john):
        graph = EntityGraph()
        graph.add_entity(john)
        with pytest.raises(InvalidStateError):
            graph.get_entity(john.id)
        with pytest.raises(InvalidStateError):
            graph.list_by_type("person")

    def test_built_entities_cannot_be_mutated(self, make_graph, john, contact):
        graph = make_graph(john, contact)
        fields = graph.get_entity(contact.id).fields
        with pytest.raises(TypeError):
            fields["person_ref"] = StringValue(value="gone")
        with pytest.raises(TypeError):
            fields["new_ref"] = ref("person.nobody")
        assert fields["person_ref"] == ref(john.id)
        assert [(r.field, r.entity.id) for r in graph.related(john.id)] == [
            ("person_ref", contact.id)
        ]

    def test_add_after_build_leaves_graph_unchanged(self, make_graph, john, acme):
        graph = make_graph(john)
        with pytest.raises(InvalidStateError):
            graph.add_entity(acme)
        assert len(graph) == 1
        assert acme.id not in graph

    def test_build_twice(self, make_graph, john):
        graph = make_graph(john)
        with pytest.raises(InvalidStateError):
            graph.build()

    def test_empty_graph_builds(self):
        graph = EntityGraph()
        report = graph.build()
        assert report.ok
        assert graph.entity_types() == []

    def test_duplicate_id(self, john):
        graph = EntityGraph()
        graph.add_entity(john)
        with pytest.raises(DuplicateIdError) as exc:
            graph.add_entity(john.with_field("age", 3))
        assert exc.value.entity_id == john.id

    def test_duplicate_batch_is_atomic(self, john, acme):
        graph = EntityGraph()
        with pytest.raises(DuplicateIdError):
            graph.add_entities([acme, john, john])
        assert graph.state == GraphState.EMPTY
        graph.build()
        assert len(graph) == 0


# =============================================================================
# Edges and queries
# =============================================================================


class TestQueries:
    def test_get_entity(self, make_graph, john):
        assert make_graph(john).get_entity("person.john_doe") == john

    def test_get_missing(self, make_graph, john):
        with pytest.raises(NotFoundError, match="Entity 'person.nobody' not found"):
            make_graph(john).get_entity("person.nobody")

    def test_list_by_type_is_reiterable(self, make_graph, john, acme):
        jane = Entity.new("person", "jane")
        view = make_graph(john, acme, jane).list_by_type("person")
        assert [e.id for e in view] == ["person.john_doe", "person.jane"]
        assert [e.id for e in view] == ["person.john_doe", "person.jane"]
        assert len(view) == 2
        assert view[1] == jane
        assert view[:1] == [john]

    def test_list_unknown_type(self, make_graph, john):
        assert len(make_graph(john).list_by_type("spaceship")) == 0

    def test_entity_types(self, make_graph, john, acme):
        assert make_graph(john, acme).entity_types() == ["organization", "person"]

    def test_edges_are_bidirectional(self, make_graph, john, acme, contact):
        graph = make_graph(john, acme, contact)
        outgoing = graph.related(contact.id, Direction.OUTGOING)
        assert [(r.field, r.entity.id) for r in outgoing] == [
            ("person_ref", john.id),
            ("organization_ref", acme.id),
        ]
        incoming = graph.related(john.id, Direction.INCOMING)
        assert [(r.field, r.entity.id) for r in incoming] == [("person_ref", contact.id)]
        assert graph.related(john.id, Direction.OUTGOING) == []

    def test_related_lists_outgoing_then_incoming(self, make_graph, john, acme, contact):
        task = Entity.new("task", "call").with_field("assignee_ref", ref(contact.id))
        graph = make_graph(john, acme, contact, task)
        directions = [(r.direction, r.entity.id) for r in graph.related(contact.id)]
        assert directions == [
            (Direction.OUTGOING, john.id),
            (Direction.OUTGOING, acme.id),
            (Direction.INCOMING, task.id),
        ]

    def test_forward_reference_resolves(self, make_graph, john):
        early = Entity.new("task", "t").with_field("assignee_ref", ref(john.id))
        graph = make_graph(early, john)
        assert [e.target for e in graph.edges_from(early.id)] == [john.id]
        assert graph.errors == []

    def test_self_reference_and_cycle(self, make_graph):
        a = Entity.new("node", "a").with_field("self_ref", ref("node.a")).with_field("next", ref("node.b"))
        b = Entity.new("node", "b").with_field("next", ref("node.a"))
        graph = make_graph(a, b)
        assert len(graph.edges_from("node.a")) == 2
        assert [e.source for e in graph.edges_to("node.a")] == ["node.a", "node.b"]

    def test_references_inside_lists(self, make_graph, john, acme):
        meeting = Entity.new("interaction", "m").with_field(
            "attendees", [ref(john.id), "not a ref", [ref(acme.id)]]
        )
        graph = make_graph(john, acme, meeting)
        edges = graph.edges_from(meeting.id)
        assert [(e.target, e.index) for e in edges] == [(john.id, 0), (acme.id, 2)]

    def test_related_missing_entity(self, make_graph, john):
        with pytest.raises(NotFoundError):
            make_graph(john).related("person.ghost")


# =============================================================================
# Dangling references and validation
# =============================================================================


class TestBuildErrors:
    def test_dangling_reference(self, make_graph, john):
        task = Entity.new("task", "t").with_field("assignee_ref", ref("person.ghost"))
        graph = EntityGraph()
        graph.add_entities([john, task])
        report = graph.build()

        assert len(report.dangling) == 1
        error = report.dangling[0]
        assert (error.source_id, error.field, error.target) == (task.id, "assignee_ref", "person.ghost")
        assert graph.edges_from(task.id) == []
        assert graph.get_entity(task.id) == task
        assert graph.errors == report.errors

    def test_schema_validation_during_build(self, make_graph):
        graph = make_graph(Entity.new("person", "anon"), schemas=SchemaRegistry.with_builtins())
        assert len(graph.errors) == 1
        assert isinstance(graph.errors[0], MissingRequiredFieldError)
        assert graph.get_entity("person.anon").id == "person.anon"

    def test_no_schemas_no_validation(self, make_graph):
        assert make_graph(Entity.new("person", "anon")).errors == []


class TestFieldReferencePolicy:
    @pytest.fixture
    def entities(self, john):
        note = Entity.new("note", "n").with_field("about", ref(john.id, "phone"))
        return john, note

    def test_report_keeps_edge(self, make_graph, entities):
        graph = make_graph(*entities, field_references=FieldReferencePolicy.REPORT)
        assert [e.target_field for e in graph.edges_from("note.n")] == ["phone"]
        assert len(graph.errors) == 1
        error = graph.errors[0]
        assert isinstance(error, DanglingFieldError)
        assert (error.target, error.target_field) == ("person.john_doe", "phone")

    def test_strict_drops_edge(self, make_graph, entities):
        graph = make_graph(*entities, field_references=FieldReferencePolicy.STRICT)
        assert graph.edges_from("note.n") == []
        assert isinstance(graph.errors[0], DanglingFieldError)

    def test_entity_ignores_field(self, make_graph, entities):
        graph = make_graph(*entities, field_references="entity")
        assert len(graph.edges_from("note.n")) == 1
        assert graph.errors == []

    def test_existing_field_is_fine(self, make_graph, john):
        note = Entity.new("note", "n").with_field("about", ref(john.id, "name"))
        graph = make_graph(john, note, field_references=FieldReferencePolicy.STRICT)
        assert graph.errors == []
        assert len(graph.edges_from(note.id)) == 1


# =============================================================================
# Reference resolution
# =============================================================================


class TestResolve:
    def test_resolve_reference(self, make_graph, john):
        assert make_graph(john).resolve_reference(ref(john.id)) == john

    def test_resolve_not_a_reference(self, make_graph, john):
        with pytest.raises(NotAReferenceError):
            make_graph(john).resolve_reference(StringValue(value=john.id))

    def test_resolve_dangling(self, make_graph, john):
        with pytest.raises(DanglingReferenceError) as exc:
            make_graph(john).resolve_reference(ref("person.ghost"))
        assert exc.value.target == "person.ghost"

    def test_field_reference_chain(self, make_graph, john):
        a = Entity.new("cfg", "a").with_field("limit", 10)
        b = Entity.new("cfg", "b").with_field("limit", ref("cfg.a", "limit"))
        graph = make_graph(a, b)
        assert graph.resolve_field_reference(ref("cfg.b", "limit")) == IntegerValue(value=10)

    def test_field_reference_to_entity_reference_stops(self, make_graph, john, contact, acme):
        graph = make_graph(john, acme, contact)
        value = graph.resolve_field_reference(ref(contact.id, "person_ref"))
        assert value == ref(john.id)

    def test_cycle(self, make_graph):
        a = Entity.new("cfg", "a").with_field("x", ref("cfg.b", "x"))
        b = Entity.new("cfg", "b").with_field("x", ref("cfg.a", "x"))
        graph = make_graph(a, b)
        with pytest.raises(CyclicReferenceError) as exc:
            graph.resolve_field_reference(ref("cfg.a", "x"))
        assert exc.value.path == ["cfg.a.x", "cfg.b.x", "cfg.a.x"]

    def test_max_depth(self, make_graph):
        chain = [
            Entity.new("cfg", f"c{i}").with_field("x", ref(f"cfg.c{i + 1}", "x")) for i in range(5)
        ]
        chain.append(Entity.new("cfg", "c5").with_field("x", 1))
        graph = make_graph(*chain)
        assert graph.resolve_field_reference(ref("cfg.c0", "x")) == IntegerValue(value=1)
        with pytest.raises(MaxDepthExceededError):
            graph.resolve_field_reference(ref("cfg.c0", "x"), max_depth=3)

    def test_missing_field(self, make_graph, john):
        with pytest.raises(DanglingFieldError):
            make_graph(john).resolve_field_reference(ref(john.id, "phone"))

    def test_plain_reference_is_not_a_field_reference(self, make_graph, john):
        with pytest.raises(NotAReferenceError):
            make_graph(john).resolve_field_reference(ref(john.id))
