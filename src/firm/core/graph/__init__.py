"""
Entity graph: entities plus the edges their references resolve to.

The graph moves through three states:

    EMPTY --add_entities--> POPULATED --build--> BUILT

Entities can only be added before ``build``; queries are only answered
after it. References are resolved in ``build`` against the complete entity
set, so an entity may reference one added later, or one from another file.

Usage:
    graph = EntityGraph(SchemaRegistry.with_builtins())
    graph.add_entities(entities)
    report = graph.build()
    for relation in graph.related("person.john_doe"):
        print(relation.direction, relation.field, relation.entity.id)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from ..entity import Entity
from ..errors import (
    DanglingFieldError,
    DanglingReferenceError,
    DuplicateIdError,
    FirmError,
    InvalidStateError,
    ValidationError,
)
from ..schema import SchemaRegistry
from ..values import FieldValue, ListValue, ReferenceValue
from .query import Direction, GraphQueryMixin, GraphState, Relation, TypeView

logger = logging.getLogger(__name__)


class FieldReferencePolicy(str, Enum):
    """
    How ``build`` treats a field reference whose entity exists but whose
    field does not.

    - ENTITY: resolve to the entity; the field is not checked
    - REPORT: keep the edge and report a DanglingFieldError
    - STRICT: drop the edge and report a DanglingFieldError
    """

    ENTITY = "entity"
    REPORT = "report"
    STRICT = "strict"


@dataclass(frozen=True)
class Edge:
    """
    One resolved reference.

    Attributes:
        source: Id of the entity holding the reference
        field: Field on the source holding the reference
        target: Id of the referenced entity
        target_field: Referenced field, for field references
        index: Position within the field's list, for references inside lists
    """

    source: str
    field: str
    target: str
    target_field: str | None = None
    index: int | None = None


@dataclass
class BuildReport:
    """Outcome of ``EntityGraph.build``: edge count and every accumulated error."""

    edges: int = 0
    errors: list[FirmError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def dangling(self) -> list[DanglingReferenceError]:
        return [e for e in self.errors if isinstance(e, DanglingReferenceError)]

    @property
    def validation_errors(self) -> list[ValidationError]:
        return [e for e in self.errors if isinstance(e, ValidationError)]


def iter_references(value: FieldValue) -> Iterator[tuple[int | None, ReferenceValue]]:
    """
    Yield every reference in a field value with its list position.

    References nested in lists of lists report the position in the outer list.
    """
    if isinstance(value, ReferenceValue):
        yield None, value
    elif isinstance(value, ListValue):
        for index, item in enumerate(value.items):
            for _, ref in iter_references(item):
                yield index, ref


class EntityGraph(GraphQueryMixin):
    """
    Owns entities by id and the forward/backward edge indices between them.

    Edges are plain data keyed by entity id, so cycles and self-references
    need no special handling.
    """

    def __init__(
        self,
        schemas: SchemaRegistry | None = None,
        field_references: FieldReferencePolicy = FieldReferencePolicy.REPORT,
    ):
        self.schemas = schemas if schemas is not None else SchemaRegistry()
        self.field_references = FieldReferencePolicy(field_references)
        self.errors: list[FirmError] = []
        self._state = GraphState.EMPTY
        self._entities: dict[str, Entity] = {}
        self._outgoing: dict[str, list[Edge]] = {}
        self._incoming: dict[str, list[Edge]] = {}
        self._by_type: dict[str, list[str]] = {}

    @property
    def state(self) -> GraphState:
        return self._state

    def add_entity(self, entity: Entity) -> None:
        self.add_entities([entity])

    def add_entities(self, entities: Iterable[Entity]) -> None:
        """
        Add entities before the graph is built.

        The batch is all-or-nothing: if any id is already present, or
        repeated within the batch, nothing is added.

        Raises:
            InvalidStateError: If the graph is already built
            DuplicateIdError: On the first conflicting id
        """
        if self._state == GraphState.BUILT:
            raise InvalidStateError("Cannot add entities to a built graph; create a new graph")

        batch = list(entities)
        seen: set[str] = set()
        for entity in batch:
            if entity.id in self._entities or entity.id in seen:
                raise DuplicateIdError(entity.id)
            seen.add(entity.id)

        for entity in batch:
            self._entities[entity.id] = entity
        if self._entities:
            self._state = GraphState.POPULATED
        logger.debug("Added %d entities (%d total)", len(batch), len(self._entities))

    def build(self) -> BuildReport:
        """
        Resolve references into edges and validate entities against schemas.

        Dangling references and schema violations are collected into the
        report (and ``self.errors``); they never stop the build. An empty
        graph builds into an empty queryable graph.

        Raises:
            InvalidStateError: If the graph is already built
        """
        if self._state == GraphState.BUILT:
            raise InvalidStateError("Graph is already built; create a new graph to rebuild")

        outgoing: dict[str, list[Edge]] = {entity_id: [] for entity_id in self._entities}
        incoming: dict[str, list[Edge]] = {entity_id: [] for entity_id in self._entities}
        by_type: dict[str, list[str]] = {}
        errors: list[FirmError] = []
        edge_count = 0

        for entity in self._entities.values():
            by_type.setdefault(entity.type, []).append(entity.id)
            for field_name, value in entity.fields.items():
                for index, ref in iter_references(value):
                    edge = self._resolve_edge(entity, field_name, index, ref, errors)
                    if edge is None:
                        continue
                    outgoing[edge.source].append(edge)
                    incoming[edge.target].append(edge)
                    edge_count += 1

        for entity in self._entities.values():
            errors.extend(self.schemas.validate(entity))

        self._outgoing = outgoing
        self._incoming = incoming
        self._by_type = by_type
        self.errors = errors
        self._state = GraphState.BUILT

        logger.info(
            "Built graph: %d entities, %d edges, %d errors",
            len(self._entities),
            edge_count,
            len(errors),
        )
        return BuildReport(edges=edge_count, errors=list(errors))

    def _resolve_edge(
        self,
        entity: Entity,
        field_name: str,
        index: int | None,
        ref: ReferenceValue,
        errors: list[FirmError],
    ) -> Edge | None:
        target = self._entities.get(ref.entity_id)
        if target is None:
            logger.warning(
                "Dangling reference: %s.%s -> %s", entity.id, field_name, ref.entity_id
            )
            errors.append(DanglingReferenceError(ref.entity_id, entity.id, field_name))
            return None

        edge = Edge(
            source=entity.id,
            field=field_name,
            target=target.id,
            target_field=ref.field_id,
            index=index,
        )
        if (
            ref.field_id is None
            or self.field_references == FieldReferencePolicy.ENTITY
            or ref.field_id in target.fields
        ):
            return edge

        logger.warning(
            "Dangling field reference: %s.%s -> %s.%s",
            entity.id,
            field_name,
            ref.entity_id,
            ref.field_id,
        )
        errors.append(DanglingFieldError(ref.entity_id, ref.field_id, entity.id, field_name))
        if self.field_references == FieldReferencePolicy.STRICT:
            return None
        return edge


__all__ = [
    "BuildReport",
    "Direction",
    "Edge",
    "EntityGraph",
    "FieldReferencePolicy",
    "GraphState",
    "Relation",
    "TypeView",
    "iter_references",
]
