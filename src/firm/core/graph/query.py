"""
Read-only queries over a built entity graph.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple, overload

from ..entity import Entity
from ..errors import (
    CyclicReferenceError,
    DanglingFieldError,
    DanglingReferenceError,
    InvalidStateError,
    MaxDepthExceededError,
    NotAReferenceError,
    NotFoundError,
)
from ..values import FieldValue, ReferenceValue

if TYPE_CHECKING:
    from . import Edge

MAX_REFERENCE_DEPTH = 10


class GraphState(Enum):
    EMPTY = "empty"
    POPULATED = "populated"
    BUILT = "built"


class Direction(str, Enum):
    OUTGOING = "outgoing"
    INCOMING = "incoming"


class Relation(NamedTuple):
    """
    One neighbour of an entity.

    For OUTGOING relations ``field`` is the queried entity's field and
    ``entity`` the target; for INCOMING relations ``field`` is the field on
    ``entity`` that points back at the queried entity.
    """

    direction: Direction
    field: str
    entity: Entity


class TypeView(Sequence):
    """
    Entities of one type, looked up on access.

    The view can be iterated any number of times.
    """

    def __init__(self, entities: dict[str, Entity], ids: list[str]):
        self._entities = entities
        self._ids = ids

    @overload
    def __getitem__(self, index: int) -> Entity: ...

    @overload
    def __getitem__(self, index: slice) -> list[Entity]: ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self._entities[entity_id] for entity_id in self._ids[index]]
        return self._entities[self._ids[index]]

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"TypeView({self._ids!r})"


class GraphQueryMixin:
    """Query methods for EntityGraph; all require the BUILT state."""

    _state: GraphState
    _entities: dict[str, Entity]
    _outgoing: dict[str, list[Edge]]
    _incoming: dict[str, list[Edge]]
    _by_type: dict[str, list[str]]

    def _require_built(self) -> None:
        if self._state != GraphState.BUILT:
            raise InvalidStateError(
                f"Graph must be built before querying (state: {self._state.value})"
            )

    def get_entity(self, entity_id: str) -> Entity:
        """
        Raises:
            NotFoundError: If no entity has this id
        """
        self._require_built()
        try:
            return self._entities[entity_id]
        except KeyError:
            raise NotFoundError(entity_id) from None

    def list_by_type(self, entity_type: str) -> TypeView:
        """Entities of ``entity_type`` in insertion order; empty for unknown types."""
        self._require_built()
        return TypeView(self._entities, self._by_type.get(entity_type, []))

    def entity_types(self) -> list[str]:
        self._require_built()
        return sorted(self._by_type)

    def edges_from(self, entity_id: str) -> list[Edge]:
        self.get_entity(entity_id)
        return list(self._outgoing[entity_id])

    def edges_to(self, entity_id: str) -> list[Edge]:
        self.get_entity(entity_id)
        return list(self._incoming[entity_id])

    def related(self, entity_id: str, direction: Direction | None = None) -> list[Relation]:
        """
        Neighbours of an entity through resolved references.

        Outgoing relations come first, in field order; incoming relations
        follow in the order their source entities were added. Each edge
        yields one relation, so two fields pointing at the same target give
        two relations.

        Args:
            entity_id: Entity to explore
            direction: Restrict to OUTGOING or INCOMING; both when None

        Raises:
            NotFoundError: If no entity has this id
        """
        self.get_entity(entity_id)
        relations: list[Relation] = []
        if direction in (None, Direction.OUTGOING):
            relations.extend(
                Relation(Direction.OUTGOING, edge.field, self._entities[edge.target])
                for edge in self._outgoing[entity_id]
            )
        if direction in (None, Direction.INCOMING):
            relations.extend(
                Relation(Direction.INCOMING, edge.field, self._entities[edge.source])
                for edge in self._incoming[entity_id]
            )
        return relations

    def resolve_reference(self, value: FieldValue) -> Entity:
        """
        Look up the entity a reference points at.

        Field references resolve to the entity that holds the field.

        Raises:
            NotAReferenceError: If ``value`` is not a reference
            DanglingReferenceError: If the target entity does not exist
        """
        self._require_built()
        if not isinstance(value, ReferenceValue):
            raise NotAReferenceError(f"Expected a reference, got {value.field_type.value}")
        target = self._entities.get(value.entity_id)
        if target is None:
            raise DanglingReferenceError(value.entity_id)
        return target

    def resolve_field_reference(
        self, value: FieldValue, max_depth: int = MAX_REFERENCE_DEPTH
    ) -> FieldValue:
        """
        Follow a field reference to the value it ultimately names.

        When the referenced field itself holds a field reference, that is
        followed too, up to ``max_depth`` hops.

        Raises:
            NotAReferenceError: If ``value`` is not a field reference
            DanglingReferenceError: If an entity in the chain does not exist
            DanglingFieldError: If a field in the chain does not exist
            CyclicReferenceError: If the chain returns to a field already visited
            MaxDepthExceededError: If the chain is longer than ``max_depth``
        """
        if not isinstance(value, ReferenceValue) or value.field_id is None:
            raise NotAReferenceError(f"Expected a field reference, got {value}")

        visited: list[str] = []
        current: FieldValue = value
        while isinstance(current, ReferenceValue) and current.field_id is not None:
            key = str(current)
            if key in visited:
                raise CyclicReferenceError(visited + [key])
            if len(visited) >= max_depth:
                raise MaxDepthExceededError(max_depth)
            visited.append(key)

            entity = self.resolve_reference(current)
            field_value = entity.fields.get(current.field_id)
            if field_value is None:
                raise DanglingFieldError(current.entity_id, current.field_id)
            current = field_value
        return current

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def __len__(self) -> int:
        return len(self._entities)
