"""
Workspace loading: many source files merged into one entity set.

Each source is parsed on its own; a file that fails to parse, or parses
partially, never stops the others from loading. Entities are merged by id
and the first definition of an id wins.

Usage:
    ws = Workspace().load_directory(Path("./acme"))
    result = ws.build()
    graph = ws.to_graph()
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from firm.core.entity import Entity
from firm.core.errors import (
    DuplicateIdError,
    FirmError,
    SchemaDefinitionError,
    WorkspaceBuildError,
    WorkspaceError,
)
from firm.core.graph import EntityGraph, FieldReferencePolicy
from firm.core.schema import SchemaRegistry

from .convert import SchemaDeclaration, compile_schema
from .source import ParseResult, parse

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "firm"


@dataclass
class WorkspaceBuild:
    """
    Result of ``Workspace.build``.

    Unpacks as ``(entities, errors)``.
    """

    entities: list[Entity] = field(default_factory=list)
    schemas: SchemaRegistry = field(default_factory=SchemaRegistry)
    errors: list[FirmError] = field(default_factory=list)

    def __iter__(self) -> Iterator:
        yield self.entities
        yield self.errors


class Workspace:
    """
    The source files that make up one business's dataset.

    Loader methods return ``self`` so calls chain.
    """

    def __init__(
        self,
        builtin_schemas: bool = True,
        field_references: FieldReferencePolicy = FieldReferencePolicy.REPORT,
        extension: str = DEFAULT_EXTENSION,
    ):
        self.builtin_schemas = builtin_schemas
        self.field_references = FieldReferencePolicy(field_references)
        self.extension = extension.lstrip(".")
        self.sources: dict[str, ParseResult] = {}
        self.errors: list[FirmError] = []
        self._entities: dict[str, Entity] = {}
        self._origins: dict[str, str] = {}
        self._schemas: list[SchemaDeclaration] = []

    @property
    def entities(self) -> list[Entity]:
        return list(self._entities.values())

    def load_source(self, text: str, path: Path | str | None = None) -> Workspace:
        """Parse one source text and merge its entities and schema declarations."""
        path = Path(path) if path is not None else None
        name = str(path) if path is not None else f"<source {len(self.sources) + 1}>"
        result = parse(text, path)
        self.sources[name] = result

        if result.errors:
            logger.warning("%s: %d error(s) while parsing", name, len(result.errors))
            self.errors.extend(result.errors)

        for entity in result.entities:
            first = self._origins.get(entity.id)
            if first is not None:
                logger.warning("Duplicate entity '%s' in %s (first in %s)", entity.id, name, first)
                self.errors.append(DuplicateIdError(entity.id, first, name))
                continue
            self._entities[entity.id] = entity
            self._origins[entity.id] = name

        self._schemas.extend(result.schemas)
        return self

    def load(self, sources: Iterable[str | tuple[Path | str, str]]) -> Workspace:
        """
        Load several sources.

        Each item is either source text or a ``(path, text)`` pair.
        """
        for source in sources:
            if isinstance(source, tuple):
                path, text = source
                self.load_source(text, path)
            else:
                self.load_source(source)
        return self

    def load_file(self, path: Path | str, root: Path | None = None) -> Workspace:
        """
        Read and load one file.

        Args:
            path: File to read
            root: When given, errors and origins name the file relative to it

        Raises:
            WorkspaceError: If the file cannot be read or decoded
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise WorkspaceError(f"Cannot read {path}: {e}") from e
        display = path.relative_to(root) if root is not None else path
        return self.load_source(text, display)

    def discover(self, directory: Path | str) -> list[Path]:
        """Source files under ``directory``, recursively, in sorted order."""
        directory = Path(directory)
        if not directory.is_dir():
            raise WorkspaceError(f"Workspace directory not found: {directory}")
        return sorted(set(directory.rglob(f"*.{self.extension}")))

    def load_directory(self, directory: Path | str) -> Workspace:
        """
        Load every source file under a directory.

        A file that cannot be read is recorded as an error and skipped.

        Raises:
            WorkspaceError: If the directory does not exist
        """
        directory = Path(directory)
        files = self.discover(directory)
        logger.debug("Found %d source files under %s", len(files), directory)
        for file in files:
            try:
                self.load_file(file, root=directory)
            except WorkspaceError as e:
                logger.warning("%s", e.message)
                self.errors.append(e)
        return self

    def compile_schemas(self) -> tuple[SchemaRegistry, list[FirmError]]:
        """
        Compile every loaded schema declaration into a registry.

        Workspace schemas are registered after the built-ins, so they replace
        a built-in schema for the same type.
        """
        registry = SchemaRegistry.with_builtins() if self.builtin_schemas else SchemaRegistry()
        errors: list[FirmError] = []
        for declaration in self._schemas:
            try:
                registry.register(compile_schema(declaration))
            except SchemaDefinitionError as e:
                logger.warning("%s", e.message)
                errors.append(e)
        return registry, errors

    def build(self) -> WorkspaceBuild:
        """
        Merge everything loaded so far.

        Returns:
            WorkspaceBuild with the surviving entities, the schema registry,
            and all load and schema errors

        Raises:
            WorkspaceBuildError: If no entities survived and at least one
                error occurred
        """
        registry, schema_errors = self.compile_schemas()
        errors = self.errors + schema_errors
        entities = self.entities

        if not entities and errors:
            raise WorkspaceBuildError("Workspace build produced no entities", errors)

        logger.info(
            "Workspace: %d files, %d entities, %d schemas, %d errors",
            len(self.sources),
            len(entities),
            len(registry),
            len(errors),
        )
        return WorkspaceBuild(entities=entities, schemas=registry, errors=errors)

    def to_graph(self) -> EntityGraph:
        """
        Build the workspace and return a built entity graph.

        Load errors are kept ahead of graph build errors in ``graph.errors``.
        """
        result = self.build()
        graph = EntityGraph(result.schemas, self.field_references)
        graph.add_entities(result.entities)
        graph.build()
        graph.errors = result.errors + graph.errors
        return graph
