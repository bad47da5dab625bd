"""
Firm - business entities as plain text, compiled into a typed, queryable graph.

People, organizations, projects, tasks and any user-defined type live in
``.firm`` source files. The front end parses them into entities, the
workspace merges files, and the entity graph resolves references into
traversable edges.
"""

from __future__ import annotations

from ._version import __version__
from .core import (
    Entity,
    EntityGraph,
    EntitySchema,
    FieldType,
    FirmError,
    SchemaRegistry,
)
from .lang import Workspace, generate, parse
from .project import load_project

__all__ = [
    "__version__",
    "Entity",
    "EntityGraph",
    "EntitySchema",
    "FieldType",
    "FirmError",
    "SchemaRegistry",
    "Workspace",
    "generate",
    "parse",
    "load_project",
]
