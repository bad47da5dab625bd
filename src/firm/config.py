"""
Project configuration from ``firm.toml``.

Every section and key is optional; a workspace without a ``firm.toml``
uses the defaults below.

    [workspace]
    name = "acme"
    sources = ["."]
    extension = "firm"

    [build]
    builtin_schemas = true
    field_references = "report"   # entity | report | strict

    [generate]
    indent = 4                    # number of spaces, or "tab"
    field_order = "insertion"     # or "alphabetical"
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from firm.core.errors import ConfigError
from firm.core.graph import FieldReferencePolicy
from firm.lang.generate import FieldOrder, GeneratorOptions, IndentStyle

CONFIG_FILENAME = "firm.toml"


@dataclass
class WorkspaceConfig:
    """Where source files live."""

    name: str | None = None
    sources: list[str] = field(default_factory=lambda: ["."])
    extension: str = "firm"


@dataclass
class BuildConfig:
    """Graph build behaviour."""

    builtin_schemas: bool = True
    field_references: FieldReferencePolicy = FieldReferencePolicy.REPORT


@dataclass
class GenerateConfig:
    """DSL output formatting."""

    indent: int | str = 4  # spaces, or "tab"
    field_order: FieldOrder = FieldOrder.INSERTION

    def to_options(self) -> GeneratorOptions:
        if self.indent == "tab":
            style = IndentStyle.tabs()
        else:
            style = IndentStyle.spaces(int(self.indent))
        return GeneratorOptions(indent=style, field_order=self.field_order)


@dataclass
class FirmConfig:
    root: Path
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    generate: GenerateConfig = field(default_factory=GenerateConfig)
    path: Path | None = None

    @property
    def source_dirs(self) -> list[Path]:
        return [(self.root / rel).resolve() for rel in self.workspace.sources]


def _enum(enum_cls: Any, value: Any, key: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"Invalid {key} '{value}'; expected one of: {choices}") from None


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table")
    return section


def parse_config(data: dict[str, Any], root: Path) -> FirmConfig:
    """Build a FirmConfig from already-parsed TOML data."""
    workspace_data = _section(data, "workspace")
    build_data = _section(data, "build")
    generate_data = _section(data, "generate")

    sources = workspace_data.get("sources", ["."])
    if isinstance(sources, str):
        sources = [sources]
    if not isinstance(sources, list) or not all(isinstance(s, str) for s in sources):
        raise ConfigError("workspace.sources must be a list of paths")

    workspace = WorkspaceConfig(
        name=workspace_data.get("name"),
        sources=sources,
        extension=str(workspace_data.get("extension", "firm")).lstrip("."),
    )

    builtin_schemas = build_data.get("builtin_schemas", True)
    if not isinstance(builtin_schemas, bool):
        raise ConfigError("build.builtin_schemas must be true or false")
    build = BuildConfig(
        builtin_schemas=builtin_schemas,
        field_references=_enum(
            FieldReferencePolicy, build_data.get("field_references", "report"), "build.field_references"
        ),
    )

    indent = generate_data.get("indent", 4)
    if indent != "tab" and (isinstance(indent, bool) or not isinstance(indent, int) or indent < 1):
        raise ConfigError("generate.indent must be a positive number of spaces or \"tab\"")
    generate = GenerateConfig(
        indent=indent,
        field_order=_enum(
            FieldOrder, generate_data.get("field_order", "insertion"), "generate.field_order"
        ),
    )

    return FirmConfig(root=root, workspace=workspace, build=build, generate=generate)


def load_config(path: Path) -> FirmConfig:
    """
    Load ``firm.toml``.

    Raises:
        ConfigError: If the file cannot be read, is not valid TOML or holds
            invalid values
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e
    config = parse_config(data, path.parent.resolve())
    config.path = path
    return config


def find_config(start: Path) -> Path | None:
    """Walk up from ``start`` looking for ``firm.toml``."""
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def default_config(root: Path) -> FirmConfig:
    return FirmConfig(root=root.resolve())
