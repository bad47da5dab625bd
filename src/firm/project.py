"""
Project loading utilities.

Provides convenient functions for the common config → load → build pipeline.
"""

from pathlib import Path

from firm.config import FirmConfig, default_config, find_config, load_config
from firm.core.graph import EntityGraph
from firm.lang.workspace import Workspace


def create_workspace(config: FirmConfig) -> Workspace:
    """Create an empty workspace configured from ``config``."""
    return Workspace(
        builtin_schemas=config.build.builtin_schemas,
        field_references=config.build.field_references,
        extension=config.workspace.extension,
    )


def resolve_config(project_dir: Path | str, config_path: Path | str | None = None) -> FirmConfig:
    """
    Load the config for a project directory.

    An explicit ``config_path`` is always read. Otherwise ``firm.toml`` is
    looked up from ``project_dir`` upwards; when none exists the defaults
    apply with ``project_dir`` as root.
    """
    project_dir = Path(project_dir).resolve()
    if config_path is not None:
        return load_config(Path(config_path).resolve())
    found = find_config(project_dir)
    if found is None:
        return default_config(project_dir)
    return load_config(found)


def load_project_with_config(
    project_dir: Path | str,
    config_path: Path | str | None = None,
) -> tuple[EntityGraph, FirmConfig]:
    """
    Load a Firm project and return both the built graph and its config.

    Same as load_project() but also returns the FirmConfig for callers
    that need formatting or workspace settings.
    """
    config = resolve_config(project_dir, config_path)
    workspace = create_workspace(config)
    for source_dir in config.source_dirs:
        workspace.load_directory(source_dir)
    return workspace.to_graph(), config


def load_project(
    project_dir: Path | str,
    config_path: Path | str | None = None,
) -> EntityGraph:
    """
    Load a Firm project and return its built entity graph.

    This is a convenience function that performs the common pipeline:
    1. Load config (firm.toml, or defaults)
    2. Discover and parse source files in each source directory
    3. Merge entities and compile schemas
    4. Resolve references and validate

    Args:
        project_dir: Path to the project root directory
        config_path: Optional explicit path to firm.toml

    Returns:
        The built EntityGraph; load and build errors are in ``graph.errors``

    Raises:
        ConfigError: If firm.toml is invalid
        WorkspaceError: If a source directory does not exist
        WorkspaceBuildError: If nothing loaded and errors occurred

    Example:
        >>> from firm import load_project
        >>> graph = load_project("./acme")
        >>> print(len(graph), graph.entity_types())
    """
    graph, _ = load_project_with_config(project_dir, config_path)
    return graph
