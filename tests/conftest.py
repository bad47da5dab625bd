"""Shared pytest fixtures for Firm tests."""

from pathlib import Path

import pytest

from firm.core.entity import Entity
from firm.core.graph import EntityGraph
from firm.core.schema import SchemaRegistry

SAMPLE_SOURCE = """
// Acme's people and deals
person john_doe {
    name = "John Doe"
    email = "john@acme.com"
}

organization acme {
    name = "Acme Corp"
}

contact john_at_acme {
    person_ref = person.john_doe
    organization_ref = organization.acme
    role = "Buyer"
}

opportunity big_deal {
    name = "Big Deal"
    status = "open"
    value = 5000.00 USD
    source_ref = contact.john_at_acme
}
"""


@pytest.fixture
def sample_source() -> str:
    """Return a small, valid multi-entity source file."""
    return SAMPLE_SOURCE


@pytest.fixture
def john() -> Entity:
    return Entity.new("person", "john_doe").with_field("name", "John Doe")


@pytest.fixture
def acme() -> Entity:
    return Entity.new("organization", "acme").with_field("name", "Acme Corp")


@pytest.fixture
def make_graph():
    """Return a factory that adds entities to a fresh graph and builds it."""

    def _make(*entities: Entity, schemas: SchemaRegistry | None = None, **kwargs) -> EntityGraph:
        graph = EntityGraph(schemas, **kwargs)
        graph.add_entities(entities)
        graph.build()
        return graph

    return _make


@pytest.fixture
def workspace_dir(tmp_path: Path, sample_source: str) -> Path:
    """A workspace directory with two source files and a nested one."""
    (tmp_path / "people.firm").write_text(
        'person jane_roe {\n    name = "Jane Roe"\n}\n', encoding="utf-8"
    )
    (tmp_path / "crm").mkdir()
    (tmp_path / "crm" / "acme.firm").write_text(sample_source, encoding="utf-8")
    (tmp_path / "README.md").write_text("not a source file\n", encoding="utf-8")
    return tmp_path
