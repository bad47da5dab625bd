"""
Built-in schemas for common business entity types.

These are registered by ``SchemaRegistry.with_builtins()``. A workspace
schema block with the same type replaces the built-in one.
"""

from ..values import FieldType
from . import EntitySchema

S = FieldType.STRING
REF = FieldType.REFERENCE
DATE = FieldType.DATETIME


def person() -> EntitySchema:
    return (
        EntitySchema.new("person")
        .with_required_field("name", S)
        .with_optional_field("email", S)
        .with_optional_field("phone", S)
        .with_optional_field("urls", FieldType.LIST)
        .with_metadata()
    )


def organization() -> EntitySchema:
    return (
        EntitySchema.new("organization")
        .with_required_field("name", S)
        .with_optional_field("address", S)
        .with_optional_field("email", S)
        .with_optional_field("phone", S)
        .with_optional_field("vat_id", S)
        .with_optional_field("urls", FieldType.LIST)
        .with_optional_field("industry_ref", REF)
        .with_metadata()
    )


def industry() -> EntitySchema:
    return (
        EntitySchema.new("industry")
        .with_required_field("name", S)
        .with_optional_field("sector", S)
        .with_optional_field("classification_code", S)
        .with_optional_field("classification_system", S)
        .with_metadata()
    )


def account() -> EntitySchema:
    return (
        EntitySchema.new("account")
        .with_required_field("name", S)
        .with_required_field("organization_ref", REF)
        .with_optional_field("owner_ref", REF)
        .with_optional_field("status", S)
        .with_metadata()
    )


def channel() -> EntitySchema:
    return (
        EntitySchema.new("channel")
        .with_required_field("name", S)
        .with_optional_field("type", S)
        .with_optional_field("description", S)
        .with_metadata()
    )


def lead() -> EntitySchema:
    return (
        EntitySchema.new("lead")
        .with_required_field("source_ref", REF)
        .with_required_field("status", S)
        .with_optional_field("person_ref", REF)
        .with_optional_field("account_ref", REF)
        .with_optional_field("score", FieldType.INTEGER)
        .with_metadata()
    )


def contact() -> EntitySchema:
    return (
        EntitySchema.new("contact")
        .with_optional_field("source_ref", REF)
        .with_optional_field("person_ref", REF)
        .with_optional_field("account_ref", REF)
        .with_optional_field("role", S)
        .with_optional_field("status", S)
        .with_metadata()
    )


def interaction() -> EntitySchema:
    return (
        EntitySchema.new("interaction")
        .with_required_field("type", S)
        .with_required_field("subject", S)
        .with_required_field("initiator_ref", REF)
        .with_required_field("primary_contact_ref", REF)
        .with_required_field("interaction_date", DATE)
        .with_optional_field("outcome", S)
        .with_optional_field("secondary_contacts_ref", FieldType.LIST)
        .with_optional_field("channel_ref", REF)
        .with_optional_field("opportunity_ref", REF)
        .with_metadata()
    )


def opportunity() -> EntitySchema:
    return (
        EntitySchema.new("opportunity")
        .with_required_field("source_ref", REF)
        .with_required_field("name", S)
        .with_required_field("status", S)
        .with_optional_field("value", FieldType.CURRENCY)
        .with_optional_field("probability", FieldType.INTEGER)
        .with_metadata()
    )


def strategy() -> EntitySchema:
    return (
        EntitySchema.new("strategy")
        .with_required_field("name", S)
        .with_optional_field("description", S)
        .with_optional_field("source_ref", REF)
        .with_optional_field("owner_ref", REF)
        .with_optional_field("status", S)
        .with_optional_field("start_date", DATE)
        .with_optional_field("end_date", DATE)
        .with_metadata()
    )


def objective() -> EntitySchema:
    return (
        EntitySchema.new("objective")
        .with_required_field("name", S)
        .with_optional_field("description", S)
        .with_optional_field("strategy_ref", REF)
        .with_optional_field("owner_ref", REF)
        .with_optional_field("status", S)
        .with_optional_field("start_date", DATE)
        .with_optional_field("end_date", DATE)
        .with_metadata()
    )


def key_result() -> EntitySchema:
    return (
        EntitySchema.new("key_result")
        .with_required_field("name", S)
        .with_required_field("objective_ref", REF)
        .with_optional_field("owner_ref", REF)
        .with_optional_field("start_value", FieldType.FLOAT)
        .with_optional_field("target_value", FieldType.FLOAT)
        .with_optional_field("current_value", FieldType.FLOAT)
        .with_optional_field("unit", S)
        .with_metadata()
    )


def project() -> EntitySchema:
    return (
        EntitySchema.new("project")
        .with_required_field("name", S)
        .with_required_field("status", S)
        .with_optional_field("description", S)
        .with_optional_field("owner_ref", REF)
        .with_optional_field("objective_refs", FieldType.LIST)
        .with_optional_field("due_date", DATE)
        .with_metadata()
    )


def task() -> EntitySchema:
    return (
        EntitySchema.new("task")
        .with_required_field("name", S)
        .with_optional_field("description", S)
        .with_optional_field("source_ref", REF)
        .with_optional_field("assignee_ref", REF)
        .with_optional_field("due_date", DATE)
        .with_optional_field("is_completed", FieldType.BOOLEAN)
        .with_optional_field("completed_at", DATE)
        .with_metadata()
    )


def review() -> EntitySchema:
    return (
        EntitySchema.new("review")
        .with_required_field("name", S)
        .with_required_field("date", DATE)
        .with_optional_field("owner_ref", REF)
        .with_optional_field("source_refs", FieldType.LIST)
        .with_optional_field("attendee_refs", FieldType.LIST)
        .with_metadata()
    )


def file_asset() -> EntitySchema:
    return (
        EntitySchema.new("file_asset")
        .with_required_field("name", S)
        .with_required_field("path", FieldType.PATH)
        .with_optional_field("description", S)
        .with_optional_field("source_ref", REF)
        .with_optional_field("owner_ref", REF)
        .with_metadata()
    )


BUILTIN_SCHEMA_FACTORIES = (
    person,
    organization,
    industry,
    account,
    channel,
    lead,
    contact,
    interaction,
    opportunity,
    strategy,
    objective,
    key_result,
    project,
    task,
    review,
    file_asset,
)


def builtin_schemas() -> list[EntitySchema]:
    return [factory() for factory in BUILTIN_SCHEMA_FACTORIES]
