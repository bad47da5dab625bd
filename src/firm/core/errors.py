"""
Error types for Firm parsing, loading, validation, and graph queries.

Errors fall into two groups:

- Accumulated errors (parse, literal, duplicate id, dangling reference,
  schema violations) are collected into lists and returned alongside
  whatever succeeded.
- Immediate errors (lifecycle violations, lookups of unknown ids) are
  raised directly.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class FirmError(Exception):
    """Base exception for all Firm errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ParseError(FirmError):
    """
    Raised when DSL syntax cannot be parsed.

    Examples:
    - Unterminated string or block
    - Missing entity id
    - Unexpected token where a value was expected
    """

    def __init__(
        self,
        message: str,
        context: Optional["ErrorContext"] = None,
        expected: str | None = None,
        found: str | None = None,
    ):
        self.expected = expected
        self.found = found
        super().__init__(message, context)

    @property
    def line(self) -> int | None:
        return self.context.line if self.context else None

    @property
    def column(self) -> int | None:
        return self.context.column if self.context else None


class LiteralTypeError(FirmError):
    """
    Raised when a literal matches no recognised value form.

    Examples:
    - Currency with a malformed code (``10.00 usd``)
    - Impossible calendar date (``2024-02-30``)
    - Reference with too many parts (``a.b.c.d``)
    """

    pass


class SchemaDefinitionError(FirmError):
    """
    Raised when a schema declaration cannot be compiled.

    Examples:
    - Field declaration without a name
    - Unknown field type name
    """

    pass


class DuplicateIdError(FirmError):
    """Raised when two entities share an id."""

    def __init__(
        self,
        entity_id: str,
        first_source: str | None = None,
        duplicate_source: str | None = None,
    ):
        self.entity_id = entity_id
        self.first_source = first_source
        self.duplicate_source = duplicate_source
        message = f"Duplicate entity '{entity_id}'"
        if first_source or duplicate_source:
            message += (
                f" defined in '{first_source or '<memory>'}'"
                f" and '{duplicate_source or '<memory>'}'"
            )
        super().__init__(message)


class DanglingReferenceError(FirmError):
    """Raised or reported when a reference target entity does not exist."""

    def __init__(self, target: str, source_id: str | None = None, field: str | None = None):
        self.source_id = source_id
        self.field = field
        self.target = target
        if source_id and field:
            message = f"Entity '{source_id}' field '{field}' references missing '{target}'"
        else:
            message = f"Reference to missing '{target}'"
        super().__init__(message)


class DanglingFieldError(DanglingReferenceError):
    """Reported when a field reference names an existing entity but a missing field."""

    def __init__(
        self,
        target: str,
        target_field: str,
        source_id: str | None = None,
        field: str | None = None,
    ):
        self.target_field = target_field
        super().__init__(f"{target}.{target_field}", source_id, field)
        self.target = target


class ValidationError(FirmError):
    """
    Base for schema violations reported by the validator.

    Examples:
    - Required field missing
    - Field value has the wrong type
    - Entity checked against the schema of another type
    """

    def __init__(self, message: str, entity_id: str, field: str | None = None):
        self.entity_id = entity_id
        self.field = field
        super().__init__(message)


class MissingRequiredFieldError(ValidationError):
    def __init__(self, entity_id: str, field: str):
        super().__init__(
            f"Missing required field '{field}' for entity '{entity_id}'", entity_id, field
        )


class FieldTypeError(ValidationError):
    def __init__(self, entity_id: str, field: str, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Expected field '{field}' for entity '{entity_id}' to be of type "
            f"'{expected}' but it was '{actual}'",
            entity_id,
            field,
        )


class EntityTypeMismatchError(ValidationError):
    def __init__(self, entity_id: str, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Entity '{entity_id}' has type '{actual}' but schema is for '{expected}'",
            entity_id,
        )


class NotFoundError(FirmError):
    """Raised when a query names an entity that is not in the graph."""

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"Entity '{entity_id}' not found")


class InvalidStateError(FirmError):
    """Raised when an operation is not valid in the graph's current lifecycle state."""

    pass


class NotAReferenceError(FirmError):
    """Raised when a reference operation receives a value of another kind."""

    pass


class CyclicReferenceError(FirmError):
    """Raised when following field references returns to a field already visited."""

    def __init__(self, path: list[str]):
        self.path = path
        super().__init__("Cyclic field reference: " + " -> ".join(path))


class MaxDepthExceededError(FirmError):
    """Raised when a chain of field references is longer than allowed."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"Field reference chain exceeds maximum depth of {max_depth}")


class WorkspaceError(FirmError):
    """
    Raised when workspace sources cannot be read.

    Examples:
    - Directory does not exist
    - File cannot be decoded as UTF-8
    """

    pass


class WorkspaceBuildError(FirmError):
    """Raised when a workspace build leaves no usable entities."""

    def __init__(self, message: str, errors: list[FirmError]):
        self.errors = errors
        details = "\n".join(f"  - {e}" for e in errors)
        super().__init__(f"{message}:\n{details}" if errors else message)


class ConfigError(FirmError):
    """Raised when firm.toml cannot be read or contains invalid values."""

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        file: Path to the source file, or None for in-memory text
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source line shown under the location
    """

    file: Path | None
    line: int
    column: int
    snippet: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "people.firm:10:5"
        """
        location = f"{self.file or '<string>'}:{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format the source line with its number and a marker under the column."""
        if not self.snippet:
            return ""
        prefix = f"{self.line:4d} | "
        marker = " " * (len(prefix) + self.column - 1) + "^^^"
        return f"{prefix}{self.snippet}\n{marker}"


def source_line(text: str, line: int) -> str | None:
    """Return the 1-indexed line of ``text`` or None when out of range."""
    lines = text.splitlines()
    if 1 <= line <= len(lines):
        return lines[line - 1]
    return None


def make_parse_error(
    message: str,
    file: Path | None,
    line: int,
    column: int,
    snippet: str | None = None,
    expected: str | None = None,
    found: str | None = None,
) -> ParseError:
    """
    Helper to create a ParseError with context.

    Args:
        message: Error description
        file: Source file path (None for in-memory text)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source line
        expected: What the parser was looking for
        found: What it saw instead

    Returns:
        ParseError with context attached
    """
    context = ErrorContext(file=file, line=line, column=column, snippet=snippet)
    return ParseError(message, context, expected=expected, found=found)


def make_literal_error(
    message: str,
    file: Path | None = None,
    line: int | None = None,
    column: int | None = None,
) -> LiteralTypeError:
    """
    Helper to create a LiteralTypeError with optional context.

    Returns:
        LiteralTypeError with context if location provided
    """
    if line and column:
        return LiteralTypeError(message, ErrorContext(file=file, line=line, column=column))
    return LiteralTypeError(message)
