"""
Base parser class for the Firm DSL.

Provides common token manipulation and utility methods used by all parser mixins.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from firm.core.errors import ParseError, make_parse_error, source_line

from ..lexer import Token, TokenType

if TYPE_CHECKING:
    from ..syntax import FieldAssignment, LiteralNode


@runtime_checkable
class ParserProtocol(Protocol):
    """
    Protocol defining the interface available to parser mixins.

    This allows mypy to understand that mixins will have access to
    BaseParser methods when combined in the final Parser class.
    """

    tokens: list[Token]
    file: Path | None
    pos: int

    def current_token(self) -> Token: ...
    def peek_token(self, offset: int = 1) -> Token: ...
    def advance(self) -> Token: ...
    def expect(self, token_type: TokenType, what: str | None = None) -> Token: ...
    def match(self, *token_types: TokenType) -> bool: ...
    def match_keyword(self, keyword: str) -> bool: ...
    def error(self, expected: str, token: Token | None = None) -> ParseError: ...

    # Methods from other mixins that may be called cross-mixin
    def parse_literal(self) -> "LiteralNode": ...
    def parse_field_assignment(self) -> "FieldAssignment": ...


class BaseParser:
    """
    Base parser class with token manipulation utilities.

    This class provides the foundation for recursive descent parsing,
    including token navigation, matching, and error generation.
    """

    def __init__(self, tokens: list[Token], file: Path | None = None, text: str | None = None):
        """
        Initialize parser.

        Args:
            tokens: List of tokens from lexer
            file: Source file path (for error reporting)
            text: Source text, used for error snippets
        """
        self.tokens = tokens
        self.file = file
        self.text = text
        self.pos = 0

    def current_token(self) -> Token:
        """Get current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[self.pos]

    def peek_token(self, offset: int = 1) -> Token:
        """Peek ahead at token."""
        pos = self.pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[pos]

    def advance(self) -> Token:
        """Consume and return current token."""
        token = self.current_token()
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def match(self, *token_types: TokenType) -> bool:
        """Check whether the current token is one of the given types."""
        return self.current_token().type in token_types

    def match_keyword(self, keyword: str) -> bool:
        """Check for an identifier token spelling a contextual keyword."""
        token = self.current_token()
        return token.type == TokenType.IDENTIFIER and token.value == keyword

    def error(self, expected: str, token: Token | None = None) -> ParseError:
        """Build an expected-vs-found error at ``token`` (default: current)."""
        token = token or self.current_token()
        found = token.describe()
        snippet = source_line(self.text, token.line) if self.text is not None else None
        return make_parse_error(
            f"Expected {expected}, found {found}",
            self.file,
            token.line,
            token.column,
            snippet=snippet,
            expected=expected,
            found=found,
        )

    def expect(self, token_type: TokenType, what: str | None = None) -> Token:
        """
        Expect a specific token type and consume it.

        Args:
            token_type: Required token type
            what: Description for the error message (defaults to the type)

        Raises:
            ParseError: If token doesn't match
        """
        if not self.match(token_type):
            raise self.error(what or token_type.value)
        return self.advance()

    def at_block_start(self) -> bool:
        """Check for ``IDENT IDENT {``, the opening of any top-level block."""
        return (
            self.current_token().type == TokenType.IDENTIFIER
            and self.peek_token().type == TokenType.IDENTIFIER
            and self.peek_token(2).type == TokenType.LBRACE
        )

    def synchronize(self, start: int) -> None:
        """
        Skip past a malformed block that began at token index ``start``.

        Stops after the brace that closes the block, or at the next token
        sequence that opens a new top-level block, whichever comes first.
        Always consumes at least one token.
        """
        self.pos = start
        depth = 0
        while not self.match(TokenType.EOF):
            if self.pos > start and depth <= 1 and self.at_block_start():
                return
            token = self.advance()
            if token.type == TokenType.LBRACE:
                depth += 1
            elif token.type == TokenType.RBRACE:
                depth -= 1
                if depth <= 0:
                    return
