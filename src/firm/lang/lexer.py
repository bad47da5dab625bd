"""
Lexer/Tokenizer for the Firm DSL.

Converts raw DSL text into a stream of tokens with source location tracking.
Whitespace and newlines are insignificant; blocks are delimited by braces.

Composite literals are recognised here so the parser sees them as single
tokens:

- ``2024-03-01 at 09:30 UTC+1`` -> DATETIME
- ``5000.00 USD`` -> CURRENCY
- ``path"docs/contract.pdf"`` -> PATH
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from firm.core.errors import make_parse_error, source_line


class TokenType(Enum):
    """Token types in the Firm DSL."""

    # Literals
    IDENTIFIER = "identifier"
    STRING = "string"
    MULTILINE_STRING = "multi-line string"
    NUMBER = "number"
    DATETIME = "datetime"
    CURRENCY = "currency"
    PATH = "path"

    # Punctuation
    LBRACE = "'{'"
    RBRACE = "'}'"
    LBRACKET = "'['"
    RBRACKET = "']'"
    COMMA = "','"
    EQUALS = "'='"
    DOT = "'.'"

    EOF = "end of input"


# Contextual keywords; they lex as identifiers and can still name fields.
SCHEMA_KEYWORD = "schema"
FIELD_KEYWORD = "field"
BOOLEAN_KEYWORDS = frozenset({"true", "false"})
PATH_PREFIX = "path"

TRIPLE_QUOTE = '"""'
DIGITS = frozenset("0123456789")

# Shape only; the literal classifier checks calendar and offset ranges.
DATETIME_SHAPE = re.compile(
    r"\d+-\d+-\d+"
    r"(?:[ \t]+at[ \t]+\d+:\d+(?::\d+)?)?"
    r"(?:[ \t]+(?:UTC(?:[+-]\d+(?::\d+)?)?|[+-]\d+:\d+)(?![\w:.]))?",
    re.ASCII,
)
# Horizontal space then a bare word that is not a field name, a reference or
# the start of a block header such as `task t1 {`.
CURRENCY_SUFFIX = re.compile(
    r"[ \t]+([A-Za-z]+)(?![\w.])(?![ \t]*=)(?![ \t]+[A-Za-z_]\w*\s*\{)(?!\s*\{)",
    re.ASCII,
)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"'}


@dataclass
class Token:
    """
    A single token from the source.

    Attributes:
        type: Type of token
        value: String value of the token (string contents, unescaped)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    type: TokenType
    value: str
    line: int
    column: int

    def describe(self) -> str:
        """Human-readable form used in error messages."""
        if self.type == TokenType.EOF:
            return "end of input"
        if self.type in (TokenType.STRING, TokenType.MULTILINE_STRING):
            return f"string {self.value!r}"
        if self.type == TokenType.IDENTIFIER or self.type.value.startswith("'"):
            return f"'{self.value}'"
        return f"{self.type.value} {self.value!r}"

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


class Lexer:
    """
    Lexer for the Firm DSL.

    Converts source text into a stream of tokens ending with EOF.
    """

    def __init__(self, text: str, file: Path | None = None):
        """
        Initialize lexer.

        Args:
            text: Source text to tokenize
            file: Source file path (for error reporting)
        """
        self.text = text
        self.file = file
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def advance(self, count: int = 1) -> None:
        """Move forward, updating line/column."""
        for _ in range(count):
            if self.pos >= len(self.text):
                return
            if self.text[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def skip_whitespace(self) -> None:
        while self.current_char() in (" ", "\t", "\r", "\n"):
            self.advance()

    def skip_comment(self) -> None:
        """Skip comment (from // to end of line)."""
        while self.current_char() and self.current_char() != "\n":
            self.advance()

    def _error(self, message: str, line: int, column: int):
        return make_parse_error(
            message, self.file, line, column, snippet=source_line(self.text, line)
        )

    def read_string(self) -> str:
        """Read a double-quoted string, processing escapes."""
        start_line = self.line
        start_col = self.column
        self.advance()  # skip opening quote

        chars = []
        while True:
            current = self.current_char()
            if current is None or current == '"':
                break
            if current == "\\":
                self.advance()
                escape_char = self.current_char()
                if escape_char is None:
                    break
                chars.append(_ESCAPES.get(escape_char, escape_char))
                self.advance()
            else:
                chars.append(current)
                self.advance()

        if self.current_char() != '"':
            raise self._error("Unterminated string literal", start_line, start_col)

        self.advance()  # skip closing quote
        return "".join(chars)

    def read_multiline_string(self) -> str:
        """Read a triple-quoted string verbatim; no escapes are processed."""
        start_line = self.line
        start_col = self.column
        end = self.text.find(TRIPLE_QUOTE, self.pos + 3)
        if end == -1:
            raise self._error("Unterminated multi-line string literal", start_line, start_col)
        raw = self.text[self.pos + 3 : end]
        self.advance(end + 3 - self.pos)
        return raw

    def read_number(self) -> str:
        """
        Read a number lexeme: optional sign, digits and dots.

        Dots are consumed greedily so ``42.3.4`` reaches the classifier as
        one malformed literal instead of splitting into a reference.
        """
        chars = []
        if self.current_char() == "-":
            chars.append("-")
            self.advance()
        current = self.current_char()
        while current and (current in DIGITS or current == "."):
            chars.append(current)
            self.advance()
            current = self.current_char()
        return "".join(chars)

    def read_identifier(self) -> str:
        """Read an identifier or contextual keyword."""
        chars = []
        current = self.current_char()
        while current and (current.isascii() and (current.isalnum() or current == "_")):
            chars.append(current)
            self.advance()
            current = self.current_char()
        return "".join(chars)

    def read_numeric_literal(self, line: int, column: int) -> Token:
        """Read a datetime, currency, or plain number starting at a digit or sign."""
        match = DATETIME_SHAPE.match(self.text, self.pos)
        if match:
            value = match.group(0)
            self.advance(len(value))
            return Token(TokenType.DATETIME, value, line, column)

        number = self.read_number()
        if number in ("", "-"):
            raise self._error("Unexpected character: '-'", line, column)

        suffix = CURRENCY_SUFFIX.match(self.text, self.pos)
        if suffix:
            self.advance(suffix.end() - self.pos)
            return Token(TokenType.CURRENCY, f"{number} {suffix.group(1)}", line, column)
        return Token(TokenType.NUMBER, number, line, column)

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source text.

        Returns:
            List of tokens ending with EOF

        Raises:
            ParseError: If an unterminated string or stray character is found
        """
        simple = {
            "{": TokenType.LBRACE,
            "}": TokenType.RBRACE,
            "[": TokenType.LBRACKET,
            "]": TokenType.RBRACKET,
            ",": TokenType.COMMA,
            "=": TokenType.EQUALS,
            ".": TokenType.DOT,
        }

        while True:
            self.skip_whitespace()
            ch = self.current_char()
            if ch is None:
                break

            token_line = self.line
            token_col = self.column

            # Comments
            if ch == "/" and self.peek_char() == "/":
                self.skip_comment()

            # Strings
            elif self.text.startswith(TRIPLE_QUOTE, self.pos):
                value = self.read_multiline_string()
                self.tokens.append(
                    Token(TokenType.MULTILINE_STRING, value, token_line, token_col)
                )

            elif ch == '"':
                value = self.read_string()
                self.tokens.append(Token(TokenType.STRING, value, token_line, token_col))

            # Numbers, dates and currency amounts
            elif ch in DIGITS or (ch == "-" and (self.peek_char() or "") in DIGITS):
                self.tokens.append(self.read_numeric_literal(token_line, token_col))

            # Identifiers, keywords and path literals
            elif ch.isascii() and (ch.isalpha() or ch == "_"):
                value = self.read_identifier()
                if value == PATH_PREFIX and self.current_char() == '"':
                    path = self.read_string()
                    self.tokens.append(Token(TokenType.PATH, path, token_line, token_col))
                else:
                    self.tokens.append(
                        Token(TokenType.IDENTIFIER, value, token_line, token_col)
                    )

            elif ch in simple:
                self.advance()
                self.tokens.append(Token(simple[ch], ch, token_line, token_col))

            else:
                raise self._error(f"Unexpected character: {ch!r}", token_line, token_col)

        self.tokens.append(Token(TokenType.EOF, "", self.line, self.column))
        return self.tokens


def tokenize(text: str, file: Path | None = None) -> list[Token]:
    """
    Convenience function to tokenize DSL text.

    Args:
        text: Source text
        file: Source file path

    Returns:
        List of tokens
    """
    return Lexer(text, file).tokenize()
