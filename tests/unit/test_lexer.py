"""Tests for the Firm lexer."""

import pytest

from firm.core.errors import ParseError
from firm.lang.lexer import Lexer, TokenType, tokenize


def types(text: str) -> list[TokenType]:
    return [token.type for token in tokenize(text)]


class TestPunctuationAndIdentifiers:
    def test_entity_block_tokens(self):
        assert types('person john { name = "John" }') == [
            TokenType.IDENTIFIER,
            TokenType.IDENTIFIER,
            TokenType.LBRACE,
            TokenType.IDENTIFIER,
            TokenType.EQUALS,
            TokenType.STRING,
            TokenType.RBRACE,
            TokenType.EOF,
        ]

    def test_reference_is_dotted_identifiers(self):
        tokens = tokenize("person.john_doe.name")
        assert [t.type for t in tokens[:-1]] == [
            TokenType.IDENTIFIER,
            TokenType.DOT,
            TokenType.IDENTIFIER,
            TokenType.DOT,
            TokenType.IDENTIFIER,
        ]

    def test_positions_are_one_indexed(self):
        tokens = tokenize('person john {\n    name = "John"\n}')
        name = tokens[3]
        assert (name.value, name.line, name.column) == ("name", 2, 5)
        assert (tokens[-2].line, tokens[-2].column) == (3, 1)

    def test_comments_are_skipped(self):
        assert types("// heading\nperson john { } // trailing") == [
            TokenType.IDENTIFIER,
            TokenType.IDENTIFIER,
            TokenType.LBRACE,
            TokenType.RBRACE,
            TokenType.EOF,
        ]

    def test_unexpected_character(self):
        with pytest.raises(ParseError) as exc:
            tokenize("person john { name = @ }")
        assert "Unexpected character" in exc.value.message
        assert (exc.value.line, exc.value.column) == (1, 22)


class TestStrings:
    def test_escapes(self):
        token = tokenize(r'"say \"hi\"\n\tnow\\"')[0]
        assert token.type == TokenType.STRING
        assert token.value == 'say "hi"\n\tnow\\'

    def test_unterminated_string(self):
        with pytest.raises(ParseError, match="Unterminated string literal"):
            tokenize('person john { name = "John }')

    def test_multiline_string_is_raw(self):
        token = tokenize('"""\n    line one\n    line \\n two\n"""')[0]
        assert token.type == TokenType.MULTILINE_STRING
        assert token.value == "\n    line one\n    line \\n two\n"

    def test_unterminated_multiline_string(self):
        with pytest.raises(ParseError, match="Unterminated multi-line string"):
            tokenize('notes = """\nnever closed\n')

    def test_path_literal(self):
        token = tokenize('path"docs/contract.pdf"')[0]
        assert (token.type, token.value) == (TokenType.PATH, "docs/contract.pdf")

    def test_path_field_name_is_identifier(self):
        assert types('path = "x"')[:2] == [TokenType.IDENTIFIER, TokenType.EQUALS]


class TestNumericLiterals:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("42", TokenType.NUMBER),
            ("-7", TokenType.NUMBER),
            ("3.14", TokenType.NUMBER),
            ("5000.00 USD", TokenType.CURRENCY),
            ("10 usd", TokenType.CURRENCY),
            ("2024-03-01", TokenType.DATETIME),
            ("2024-03-01 at 09:30", TokenType.DATETIME),
            ("2024-03-01 at 09:30:15 UTC+1", TokenType.DATETIME),
            ("2024-03-01 UTC-5:30", TokenType.DATETIME),
            ("2024-03-01 at 09:30 +02:00", TokenType.DATETIME),
        ],
    )
    def test_single_token(self, text, expected):
        tokens = tokenize(text)
        assert len(tokens) == 2
        assert tokens[0].type == expected
        assert tokens[0].value == text

    def test_malformed_number_is_one_token(self):
        tokens = tokenize("42.3.4")
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == "42.3.4"

    def test_number_before_next_field_is_not_currency(self):
        assert types("count = 5 name = \"x\"")[2:5] == [
            TokenType.NUMBER,
            TokenType.IDENTIFIER,
            TokenType.EQUALS,
        ]

    def test_currency_does_not_cross_lines(self):
        assert types("count = 5\nUSD = 1")[2:4] == [TokenType.NUMBER, TokenType.IDENTIFIER]

    def test_number_before_block_header_is_not_currency(self):
        assert types("garbage = 1 task t1 {")[2:6] == [
            TokenType.NUMBER,
            TokenType.IDENTIFIER,
            TokenType.IDENTIFIER,
            TokenType.LBRACE,
        ]
        assert types("garbage = 1 task {")[2:4] == [TokenType.NUMBER, TokenType.IDENTIFIER]

    def test_currency_before_closing_brace(self):
        assert types("x { budget = 5 EUR }")[4:6] == [TokenType.CURRENCY, TokenType.RBRACE]

    def test_lone_minus(self):
        with pytest.raises(ParseError, match="Unexpected character"):
            tokenize("value = - 5")


class TestLexerClass:
    def test_error_carries_file_and_snippet(self, tmp_path):
        file = tmp_path / "bad.firm"
        with pytest.raises(ParseError) as exc:
            Lexer("person x {\n  a = ?\n}", file).tokenize()
        context = exc.value.context
        assert context.file == file
        assert context.line == 2
        assert context.snippet == "  a = ?"
        assert "^^^" in str(exc.value)
