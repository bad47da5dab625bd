"""Firm DSL front end: lexer, parser, literal classification, generation and workspace loading."""

from .convert import SchemaDeclaration, compile_schema, to_entity
from .generate import (
    FieldOrder,
    GeneratorOptions,
    IndentStyle,
    generate,
    generate_schema,
    generate_source,
)
from .lexer import Token, TokenType, tokenize
from .parser import Parser, parse_tree
from .source import ParseResult, parse, parse_strict
from .workspace import Workspace, WorkspaceBuild

__all__ = [
    "parse",
    "parse_strict",
    "parse_tree",
    "ParseResult",
    "Parser",
    "Token",
    "TokenType",
    "tokenize",
    "to_entity",
    "compile_schema",
    "SchemaDeclaration",
    "generate",
    "generate_schema",
    "generate_source",
    "GeneratorOptions",
    "IndentStyle",
    "FieldOrder",
    "Workspace",
    "WorkspaceBuild",
]
