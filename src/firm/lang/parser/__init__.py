"""
Firm DSL Parser Package.

A recursive-descent parser built from mixins, one per construct type:

- Parser: The complete parser class
- parse_tree: Convenience function to tokenize and parse source text

Usage:
    from firm.lang.parser import parse_tree

    tree = parse_tree(text, Path("people.firm"))
    for block in tree.entity_blocks:
        ...
"""

import logging
from pathlib import Path

from firm.core.errors import ParseError

from ..lexer import TokenType, tokenize
from ..syntax import SourceTree
from .base import BaseParser
from .blocks import BlockParserMixin
from .literals import LiteralParserMixin

logger = logging.getLogger(__name__)


class Parser(BaseParser, LiteralParserMixin, BlockParserMixin):
    """
    Complete Firm DSL Parser.

    - LiteralParserMixin: Field assignments, scalars, lists and references
    - BlockParserMixin: Entity and schema blocks

    Errors are recovered at block granularity: a malformed block is recorded
    and parsing resumes at the next block.
    """

    def parse(self) -> SourceTree:
        """
        Parse every top-level block.

        Returns:
            SourceTree with the blocks that parsed and the errors for those
            that did not
        """
        tree = SourceTree()
        while not self.match(TokenType.EOF):
            start = self.pos
            try:
                tree.blocks.append(self.parse_block())
            except ParseError as e:
                logger.debug("Recovering from syntax error: %s", e.message)
                tree.errors.append(e)
                self.synchronize(start)
        return tree


def parse_tree(text: str, file: Path | None = None) -> SourceTree:
    """
    Tokenize and parse source text.

    A lexical error (such as an unterminated string) stops the whole file
    and is returned as the tree's only error.
    """
    try:
        tokens = tokenize(text, file)
    except ParseError as e:
        return SourceTree(errors=[e])
    return Parser(tokens, file, text).parse()


__all__ = ["Parser", "parse_tree"]
