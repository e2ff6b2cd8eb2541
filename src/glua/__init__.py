"""
GLUA - Scannerless Parser for a Lua-like Language
=================================================

This package parses GLUA source (the Lua 5.4 grammar) into an immutable
abstract syntax tree. There is no separate lexer pass: the recursive
descent parser reads terminals straight from the source bytes through a
small set of acceptors.

Main Components
---------------
- **parser**: `parse()` entry point, `LuaParser`, `ParserOptions`
- **ast**: Frozen dataclass node types, visitor and tree dumper
- **lexer**: Terminal acceptors (names, keywords, numerals, strings)
- **cursor**: Immutable position in the source buffer
- **printer**: `SourcePrinter`, re-serializes an AST to source
- **errors**: `LuaSyntaxError` hierarchy

Quick Start
-----------
    >>> import glua
    >>> chunk = glua.parse("return 1 + 2 * 3")
    >>> chunk.block.return_statement.values[0].operator
    <BinaryOperator.ADD: '+'>

Or use the command-line tool:
    $ gluaparse script.lua
    $ gluaparse --ast script.lua
    $ gluaparse --format script.lua
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from glua.parser import parse, LuaParser, ParserOptions, DEFAULT_MAX_DEPTH
from glua.printer import SourcePrinter
from glua.ast import ASTPrinter, ASTVisitor, walk
from glua.errors import (
    GluaError,
    SourceLocation,
    LuaSyntaxError,
    ExpectedTokenError,
    InvalidAssignmentError,
    UnterminatedStringError,
    UnterminatedLongBracketError,
    InvalidEscapeError,
    MalformedNumberError,
    TrailingInputError,
    TooDeepError,
)

__all__ = [
    # Version
    "__version__",
    # Parsing
    "parse",
    "LuaParser",
    "ParserOptions",
    "DEFAULT_MAX_DEPTH",
    # Printing
    "SourcePrinter",
    "ASTPrinter",
    "ASTVisitor",
    "walk",
    # Errors
    "GluaError",
    "SourceLocation",
    "LuaSyntaxError",
    "ExpectedTokenError",
    "InvalidAssignmentError",
    "UnterminatedStringError",
    "UnterminatedLongBracketError",
    "InvalidEscapeError",
    "MalformedNumberError",
    "TrailingInputError",
    "TooDeepError",
]
