"""
GLUA Recursive Descent Parser
=============================

This module implements the scannerless recursive descent parser. It reads
raw source bytes through the acceptors in glua.lexer and builds the AST
defined in glua.ast.

Grammar (EBNF)
--------------
chunk        ::= block
block        ::= {stat} [retstat]
stat         ::= ';' | varlist '=' explist | functioncall | label
               | 'break' | 'goto' Name | 'do' block 'end'
               | 'while' exp 'do' block 'end'
               | 'repeat' block 'until' exp
               | 'if' exp 'then' block {'elseif' exp 'then' block}
                 ['else' block] 'end'
               | 'for' Name '=' exp ',' exp [',' exp] 'do' block 'end'
               | 'for' namelist 'in' explist 'do' block 'end'
               | 'function' funcname funcbody
               | 'local' 'function' Name funcbody
               | 'local' attnamelist ['=' explist]
retstat      ::= 'return' [explist] [';']
label        ::= '::' Name '::'
funcname     ::= Name {'.' Name} [':' Name]
attnamelist  ::= Name attrib {',' Name attrib}
attrib       ::= ['<' Name '>']
exp          ::= 'nil' | 'false' | 'true' | Numeral | LiteralString | '...'
               | functiondef | prefixexp | tableconstructor
               | exp binop exp | unop exp
prefixexp    ::= (Name | '(' exp ')') {'[' exp ']' | '.' Name | [':' Name] args}
args         ::= '(' [explist] ')' | tableconstructor | LiteralString
funcbody     ::= '(' [parlist] ')' block 'end'
parlist      ::= namelist [',' '...'] | '...'
field        ::= '[' exp ']' '=' exp | Name '=' exp | exp

Left Recursion
--------------
The two left-recursive rules of the grammar are never parsed by direct
recursion:

- exp binop exp is parsed by precedence climbing (see BINARY_PRECEDENCE)
- prefixexp suffixes are consumed by a loop, left to right

Backtracking
------------
Methods named _accept_* are speculative: on no-match they return the
cursor they were given and None. Once a construct is committed to (its
keyword or opening token matched) the remaining pieces go through the
_expect_* helpers, which raise a LuaSyntaxError subclass.

Example Usage
-------------
>>> from glua.parser import parse
>>> chunk = parse("local x = 1 + 2")
>>> type(chunk.block.statements[0]).__name__
'LocalStatement'
"""

import logging
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import NoReturn, Optional, Union

from glua.cursor import Cursor
from glua.lexer import (
    Token,
    skip_trivia,
    peek_symbol,
    peek_word,
    accept_symbol,
    accept_keyword,
    accept_name,
    accept_numeral,
    accept_literal_string,
)
from glua.ast import (
    Chunk,
    Block,
    ReturnStatement,
    Statement,
    EmptyStatement,
    AssignmentStatement,
    CallStatement,
    LabelStatement,
    BreakStatement,
    GotoStatement,
    DoStatement,
    WhileStatement,
    RepeatStatement,
    IfClause,
    IfStatement,
    NumericForStatement,
    GenericForStatement,
    FunctionStatement,
    LocalFunctionStatement,
    LocalStatement,
    FuncName,
    FuncBody,
    ParList,
    AttName,
    Expression,
    PrefixExpression,
    Var,
    NilLiteral,
    FalseLiteral,
    TrueLiteral,
    NumeralLiteral,
    StringLiteral,
    Varargs,
    FunctionExpression,
    BinaryExpression,
    UnaryExpression,
    BinaryOperator,
    UnaryOperator,
    NameVar,
    IndexVar,
    FieldVar,
    ParenthesizedExpression,
    FunctionCall,
    CallArgs,
    ExpressionListArgs,
    TableArgs,
    StringArgs,
    TableConstructor,
    TableField,
    IndexedField,
    NamedField,
    PositionalField,
)
from glua.errors import (
    SourceLocation,
    ExpectedTokenError,
    InvalidAssignmentError,
    TrailingInputError,
    TooDeepError,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Parser Configuration
# =============================================================================

# Matches Lua's LUAI_MAXCCALLS
DEFAULT_MAX_DEPTH = 200


@dataclass
class ParserOptions:
    """
    Parser configuration options.

    Attributes:
        max_depth: Maximum nesting of blocks and subexpressions before
            TooDeepError is raised
    """
    max_depth: int = DEFAULT_MAX_DEPTH


# =============================================================================
# Operator Precedence
# =============================================================================

# operator -> (precedence, right associative); higher binds tighter
BINARY_PRECEDENCE: dict[BinaryOperator, tuple[int, bool]] = {
    BinaryOperator.OR: (1, False),
    BinaryOperator.AND: (2, False),
    BinaryOperator.LESS: (3, False),
    BinaryOperator.GREATER: (3, False),
    BinaryOperator.LESS_EQ: (3, False),
    BinaryOperator.GREATER_EQ: (3, False),
    BinaryOperator.NOT_EQUAL: (3, False),
    BinaryOperator.EQUAL: (3, False),
    BinaryOperator.BITWISE_OR: (4, False),
    BinaryOperator.BITWISE_XOR: (5, False),
    BinaryOperator.BITWISE_AND: (6, False),
    BinaryOperator.SHIFT_LEFT: (7, False),
    BinaryOperator.SHIFT_RIGHT: (7, False),
    BinaryOperator.CONCAT: (8, True),
    BinaryOperator.ADD: (9, False),
    BinaryOperator.SUBTRACT: (9, False),
    BinaryOperator.MULTIPLY: (10, False),
    BinaryOperator.DIVIDE: (10, False),
    BinaryOperator.FLOOR_DIVIDE: (10, False),
    BinaryOperator.MODULO: (10, False),
    BinaryOperator.POWER: (12, True),
}

# Operand of a unary operator; only '^' binds tighter
UNARY_PRECEDENCE = 11

_BINARY_SYMBOLS = {
    op.value: op
    for op in BinaryOperator
    if op not in (BinaryOperator.AND, BinaryOperator.OR)
}
_UNARY_SYMBOLS = ("-", "#", "~")

# Python frames one nesting level can use; a call argument nested in a
# call is the deepest
_FRAMES_PER_LEVEL = 10


# =============================================================================
# Parser
# =============================================================================

class LuaParser:
    """
    Scannerless recursive descent parser for GLUA source.

    Each parser instance parses one source buffer. Parsing stops at the
    first syntax error, which is raised as a LuaSyntaxError subclass.

    Attributes:
        source: The source bytes
        filename: Source filename for error messages
        options: Parser configuration
    """

    # Leading keyword -> statement method
    _STATEMENT_HANDLERS = {
        "break": "_break_statement",
        "goto": "_goto_statement",
        "do": "_do_statement",
        "while": "_while_statement",
        "repeat": "_repeat_statement",
        "if": "_if_statement",
        "for": "_for_statement",
        "function": "_function_statement",
        "local": "_local_statement",
    }

    def __init__(
        self,
        source: Union[bytes, str],
        filename: str = "<input>",
        options: Optional[ParserOptions] = None,
    ):
        if isinstance(source, str):
            source = source.encode("utf-8", errors="surrogateescape")
        self.source = bytes(source)
        self.filename = filename
        self.options = options or ParserOptions()
        if self.options.max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {self.options.max_depth}")

        # Current nesting of blocks and subexpressions
        self._depth = 0
        # Cursor of the most recently entered nesting level
        self._innermost: Optional[Cursor] = None

    def parse(self) -> Chunk:
        """
        Parse the whole source as a chunk.

        Returns:
            The Chunk root node

        Raises:
            LuaSyntaxError: If the source is not a valid chunk
        """
        logger.debug(f"Parsing {self.filename} ({len(self.source)} bytes)")
        cursor = Cursor(self.source, 0, self.filename)
        self._innermost = None

        # The recursion limit must leave room for max_depth levels
        limit = sys.getrecursionlimit()
        sys.setrecursionlimit(limit + self.options.max_depth * _FRAMES_PER_LEVEL)
        try:
            cursor, block = self._block(cursor)
        except RecursionError:
            if self._innermost is None:
                raise TooDeepError(self.options.max_depth) from None
            start = skip_trivia(self._innermost)
            raise TooDeepError(
                self.options.max_depth, start.location(), start.source_line()
            ) from None
        finally:
            sys.setrecursionlimit(limit)

        end = skip_trivia(cursor)
        if not end.at_end():
            raise TrailingInputError(self._describe(end), end.location(), end.source_line())

        logger.debug(
            f"Parsed {self.filename}: {len(block.statements)} top-level statements"
        )
        return Chunk(block, offset=0)

    # =========================================================================
    # Helpers
    # =========================================================================

    @contextmanager
    def _nested(self, cursor: Cursor):
        """Count one level of nesting for the duration of the block."""
        self._depth += 1
        self._innermost = cursor
        try:
            if self._depth > self.options.max_depth:
                start = skip_trivia(cursor)
                raise TooDeepError(
                    self.options.max_depth, start.location(), start.source_line()
                )
            yield
        finally:
            self._depth -= 1

    def _location(self, cursor: Cursor, offset: int) -> tuple[SourceLocation, str]:
        """Location and source line for offset."""
        at = cursor.seek(offset)
        return at.location(), at.source_line()

    def _describe(self, cursor: Cursor) -> str:
        """Text of the token at cursor, for 'near' in error messages."""
        word = peek_word(cursor)
        if word is not None:
            return word
        symbol = peek_symbol(cursor)
        if symbol is not None:
            return symbol
        return skip_trivia(cursor).near()

    def _expected(
        self, cursor: Cursor, what: str, opener: Optional[Token] = None
    ) -> NoReturn:
        """
        Raise ExpectedTokenError at cursor.

        When opener is given and lies on an earlier line, the hint points
        back at it, e.g. "to close 'function' at line 3".
        """
        start = skip_trivia(cursor)
        location = start.location()
        hint = None
        if opener is not None:
            opener_line = cursor.seek(opener.offset).location().line
            if opener_line != location.line:
                hint = f"to close '{opener.text}' at line {opener_line}"
        raise ExpectedTokenError(
            what,
            found=self._describe(start),
            location=location,
            source_line=start.source_line(),
            hint=hint,
        )

    def _expect_symbol(
        self, cursor: Cursor, text: str, opener: Optional[Token] = None
    ) -> Cursor:
        after, token = accept_symbol(cursor, text)
        if token is None:
            self._expected(cursor, f"'{text}'", opener)
        return after

    def _expect_keyword(
        self, cursor: Cursor, word: str, opener: Optional[Token] = None
    ) -> Cursor:
        after, token = accept_keyword(cursor, word)
        if token is None:
            self._expected(cursor, f"'{word}'", opener)
        return after

    def _expect_name(self, cursor: Cursor, what: str = "name") -> tuple[Cursor, Token]:
        after, token = accept_name(cursor)
        if token is None:
            self._expected(cursor, what)
        return after, token

    def _expect_expression(self, cursor: Cursor) -> tuple[Cursor, Expression]:
        after, expression = self._subexpression(cursor, 0)
        if expression is None:
            self._expected(cursor, "expression")
        return after, expression

    def _accept_expression_list(
        self, cursor: Cursor
    ) -> tuple[Cursor, Optional[tuple[Expression, ...]]]:
        """explist ::= exp {',' exp}"""
        after, first = self._subexpression(cursor, 0)
        if first is None:
            return cursor, None
        values = [first]
        while True:
            next_cursor, comma = accept_symbol(after, ",")
            if comma is None:
                break
            after, value = self._expect_expression(next_cursor)
            values.append(value)
        return after, tuple(values)

    def _expect_expression_list(
        self, cursor: Cursor
    ) -> tuple[Cursor, tuple[Expression, ...]]:
        after, values = self._accept_expression_list(cursor)
        if values is None:
            self._expected(cursor, "expression")
        return after, values

    # =========================================================================
    # Blocks
    # =========================================================================

    def _block(self, cursor: Cursor) -> tuple[Cursor, Block]:
        """
        Parse a block: statements until none matches, then an optional
        return statement. Never fails; the block may be empty.
        """
        start = skip_trivia(cursor)
        statements = []
        with self._nested(start):
            while True:
                after, statement = self._accept_statement(cursor)
                if statement is None:
                    break
                statements.append(statement)
                cursor = after
            cursor, return_statement = self._accept_return(cursor)
        return cursor, Block(tuple(statements), return_statement, offset=start.offset)

    def _accept_return(self, cursor: Cursor) -> tuple[Cursor, Optional[ReturnStatement]]:
        """retstat ::= 'return' [explist] [';']"""
        after, keyword = accept_keyword(cursor, "return")
        if keyword is None:
            return cursor, None
        after, values = self._accept_expression_list(after)
        after, _ = accept_symbol(after, ";")
        return after, ReturnStatement(values or (), offset=keyword.offset)

    # =========================================================================
    # Statements
    # =========================================================================

    def _accept_statement(self, cursor: Cursor) -> tuple[Cursor, Optional[Statement]]:
        """Parse one statement, or return (cursor, None) if none starts here."""
        after, semicolon = accept_symbol(cursor, ";")
        if semicolon is not None:
            return after, EmptyStatement(offset=semicolon.offset)

        after, colons = accept_symbol(cursor, "::")
        if colons is not None:
            after, name = self._expect_name(after, "label name")
            after = self._expect_symbol(after, "::")
            return after, LabelStatement(name.text, offset=colons.offset)

        word = peek_word(cursor)
        if word in self._STATEMENT_HANDLERS:
            after, keyword = accept_keyword(cursor, word)
            if keyword is not None:
                return getattr(self, self._STATEMENT_HANDLERS[word])(after, keyword)

        return self._accept_expression_statement(cursor)

    def _accept_expression_statement(
        self, cursor: Cursor
    ) -> tuple[Cursor, Optional[Statement]]:
        """
        Assignment or call statement.

        Both start with a prefix expression; what follows it decides which
        one this is.
        """
        after, target = self._accept_prefix_expression(cursor)
        if target is None:
            return cursor, None

        if peek_symbol(after) in ("=", ","):
            return self._assignment(after, target)

        if not isinstance(target, FunctionCall):
            self._expected(after, "'='")
        return after, CallStatement(target, offset=target.offset)

    def _assignment(
        self, cursor: Cursor, first: PrefixExpression
    ) -> tuple[Cursor, AssignmentStatement]:
        """varlist '=' explist, with the first var already parsed."""
        targets = [self._check_assignable(cursor, first)]
        while True:
            after, comma = accept_symbol(cursor, ",")
            if comma is None:
                break
            cursor, target = self._accept_prefix_expression(after)
            if target is None:
                self._expected(after, "variable")
            targets.append(self._check_assignable(cursor, target))

        cursor = self._expect_symbol(cursor, "=")
        cursor, values = self._expect_expression_list(cursor)
        return cursor, AssignmentStatement(tuple(targets), values, offset=first.offset)

    def _check_assignable(self, cursor: Cursor, target: PrefixExpression) -> Var:
        if not isinstance(target, Var):
            location, line = self._location(cursor, target.offset)
            raise InvalidAssignmentError(location, line)
        return target

    def _break_statement(self, cursor: Cursor, keyword: Token):
        return cursor, BreakStatement(offset=keyword.offset)

    def _goto_statement(self, cursor: Cursor, keyword: Token):
        cursor, label = self._expect_name(cursor, "label name")
        return cursor, GotoStatement(label.text, offset=keyword.offset)

    def _do_statement(self, cursor: Cursor, keyword: Token):
        cursor, body = self._block(cursor)
        cursor = self._expect_keyword(cursor, "end", keyword)
        return cursor, DoStatement(body, offset=keyword.offset)

    def _while_statement(self, cursor: Cursor, keyword: Token):
        cursor, condition = self._expect_expression(cursor)
        cursor = self._expect_keyword(cursor, "do")
        cursor, body = self._block(cursor)
        cursor = self._expect_keyword(cursor, "end", keyword)
        return cursor, WhileStatement(condition, body, offset=keyword.offset)

    def _repeat_statement(self, cursor: Cursor, keyword: Token):
        cursor, body = self._block(cursor)
        cursor = self._expect_keyword(cursor, "until", keyword)
        cursor, condition = self._expect_expression(cursor)
        return cursor, RepeatStatement(body, condition, offset=keyword.offset)

    def _if_statement(self, cursor: Cursor, keyword: Token):
        """
        if exp then block {elseif exp then block} [else block] end

        elseif arms are collected into a flat tuple of clauses rather than
        nested if statements.
        """
        clauses = []
        clause_start = keyword
        while True:
            cursor, condition = self._expect_expression(cursor)
            cursor = self._expect_keyword(cursor, "then")
            cursor, body = self._block(cursor)
            clauses.append(IfClause(condition, body, offset=clause_start.offset))

            after, elseif = accept_keyword(cursor, "elseif")
            if elseif is None:
                break
            cursor, clause_start = after, elseif

        else_body = None
        after, else_keyword = accept_keyword(cursor, "else")
        if else_keyword is not None:
            cursor, else_body = self._block(after)

        cursor = self._expect_keyword(cursor, "end", keyword)
        return cursor, IfStatement(tuple(clauses), else_body, offset=keyword.offset)

    def _for_statement(self, cursor: Cursor, keyword: Token):
        """Numeric or generic for; the token after the first name decides."""
        cursor, name = self._expect_name(cursor, "loop variable")

        if peek_symbol(cursor) == "=":
            return self._numeric_for(cursor, keyword, name)
        if peek_symbol(cursor) == "," or peek_word(cursor) == "in":
            return self._generic_for(cursor, keyword, name)
        self._expected(cursor, "'=' or 'in'")

    def _numeric_for(self, cursor: Cursor, keyword: Token, name: Token):
        cursor = self._expect_symbol(cursor, "=")
        cursor, start = self._expect_expression(cursor)
        cursor = self._expect_symbol(cursor, ",")
        cursor, stop = self._expect_expression(cursor)

        step = None
        after, comma = accept_symbol(cursor, ",")
        if comma is not None:
            cursor, step = self._expect_expression(after)

        cursor, body = self._loop_body(cursor, keyword)
        return cursor, NumericForStatement(
            name.text, start, stop, step, body, offset=keyword.offset
        )

    def _generic_for(self, cursor: Cursor, keyword: Token, name: Token):
        names = [name.text]
        while True:
            after, comma = accept_symbol(cursor, ",")
            if comma is None:
                break
            cursor, name = self._expect_name(after, "loop variable")
            names.append(name.text)

        cursor = self._expect_keyword(cursor, "in")
        cursor, values = self._expect_expression_list(cursor)
        cursor, body = self._loop_body(cursor, keyword)
        return cursor, GenericForStatement(
            tuple(names), values, body, offset=keyword.offset
        )

    def _loop_body(self, cursor: Cursor, keyword: Token) -> tuple[Cursor, Block]:
        """'do' block 'end' of a for loop."""
        cursor = self._expect_keyword(cursor, "do")
        cursor, body = self._block(cursor)
        cursor = self._expect_keyword(cursor, "end", keyword)
        return cursor, body

    def _function_statement(self, cursor: Cursor, keyword: Token):
        """function funcname funcbody"""
        cursor, first = self._expect_name(cursor, "function name")
        names = [first.text]
        while True:
            after, dot = accept_symbol(cursor, ".")
            if dot is None:
                break
            cursor, name = self._expect_name(after, "name")
            names.append(name.text)

        method = None
        after, colon = accept_symbol(cursor, ":")
        if colon is not None:
            cursor, name = self._expect_name(after, "method name")
            method = name.text

        func_name = FuncName(tuple(names), method, offset=first.offset)
        cursor, body = self._funcbody(cursor, keyword)
        return cursor, FunctionStatement(func_name, body, offset=keyword.offset)

    def _local_statement(self, cursor: Cursor, keyword: Token):
        """local function Name funcbody | local attnamelist ['=' explist]"""
        after, function = accept_keyword(cursor, "function")
        if function is not None:
            cursor, name = self._expect_name(after, "function name")
            cursor, body = self._funcbody(cursor, function)
            return cursor, LocalFunctionStatement(name.text, body, offset=keyword.offset)

        targets = []
        while True:
            cursor, target = self._attname(cursor)
            targets.append(target)
            after, comma = accept_symbol(cursor, ",")
            if comma is None:
                break
            cursor = after

        values = None
        after, equals = accept_symbol(cursor, "=")
        if equals is not None:
            cursor, values = self._expect_expression_list(after)

        return cursor, LocalStatement(tuple(targets), values, offset=keyword.offset)

    def _attname(self, cursor: Cursor) -> tuple[Cursor, AttName]:
        """Name ['<' Name '>']"""
        cursor, name = self._expect_name(cursor, "variable name")
        attribute = None
        after, bracket = accept_symbol(cursor, "<")
        if bracket is not None:
            cursor, attribute_name = self._expect_name(after, "attribute name")
            cursor = self._expect_symbol(cursor, ">")
            attribute = attribute_name.text
        return cursor, AttName(name.text, attribute, offset=name.offset)

    # =========================================================================
    # Functions
    # =========================================================================

    def _funcbody(self, cursor: Cursor, keyword: Token) -> tuple[Cursor, FuncBody]:
        """'(' [parlist] ')' block 'end'"""
        after, paren = accept_symbol(cursor, "(")
        if paren is None:
            self._expected(cursor, "'('")
        cursor, params = self._parlist(after)
        cursor = self._expect_symbol(cursor, ")", paren)
        cursor, body = self._block(cursor)
        cursor = self._expect_keyword(cursor, "end", keyword)
        return cursor, FuncBody(params, body, offset=paren.offset)

    def _parlist(self, cursor: Cursor) -> tuple[Cursor, Optional[ParList]]:
        """namelist [',' '...'] | '...', or None for an empty list."""
        start = skip_trivia(cursor)
        after, dots = accept_symbol(cursor, "...")
        if dots is not None:
            return after, ParList((), True, offset=dots.offset)

        cursor, name = accept_name(cursor)
        if name is None:
            return cursor, None

        names = [name.text]
        variadic = False
        while True:
            after, comma = accept_symbol(cursor, ",")
            if comma is None:
                break
            after_dots, dots = accept_symbol(after, "...")
            if dots is not None:
                cursor, variadic = after_dots, True
                break
            cursor, name = self._expect_name(after, "parameter name")
            names.append(name.text)

        return cursor, ParList(tuple(names), variadic, offset=start.offset)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _subexpression(
        self, cursor: Cursor, min_precedence: int
    ) -> tuple[Cursor, Optional[Expression]]:
        """
        Parse an expression whose binary operators all have precedence
        >= min_precedence (precedence climbing).

        The right operand of a left-associative operator is parsed with
        min_precedence = prec + 1, of a right-associative one with prec,
        so 'a - b - c' groups left and 'a .. b .. c' groups right.
        """
        with self._nested(cursor):
            after, unary = self._accept_unary_operator(cursor)
            if unary is not None:
                after, operand = self._subexpression(after, UNARY_PRECEDENCE)
                if operand is None:
                    self._expected(after, "expression")
                left = UnaryExpression(
                    UnaryOperator(unary.text), operand, offset=unary.offset
                )
            else:
                after, left = self._accept_simple_expression(cursor)
                if left is None:
                    return cursor, None

            while True:
                after_operator, operator = self._accept_binary_operator(after)
                if operator is None:
                    break
                precedence, right_associative = BINARY_PRECEDENCE[operator]
                if precedence < min_precedence:
                    break

                next_min = precedence if right_associative else precedence + 1
                after, right = self._subexpression(after_operator, next_min)
                if right is None:
                    self._expected(after_operator, "expression")
                left = BinaryExpression(operator, left, right, offset=left.offset)

        return after, left

    def _accept_unary_operator(self, cursor: Cursor) -> tuple[Cursor, Optional[Token]]:
        if peek_word(cursor) == "not":
            return accept_keyword(cursor, "not")
        symbol = peek_symbol(cursor)
        if symbol in _UNARY_SYMBOLS:
            return accept_symbol(cursor, symbol)
        return cursor, None

    def _accept_binary_operator(
        self, cursor: Cursor
    ) -> tuple[Cursor, Optional[BinaryOperator]]:
        symbol = peek_symbol(cursor)
        if symbol in _BINARY_SYMBOLS:
            after, _ = accept_symbol(cursor, symbol)
            return after, _BINARY_SYMBOLS[symbol]
        word = peek_word(cursor)
        if word in ("and", "or"):
            after, keyword = accept_keyword(cursor, word)
            if keyword is not None:
                return after, BinaryOperator(word)
        return cursor, None

    def _accept_simple_expression(
        self, cursor: Cursor
    ) -> tuple[Cursor, Optional[Expression]]:
        """Any expression that does not start with a unary operator."""
        keyword = None
        word = peek_word(cursor)
        if word in ("nil", "false", "true", "function"):
            after, keyword = accept_keyword(cursor, word)
        if keyword is not None:
            if word == "nil":
                return after, NilLiteral(offset=keyword.offset)
            if word == "false":
                return after, FalseLiteral(offset=keyword.offset)
            if word == "true":
                return after, TrueLiteral(offset=keyword.offset)
            after, body = self._funcbody(after, keyword)
            return after, FunctionExpression(body, offset=keyword.offset)

        after, numeral = accept_numeral(cursor)
        if numeral is not None:
            return after, NumeralLiteral(numeral.text, offset=numeral.offset)

        after, string = self._accept_string(cursor)
        if string is not None:
            return after, string

        after, dots = accept_symbol(cursor, "...")
        if dots is not None:
            return after, Varargs(offset=dots.offset)

        after, table = self._accept_table(cursor)
        if table is not None:
            return after, table

        return self._accept_prefix_expression(cursor)

    def _accept_string(self, cursor: Cursor) -> tuple[Cursor, Optional[StringLiteral]]:
        after, token = accept_literal_string(cursor)
        if token is None:
            return cursor, None
        if token.text.startswith("["):
            quote = token.text[:token.text.index("[", 1) + 1]
        else:
            quote = token.text[0]
        return after, StringLiteral(token.value, quote, offset=token.offset)

    # =========================================================================
    # Prefix Expressions
    # =========================================================================

    def _accept_prefix_expression(
        self, cursor: Cursor
    ) -> tuple[Cursor, Optional[PrefixExpression]]:
        """
        prefixexp ::= (Name | '(' exp ')') {suffix}

        Suffixes are applied in a loop, each wrapping the node built so
        far, so 'a.b[c]:d(e)' becomes FunctionCall(IndexVar(FieldVar(...))).
        """
        after, name = accept_name(cursor)
        if name is not None:
            node = NameVar(name.text, offset=name.offset)
        else:
            after, paren = accept_symbol(cursor, "(")
            if paren is None:
                return cursor, None
            after, inner = self._subexpression(after, 0)
            if inner is None:
                self._expected(after, "expression")
            after = self._expect_symbol(after, ")", paren)
            node = ParenthesizedExpression(inner, offset=paren.offset)

        return self._suffixes(after, node)

    def _suffixes(
        self, cursor: Cursor, node: PrefixExpression
    ) -> tuple[Cursor, PrefixExpression]:
        while True:
            symbol = peek_symbol(cursor)

            if symbol == "[":
                after, bracket = accept_symbol(cursor, "[")
                after, key = self._expect_expression(after)
                after = self._expect_symbol(after, "]", bracket)
                node = IndexVar(node, key, offset=node.offset)

            elif symbol == ".":
                after, _ = accept_symbol(cursor, ".")
                after, name = self._expect_name(after, "field name")
                node = FieldVar(node, name.text, offset=node.offset)

            elif symbol == ":":
                after, _ = accept_symbol(cursor, ":")
                after, name = self._expect_name(after, "method name")
                after, args = self._accept_call_args(after)
                if args is None:
                    self._expected(after, "function arguments")
                node = FunctionCall(node, name.text, args, offset=node.offset)

            else:
                after, args = self._accept_call_args(cursor)
                if args is None:
                    return cursor, node
                node = FunctionCall(node, None, args, offset=node.offset)

            cursor = after

    def _accept_call_args(self, cursor: Cursor) -> tuple[Cursor, Optional[CallArgs]]:
        """args ::= '(' [explist] ')' | tableconstructor | LiteralString"""
        after, paren = accept_symbol(cursor, "(")
        if paren is not None:
            after, values = self._accept_expression_list(after)
            after = self._expect_symbol(after, ")", paren)
            return after, ExpressionListArgs(values or (), offset=paren.offset)

        after, table = self._accept_table(cursor)
        if table is not None:
            return after, TableArgs(table, offset=table.offset)

        after, string = self._accept_string(cursor)
        if string is not None:
            return after, StringArgs(string, offset=string.offset)

        return cursor, None

    # =========================================================================
    # Table Constructors
    # =========================================================================

    def _accept_table(self, cursor: Cursor) -> tuple[Cursor, Optional[TableConstructor]]:
        """'{' [field {(',' | ';') field} [',' | ';']] '}'"""
        after, brace = accept_symbol(cursor, "{")
        if brace is None:
            return cursor, None

        table_fields = []
        while True:
            after, table_field = self._accept_field(after)
            if table_field is None:
                break
            table_fields.append(table_field)

            next_cursor, separator = accept_symbol(after, ",")
            if separator is None:
                next_cursor, separator = accept_symbol(after, ";")
            if separator is None:
                break
            after = next_cursor

        after = self._expect_symbol(after, "}", brace)
        return after, TableConstructor(tuple(table_fields), offset=brace.offset)

    def _accept_field(self, cursor: Cursor) -> tuple[Cursor, Optional[TableField]]:
        after, bracket = accept_symbol(cursor, "[")
        if bracket is not None:
            after, key = self._expect_expression(after)
            after = self._expect_symbol(after, "]", bracket)
            after = self._expect_symbol(after, "=")
            after, value = self._expect_expression(after)
            return after, IndexedField(key, value, offset=bracket.offset)

        # Name '=' exp, but 'x == y' is a positional field
        after, name = accept_name(cursor)
        if name is not None and peek_symbol(after) == "=":
            after, _ = accept_symbol(after, "=")
            after, value = self._expect_expression(after)
            return after, NamedField(name.text, value, offset=name.offset)

        after, value = self._subexpression(cursor, 0)
        if value is None:
            return cursor, None
        return after, PositionalField(value, offset=value.offset)


# =============================================================================
# Public Entry Point
# =============================================================================

def parse(
    source: Union[bytes, str],
    filename: str = "<input>",
    options: Optional[ParserOptions] = None,
) -> Chunk:
    """
    Parse GLUA source into an AST.

    Args:
        source: Source bytes, or text to be encoded as UTF-8
        filename: Name used in error locations
        options: Parser configuration (defaults to ParserOptions())

    Returns:
        The Chunk root node

    Raises:
        LuaSyntaxError: On the first syntax error
    """
    return LuaParser(source, filename, options).parse()
