"""
GLUA Abstract Syntax Tree (AST) Definitions
===========================================

This module defines the AST node types produced by the parser. The tree is
the only artifact handed to downstream consumers (compilers, evaluators,
pretty printers).

Node Hierarchy
--------------
ASTNode (base)
├── Chunk - root node, one Block
├── Block - statements plus optional ReturnStatement
├── ReturnStatement - return [explist]
├── Statements
│   ├── EmptyStatement                ;
│   ├── AssignmentStatement           varlist = explist
│   ├── CallStatement                 functioncall
│   ├── LabelStatement                ::Name::
│   ├── BreakStatement                break
│   ├── GotoStatement                 goto Name
│   ├── DoStatement                   do block end
│   ├── WhileStatement                while exp do block end
│   ├── RepeatStatement               repeat block until exp
│   ├── IfStatement                   if/elseif/else chain (IfClause list)
│   ├── NumericForStatement           for Name = a, b [, c] do block end
│   ├── GenericForStatement           for namelist in explist do block end
│   ├── FunctionStatement             function funcname funcbody
│   ├── LocalFunctionStatement        local function Name funcbody
│   └── LocalStatement                local attnamelist [= explist]
├── Expressions
│   ├── NilLiteral / FalseLiteral / TrueLiteral
│   ├── NumeralLiteral                numeral source text
│   ├── StringLiteral                 decoded bytes + quoting
│   ├── Varargs                       ...
│   ├── FunctionExpression            function funcbody
│   ├── TableConstructor              { fields }
│   ├── BinaryExpression / UnaryExpression
│   └── PrefixExpression
│       ├── Var: NameVar, IndexVar, FieldVar
│       ├── FunctionCall
│       └── ParenthesizedExpression
├── Call arguments: ExpressionListArgs, TableArgs, StringArgs
├── Table fields: IndexedField, NamedField, PositionalField
└── Helpers: IfClause, FuncName, FuncBody, ParList, AttName

Design Notes
------------
- All nodes are frozen dataclasses; sequences are tuples. Nothing is
  mutated after the parser builds it.
- Each node records the byte offset of its first token in the keyword-only
  `offset` field. It takes no part in equality, so trees can be compared
  structurally: parse("return 1+2") == expected tree built by hand.
- Children are owned by exactly one parent; there are no back references.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Optional


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        offset: Byte offset of the node's first token (not compared)
    """
    offset: Optional[int] = field(default=None, compare=False, repr=False, kw_only=True)


@dataclass(frozen=True)
class Statement(ASTNode):
    """Base class for the statement variants."""
    pass


@dataclass(frozen=True)
class Expression(ASTNode):
    """Base class for all expression nodes."""
    pass


@dataclass(frozen=True)
class PrefixExpression(Expression):
    """
    Expressions that may be followed by call, index and field suffixes:
    variables, function calls and parenthesized expressions.
    """
    pass


@dataclass(frozen=True)
class Var(PrefixExpression):
    """Assignable prefix expressions."""
    pass


# =============================================================================
# Operators
# =============================================================================

class BinaryOperator(Enum):
    """Binary operators; each value is the operator's source text."""
    # Arithmetic
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    FLOOR_DIVIDE = "//"
    MODULO = "%"
    POWER = "^"

    # Bitwise
    BITWISE_AND = "&"
    BITWISE_XOR = "~"
    BITWISE_OR = "|"
    SHIFT_RIGHT = ">>"
    SHIFT_LEFT = "<<"

    # String
    CONCAT = ".."

    # Comparison
    LESS = "<"
    LESS_EQ = "<="
    GREATER = ">"
    GREATER_EQ = ">="
    EQUAL = "=="
    NOT_EQUAL = "~="

    # Logical
    AND = "and"
    OR = "or"


class UnaryOperator(Enum):
    """Unary operators; each value is the operator's source text."""
    NEGATE = "-"
    NOT = "not"
    LENGTH = "#"
    BITWISE_NOT = "~"


# =============================================================================
# Program Structure
# =============================================================================

@dataclass(frozen=True)
class ReturnStatement(ASTNode):
    """
    Return statement; only ever the last element of a Block.

    Attributes:
        values: Returned expressions (possibly empty)
    """
    values: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class Block(ASTNode):
    """
    Ordered statements plus an optional trailing return statement.

    Attributes:
        statements: The statements in source order
        return_statement: The block's return statement, if any
    """
    statements: tuple[Statement, ...] = ()
    return_statement: Optional[ReturnStatement] = None


@dataclass(frozen=True)
class Chunk(ASTNode):
    """Root node of a parsed program."""
    block: Block


# =============================================================================
# Function Pieces
# =============================================================================

@dataclass(frozen=True)
class ParList(ASTNode):
    """
    Function parameter list.

    Attributes:
        names: Named parameters in order
        variadic: True if the list ends with '...'
    """
    names: tuple[str, ...] = ()
    variadic: bool = False


@dataclass(frozen=True)
class FuncBody(ASTNode):
    """
    Parameters and body of a function.

    Attributes:
        params: The parameter list, None for '()'
        body: The function body
    """
    params: Optional[ParList]
    body: Block


@dataclass(frozen=True)
class FuncName(ASTNode):
    """
    Name of a function statement: a.b.c or a.b:m

    Attributes:
        names: The dotted path, at least one name
        method: Method name after ':', if any
    """
    names: tuple[str, ...]
    method: Optional[str] = None


@dataclass(frozen=True)
class AttName(ASTNode):
    """
    Local variable name with optional attribute: x <const>

    Attributes:
        name: Variable name
        attribute: Attribute name between '<' and '>', if any
    """
    name: str
    attribute: Optional[str] = None


# =============================================================================
# Table Constructor
# =============================================================================

@dataclass(frozen=True)
class TableField(ASTNode):
    """Base class for table constructor fields."""
    pass


@dataclass(frozen=True)
class IndexedField(TableField):
    """[key] = value"""
    key: Expression
    value: Expression


@dataclass(frozen=True)
class NamedField(TableField):
    """name = value"""
    name: str
    value: Expression


@dataclass(frozen=True)
class PositionalField(TableField):
    """value (list part)"""
    value: Expression


@dataclass(frozen=True)
class TableConstructor(Expression):
    """{ field, field; ... }"""
    fields: tuple[TableField, ...] = ()


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class NilLiteral(Expression):
    pass


@dataclass(frozen=True)
class FalseLiteral(Expression):
    pass


@dataclass(frozen=True)
class TrueLiteral(Expression):
    pass


@dataclass(frozen=True)
class NumeralLiteral(Expression):
    """
    Numeric constant, kept exactly as written (no conversion).

    Attributes:
        text: The numeral's source text, e.g. "0x1p4" or "3.14"
    """
    text: str


@dataclass(frozen=True)
class StringLiteral(Expression):
    """
    String constant.

    Attributes:
        value: Decoded contents (escapes resolved)
        quote: Opening delimiter: '"', "'" or a long bracket like "[==["
    """
    value: bytes
    quote: str = '"'

    @property
    def is_long(self) -> bool:
        """True for [[long bracket]] strings."""
        return self.quote.startswith("[")


@dataclass(frozen=True)
class Varargs(Expression):
    """..."""
    pass


@dataclass(frozen=True)
class FunctionExpression(Expression):
    """Anonymous function: function (params) body end"""
    body: FuncBody


@dataclass(frozen=True)
class BinaryExpression(Expression):
    """
    Binary operation (left op right).

    Attributes:
        operator: The binary operator
        left: Left operand expression
        right: Right operand expression
    """
    operator: BinaryOperator
    left: Expression
    right: Expression


@dataclass(frozen=True)
class UnaryExpression(Expression):
    """
    Unary operation (op operand).

    Attributes:
        operator: The unary operator
        operand: The operand expression
    """
    operator: UnaryOperator
    operand: Expression


@dataclass(frozen=True)
class NameVar(Var):
    """Plain variable reference."""
    name: str


@dataclass(frozen=True)
class IndexVar(Var):
    """target[key]"""
    target: PrefixExpression
    key: Expression


@dataclass(frozen=True)
class FieldVar(Var):
    """target.name"""
    target: PrefixExpression
    name: str


@dataclass(frozen=True)
class ParenthesizedExpression(PrefixExpression):
    """( expression ), which also truncates multiple results to one."""
    expression: Expression


# =============================================================================
# Calls
# =============================================================================

@dataclass(frozen=True)
class CallArgs(ASTNode):
    """Base class for the three argument forms of a call."""
    pass


@dataclass(frozen=True)
class ExpressionListArgs(CallArgs):
    """f(a, b); values is empty for f()"""
    values: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class TableArgs(CallArgs):
    """f{...}"""
    table: TableConstructor


@dataclass(frozen=True)
class StringArgs(CallArgs):
    """f"..." or f[[...]]"""
    string: StringLiteral


@dataclass(frozen=True)
class FunctionCall(PrefixExpression):
    """
    Function or method call.

    Attributes:
        target: The called prefix expression
        method: Method name for target:method(args), None for plain calls
        args: The call arguments
    """
    target: PrefixExpression
    method: Optional[str]
    args: CallArgs


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass(frozen=True)
class EmptyStatement(Statement):
    """;"""
    pass


@dataclass(frozen=True)
class AssignmentStatement(Statement):
    """
    Multiple assignment: varlist = explist

    Attributes:
        targets: Assigned variables, at least one
        values: Assigned expressions, at least one
    """
    targets: tuple[Var, ...]
    values: tuple[Expression, ...]


@dataclass(frozen=True)
class CallStatement(Statement):
    """Function call used as a statement."""
    call: FunctionCall


@dataclass(frozen=True)
class LabelStatement(Statement):
    """::name::"""
    name: str


@dataclass(frozen=True)
class BreakStatement(Statement):
    pass


@dataclass(frozen=True)
class GotoStatement(Statement):
    """goto label"""
    label: str


@dataclass(frozen=True)
class DoStatement(Statement):
    """do body end"""
    body: Block


@dataclass(frozen=True)
class WhileStatement(Statement):
    """while condition do body end"""
    condition: Expression
    body: Block


@dataclass(frozen=True)
class RepeatStatement(Statement):
    """repeat body until condition"""
    body: Block
    condition: Expression


@dataclass(frozen=True)
class IfClause(ASTNode):
    """One 'if' or 'elseif' arm."""
    condition: Expression
    body: Block


@dataclass(frozen=True)
class IfStatement(Statement):
    """
    if/elseif/else chain.

    Attributes:
        clauses: The 'if' arm followed by each 'elseif' arm, in order
        else_body: The 'else' block, if any
    """
    clauses: tuple[IfClause, ...]
    else_body: Optional[Block] = None


@dataclass(frozen=True)
class NumericForStatement(Statement):
    """for variable = start, stop [, step] do body end"""
    variable: str
    start: Expression
    stop: Expression
    step: Optional[Expression]
    body: Block


@dataclass(frozen=True)
class GenericForStatement(Statement):
    """for names in values do body end"""
    names: tuple[str, ...]
    values: tuple[Expression, ...]
    body: Block


@dataclass(frozen=True)
class FunctionStatement(Statement):
    """function a.b:c(params) body end"""
    name: FuncName
    body: FuncBody


@dataclass(frozen=True)
class LocalFunctionStatement(Statement):
    """local function name(params) body end"""
    name: str
    body: FuncBody


@dataclass(frozen=True)
class LocalStatement(Statement):
    """
    Local declaration: local a <const>, b = 1, 2

    Attributes:
        targets: Declared names with their attributes
        values: Initializers, None when there is no '='
    """
    targets: tuple[AttName, ...]
    values: Optional[tuple[Expression, ...]] = None


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_<ClassName> methods for the node types they
    care about; everything else falls through to generic_visit, which
    visits the children.

    Usage:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.calls = 0

            def visit_FunctionCall(self, node):
                self.calls += 1
                self.generic_visit(node)
    """

    def visit(self, node: ASTNode) -> Any:
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit every child node, in field order."""
        for child in iter_child_nodes(node):
            self.visit(child)


def iter_child_nodes(node: ASTNode):
    """Yield the direct child nodes of node in field order."""
    for node_field in fields(node):
        value = getattr(node, node_field.name)
        if isinstance(value, ASTNode):
            yield value
        elif isinstance(value, tuple):
            for item in value:
                if isinstance(item, ASTNode):
                    yield item


def walk(node: ASTNode):
    """Yield node and all of its descendants, depth first."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(iter_child_nodes(current))))


# =============================================================================
# AST Tree Dumper
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Indented tree dump of an AST, for debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(chunk))

    Output:
        Chunk
          Block
            LocalStatement
              AttName name='x'
              NumeralLiteral text='1'
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Dump node and its descendants; returns the text."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def generic_visit(self, node: ASTNode) -> None:
        self._emit(f"{node.__class__.__name__}{self._attributes(node)}")
        self.indent_level += 1
        super().generic_visit(node)
        self.indent_level -= 1

    def _attributes(self, node: ASTNode) -> str:
        """Render the non-node fields of node as ' key=value' pairs."""
        parts = []
        for node_field in fields(node):
            if not node_field.compare:
                continue
            value = getattr(node, node_field.name)
            if isinstance(value, ASTNode) or value is None:
                continue
            if isinstance(value, tuple):
                if any(isinstance(item, ASTNode) for item in value):
                    continue
                value = list(value)
            if isinstance(value, Enum):
                value = value.value
            parts.append(f"{node_field.name}={value!r}")
        return "".join(f" {part}" for part in parts)


