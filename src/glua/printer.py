"""
GLUA Source Printer
===================

Re-serializes an AST to GLUA source text.

The output is not byte-for-byte identical to the parsed input (layout,
comments and string quoting may change), but parsing it again gives an
AST equal to the one printed:

    >>> from glua.parser import parse
    >>> from glua.printer import SourcePrinter
    >>> chunk = parse("local  x=1+2*3")
    >>> SourcePrinter().print(chunk)
    'local x = 1 + 2 * 3'
    >>> parse(SourcePrinter().print(chunk)) == chunk
    True

Parenthesization
----------------
Parentheses written in the source are kept in the tree as
ParenthesizedExpression nodes and printed back as they were. Further
parentheses are added only where a hand-built tree would otherwise be
re-read with a different grouping, e.g. BinaryExpression(*,
BinaryExpression(+, a, b), c) prints as '(a + b) * c'.
"""

from glua.ast import (
    ASTNode,
    ASTVisitor,
    Chunk,
    Block,
    ReturnStatement,
    Statement,
    EmptyStatement,
    AssignmentStatement,
    CallStatement,
    LocalStatement,
    RepeatStatement,
    FuncBody,
    Expression,
    StringLiteral,
    BinaryExpression,
    UnaryExpression,
    UnaryOperator,
    IndexVar,
    FieldVar,
    FunctionCall,
    PrefixExpression,
    ParenthesizedExpression,
    ExpressionListArgs,
    TableArgs,
    StringArgs,
    IndexedField,
    NamedField,
    PositionalField,
)
from glua.parser import BINARY_PRECEDENCE, UNARY_PRECEDENCE


# Precedence of anything that is not an operator expression
_ATOM_PRECEDENCE = 100

_QUOTED_ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


class SourcePrinter(ASTVisitor):
    """
    Prints an AST as GLUA source.

    Statement visitors append lines to the output; expression visitors
    return their text.

    Usage:
        printer = SourcePrinter()
        text = printer.print(chunk)
    """

    def __init__(self, indent: str = "  "):
        self.indent = indent
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Render node (a chunk, block, statement or expression) as source."""
        self.output = []
        self.indent_level = 0
        if isinstance(node, Expression):
            return self.visit(node)
        self.visit(node)
        return "\n".join(self.output)

    def generic_visit(self, node: ASTNode):
        raise TypeError(f"cannot print {node.__class__.__name__} on its own")

    def _emit(self, text: str) -> None:
        self.output.append(f"{self.indent * self.indent_level}{text}")

    def _body(self, block: Block) -> None:
        self.indent_level += 1
        self.visit(block)
        self.indent_level -= 1

    def _list(self, expressions) -> str:
        return ", ".join(self.visit(expression) for expression in expressions)

    # =========================================================================
    # Blocks
    # =========================================================================

    def visit_Chunk(self, node: Chunk) -> None:
        self.visit(node.block)

    def visit_Block(self, node: Block) -> None:
        previous = None
        for statement in node.statements:
            first_line = len(self.output)
            self.visit(statement)
            if _needs_separator(previous, statement):
                # '(' would otherwise continue the previous statement as a call
                line = self.output[first_line]
                stripped = line.lstrip()
                self.output[first_line] = f"{line[:len(line) - len(stripped)]};{stripped}"
            previous = statement
        if node.return_statement is not None:
            self.visit(node.return_statement)

    def visit_ReturnStatement(self, node: ReturnStatement) -> None:
        if node.values:
            self._emit(f"return {self._list(node.values)}")
        else:
            self._emit("return")

    # =========================================================================
    # Statements
    # =========================================================================

    def visit_EmptyStatement(self, node) -> None:
        self._emit(";")

    def visit_AssignmentStatement(self, node: AssignmentStatement) -> None:
        self._emit(f"{self._list(node.targets)} = {self._list(node.values)}")

    def visit_CallStatement(self, node: CallStatement) -> None:
        self._emit(self.visit(node.call))

    def visit_LabelStatement(self, node) -> None:
        self._emit(f"::{node.name}::")

    def visit_BreakStatement(self, node) -> None:
        self._emit("break")

    def visit_GotoStatement(self, node) -> None:
        self._emit(f"goto {node.label}")

    def visit_DoStatement(self, node) -> None:
        self._emit("do")
        self._body(node.body)
        self._emit("end")

    def visit_WhileStatement(self, node) -> None:
        self._emit(f"while {self.visit(node.condition)} do")
        self._body(node.body)
        self._emit("end")

    def visit_RepeatStatement(self, node) -> None:
        self._emit("repeat")
        self._body(node.body)
        self._emit(f"until {self.visit(node.condition)}")

    def visit_IfStatement(self, node) -> None:
        for index, clause in enumerate(node.clauses):
            keyword = "if" if index == 0 else "elseif"
            self._emit(f"{keyword} {self.visit(clause.condition)} then")
            self._body(clause.body)
        if node.else_body is not None:
            self._emit("else")
            self._body(node.else_body)
        self._emit("end")

    def visit_NumericForStatement(self, node) -> None:
        bounds = [node.start, node.stop]
        if node.step is not None:
            bounds.append(node.step)
        self._emit(f"for {node.variable} = {self._list(bounds)} do")
        self._body(node.body)
        self._emit("end")

    def visit_GenericForStatement(self, node) -> None:
        self._emit(f"for {', '.join(node.names)} in {self._list(node.values)} do")
        self._body(node.body)
        self._emit("end")

    def visit_FunctionStatement(self, node) -> None:
        name = ".".join(node.name.names)
        if node.name.method is not None:
            name += f":{node.name.method}"
        self._emit(self._function(f"function {name}", node.body))

    def visit_LocalFunctionStatement(self, node) -> None:
        self._emit(self._function(f"local function {node.name}", node.body))

    def visit_LocalStatement(self, node: LocalStatement) -> None:
        targets = []
        for target in node.targets:
            if target.attribute is not None:
                targets.append(f"{target.name} <{target.attribute}>")
            else:
                targets.append(target.name)
        text = f"local {', '.join(targets)}"
        if node.values is not None:
            text += f" = {self._list(node.values)}"
        self._emit(text)

    # =========================================================================
    # Functions
    # =========================================================================

    def _function(self, header: str, body: FuncBody) -> str:
        """
        Text of header(params) ... end.

        The body lines carry their own absolute indentation, so the result
        can be embedded in an expression on the current line.
        """
        params = []
        if body.params is not None:
            params.extend(body.params.names)
            if body.params.variadic:
                params.append("...")

        saved, self.output = self.output, []
        self._body(body.body)
        lines, self.output = self.output, saved

        closing = f"{self.indent * self.indent_level}end"
        return "\n".join([f"{header}({', '.join(params)})", *lines, closing])

    # =========================================================================
    # Expressions
    # =========================================================================

    def visit_NilLiteral(self, node) -> str:
        return "nil"

    def visit_FalseLiteral(self, node) -> str:
        return "false"

    def visit_TrueLiteral(self, node) -> str:
        return "true"

    def visit_NumeralLiteral(self, node) -> str:
        return node.text

    def visit_Varargs(self, node) -> str:
        return "..."

    def visit_StringLiteral(self, node: StringLiteral) -> str:
        if node.is_long and b"\r" not in node.value:
            return _long_string(node.value, node.quote.count("="))
        quote = node.quote if node.quote in ("'", '"') else '"'
        return _quoted_string(node.value, quote)

    def visit_FunctionExpression(self, node) -> str:
        return self._function("function", node.body)

    def visit_BinaryExpression(self, node: BinaryExpression) -> str:
        precedence, right_associative = BINARY_PRECEDENCE[node.operator]

        left = self.visit(node.left)
        left_precedence = _precedence(node.left)
        if left_precedence < precedence or (
            left_precedence == precedence and right_associative
        ):
            left = f"({left})"

        right = self.visit(node.right)
        if _wraps_right_operand(node):
            right = f"({right})"

        return f"{left} {node.operator.value} {right}"

    def visit_UnaryExpression(self, node: UnaryExpression) -> str:
        operand = self.visit(node.operand)
        if _wraps_operand(node):
            operand = f"({operand})"
        if node.operator is UnaryOperator.NOT:
            return f"not {operand}"
        if node.operator is UnaryOperator.NEGATE and operand.startswith("-"):
            # '--' would start a comment
            return f"- {operand}"
        return f"{node.operator.value}{operand}"

    def visit_NameVar(self, node) -> str:
        return node.name

    def visit_IndexVar(self, node: IndexVar) -> str:
        return f"{self.visit(node.target)}[{self.visit(node.key)}]"

    def visit_FieldVar(self, node: FieldVar) -> str:
        return f"{self.visit(node.target)}.{node.name}"

    def visit_ParenthesizedExpression(self, node: ParenthesizedExpression) -> str:
        return f"({self.visit(node.expression)})"

    def visit_FunctionCall(self, node: FunctionCall) -> str:
        target = self.visit(node.target)
        if node.method is not None:
            target += f":{node.method}"
        return f"{target}{self.visit(node.args)}"

    def visit_ExpressionListArgs(self, node: ExpressionListArgs) -> str:
        return f"({self._list(node.values)})"

    def visit_TableArgs(self, node: TableArgs) -> str:
        return f" {self.visit(node.table)}"

    def visit_StringArgs(self, node: StringArgs) -> str:
        return f" {self.visit(node.string)}"

    def visit_TableConstructor(self, node) -> str:
        return "{" + ", ".join(self._field(field) for field in node.fields) + "}"

    def _field(self, node) -> str:
        if isinstance(node, IndexedField):
            return f"[{self.visit(node.key)}] = {self.visit(node.value)}"
        if isinstance(node, NamedField):
            return f"{node.name} = {self.visit(node.value)}"
        if isinstance(node, PositionalField):
            return self.visit(node.value)
        raise TypeError(f"unknown table field {node.__class__.__name__}")


# =============================================================================
# Helpers
# =============================================================================

def _precedence(node: Expression) -> int:
    if isinstance(node, BinaryExpression):
        return BINARY_PRECEDENCE[node.operator][0]
    if isinstance(node, UnaryExpression):
        return UNARY_PRECEDENCE
    return _ATOM_PRECEDENCE


def _wraps_right_operand(node: BinaryExpression) -> bool:
    """True if the right operand is printed inside added parentheses."""
    # A unary operator is read at any precedence, so it never needs them
    if isinstance(node.right, UnaryExpression):
        return False
    precedence, right_associative = BINARY_PRECEDENCE[node.operator]
    right_precedence = _precedence(node.right)
    return right_precedence < precedence or (
        right_precedence == precedence and not right_associative
    )


def _wraps_operand(node: UnaryExpression) -> bool:
    return _precedence(node.operand) < UNARY_PRECEDENCE


def _trailing_expression(statement: Statement):
    """The expression a statement ends with, or None."""
    if isinstance(statement, CallStatement):
        return statement.call
    if isinstance(statement, AssignmentStatement):
        return statement.values[-1]
    if isinstance(statement, RepeatStatement):
        return statement.condition
    if isinstance(statement, LocalStatement) and statement.values:
        return statement.values[-1]
    return None


def _ends_with_prefix_expression(statement: Statement) -> bool:
    """True if a following '(' would be read as a call on this statement's tail."""
    node = _trailing_expression(statement)
    while isinstance(node, (BinaryExpression, UnaryExpression)):
        if isinstance(node, BinaryExpression):
            if _wraps_right_operand(node):
                return True
            node = node.right
        else:
            if _wraps_operand(node):
                return True
            node = node.operand
    return isinstance(node, PrefixExpression)


def _starts_with_paren(statement: Statement) -> bool:
    if isinstance(statement, CallStatement):
        node = statement.call
    elif isinstance(statement, AssignmentStatement):
        node = statement.targets[0]
    else:
        return False
    while isinstance(node, (IndexVar, FieldVar, FunctionCall)):
        node = node.target
    return isinstance(node, ParenthesizedExpression)


def _needs_separator(previous, statement: Statement) -> bool:
    """True if statement must be preceded by ';' to stay a separate statement."""
    return (
        previous is not None
        and not isinstance(previous, EmptyStatement)
        and _ends_with_prefix_expression(previous)
        and _starts_with_paren(statement)
    )


def _quoted_string(value: bytes, quote: str) -> str:
    """Render value as a quoted literal, escaping what cannot appear raw."""
    parts = [quote]
    for char in value.decode("utf-8", errors="surrogateescape"):
        code = ord(char)
        if char == quote:
            parts.append(f"\\{quote}")
        elif char in _QUOTED_ESCAPES:
            parts.append(_QUOTED_ESCAPES[char])
        elif 0xDC80 <= code <= 0xDCFF:
            # Byte that is not part of valid UTF-8
            parts.append(f"\\{code - 0xDC00:03d}")
        elif code < 0x20 or code == 0x7F:
            parts.append(f"\\{code:03d}")
        else:
            parts.append(char)
    parts.append(quote)
    return "".join(parts)


def _long_string(value: bytes, level: int) -> str:
    """
    Render value as a long bracket literal.

    The level is raised until the closing bracket cannot occur inside the
    value. A newline always follows the opener; it is dropped when read
    back, so a leading newline in value survives.
    """
    while True:
        closer = b"]" + b"=" * level + b"]"
        if closer not in value and not value.endswith(closer[:-1]):
            break
        level += 1
    equals = "=" * level
    text = value.decode("utf-8", errors="surrogateescape")
    return f"[{equals}[\n{text}]{equals}]"
