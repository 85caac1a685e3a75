"""Dux AST node hierarchy.

Every node keeps the token it was created from and renders itself back to a
canonical, fully parenthesized string.  The rendering is used for diagnostics,
for displaying function values, and for checking operator precedence: an
expression's rendering re-parses to a tree with the same rendering.

Nodes are immutable once the parser has built them, so a single tree can be
evaluated any number of times.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Tuple

from dux.dux_token import DuxToken


class DuxNode(ABC):
    """Abstract base class for all Dux AST nodes."""

    token: DuxToken

    def token_literal(self) -> str:
        """Return the literal text of the token this node was built from."""
        return self.token.literal

    @abstractmethod
    def __str__(self) -> str:
        """Render the node as canonical source text."""


class DuxStatement(DuxNode):
    """Base class for statement nodes."""


class DuxExpression(DuxNode):
    """Base class for expression nodes."""


def render_statements(statements: Tuple[DuxStatement, ...]) -> str:
    """
    Render a statement sequence so that it re-parses to the same statements.

    An expression statement followed by another statement gets a `;`, otherwise a
    following `(`, `-` or `[` would continue the expression as a call, a subtraction
    or an index.
    """
    rendered = []
    last = len(statements) - 1

    for position, statement in enumerate(statements):
        text = str(statement)
        if isinstance(statement, DuxExpressionStatement) and position != last:
            text += ";"

        rendered.append(text)

    return " ".join(rendered)


@dataclass(frozen=True)
class DuxIdentifier(DuxExpression):
    """A name reference, e.g. `x`."""
    token: DuxToken
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DuxIntegerLiteral(DuxExpression):
    """An integer literal, already range-checked by the parser."""
    token: DuxToken
    value: int

    def __str__(self) -> str:
        return self.token.literal


@dataclass(frozen=True)
class DuxBooleanLiteral(DuxExpression):
    """`true` or `false`."""
    token: DuxToken
    value: bool

    def __str__(self) -> str:
        return self.token.literal


@dataclass(frozen=True)
class DuxStringLiteral(DuxExpression):
    """A string literal; the value is the raw text between the quotes."""
    token: DuxToken
    value: str

    def __str__(self) -> str:
        return f'"{self.value}"'


@dataclass(frozen=True)
class DuxArrayLiteral(DuxExpression):
    """`[a, b, c]`"""
    token: DuxToken
    elements: Tuple[DuxExpression, ...] = ()

    def __str__(self) -> str:
        return "[" + ", ".join(str(element) for element in self.elements) + "]"


@dataclass(frozen=True)
class DuxHashLiteral(DuxExpression):
    """`{key: value, ...}` with pairs kept in source order."""
    token: DuxToken
    pairs: Tuple[Tuple[DuxExpression, DuxExpression], ...] = ()

    def __str__(self) -> str:
        return "{" + ", ".join(f"{key}: {value}" for key, value in self.pairs) + "}"


@dataclass(frozen=True)
class DuxPrefixExpression(DuxExpression):
    """`!right` or `-right`."""
    token: DuxToken
    operator: str
    right: DuxExpression

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


@dataclass(frozen=True)
class DuxInfixExpression(DuxExpression):
    """`left operator right`."""
    token: DuxToken
    left: DuxExpression
    operator: str
    right: DuxExpression

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class DuxIndexExpression(DuxExpression):
    """`left[index]`."""
    token: DuxToken
    left: DuxExpression
    index: DuxExpression

    def __str__(self) -> str:
        return f"({self.left}[{self.index}])"


@dataclass(frozen=True)
class DuxBlockStatement(DuxStatement):
    """A braced sequence of statements."""
    token: DuxToken
    statements: Tuple[DuxStatement, ...] = ()

    def __str__(self) -> str:
        return render_statements(self.statements)


@dataclass(frozen=True)
class DuxIfExpression(DuxExpression):
    """`if (condition) { consequence } else { alternative }`; the else branch is optional."""
    token: DuxToken
    condition: DuxExpression
    consequence: DuxBlockStatement
    alternative: DuxBlockStatement | None = None

    def __str__(self) -> str:
        rendered = f"if ({self.condition}) {{ {self.consequence} }}"
        if self.alternative is not None:
            rendered += f" else {{ {self.alternative} }}"

        return rendered


@dataclass(frozen=True)
class DuxFunctionLiteral(DuxExpression):
    """`fn(parameters) { body }`."""
    token: DuxToken
    parameters: Tuple[DuxIdentifier, ...]
    body: DuxBlockStatement

    def __str__(self) -> str:
        params = ", ".join(str(parameter) for parameter in self.parameters)
        return f"{self.token_literal()}({params}) {{ {self.body} }}"


@dataclass(frozen=True)
class DuxCallExpression(DuxExpression):
    """`function(arguments)`; the callee is any expression."""
    token: DuxToken
    function: DuxExpression
    arguments: Tuple[DuxExpression, ...] = ()

    def __str__(self) -> str:
        args = ", ".join(str(argument) for argument in self.arguments)
        return f"{self.function}({args})"


@dataclass(frozen=True)
class DuxLetStatement(DuxStatement):
    """`let name = value;`"""
    token: DuxToken
    name: DuxIdentifier
    value: DuxExpression

    def __str__(self) -> str:
        return f"{self.token_literal()} {self.name} = {self.value};"


@dataclass(frozen=True)
class DuxReturnStatement(DuxStatement):
    """`return value;`"""
    token: DuxToken
    return_value: DuxExpression

    def __str__(self) -> str:
        return f"{self.token_literal()} {self.return_value};"


@dataclass(frozen=True)
class DuxExpressionStatement(DuxStatement):
    """A statement consisting of a single expression."""
    token: DuxToken
    expression: DuxExpression

    def __str__(self) -> str:
        return str(self.expression)


@dataclass(frozen=True)
class DuxProgram(DuxNode):
    """The root of every parse: a sequence of top-level statements."""
    token: DuxToken
    statements: Tuple[DuxStatement, ...] = ()

    def __str__(self) -> str:
        return render_statements(self.statements)
