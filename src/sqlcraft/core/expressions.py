"""
Expression AST nodes.

Every node serializes itself into a :class:`~sqlcraft.core.serializer.Serializer`,
consulting the serializer's dialect for quoting and feature gating. The node
set is closed: statement nodes live in :mod:`sqlcraft.query`, and arbitrary
SQL goes through :class:`Raw`.

Example:
    >>> from sqlcraft.core.expressions import BinaryExpression, Bind, Column
    >>> from sqlcraft.core.serializer import serialize
    >>> from sqlcraft.dialects import SQLiteDialect
    >>> serialize(BinaryExpression(Column("id"), "=", Bind(1)), SQLiteDialect())
    ('"id" = ?', [1])
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, List, Optional, Union

if TYPE_CHECKING:
    from .serializer import Serializer


class Expression(ABC):
    """Base class for every node of the statement tree."""

    @abstractmethod
    def serialize(self, serializer: "Serializer") -> None:
        """Append this node's SQL text and bind values to ``serializer``."""


@dataclass
class Raw(Expression):
    """Verbatim SQL text. Not quoted, escaped or checked."""

    sql: str

    def serialize(self, serializer: "Serializer") -> None:
        serializer.write(self.sql)


@dataclass(frozen=True)
class Identifier(Expression):
    """A quoted name: table, column, alias."""

    name: str

    def serialize(self, serializer: "Serializer") -> None:
        serializer.write(serializer.dialect.quote(self.name))


@dataclass(frozen=True)
class TableName(Expression):
    """A table name with an optional schema: ``"schema"."table"``."""

    name: str
    schema: Optional[str] = None

    def serialize(self, serializer: "Serializer") -> None:
        serializer.write(serializer.dialect.qualify(self.name, self.schema))


class LiteralKind(str, Enum):
    ALL = "all"
    DEFAULT = "default"
    NULL = "null"
    BOOLEAN = "boolean"
    NUMERIC = "numeric"
    STRING = "string"


@dataclass(frozen=True)
class Literal(Expression):
    """
    A value inlined into the SQL text.

    Use the class constants ``Literal.ALL`` (``*``), ``Literal.DEFAULT`` and
    ``Literal.NULL``, or the ``boolean``/``numeric``/``string`` factories.
    User-supplied values should normally be bound with :class:`Bind` instead.
    """

    kind: LiteralKind
    value: Any = None

    ALL: ClassVar["Literal"]
    DEFAULT: ClassVar["Literal"]
    NULL: ClassVar["Literal"]

    @classmethod
    def boolean(cls, value: bool) -> "Literal":
        return cls(LiteralKind.BOOLEAN, bool(value))

    @classmethod
    def numeric(cls, value: Union[int, float, str]) -> "Literal":
        return cls(LiteralKind.NUMERIC, str(value))

    @classmethod
    def string(cls, value: str) -> "Literal":
        return cls(LiteralKind.STRING, value)

    def serialize(self, serializer: "Serializer") -> None:
        dialect = serializer.dialect
        if self.kind is LiteralKind.ALL:
            serializer.write("*")
        elif self.kind is LiteralKind.DEFAULT:
            serializer.write(dialect.literal_default)
        elif self.kind is LiteralKind.NULL:
            serializer.write("NULL")
        elif self.kind is LiteralKind.BOOLEAN:
            serializer.write(dialect.literal_boolean(self.value))
        elif self.kind is LiteralKind.NUMERIC:
            serializer.write(self.value)
        else:
            serializer.write(dialect.literal_string(self.value))


Literal.ALL = Literal(LiteralKind.ALL)
Literal.DEFAULT = Literal(LiteralKind.DEFAULT)
Literal.NULL = Literal(LiteralKind.NULL)


@dataclass
class Bind(Expression):
    """A value transmitted alongside the SQL text as a bound parameter."""

    value: Any

    def serialize(self, serializer: "Serializer") -> None:
        serializer.write_bind(self.value)


@dataclass
class Column(Expression):
    """
    A column reference, optionally qualified by a table.

    Strings are wrapped in :class:`Identifier`; pass ``Literal.ALL`` as the
    name for ``table.*``.
    """

    name: Union[Expression, str]
    table: Optional[Union[Expression, str]] = None

    def __post_init__(self) -> None:
        if isinstance(self.name, str):
            self.name = Identifier(self.name)
        if isinstance(self.table, str):
            self.table = Identifier(self.table)

    def serialize(self, serializer: "Serializer") -> None:
        if self.table is not None:
            serializer.write_expression(self.table)
            serializer.write(".")
        serializer.write_expression(self.name)


@dataclass
class Alias(Expression):
    """``expression AS alias``."""

    expression: Expression
    alias: Expression

    def serialize(self, serializer: "Serializer") -> None:
        serializer.write_expression(self.expression)
        serializer.write(" AS ")
        serializer.write_expression(self.alias)


@dataclass
class ExpressionList(Expression):
    """Expressions joined by a separator (comma by default)."""

    expressions: List[Expression] = field(default_factory=list)
    separator: str = ", "

    def serialize(self, serializer: "Serializer") -> None:
        serializer.write_list(self.expressions, self.separator)


@dataclass
class GroupExpression(Expression):
    """A parenthesized, comma-separated list."""

    expressions: List[Expression] = field(default_factory=list)

    def __post_init__(self) -> None:
        if isinstance(self.expressions, Expression):
            self.expressions = [self.expressions]

    def serialize(self, serializer: "Serializer") -> None:
        serializer.write("(")
        serializer.write_list(self.expressions)
        serializer.write(")")


class BinaryOperator(str, Enum):
    EQUAL = "="
    NOT_EQUAL = "<>"
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    IN = "IN"
    NOT_IN = "NOT IN"
    LIKE = "LIKE"
    NOT_LIKE = "NOT LIKE"
    IS = "IS"
    IS_NOT = "IS NOT"
    AND = "AND"
    OR = "OR"
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    CONCATENATE = "||"

    @classmethod
    def parse(cls, op: Union["BinaryOperator", str]) -> "BinaryOperator":
        """Accept an operator member or its SQL spelling (``"!="`` means ``<>``)."""
        if isinstance(op, BinaryOperator):
            return op
        text = " ".join(op.strip().upper().split())
        if text == "!=":
            text = "<>"
        if text == "==":
            text = "="
        return cls(text)


@dataclass
class BinaryExpression(Expression):
    """``left OP right``."""

    left: Expression
    op: Union[BinaryOperator, str]
    right: Expression

    def __post_init__(self) -> None:
        self.op = BinaryOperator.parse(self.op)

    def serialize(self, serializer: "Serializer") -> None:
        serializer.write_expression(self.left)
        serializer.write(f" {self.op.value} ")
        serializer.write_expression(self.right)


@dataclass
class Function(Expression):
    """``NAME(arg, ...)``; the name is emitted verbatim."""

    name: str
    args: List[Expression] = field(default_factory=list)

    def serialize(self, serializer: "Serializer") -> None:
        serializer.write(self.name)
        serializer.write("(")
        serializer.write_list(self.args)
        serializer.write(")")


class JoinMethod(str, Enum):
    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    FULL = "FULL OUTER"


@dataclass
class Join(Expression):
    """``METHOD JOIN table ON condition``."""

    method: JoinMethod
    table: Expression
    condition: Expression

    def serialize(self, serializer: "Serializer") -> None:
        serializer.write(f"{self.method.value} JOIN ")
        serializer.write_expression(self.table)
        serializer.write(" ON ")
        serializer.write_expression(self.condition)


class Direction(str, Enum):
    ASCENDING = "ASC"
    DESCENDING = "DESC"

    @classmethod
    def parse(cls, direction: Union["Direction", str]) -> "Direction":
        if isinstance(direction, Direction):
            return direction
        text = direction.strip().upper()
        return {"ASC": cls.ASCENDING, "DESC": cls.DESCENDING}.get(text) or cls(text)


@dataclass
class OrderBy(Expression):
    expression: Expression
    direction: Direction = Direction.ASCENDING

    def serialize(self, serializer: "Serializer") -> None:
        serializer.write_expression(self.expression)
        serializer.write(f" {self.direction.value}")


@dataclass
class Excluded(Expression):
    """
    The value proposed for ``column`` by the row that hit a conflict.

    ``EXCLUDED."col"`` on ON CONFLICT dialects, ``VALUES(`col`)`` on MySQL.
    """

    column: Union[Expression, str]

    def __post_init__(self) -> None:
        if isinstance(self.column, str):
            self.column = Identifier(self.column)

    def serialize(self, serializer: "Serializer") -> None:
        from ..dialects.base import ConflictSyntax

        if serializer.dialect.conflict_syntax is ConflictSyntax.MYSQL:
            serializer.write("VALUES(")
            serializer.write_expression(self.column)
            serializer.write(")")
        else:
            serializer.write("EXCLUDED.")
            serializer.write_expression(self.column)


def to_expression(value: Any) -> Expression:
    """
    Convert a Python value into an expression.

    Expressions pass through, lists/tuples become a parenthesized group of
    binds, anything else is bound.
    """
    if isinstance(value, Expression):
        return value
    if isinstance(value, (list, tuple)):
        return GroupExpression([to_expression(item) for item in value])
    return Bind(value)
