"""
Clause-building mixins shared by the SELECT builders.

Each mixin operates on the partial statement exposed by the concrete
builder, and every mutator returns the builder so calls can be chained:

    builder.column("id").from_("users").where("active", "=", True).limit(10)
"""

from typing import Any, Optional, Union

from typing_extensions import Self

from ..core.expressions import (
    Alias,
    BinaryExpression,
    BinaryOperator,
    Column,
    Direction,
    Expression,
    GroupExpression,
    Identifier,
    Join,
    JoinMethod,
    Literal,
    OrderBy,
    TableName,
    to_expression,
)
from ..exceptions import ContractViolationError
from ..query.select import LockingClause, Select

ColumnLike = Union[Expression, str]

_CONNECTIVES = (BinaryOperator.AND, BinaryOperator.OR)


def column_reference(value: ColumnLike) -> Expression:
    """
    Column expression for ``value``.

    ``"*"`` is the all-columns literal, ``"table.column"`` is split into a
    qualified column (``"table.*"`` included). Expressions pass through.
    """
    if not isinstance(value, str):
        return value
    if value == "*":
        return Literal.ALL
    table, dot, name = value.rpartition(".")
    if dot and table:
        return Column(Literal.ALL if name == "*" else name, table_reference(table))
    return Column(value)


def table_reference(value: ColumnLike) -> Expression:
    """Table expression for ``value``; ``"schema.table"`` is split on the last dot."""
    if not isinstance(value, str):
        return value
    schema, dot, name = value.rpartition(".")
    if dot and schema:
        return TableName(name, schema)
    return Identifier(value)


def _grouped(expression: Expression, connective: BinaryOperator) -> Expression:
    """Parenthesize an AND/OR expression being combined with the other connective."""
    if (
        isinstance(expression, BinaryExpression)
        and expression.op in _CONNECTIVES
        and expression.op is not connective
    ):
        return GroupExpression([expression])
    return expression


def combine(
    existing: Optional[Expression], addition: Expression, connective: BinaryOperator
) -> Expression:
    """Join ``addition`` onto an optional root predicate with AND/OR."""
    if existing is None:
        return addition
    return BinaryExpression(
        _grouped(existing, connective), connective, _grouped(addition, connective)
    )


def build_predicate(*args: Any) -> Expression:
    """
    Predicate from ``(expression)`` or ``(lhs, op, rhs)``.

    ``lhs`` strings are columns, ``rhs`` values are bound (lists become an
    IN-list, subqueries are parenthesized). Comparing to ``None`` with
    ``=``/``!=`` produces ``IS NULL``/``IS NOT NULL``.

    Raises:
        ContractViolationError: For ``IN``/``NOT IN`` against an empty list
    """
    if len(args) == 1:
        if not isinstance(args[0], Expression):
            raise TypeError(f"Expected an Expression predicate, got {type(args[0]).__name__}")
        return args[0]
    if len(args) != 3:
        raise TypeError(f"Expected (expression) or (lhs, op, rhs), got {len(args)} arguments")

    lhs, op, rhs = args
    op = BinaryOperator.parse(op)
    if rhs is None:
        if op is BinaryOperator.EQUAL:
            op = BinaryOperator.IS
        elif op is BinaryOperator.NOT_EQUAL:
            op = BinaryOperator.IS_NOT
        return BinaryExpression(column_reference(lhs), op, Literal.NULL)
    if op in (BinaryOperator.IN, BinaryOperator.NOT_IN) and isinstance(rhs, (list, tuple)):
        if not rhs:
            raise ContractViolationError(f"{op.value} requires at least one value")
    return BinaryExpression(column_reference(lhs), op, to_expression(rhs))


class PredicateBuilderMixin:
    """WHERE clause; the builder stores a single root predicate."""

    @property
    def predicate(self) -> Optional[Expression]:
        raise NotImplementedError

    @predicate.setter
    def predicate(self, value: Optional[Expression]) -> None:
        raise NotImplementedError

    def where(self, *args: Any) -> Self:
        self.predicate = combine(self.predicate, build_predicate(*args), BinaryOperator.AND)
        return self

    def or_where(self, *args: Any) -> Self:
        self.predicate = combine(self.predicate, build_predicate(*args), BinaryOperator.OR)
        return self

    def where_column(
        self, lhs: ColumnLike, op: Union[BinaryOperator, str], rhs: ColumnLike
    ) -> Self:
        """Compare two columns, e.g. ``where_column("a.id", "=", "b.a_id")``."""
        return self.where(
            BinaryExpression(column_reference(lhs), op, column_reference(rhs))
        )


class SecondaryPredicateBuilderMixin:
    """HAVING clause; the builder stores a single root predicate."""

    @property
    def secondary_predicate(self) -> Optional[Expression]:
        raise NotImplementedError

    @secondary_predicate.setter
    def secondary_predicate(self, value: Optional[Expression]) -> None:
        raise NotImplementedError

    def having(self, *args: Any) -> Self:
        self.secondary_predicate = combine(
            self.secondary_predicate, build_predicate(*args), BinaryOperator.AND
        )
        return self

    def or_having(self, *args: Any) -> Self:
        self.secondary_predicate = combine(
            self.secondary_predicate, build_predicate(*args), BinaryOperator.OR
        )
        return self


class JoinBuilderMixin:
    """Explicit JOINs. Listing several tables in FROM does not join them."""

    select: Select

    def join(
        self,
        table: ColumnLike,
        on: Expression,
        method: Union[JoinMethod, str] = JoinMethod.INNER,
    ) -> Self:
        self.select.joins.append(
            Join(_join_method(method), table_reference(table), on)
        )
        return self

    def join_on(
        self,
        table: ColumnLike,
        left: ColumnLike,
        op: Union[BinaryOperator, str],
        right: ColumnLike,
        method: Union[JoinMethod, str] = JoinMethod.INNER,
    ) -> Self:
        """``join_on("planets", "planets.star_id", "=", "stars.id")``."""
        condition = BinaryExpression(column_reference(left), op, column_reference(right))
        return self.join(table, condition, method)

    def join_expression(self, expression: Expression) -> Self:
        """Append a prebuilt join (or any expression rendered in the join position)."""
        self.select.joins.append(expression)
        return self


class PartialResultBuilderMixin:
    """ORDER BY (append), LIMIT and OFFSET (replace)."""

    select: Select

    def order_by(
        self,
        column: ColumnLike,
        direction: Union[Direction, str] = Direction.ASCENDING,
    ) -> Self:
        self.select.order_by.append(OrderBy(column_reference(column), Direction.parse(direction)))
        return self

    def limit(self, count: Optional[int]) -> Self:
        self.select.limit = _non_negative("limit", count)
        return self

    def offset(self, count: Optional[int]) -> Self:
        self.select.offset = _non_negative("offset", count)
        return self


def _join_method(method: Union[JoinMethod, str]) -> JoinMethod:
    if isinstance(method, JoinMethod):
        return method
    text = method.strip().upper()
    if text == "FULL":
        return JoinMethod.FULL
    return JoinMethod(text)


def _non_negative(name: str, value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    return value


class SubqueryClauseBuilder(
    JoinBuilderMixin,
    PredicateBuilderMixin,
    SecondaryPredicateBuilderMixin,
    PartialResultBuilderMixin,
):
    """
    Everything needed to assemble a SELECT, without executing it.

    Concrete builders own the :class:`~sqlcraft.query.select.Select` being
    built in ``self.select``.
    """

    def __init__(self) -> None:
        self.select = Select()

    @property
    def predicate(self) -> Optional[Expression]:
        return self.select.predicate

    @predicate.setter
    def predicate(self, value: Optional[Expression]) -> None:
        self.select.predicate = value

    @property
    def secondary_predicate(self) -> Optional[Expression]:
        return self.select.having

    @secondary_predicate.setter
    def secondary_predicate(self, value: Optional[Expression]) -> None:
        self.select.having = value

    def column(
        self,
        name: ColumnLike,
        table: Optional[str] = None,
        alias: Optional[str] = None,
    ) -> Self:
        """
        Add a result column.

        Args:
            name: Column name, ``"*"``, or any expression
            table: Table qualifying ``name``
            alias: Name for the column in the result (``AS``)
        """
        if isinstance(name, str) and table is not None:
            expression: Expression = Column(
                Literal.ALL if name == "*" else name, table_reference(table)
            )
        else:
            expression = column_reference(name)
        if alias is not None:
            expression = Alias(expression, Identifier(alias))
        self.select.columns.append(expression)
        return self

    def columns(self, *names: ColumnLike) -> Self:
        for name in names:
            self.column(name)
        return self

    def from_(self, table: ColumnLike, alias: Optional[str] = None) -> Self:
        expression = table_reference(table)
        if alias is not None:
            expression = Alias(expression, Identifier(alias))
        self.select.tables.append(expression)
        return self

    def group_by(self, *columns: ColumnLike) -> Self:
        self.select.group_by.extend(column_reference(column) for column in columns)
        return self

    def distinct(self) -> Self:
        self.select.is_distinct = True
        return self

    def for_(self, lock: LockingClause) -> Self:
        """Lock the selected rows, e.g. ``for_(LockingClause.UPDATE)``. Replaces any earlier lock."""
        self.select.locking_clause = lock
        return self

    def locking_clause(self, expression: Expression) -> Self:
        """Set an arbitrary locking clause expression. Replaces any earlier lock."""
        self.select.locking_clause = expression
        return self
