"""
INSERT statement node with conflict resolution and RETURNING.

Conflict resolution is spelled per dialect:

- ``ON CONFLICT (...) DO NOTHING | DO UPDATE SET ...`` (PostgreSQL, SQLite >= 3.24)
- ``INSERT IGNORE`` / ``ON DUPLICATE KEY UPDATE ...`` (MySQL)
- ``INSERT OR IGNORE`` (older SQLite)

A dialect that expresses "do nothing" as a statement modifier emits the
modifier instead of the trailing clause, never both.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Tuple

from ..core.expressions import (
    BinaryExpression,
    BinaryOperator,
    Expression,
    ExpressionList,
    GroupExpression,
    Literal,
)
from ..dialects.base import ConflictSyntax
from ..exceptions import ContractViolationError, InsertRowWidthError, UnsupportedFeatureError

if TYPE_CHECKING:
    from ..core.serializer import Serializer
    from ..dialects.base import Dialect


class ConflictAction(str, Enum):
    IGNORE = "ignore"
    UPDATE = "update"


Assignment = Tuple[Expression, Expression]


@dataclass
class ConflictResolutionStrategy(Expression):
    """
    What to do when an inserted row collides with a unique key.

    Args:
        targets: Conflict target columns (ignored by MySQL)
        action: IGNORE keeps the existing row, UPDATE applies ``assignments``
        assignments: (column, value) pairs for the update
        predicate: Optional WHERE filter on the update (ON CONFLICT dialects only)
    """

    targets: List[Expression] = field(default_factory=list)
    action: ConflictAction = ConflictAction.IGNORE
    assignments: List[Assignment] = field(default_factory=list)
    predicate: Optional[Expression] = None

    @property
    def ignores(self) -> bool:
        return self.action is ConflictAction.IGNORE or not self.assignments

    def query_modifier(self, dialect: "Dialect") -> Optional[str]:
        """Keyword placed after INSERT when the dialect spells this strategy as a modifier."""
        return dialect.conflict_modifier(self.ignores)

    def serialize(self, serializer: "Serializer") -> None:
        dialect = serializer.dialect
        if self.query_modifier(dialect):
            return

        if dialect.conflict_syntax is ConflictSyntax.STANDARD:
            serializer.write("ON CONFLICT")
            if self.targets:
                serializer.write(" ")
                serializer.write_expression(GroupExpression(self.targets))
            if self.ignores:
                serializer.write(" DO NOTHING")
                return
            serializer.write(" DO UPDATE SET ")
            self._write_assignments(serializer)
            if self.predicate is not None:
                serializer.write(" WHERE ")
                serializer.write_expression(self.predicate)
        elif dialect.conflict_syntax is ConflictSyntax.MYSQL:
            serializer.write("ON DUPLICATE KEY UPDATE ")
            self._write_assignments(serializer)
        else:
            serializer.logger.debug(
                "sql.insert.conflict_dropped",
                dialect=dialect.name,
                action=self.action.value,
            )

    def _write_assignments(self, serializer: "Serializer") -> None:
        serializer.write_list(
            [
                BinaryExpression(column, BinaryOperator.EQUAL, value)
                for column, value in self.assignments
            ]
        )


@dataclass
class Returning(Expression):
    """``RETURNING`` clause; dropped on dialects that cannot return rows from INSERT."""

    columns: List[Expression] = field(default_factory=list)

    def serialize(self, serializer: "Serializer") -> None:
        if not serializer.dialect.supports_returning:
            return
        serializer.write("RETURNING ")
        serializer.write_list(self.columns or [Literal.ALL])


@dataclass
class Insert(Expression):
    """
    An INSERT statement under construction.

    Every row of ``values`` must hold exactly one expression per column.
    """

    table: Expression
    columns: List[Expression] = field(default_factory=list)
    values: List[List[Expression]] = field(default_factory=list)
    conflict_strategy: Optional[ConflictResolutionStrategy] = None
    returning: Optional[Returning] = None

    def serialize(self, serializer: "Serializer") -> None:
        dialect = serializer.dialect

        if not self.columns:
            raise ContractViolationError("INSERT statement has no columns")
        if not self.values:
            raise ContractViolationError("INSERT statement has no rows")

        width = len(self.columns)
        for row_index, row in enumerate(self.values):
            if len(row) != width:
                raise InsertRowWidthError(width, len(row), row_index)

        if len(self.values) > 1 and not dialect.supports_multirow_insert:
            if serializer.multirow_insert_policy == "error":
                raise UnsupportedFeatureError("multi-row INSERT", dialect.name)
            serializer.logger.warning(
                "sql.insert.multirow_unsupported",
                dialect=dialect.name,
                row_count=len(self.values),
            )

        modifier = None
        if self.conflict_strategy is not None:
            modifier = self.conflict_strategy.query_modifier(dialect)

        statement = serializer.statement()
        statement.append("INSERT", modifier, "INTO", self.table)
        statement.append(GroupExpression(self.columns))
        statement.append(
            "VALUES",
            ExpressionList([GroupExpression(row) for row in self.values]),
        )
        statement.append(self.conflict_strategy, self.returning)
