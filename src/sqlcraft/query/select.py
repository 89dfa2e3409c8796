"""SELECT statement node and its locking clause."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, List, Optional

from ..core.expressions import Expression, ExpressionList, Literal, Raw
from ..exceptions import ContractViolationError

if TYPE_CHECKING:
    from ..core.serializer import Serializer


class LockMode(str, Enum):
    UPDATE = "update"
    SHARE = "share"


@dataclass(frozen=True)
class LockingClause(Expression):
    """
    Row locking for a SELECT (``FOR UPDATE`` / ``FOR SHARE``).

    Dropped silently on dialects without locking reads.
    """

    mode: LockMode

    UPDATE: ClassVar["LockingClause"]
    SHARE: ClassVar["LockingClause"]

    def serialize(self, serializer: "Serializer") -> None:
        dialect = serializer.dialect
        if not dialect.supports_locking_reads:
            return
        if self.mode is LockMode.UPDATE:
            serializer.write(dialect.update_lock)
        else:
            serializer.write(dialect.share_lock)


LockingClause.UPDATE = LockingClause(LockMode.UPDATE)
LockingClause.SHARE = LockingClause(LockMode.SHARE)


@dataclass
class Select(Expression):
    """
    A SELECT statement under construction.

    Clauses are emitted in SQL order; empty clauses are skipped. OFFSET
    without LIMIT uses the dialect's unbounded LIMIT where one is required.
    """

    columns: List[Expression] = field(default_factory=list)
    tables: List[Expression] = field(default_factory=list)
    joins: List[Expression] = field(default_factory=list)
    predicate: Optional[Expression] = None
    group_by: List[Expression] = field(default_factory=list)
    having: Optional[Expression] = None
    order_by: List[Expression] = field(default_factory=list)
    limit: Optional[int] = None
    offset: Optional[int] = None
    is_distinct: bool = False
    locking_clause: Optional[Expression] = None

    def serialize(self, serializer: "Serializer") -> None:
        if not self.columns:
            raise ContractViolationError("SELECT statement has no columns")

        statement = serializer.statement()
        statement.append(
            "SELECT DISTINCT" if self.is_distinct else "SELECT",
            ExpressionList(self.columns),
        )
        if self.tables:
            statement.append("FROM", ExpressionList(self.tables))
        statement.append(*self.joins)
        if self.predicate is not None:
            statement.append("WHERE", self.predicate)
        if self.group_by:
            statement.append("GROUP BY", ExpressionList(self.group_by))
        if self.having is not None:
            statement.append("HAVING", self.having)
        if self.order_by:
            statement.append("ORDER BY", ExpressionList(self.order_by))

        if self.limit is not None:
            statement.append("LIMIT", Literal.numeric(self.limit))
        elif self.offset is not None and serializer.dialect.unbounded_limit:
            statement.append("LIMIT", Raw(serializer.dialect.unbounded_limit))
        if self.offset is not None:
            statement.append("OFFSET", Literal.numeric(self.offset))

        statement.append(self.locking_clause)
