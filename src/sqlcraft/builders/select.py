"""SELECT builders."""

from typing import TYPE_CHECKING

from ..core.expressions import Expression, GroupExpression
from ..query.select import Select
from .clauses import SubqueryClauseBuilder
from .query import QueryFetcher

if TYPE_CHECKING:
    from ..core.serializer import Serializer
    from ..database import Database


class SelectBuilder(QueryFetcher, SubqueryClauseBuilder):
    """
    Builds and runs a SELECT against a database.

    Example:
        >>> users = (
        ...     db.select()
        ...     .columns("id", "name")
        ...     .from_("users")
        ...     .where("id", "=", 1)
        ...     .all(decoding=User)
        ...     .result()
        ... )  # doctest: +SKIP
    """

    def __init__(self, database: "Database"):
        SubqueryClauseBuilder.__init__(self)
        self.database = database

    @property
    def query(self) -> Expression:
        return self.select


class SubqueryBuilder(SubqueryClauseBuilder, Expression):
    """
    Builds a SELECT without a database, for use inside another statement.

    The builder is itself an expression that serializes as the parenthesized
    SELECT, so it can be passed wherever a value or table is expected:

        active = SubqueryBuilder().column("user_id").from_("sessions")
        db.select().column("*").from_("users").where("id", "in", active)
    """

    @property
    def query(self) -> Select:
        return self.select

    def serialize(self, serializer: "Serializer") -> None:
        serializer.write_expression(GroupExpression([self.select]))
