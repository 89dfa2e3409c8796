"""Builder for hand-written SQL."""

from typing import TYPE_CHECKING, Any, List

from ..core.expressions import Expression, ExpressionList, Raw, to_expression
from .query import QueryFetcher

if TYPE_CHECKING:
    from ..database import Database


class RawBuilder(QueryFetcher):
    """
    Runs SQL assembled from fragments.

    Strings are emitted verbatim; any other value is bound (expressions are
    serialized as usual):

        db.raw("SELECT * FROM users WHERE id = ", user_id, " AND active").all()
    """

    def __init__(self, database: "Database", *parts: Any):
        self.database = database
        self.parts: List[Expression] = [
            Raw(part) if isinstance(part, str) else to_expression(part) for part in parts
        ]

    @property
    def query(self) -> Expression:
        return ExpressionList(self.parts, separator="")
