"""Fluent statement builders."""

from .clauses import SubqueryClauseBuilder
from .insert import InsertBuilder
from .query import QueryBuilder, QueryFetcher
from .raw import RawBuilder
from .select import SelectBuilder, SubqueryBuilder

__all__ = [
    "InsertBuilder",
    "QueryBuilder",
    "QueryFetcher",
    "RawBuilder",
    "SelectBuilder",
    "SubqueryBuilder",
    "SubqueryClauseBuilder",
]
