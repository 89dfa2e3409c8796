"""
sqlcraft - database-agnostic SQL statement builder.

Statements are assembled as an expression tree through fluent builders,
serialized into dialect-correct SQL text plus ordered bind values, and
executed through a pluggable :class:`~sqlcraft.database.Database` that can
report per-execution performance metrics.
"""

__version__ = "0.1.0"

from sqlcraft.adapters import SQLAlchemyDatabase
from sqlcraft.builders import InsertBuilder, RawBuilder, SelectBuilder, SubqueryBuilder
from sqlcraft.core import Expression, Literal, serialize
from sqlcraft.database import Database
from sqlcraft.dialects import Dialect, get_dialect
from sqlcraft.monitoring import Metric, PerformanceRecord
from sqlcraft.query import LockingClause
from sqlcraft.results import Result
from sqlcraft.rows import Row

__all__ = [
    "Database",
    "Dialect",
    "Expression",
    "InsertBuilder",
    "Literal",
    "LockingClause",
    "Metric",
    "PerformanceRecord",
    "RawBuilder",
    "Result",
    "Row",
    "SQLAlchemyDatabase",
    "SelectBuilder",
    "SubqueryBuilder",
    "get_dialect",
    "serialize",
]
