"""
Core expression tree and serializer.

Statement nodes (SELECT, INSERT) live in :mod:`sqlcraft.query`; this package
holds the building blocks they are made of.
"""

from .expressions import (
    Alias,
    BinaryExpression,
    BinaryOperator,
    Bind,
    Column,
    Direction,
    Excluded,
    Expression,
    ExpressionList,
    Function,
    GroupExpression,
    Identifier,
    Join,
    JoinMethod,
    Literal,
    OrderBy,
    Raw,
    TableName,
    to_expression,
)
from .identifier import qualify_table, quote_identifier, quote_string
from .serializer import Serializer, serialize

__all__ = [
    "Alias",
    "BinaryExpression",
    "BinaryOperator",
    "Bind",
    "Column",
    "Direction",
    "Excluded",
    "Expression",
    "ExpressionList",
    "Function",
    "GroupExpression",
    "Identifier",
    "Join",
    "JoinMethod",
    "Literal",
    "OrderBy",
    "Raw",
    "Serializer",
    "TableName",
    "qualify_table",
    "quote_identifier",
    "quote_string",
    "serialize",
    "to_expression",
]
