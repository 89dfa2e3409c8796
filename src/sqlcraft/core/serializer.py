"""
Statement serializer.

A :class:`Serializer` accumulates SQL text and an ordered list of bind values
while an expression tree serializes itself into it. Bind values correspond
1:1, in emission order, to the placeholders written into the text.

Example:
    >>> from sqlcraft.core.expressions import Bind, Column, BinaryExpression
    >>> from sqlcraft.dialects import PostgreSQLDialect
    >>> sql, binds = serialize(
    ...     BinaryExpression(Column("id"), "=", Bind(7)), PostgreSQLDialect()
    ... )
    >>> print(sql, binds)
    "id" = $1 [7]
"""

from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Tuple

from ..utils.logging import get_logger
from .expressions import Expression

if TYPE_CHECKING:
    from ..dialects.base import Dialect


class StatementWriter:
    """
    Writes space-separated statement clauses.

    ``append`` emits a separating space before every clause but the first,
    and takes it back when the appended expression turned out to write
    nothing (e.g. a locking clause dropped by the dialect).
    """

    def __init__(self, serializer: "Serializer"):
        self._serializer = serializer
        self._started = False

    def append(self, *parts: Any) -> "StatementWriter":
        for part in parts:
            if part is None:
                continue
            mark = self._serializer.mark()
            if self._started:
                self._serializer.write(" ")
            body = self._serializer.mark()
            if isinstance(part, str):
                self._serializer.write(part)
            else:
                self._serializer.write_expression(part)
            if self._serializer.mark() == body:
                self._serializer.truncate(mark)
            else:
                self._started = True
        return self


class Serializer:
    """
    Scratch state for a single serialization.

    Args:
        dialect: Dialect consulted for quoting, placeholders and feature gating
        logger: Logger used for degraded-feature warnings (module logger by default)
        multirow_insert_policy: ``"warn"`` or ``"error"`` for multi-row INSERT
            on single-row dialects
    """

    def __init__(
        self,
        dialect: "Dialect",
        logger: Optional[Any] = None,
        multirow_insert_policy: str = "warn",
    ):
        self.dialect = dialect
        self.logger = logger if logger is not None else get_logger(__name__)
        self.multirow_insert_policy = multirow_insert_policy
        self.binds: List[Any] = []
        self._parts: List[str] = []

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def mark(self) -> int:
        return len(self._parts)

    def truncate(self, mark: int) -> None:
        del self._parts[mark:]

    def write(self, text: str) -> None:
        if text:
            self._parts.append(text)

    def write_expression(self, expression: Expression) -> None:
        """
        Serialize a child node.

        Raises:
            TypeError: If ``expression`` is not an :class:`Expression`
        """
        if not isinstance(expression, Expression):
            raise TypeError(
                f"Cannot serialize {type(expression).__name__!r}: not an Expression node"
            )
        expression.serialize(self)

    def write_bind(self, value: Any) -> None:
        self.binds.append(value)
        self.write(self.dialect.bind_placeholder(len(self.binds)))

    def write_list(self, expressions: Sequence[Expression], separator: str = ", ") -> None:
        for index, expression in enumerate(expressions):
            if index:
                self.write(separator)
            self.write_expression(expression)

    def statement(self) -> StatementWriter:
        return StatementWriter(self)

    def result(self) -> Tuple[str, List[Any]]:
        return self.text, list(self.binds)


def serialize(
    expression: Expression,
    dialect: "Dialect",
    logger: Optional[Any] = None,
    multirow_insert_policy: str = "warn",
) -> Tuple[str, List[Any]]:
    """
    Serialize an expression tree into SQL text and ordered bind values.

    A fresh :class:`Serializer` is used per call, so concurrent calls on a
    tree that is no longer being mutated are safe.

    Args:
        expression: Root of the tree (usually a Select or Insert)
        dialect: Target dialect
        logger: Logger for degraded-feature warnings
        multirow_insert_policy: ``"warn"`` (default) or ``"error"``

    Returns:
        Tuple of (sql_text, binds)

    Raises:
        TypeError: If a non-Expression object is found in the tree
        ContractViolationError: If the tree is structurally invalid
        UnsupportedFeatureError: For multi-row INSERT under the ``error`` policy
    """
    serializer = Serializer(dialect, logger=logger, multirow_insert_policy=multirow_insert_policy)
    serializer.write_expression(expression)
    return serializer.result()
