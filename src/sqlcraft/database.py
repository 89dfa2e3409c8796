"""
Connection abstraction and execution funnel.

Every way of running a statement ends in :meth:`Database.execute`, the only
primitive a connection has to provide. Performance tracking and typed
decoding are layered on top of it here, and the builder conveniences
(``all``, ``first``, ...) only ever call the methods of this class.

Example:
    >>> db = SQLAlchemyDatabase(engine.connect())          # doctest: +SKIP
    >>> users = db.select().column("*").from_("users").all().result()  # doctest: +SKIP
"""

import time
from abc import ABC, abstractmethod
from concurrent.futures import Future
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, List, Tuple, Type, TypeVar, Union

from .config import get_settings
from .core.expressions import Expression
from .core.serializer import Serializer, serialize
from .futures import map_future
from .monitoring.performance import Duration, Metric, PerformanceRecord
from .results import Result

if TYPE_CHECKING:
    from .builders.insert import InsertBuilder
    from .builders.raw import RawBuilder
    from .builders.select import SelectBuilder
    from .dialects.base import Dialect
    from .rows import Row

T = TypeVar("T")

RowCallback = Callable[["Row"], None]


class Database(ABC):
    """
    Abstract database connection.

    Subclasses provide ``dialect``, ``logger`` and :meth:`execute`. They may
    override :meth:`execute_with_performance_tracking` to report finer
    grained metrics than the default wall-clock measurement.
    """

    @property
    @abstractmethod
    def dialect(self) -> "Dialect":
        """Dialect used to serialize statements for this connection."""

    @property
    @abstractmethod
    def logger(self) -> Any:
        """Logger receiving query and degraded-feature events."""

    @abstractmethod
    def execute(self, query: Expression, on_row: RowCallback) -> "Future[None]":
        """
        Execute ``query``, calling ``on_row`` for every result row.

        Rows are delivered sequentially, in the order the driver produces
        them, before the returned future completes. Driver errors fail the
        future unchanged.
        """

    def execute_with_performance_tracking(
        self, query: Expression, on_row: RowCallback
    ) -> "Future[PerformanceRecord]":
        """
        Execute ``query`` and resolve to its performance record.

        This fallback only measures the full execution duration and sets the
        direct-execution flag.
        """
        record = PerformanceRecord()
        started = time.perf_counter()

        def _finish(_: None) -> PerformanceRecord:
            record.record(
                Duration(time.perf_counter() - started), Metric.FULL_EXECUTION_DURATION
            )
            record.record(True, Metric.DIRECT_EXECUTION_FLAG)
            return record

        return map_future(self.execute(query, on_row), _finish)

    def execute_decoding(
        self,
        query: Expression,
        model: Type[T],
        handler: Callable[[Result[T]], None],
    ) -> "Future[None]":
        """Execute ``query``, decoding every row into ``model`` and passing a ``Result`` to ``handler``."""
        return self.execute(query, lambda row: handler(Result.catching(row.decode, model)))

    def execute_decoding_with_performance_tracking(
        self,
        query: Expression,
        model: Type[T],
        handler: Callable[[Result[T]], None],
    ) -> "Future[PerformanceRecord]":
        """
        Decoding variant of :meth:`execute_with_performance_tracking`.

        Time spent decoding is recorded as the structured result decoding
        duration and added to the full execution duration.
        """
        decode_time = 0.0

        def _on_row(row: "Row") -> None:
            nonlocal decode_time
            started = time.perf_counter()
            result = Result.catching(row.decode, model)
            decode_time += time.perf_counter() - started
            handler(result)

        def _finish(record: PerformanceRecord) -> PerformanceRecord:
            record.record(Duration(decode_time), Metric.STRUCTURED_RESULT_DECODING_DURATION)
            record.apply(
                Metric.STRUCTURED_RESULT_DECODING_DURATION, Metric.FULL_EXECUTION_DURATION
            )
            record.record(True, Metric.DIRECT_EXECUTION_FLAG)
            return record

        return map_future(self.execute_with_performance_tracking(query, _on_row), _finish)

    def serialize(self, expression: Expression) -> Tuple[str, List[Any]]:
        """Serialize ``expression`` for this connection's dialect."""
        return serialize(
            expression,
            self.dialect,
            logger=self.logger,
            multirow_insert_policy=get_settings().multirow_insert_policy,
        )

    def select(self) -> "SelectBuilder":
        from .builders.select import SelectBuilder

        return SelectBuilder(self)

    def insert(self, table: Union[Expression, str]) -> "InsertBuilder":
        from .builders.insert import InsertBuilder

        return InsertBuilder(self, table)

    def raw(self, *parts: Any) -> "RawBuilder":
        """
        Build a statement from SQL fragments and values.

        Strings are emitted verbatim, other values are bound:
        ``db.raw("SELECT * FROM users WHERE id = ", 42)``.
        """
        from .builders.raw import RawBuilder

        return RawBuilder(self, *parts)

    def logging(self, logger: Any) -> "Database":
        """Return a view of this database that reports through ``logger``."""
        return LoggingDatabase(self, logger)


@dataclass
class ReportingTo(Expression):
    """Serializes ``query`` with degraded-feature warnings sent to ``logger``."""

    query: Expression
    logger: Any

    def serialize(self, serializer: Serializer) -> None:
        previous = serializer.logger
        serializer.logger = self.logger
        try:
            serializer.write_expression(self.query)
        finally:
            serializer.logger = previous


class LoggingDatabase(Database):
    """
    Delegates execution to another database, substituting its logger.

    Statements are handed over wrapped in :class:`ReportingTo`, so the
    warnings raised while the wrapped database serializes them reach this
    view's logger. Query events logged by the wrapped database itself keep
    its own logger.
    """

    def __init__(self, database: Database, logger: Any):
        self.database = database
        self._logger = logger

    @property
    def dialect(self) -> "Dialect":
        return self.database.dialect

    @property
    def logger(self) -> Any:
        return self._logger

    def execute(self, query: Expression, on_row: RowCallback) -> "Future[None]":
        return self.database.execute(ReportingTo(query, self._logger), on_row)

    def execute_with_performance_tracking(
        self, query: Expression, on_row: RowCallback
    ) -> "Future[PerformanceRecord]":
        return self.database.execute_with_performance_tracking(
            ReportingTo(query, self._logger), on_row
        )


__all__ = ["Database", "LoggingDatabase", "ReportingTo", "RowCallback"]
