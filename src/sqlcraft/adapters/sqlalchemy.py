"""
SQLAlchemy connection adapter.

Runs serialized statements through ``Connection.exec_driver_sql`` so the
text produced by sqlcraft reaches the DB-API driver unchanged. The dialect is
derived from the SQLAlchemy dialect name, the driver's paramstyle and the
server version reported by the connection.

Example:
    >>> from sqlalchemy import create_engine
    >>> db = SQLAlchemyDatabase(create_engine("sqlite://").connect())
    >>> db.raw("SELECT 1 AS one").first().result()["one"]
    1
"""

import time
from concurrent.futures import Future
from typing import Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine

from ..config import Settings, get_settings
from ..core.expressions import Expression
from ..database import Database, RowCallback
from ..dialects import get_dialect
from ..dialects.base import Dialect
from ..exceptions import UnknownDialectError
from ..futures import map_future
from ..monitoring.performance import (
    Count,
    Duration,
    Metric,
    Note,
    PerformanceRecord,
    collapse_placeholders,
)
from ..rows import Row
from ..utils.logging import get_logger

module_logger = get_logger(__name__)


def dialect_for_connection(connection: Connection) -> Dialect:
    """
    Dialect matching a SQLAlchemy connection.

    Unknown SQLAlchemy dialects fall back to the generic dialect.
    """
    sa_dialect = connection.dialect
    version = getattr(sa_dialect, "server_version_info", None)
    try:
        return get_dialect(sa_dialect.name, paramstyle=sa_dialect.paramstyle, version=version)
    except UnknownDialectError:
        module_logger.warning(
            "database.dialect.unknown",
            sqlalchemy_dialect=sa_dialect.name,
            fallback="generic",
        )
        return get_dialect("generic", paramstyle=sa_dialect.paramstyle, version=version)


class SQLAlchemyDatabase(Database):
    """
    :class:`~sqlcraft.database.Database` backed by a SQLAlchemy connection.

    Statements run synchronously on the calling thread; the returned future
    is already complete when ``execute`` returns. Transactions stay under the
    control of the owner of ``connection``.

    Args:
        connection: Open SQLAlchemy connection
        dialect: Override for the derived dialect
        logger: structlog logger (module logger by default)
    """

    def __init__(
        self,
        connection: Connection,
        dialect: Optional[Dialect] = None,
        logger: Optional[Any] = None,
    ):
        self.connection = connection
        self._dialect = dialect or dialect_for_connection(connection)
        self._logger = logger if logger is not None else module_logger
        self._engine: Optional[Engine] = None

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None, **engine_kwargs: Any
    ) -> "SQLAlchemyDatabase":
        """
        Connect to ``SQLCRAFT_DATABASE_URL``.

        The engine is owned by the returned database and disposed by :meth:`close`.

        Raises:
            ValueError: If no database URL is configured
        """
        settings = settings or get_settings()
        engine = create_engine(settings.get_database_connection_string(), **engine_kwargs)
        database = cls(engine.connect())
        database._engine = engine
        return database

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def logger(self) -> Any:
        return self._logger

    def logging(self, logger: Any) -> "SQLAlchemyDatabase":
        """Same connection and dialect, reporting through ``logger``."""
        return SQLAlchemyDatabase(self.connection, dialect=self._dialect, logger=logger)

    def close(self) -> None:
        self.connection.close()
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def __enter__(self) -> "SQLAlchemyDatabase":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def execute(self, query: Expression, on_row: RowCallback) -> "Future[None]":
        return map_future(self._run(query, on_row), lambda _: None)

    def execute_with_performance_tracking(
        self, query: Expression, on_row: RowCallback
    ) -> "Future[PerformanceRecord]":
        return self._run(query, on_row)

    def _run(self, query: Expression, on_row: RowCallback) -> "Future[PerformanceRecord]":
        """
        Serialize, execute and stream rows, recording each phase.

        Serialization errors are contract violations and raise immediately;
        driver errors (and errors raised by ``on_row``) fail the future.
        """
        settings = get_settings()
        record = PerformanceRecord()
        started = time.perf_counter()

        with record.measure(Metric.SERIALIZATION_DURATION):
            sql, binds = self.serialize(query)

        query_text = collapse_placeholders(
            sql,
            self.dialect.placeholder_pattern(),
            threshold=settings.placeholder_collapse_threshold,
            max_length=settings.serialized_query_max_length,
        )
        record.record(Note(query_text), Metric.SERIALIZED_QUERY_TEXT)
        record.record(Count(len(binds)), Metric.BOUND_PARAMETER_COUNT)

        with record.measure(Metric.PARAMETER_ENCODING_DURATION):
            parameters = self.dialect.encode_parameters(binds)

        future: "Future[PerformanceRecord]" = Future()
        try:
            with record.measure(Metric.PROCESSING_DURATION):
                if binds:
                    result = self.connection.exec_driver_sql(sql, parameters)
                else:
                    result = self.connection.exec_driver_sql(sql)

            record.record(Duration(0.0), Metric.OUTPUT_ROWS_DECODING_DURATION)
            if result.returns_rows:
                row_count = 0
                for mapping in result.mappings():
                    decode_started = time.perf_counter()
                    row = Row(mapping)
                    record.record_additional(
                        Duration(time.perf_counter() - decode_started),
                        Metric.OUTPUT_ROWS_DECODING_DURATION,
                    )
                    on_row(row)
                    row_count += 1
                record.record(Count(row_count), Metric.RETURNED_RESULT_ROW_COUNT)
        except Exception as e:
            self.logger.error(
                "database.query.failed",
                dialect=self.dialect.name,
                query=query_text,
                bind_count=len(binds),
                error=str(e),
                error_type=type(e).__name__,
            )
            future.set_exception(e)
            return future

        record.record(
            Duration(time.perf_counter() - started), Metric.FULL_EXECUTION_DURATION
        )
        record.record(True, Metric.DIRECT_EXECUTION_FLAG)

        self.logger.debug(
            "database.query.executed",
            dialect=self.dialect.name,
            query=query_text,
            bind_count=len(binds),
            row_count=record.get(Metric.RETURNED_RESULT_ROW_COUNT, Count(0)).raw,
            duration_ms=round(record[Metric.FULL_EXECUTION_DURATION].raw * 1000, 2),
        )
        future.set_result(record)
        return future
