"""Shared pytest fixtures: dialects, loggers, an in-memory SQLite database and a fake connection."""

from __future__ import annotations

import os
from concurrent.futures import Future
from typing import Any, Dict, Iterator, List, Optional
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine

from sqlcraft.adapters import SQLAlchemyDatabase
from sqlcraft.config import get_settings
from sqlcraft.database import Database
from sqlcraft.dialects import Dialect, MySQLDialect, PostgreSQLDialect, SQLiteDialect
from sqlcraft.rows import Row


class FakeDatabase(Database):
    """In-memory connection delivering canned rows and capturing what it was asked to run."""

    def __init__(
        self,
        rows: Optional[List[Dict[str, Any]]] = None,
        dialect: Optional[Dialect] = None,
        error: Optional[BaseException] = None,
    ):
        self.rows = rows or []
        self.error = error
        self._dialect = dialect or SQLiteDialect()
        self._logger = MagicMock()
        self.executed: List[Any] = []

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def logger(self) -> Any:
        return self._logger

    def execute(self, query, on_row) -> "Future[None]":
        self.executed.append(self.serialize(query))
        future: "Future[None]" = Future()
        if self.error is not None:
            future.set_exception(self.error)
            return future
        for data in self.rows:
            on_row(Row(data))
        future.set_result(None)
        return future


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch) -> Iterator[None]:
    """Isolate every test from SQLCRAFT_* variables of the host environment."""
    for name in list(os.environ):
        if name.startswith("SQLCRAFT_"):
            monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sqlite_dialect() -> SQLiteDialect:
    return SQLiteDialect()


@pytest.fixture
def postgres_dialect() -> PostgreSQLDialect:
    return PostgreSQLDialect()


@pytest.fixture
def mysql_dialect() -> MySQLDialect:
    return MySQLDialect()


@pytest.fixture
def mock_logger() -> MagicMock:
    return MagicMock()


@pytest.fixture
def fake_database():
    """Factory for :class:`FakeDatabase` instances."""
    return FakeDatabase


@pytest.fixture
def sqlite_connection():
    engine = create_engine("sqlite://")
    connection = engine.connect()
    yield connection
    connection.close()
    engine.dispose()


@pytest.fixture
def sqlite_database(sqlite_connection, mock_logger) -> SQLAlchemyDatabase:
    """SQLAlchemyDatabase on an in-memory SQLite with a populated ``users`` table."""
    sqlite_connection.exec_driver_sql(
        'CREATE TABLE "users" ('
        '"id" INTEGER PRIMARY KEY, "name" TEXT NOT NULL, "email" TEXT, "age" INTEGER)'
    )
    sqlite_connection.exec_driver_sql(
        'INSERT INTO "users" ("id", "name", "email", "age") VALUES '
        "(1, 'Ada', 'ada@example.com', 36), "
        "(2, 'Grace', NULL, 45), "
        "(3, 'Linus', 'linus@example.com', 28)"
    )
    return SQLAlchemyDatabase(sqlite_connection, logger=mock_logger)
