"""
Unit tests for the execution funnel: builders -> Database.execute*.

A FakeDatabase stands in for a real connection so that row delivery,
decoding failures and driver errors can be controlled precisely.
"""

from typing import Optional
from unittest.mock import MagicMock

import pytest
from pydantic import BaseModel

from sqlcraft.database import LoggingDatabase
from sqlcraft.dialects import SQLiteDialect
from sqlcraft.exceptions import RowDecodingError
from sqlcraft.monitoring.performance import Metric, PerformanceRecord
from sqlcraft.results import Result
from sqlcraft.rows import Row

USERS = [
    {"id": 1, "name": "Ada", "email": "ada@example.com"},
    {"id": 2, "name": "Grace", "email": None},
    {"id": 3, "name": "Linus", "email": "linus@example.com"},
]


class User(BaseModel):
    id: int
    name: str
    email: Optional[str] = None


def select_users(db):
    return db.select().column("*").from_("users")


@pytest.mark.unit
class TestRunAndCollect:
    """run, all and first without decoding."""

    def test_run_delivers_rows_in_order(self, fake_database):
        """The handler sees every row, in driver order, before completion."""
        db = fake_database(rows=USERS)
        seen = []

        future = select_users(db).run(lambda row: seen.append(row["id"]))

        assert future.result() is None
        assert seen == [1, 2, 3]

    def test_run_without_handler(self, fake_database):
        """Rows are discarded when no handler is given."""
        db = fake_database(rows=USERS)

        assert select_users(db).run().result() is None
        assert db.executed == [('SELECT * FROM "users"', [])]

    def test_all_collects_rows(self, fake_database):
        """all() resolves to the rows in order."""
        db = fake_database(rows=USERS)

        rows = select_users(db).all().result()

        assert [row["name"] for row in rows] == ["Ada", "Grace", "Linus"]
        assert all(isinstance(row, Row) for row in rows)

    def test_first_returns_head(self, fake_database):
        """first() is the first collected row."""
        db = fake_database(rows=USERS)

        row = select_users(db).first().result()

        assert row["id"] == 1

    def test_first_on_empty_result(self, fake_database):
        """first() resolves to None when there are no rows."""
        db = fake_database(rows=[])

        assert select_users(db).first().result() is None

    def test_driver_error_propagates_unchanged(self, fake_database):
        """The future fails with the very exception the connection raised."""
        error = RuntimeError("connection reset")
        db = fake_database(error=error)

        assert select_users(db).all().exception() is error
        assert select_users(db).first().exception() is error
        assert select_users(db).run().exception() is error


@pytest.mark.unit
class TestDecoding:
    """Typed decoding through execute_decoding."""

    def test_all_decodes_models(self, fake_database):
        """Every row is decoded into the requested model."""
        db = fake_database(rows=USERS)

        users = select_users(db).all(decoding=User).result()

        assert users == [
            User(id=1, name="Ada", email="ada@example.com"),
            User(id=2, name="Grace"),
            User(id=3, name="Linus", email="linus@example.com"),
        ]

    def test_first_decodes(self, fake_database):
        """first(decoding=...) returns a model or None."""
        db = fake_database(rows=USERS[1:])

        assert select_users(db).first(decoding=User).result() == User(id=2, name="Grace")

    def test_decode_failure_fails_all(self, fake_database):
        """One bad row fails the whole collection; no partial list is returned."""
        rows = [USERS[0], {"id": "not-a-number", "name": "Broken"}, USERS[2]]
        db = fake_database(rows=rows)

        future = select_users(db).all(decoding=User)

        error = future.exception()
        assert isinstance(error, RowDecodingError)
        assert error.model == "User"
        assert error.column == "id"
        with pytest.raises(RowDecodingError):
            future.result()

    def test_run_passes_results_to_handler(self, fake_database):
        """With run(decoding=...) the handler decides what to do with failures."""
        rows = [USERS[0], {"name": "No id"}]
        db = fake_database(rows=rows)
        results = []

        select_users(db).run(results.append, decoding=User).result()

        assert all(isinstance(result, Result) for result in results)
        assert results[0].unwrap() == User(id=1, name="Ada", email="ada@example.com")
        assert not results[1].is_success
        assert isinstance(results[1].error, RowDecodingError)

    def test_execute_decoding_directly(self, fake_database):
        """Database.execute_decoding wraps each decoded row in a Result."""
        db = fake_database(rows=USERS[:1])
        results = []

        db.execute_decoding(select_users(db).query, User, results.append).result()

        assert [result.unwrap().name for result in results] == ["Ada"]


@pytest.mark.unit
class TestPerformanceTracking:
    """Performance records from the default funnel implementation."""

    def test_fallback_records_full_duration_and_flag(self, fake_database):
        """Connections without their own tracking still report a full duration."""
        db = fake_database(rows=USERS)

        record = select_users(db).run_recording_performance().result()

        assert isinstance(record, PerformanceRecord)
        assert record[Metric.FULL_EXECUTION_DURATION].seconds >= 0.0
        assert record[Metric.DIRECT_EXECUTION_FLAG].value is True
        assert Metric.SERIALIZATION_DURATION not in record

    def test_decoding_records_structured_duration(self, fake_database):
        """Decoding time is reported and included in the full duration."""
        db = fake_database(rows=USERS)

        users, record = select_users(db).all_recording_performance(decoding=User).result()

        assert len(users) == 3
        assert Metric.STRUCTURED_RESULT_DECODING_DURATION in record
        assert (
            record[Metric.FULL_EXECUTION_DURATION].seconds
            >= record[Metric.STRUCTURED_RESULT_DECODING_DURATION].seconds
        )
        assert record[Metric.DIRECT_EXECUTION_FLAG].value is True

    def test_first_recording_performance(self, fake_database):
        """first_recording_performance pairs the head row with the record."""
        db = fake_database(rows=USERS)

        row, record = select_users(db).first_recording_performance().result()

        assert row["id"] == 1
        assert Metric.FULL_EXECUTION_DURATION in record

    def test_tracking_failure_propagates(self, fake_database):
        """A failed execution yields a failed future, not a record."""
        error = RuntimeError("boom")
        db = fake_database(error=error)

        assert select_users(db).run_recording_performance().exception() is error


@pytest.mark.unit
class TestDatabaseConveniences:
    """raw(), insert() and logging() on the Database base class."""

    def test_raw_binds_non_string_parts(self, fake_database):
        """Strings are verbatim SQL, other values are bound."""
        db = fake_database(rows=[{"id": 1}])

        db.raw("SELECT * FROM users WHERE id = ", 1).run().result()

        assert db.executed == [("SELECT * FROM users WHERE id = ?", [1])]

    def test_insert_run_discards_rows(self, fake_database):
        """Running an INSERT only serializes and executes it."""
        db = fake_database()

        db.insert("users").columns("id").values(1).run().result()

        assert db.executed == [('INSERT INTO "users" ("id") VALUES (?)', [1])]

    def test_logging_returns_delegating_view(self, fake_database):
        """logging() swaps the logger while keeping the dialect and connection."""
        db = fake_database(rows=USERS)
        other_logger = MagicMock()

        view = db.logging(other_logger)

        assert isinstance(view, LoggingDatabase)
        assert view.logger is other_logger
        assert view.dialect is db.dialect
        assert len(select_users(view).all().result()) == 3
        assert len(db.executed) == 1

    def test_logging_view_receives_serialization_warnings(self, fake_database):
        """Degraded-feature warnings go to the view's logger, not the wrapped one."""
        db = fake_database(dialect=SQLiteDialect(version=(3, 7, 0)))
        other_logger = MagicMock()

        view = db.logging(other_logger)
        view.insert("users").columns("id").values(1).values(2).run().result()

        other_logger.warning.assert_called_once_with(
            "sql.insert.multirow_unsupported", dialect="sqlite", row_count=2
        )
        db.logger.warning.assert_not_called()
        assert db.executed == [('INSERT INTO "users" ("id") VALUES (?), (?)', [1, 2])]

    def test_logging_view_tracks_performance_through_wrapped_database(self, fake_database):
        """Tracked runs through the view also serialize with the view's logger."""
        db = fake_database(dialect=SQLiteDialect(version=(3, 7, 0)))
        other_logger = MagicMock()

        record = (
            db.logging(other_logger)
            .insert("users")
            .columns("id")
            .values(1)
            .values(2)
            .run_recording_performance()
            .result()
        )

        assert Metric.FULL_EXECUTION_DURATION in record
        other_logger.warning.assert_called_once()
        db.logger.warning.assert_not_called()
