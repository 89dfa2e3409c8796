"""
Unit tests for SELECT statements built through the fluent builders.
"""

import pytest

from sqlcraft.builders import SubqueryBuilder
from sqlcraft.core.expressions import (
    BinaryExpression,
    Column,
    Function,
    Join,
    JoinMethod,
    Literal,
    TableName,
)
from sqlcraft.core.serializer import serialize
from sqlcraft.dialects import MySQLDialect, PostgreSQLDialect, SQLiteDialect
from sqlcraft.exceptions import ContractViolationError
from sqlcraft.query import LockingClause, Select


def users(db):
    return db.select().column("*").from_("users")


@pytest.mark.unit
class TestSelectBasics:
    """Columns, tables and the WHERE clause."""

    def test_simple_select_with_bound_predicate(self, fake_database):
        """Values in predicates are bound in emission order."""
        db = fake_database()

        sql, binds = db.serialize(
            db.select().columns("id", "name").from_("users").where("id", "=", 1).query
        )

        assert sql == 'SELECT "id", "name" FROM "users" WHERE "id" = ?'
        assert binds == [1]

    def test_select_without_columns_is_contract_violation(self, sqlite_dialect):
        """An empty column list cannot be serialized."""
        with pytest.raises(ContractViolationError, match="no columns"):
            serialize(Select(), sqlite_dialect)

    def test_star_is_never_quoted(self, fake_database):
        """'*' is the all-columns literal, not a column named *."""
        db = fake_database()

        sql, _ = db.serialize(users(db).query)

        assert sql == 'SELECT * FROM "users"'

    def test_table_qualified_star(self, fake_database):
        """column('*', table=...) and 'table.*' both render table.*."""
        db = fake_database()
        builder = db.select().column("*", table="users").column("orders.*").from_("users")

        sql, _ = db.serialize(builder.query)

        assert sql == 'SELECT "users".*, "orders".* FROM "users"'

    def test_dotted_column_is_qualified(self, fake_database):
        """'table.column' is split into a qualified column."""
        db = fake_database()

        sql, _ = db.serialize(db.select().column("users.name").from_("users").query)

        assert sql == 'SELECT "users"."name" FROM "users"'

    def test_schema_qualified_table(self, fake_database):
        """'schema.table' names a table inside a schema, not a dotted table name."""
        db = fake_database(dialect=PostgreSQLDialect())
        builder = db.select().column("public.users.id").from_("public.users")

        sql, _ = db.serialize(builder.query)

        assert sql == 'SELECT "public"."users"."id" FROM "public"."users"'

    def test_column_and_table_aliases(self, fake_database):
        """Aliases render with AS."""
        db = fake_database()
        builder = db.select().column("name", alias="n").from_("users", alias="u")

        sql, _ = db.serialize(builder.query)

        assert sql == 'SELECT "name" AS "n" FROM "users" AS "u"'

    def test_distinct(self, fake_database):
        """distinct() adds the DISTINCT keyword."""
        db = fake_database()

        sql, _ = db.serialize(db.select().distinct().column("age").from_("users").query)

        assert sql == 'SELECT DISTINCT "age" FROM "users"'


@pytest.mark.unit
class TestPredicates:
    """AND/OR chaining, NULL comparisons, IN lists and subqueries."""

    def test_mixed_connectives_are_parenthesized(self, fake_database):
        """An OR group combined with AND keeps its meaning."""
        db = fake_database()
        builder = users(db).where("a", "=", 1).or_where("b", "=", 2).where("c", "=", 3)

        sql, binds = db.serialize(builder.query)

        assert sql == 'SELECT * FROM "users" WHERE ("a" = ? OR "b" = ?) AND "c" = ?'
        assert binds == [1, 2, 3]

    def test_same_connective_is_flat(self, fake_database):
        """Consecutive where() calls are joined with AND without grouping."""
        db = fake_database()
        builder = users(db).where("a", "=", 1).where("b", "=", 2)

        sql, _ = db.serialize(builder.query)

        assert sql.endswith('WHERE "a" = ? AND "b" = ?')

    def test_none_becomes_is_null(self, fake_database):
        """Comparisons with None use IS NULL / IS NOT NULL."""
        db = fake_database()
        builder = users(db).where("email", "=", None).or_where("age", "!=", None)

        sql, binds = db.serialize(builder.query)

        assert sql.endswith('WHERE "email" IS NULL OR "age" IS NOT NULL')
        assert binds == []

    def test_in_list(self, fake_database):
        """A list right-hand side becomes a parenthesized bind list."""
        db = fake_database(dialect=PostgreSQLDialect())

        sql, binds = db.serialize(users(db).where("id", "in", [1, 2, 3]).query)

        assert sql == 'SELECT * FROM "users" WHERE "id" IN ($1, $2, $3)'
        assert binds == [1, 2, 3]

    def test_empty_in_list_rejected(self, fake_database):
        """IN () is not valid SQL on any supported backend."""
        db = fake_database()

        with pytest.raises(ContractViolationError, match="IN requires at least one value"):
            users(db).where("id", "in", [])
        with pytest.raises(ContractViolationError, match="NOT IN"):
            users(db).where("id", "not in", ())

    def test_subquery_in_predicate(self, fake_database):
        """Subquery builders serialize as a parenthesized SELECT."""
        db = fake_database()
        active = (
            SubqueryBuilder().column("user_id").from_("sessions").where("active", "=", True)
        )

        sql, binds = db.serialize(users(db).where("id", "in", active).query)

        assert sql == (
            'SELECT * FROM "users" WHERE "id" IN '
            '(SELECT "user_id" FROM "sessions" WHERE "active" = ?)'
        )
        assert binds == [True]

    def test_where_column_compares_columns(self, fake_database):
        """where_column does not bind its right-hand side."""
        db = fake_database()
        builder = users(db).where_column("users.id", "=", "orders.user_id")

        sql, binds = db.serialize(builder.query)

        assert sql.endswith('WHERE "users"."id" = "orders"."user_id"')
        assert binds == []

    def test_invalid_predicate_arguments(self, fake_database):
        """Predicates need one expression or lhs, op, rhs."""
        db = fake_database()

        with pytest.raises(TypeError):
            users(db).where("id", "=")


@pytest.mark.unit
class TestGroupingOrderingPaging:
    """GROUP BY, HAVING, ORDER BY, LIMIT and OFFSET."""

    def test_full_clause_order(self, fake_database):
        """Clauses are emitted in SQL order with binds in emission order."""
        db = fake_database(dialect=PostgreSQLDialect())
        count = Function("COUNT", [Literal.ALL])
        builder = (
            db.select()
            .column("age")
            .column(count, alias="n")
            .from_("users")
            .group_by("age")
            .having(count, ">", 1)
            .order_by("age", "desc")
            .limit(10)
            .offset(5)
        )

        sql, binds = db.serialize(builder.query)

        assert sql == (
            'SELECT "age", COUNT(*) AS "n" FROM "users" GROUP BY "age" '
            'HAVING COUNT(*) > $1 ORDER BY "age" DESC LIMIT 10 OFFSET 5'
        )
        assert binds == [1]

    def test_offset_without_limit_on_sqlite(self, fake_database):
        """SQLite requires a LIMIT before OFFSET."""
        db = fake_database()

        sql, _ = db.serialize(users(db).offset(5).query)

        assert sql == 'SELECT * FROM "users" LIMIT -1 OFFSET 5'

    def test_offset_without_limit_on_postgresql(self, fake_database):
        """PostgreSQL accepts a bare OFFSET."""
        db = fake_database(dialect=PostgreSQLDialect())

        sql, _ = db.serialize(users(db).offset(5).query)

        assert sql == 'SELECT * FROM "users" OFFSET 5'

    def test_limit_replaces_previous_value(self, fake_database):
        """The last limit wins; None clears it."""
        db = fake_database()

        assert db.serialize(users(db).limit(5).limit(2).query)[0].endswith("LIMIT 2")
        assert "LIMIT" not in db.serialize(users(db).limit(5).limit(None).query)[0]

    def test_negative_limit_rejected(self, fake_database):
        """Negative limits and offsets are programming errors."""
        db = fake_database()

        with pytest.raises(ValueError, match="limit"):
            users(db).limit(-1)
        with pytest.raises(ValueError, match="offset"):
            users(db).offset(-3)

    def test_order_by_appends(self, fake_database):
        """Each order_by call adds a sort key."""
        db = fake_database()

        sql, _ = db.serialize(users(db).order_by("age", "desc").order_by("name").query)

        assert sql.endswith('ORDER BY "age" DESC, "name" ASC')


@pytest.mark.unit
class TestJoins:
    """Explicit joins."""

    def test_left_join_on_columns(self, fake_database):
        """join_on builds the ON condition from two column references."""
        db = fake_database()
        builder = (
            db.select()
            .column("users.name")
            .column("orders.total")
            .from_("users")
            .join_on("orders", "orders.user_id", "=", "users.id", method="left")
        )

        sql, _ = db.serialize(builder.query)

        assert sql == (
            'SELECT "users"."name", "orders"."total" FROM "users" '
            'LEFT JOIN "orders" ON "orders"."user_id" = "users"."id"'
        )

    def test_joins_are_emitted_in_call_order(self, fake_database):
        """Several joins appear in the order they were added."""
        db = fake_database()
        builder = (
            users(db)
            .join_on("a", "a.user_id", "=", "users.id")
            .join_on("b", "b.user_id", "=", "users.id", method="full")
        )

        sql, _ = db.serialize(builder.query)

        assert sql.index("INNER JOIN") < sql.index("FULL OUTER JOIN")

    def test_prebuilt_join_expression(self, fake_database):
        """join_expression appends a ready-made join after the other joins."""
        db = fake_database()
        stats_join = Join(
            JoinMethod.LEFT,
            TableName("stats", "analytics"),
            BinaryExpression(Column("user_id", "stats"), "=", Column("id", "users")),
        )
        builder = users(db).join_on("orders", "orders.user_id", "=", "users.id")
        builder = builder.join_expression(stats_join)

        sql, _ = db.serialize(builder.query)

        assert sql.endswith(
            'INNER JOIN "orders" ON "orders"."user_id" = "users"."id" '
            'LEFT JOIN "analytics"."stats" ON "stats"."user_id" = "users"."id"'
        )


@pytest.mark.unit
class TestLocking:
    """Locking clauses are dialect-gated and replaced, not stacked."""

    def test_last_lock_wins(self, fake_database):
        """Only the most recent locking clause is emitted."""
        db = fake_database(dialect=PostgreSQLDialect())
        builder = users(db).for_(LockingClause.UPDATE).for_(LockingClause.SHARE)

        sql, _ = db.serialize(builder.query)

        assert sql == 'SELECT * FROM "users" FOR SHARE'

    def test_lock_dropped_on_sqlite(self, fake_database):
        """SQLite has no locking reads, and no trailing space is left behind."""
        db = fake_database(dialect=SQLiteDialect())

        sql, _ = db.serialize(users(db).for_(LockingClause.UPDATE).query)

        assert sql == 'SELECT * FROM "users"'

    def test_old_mysql_share_lock(self, fake_database):
        """MySQL 5.7 spells shared locks LOCK IN SHARE MODE."""
        db = fake_database(dialect=MySQLDialect(version=(5, 7, 40)))

        sql, _ = db.serialize(users(db).for_(LockingClause.SHARE).query)

        assert sql == "SELECT * FROM `users` LOCK IN SHARE MODE"

    def test_update_lock_on_mysql(self, fake_database):
        """FOR UPDATE follows LIMIT."""
        db = fake_database(dialect=MySQLDialect())

        sql, _ = db.serialize(users(db).limit(1).for_(LockingClause.UPDATE).query)

        assert sql == "SELECT * FROM `users` LIMIT 1 FOR UPDATE"
