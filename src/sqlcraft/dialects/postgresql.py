"""
PostgreSQL-specific SQL dialect.

Double-quoted identifiers, ``$n`` placeholders (``%s`` when driven through
psycopg), ON CONFLICT upserts, RETURNING and locking reads.
"""

from .base import ConflictSyntax, Dialect


class PostgreSQLDialect(Dialect):
    """PostgreSQL SQL dialect implementation."""

    name = "postgresql"
    identifier_quote = '"'
    paramstyle = "dollar"

    supports_multirow_insert = True
    supports_returning = True
    supports_locking_reads = True
    conflict_syntax = ConflictSyntax.STANDARD
