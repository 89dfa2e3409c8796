"""
SQLite SQL dialect.

Capabilities depend on the linked library version:
- multi-row VALUES lists: 3.7.11
- ON CONFLICT upserts: 3.24.0 (older versions fall back to INSERT OR IGNORE)
- RETURNING: 3.35.0
SQLite has no locking reads; locking clauses are dropped.
"""

from typing import Optional

from .base import ConflictSyntax, Dialect, VersionInfo


class SQLiteDialect(Dialect):
    """SQLite SQL dialect implementation."""

    name = "sqlite"
    identifier_quote = '"'
    paramstyle = "qmark"

    supports_multirow_insert = True
    supports_returning = True
    supports_locking_reads = False
    conflict_syntax = ConflictSyntax.STANDARD

    literal_default = "NULL"
    unbounded_limit = "-1"

    def __init__(
        self,
        paramstyle: Optional[str] = None,
        version: Optional[VersionInfo] = None,
    ):
        super().__init__(paramstyle=paramstyle, version=version)
        self.supports_multirow_insert = self.version_at_least(3, 7, 11)
        self.supports_returning = self.version_at_least(3, 35, 0)
        if not self.version_at_least(3, 24, 0):
            self.conflict_syntax = ConflictSyntax.LEGACY_SQLITE
