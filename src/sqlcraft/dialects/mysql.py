"""
MySQL / MariaDB SQL dialect.

Backtick identifiers, ``%s`` placeholders, INSERT IGNORE and
ON DUPLICATE KEY UPDATE for conflicts, no RETURNING.
"""

from typing import Optional

from .base import ConflictSyntax, Dialect, VersionInfo


class MySQLDialect(Dialect):
    """MySQL SQL dialect implementation."""

    name = "mysql"
    identifier_quote = "`"
    paramstyle = "format"

    supports_multirow_insert = True
    supports_returning = False
    supports_locking_reads = True
    conflict_syntax = ConflictSyntax.MYSQL

    literal_true = "1"
    literal_false = "0"
    unbounded_limit = "18446744073709551615"

    def __init__(
        self,
        paramstyle: Optional[str] = None,
        version: Optional[VersionInfo] = None,
    ):
        super().__init__(paramstyle=paramstyle, version=version)
        # FOR SHARE arrived in 8.0; older servers only know the long form
        if not self.version_at_least(8, 0):
            self.share_lock = "LOCK IN SHARE MODE"
