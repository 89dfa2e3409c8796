"""SQL dialect descriptors and registry."""

from typing import Optional

from ..config import get_settings
from . import registry
from .base import ConflictSyntax, Dialect, VersionInfo, normalize_paramstyle
from .mysql import MySQLDialect
from .postgresql import PostgreSQLDialect
from .profiles import ensure_profiles_loaded, load_dialect_profiles
from .sqlite import SQLiteDialect


def get_dialect(
    name: Optional[str] = None,
    paramstyle: Optional[str] = None,
    version: Optional[VersionInfo] = None,
) -> Dialect:
    """
    Instantiate a registered dialect.

    Args:
        name: Dialect name; defaults to SQLCRAFT_DEFAULT_DIALECT
        paramstyle: Placeholder style override (e.g. the driver's paramstyle)
        version: Server version tuple for feature gating

    Raises:
        UnknownDialectError: If no dialect is registered under ``name``
    """
    settings = get_settings()
    ensure_profiles_loaded(settings.dialect_profiles_path)
    return registry.get(name or settings.default_dialect, paramstyle=paramstyle, version=version)


__all__ = [
    "ConflictSyntax",
    "Dialect",
    "MySQLDialect",
    "PostgreSQLDialect",
    "SQLiteDialect",
    "VersionInfo",
    "get_dialect",
    "load_dialect_profiles",
    "normalize_paramstyle",
]
