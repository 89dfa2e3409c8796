from __future__ import annotations

from typing import Dict, Optional, Type

from ..exceptions import UnknownDialectError
from .base import Dialect, VersionInfo
from .mysql import MySQLDialect
from .postgresql import PostgreSQLDialect
from .sqlite import SQLiteDialect

_REGISTRY: Dict[str, Type[Dialect]] = {}


def register(dialect_cls: Type[Dialect], *aliases: str) -> None:
    name = getattr(dialect_cls, "name", None)
    if not name or not isinstance(name, str):
        raise ValueError("Dialect must define a non-empty .name")
    for key in (name, *aliases):
        _REGISTRY[key.lower()] = dialect_cls


def get(
    name: str,
    paramstyle: Optional[str] = None,
    version: Optional[VersionInfo] = None,
) -> Dialect:
    """Instantiate the dialect registered under ``name``."""
    k = (name or "").lower()
    if k not in _REGISTRY:
        raise UnknownDialectError(name, ", ".join(sorted(_REGISTRY.keys())))
    return _REGISTRY[k](paramstyle=paramstyle, version=version)


def available() -> Dict[str, Type[Dialect]]:
    return dict(_REGISTRY)


register(PostgreSQLDialect, "postgres")
register(MySQLDialect, "mariadb")
register(SQLiteDialect)
register(Dialect)
