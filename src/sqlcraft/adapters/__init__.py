"""Connection adapters implementing :class:`sqlcraft.database.Database`."""

from .sqlalchemy import SQLAlchemyDatabase, dialect_for_connection

__all__ = ["SQLAlchemyDatabase", "dialect_for_connection"]
