"""Database package."""
from fitcoach.db.database import (
    Base,
    Database,
    get_database,
    get_db,
)

__all__ = [
    "Base",
    "Database",
    "get_database",
    "get_db",
]
