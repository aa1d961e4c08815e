"""Database module."""

from mediavault.db.database import (
    Databases,
    create_databases,
    get_manga_db,
    get_movies_db,
    init_db,
)

__all__ = [
    "Databases",
    "create_databases",
    "get_manga_db",
    "get_movies_db",
    "init_db",
]
