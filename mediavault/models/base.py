"""Declarative bases for the two databases.

The movie library and the manga library live in separate databases, so each
gets its own metadata and can be created independently.
"""

from sqlalchemy.orm import DeclarativeBase


class MovieBase(DeclarativeBase):
    """Base for tables in the movies database."""


class MangaBase(DeclarativeBase):
    """Base for tables in the manga database."""
