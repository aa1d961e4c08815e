"""Movie library models."""

from sqlalchemy import (
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from mediavault.models.base import MovieBase

# Association table
movie_movie_collections = Table(
    "movie_movie_collections",
    MovieBase.metadata,
    Column("movie_id", Integer, ForeignKey("movies.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "collection_id",
        Integer,
        ForeignKey("movie_collections.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Movie(MovieBase):
    """A scanned movie.

    List-valued fields (genres, tags, actors, director, strm_files) are stored
    as JSON-encoded text by the external scanner; they are decoded at read time.
    """

    __tablename__ = "movies"

    id: Mapped[int] = mapped_column(primary_key=True)
    # External unique identifier, alternate lookup key (not enforced unique)
    uniqueid_num: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    uniqueid_cid: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Basic info
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    plot: Mapped[str | None] = mapped_column(Text, nullable=True)
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    runtime: Mapped[int | None] = mapped_column(Integer, nullable=True)  # minutes
    mpaa: Mapped[str | None] = mapped_column(String(50), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    premiered: Mapped[str | None] = mapped_column(String(20), nullable=True)
    studio: Mapped[str | None] = mapped_column(String(255), nullable=True)
    set_name: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # JSON-encoded lists
    genres: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[str | None] = mapped_column(Text, nullable=True)
    actors: Mapped[str | None] = mapped_column(Text, nullable=True)  # [{name, role}]
    director: Mapped[str | None] = mapped_column(Text, nullable=True)  # JSON list or bare name
    strm_files: Mapped[str | None] = mapped_column(Text, nullable=True)  # [key | {url, path}]

    # Storage locations, relative to the movie assets prefix
    root_folder: Mapped[str | None] = mapped_column(String(1000), nullable=True, index=True)
    folder_path_relative: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    poster_file_relative_path: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    fanart_file_relative_path: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # User state
    is_liked: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_scanned_date: Mapped[str | None] = mapped_column(String(40), nullable=True)

    __table_args__ = (
        Index("ix_movies_premiered", "premiered"),
        Index("ix_movies_set_name", "set_name"),
    )

    def __repr__(self) -> str:
        return f"<Movie(id={self.id}, uniqueid_num={self.uniqueid_num}, title={self.title})>"


class ActorInfo(MovieBase):
    """Actor thumbnail record, looked up by name."""

    __tablename__ = "actors_info"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    thumb_path: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    source_folder: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    movie_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_scanned: Mapped[str | None] = mapped_column(String(40), nullable=True)

    def __repr__(self) -> str:
        return f"<ActorInfo(id={self.id}, name={self.name})>"


class MovieCollection(MovieBase):
    """User-named group of movies."""

    __tablename__ = "movie_collections"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<MovieCollection(id={self.id}, name={self.name})>"


class PrecomputedRelatedMovie(MovieBase):
    """Offline-computed relation between two movies. Read only here."""

    __tablename__ = "precomputed_related_movies"

    source_movie_id: Mapped[int] = mapped_column(
        ForeignKey("movies.id", ondelete="CASCADE"), primary_key=True
    )
    related_movie_id: Mapped[int] = mapped_column(
        ForeignKey("movies.id", ondelete="CASCADE"), primary_key=True
    )
    relevance_score: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    relation_type: Mapped[str] = mapped_column(String(50), primary_key=True)

    def __repr__(self) -> str:
        return (
            f"<PrecomputedRelatedMovie({self.source_movie_id} -> {self.related_movie_id}, "
            f"{self.relation_type})>"
        )
