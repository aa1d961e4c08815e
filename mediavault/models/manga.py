"""Manga library models."""

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column

from mediavault.models.base import MangaBase

# Association table
manga_collections = Table(
    "manga_collections",
    MangaBase.metadata,
    Column("manga_id", Integer, ForeignKey("mangas.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "collection_id", Integer, ForeignKey("collections.id", ondelete="CASCADE"), primary_key=True
    ),
)


class Manga(MangaBase):
    """A scanned manga volume or appendix."""

    __tablename__ = "mangas"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    path: Mapped[str] = mapped_column(String(1000), nullable=False)  # relative folder in storage
    cover_image: Mapped[str | None] = mapped_column(String(500), nullable=True)  # filename
    page_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    pages_json: Mapped[str | None] = mapped_column(Text, nullable=True)  # JSON list of filenames
    last_scanned: Mapped[str | None] = mapped_column(String(40), nullable=True)
    # Parent manga when this record is supplementary content
    is_appendix_to: Mapped[int | None] = mapped_column(
        ForeignKey("mangas.id", ondelete="SET NULL"), nullable=True, index=True
    )
    is_favorited: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<Manga(id={self.id}, title={self.title})>"


class Collection(MangaBase):
    """User-named group of mangas."""

    __tablename__ = "collections"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Collection(id={self.id}, name={self.name})>"
