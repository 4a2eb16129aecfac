# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Genre models. A genre is a user-curated, coloured collection of tracks."""

from datetime import datetime
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vibeshare_server.models.base import Base
from vibeshare_server.models.timestamp import UpdatedTimestampMixin


class Genre(Base, UpdatedTimestampMixin):
    """User genre."""

    __tablename__ = "genres"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_genres_user_name"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    color: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    share_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    source_genre_id: Mapped[int | None] = mapped_column(
        ForeignKey("genres.id", ondelete="SET NULL"), nullable=True
    )
    tags: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped["User"] = relationship("User", back_populates="genres")
    tracks: Mapped[list["GenreTrack"]] = relationship(
        "GenreTrack",
        back_populates="genre",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="GenreTrack.position",
    )


class GenreTrack(Base):
    """Track in a genre with position."""

    __tablename__ = "genre_tracks"

    genre_id: Mapped[int] = mapped_column(
        ForeignKey("genres.id", ondelete="CASCADE"), primary_key=True
    )
    track_id: Mapped[int] = mapped_column(
        ForeignKey("tracks.id", ondelete="CASCADE"), primary_key=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    genre: Mapped["Genre"] = relationship("Genre", back_populates="tracks")
    track: Mapped["Track"] = relationship("Track")
