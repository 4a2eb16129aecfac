# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Share audit records. Rows are written once per share action and never updated."""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vibeshare_server.models.base import Base
from vibeshare_server.models.timestamp import TimestampMixin

SHARE_TYPE_COPY = "copy"
SHARE_TYPE_REFERENCE = "reference"


class PlaylistShare(Base, TimestampMixin):
    """A playlist was shared. shared_to_id is NULL for public shares."""

    __tablename__ = "playlist_shares"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    playlist_id: Mapped[int] = mapped_column(
        ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False, index=True
    )
    shared_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    shared_to_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=True
    )
    share_type: Mapped[str] = mapped_column(String(16), nullable=False, default=SHARE_TYPE_COPY)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)


class GenreShare(Base, TimestampMixin):
    """A genre was shared. shared_to_id is NULL for public shares."""

    __tablename__ = "genre_shares"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    genre_id: Mapped[int] = mapped_column(
        ForeignKey("genres.id", ondelete="CASCADE"), nullable=False, index=True
    )
    shared_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    shared_to_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=True
    )
    share_type: Mapped[str] = mapped_column(String(16), nullable=False, default=SHARE_TYPE_COPY)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
