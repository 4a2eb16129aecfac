# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Track model."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from vibeshare_server.models.base import Base
from vibeshare_server.models.timestamp import TimestampMixin


class Track(Base, TimestampMixin):
    """Canonical row for one YouTube video. youtube_id is unique across the table."""

    __tablename__ = "tracks"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    youtube_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    artist: Mapped[str] = mapped_column(String(255), nullable=False)
    genre: Mapped[str | None] = mapped_column(String(128), nullable=True)
    thumbnail: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    duration: Mapped[str | None] = mapped_column(String(16), nullable=True)  # "m:ss"
    release_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    youtube_url: Mapped[str] = mapped_column(String(1024), nullable=False)
