# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Personal track tags. Unlike playlists they are unordered and never shared."""

from datetime import datetime
from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vibeshare_server.models.base import Base
from vibeshare_server.models.timestamp import TimestampMixin

DEFAULT_TAG_COLOR = "#3b82f6"


class Tag(Base, TimestampMixin):
    """User-defined label that can be attached to any number of tracks."""

    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_tags_user_name"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    color: Mapped[str] = mapped_column(String(32), default=DEFAULT_TAG_COLOR, nullable=False)

    tracks: Mapped[list["TagTrack"]] = relationship(
        "TagTrack", back_populates="tag", cascade="all, delete-orphan", passive_deletes=True
    )


class TagTrack(Base):
    __tablename__ = "tag_tracks"

    tag_id: Mapped[int] = mapped_column(
        ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    )
    track_id: Mapped[int] = mapped_column(
        ForeignKey("tracks.id", ondelete="CASCADE"), primary_key=True
    )
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    tag: Mapped["Tag"] = relationship("Tag", back_populates="tracks")
    track: Mapped["Track"] = relationship("Track")
