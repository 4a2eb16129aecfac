# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Playlists and genres behave the same way; this describes where each keeps its data."""

import json
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vibeshare_server.errors import CollectionNotFound
from vibeshare_server.models import (
    Genre,
    GenreShare,
    GenreTrack,
    Playlist,
    PlaylistShare,
    PlaylistTrack,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionKind:
    """Model classes and column names for one kind of collection."""

    name: str
    model: Any
    member_model: Any
    share_model: Any
    member_fk: str
    share_fk: str
    source_fk: str
    # Presentation attributes copied verbatim when the collection is duplicated
    copied_fields: tuple[str, ...]

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def has_color(self) -> bool:
        return "color" in self.copied_fields

    def member_collection_column(self):
        return getattr(self.member_model, self.member_fk)

    def share_collection_column(self):
        return getattr(self.share_model, self.share_fk)

    def not_found(self) -> CollectionNotFound:
        return CollectionNotFound(f"{self.label} not found")


PLAYLISTS = CollectionKind(
    name="playlist",
    model=Playlist,
    member_model=PlaylistTrack,
    share_model=PlaylistShare,
    member_fk="playlist_id",
    share_fk="playlist_id",
    source_fk="source_playlist_id",
    copied_fields=("cover_image",),
)

GENRES = CollectionKind(
    name="genre",
    model=Genre,
    member_model=GenreTrack,
    share_model=GenreShare,
    member_fk="genre_id",
    share_fk="genre_id",
    source_fk="source_genre_id",
    copied_fields=("cover_image", "color"),
)


def dump_tags(tags: list[str] | None) -> str | None:
    """Serialize tags for storage. Duplicates and blanks are dropped, order kept."""
    if tags is None:
        return None
    cleaned: list[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return json.dumps(cleaned, ensure_ascii=False)


def parse_tags(raw: str | None) -> list[str]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed tag list %r", raw[:80])
        return []
    if not isinstance(value, list):
        return []
    return [str(tag) for tag in value]


async def get_collection(db: AsyncSession, kind: CollectionKind, collection_id: int):
    """Load a collection by id or raise CollectionNotFound."""
    result = await db.execute(select(kind.model).where(kind.model.id == collection_id))
    collection = result.scalar_one_or_none()
    if collection is None:
        raise kind.not_found()
    return collection
