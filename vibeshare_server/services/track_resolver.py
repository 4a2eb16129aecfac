# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Resolve loosely-specified track references to canonical Track rows.

Clients send whatever identifier they have: an internal id, a YouTube id, or a
legacy ``<genre>_<index>`` id. ``resolve_track`` returns the matching row and
creates one on first sight of an unknown YouTube id.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vibeshare_server.config import settings
from vibeshare_server.errors import InvalidReference, ResolutionFailed
from vibeshare_server.models import Track
from vibeshare_server.services.legacy_catalog import CatalogEntry, decode_legacy_id, is_legacy_id

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown Track"
UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_DURATION = "0:00"


@dataclass
class TrackReference:
    id: int | str | None = None
    youtube_id: str | None = None
    title: str | None = None
    artist: str | None = None
    genre: str | None = None
    duration: str | None = None
    thumbnail: str | None = None
    youtube_url: str | None = None
    release_year: int | None = None


def _internal_id(value: int | str | None) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def _external_candidates(ref: TrackReference) -> list[str]:
    """YouTube id candidates in lookup order: explicit youtube_id, then a string id."""
    out = []
    for value in (ref.youtube_id, ref.id if isinstance(ref.id, str) else None):
        if value and value.strip() and value.strip() not in out:
            out.append(value.strip())
    return out


async def _find_by_id(db: AsyncSession, track_id: int) -> Track | None:
    result = await db.execute(select(Track).where(Track.id == track_id))
    return result.scalar_one_or_none()


async def _find_by_youtube_id(db: AsyncSession, youtube_id: str) -> Track | None:
    result = await db.execute(select(Track).where(Track.youtube_id == youtube_id))
    return result.scalar_one_or_none()


def _new_track(ref: TrackReference, youtube_id: str, entry: CatalogEntry | None) -> Track:
    return Track(
        youtube_id=youtube_id,
        title=ref.title or (entry.title if entry else None) or UNKNOWN_TITLE,
        artist=ref.artist or (entry.artist if entry else None) or UNKNOWN_ARTIST,
        genre=ref.genre or (entry.genre if entry else None),
        duration=ref.duration or (entry.duration if entry else None) or UNKNOWN_DURATION,
        release_year=ref.release_year or (entry.release_year if entry else None),
        thumbnail=ref.thumbnail or settings.youtube_thumbnail_url.format(youtube_id=youtube_id),
        youtube_url=ref.youtube_url or settings.youtube_watch_url.format(youtube_id=youtube_id),
    )


async def _create_track(
    db: AsyncSession, ref: TrackReference, youtube_id: str, entry: CatalogEntry | None
) -> Track:
    """Insert a track. A concurrent insert of the same youtube_id is answered with that row."""
    track = _new_track(ref, youtube_id, entry)
    try:
        async with db.begin_nested():
            db.add(track)
    except IntegrityError:
        logger.info("Track %s created concurrently, re-reading", youtube_id)
        existing = await _find_by_youtube_id(db, youtube_id)
        if existing is not None:
            return existing
        logger.error("Track %s missing after unique constraint violation", youtube_id)
        raise ResolutionFailed(youtube_id=youtube_id)
    logger.info("Created track %s for %s", track.id, youtube_id)
    return track


async def resolve_track(db: AsyncSession, ref: TrackReference) -> Track:
    """Return the canonical Track for ``ref``, creating it when unknown.

    Lookup order: internal id, YouTube id, legacy composite id. Raises
    InvalidReference when the reference carries nothing to look up or create by.
    """
    internal_id = _internal_id(ref.id)
    if internal_id is not None:
        track = await _find_by_id(db, internal_id)
        if track is not None:
            return track

    candidates = _external_candidates(ref)
    for youtube_id in candidates:
        track = await _find_by_youtube_id(db, youtube_id)
        if track is not None:
            return track

    for candidate in filter(is_legacy_id, candidates):
        entry = decode_legacy_id(candidate)
        if entry is None:
            continue
        track = await _find_by_youtube_id(db, entry.youtube_id)
        if track is not None:
            return track
        return await _create_track(db, ref, entry.youtube_id, entry)

    if not candidates:
        raise InvalidReference()
    return await _create_track(db, ref, candidates[0], None)
