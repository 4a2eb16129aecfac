# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Personal track tags: create, rename, recolour, delete, and tag or untag tracks."""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vibeshare_server.errors import Conflict, DuplicateName, Forbidden, TagNotFound, TrackNotFound, ValidationFailed
from vibeshare_server.models import Tag, TagTrack, Track
from vibeshare_server.models.tag import DEFAULT_TAG_COLOR
from vibeshare_server.services.track_resolver import TrackReference, resolve_track

logger = logging.getLogger(__name__)


@dataclass
class TagSummary:
    tag: Tag
    youtube_ids: list[str] = field(default_factory=list)


def _clean_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationFailed("Tag name is required", field="name")
    return name


async def _name_taken(db: AsyncSession, user_id: int, name: str, exclude_id: int | None = None) -> bool:
    query = select(Tag.id).where(Tag.user_id == user_id, Tag.name == name)
    if exclude_id is not None:
        query = query.where(Tag.id != exclude_id)
    return (await db.execute(query.limit(1))).scalar_one_or_none() is not None


async def get_owned_tag(db: AsyncSession, tag_id: int, user_id: int) -> Tag:
    result = await db.execute(select(Tag).where(Tag.id == tag_id))
    tag = result.scalar_one_or_none()
    if tag is None:
        raise TagNotFound()
    if tag.user_id != user_id:
        raise Forbidden("You do not have permission to access this tag")
    return tag


async def list_tags(db: AsyncSession, user_id: int) -> list[TagSummary]:
    """The user's tags by name, each with the YouTube ids of its tracks."""
    result = await db.execute(select(Tag).where(Tag.user_id == user_id).order_by(Tag.name, Tag.id))
    summaries = {tag.id: TagSummary(tag) for tag in result.scalars().all()}
    if summaries:
        members = await db.execute(
            select(TagTrack.tag_id, Track.youtube_id)
            .join(Track, Track.id == TagTrack.track_id)
            .where(TagTrack.tag_id.in_(summaries))
            .order_by(TagTrack.added_at, Track.id)
        )
        for tag_id, youtube_id in members.all():
            summaries[tag_id].youtube_ids.append(youtube_id)
    return list(summaries.values())


async def tag_tracks(db: AsyncSession, tag_id: int) -> list[Track]:
    result = await db.execute(
        select(Track)
        .join(TagTrack, TagTrack.track_id == Track.id)
        .where(TagTrack.tag_id == tag_id)
        .order_by(TagTrack.added_at, Track.id)
    )
    return list(result.scalars().all())


async def create_tag(db: AsyncSession, user_id: int, name: str, color: str | None = None) -> Tag:
    name = _clean_name(name)
    duplicate = DuplicateName("You already have a tag with this name")
    if await _name_taken(db, user_id, name):
        raise duplicate
    tag = Tag(user_id=user_id, name=name, color=color or DEFAULT_TAG_COLOR)
    db.add(tag)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise duplicate
    await db.refresh(tag)
    logger.info("User %s created tag %s %r", user_id, tag.id, name)
    return tag


async def update_tag(db: AsyncSession, tag_id: int, user_id: int, changes: dict[str, Any]) -> Tag:
    """Rename and/or recolour. An empty colour keeps the current one."""
    tag = await get_owned_tag(db, tag_id, user_id)
    if "name" in changes:
        name = _clean_name(changes["name"])
        if await _name_taken(db, user_id, name, exclude_id=tag_id):
            raise DuplicateName("You already have a tag with this name")
        tag.name = name
    if changes.get("color"):
        tag.color = changes["color"]
    await db.commit()
    await db.refresh(tag)
    return tag


async def delete_tag(db: AsyncSession, tag_id: int, user_id: int) -> None:
    await get_owned_tag(db, tag_id, user_id)
    await db.execute(delete(TagTrack).where(TagTrack.tag_id == tag_id))
    await db.execute(delete(Tag).where(Tag.id == tag_id))
    await db.commit()
    logger.info("User %s deleted tag %s", user_id, tag_id)


async def add_track(db: AsyncSession, tag_id: int, user_id: int, ref: TrackReference) -> Track:
    await get_owned_tag(db, tag_id, user_id)
    track = await resolve_track(db, ref)
    existing = await db.execute(
        select(TagTrack.track_id).where(TagTrack.tag_id == tag_id, TagTrack.track_id == track.id)
    )
    if existing.scalar_one_or_none() is not None:
        raise Conflict("Track is already tagged")
    db.add(TagTrack(tag_id=tag_id, track_id=track.id))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Track is already tagged")
    return track


async def remove_track(db: AsyncSession, tag_id: int, user_id: int, track_ref: str) -> None:
    """Untag a track given its internal id or YouTube id."""
    await get_owned_tag(db, tag_id, user_id)
    match = Track.youtube_id == track_ref
    if track_ref.isdigit():
        match = or_(match, Track.id == int(track_ref))
    result = await db.execute(
        select(TagTrack.track_id)
        .join(Track, Track.id == TagTrack.track_id)
        .where(TagTrack.tag_id == tag_id, match)
        .limit(1)
    )
    track_id = result.scalar_one_or_none()
    if track_id is None:
        raise TrackNotFound("Track is not tagged with this tag")
    await db.execute(delete(TagTrack).where(TagTrack.tag_id == tag_id, TagTrack.track_id == track_id))
    await db.commit()
