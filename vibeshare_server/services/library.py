# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Create, edit and fill a user's playlists and genres."""

import logging
from typing import Any

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vibeshare_server.errors import Conflict, DuplicateName, Forbidden, TrackNotFound, ValidationFailed
from vibeshare_server.models import Track
from vibeshare_server.services.collections import CollectionKind, dump_tags, get_collection
from vibeshare_server.services.track_resolver import TrackReference, resolve_track

logger = logging.getLogger(__name__)


async def get_owned_collection(db: AsyncSession, kind: CollectionKind, collection_id: int, user_id: int):
    collection = await get_collection(db, kind, collection_id)
    if collection.user_id != user_id:
        raise Forbidden(f"You do not have permission to modify this {kind.name}")
    return collection


async def get_visible_collection(db: AsyncSession, kind: CollectionKind, collection_id: int, user_id: int):
    """Owner sees everything; others only public collections. Private ones look missing."""
    collection = await get_collection(db, kind, collection_id)
    if collection.user_id != user_id and not collection.is_public:
        raise kind.not_found()
    return collection


async def list_collections(db: AsyncSession, kind: CollectionKind, owner_id: int, viewer_id: int) -> list:
    model = kind.model
    query = select(model).where(model.user_id == owner_id)
    if owner_id != viewer_id:
        query = query.where(model.is_public.is_(True))
    result = await db.execute(query.order_by(model.name, model.id))
    return list(result.scalars().all())


async def track_counts(db: AsyncSession, kind: CollectionKind, ids: list[int]) -> dict[int, int]:
    if not ids:
        return {}
    column = kind.member_collection_column()
    result = await db.execute(select(column, func.count()).where(column.in_(ids)).group_by(column))
    return {key: count for key, count in result.all()}


async def collection_tracks(db: AsyncSession, kind: CollectionKind, collection_id: int) -> list[tuple[Track, int]]:
    """Tracks in a collection with their positions, in order."""
    member = kind.member_model
    result = await db.execute(
        select(Track, member.position)
        .join(member, member.track_id == Track.id)
        .where(kind.member_collection_column() == collection_id)
        .order_by(member.position)
    )
    return [(track, position) for track, position in result.all()]


async def _name_taken(db: AsyncSession, kind: CollectionKind, user_id: int, name: str, exclude_id: int | None = None) -> bool:
    query = select(kind.model.id).where(kind.model.user_id == user_id, kind.model.name == name)
    if exclude_id is not None:
        query = query.where(kind.model.id != exclude_id)
    return (await db.execute(query.limit(1))).scalar_one_or_none() is not None


async def create_collection(
    db: AsyncSession,
    kind: CollectionKind,
    user_id: int,
    name: str,
    description: str | None = None,
    cover_image: str | None = None,
    is_public: bool = False,
    tags: list[str] | None = None,
    color: str | None = None,
):
    name = name.strip()
    if not name:
        raise ValidationFailed(f"{kind.label} name is required", field="name")
    duplicate = DuplicateName(f"You already have a {kind.name} with this name")
    if await _name_taken(db, kind, user_id, name):
        raise duplicate

    values: dict[str, Any] = dict(
        user_id=user_id,
        name=name,
        description=description,
        cover_image=cover_image,
        is_public=is_public,
        tags=dump_tags(tags),
    )
    if kind.has_color:
        values["color"] = color
    collection = kind.model(**values)
    db.add(collection)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise duplicate
    await db.refresh(collection)
    logger.info("User %s created %s %s %r", user_id, kind.name, collection.id, name)
    return collection


async def update_collection(
    db: AsyncSession, kind: CollectionKind, collection_id: int, user_id: int, changes: dict[str, Any]
):
    """Apply a partial update. ``changes`` holds only the fields the client sent."""
    collection = await get_owned_collection(db, kind, collection_id, user_id)
    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationFailed(f"{kind.label} name is required", field="name")
        if await _name_taken(db, kind, user_id, name, exclude_id=collection_id):
            raise DuplicateName(f"You already have a {kind.name} with this name")
        collection.name = name
    for attr in ("description", "cover_image", "is_public"):
        if attr in changes:
            setattr(collection, attr, changes[attr])
    if "color" in changes and kind.has_color:
        collection.color = changes["color"]
    if "tags" in changes:
        collection.tags = dump_tags(changes["tags"])
    await db.commit()
    await db.refresh(collection)
    return collection


async def delete_collection(db: AsyncSession, kind: CollectionKind, collection_id: int, user_id: int) -> None:
    await get_owned_collection(db, kind, collection_id, user_id)
    await db.execute(delete(kind.member_model).where(kind.member_collection_column() == collection_id))
    await db.execute(delete(kind.share_model).where(kind.share_collection_column() == collection_id))
    await db.execute(delete(kind.model).where(kind.model.id == collection_id))
    await db.commit()
    logger.info("User %s deleted %s %s", user_id, kind.name, collection_id)


async def add_track(
    db: AsyncSession, kind: CollectionKind, collection_id: int, user_id: int, ref: TrackReference
) -> tuple[Track, int]:
    """Append a track at max(position) + 1. Returns the track and its position."""
    await get_owned_collection(db, kind, collection_id, user_id)
    track = await resolve_track(db, ref)
    member = kind.member_model
    fk = kind.member_collection_column()

    existing = await db.execute(
        select(member.track_id).where(fk == collection_id, member.track_id == track.id)
    )
    if existing.scalar_one_or_none() is not None:
        raise Conflict(f"Track is already in this {kind.name}")

    highest = await db.scalar(select(func.max(member.position)).where(fk == collection_id))
    position = 0 if highest is None else highest + 1
    db.add(member(**{kind.member_fk: collection_id}, track_id=track.id, position=position))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict(f"Track is already in this {kind.name}")
    return track, position


async def _member_track_id(db: AsyncSession, kind: CollectionKind, collection_id: int, track_ref: str) -> tuple[int, int]:
    """Find a member by internal track id or YouTube id; returns (track_id, position)."""
    member = kind.member_model
    match = Track.youtube_id == track_ref
    if track_ref.isdigit():
        match = or_(match, Track.id == int(track_ref))
    result = await db.execute(
        select(member.track_id, member.position)
        .join(Track, Track.id == member.track_id)
        .where(kind.member_collection_column() == collection_id, match)
        .limit(1)
    )
    row = result.first()
    if row is None:
        raise TrackNotFound(f"Track is not in this {kind.name}")
    return row.track_id, row.position


async def remove_track(db: AsyncSession, kind: CollectionKind, collection_id: int, user_id: int, track_ref: str) -> None:
    """Remove a member and close the gap so positions stay 0..n-1."""
    await get_owned_collection(db, kind, collection_id, user_id)
    track_id, position = await _member_track_id(db, kind, collection_id, track_ref)
    member = kind.member_model
    fk = kind.member_collection_column()
    await db.execute(delete(member).where(fk == collection_id, member.track_id == track_id))
    await db.execute(
        update(member)
        .where(fk == collection_id, member.position > position)
        .values(position=member.position - 1)
        .execution_options(synchronize_session=False)
    )
    await db.commit()


async def reorder_tracks(
    db: AsyncSession, kind: CollectionKind, collection_id: int, user_id: int, track_ids: list[int]
) -> None:
    """Assign positions 0..n-1 following ``track_ids``, which must list every member once."""
    await get_owned_collection(db, kind, collection_id, user_id)
    member = kind.member_model
    fk = kind.member_collection_column()
    current = set((await db.execute(select(member.track_id).where(fk == collection_id))).scalars().all())
    if len(track_ids) != len(set(track_ids)) or set(track_ids) != current:
        raise ValidationFailed(f"Track list must contain every track in the {kind.name} exactly once", field="tracks")
    for index, track_id in enumerate(track_ids):
        await db.execute(
            update(member)
            .where(fk == collection_id, member.track_id == track_id)
            .values(position=index)
            .execution_options(synchronize_session=False)
        )
    await db.commit()
