# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Share playlists and genres with other users or publicly.

Every share writes an audit record first and commits it. Copy shares to a
user then duplicate the collection into the target's library; all other shares
only bump the source's share counter.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vibeshare_server.errors import DuplicateName, Forbidden, TargetNotFound, UserNotFound
from vibeshare_server.models import User
from vibeshare_server.models.share import SHARE_TYPE_COPY
from vibeshare_server.services.collections import CollectionKind, get_collection

logger = logging.getLogger(__name__)


@dataclass
class ShareResult:
    share_id: int
    copied_collection_id: int | None = None

    @property
    def copied(self) -> bool:
        return self.copied_collection_id is not None


async def _get_user(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def _owned_name_exists(db: AsyncSession, kind: CollectionKind, user_id: int, name: str) -> bool:
    result = await db.execute(
        select(kind.model.id).where(kind.model.user_id == user_id, kind.model.name == name).limit(1)
    )
    return result.scalar_one_or_none() is not None


async def _increment_share_count(db: AsyncSession, kind: CollectionKind, collection_id: int) -> None:
    await db.execute(
        update(kind.model)
        .where(kind.model.id == collection_id)
        .values(share_count=kind.model.share_count + 1)
        .execution_options(synchronize_session=False)
    )
    await db.commit()


def _attributed_description(description: str | None, owner: User) -> str:
    return f"{description or ''} (Shared by {owner.display_name})".strip()


async def _copy_collection(db: AsyncSession, kind: CollectionKind, source, owner: User, target: User) -> int:
    """Duplicate ``source`` into ``target``'s library in one transaction; returns the new id."""
    copy = kind.model(
        user_id=target.id,
        name=source.name,
        description=_attributed_description(source.description, owner),
        is_public=False,
        tags=source.tags,
        **{kind.source_fk: source.id},
        **{field: getattr(source, field) for field in kind.copied_fields},
    )
    db.add(copy)
    await db.flush()

    member = kind.member_model
    rows = await db.execute(
        select(member.track_id, member.position)
        .where(kind.member_collection_column() == source.id)
        .order_by(member.position)
    )
    db.add_all(
        member(**{kind.member_fk: copy.id}, track_id=track_id, position=position)
        for track_id, position in rows.all()
    )
    await db.commit()
    return copy.id


async def share_collection(
    db: AsyncSession,
    kind: CollectionKind,
    source_id: int,
    acting_user_id: int,
    target_user_id: int | None = None,
    share_type: str = SHARE_TYPE_COPY,
    message: str | None = None,
) -> ShareResult:
    """Share a playlist or genre.

    Raises CollectionNotFound, UserNotFound, Forbidden or TargetNotFound before
    anything is written. Raises DuplicateName (with ``share_id``) when a copy
    was requested but the target already owns a collection with that name.
    """
    source = await get_collection(db, kind, source_id)
    if not source.is_public and source.user_id != acting_user_id:
        raise Forbidden(f"Cannot share private {kind.name}")
    if await _get_user(db, acting_user_id) is None:
        raise UserNotFound()
    owner = await _get_user(db, source.user_id)

    target = None
    if target_user_id is not None:
        target = await _get_user(db, target_user_id)
        if target is None:
            raise TargetNotFound()

    share = kind.share_model(
        **{kind.share_fk: source.id},
        shared_by_id=acting_user_id,
        shared_to_id=target_user_id,
        share_type=share_type,
        message=message,
    )
    db.add(share)
    await db.commit()
    logger.info(
        "User %s shared %s %s (%s) to %s as share %s",
        acting_user_id, kind.name, source.id, share_type, target_user_id or "public", share.id,
    )

    share_id, name = share.id, source.name
    if share_type == SHARE_TYPE_COPY and target is not None:
        duplicate = DuplicateName(f"User already has a {kind.name} with this name", share_id=share_id)
        if await _owned_name_exists(db, kind, target_user_id, name):
            logger.info("Share %s not copied: user %s already owns %r", share_id, target_user_id, name)
            raise duplicate
        try:
            copied_id = await _copy_collection(db, kind, source, owner, target)
        except IntegrityError:
            # Rollback expires loaded rows; only the ids captured above are used from here on.
            await db.rollback()
            logger.info("Share %s lost a copy race for %r on user %s", share_id, name, target_user_id)
            raise duplicate
        await _increment_share_count(db, kind, source_id)
        logger.info("Share %s copied %s %s to %s %s", share_id, kind.name, source_id, kind.name, copied_id)
        return ShareResult(share_id=share_id, copied_collection_id=copied_id)

    await _increment_share_count(db, kind, source_id)
    return ShareResult(share_id=share_id)


@dataclass
class ShareRecord:
    id: int
    share_type: str
    message: str | None
    created_at: datetime
    shared_by: User
    shared_to: User | None


async def share_history(
    db: AsyncSession, kind: CollectionKind, collection_id: int, acting_user_id: int
) -> list[ShareRecord]:
    """Share records for a collection, newest first. Only the owner may look."""
    collection = await get_collection(db, kind, collection_id)
    if collection.user_id != acting_user_id:
        raise Forbidden(f"Only the owner can view this {kind.name}'s shares")

    share = kind.share_model
    result = await db.execute(
        select(share)
        .where(kind.share_collection_column() == collection_id)
        .order_by(share.created_at.desc(), share.id.desc())
    )
    shares = result.scalars().all()
    user_ids = {s.shared_by_id for s in shares} | {s.shared_to_id for s in shares if s.shared_to_id}
    users: dict[int, User] = {}
    if user_ids:
        users_result = await db.execute(select(User).where(User.id.in_(user_ids)))
        users = {u.id: u for u in users_result.scalars().all()}
    return [
        ShareRecord(
            id=s.id,
            share_type=s.share_type,
            message=s.message,
            created_at=s.created_at,
            shared_by=users[s.shared_by_id],
            shared_to=users.get(s.shared_to_id) if s.shared_to_id else None,
        )
        for s in shares
    ]
