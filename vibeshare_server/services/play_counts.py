# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Per-user play totals behind the most-played list."""

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from vibeshare_server.models import PlayCount, Track

_UPSERTS = {"postgresql": postgresql_insert, "sqlite": sqlite_insert}


async def bump_play_count(db: AsyncSession, user_id: int, track_id: int) -> None:
    """Insert the row at 1 or add 1 in a single statement. The caller commits."""
    insert = _UPSERTS[db.get_bind().dialect.name]
    stmt = insert(PlayCount).values(user_id=user_id, track_id=track_id, count=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=[PlayCount.user_id, PlayCount.track_id],
        set_={"count": PlayCount.count + 1, "last_played_at": func.now()},
    )
    await db.execute(stmt)


async def most_played(db: AsyncSession, user_id: int, limit: int = 10) -> list[tuple[Track, int]]:
    result = await db.execute(
        select(Track, PlayCount.count)
        .join(PlayCount, PlayCount.track_id == Track.id)
        .where(PlayCount.user_id == user_id)
        .order_by(PlayCount.count.desc(), PlayCount.last_played_at.desc(), PlayCount.id)
        .limit(limit)
    )
    return [(track, count) for track, count in result.all()]
