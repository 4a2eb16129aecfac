# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Favorites, recently played and most played for the current user."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from vibeshare_server.auth import get_current_user_id
from vibeshare_server.database import get_db
from vibeshare_server.models import Favorite, RecentlyPlayed, Track
from vibeshare_server.api.schemas import (
    FavoriteToggle,
    FavoriteToggleResponse,
    MostPlayedItem,
    RecentlyPlayedAdd,
    RecentlyPlayedItem,
    TrackResponse,
)
from vibeshare_server.services.play_counts import bump_play_count, most_played
from vibeshare_server.services.track_resolver import TrackReference, resolve_track

router = APIRouter(prefix="/me", tags=["listening"])


@router.get("/favorites", response_model=list[TrackResponse])
async def list_favorites(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[TrackResponse]:
    result = await db.execute(
        select(Track)
        .join(Favorite, Favorite.track_id == Track.id)
        .where(Favorite.user_id == user_id)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
    )
    return [TrackResponse.model_validate(t) for t in result.scalars().all()]


@router.post("/favorites", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    data: FavoriteToggle,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> FavoriteToggleResponse:
    """Add the track to favorites, or remove it when it is already there."""
    track = await resolve_track(db, TrackReference(**data.track.model_dump()))
    result = await db.execute(
        select(Favorite).where(Favorite.user_id == user_id, Favorite.track_id == track.id)
    )
    existing = result.scalar_one_or_none()
    if existing:
        await db.execute(delete(Favorite).where(Favorite.id == existing.id))
    else:
        db.add(Favorite(user_id=user_id, track_id=track.id))
    await db.commit()
    return FavoriteToggleResponse(is_favorite=existing is None, track=TrackResponse.model_validate(track))


@router.get("/recently-played", response_model=list[RecentlyPlayedItem])
async def list_recently_played(
    limit: int = Query(10, ge=1, le=100),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[RecentlyPlayedItem]:
    result = await db.execute(
        select(RecentlyPlayed, Track)
        .join(Track, RecentlyPlayed.track_id == Track.id)
        .where(RecentlyPlayed.user_id == user_id)
        .order_by(RecentlyPlayed.played_at.desc(), RecentlyPlayed.id.desc())
        .limit(limit)
    )
    return [
        RecentlyPlayedItem(track=TrackResponse.model_validate(t), played_at=rp.played_at)
        for rp, t in result.all()
    ]


@router.post("/recently-played", response_model=RecentlyPlayedItem)
async def record_play(
    data: RecentlyPlayedAdd,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> RecentlyPlayedItem:
    track = await resolve_track(db, TrackReference(**data.track.model_dump()))
    play = RecentlyPlayed(user_id=user_id, track_id=track.id)
    db.add(play)
    await bump_play_count(db, user_id, track.id)
    await db.commit()
    await db.refresh(play)
    return RecentlyPlayedItem(track=TrackResponse.model_validate(track), played_at=play.played_at)


@router.get("/most-played", response_model=list[MostPlayedItem])
async def list_most_played(
    limit: int = Query(10, ge=1, le=100),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[MostPlayedItem]:
    """Tracks by play count, highest first. Ties go to the most recently played."""
    return [
        MostPlayedItem(track=TrackResponse.model_validate(t), play_count=count)
        for t, count in await most_played(db, user_id, limit)
    ]
