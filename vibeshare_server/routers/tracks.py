# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Track API routes."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vibeshare_server.auth import get_current_user_id
from vibeshare_server.database import get_db
from vibeshare_server.models import Track
from vibeshare_server.api.schemas import TrackRef, TrackResponse
from vibeshare_server.services.track_resolver import TrackReference, resolve_track

router = APIRouter(prefix="/tracks", tags=["tracks"])


@router.post("/resolve", response_model=TrackResponse)
async def resolve(
    data: TrackRef,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> TrackResponse:
    """Return the canonical track for a reference, creating it if it is new."""
    track = await resolve_track(db, TrackReference(**data.model_dump()))
    return TrackResponse.model_validate(track)


@router.get("/{track_id}", response_model=TrackResponse)
async def get_track(
    track_id: int,
    db: AsyncSession = Depends(get_db),
) -> TrackResponse:
    """Get track by ID."""
    result = await db.execute(select(Track).where(Track.id == track_id))
    track = result.scalar_one_or_none()
    if not track:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Track not found")
    return TrackResponse.model_validate(track)
