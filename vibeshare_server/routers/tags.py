# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Personal track tag routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vibeshare_server.api.schemas import (
    TagCreate,
    TagDetail,
    TagResponse,
    TagTrackAdd,
    TagUpdate,
    TrackResponse,
)
from vibeshare_server.auth import get_current_user_id
from vibeshare_server.database import get_db
from vibeshare_server.models import Tag
from vibeshare_server.services import tags as tag_service
from vibeshare_server.services.track_resolver import TrackReference

router = APIRouter(prefix="/tags", tags=["tags"])


def tag_response(tag: Tag, youtube_ids: list[str]) -> TagResponse:
    return TagResponse(
        id=tag.id, name=tag.name, color=tag.color, track_ids=youtube_ids, created_at=tag.created_at
    )


@router.get("", response_model=list[TagResponse])
async def list_tags(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[TagResponse]:
    summaries = await tag_service.list_tags(db, user_id)
    return [tag_response(s.tag, s.youtube_ids) for s in summaries]


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(
    data: TagCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> TagResponse:
    tag = await tag_service.create_tag(db, user_id, data.name, data.color)
    return tag_response(tag, [])


@router.get("/{tag_id}", response_model=TagDetail)
async def get_tag(
    tag_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> TagDetail:
    tag = await tag_service.get_owned_tag(db, tag_id, user_id)
    tracks = await tag_service.tag_tracks(db, tag_id)
    base = tag_response(tag, [t.youtube_id for t in tracks])
    return TagDetail(**base.model_dump(), tracks=[TrackResponse.model_validate(t) for t in tracks])


@router.patch("/{tag_id}", response_model=TagResponse)
async def update_tag(
    tag_id: int,
    data: TagUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> TagResponse:
    tag = await tag_service.update_tag(db, tag_id, user_id, data.model_dump(exclude_unset=True))
    tracks = await tag_service.tag_tracks(db, tag_id)
    return tag_response(tag, [t.youtube_id for t in tracks])


@router.delete("/{tag_id}")
async def delete_tag(
    tag_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> dict:
    await tag_service.delete_tag(db, tag_id, user_id)
    return {"status": "ok"}


@router.post("/{tag_id}/tracks", response_model=TrackResponse)
async def add_track(
    tag_id: int,
    data: TagTrackAdd,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> TrackResponse:
    """Tag a track by any known identifier; unknown YouTube ids are created on the fly."""
    track = await tag_service.add_track(db, tag_id, user_id, TrackReference(**data.track.model_dump()))
    return TrackResponse.model_validate(track)


@router.delete("/{tag_id}/tracks/{track_ref}")
async def remove_track(
    tag_id: int,
    track_ref: str,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> dict:
    await tag_service.remove_track(db, tag_id, user_id, track_ref)
    return {"status": "ok"}
