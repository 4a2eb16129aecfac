# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Routes shared by playlists and genres. ``collection_router`` builds one router per kind."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from vibeshare_server.api.schemas import (
    CollectionCreate,
    CollectionDetail,
    CollectionReorder,
    CollectionResponse,
    CollectionTrackAdd,
    CollectionTrackAdded,
    CollectionTrackResponse,
    CollectionUpdate,
    DiscoveredCollectionResponse,
    DiscoveryResponse,
    Pagination,
    PopularTag,
    ShareHistoryItem,
    ShareRequest,
    ShareResponse,
    TrackPreview,
    TrackResponse,
    UserSummary,
)
from vibeshare_server.auth import get_current_user_id
from vibeshare_server.config import settings
from vibeshare_server.database import get_db
from vibeshare_server.services import discovery, library, sharing
from vibeshare_server.services.collections import CollectionKind, parse_tags
from vibeshare_server.services.track_resolver import TrackReference


def collection_response(kind: CollectionKind, collection, track_count: int = 0) -> CollectionResponse:
    return CollectionResponse(
        id=collection.id,
        user_id=collection.user_id,
        name=collection.name,
        description=collection.description,
        cover_image=collection.cover_image,
        color=getattr(collection, "color", None),
        is_public=collection.is_public,
        share_count=collection.share_count,
        source_id=getattr(collection, kind.source_fk),
        tags=parse_tags(collection.tags),
        track_count=track_count,
        created_at=collection.created_at,
    )


def _discovered_response(item: discovery.DiscoveredCollection) -> DiscoveredCollectionResponse:
    c = item.collection
    return DiscoveredCollectionResponse(
        id=c.id,
        name=c.name,
        description=c.description,
        cover_image=c.cover_image,
        color=getattr(c, "color", None),
        share_count=c.share_count,
        track_count=item.track_count,
        total_shares=item.total_shares,
        tags=item.tags,
        created_at=c.created_at,
        creator=UserSummary.model_validate(item.owner),
        preview_tracks=[TrackPreview.model_validate(t) for t in item.preview_tracks],
    )


def collection_router(kind: CollectionKind) -> APIRouter:
    router = APIRouter(prefix=f"/{kind.name}s", tags=[f"{kind.name}s"])

    @router.get("", response_model=list[CollectionResponse])
    async def list_collections(
        owner_id: int | None = Query(None, alias="user_id"),
        user_id: int = Depends(get_current_user_id),
        db: AsyncSession = Depends(get_db),
    ) -> list[CollectionResponse]:
        """List the current user's collections, or another user's public ones."""
        collections = await library.list_collections(db, kind, owner_id or user_id, user_id)
        counts = await library.track_counts(db, kind, [c.id for c in collections])
        return [collection_response(kind, c, counts.get(c.id, 0)) for c in collections]

    @router.post("", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
    async def create_collection(
        data: CollectionCreate,
        user_id: int = Depends(get_current_user_id),
        db: AsyncSession = Depends(get_db),
    ) -> CollectionResponse:
        collection = await library.create_collection(
            db,
            kind,
            user_id,
            name=data.name,
            description=data.description,
            cover_image=data.cover_image,
            is_public=data.is_public,
            tags=data.tags,
            color=data.color,
        )
        return collection_response(kind, collection)

    @router.get("/discover", response_model=DiscoveryResponse)
    async def discover(
        search: str | None = Query(None),
        tags: str | None = Query(None, description="Comma-separated tags"),
        sort_by: str = Query(discovery.SORT_SHARE_COUNT, description="shareCount, createdAt or name"),
        limit: int = Query(settings.discovery_default_limit, ge=1, le=settings.discovery_max_limit),
        offset: int = Query(0, ge=0),
        user_id: int = Depends(get_current_user_id),
        db: AsyncSession = Depends(get_db),
    ) -> DiscoveryResponse:
        """Public collections from other users, matching any of the search text or tags."""
        tag_list = [t for t in (tags or "").split(",") if t.strip()]
        page = await discovery.discover_collections(
            db, kind, user_id, search=search, tags=tag_list, sort=sort_by, limit=limit, offset=offset
        )
        return DiscoveryResponse(
            items=[_discovered_response(item) for item in page.items],
            pagination=Pagination(
                total=page.total, limit=page.limit, offset=page.offset, has_more=page.has_more
            ),
        )

    @router.get("/discover/tags", response_model=list[PopularTag])
    async def discover_tags(
        user_id: int = Depends(get_current_user_id),
        db: AsyncSession = Depends(get_db),
    ) -> list[PopularTag]:
        """Most used tags on public collections."""
        return [PopularTag(tag=tag, count=count) for tag, count in await discovery.popular_tags(db, kind)]

    @router.get("/{collection_id}", response_model=CollectionDetail)
    async def get_collection(
        collection_id: int,
        user_id: int = Depends(get_current_user_id),
        db: AsyncSession = Depends(get_db),
    ) -> CollectionDetail:
        collection = await library.get_visible_collection(db, kind, collection_id, user_id)
        tracks = await library.collection_tracks(db, kind, collection_id)
        base = collection_response(kind, collection, len(tracks))
        return CollectionDetail(
            **base.model_dump(),
            tracks=[
                CollectionTrackResponse(**TrackResponse.model_validate(t).model_dump(), order=position)
                for t, position in tracks
            ],
        )

    @router.patch("/{collection_id}", response_model=CollectionResponse)
    async def update_collection(
        collection_id: int,
        data: CollectionUpdate,
        user_id: int = Depends(get_current_user_id),
        db: AsyncSession = Depends(get_db),
    ) -> CollectionResponse:
        collection = await library.update_collection(
            db, kind, collection_id, user_id, data.model_dump(exclude_unset=True)
        )
        counts = await library.track_counts(db, kind, [collection.id])
        return collection_response(kind, collection, counts.get(collection.id, 0))

    @router.delete("/{collection_id}")
    async def delete_collection(
        collection_id: int,
        user_id: int = Depends(get_current_user_id),
        db: AsyncSession = Depends(get_db),
    ) -> dict:
        await library.delete_collection(db, kind, collection_id, user_id)
        return {"status": "ok"}

    @router.post("/{collection_id}/tracks", response_model=CollectionTrackAdded)
    async def add_track(
        collection_id: int,
        data: CollectionTrackAdd,
        user_id: int = Depends(get_current_user_id),
        db: AsyncSession = Depends(get_db),
    ) -> CollectionTrackAdded:
        """Add a track by any known identifier; unknown YouTube ids are created on the fly."""
        track, position = await library.add_track(
            db, kind, collection_id, user_id, TrackReference(**data.track.model_dump())
        )
        return CollectionTrackAdded(track=TrackResponse.model_validate(track), order=position)

    @router.put("/{collection_id}/tracks")
    async def reorder_tracks(
        collection_id: int,
        data: CollectionReorder,
        user_id: int = Depends(get_current_user_id),
        db: AsyncSession = Depends(get_db),
    ) -> dict:
        await library.reorder_tracks(db, kind, collection_id, user_id, data.tracks)
        return {"status": "ok"}

    @router.delete("/{collection_id}/tracks/{track_ref}")
    async def remove_track(
        collection_id: int,
        track_ref: str,
        user_id: int = Depends(get_current_user_id),
        db: AsyncSession = Depends(get_db),
    ) -> dict:
        await library.remove_track(db, kind, collection_id, user_id, track_ref)
        return {"status": "ok"}

    @router.post("/{collection_id}/share", response_model=ShareResponse)
    async def share(
        collection_id: int,
        data: ShareRequest,
        user_id: int = Depends(get_current_user_id),
        db: AsyncSession = Depends(get_db),
    ) -> ShareResponse:
        """Share with a user (copy or reference) or publicly when no target is given."""
        result = await sharing.share_collection(
            db,
            kind,
            collection_id,
            user_id,
            target_user_id=data.share_to_user_id,
            share_type=data.share_type,
            message=data.message,
        )
        if result.copied:
            message = f"{kind.label} successfully copied to user"
        else:
            message = f"{kind.label} shared successfully"
        return ShareResponse(
            share_id=result.share_id, copied_id=result.copied_collection_id, message=message
        )

    @router.get("/{collection_id}/shares", response_model=list[ShareHistoryItem])
    async def share_history(
        collection_id: int,
        user_id: int = Depends(get_current_user_id),
        db: AsyncSession = Depends(get_db),
    ) -> list[ShareHistoryItem]:
        records = await sharing.share_history(db, kind, collection_id, user_id)
        return [
            ShareHistoryItem(
                id=r.id,
                share_type=r.share_type,
                message=r.message,
                created_at=r.created_at,
                shared_by=UserSummary.model_validate(r.shared_by),
                shared_to=UserSummary.model_validate(r.shared_to) if r.shared_to else None,
            )
            for r in records
        ]

    return router
