# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Browse other users' public playlists and genres."""

import logging
from collections import Counter
from dataclasses import dataclass, field

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vibeshare_server.config import settings
from vibeshare_server.models import Track, User
from vibeshare_server.services.collections import CollectionKind, parse_tags

logger = logging.getLogger(__name__)

SORT_SHARE_COUNT = "shareCount"
SORT_CREATED_AT = "createdAt"
SORT_NAME = "name"

# Fields a discovery clause may target
FIELD_NAME = "name"
FIELD_DESCRIPTION = "description"
FIELD_OWNER_NAME = "owner.name"
FIELD_OWNER_USERNAME = "owner.username"
FIELD_TAGS = "tags"

OP_CONTAINS = "contains"
OP_HAS_TAG = "has_tag"


@dataclass(frozen=True)
class FilterClause:
    field: str
    operator: str
    value: str


@dataclass
class DiscoveredCollection:
    collection: object
    owner: User
    track_count: int = 0
    total_shares: int = 0
    tags: list[str] = field(default_factory=list)
    preview_tracks: list[Track] = field(default_factory=list)


@dataclass
class DiscoveryPage:
    items: list[DiscoveredCollection]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total


def build_discovery_clauses(search: str | None, tags: list[str] | None) -> list[FilterClause]:
    """OR-list of match clauses. Empty means "no text filter"."""
    clauses: list[FilterClause] = []
    search = (search or "").strip()
    if search:
        for name in (FIELD_NAME, FIELD_DESCRIPTION, FIELD_OWNER_NAME, FIELD_OWNER_USERNAME):
            clauses.append(FilterClause(name, OP_CONTAINS, search))
    for tag in tags or []:
        tag = tag.strip()
        if tag:
            clauses.append(FilterClause(FIELD_TAGS, OP_HAS_TAG, tag))
    return clauses


def _clause_expression(kind: CollectionKind, clause: FilterClause):
    model = kind.model
    if clause.operator == OP_HAS_TAG:
        # Substring of the stored tag list, so "rock" also finds "indie rock"
        return model.tags.icontains(clause.value, autoescape=True)
    columns = {
        FIELD_NAME: model.name,
        FIELD_DESCRIPTION: model.description,
        FIELD_OWNER_NAME: User.name,
        FIELD_OWNER_USERNAME: User.username,
    }
    if clause.operator != OP_CONTAINS or clause.field not in columns:
        raise ValueError(f"Unsupported discovery clause {clause}")
    return columns[clause.field].icontains(clause.value, autoescape=True)


def discovery_conditions(kind: CollectionKind, requester_id: int, clauses: list[FilterClause]) -> list:
    conditions = [kind.model.is_public.is_(True), kind.model.user_id != requester_id]
    if clauses:
        conditions.append(or_(*(_clause_expression(kind, c) for c in clauses)))
    return conditions


def _order_by(kind: CollectionKind, sort: str):
    model = kind.model
    if sort == SORT_CREATED_AT:
        primary = model.created_at.desc()
    elif sort == SORT_NAME:
        primary = model.name.asc()
    else:
        primary = model.share_count.desc()
    return primary, model.id.asc()


async def _preview_tracks(db: AsyncSession, kind: CollectionKind, ids: list[int]) -> dict[int, list[Track]]:
    member = kind.member_model
    fk = kind.member_collection_column()
    ranked = (
        select(
            fk.label("collection_id"),
            member.track_id,
            member.position,
            func.row_number().over(partition_by=fk, order_by=member.position).label("rank"),
        )
        .where(fk.in_(ids))
        .subquery()
    )
    result = await db.execute(
        select(ranked.c.collection_id, Track)
        .join(Track, Track.id == ranked.c.track_id)
        .where(ranked.c.rank <= settings.discovery_preview_tracks)
        .order_by(ranked.c.collection_id, ranked.c.position)
    )
    previews: dict[int, list[Track]] = {i: [] for i in ids}
    for collection_id, track in result.all():
        previews[collection_id].append(track)
    return previews


async def _counts(db: AsyncSession, column, ids: list[int]) -> dict[int, int]:
    result = await db.execute(
        select(column, func.count()).where(column.in_(ids)).group_by(column)
    )
    return {key: count for key, count in result.all()}


async def discover_collections(
    db: AsyncSession,
    kind: CollectionKind,
    requester_id: int,
    search: str | None = None,
    tags: list[str] | None = None,
    sort: str = SORT_SHARE_COUNT,
    limit: int | None = None,
    offset: int = 0,
) -> DiscoveryPage:
    """Public collections not owned by ``requester_id`` matching any search/tag clause."""
    limit = limit or settings.discovery_default_limit
    conditions = discovery_conditions(kind, requester_id, build_discovery_clauses(search, tags))
    model = kind.model

    total = await db.scalar(
        select(func.count())
        .select_from(model)
        .join(User, model.user_id == User.id)
        .where(*conditions)
    ) or 0

    result = await db.execute(
        select(model, User)
        .join(User, model.user_id == User.id)
        .where(*conditions)
        .order_by(*_order_by(kind, sort))
        .limit(limit)
        .offset(offset)
    )
    rows = result.all()
    ids = [collection.id for collection, _ in rows]
    previews, track_counts, share_counts = {}, {}, {}
    if ids:
        previews = await _preview_tracks(db, kind, ids)
        track_counts = await _counts(db, kind.member_collection_column(), ids)
        share_counts = await _counts(db, kind.share_collection_column(), ids)

    items = [
        DiscoveredCollection(
            collection=collection,
            owner=owner,
            track_count=track_counts.get(collection.id, 0),
            total_shares=share_counts.get(collection.id, 0),
            tags=parse_tags(collection.tags),
            preview_tracks=previews.get(collection.id, []),
        )
        for collection, owner in rows
    ]
    logger.debug("Discovery for user %s matched %s %ss", requester_id, total, kind.name)
    return DiscoveryPage(items=items, total=total, limit=limit, offset=offset)


async def popular_tags(db: AsyncSession, kind: CollectionKind, limit: int | None = None) -> list[tuple[str, int]]:
    """Most used tags across public collections. Equal counts sort alphabetically."""
    limit = limit or settings.popular_tags_limit
    result = await db.execute(
        select(kind.model.tags).where(kind.model.is_public.is_(True), kind.model.tags.is_not(None))
    )
    counts: Counter[str] = Counter()
    for raw in result.scalars().all():
        counts.update(set(parse_tags(raw)))
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:limit]
