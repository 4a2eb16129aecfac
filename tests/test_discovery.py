# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Discovery of other users' public collections."""

from sqlalchemy import update

from vibeshare_server.models import Playlist
from vibeshare_server.services.collections import GENRES, PLAYLISTS
from vibeshare_server.services.discovery import (
    FIELD_TAGS,
    OP_HAS_TAG,
    SORT_NAME,
    FilterClause,
    build_discovery_clauses,
    discover_collections,
    popular_tags,
)

from conftest import auth_headers


def test_clauses_for_search_and_tags():
    clauses = build_discovery_clauses("chill", ["lofi", " ", "jazz"])
    assert [c.field for c in clauses] == ["name", "description", "owner.name", "owner.username", "tags", "tags"]
    assert clauses[-1] == FilterClause(FIELD_TAGS, OP_HAS_TAG, "jazz")
    assert build_discovery_clauses("  ", None) == []


async def test_excludes_own_and_private(db, make_user, make_playlist):
    me = await make_user("me")
    other = await make_user("other")
    await make_playlist(me, "Mine")
    await make_playlist(other, "Hidden", is_public=False)
    visible = await make_playlist(other, "Visible")

    page = await discover_collections(db, PLAYLISTS, me.id)

    assert [item.collection.id for item in page.items] == [visible.id]
    assert page.total == 1
    assert page.items[0].owner.username == "other"


async def test_search_matches_any_field(db, make_user, make_playlist):
    me = await make_user("me")
    dj = await make_user("djsunset", name="Sunset DJ")
    plain = await make_user("plain")
    by_name = await make_playlist(plain, "Sunset Drive")
    by_description = await make_playlist(plain, "Evening", description="songs for a SUNSET")
    by_owner = await make_playlist(dj, "Warmup")
    await make_playlist(plain, "Morning")

    page = await discover_collections(db, PLAYLISTS, me.id, search="sunset", sort=SORT_NAME)

    assert [item.collection.id for item in page.items] == [by_description.id, by_name.id, by_owner.id]


async def test_search_or_tags(db, make_user, make_playlist):
    me = await make_user("me")
    other = await make_user("other")
    tagged = await make_playlist(other, "Beats", tags=["lofi", "study"])
    named = await make_playlist(other, "Lounge")
    await make_playlist(other, "Unrelated", tags=["metal"])

    page = await discover_collections(db, PLAYLISTS, me.id, search="lounge", tags=["lofi"], sort=SORT_NAME)

    assert [item.collection.id for item in page.items] == [tagged.id, named.id]
    assert page.items[0].tags == ["lofi", "study"]


async def test_tag_filter_is_case_insensitive_substring(db, make_user, make_playlist):
    me = await make_user("me")
    other = await make_user("other")
    indie = await make_playlist(other, "Evening", tags=["indie rock"])
    upper = await make_playlist(other, "Morning", tags=["Rock"])
    accented = await make_playlist(other, "Paris", tags=["Café Rock"])
    await make_playlist(other, "Night", tags=["jazz"])

    page = await discover_collections(db, PLAYLISTS, me.id, tags=["rock"], sort=SORT_NAME)
    assert [item.collection.id for item in page.items] == [indie.id, upper.id, accented.id]

    page = await discover_collections(db, PLAYLISTS, me.id, tags=["café"])
    assert [item.collection.id for item in page.items] == [accented.id]


async def test_tag_filter_escapes_wildcards(db, make_user, make_playlist):
    me = await make_user("me")
    other = await make_user("other")
    literal = await make_playlist(other, "Sale", tags=["50%_off"])
    await make_playlist(other, "Other", tags=["50 off"])

    page = await discover_collections(db, PLAYLISTS, me.id, tags=["50%_"])
    assert [item.collection.id for item in page.items] == [literal.id]


async def test_search_treats_wildcards_literally(db, make_user, make_playlist):
    me = await make_user("me")
    other = await make_user("other")
    literal = await make_playlist(other, "100% Hits")
    await make_playlist(other, "1000 Hits")

    page = await discover_collections(db, PLAYLISTS, me.id, search="100%")
    assert [item.collection.id for item in page.items] == [literal.id]


async def test_sort_by_share_count_then_id(db, make_user, make_playlist):
    me = await make_user("me")
    other = await make_user("other")
    first = await make_playlist(other, "A")
    second = await make_playlist(other, "B")
    popular = await make_playlist(other, "C")
    await db.execute(update(Playlist).where(Playlist.id == popular.id).values(share_count=5))
    await db.commit()

    page = await discover_collections(db, PLAYLISTS, me.id)
    assert [item.collection.id for item in page.items] == [popular.id, first.id, second.id]


async def test_pages_are_disjoint(db, make_user, make_playlist):
    me = await make_user("me")
    other = await make_user("other")
    for i in range(5):
        await make_playlist(other, f"List {i}")

    first = await discover_collections(db, PLAYLISTS, me.id, limit=2, offset=0)
    second = await discover_collections(db, PLAYLISTS, me.id, limit=2, offset=2)
    last = await discover_collections(db, PLAYLISTS, me.id, limit=2, offset=4)

    ids = [i.collection.id for page in (first, second, last) for i in page.items]
    assert len(ids) == len(set(ids)) == 5
    assert first.total == 5
    assert first.has_more and second.has_more
    assert not last.has_more


async def test_preview_and_counts(db, make_user, make_genre):
    me = await make_user("me")
    other = await make_user("other")
    genre = await make_genre(other, "Afrobeats", track_count=5)

    page = await discover_collections(db, GENRES, me.id)

    item = page.items[0]
    assert item.collection.id == genre.id
    assert item.track_count == 5
    assert item.total_shares == 0
    assert [t.title for t in item.preview_tracks] == ["Song 1", "Song 2", "Song 3"]


async def test_popular_tags_ties_alphabetical(db, make_user, make_playlist):
    other = await make_user("other")
    await make_playlist(other, "One", tags=["rock", "indie"])
    await make_playlist(other, "Two", tags=["rock", "chill"])
    await make_playlist(other, "Three", tags=["indie", "chill", "jazz"])
    await make_playlist(other, "Private", is_public=False, tags=["jazz", "jazz2"])

    assert await popular_tags(db, PLAYLISTS) == [("chill", 2), ("indie", 2), ("rock", 2), ("jazz", 1)]
    assert await popular_tags(db, PLAYLISTS, limit=1) == [("chill", 2)]


async def test_discover_over_http(client, make_user, make_playlist):
    me = await make_user("me")
    other = await make_user("other", name="Other Person")
    await make_playlist(other, "Road", track_count=2, tags=["road"])
    await make_playlist(other, "Sea", tags=["beach"])

    r = await client.get(
        "/api/v1/playlists/discover",
        params={"tags": "road,beach", "sort_by": "name", "limit": 1},
        headers=auth_headers(me),
    )
    assert r.status_code == 200
    body = r.json()
    assert body["pagination"] == {"total": 2, "limit": 1, "offset": 0, "has_more": True}
    item = body["items"][0]
    assert item["name"] == "Road"
    assert item["creator"]["username"] == "other"
    assert len(item["preview_tracks"]) == 2

    r = await client.get("/api/v1/playlists/discover/tags", headers=auth_headers(me))
    assert r.status_code == 200
    assert r.json() == [{"tag": "beach", "count": 1}, {"tag": "road", "count": 1}]


async def test_discover_limit_is_capped(client, make_user):
    me = await make_user("me")
    r = await client.get("/api/v1/genres/discover", params={"limit": 1000}, headers=auth_headers(me))
    assert r.status_code == 422
