# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Follows, posts, likes, comments, favorites and play history."""

from sqlalchemy import select

from vibeshare_server.models import PlayCount
from vibeshare_server.services.play_counts import bump_play_count, most_played

from conftest import auth_headers


async def test_follow_toggle_and_lists(client, make_user):
    ada = await make_user("ada", name="Ada")
    bob = await make_user("bob")

    r = await client.post(f"/api/v1/users/{bob.id}/follow", headers=auth_headers(ada))
    assert r.json() == {"following": True, "follower_count": 1}

    r = await client.get(f"/api/v1/users/{bob.id}/followers", headers=auth_headers(ada))
    assert [u["username"] for u in r.json()] == ["ada"]
    r = await client.get(f"/api/v1/users/{ada.id}/following", headers=auth_headers(bob))
    assert [u["username"] for u in r.json()] == ["bob"]

    r = await client.get("/api/v1/users/by-username/bob", headers=auth_headers(ada))
    assert r.json()["is_following"] is True
    assert r.json()["follower_count"] == 1

    r = await client.post(f"/api/v1/users/{bob.id}/follow", headers=auth_headers(ada))
    assert r.json() == {"following": False, "follower_count": 0}


async def test_cannot_follow_self_or_missing_user(client, make_user):
    ada = await make_user("ada")
    assert (await client.post(f"/api/v1/users/{ada.id}/follow", headers=auth_headers(ada))).status_code == 400
    assert (await client.post("/api/v1/users/424242/follow", headers=auth_headers(ada))).status_code == 404


async def test_user_search_excludes_self(client, make_user):
    ada = await make_user("ada", name="Ada Music")
    await make_user("musicfan")
    await make_user("zed", name="Zed")

    r = await client.get("/api/v1/users/search", params={"q": "music"}, headers=auth_headers(ada))
    assert [u["username"] for u in r.json()] == ["musicfan"]


async def test_feed_shows_followed_non_private_posts(client, make_user):
    ada = await make_user("ada")
    bob = await make_user("bob")
    carl = await make_user("carl")
    await client.post(f"/api/v1/users/{bob.id}/follow", headers=auth_headers(ada))

    for user, content, visibility in (
        (bob, "bob public", "public"),
        (bob, "bob private", "private"),
        (carl, "carl public", "public"),
        (ada, "ada private", "private"),
    ):
        r = await client.post(
            "/api/v1/social/posts",
            json={"type": "text", "content": content, "visibility": visibility},
            headers=auth_headers(user),
        )
        assert r.status_code == 201

    r = await client.get("/api/v1/social/feed", headers=auth_headers(ada))
    assert [p["content"] for p in r.json()] == ["ada private", "bob public"]


async def test_likes_and_comments(client, make_user):
    ada = await make_user("ada")
    bob = await make_user("bob")
    r = await client.post(
        "/api/v1/social/posts", json={"type": "playlist", "content": "new mix", "media_id": "7"},
        headers=auth_headers(ada),
    )
    post_id = r.json()["id"]

    r = await client.post(f"/api/v1/social/posts/{post_id}/like", headers=auth_headers(bob))
    assert r.json() == {"liked": True, "like_count": 1}
    r = await client.post(f"/api/v1/social/posts/{post_id}/like", headers=auth_headers(bob))
    assert r.json() == {"liked": False, "like_count": 0}

    r = await client.post(
        f"/api/v1/social/posts/{post_id}/comments", json={"content": "nice"}, headers=auth_headers(bob)
    )
    assert r.status_code == 201
    assert r.json()["author"]["username"] == "bob"

    r = await client.get(f"/api/v1/social/posts/{post_id}/comments", headers=auth_headers(ada))
    assert [c["content"] for c in r.json()] == ["nice"]

    assert (await client.delete(f"/api/v1/social/posts/{post_id}", headers=auth_headers(bob))).status_code == 403
    assert (await client.delete(f"/api/v1/social/posts/{post_id}", headers=auth_headers(ada))).status_code == 200
    r = await client.get(f"/api/v1/social/posts/{post_id}/comments", headers=auth_headers(ada))
    assert r.status_code == 404


async def test_private_post_is_hidden(client, make_user):
    ada = await make_user("ada")
    bob = await make_user("bob")
    r = await client.post(
        "/api/v1/social/posts", json={"type": "text", "content": "diary", "visibility": "private"},
        headers=auth_headers(ada),
    )
    post_id = r.json()["id"]
    assert (await client.post(f"/api/v1/social/posts/{post_id}/like", headers=auth_headers(bob))).status_code == 404


async def test_favorites_toggle(client, make_user, make_track):
    ada = await make_user("ada")
    track = await make_track()

    r = await client.post("/api/v1/me/favorites", json={"track": {"id": track.id}}, headers=auth_headers(ada))
    assert r.json()["is_favorite"] is True
    r = await client.get("/api/v1/me/favorites", headers=auth_headers(ada))
    assert [t["id"] for t in r.json()] == [track.id]

    r = await client.post(
        "/api/v1/me/favorites", json={"track": {"youtube_id": track.youtube_id}}, headers=auth_headers(ada)
    )
    assert r.json()["is_favorite"] is False
    assert (await client.get("/api/v1/me/favorites", headers=auth_headers(ada))).json() == []


async def test_recently_played_resolves_legacy_ids(client, make_user):
    ada = await make_user("ada")
    for ref in ("pop_001", "hiphop_003"):
        r = await client.post("/api/v1/me/recently-played", json={"track": {"id": ref}}, headers=auth_headers(ada))
        assert r.status_code == 200

    r = await client.get("/api/v1/me/recently-played", headers=auth_headers(ada))
    assert [item["track"]["title"] for item in r.json()] == ["SICKO MODE", "Blinding Lights"]


async def test_resolve_endpoint_rejects_empty_reference(client, make_user):
    ada = await make_user("ada")
    r = await client.post("/api/v1/tracks/resolve", json={"title": "No id"}, headers=auth_headers(ada))
    assert r.status_code == 400
    r = await client.post("/api/v1/tracks/resolve", json={"id": "pop_001"}, headers=auth_headers(ada))
    assert r.status_code == 200
    track_id = r.json()["id"]
    assert (await client.get(f"/api/v1/tracks/{track_id}")).json()["title"] == "Blinding Lights"


async def test_play_count_upsert_keeps_one_row(db, make_user, make_track):
    ada = await make_user("ada")
    track = await make_track()
    for _ in range(3):
        await bump_play_count(db, ada.id, track.id)
    await db.commit()

    rows = (await db.execute(select(PlayCount.count).where(PlayCount.user_id == ada.id))).scalars().all()
    assert rows == [3]
    assert [(t.id, count) for t, count in await most_played(db, ada.id)] == [(track.id, 3)]


async def test_most_played_orders_by_count(client, make_user, make_track):
    ada = await make_user("ada")
    bob = await make_user("bob")
    once, thrice, twice = await make_track(), await make_track(), await make_track()

    for track, plays in ((once, 1), (thrice, 3), (twice, 2)):
        for _ in range(plays):
            r = await client.post(
                "/api/v1/me/recently-played", json={"track": {"id": track.id}}, headers=auth_headers(ada)
            )
            assert r.status_code == 200
    await client.post("/api/v1/me/recently-played", json={"track": {"id": once.id}}, headers=auth_headers(bob))

    r = await client.get("/api/v1/me/most-played", headers=auth_headers(ada))
    assert [(item["track"]["id"], item["play_count"]) for item in r.json()] == [
        (thrice.id, 3),
        (twice.id, 2),
        (once.id, 1),
    ]
    r = await client.get("/api/v1/me/most-played", params={"limit": 1}, headers=auth_headers(ada))
    assert [item["track"]["id"] for item in r.json()] == [thrice.id]
    r = await client.get("/api/v1/me/most-played", headers=auth_headers(bob))
    assert [(item["track"]["id"], item["play_count"]) for item in r.json()] == [(once.id, 1)]
    assert (await client.get("/api/v1/me/most-played", params={"limit": 0}, headers=auth_headers(ada))).status_code == 422
