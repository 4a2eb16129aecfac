# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Personal track tags."""

import pytest
from sqlalchemy import func, select

from vibeshare_server.errors import Conflict, DuplicateName, Forbidden, TagNotFound, TrackNotFound, ValidationFailed
from vibeshare_server.models import TagTrack, Track
from vibeshare_server.models.tag import DEFAULT_TAG_COLOR
from vibeshare_server.services import tags
from vibeshare_server.services.track_resolver import TrackReference

from conftest import auth_headers


async def test_create_defaults_color_and_rejects_duplicates(db, make_user):
    alice = await make_user("alice")
    tag = await tags.create_tag(db, alice.id, "  Workout ")
    assert (tag.name, tag.color) == ("Workout", DEFAULT_TAG_COLOR)

    with pytest.raises(DuplicateName):
        await tags.create_tag(db, alice.id, "Workout", "#000000")
    with pytest.raises(ValidationFailed):
        await tags.create_tag(db, alice.id, "  ")

    # Names are unique per user only
    bob = await make_user("bob")
    other = await tags.create_tag(db, bob.id, "Workout", "#ff0000")
    assert other.color == "#ff0000"


async def test_owner_checks(db, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    tag = await tags.create_tag(db, alice.id, "Mine")

    with pytest.raises(Forbidden):
        await tags.get_owned_tag(db, tag.id, bob.id)
    with pytest.raises(Forbidden):
        await tags.update_tag(db, tag.id, bob.id, {"name": "Stolen"})
    with pytest.raises(Forbidden):
        await tags.delete_tag(db, tag.id, bob.id)
    with pytest.raises(TagNotFound):
        await tags.get_owned_tag(db, 424242, alice.id)


async def test_update_renames_and_recolours(db, make_user):
    alice = await make_user("alice")
    await tags.create_tag(db, alice.id, "Taken")
    tag = await tags.create_tag(db, alice.id, "Old", "#111111")

    with pytest.raises(DuplicateName):
        await tags.update_tag(db, tag.id, alice.id, {"name": "Taken"})

    # Keeping its own name is not a clash
    updated = await tags.update_tag(db, tag.id, alice.id, {"name": "Old", "color": "#222222"})
    assert (updated.name, updated.color) == ("Old", "#222222")
    updated = await tags.update_tag(db, tag.id, alice.id, {"color": None})
    assert updated.color == "#222222"


async def test_tag_and_untag_tracks(db, make_user, make_track):
    alice = await make_user("alice")
    tag = await tags.create_tag(db, alice.id, "Chill")
    first = await make_track()
    second = await make_track()

    await tags.add_track(db, tag.id, alice.id, TrackReference(id=first.id))
    await tags.add_track(db, tag.id, alice.id, TrackReference(youtube_id=second.youtube_id))
    with pytest.raises(Conflict):
        await tags.add_track(db, tag.id, alice.id, TrackReference(youtube_id=first.youtube_id))

    summaries = await tags.list_tags(db, alice.id)
    assert [(s.tag.name, s.youtube_ids) for s in summaries] == [("Chill", [first.youtube_id, second.youtube_id])]

    await tags.remove_track(db, tag.id, alice.id, str(first.id))
    await tags.remove_track(db, tag.id, alice.id, second.youtube_id)
    assert await tags.tag_tracks(db, tag.id) == []
    with pytest.raises(TrackNotFound):
        await tags.remove_track(db, tag.id, alice.id, second.youtube_id)


async def test_add_track_resolves_legacy_and_new_ids(db, make_user):
    alice = await make_user("alice")
    tag = await tags.create_tag(db, alice.id, "Mixed")

    legacy = await tags.add_track(db, tag.id, alice.id, TrackReference(id="pop_001"))
    assert legacy.title == "Blinding Lights"
    fresh = await tags.add_track(db, tag.id, alice.id, TrackReference(youtube_id="tagnew12345", title="Fresh"))
    assert fresh.title == "Fresh"
    assert [t.id for t in await tags.tag_tracks(db, tag.id)] == [legacy.id, fresh.id]


async def test_delete_removes_memberships_but_not_tracks(db, make_user, make_track):
    alice = await make_user("alice")
    tag = await tags.create_tag(db, alice.id, "Gone")
    track = await make_track()
    await tags.add_track(db, tag.id, alice.id, TrackReference(id=track.id))

    await tags.delete_tag(db, tag.id, alice.id)

    assert await db.scalar(select(func.count()).select_from(TagTrack)) == 0
    assert (await db.execute(select(Track.id).where(Track.id == track.id))).scalar_one() == track.id
    assert await tags.list_tags(db, alice.id) == []


async def test_tags_over_http(client, make_user, make_track):
    alice = await make_user("alice")
    bob = await make_user("bob")
    headers = auth_headers(alice)
    track = await make_track()

    r = await client.post("/api/v1/tags", json={"name": "Focus"}, headers=headers)
    assert r.status_code == 201
    tag = r.json()
    assert (tag["color"], tag["track_ids"]) == (DEFAULT_TAG_COLOR, [])
    assert (await client.post("/api/v1/tags", json={"name": "Focus"}, headers=headers)).status_code == 409

    r = await client.post(f"/api/v1/tags/{tag['id']}/tracks", json={"track": {"id": track.id}}, headers=headers)
    assert r.status_code == 200
    assert r.json()["youtube_id"] == track.youtube_id
    r = await client.post(f"/api/v1/tags/{tag['id']}/tracks", json={"track": {"id": track.id}}, headers=headers)
    assert r.status_code == 409

    r = await client.get(f"/api/v1/tags/{tag['id']}", headers=headers)
    assert r.json()["track_ids"] == [track.youtube_id]
    assert [t["id"] for t in r.json()["tracks"]] == [track.id]
    assert (await client.get(f"/api/v1/tags/{tag['id']}", headers=auth_headers(bob))).status_code == 403

    r = await client.patch(f"/api/v1/tags/{tag['id']}", json={"color": "#00ff00"}, headers=headers)
    assert (r.json()["name"], r.json()["color"]) == ("Focus", "#00ff00")

    r = await client.get("/api/v1/tags", headers=headers)
    assert [(t["name"], t["track_ids"]) for t in r.json()] == [("Focus", [track.youtube_id])]
    assert (await client.get("/api/v1/tags", headers=auth_headers(bob))).json() == []

    r = await client.delete(f"/api/v1/tags/{tag['id']}/tracks/{track.youtube_id}", headers=headers)
    assert r.status_code == 200
    r = await client.delete(f"/api/v1/tags/{tag['id']}/tracks/{track.youtube_id}", headers=headers)
    assert r.status_code == 404

    assert (await client.delete(f"/api/v1/tags/{tag['id']}", headers=headers)).status_code == 200
    assert (await client.get(f"/api/v1/tags/{tag['id']}", headers=headers)).status_code == 404
