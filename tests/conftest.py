# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pytest fixtures. Each test gets its own SQLite database file via aiosqlite."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from vibeshare_server import rate_limit
from vibeshare_server.auth import create_access_token
from vibeshare_server.database import get_db
from vibeshare_server.main import app
from vibeshare_server.models import Base, Genre, GenreTrack, Playlist, PlaylistTrack, Track, User
from vibeshare_server.services.collections import dump_tags


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    # SAVEPOINT support, FK enforcement, and WAL so an open test session never blocks app writes
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    async def _get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    rate_limit.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
def make_user(db):
    async def _make(username: str, name: str | None = None) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            name=name,
            password_hash="not-a-real-hash",
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        await db.commit()
        return user

    return _make


@pytest.fixture
def make_track(db):
    counter = {"n": 0}

    async def _make(title: str | None = None, artist: str = "Artist") -> Track:
        counter["n"] += 1
        n = counter["n"]
        youtube_id = f"yt{n:09d}"
        track = Track(
            youtube_id=youtube_id,
            title=title or f"Song {n}",
            artist=artist,
            thumbnail=f"https://i.ytimg.com/vi/{youtube_id}/hqdefault.jpg",
            duration="3:00",
            youtube_url=f"https://www.youtube.com/watch?v={youtube_id}",
        )
        db.add(track)
        await db.commit()
        return track

    return _make


@pytest.fixture
def make_playlist(db, make_track):
    async def _make(owner: User, name: str, track_count: int = 0, is_public: bool = True, **fields) -> Playlist:
        if "tags" in fields:
            fields["tags"] = dump_tags(fields["tags"])
        playlist = Playlist(user_id=owner.id, name=name, is_public=is_public, **fields)
        db.add(playlist)
        await db.flush()
        for position in range(track_count):
            track = await make_track()
            db.add(PlaylistTrack(playlist_id=playlist.id, track_id=track.id, position=position))
        await db.commit()
        await db.refresh(playlist)
        await db.commit()
        return playlist

    return _make


@pytest.fixture
def make_genre(db, make_track):
    async def _make(owner: User, name: str, track_count: int = 0, is_public: bool = True, **fields) -> Genre:
        if "tags" in fields:
            fields["tags"] = dump_tags(fields["tags"])
        genre = Genre(user_id=owner.id, name=name, is_public=is_public, **fields)
        db.add(genre)
        await db.flush()
        for position in range(track_count):
            track = await make_track()
            db.add(GenreTrack(genre_id=genre.id, track_id=track.id, position=position))
        await db.commit()
        await db.refresh(genre)
        await db.commit()
        return genre

    return _make
