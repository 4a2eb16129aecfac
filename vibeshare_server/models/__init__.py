# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Database models."""

from vibeshare_server.models.base import Base
from vibeshare_server.models.user import User
from vibeshare_server.models.track import Track
from vibeshare_server.models.playlist import Playlist, PlaylistTrack
from vibeshare_server.models.genre import Genre, GenreTrack
from vibeshare_server.models.share import GenreShare, PlaylistShare
from vibeshare_server.models.social import Comment, Follow, Like, Post
from vibeshare_server.models.listening import Favorite, PlayCount, RecentlyPlayed
from vibeshare_server.models.tag import Tag, TagTrack

__all__ = [
    "Base",
    "User",
    "Track",
    "Playlist",
    "PlaylistTrack",
    "Genre",
    "GenreTrack",
    "PlaylistShare",
    "GenreShare",
    "Post",
    "Comment",
    "Like",
    "Follow",
    "Favorite",
    "RecentlyPlayed",
    "PlayCount",
    "Tag",
    "TagTrack",
]
