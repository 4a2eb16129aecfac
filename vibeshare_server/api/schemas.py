# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pydantic schemas for API request/response."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# Auth
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6)


class UserLogin(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    name: str | None = None
    bio: str | None = None
    image: str | None = None
    cover_image: str | None = None
    is_verified: bool = False
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    id: int
    name: str | None = None
    username: str
    image: str | None = None

    model_config = ConfigDict(from_attributes=True)


class UserProfile(BaseModel):
    id: int
    username: str
    name: str | None = None
    bio: str | None = None
    image: str | None = None
    cover_image: str | None = None
    is_verified: bool = False
    follower_count: int = 0
    following_count: int = 0
    is_following: bool = False


class ProfileUpdate(BaseModel):
    name: str | None = None
    bio: str | None = None
    image: str | None = None
    cover_image: str | None = None


# Tracks
class TrackRef(BaseModel):
    """Whatever the client knows about a track: internal id, YouTube id or legacy id."""

    id: int | str | None = None
    youtube_id: str | None = None
    title: str | None = None
    artist: str | None = None
    genre: str | None = None
    duration: str | None = None
    thumbnail: str | None = None
    youtube_url: str | None = None
    release_year: int | None = None


class TrackResponse(BaseModel):
    id: int
    youtube_id: str
    title: str
    artist: str
    genre: str | None = None
    thumbnail: str | None = None
    duration: str | None = None
    release_year: int | None = None
    youtube_url: str

    model_config = ConfigDict(from_attributes=True)


class CollectionTrackResponse(TrackResponse):
    order: int


class TrackPreview(BaseModel):
    id: int
    title: str
    artist: str
    thumbnail: str | None = None

    model_config = ConfigDict(from_attributes=True)


# Playlists and genres
class CollectionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    cover_image: str | None = None
    color: str | None = None
    is_public: bool = False
    tags: list[str] | None = None


class CollectionUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    cover_image: str | None = None
    color: str | None = None
    is_public: bool | None = None
    tags: list[str] | None = None


class CollectionResponse(BaseModel):
    id: int
    user_id: int
    name: str
    description: str | None = None
    cover_image: str | None = None
    color: str | None = None
    is_public: bool
    share_count: int = 0
    source_id: int | None = None
    tags: list[str] = []
    track_count: int = 0
    created_at: datetime


class CollectionDetail(CollectionResponse):
    tracks: list[CollectionTrackResponse] = []


class CollectionTrackAdd(BaseModel):
    track: TrackRef


class CollectionTrackAdded(BaseModel):
    track: TrackResponse
    order: int


class CollectionReorder(BaseModel):
    tracks: list[int]


# Sharing
class ShareRequest(BaseModel):
    share_to_user_id: int | None = None
    share_type: Literal["copy", "reference"] = "copy"
    message: str | None = None


class ShareResponse(BaseModel):
    success: bool = True
    share_id: int
    copied_id: int | None = None
    message: str


class ShareHistoryItem(BaseModel):
    id: int
    share_type: str
    message: str | None = None
    created_at: datetime
    shared_by: UserSummary
    shared_to: UserSummary | None = None


# Discovery
class DiscoveredCollectionResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    cover_image: str | None = None
    color: str | None = None
    share_count: int
    track_count: int
    total_shares: int
    tags: list[str] = []
    created_at: datetime
    creator: UserSummary
    preview_tracks: list[TrackPreview] = []


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class DiscoveryResponse(BaseModel):
    items: list[DiscoveredCollectionResponse]
    pagination: Pagination


class PopularTag(BaseModel):
    tag: str
    count: int


# Social
class PostCreate(BaseModel):
    type: str = Field(min_length=1, max_length=32)
    content: str = Field(min_length=1)
    media_id: str | None = None
    media_type: str | None = None
    visibility: Literal["public", "followers", "private"] = "public"


class PostResponse(BaseModel):
    id: int
    type: str
    content: str
    media_id: str | None = None
    media_type: str | None = None
    visibility: str
    share_count: int = 0
    created_at: datetime
    author: UserSummary
    like_count: int = 0
    comment_count: int = 0
    liked: bool = False


class CommentCreate(BaseModel):
    content: str = Field(min_length=1)


class CommentResponse(BaseModel):
    id: int
    post_id: int
    content: str
    created_at: datetime
    author: UserSummary


class LikeToggleResponse(BaseModel):
    liked: bool
    like_count: int


class FollowToggleResponse(BaseModel):
    following: bool
    follower_count: int


# Listening
class FavoriteToggle(BaseModel):
    track: TrackRef


class FavoriteToggleResponse(BaseModel):
    is_favorite: bool
    track: TrackResponse


class RecentlyPlayedAdd(BaseModel):
    track: TrackRef


class RecentlyPlayedItem(BaseModel):
    track: TrackResponse
    played_at: datetime


class MostPlayedItem(BaseModel):
    track: TrackResponse
    play_count: int


# Tags
class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    color: str | None = Field(default=None, max_length=32)


class TagUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    color: str | None = Field(default=None, max_length=32)


class TagResponse(BaseModel):
    id: int
    name: str
    color: str
    track_ids: list[str] = []
    created_at: datetime


class TagDetail(TagResponse):
    tracks: list[TrackResponse] = []


class TagTrackAdd(BaseModel):
    track: TrackRef
