# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""User profiles, search and follows."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vibeshare_server.auth import get_current_user_id
from vibeshare_server.database import get_db
from vibeshare_server.models import Follow, User
from vibeshare_server.api.schemas import FollowToggleResponse, UserProfile, UserSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


async def _follower_count(db: AsyncSession, user_id: int) -> int:
    return await db.scalar(
        select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
    ) or 0


@router.get("/search", response_model=list[UserSummary])
async def search_users(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=50),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[UserSummary]:
    """Search other users by display name or username."""
    result = await db.execute(
        select(User)
        .where(
            User.id != user_id,
            or_(User.name.icontains(q, autoescape=True), User.username.icontains(q, autoescape=True)),
        )
        .order_by(User.username)
        .limit(limit)
    )
    return [UserSummary.model_validate(u) for u in result.scalars().all()]


@router.get("/by-username/{username}", response_model=UserProfile)
async def get_by_username(
    username: str,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> UserProfile:
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    following_count = await db.scalar(
        select(func.count()).select_from(Follow).where(Follow.follower_id == user.id)
    ) or 0
    is_following = await db.scalar(
        select(Follow.id).where(Follow.follower_id == user_id, Follow.following_id == user.id)
    )
    return UserProfile(
        id=user.id,
        username=user.username,
        name=user.name,
        bio=user.bio,
        image=user.image,
        cover_image=user.cover_image,
        is_verified=user.is_verified,
        follower_count=await _follower_count(db, user.id),
        following_count=following_count,
        is_following=is_following is not None,
    )


@router.post("/{target_id}/follow", response_model=FollowToggleResponse)
async def toggle_follow(
    target_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> FollowToggleResponse:
    """Follow a user, or unfollow when already following."""
    if target_id == user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot follow yourself")
    await _get_user_or_404(db, target_id)
    existing = await db.scalar(
        select(Follow.id).where(Follow.follower_id == user_id, Follow.following_id == target_id)
    )
    if existing:
        await db.execute(delete(Follow).where(Follow.id == existing))
    else:
        db.add(Follow(follower_id=user_id, following_id=target_id))
    await db.commit()
    logger.info("User %s %s user %s", user_id, "unfollowed" if existing else "followed", target_id)
    return FollowToggleResponse(following=existing is None, follower_count=await _follower_count(db, target_id))


@router.get("/{target_id}/followers", response_model=list[UserSummary])
async def list_followers(
    target_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[UserSummary]:
    await _get_user_or_404(db, target_id)
    result = await db.execute(
        select(User)
        .join(Follow, Follow.follower_id == User.id)
        .where(Follow.following_id == target_id)
        .order_by(Follow.created_at.desc(), Follow.id.desc())
    )
    return [UserSummary.model_validate(u) for u in result.scalars().all()]


@router.get("/{target_id}/following", response_model=list[UserSummary])
async def list_following(
    target_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[UserSummary]:
    await _get_user_or_404(db, target_id)
    result = await db.execute(
        select(User)
        .join(Follow, Follow.following_id == User.id)
        .where(Follow.follower_id == target_id)
        .order_by(Follow.created_at.desc(), Follow.id.desc())
    )
    return [UserSummary.model_validate(u) for u in result.scalars().all()]
