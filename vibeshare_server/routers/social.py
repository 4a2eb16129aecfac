# Copyright (C) 2024 VibeShare Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Posts, likes and comments."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vibeshare_server.auth import get_current_user_id
from vibeshare_server.database import get_db
from vibeshare_server.models import Comment, Follow, Like, Post, User
from vibeshare_server.api.schemas import (
    CommentCreate,
    CommentResponse,
    LikeToggleResponse,
    PostCreate,
    PostResponse,
    UserSummary,
)

router = APIRouter(prefix="/social", tags=["social"])


async def _grouped_counts(db: AsyncSession, column, ids: list[int]) -> dict[int, int]:
    if not ids:
        return {}
    result = await db.execute(select(column, func.count()).where(column.in_(ids)).group_by(column))
    return {key: count for key, count in result.all()}


async def _post_responses(db: AsyncSession, rows: list[tuple[Post, User]], viewer_id: int) -> list[PostResponse]:
    ids = [p.id for p, _ in rows]
    likes = await _grouped_counts(db, Like.post_id, ids)
    comments = await _grouped_counts(db, Comment.post_id, ids)
    liked: set[int] = set()
    if ids:
        result = await db.execute(select(Like.post_id).where(Like.user_id == viewer_id, Like.post_id.in_(ids)))
        liked = set(result.scalars().all())
    return [
        PostResponse(
            id=p.id,
            type=p.type,
            content=p.content,
            media_id=p.media_id,
            media_type=p.media_type,
            visibility=p.visibility,
            share_count=p.share_count,
            created_at=p.created_at,
            author=UserSummary.model_validate(author),
            like_count=likes.get(p.id, 0),
            comment_count=comments.get(p.id, 0),
            liked=p.id in liked,
        )
        for p, author in rows
    ]


async def _visible_post(db: AsyncSession, post_id: int, viewer_id: int) -> Post:
    result = await db.execute(select(Post).where(Post.id == post_id))
    post = result.scalar_one_or_none()
    if not post or (post.visibility == "private" and post.user_id != viewer_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


@router.post("/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    data: PostCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> PostResponse:
    post = Post(user_id=user_id, **data.model_dump())
    db.add(post)
    await db.commit()
    await db.refresh(post)
    author = (await db.execute(select(User).where(User.id == user_id))).scalar_one()
    return (await _post_responses(db, [(post, author)], user_id))[0]


@router.get("/feed", response_model=list[PostResponse])
async def feed(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[PostResponse]:
    """Own posts plus non-private posts of followed users, newest first."""
    followed = select(Follow.following_id).where(Follow.follower_id == user_id)
    result = await db.execute(
        select(Post, User)
        .join(User, Post.user_id == User.id)
        .where(
            or_(
                Post.user_id == user_id,
                (Post.user_id.in_(followed)) & (Post.visibility != "private"),
            )
        )
        .order_by(Post.created_at.desc(), Post.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return await _post_responses(db, list(result.all()), user_id)


@router.delete("/posts/{post_id}")
async def delete_post(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> dict:
    post = await _visible_post(db, post_id, user_id)
    if post.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only delete your own posts")
    await db.execute(delete(Like).where(Like.post_id == post_id))
    await db.execute(delete(Comment).where(Comment.post_id == post_id))
    await db.execute(delete(Post).where(Post.id == post_id))
    await db.commit()
    return {"status": "ok"}


@router.post("/posts/{post_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> LikeToggleResponse:
    """Like a post, or remove the like when already liked."""
    await _visible_post(db, post_id, user_id)
    existing = await db.scalar(select(Like.id).where(Like.post_id == post_id, Like.user_id == user_id))
    if existing:
        await db.execute(delete(Like).where(Like.id == existing))
    else:
        db.add(Like(post_id=post_id, user_id=user_id))
    await db.commit()
    count = await db.scalar(select(func.count()).select_from(Like).where(Like.post_id == post_id)) or 0
    return LikeToggleResponse(liked=existing is None, like_count=count)


@router.get("/posts/{post_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[CommentResponse]:
    await _visible_post(db, post_id, user_id)
    result = await db.execute(
        select(Comment, User)
        .join(User, Comment.user_id == User.id)
        .where(Comment.post_id == post_id)
        .order_by(Comment.created_at, Comment.id)
    )
    return [
        CommentResponse(
            id=c.id, post_id=c.post_id, content=c.content, created_at=c.created_at,
            author=UserSummary.model_validate(u),
        )
        for c, u in result.all()
    ]


@router.post("/posts/{post_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: int,
    data: CommentCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> CommentResponse:
    await _visible_post(db, post_id, user_id)
    comment = Comment(post_id=post_id, user_id=user_id, content=data.content)
    db.add(comment)
    await db.commit()
    await db.refresh(comment)
    author = (await db.execute(select(User).where(User.id == user_id))).scalar_one()
    return CommentResponse(
        id=comment.id, post_id=post_id, content=comment.content, created_at=comment.created_at,
        author=UserSummary.model_validate(author),
    )
