"""Blog post routes: public reads of published posts, admin CRUD."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError

from cms.models import BlogPost
from cms.models.base import async_session_factory
from web.api.utils import not_found, require_fields
from web.auth import require_admin
from web.sessions import SessionData

public_router = APIRouter(prefix="/api/posts", tags=["posts"])
admin_router = APIRouter(prefix="/api/admin/posts", tags=["admin"])

DUPLICATE_SLUG = "A post with this slug already exists"


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    description: str
    content: str
    thumbnail: Optional[str]
    date: str
    published: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class PostListResponse(BaseModel):
    posts: list[PostResponse]


class PostDetailResponse(BaseModel):
    post: PostResponse


class PostWrite(BaseModel):
    """Full post record. Updates must resend every field."""

    title: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    thumbnail: Optional[str] = None
    date: Optional[str] = None
    published: bool = False

    def validate_required(self) -> None:
        require_fields(self.title, self.slug, self.description, self.content, self.date)

    def apply(self, post: BlogPost) -> None:
        post.title = self.title
        post.slug = self.slug
        post.description = self.description
        post.content = self.content
        post.thumbnail = self.thumbnail
        post.date = self.date
        post.published = self.published


class PostCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    post_id: int = Field(alias="postId")


# --- Public ---


@public_router.get("", response_model=PostListResponse)
async def list_published_posts(search: str = ""):
    """Published posts, newest first. search matches title, description or content."""
    stmt = select(BlogPost).where(BlogPost.published.is_(True))
    if search:
        term = f"%{search}%"
        stmt = stmt.where(
            or_(
                BlogPost.title.ilike(term),
                BlogPost.description.ilike(term),
                BlogPost.content.ilike(term),
            )
        )
    async with async_session_factory() as session:
        result = await session.execute(stmt.order_by(BlogPost.date.desc()))
        return PostListResponse(posts=[PostResponse.model_validate(p) for p in result.scalars().all()])


@public_router.get("/{slug}", response_model=PostDetailResponse)
async def get_published_post(slug: str):
    async with async_session_factory() as session:
        result = await session.execute(
            select(BlogPost).where(BlogPost.slug == slug, BlogPost.published.is_(True))
        )
        post = result.scalar_one_or_none()
        if not post:
            raise not_found("Post")
        return PostDetailResponse(post=PostResponse.model_validate(post))


# --- Admin ---


@admin_router.get("", response_model=PostListResponse)
async def list_all_posts(admin: SessionData = Depends(require_admin)):
    """All posts including drafts."""
    async with async_session_factory() as session:
        result = await session.execute(select(BlogPost).order_by(BlogPost.date.desc()))
        return PostListResponse(posts=[PostResponse.model_validate(p) for p in result.scalars().all()])


@admin_router.post("", status_code=201, response_model=PostCreated)
async def create_post(body: PostWrite, admin: SessionData = Depends(require_admin)):
    body.validate_required()
    async with async_session_factory() as session:
        post = BlogPost()
        body.apply(post)
        session.add(post)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise HTTPException(400, DUPLICATE_SLUG)
        return PostCreated(message="Post created successfully", post_id=post.id)


@admin_router.put("/{post_id}")
async def update_post(post_id: int, body: PostWrite, admin: SessionData = Depends(require_admin)):
    body.validate_required()
    async with async_session_factory() as session:
        post = await session.get(BlogPost, post_id)
        if not post:
            raise not_found("Post")
        body.apply(post)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise HTTPException(400, DUPLICATE_SLUG)
        return {"message": "Post updated successfully"}


@admin_router.delete("/{post_id}")
async def delete_post(post_id: int, admin: SessionData = Depends(require_admin)):
    async with async_session_factory() as session:
        post = await session.get(BlogPost, post_id)
        if not post:
            raise not_found("Post")
        await session.delete(post)
        await session.commit()
        return {"message": "Post deleted successfully"}
