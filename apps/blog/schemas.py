"""
Blog schemas for API.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID
from ninja import Schema
from pydantic import Field, ConfigDict

from apps.comments.schemas import CommentThreadOut, PaginationOut
from apps.users.schemas import UserBriefOut


class PostOut(Schema):
    """Post output - camelCase for frontend."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    title: str
    slug: str
    content: str
    excerpt: str | None = None
    coverImage: str | None = Field(validation_alias="cover_image", default=None)
    status: str
    tags: list[str] = []
    category: str | None = None
    isFeatured: bool = Field(validation_alias="is_featured", default=False)
    viewsCount: int = Field(validation_alias="views_count", default=0)
    likesCount: int = Field(validation_alias="likes_count", default=0)
    metaTitle: str | None = Field(validation_alias="meta_title", default=None)
    metaDescription: str | None = Field(validation_alias="meta_description", default=None)
    author: UserBriefOut
    createdAt: datetime = Field(validation_alias="created_at")
    updatedAt: datetime = Field(validation_alias="updated_at")


class PostDetailOut(PostOut):
    """Post detail output with the comment tree."""

    comments: list[CommentThreadOut] = Field(validation_alias="comment_tree", default=[])


class PostsListOut(Schema):
    """Paginated posts list response."""

    blogs: list[PostOut]
    pagination: PaginationOut


class PostCreateIn(Schema):
    """Post create input (JSON body or multipart form)."""

    title: str
    content: str
    excerpt: str | None = None
    category: str | None = None
    tags: list[str] | str = []
    status: Literal["draft", "published"] = "draft"
    isFeatured: bool = False
    metaTitle: str | None = None
    metaDescription: str | None = None


class PostUpdateIn(Schema):
    """Post update input (JSON body or multipart form). Omitted fields keep their value."""

    title: str | None = None
    content: str | None = None
    excerpt: str | None = None
    category: str | None = None
    tags: list[str] | str = []
    status: Literal["draft", "published"] | None = None
    isFeatured: bool | None = None
    metaTitle: str | None = None
    metaDescription: str | None = None


class ToggleStatusOut(Schema):
    message: str
    blog: PostOut


class LikeOut(Schema):
    likesCount: int


class StatsOverviewOut(Schema):
    totalBlogs: int = 0
    publishedBlogs: int = 0
    draftBlogs: int = 0
    featuredBlogs: int = 0
    totalViews: int = 0
    totalLikes: int = 0
    avgViews: float = 0
    avgLikes: float = 0


class CategoryCountOut(Schema):
    category: str
    count: int


class BlogStatsOut(Schema):
    overview: StatsOverviewOut
    categories: list[CategoryCountOut]
