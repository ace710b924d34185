"""
Comment schemas for API.
"""

from datetime import datetime
from uuid import UUID
from ninja import Schema
from pydantic import Field, ConfigDict

from apps.users.schemas import UserBriefOut


class CommentOut(Schema):
    """Single comment - camelCase for frontend."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    blogId: UUID = Field(validation_alias="post_id")
    user: UserBriefOut
    content: str
    parentCommentId: UUID | None = Field(validation_alias="parent_id", default=None)
    isEdited: bool = Field(validation_alias="is_edited", default=False)
    isDeleted: bool = Field(validation_alias="is_deleted", default=False)
    createdAt: datetime = Field(validation_alias="created_at")
    updatedAt: datetime = Field(validation_alias="updated_at")


class ParentCommentOut(Schema):
    """Parent reference expanded on newly created replies."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    userId: UUID = Field(validation_alias="user_id")
    content: str
    createdAt: datetime = Field(validation_alias="created_at")


class CommentDetailOut(CommentOut):
    parentComment: ParentCommentOut | None = Field(validation_alias="parent", default=None)


class CommentThreadOut(CommentOut):
    """Top-level comment with its replies, oldest first."""

    replies: list[CommentOut] = Field(validation_alias="visible_replies", default=[])


class PaginationOut(Schema):
    """Pagination info."""

    currentPage: int
    totalPages: int
    totalItems: int
    hasNext: bool
    hasPrev: bool


class CommentsListOut(Schema):
    """Paginated comments list response."""

    comments: list[CommentThreadOut]
    pagination: PaginationOut


class CommentCreateIn(Schema):
    """Comment create input."""

    blogId: UUID
    content: str
    parentCommentId: UUID | None = None


class CommentUpdateIn(Schema):
    """Comment update input."""

    content: str


class MessageOut(Schema):
    message: str
