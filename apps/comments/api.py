"""
Comments API endpoints - threaded comments with realtime fan-out.
"""

import logging
from uuid import UUID

from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError

from utils.auth import AuthBearer, get_current_user, is_admin
from utils.pagination import paginate
from apps.blog.models import Post
from apps.realtime.notifier import COMMENT_DELETED, COMMENT_UPDATED, NEW_COMMENT, notify_room
from .models import Comment
from .schemas import (
    CommentCreateIn,
    CommentDetailOut,
    CommentOut,
    CommentsListOut,
    CommentUpdateIn,
    MessageOut,
)

logger = logging.getLogger(__name__)

router = Router()


def get_comment_or_404(comment_id: UUID) -> Comment:
    try:
        return Comment.objects.select_related("user").get(id=comment_id)
    except Comment.DoesNotExist:
        raise HttpError(404, "Comment not found")


def clean_content(content: str) -> str:
    content = content.strip()
    if not content:
        raise HttpError(400, "Content is required")
    return content


@router.post("/", response={201: CommentDetailOut}, auth=AuthBearer())
def add_comment(request: HttpRequest, data: CommentCreateIn):
    """Add a comment or a reply to a top-level comment on the same post."""
    user = get_current_user(request)
    content = clean_content(data.content)

    if not Post.objects.filter(id=data.blogId).exists():
        raise HttpError(404, "Blog not found")

    parent = None
    if data.parentCommentId:
        # Replies attach to top-level comments only, keeping threads one level deep
        parent = Comment.objects.filter(
            id=data.parentCommentId,
            post_id=data.blogId,
            parent__isnull=True,
        ).first()
        if parent is None:
            raise HttpError(404, "Parent comment not found")

    comment = Comment.objects.create(
        post_id=data.blogId,
        user=user,
        content=content,
        parent=parent,
    )

    payload = CommentDetailOut.from_orm(comment).model_dump(mode="json")
    notify_room(comment.post_id, NEW_COMMENT, payload)

    return 201, comment


@router.get("/blog/{uuid:blog_id}", response=CommentsListOut)
def list_blog_comments(request: HttpRequest, blog_id: UUID, page: int = 1, limit: int = 20):
    """Top-level comments newest first, each with its replies oldest first."""
    queryset = Comment.objects.thread_for(blog_id)
    comments, pagination = paginate(queryset, page, limit)
    return {"comments": comments, "pagination": pagination}


@router.get("/{uuid:comment_id}", response=CommentOut)
def get_comment(request: HttpRequest, comment_id: UUID):
    """Get a single comment, including soft-deleted ones."""
    return get_comment_or_404(comment_id)


@router.put("/{uuid:comment_id}", response=CommentOut, auth=AuthBearer())
def update_comment(request: HttpRequest, comment_id: UUID, data: CommentUpdateIn):
    """Edit a comment (author only)."""
    user = get_current_user(request)
    comment = get_comment_or_404(comment_id)

    if comment.user_id != user.id:
        raise HttpError(403, "You can only edit your own comments")
    if comment.is_deleted:
        raise HttpError(400, "Deleted comments cannot be edited")

    comment.content = clean_content(data.content)
    comment.is_edited = True
    comment.save(update_fields=["content", "is_edited", "updated_at"])

    payload = CommentOut.from_orm(comment).model_dump(mode="json")
    notify_room(comment.post_id, COMMENT_UPDATED, payload)

    return comment


@router.delete("/{uuid:comment_id}", response=MessageOut, auth=AuthBearer())
def delete_comment(request: HttpRequest, comment_id: UUID):
    """Soft-delete a comment (author or admin)."""
    user = get_current_user(request)
    comment = get_comment_or_404(comment_id)

    if comment.user_id != user.id and not is_admin(user):
        raise HttpError(403, "You can only delete your own comments")

    comment.soft_delete()
    logger.info(f"[Comments] {user.email} deleted comment {comment.id}")

    notify_room(comment.post_id, COMMENT_DELETED, {"commentId": str(comment.id)})

    return {"message": "Comment deleted successfully"}
