"""
Comment model - threaded comments on blog posts.
"""

import uuid
from django.db import models
from apps.blog.models import Post
from apps.users.models import User

DELETED_PLACEHOLDER = "[This comment has been deleted]"


class CommentQuerySet(models.QuerySet):
    def visible(self):
        return self.filter(is_deleted=False)

    def top_level(self):
        return self.filter(parent__isnull=True)

    def with_visible_replies(self):
        """Eager-load non-deleted replies, oldest first, into `visible_replies`."""
        replies = Comment.objects.visible().select_related("user").order_by("created_at")
        return self.prefetch_related(models.Prefetch("replies", queryset=replies, to_attr="visible_replies"))

    def thread_for(self, post):
        """Top-level visible comments of a post, newest first, with replies."""
        return (
            self.filter(post=post)
            .top_level()
            .visible()
            .select_related("user")
            .order_by("-created_at")
            .with_visible_replies()
        )


class Comment(models.Model):
    """A top-level comment (parent is null) or a one-level reply."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name="comments", db_column="blogId")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="comments", db_column="userId")
    content = models.TextField()
    parent = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="replies",
        db_column="parentCommentId",
    )
    is_edited = models.BooleanField(default=False, db_column="isEdited")
    is_deleted = models.BooleanField(default=False, db_column="isDeleted")
    created_at = models.DateTimeField(auto_now_add=True, db_column="createdAt")
    updated_at = models.DateTimeField(auto_now=True, db_column="updatedAt")

    objects = CommentQuerySet.as_manager()

    class Meta:
        db_table = "comments"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["post", "-created_at"]),
            models.Index(fields=["parent"]),
        ]

    def __str__(self) -> str:
        return f"Comment {self.id} on {self.post_id}"

    def soft_delete(self) -> None:
        self.is_deleted = True
        self.content = DELETED_PLACEHOLDER
        self.save(update_fields=["is_deleted", "content", "updated_at"])
