"""
Post model - blog posts with a draft/published lifecycle.
"""

import uuid
from django.db import models
from apps.users.models import User


class PostStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    PUBLISHED = "published", "Published"


class Post(models.Model):
    """Blog post model. Comments are reached through `post.comments`."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    content = models.TextField()
    excerpt = models.TextField(null=True, blank=True)
    cover_image = models.URLField(max_length=500, null=True, blank=True, db_column="coverImage")
    cover_image_file_id = models.CharField(max_length=255, null=True, blank=True, db_column="coverImageFileId")
    status = models.CharField(max_length=20, choices=PostStatus.choices, default=PostStatus.DRAFT)
    tags = models.JSONField(default=list, blank=True)
    category = models.CharField(max_length=100, null=True, blank=True)
    is_featured = models.BooleanField(default=False, db_column="isFeatured")
    views_count = models.PositiveIntegerField(default=0, db_column="viewsCount")
    likes_count = models.PositiveIntegerField(default=0, db_column="likesCount")
    meta_title = models.CharField(max_length=255, null=True, blank=True, db_column="metaTitle")
    meta_description = models.TextField(null=True, blank=True, db_column="metaDescription")
    author = models.ForeignKey(User, on_delete=models.CASCADE, related_name="posts", db_column="authorId")
    created_at = models.DateTimeField(auto_now_add=True, db_column="createdAt")
    updated_at = models.DateTimeField(auto_now=True, db_column="updatedAt")

    class Meta:
        db_table = "posts"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "-created_at"]),
            models.Index(fields=["category"]),
        ]

    def __str__(self) -> str:
        return self.title

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISHED

    def toggle_status(self) -> str:
        self.status = PostStatus.DRAFT if self.is_published else PostStatus.PUBLISHED
        return self.status
