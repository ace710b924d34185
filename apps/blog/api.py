"""
Blog API endpoints - post lifecycle, likes and stats.
"""

import json
import logging
import os
from uuid import UUID

from django.conf import settings
from django.db.models import Avg, Count, F, Q, Sum
from django.http import HttpRequest
from ninja import File, Router, UploadedFile
from ninja.errors import HttpError

from utils.auth import AuthBearer, get_optional_user, is_admin, require_admin
from utils.imagekit import AssetStoreError, delete_image, upload_image
from utils.pagination import paginate
from apps.comments.models import Comment
from .models import Post, PostStatus
from .schemas import (
    BlogStatsOut,
    LikeOut,
    PostCreateIn,
    PostDetailOut,
    PostOut,
    PostsListOut,
    PostUpdateIn,
    ToggleStatusOut,
)
from .utils import normalize_tags, slugify

logger = logging.getLogger(__name__)

router = Router()

SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "title": "title",
    "viewsCount": "views_count",
    "likesCount": "likes_count",
}


def get_post_or_404(post_id: UUID) -> Post:
    try:
        return Post.objects.select_related("author").get(id=post_id)
    except Post.DoesNotExist:
        raise HttpError(404, "Blog not found")


def unique_slug_for(title: str, exclude_id: UUID | None = None) -> str:
    """Slug for `title`, rejecting empty slugs and slugs taken by another post."""
    slug = slugify(title)
    if not slug:
        raise HttpError(400, "Title must contain letters or digits")

    taken = Post.objects.filter(slug=slug)
    if exclude_id is not None:
        taken = taken.exclude(id=exclude_id)
    if taken.exists():
        raise HttpError(400, "Blog with this title already exists")
    return slug


def validate_cover_image(file: UploadedFile) -> None:
    extension = os.path.splitext(file.name or "")[1].lstrip(".").lower()
    content_type = (file.content_type or "").lower()
    allowed = settings.COVER_IMAGE_EXTENSIONS

    if extension not in allowed or not any(content_type == f"image/{kind}" for kind in allowed):
        raise HttpError(400, "Only image files are allowed (jpeg, jpg, png, gif, webp)")
    if file.size > settings.COVER_IMAGE_MAX_BYTES:
        raise HttpError(400, "Cover image exceeds the 5MB limit")


def store_cover_image(file: UploadedFile):
    return upload_image(file.read(), file.name, settings.BLOG_COVER_FOLDER)


def read_post_body(request: HttpRequest, schema):
    """Validate a JSON body or multipart form fields against `schema`."""
    if request.content_type == "application/json":
        try:
            payload = json.loads(request.body or b"{}")
        except json.JSONDecodeError:
            raise HttpError(400, "Malformed JSON body")
        if not isinstance(payload, dict):
            raise HttpError(400, "Request body must be a JSON object")
    else:
        payload = {key: request.POST.get(key) for key in request.POST if key != "tags"}
        payload["tags"] = request.POST.getlist("tags")

    return schema.model_validate(payload)


@router.get("/admin/stats", response=BlogStatsOut, auth=AuthBearer())
def get_blog_stats(request: HttpRequest):
    """Aggregate post counts, views and likes (admin only)."""
    require_admin(request)

    overview = Post.objects.aggregate(
        totalBlogs=Count("id"),
        publishedBlogs=Count("id", filter=Q(status=PostStatus.PUBLISHED)),
        draftBlogs=Count("id", filter=Q(status=PostStatus.DRAFT)),
        featuredBlogs=Count("id", filter=Q(is_featured=True)),
        totalViews=Sum("views_count"),
        totalLikes=Sum("likes_count"),
        avgViews=Avg("views_count"),
        avgLikes=Avg("likes_count"),
    )

    categories = (
        Post.objects.filter(category__isnull=False)
        .values("category")
        .annotate(count=Count("id"))
        .order_by("-count", "category")
    )

    return {
        "overview": {key: value or 0 for key, value in overview.items()},
        "categories": list(categories),
    }


@router.get("/", response=PostsListOut)
def list_posts(
    request: HttpRequest,
    status: str | None = None,
    category: str | None = None,
    isFeatured: bool | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
    sortBy: str = "createdAt",
    order: str = "desc",
):
    """List posts. Non-admin callers only ever see published posts."""
    user = get_optional_user(request)

    queryset = Post.objects.select_related("author")

    if not is_admin(user):
        queryset = queryset.filter(status=PostStatus.PUBLISHED)
    elif status:
        queryset = queryset.filter(status=status)

    if category:
        queryset = queryset.filter(category=category)
    if isFeatured is not None:
        queryset = queryset.filter(is_featured=isFeatured)
    if search:
        queryset = queryset.filter(
            Q(title__icontains=search)
            | Q(content__icontains=search)
            | Q(excerpt__icontains=search)
            | Q(tags__icontains=search)
        )

    sort_field = SORT_FIELDS.get(sortBy, "created_at")
    if order.lower() == "desc":
        sort_field = f"-{sort_field}"
    queryset = queryset.order_by(sort_field, "-id")

    posts, pagination = paginate(queryset, page, limit)
    return {"blogs": posts, "pagination": pagination}


@router.post("/", response={201: PostOut}, auth=AuthBearer())
def create_post(request: HttpRequest, coverImage: UploadedFile = File(None)):
    """Create a new post (admin only) from a JSON body or a multipart form."""
    user = require_admin(request)
    data = read_post_body(request, PostCreateIn)

    if not data.content.strip():
        raise HttpError(400, "Content is required")

    slug = unique_slug_for(data.title)

    cover_url = None
    cover_file_id = None
    if coverImage is not None:
        validate_cover_image(coverImage)
        try:
            uploaded = store_cover_image(coverImage)
        except AssetStoreError as e:
            raise HttpError(500, f"Failed to upload cover image: {e}")
        cover_url, cover_file_id = uploaded.url, uploaded.file_id

    post = Post.objects.create(
        title=data.title.strip(),
        slug=slug,
        content=data.content,
        excerpt=data.excerpt or None,
        cover_image=cover_url,
        cover_image_file_id=cover_file_id,
        author=user,
        category=data.category or None,
        tags=normalize_tags(data.tags),
        status=data.status,
        is_featured=data.isFeatured,
        meta_title=data.metaTitle or None,
        meta_description=data.metaDescription or None,
    )
    logger.info(f"[Blog] Created post {post.slug} by {user.email}")

    return 201, post


@router.post("/{uuid:post_id}/like", response=LikeOut)
def like_post(request: HttpRequest, post_id: UUID):
    """Increment the like counter. Anyone may like, repeatedly."""
    updated = Post.objects.filter(id=post_id).update(likes_count=F("likes_count") + 1)
    if not updated:
        raise HttpError(404, "Blog not found")

    likes = Post.objects.values_list("likes_count", flat=True).get(id=post_id)
    return {"likesCount": likes}


@router.patch("/{uuid:post_id}/toggle-status", response=ToggleStatusOut, auth=AuthBearer())
def toggle_post_status(request: HttpRequest, post_id: UUID):
    """Flip a post between draft and published (admin only)."""
    require_admin(request)
    post = get_post_or_404(post_id)

    status = post.toggle_status()
    post.save(update_fields=["status", "updated_at"])

    verb = "published" if status == PostStatus.PUBLISHED else "unpublished"
    return {"message": f"Blog {verb} successfully", "blog": post}


@router.put("/{uuid:post_id}", response=PostOut, auth=AuthBearer())
def update_post(
    request: HttpRequest,
    post_id: UUID,
    coverImage: UploadedFile = File(None),
):
    """Update a post (admin only). Omitted fields are left unchanged."""
    require_admin(request)
    data = read_post_body(request, PostUpdateIn)
    post = get_post_or_404(post_id)

    if data.title and data.title.strip() != post.title:
        post.slug = unique_slug_for(data.title, exclude_id=post.id)
        post.title = data.title.strip()

    if coverImage is not None:
        validate_cover_image(coverImage)
        if post.cover_image_file_id:
            delete_image(post.cover_image_file_id)
        try:
            uploaded = store_cover_image(coverImage)
        except AssetStoreError as e:
            # Old asset is already gone; the post is left without a cover
            logger.warning(f"[Blog] Cover upload failed for {post.slug}: {e}")
            post.cover_image, post.cover_image_file_id = None, None
        else:
            post.cover_image, post.cover_image_file_id = uploaded.url, uploaded.file_id

    if data.content:
        post.content = data.content
    if data.excerpt:
        post.excerpt = data.excerpt
    if data.category:
        post.category = data.category
    tags = normalize_tags(data.tags)
    if tags:
        post.tags = tags
    if data.status is not None:
        post.status = data.status
    if data.isFeatured is not None:
        post.is_featured = data.isFeatured
    if data.metaTitle:
        post.meta_title = data.metaTitle
    if data.metaDescription:
        post.meta_description = data.metaDescription

    post.save()
    return post


@router.delete("/{uuid:post_id}", auth=AuthBearer())
def delete_post(request: HttpRequest, post_id: UUID):
    """Delete a post, its comments and its cover image (admin only)."""
    require_admin(request)
    post = get_post_or_404(post_id)

    if post.cover_image_file_id:
        delete_image(post.cover_image_file_id)

    deleted, _ = Comment.objects.filter(post=post).delete()
    post.delete()
    logger.info(f"[Blog] Deleted post {post.slug} and {deleted} comments")

    return {"message": "Blog deleted successfully"}


@router.get("/{slug}", response=PostDetailOut)
def get_post(request: HttpRequest, slug: str):
    """Get a post by slug with its comment tree. Every visible read counts as a view."""
    try:
        post = Post.objects.select_related("author").get(slug=slug)
    except Post.DoesNotExist:
        raise HttpError(404, "Blog not found")

    if not post.is_published and not is_admin(get_optional_user(request)):
        raise HttpError(403, "This blog is not published yet")

    Post.objects.filter(id=post.id).update(views_count=F("views_count") + 1)
    post.refresh_from_db(fields=["views_count"])

    post.comment_tree = list(Comment.objects.thread_for(post))
    return post
