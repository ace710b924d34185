"""
Pytest configuration and fixtures.
"""

import json
import pytest
from django.test import Client
from django.test.client import BOUNDARY, MULTIPART_CONTENT, encode_multipart

from apps.blog.models import Post, PostStatus
from apps.users.models import User, UserRole
from utils.auth import create_token


class APIClient:
    """Wrapper around Django test client for API testing."""

    def __init__(self):
        self.client = Client()

    def _make_request(self, method, path, data=None, headers=None):
        """Make HTTP request."""
        kwargs = {"content_type": "application/json"}

        if headers:
            kwargs.update(headers)

        if data:
            kwargs["data"] = json.dumps(data)

        response = getattr(self.client, method.lower())(self._api_path(path), **kwargs)
        return APIResponse(response)

    @staticmethod
    def _api_path(path):
        # Prepend /api if not present
        if not path.startswith("/api"):
            path = f"/api{path}"
        return path

    def get(self, path, headers=None, **kwargs):
        return self._make_request("GET", path, headers=headers)

    def post(self, path, json=None, headers=None, **kwargs):
        return self._make_request("POST", path, data=json, headers=headers)

    def put(self, path, json=None, headers=None, **kwargs):
        return self._make_request("PUT", path, data=json, headers=headers)

    def patch(self, path, json=None, headers=None, **kwargs):
        return self._make_request("PATCH", path, data=json, headers=headers)

    def delete(self, path, headers=None, **kwargs):
        return self._make_request("DELETE", path, headers=headers)

    def post_form(self, path, data=None, headers=None):
        """POST multipart form data (fields and uploaded files)."""
        response = self.client.post(self._api_path(path), data=data or {}, **(headers or {}))
        return APIResponse(response)

    def put_form(self, path, data=None, headers=None):
        """PUT multipart form data (fields and uploaded files)."""
        response = self.client.put(
            self._api_path(path),
            data=encode_multipart(BOUNDARY, data or {}),
            content_type=MULTIPART_CONTENT,
            **(headers or {}),
        )
        return APIResponse(response)


class APIResponse:
    """Wrapper around Django response for easier testing."""

    def __init__(self, response):
        self._response = response
        self.status_code = response.status_code

    def json(self):
        return json.loads(self._response.content)


@pytest.fixture
def api_client():
    """API test client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    """Create admin user for testing."""
    user = User.objects.create(
        email="admin@test.com",
        name="Admin User",
        role=UserRole.ADMIN,
    )
    user.set_password("Admin@123456")
    user.save()
    return user


@pytest.fixture
def regular_user(db):
    """Create regular user for testing."""
    user = User.objects.create(
        email="user@test.com",
        name="Regular User",
        role=UserRole.USER,
    )
    user.set_password("User@123456")
    user.save()
    return user


@pytest.fixture
def other_user(db):
    """Second regular user, for ownership checks."""
    return User.objects.create(
        email="other@test.com",
        name="Other User",
        role=UserRole.USER,
    )


def bearer(user):
    return {"HTTP_AUTHORIZATION": f"Bearer {create_token(user)}"}


@pytest.fixture
def auth_headers(admin_user):
    """Get auth headers for admin user."""
    return bearer(admin_user)


@pytest.fixture
def user_auth_headers(regular_user):
    """Get auth headers for regular user."""
    return bearer(regular_user)


@pytest.fixture
def other_auth_headers(other_user):
    """Get auth headers for the second regular user."""
    return bearer(other_user)


@pytest.fixture
def published_post(admin_user):
    """A published post authored by the admin."""
    return Post.objects.create(
        title="Published Post",
        slug="published-post",
        content="Some published content",
        status=PostStatus.PUBLISHED,
        author=admin_user,
    )


@pytest.fixture
def draft_post(admin_user):
    """A draft post authored by the admin."""
    return Post.objects.create(
        title="Draft Post",
        slug="draft-post",
        content="Work in progress",
        status=PostStatus.DRAFT,
        author=admin_user,
    )
