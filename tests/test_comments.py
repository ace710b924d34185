"""
Tests for Comments API endpoints.
"""

import pytest
from unittest.mock import patch

from apps.blog.models import Post, PostStatus
from apps.comments.models import DELETED_PLACEHOLDER, Comment


@pytest.fixture
def second_post(admin_user):
    return Post.objects.create(
        title="Second Post",
        slug="second-post",
        content="Another one",
        status=PostStatus.PUBLISHED,
        author=admin_user,
    )


@pytest.fixture
def top_comment(published_post, regular_user):
    return Comment.objects.create(post=published_post, user=regular_user, content="First!")


@pytest.mark.django_db
class TestAddComment:
    """Creating comments and replies."""

    def test_add_top_level_comment(self, api_client, user_auth_headers, published_post):
        response = api_client.post(
            "/comments/",
            json={"blogId": str(published_post.id), "content": "  Great article!  "},
            headers=user_auth_headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["content"] == "Great article!"
        assert data["blogId"] == str(published_post.id)
        assert data["user"]["email"] == "user@test.com"
        assert data["parentCommentId"] is None
        assert data["parentComment"] is None
        assert data["isEdited"] is False

    def test_add_reply_expands_parent(self, api_client, other_auth_headers, published_post, top_comment):
        response = api_client.post(
            "/comments/",
            json={
                "blogId": str(published_post.id),
                "content": "Thanks!",
                "parentCommentId": str(top_comment.id),
            },
            headers=other_auth_headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["parentCommentId"] == str(top_comment.id)
        assert data["parentComment"]["content"] == "First!"

    def test_requires_authentication(self, api_client, published_post):
        response = api_client.post("/comments/", json={"blogId": str(published_post.id), "content": "hi"})
        assert response.status_code == 401

    def test_unknown_post(self, api_client, user_auth_headers):
        response = api_client.post(
            "/comments/",
            json={"blogId": "00000000-0000-0000-0000-000000000000", "content": "hi"},
            headers=user_auth_headers,
        )
        assert response.status_code == 404
        assert response.json()["error"] == "Blog not found"

    def test_parent_from_other_post_rejected(self, api_client, user_auth_headers, second_post, top_comment):
        response = api_client.post(
            "/comments/",
            json={
                "blogId": str(second_post.id),
                "content": "Wrong thread",
                "parentCommentId": str(top_comment.id),
            },
            headers=user_auth_headers,
        )
        assert response.status_code == 404
        assert response.json()["error"] == "Parent comment not found"
        assert not Comment.objects.filter(post=second_post).exists()

    def test_reply_to_reply_rejected(self, api_client, user_auth_headers, published_post, top_comment, other_user):
        reply = Comment.objects.create(post=published_post, user=other_user, content="Reply", parent=top_comment)

        response = api_client.post(
            "/comments/",
            json={
                "blogId": str(published_post.id),
                "content": "Too deep",
                "parentCommentId": str(reply.id),
            },
            headers=user_auth_headers,
        )
        assert response.status_code == 404
        assert Comment.objects.filter(parent=reply).count() == 0

    def test_blank_content_rejected(self, api_client, user_auth_headers, published_post):
        response = api_client.post(
            "/comments/",
            json={"blogId": str(published_post.id), "content": "   "},
            headers=user_auth_headers,
        )
        assert response.status_code == 400

    @patch("apps.realtime.notifier.broadcast")
    def test_add_broadcasts_after_commit(
        self, mock_broadcast, api_client, user_auth_headers, published_post, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            response = api_client.post(
                "/comments/",
                json={"blogId": str(published_post.id), "content": "Live"},
                headers=user_auth_headers,
            )

        assert response.status_code == 201
        mock_broadcast.assert_called_once()
        post_id, event, payload = mock_broadcast.call_args.args
        assert post_id == published_post.id
        assert event == "new_comment"
        assert payload["content"] == "Live"
        assert payload["id"] == response.json()["data"]["id"]


@pytest.mark.django_db
class TestListComments:
    """Top-level pagination with eager replies."""

    def test_lists_top_level_newest_first_with_replies_oldest_first(
        self, api_client, published_post, regular_user, other_user
    ):
        older = Comment.objects.create(post=published_post, user=regular_user, content="Older")
        Comment.objects.create(post=published_post, user=regular_user, content="Newer")
        Comment.objects.create(post=published_post, user=other_user, content="R1", parent=older)
        Comment.objects.create(post=published_post, user=other_user, content="R2", parent=older)
        Comment.objects.create(post=published_post, user=other_user, content="Hidden", parent=older, is_deleted=True)
        Comment.objects.create(post=published_post, user=regular_user, content="Removed", is_deleted=True)

        response = api_client.get(f"/comments/blog/{published_post.id}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert [c["content"] for c in data["comments"]] == ["Newer", "Older"]
        assert data["comments"][0]["replies"] == []
        assert [r["content"] for r in data["comments"][1]["replies"]] == ["R1", "R2"]
        assert data["pagination"]["totalItems"] == 2

    def test_only_comments_of_requested_post(self, api_client, published_post, second_post, regular_user):
        Comment.objects.create(post=published_post, user=regular_user, content="Here")
        Comment.objects.create(post=second_post, user=regular_user, content="Elsewhere")

        data = api_client.get(f"/comments/blog/{published_post.id}").json()["data"]
        assert [c["content"] for c in data["comments"]] == ["Here"]

    def test_pagination_math(self, api_client, published_post, regular_user):
        for i in range(23):
            Comment.objects.create(post=published_post, user=regular_user, content=f"Comment {i}")

        first = api_client.get(f"/comments/blog/{published_post.id}?page=1&limit=10").json()["data"]
        assert len(first["comments"]) == 10
        assert first["pagination"]["hasNext"] is True
        assert first["pagination"]["hasPrev"] is False
        assert first["pagination"]["totalPages"] == 3

        last = api_client.get(f"/comments/blog/{published_post.id}?page=3&limit=10").json()["data"]
        assert len(last["comments"]) == 3
        assert last["pagination"]["hasNext"] is False
        assert last["pagination"]["hasPrev"] is True


@pytest.mark.django_db
class TestEditAndDeleteComment:
    """Ownership rules, soft delete and event fan-out."""

    def test_author_can_edit(self, api_client, user_auth_headers, top_comment):
        response = api_client.put(f"/comments/{top_comment.id}", json={"content": "Edited"}, headers=user_auth_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["content"] == "Edited"
        assert data["isEdited"] is True

    def test_other_user_cannot_edit(self, api_client, other_auth_headers, top_comment):
        response = api_client.put(f"/comments/{top_comment.id}", json={"content": "Hijack"}, headers=other_auth_headers)
        assert response.status_code == 403
        top_comment.refresh_from_db()
        assert top_comment.content == "First!"

    def test_admin_cannot_edit_others_comment(self, api_client, auth_headers, top_comment):
        response = api_client.put(f"/comments/{top_comment.id}", json={"content": "Admin edit"}, headers=auth_headers)
        assert response.status_code == 403

    def test_edit_unknown_comment(self, api_client, user_auth_headers):
        response = api_client.put(
            "/comments/00000000-0000-0000-0000-000000000000",
            json={"content": "x"},
            headers=user_auth_headers,
        )
        assert response.status_code == 404

    def test_deleted_comment_cannot_be_edited(self, api_client, user_auth_headers, top_comment):
        api_client.delete(f"/comments/{top_comment.id}", headers=user_auth_headers)

        response = api_client.put(f"/comments/{top_comment.id}", json={"content": "back"}, headers=user_auth_headers)
        assert response.status_code == 400
        top_comment.refresh_from_db()
        assert top_comment.is_deleted is True
        assert top_comment.content == DELETED_PLACEHOLDER

    def test_other_user_cannot_delete(self, api_client, other_auth_headers, top_comment):
        response = api_client.delete(f"/comments/{top_comment.id}", headers=other_auth_headers)
        assert response.status_code == 403
        top_comment.refresh_from_db()
        assert top_comment.is_deleted is False

    def test_author_soft_deletes(self, api_client, user_auth_headers, published_post, top_comment):
        response = api_client.delete(f"/comments/{top_comment.id}", headers=user_auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["message"] == "Comment deleted successfully"

        by_id = api_client.get(f"/comments/{top_comment.id}").json()["data"]
        assert by_id["isDeleted"] is True
        assert by_id["content"] == DELETED_PLACEHOLDER

        listing = api_client.get(f"/comments/blog/{published_post.id}").json()["data"]
        assert listing["comments"] == []

    def test_admin_can_delete_any_comment(self, api_client, auth_headers, top_comment):
        response = api_client.delete(f"/comments/{top_comment.id}", headers=auth_headers)
        assert response.status_code == 200
        top_comment.refresh_from_db()
        assert top_comment.is_deleted is True

    @patch("apps.realtime.notifier.broadcast")
    def test_edit_and_delete_broadcast(
        self, mock_broadcast, api_client, user_auth_headers, published_post, top_comment, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            api_client.put(f"/comments/{top_comment.id}", json={"content": "Edited"}, headers=user_auth_headers)
            api_client.delete(f"/comments/{top_comment.id}", headers=user_auth_headers)

        events = [call.args[1] for call in mock_broadcast.call_args_list]
        assert events == ["comment_updated", "comment_deleted"]
        assert mock_broadcast.call_args_list[0].args[2]["content"] == "Edited"
        assert mock_broadcast.call_args_list[1].args[2] == {"commentId": str(top_comment.id)}

    @patch("apps.realtime.notifier.broadcast")
    def test_rejected_edit_does_not_broadcast(
        self, mock_broadcast, api_client, other_auth_headers, top_comment, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            api_client.put(f"/comments/{top_comment.id}", json={"content": "Hijack"}, headers=other_auth_headers)

        mock_broadcast.assert_not_called()


@pytest.mark.django_db
def test_end_to_end_thread(api_client, auth_headers, user_auth_headers, other_auth_headers):
    """Create post, comment, reply, then soft-delete the reply."""
    created = api_client.post_form(
        "/blogs/",
        data={"title": "Hello World", "content": "Welcome", "status": "published"},
        headers=auth_headers,
    )
    assert created.status_code == 201
    post = created.json()["data"]
    assert post["slug"] == "hello-world"

    comment = api_client.post(
        "/comments/",
        json={"blogId": post["id"], "content": "Top level"},
        headers=user_auth_headers,
    )
    assert comment.status_code == 201
    comment_id = comment.json()["data"]["id"]

    listing = api_client.get(f"/comments/blog/{post['id']}").json()["data"]
    assert [c["id"] for c in listing["comments"]] == [comment_id]

    reply = api_client.post(
        "/comments/",
        json={"blogId": post["id"], "content": "A reply", "parentCommentId": comment_id},
        headers=other_auth_headers,
    )
    assert reply.status_code == 201
    reply_id = reply.json()["data"]["id"]

    listing = api_client.get(f"/comments/blog/{post['id']}").json()["data"]
    assert [r["id"] for r in listing["comments"][0]["replies"]] == [reply_id]

    deleted = api_client.delete(f"/comments/{reply_id}", headers=other_auth_headers)
    assert deleted.status_code == 200
    assert Comment.objects.get(id=reply_id).content == DELETED_PLACEHOLDER

    listing = api_client.get(f"/comments/blog/{post['id']}").json()["data"]
    assert listing["comments"][0]["replies"] == []
