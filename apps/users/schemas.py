"""
User schemas for API.
"""

from uuid import UUID
from ninja import Schema


class UserBriefOut(Schema):
    """Author info embedded in posts and comments."""

    id: UUID
    name: str | None = None
    email: str
