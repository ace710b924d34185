"""
Django Ninja API configuration.
"""

import logging
from typing import Any

from django.http import HttpRequest, HttpResponse
from ninja import NinjaAPI
from ninja.errors import HttpError, ValidationError
from ninja.renderers import JSONRenderer
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)


class SuccessWrapperRenderer(JSONRenderer):
    """Wrap all responses in {success: true, data: ...} format for frontend compatibility."""

    def render(self, request: HttpRequest, data: Any, *, response_status: int) -> Any:
        # Don't wrap error responses (they already have success: false)
        if isinstance(data, dict) and "success" in data:
            return super().render(request, data, response_status=response_status)

        if 200 <= response_status < 300:
            wrapped = {"success": True, "data": data}
        else:
            wrapped = {"success": False, "error": data}

        return super().render(request, wrapped, response_status=response_status)


api = NinjaAPI(
    title="SentriQ Blog API",
    version="1.0.0",
    description="Blog posts, threaded comments and realtime comment rooms",
    renderer=SuccessWrapperRenderer(),
)


@api.exception_handler(ValidationError)
def validation_errors(request: HttpRequest, exc: ValidationError) -> HttpResponse:
    return api.create_response(
        request,
        {"success": False, "error": exc.errors},
        status=400,
    )


@api.exception_handler(PydanticValidationError)
def pydantic_validation_errors(request: HttpRequest, exc: PydanticValidationError) -> HttpResponse:
    return api.create_response(
        request,
        {"success": False, "error": exc.errors(include_url=False, include_context=False)},
        status=400,
    )


@api.exception_handler(HttpError)
def http_error_handler(request: HttpRequest, exc: HttpError) -> HttpResponse:
    return api.create_response(
        request,
        {"success": False, "error": str(exc)},
        status=exc.status_code,
    )


@api.exception_handler(Exception)
def generic_error_handler(request: HttpRequest, exc: Exception) -> HttpResponse:
    logger.exception(f"[API] Unhandled error on {request.method} {request.path}")
    return api.create_response(
        request,
        {"success": False, "error": "Internal server error"},
        status=500,
    )


# Health check
@api.get("/health")
def health_check(request: HttpRequest) -> dict:
    return {"status": "ok", "version": "1.0.0"}


# Import and register routers
from apps.blog.api import router as blog_router  # noqa: E402
from apps.comments.api import router as comments_router  # noqa: E402

api.add_router("/blogs", blog_router, tags=["Blogs"])
api.add_router("/comments", comments_router, tags=["Comments"])
