"""Response envelope shared by all API routes."""

from typing import Any, Optional

from carespace.core.errors import CareSpaceError


def ok(data: Any, count: Optional[int] = None) -> dict:
    """Wrap a successful payload.

    Args:
        data: Response payload
        count: Number of items, included for list payloads
    """
    body: dict[str, Any] = {"success": True}
    if count is not None:
        body["count"] = count
    body["data"] = data
    return body


def ok_list(items: list) -> dict:
    """Wrap a list of entities that provide `to_dict()`."""
    return ok([item.to_dict() for item in items], count=len(items))


def failure(error: str, message: str, **extra: Any) -> dict:
    """Build an error body."""
    body: dict[str, Any] = {"success": False, "error": error, "message": message}
    body.update(extra)
    return body


def error_body(exc: CareSpaceError) -> dict:
    """Error body for a domain error."""
    return failure(exc.error, exc.message)
