"""Space Endpoints."""

from fastapi import APIRouter

from carespace.api.envelope import ok, ok_list
from carespace.core.errors import NotFound
from carespace.infra.store import get_entity_store

router = APIRouter(prefix="/spaces", tags=["Spaces"])


@router.get("", summary="List all spaces")
def list_spaces() -> dict:
    return ok_list(get_entity_store().spaces)


@router.get("/bookable", summary="Bookable spaces")
def bookable_spaces() -> dict:
    return ok_list([s for s in get_entity_store().spaces if s.bookable])


@router.get("/category/{category}", summary="Spaces by category")
def spaces_by_category(category: str) -> dict:
    """Case-insensitive substring match on the category."""
    needle = category.lower()
    return ok_list([s for s in get_entity_store().spaces if needle in s.category.lower()])


@router.get("/{space_id}", summary="Get a space")
def get_space(space_id: str) -> dict:
    space = get_entity_store().get_space(space_id)
    if space is None:
        raise NotFound(f"Space '{space_id}' does not exist")
    return ok(space.to_dict())
