"""Statistics Endpoints."""

from fastapi import APIRouter

from carespace.api.envelope import ok
from carespace.core.stats import overall_stats, specialty_stats
from carespace.infra.store import get_entity_store

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("", summary="Overall statistics")
def stats() -> dict:
    return ok(overall_stats(get_entity_store()))


@router.get("/specialties", summary="Doctor counts per specialty")
def specialties() -> dict:
    return ok(specialty_stats(get_entity_store()))
