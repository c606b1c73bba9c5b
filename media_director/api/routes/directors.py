"""Director catalog API routes."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from media_director.api.deps import get_core
from media_director.augmentation.schemas import DirectorProfile, DirectorSummary

router = APIRouter(prefix="/directors", tags=["directors"])


@router.get("", response_model=list[DirectorSummary])
async def list_directors(
    genre: Optional[str] = Query(None, description="Filter by genre"),
) -> list[DirectorSummary]:
    """List directors with a one-line style description."""
    return get_core().directors.list_summaries(genre)


@router.get("/genres", response_model=list[str])
async def list_genres() -> list[str]:
    """List every genre in the catalog."""
    return get_core().directors.genres()


@router.get("/{name}", response_model=DirectorProfile)
async def get_director(name: str) -> DirectorProfile:
    """Get a director's full style profile."""
    profile = get_core().directors.get(name)
    if profile is None:
        raise HTTPException(status_code=404, detail=f"Director '{name}' not found")
    return profile
