"""Content-filter audit API routes."""

from fastapi import APIRouter

from media_director.api.deps import get_core
from media_director.augmentation.schemas import ContentFilterEntry, ContentFilterStats

router = APIRouter(prefix="/content-filter", tags=["content-filter"])


@router.get("/stats", response_model=ContentFilterStats)
async def get_stats() -> ContentFilterStats:
    """Totals, success rate and most filtered terms over the retention window."""
    return get_core().content_filter_stats()


@router.get("/entries", response_model=list[ContentFilterEntry])
async def list_entries() -> list[ContentFilterEntry]:
    """Audited submissions still inside the retention window."""
    return get_core().audit_log.entries()
