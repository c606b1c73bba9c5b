"""Capability API routes."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from media_director.api.deps import get_core
from media_director.capabilities.schemas import CapabilitySummary, MediaCategory, ModelCapability

router = APIRouter(prefix="/capabilities", tags=["capabilities"])


@router.get("", response_model=list[CapabilitySummary])
async def list_capabilities(
    category: Optional[MediaCategory] = Query(None, description="Filter by output category"),
) -> list[CapabilitySummary]:
    """List registered generation back-ends."""
    registry = get_core().registry
    return registry.list_summaries(category.value if category else None)


@router.get("/{capability_id:path}", response_model=ModelCapability)
async def get_capability(capability_id: str) -> ModelCapability:
    """Get one capability by endpoint id (ids contain slashes)."""
    capability = get_core().registry.get(capability_id)
    if capability is None:
        raise HTTPException(status_code=404, detail=f"Capability '{capability_id}' not found")
    return capability
