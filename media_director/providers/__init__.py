"""Generation providers: the submit/poll contract and the fal.ai queue client."""

from media_director.providers.schemas import JobHandle, JobState, JobStatus
from media_director.providers.base import GenerationProvider, run_to_completion
from media_director.providers.fal import FalQueueProvider, extract_asset_url

__all__ = [
    "JobHandle",
    "JobState",
    "JobStatus",
    "GenerationProvider",
    "run_to_completion",
    "FalQueueProvider",
    "extract_asset_url",
]
