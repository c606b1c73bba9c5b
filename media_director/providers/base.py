"""Generation provider contract and the polling helper built on it."""

import asyncio
import logging
from typing import Any, Protocol, runtime_checkable

from media_director.errors import ProviderError
from media_director.providers.schemas import JobHandle, JobState, JobStatus

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_JOB_TIMEOUT = 600.0


@runtime_checkable
class GenerationProvider(Protocol):
    """Uniform submit/poll contract shared by every generation back-end."""

    async def submit(self, capability_id: str, parameters: dict[str, Any]) -> JobHandle: ...

    async def poll(self, handle: JobHandle) -> JobStatus: ...


async def run_to_completion(
    provider: GenerationProvider,
    capability_id: str,
    parameters: dict[str, Any],
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    timeout: float = DEFAULT_JOB_TIMEOUT,
) -> JobStatus:
    """Submit a job and poll until it reaches a terminal state.

    Raises:
        ProviderError: on submission failure, job failure or timeout
    """
    handle = await provider.submit(capability_id, parameters)
    logger.info(f"Submitted {capability_id} job {handle.request_id}")

    async def _poll_until_done() -> JobStatus:
        while True:
            status = await provider.poll(handle)
            if status.state.is_terminal:
                return status
            await asyncio.sleep(poll_interval)

    try:
        status = await asyncio.wait_for(_poll_until_done(), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise ProviderError(f"Job {handle.request_id} on {capability_id} timed out after {timeout}s") from e

    if status.state == JobState.FAILED:
        raise ProviderError(status.error or f"Job {handle.request_id} on {capability_id} failed")
    if not status.result_ref:
        raise ProviderError(f"Job {handle.request_id} on {capability_id} completed without an asset")
    return status
