"""fal.ai queue REST provider."""

import logging
from typing import Any, Optional

import httpx

from media_director.errors import ProviderError
from media_director.providers.schemas import JobHandle, JobState, JobStatus

logger = logging.getLogger(__name__)

FAL_QUEUE_URL = "https://queue.fal.run"

_STATES = {
    "IN_QUEUE": JobState.QUEUED,
    "IN_PROGRESS": JobState.IN_PROGRESS,
    "COMPLETED": JobState.COMPLETED,
}


def extract_asset_url(payload: dict[str, Any]) -> Optional[str]:
    """First asset URL in a fal result (images, video, audio or frame)."""
    images = payload.get("images")
    if isinstance(images, list) and images:
        first = images[0]
        if isinstance(first, dict) and first.get("url"):
            return first["url"]
    for key in ("image", "video", "audio", "audio_file", "frame"):
        value = payload.get(key)
        if isinstance(value, dict) and value.get("url"):
            return value["url"]
        if isinstance(value, str) and value.startswith("http"):
            return value
    url = payload.get("url")
    return url if isinstance(url, str) else None


class FalQueueProvider:
    """Submits jobs to the fal.ai queue and polls their status."""

    def __init__(
        self,
        api_key: str,
        timeout: float = 30.0,
        base_url: str = FAL_QUEUE_URL,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not api_key:
            raise ProviderError("fal.ai provider needs FAL_KEY")
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self._headers = {"Authorization": f"Key {api_key}", "Content-Type": "application/json"}

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, url, headers=self._headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderError(f"fal.ai {method} {url} returned {e.response.status_code}: {e.response.text[:200]}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"fal.ai {method} {url} failed: {e}") from e
        return response.json()

    async def submit(self, capability_id: str, parameters: dict[str, Any]) -> JobHandle:
        data = await self._request("POST", f"{self.base_url}/{capability_id}", json=parameters)
        request_id = data.get("request_id")
        if not request_id:
            raise ProviderError(f"fal.ai accepted {capability_id} job without a request id")
        return JobHandle(
            request_id=request_id,
            model_id=capability_id,
            status_url=data.get("status_url") or f"{self.base_url}/{capability_id}/requests/{request_id}/status",
            response_url=data.get("response_url") or f"{self.base_url}/{capability_id}/requests/{request_id}",
        )

    async def poll(self, handle: JobHandle) -> JobStatus:
        data = await self._request("GET", handle.status_url)
        raw_state = data.get("status", "")
        state = _STATES.get(raw_state)
        if state is None:
            return JobStatus(state=JobState.FAILED, error=data.get("error") or f"Unexpected status '{raw_state}'")
        if state != JobState.COMPLETED:
            return JobStatus(state=state)

        result = await self._request("GET", handle.response_url)
        asset = extract_asset_url(result)
        if asset is None:
            return JobStatus(state=JobState.FAILED, error="Result contained no asset URL", payload=result)
        logger.info(f"fal.ai job {handle.request_id} completed: {asset}")
        return JobStatus(state=JobState.COMPLETED, result_ref=asset, payload=result)

    async def aclose(self) -> None:
        await self._client.aclose()
