"""Tests for the provider contract and the fal.ai queue provider."""

import asyncio

import httpx
import pytest

from media_director.errors import ProviderError
from media_director.providers import FalQueueProvider, JobHandle, JobState, JobStatus, extract_asset_url, run_to_completion

BASE = "https://queue.test"


def _provider(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FalQueueProvider(api_key="secret", base_url=BASE, client=client)


def test_extract_asset_url():
    assert extract_asset_url({"images": [{"url": "https://cdn/a.png"}]}) == "https://cdn/a.png"
    assert extract_asset_url({"video": {"url": "https://cdn/v.mp4"}}) == "https://cdn/v.mp4"
    assert extract_asset_url({"audio_file": "https://cdn/a.mp3"}) == "https://cdn/a.mp3"
    assert extract_asset_url({"url": "https://cdn/x"}) == "https://cdn/x"
    assert extract_asset_url({"images": []}) is None


def test_missing_key_is_rejected():
    with pytest.raises(ProviderError):
        FalQueueProvider(api_key="")


def test_submit_and_poll():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, str(request.url), request.headers.get("authorization")))
        if request.method == "POST":
            return httpx.Response(200, json={"request_id": "req-1"})
        if request.url.path.endswith("/status"):
            return httpx.Response(200, json={"status": "COMPLETED"})
        return httpx.Response(200, json={"images": [{"url": "https://cdn.test/out.png"}]})

    provider = _provider(handler)

    async def scenario():
        handle = await provider.submit("fal-ai/imagen4/preview", {"prompt": "a cat"})
        status = await provider.poll(handle)
        await provider.aclose()
        return handle, status

    handle, status = asyncio.run(scenario())
    assert handle.status_url == f"{BASE}/fal-ai/imagen4/preview/requests/req-1/status"
    assert status.state == JobState.COMPLETED
    assert status.result_ref == "https://cdn.test/out.png"
    assert seen[0] == ("POST", f"{BASE}/fal-ai/imagen4/preview", "Key secret")
    assert len(seen) == 3


@pytest.mark.parametrize(
    "status, expected",
    [("IN_QUEUE", JobState.QUEUED), ("IN_PROGRESS", JobState.IN_PROGRESS), ("CANCELLED", JobState.FAILED)],
)
def test_poll_status_mapping(status, expected):
    provider = _provider(lambda request: httpx.Response(200, json={"status": status}))
    handle = JobHandle(request_id="r", model_id="m", status_url=f"{BASE}/m/requests/r/status", response_url=f"{BASE}/m/requests/r")
    assert asyncio.run(provider.poll(handle)).state == expected


def test_http_errors_become_provider_errors():
    provider = _provider(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(provider.submit("fal-ai/imagen4/preview", {}))
    assert "500" in str(excinfo.value)


def test_submit_without_request_id():
    provider = _provider(lambda request: httpx.Response(200, json={}))
    with pytest.raises(ProviderError):
        asyncio.run(provider.submit("fal-ai/imagen4/preview", {}))


class ScriptedProvider:
    def __init__(self, *states):
        self.states = list(states)

    async def submit(self, capability_id, parameters):
        return JobHandle(request_id="r", model_id=capability_id)

    async def poll(self, handle):
        return self.states.pop(0) if len(self.states) > 1 else self.states[0]


def test_run_to_completion_polls_until_terminal():
    provider = ScriptedProvider(
        JobStatus(state=JobState.QUEUED),
        JobStatus(state=JobState.IN_PROGRESS),
        JobStatus(state=JobState.COMPLETED, result_ref="https://cdn.test/done.png"),
    )
    status = asyncio.run(run_to_completion(provider, "m", {}, poll_interval=0))
    assert status.result_ref == "https://cdn.test/done.png"


def test_run_to_completion_failures():
    failed = ScriptedProvider(JobStatus(state=JobState.FAILED, error="nsfw"))
    with pytest.raises(ProviderError, match="nsfw"):
        asyncio.run(run_to_completion(failed, "m", {}, poll_interval=0))

    empty = ScriptedProvider(JobStatus(state=JobState.COMPLETED))
    with pytest.raises(ProviderError, match="without an asset"):
        asyncio.run(run_to_completion(empty, "m", {}, poll_interval=0))

    stuck = ScriptedProvider(JobStatus(state=JobState.IN_PROGRESS))
    with pytest.raises(ProviderError, match="timed out"):
        asyncio.run(run_to_completion(stuck, "m", {}, poll_interval=0.01, timeout=0.05))
