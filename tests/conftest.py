"""Shared fixtures: registry, seeded rng, fresh state, fake provider and advisory backend."""

import asyncio
import json
import random
from typing import Any, Optional

import pytest

from media_director.augmentation.pipeline import AugmentationPipeline
from media_director.capabilities.registry import CapabilityRegistry
from media_director.core import DecisionCore
from media_director.errors import AdvisoryError, ProviderError
from media_director.intent.classifier import IntentClassifier
from media_director.providers.schemas import JobHandle, JobState, JobStatus
from media_director.selection.engine import SelectionEngine
from media_director.session.schemas import ConversationState
from media_director.suggestions.registry import SuggestionRegistry


class FakeProvider:
    """In-memory generation provider. Jobs complete on the first poll."""

    def __init__(self, fail_on: Optional[set[int]] = None, reject_on: Optional[set[int]] = None):
        self.fail_on = fail_on or set()
        self.reject_on = reject_on or set()
        self.submissions: list[tuple[str, dict[str, Any]]] = []

    async def submit(self, capability_id: str, parameters: dict[str, Any]) -> JobHandle:
        self.submissions.append((capability_id, parameters))
        number = len(self.submissions)
        if number in self.reject_on:
            raise ProviderError(f"submission {number} rejected")
        return JobHandle(request_id=f"req-{number}", model_id=capability_id)

    async def poll(self, handle: JobHandle) -> JobStatus:
        number = int(handle.request_id.split("-")[1])
        if number in self.fail_on:
            return JobStatus(state=JobState.FAILED, error=f"job {number} failed")
        return JobStatus(state=JobState.COMPLETED, result_ref=f"https://cdn.test/asset-{number}.png")


class FakeAdvisoryBackend:
    """Returns queued answers in order; an Exception instance in the queue is raised."""

    def __init__(self, *answers: Any, delay: float = 0.0):
        self.answers = list(answers)
        self.delay = delay
        self.calls: list[tuple[str, str]] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self.answers:
            raise AdvisoryError("no answer queued")
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, dict):
            return json.dumps(answer)
        return answer


@pytest.fixture(scope="session")
def registry() -> CapabilityRegistry:
    return CapabilityRegistry()


@pytest.fixture(scope="session")
def classifier() -> IntentClassifier:
    return IntentClassifier()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def state() -> ConversationState:
    return ConversationState(session_id="test-session")


@pytest.fixture
def engine(registry) -> SelectionEngine:
    return SelectionEngine(registry=registry)


@pytest.fixture
def pipeline() -> AugmentationPipeline:
    return AugmentationPipeline()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def core(registry, provider) -> DecisionCore:
    return DecisionCore(registry=registry, provider=provider, suggestions=SuggestionRegistry(), seed=7)
