"""Fixtures for integration tests that run the wired conversation core."""

from datetime import UTC, datetime, timedelta

import pytest

from atelier.bootstrap import Components, build_components
from atelier.config.models.generation import ModelsConfig
from atelier.config.models.jobs import HatchetConfig, JobsConfig
from atelier.config.settings import Settings
from atelier.jobs import InMemoryJobQueue
from atelier.providers.llm import MockModelProvider
from atelier.providers.media import MockVisionFileStore

UNRESOLVED_GENDER = {"inferred_gender": None, "confirmed": False}


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def settings() -> Settings:
    return Settings(
        models=ModelsConfig(provider="mock"),
        jobs=JobsConfig(hatchet=HatchetConfig(enabled=False)),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 9, 0, tzinfo=UTC))


@pytest.fixture
def provider() -> MockModelProvider:
    provider = MockModelProvider()
    provider.set_response("profile_inference", UNRESOLVED_GENDER)
    return provider


@pytest.fixture
def components(settings: Settings, provider: MockModelProvider, clock: FakeClock) -> Components:
    return build_components(
        settings,
        provider=provider,
        vision_files=MockVisionFileStore(),
        job_queue=InMemoryJobQueue(),
        clock=clock,
    )
