"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from portfolio_ai.config import CredentialSet
from portfolio_ai.models.generation import GenerationResponse, TokenUsage
from portfolio_ai.models.profile import StructuredResumeProfile
from portfolio_ai.pipeline.orchestrator import AIOrchestrator
from portfolio_ai.providers.base import ModelProvider

FIXTURES_DIR = Path(__file__).parent / "fixtures"

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-haiku-20240307",
    "google": "gemini-1.5-flash",
}


def make_provider(
    name: str,
    content: str = "{}",
    *,
    model: str | None = None,
    usage: TokenUsage | None = None,
) -> ModelProvider:
    """Create a mock adapter whose generate_text returns ``content``."""
    model = model or DEFAULT_MODELS[name]
    provider = AsyncMock(spec=ModelProvider)
    provider.name = name
    provider.model = model
    provider.generate_text = AsyncMock(
        return_value=GenerationResponse(content=content, usage=usage, model=model, provider=name)
    )
    return provider


def make_orchestrator(**providers: ModelProvider) -> AIOrchestrator:
    """Orchestrator over mock adapters with instant retries."""
    return AIOrchestrator(providers, retry_wait_min=0, retry_wait_max=0)


@pytest.fixture
def sample_resume_text() -> str:
    return """Jane Doe
Senior Backend Engineer | jane@example.com | Berlin, Germany

EXPERIENCE
Acme Payments, Senior Backend Engineer (2020-03 - present)
- Cut settlement latency from 4h to 15min
- Led migration to PostgreSQL 15

Widget GmbH, Software Engineer (2016-09 - 2020-02)
- Built internal REST APIs for the logistics team

EDUCATION
TU Berlin, BSc Computer Science, 2016

SKILLS
Python, Kafka, PostgreSQL, Docker, Django, Mentoring
"""


@pytest.fixture
def sample_profile_json() -> dict:
    return json.loads((FIXTURES_DIR / "profile.json").read_text(encoding="utf-8"))


@pytest.fixture
def sample_profile(sample_profile_json) -> StructuredResumeProfile:
    return StructuredResumeProfile.model_validate(sample_profile_json)


@pytest.fixture
def all_credentials() -> CredentialSet:
    return CredentialSet(openai="sk-openai", anthropic="sk-ant", google="g-key")


@pytest.fixture
def no_credentials() -> CredentialSet:
    return CredentialSet()
