"""Tests for the AI orchestrator."""

from __future__ import annotations

import asyncio
import json
import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import make_orchestrator, make_provider
from portfolio_ai.config import AppConfig, CredentialSet, LLMConfig, ProviderName
from portfolio_ai.errors import (
    ConfigurationError,
    MalformedResponseError,
    NoProviderAvailableError,
    ProviderError,
)
from portfolio_ai.models.generation import GenerationResponse, TokenUsage
from portfolio_ai.models.profile import Experience, Skill
from portfolio_ai.pipeline.orchestrator import AIOrchestrator, resolve_provider_name


@pytest.fixture
def extraction_json(sample_profile_json):
    return json.dumps(sample_profile_json)


def _enhancement_router(model: str = "claude-3-haiku-20240307"):
    """Answer summary, experience and project enhancement prompts differently."""

    async def _answer(prompt, system_instruction=None):
        if "Enhance this job experience" in prompt:
            content = json.dumps(
                {
                    "enhancedDescription": "Led the settlement platform.",
                    "highlights": ["Cut latency 16x"],
                    "impactMetrics": ["15min settlement"],
                }
            )
        elif "compelling project description" in prompt:
            content = json.dumps({"description": "A fast ledger.", "highlights": ["300 stars"]})
        else:
            content = "Backend engineer who ships reliable payment systems."
        return GenerationResponse(
            content=content,
            model=model,
            provider="anthropic",
            usage=TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        )

    return _answer


class TestProviderSelection:
    def test_preferred_provider_used(self):
        orchestrator = make_orchestrator(
            openai=make_provider("openai"), anthropic=make_provider("anthropic")
        )
        assert orchestrator.select_provider("openai").name == "openai"

    def test_fallback_order_when_preferred_missing(self):
        orchestrator = make_orchestrator(
            openai=make_provider("openai"), google=make_provider("google")
        )
        # anthropic -> google -> openai
        assert orchestrator.select_provider("anthropic").name == "google"

    def test_no_preference_uses_fallback_order(self):
        orchestrator = make_orchestrator(
            openai=make_provider("openai"), anthropic=make_provider("anthropic")
        )
        assert orchestrator.select_provider().name == "anthropic"

    def test_zero_providers(self):
        orchestrator = make_orchestrator()
        with pytest.raises(NoProviderAvailableError):
            orchestrator.select_provider("openai")

    def test_aliases(self):
        assert resolve_provider_name("claude") is ProviderName.ANTHROPIC
        assert resolve_provider_name("GPT4") is ProviderName.OPENAI
        assert resolve_provider_name("gemini") is ProviderName.GOOGLE
        assert resolve_provider_name("llama") is None

    def test_unknown_preference_logs_and_falls_back(self, caplog):
        orchestrator = make_orchestrator(google=make_provider("google"))
        with caplog.at_level(logging.WARNING):
            adapter = orchestrator.select_provider("llama")
        assert adapter.name == "google"
        assert "Unknown preferred provider" in caplog.text

    def test_providers_mapping_is_read_only(self):
        orchestrator = make_orchestrator(openai=make_provider("openai"))
        with pytest.raises(TypeError):
            orchestrator.providers[ProviderName.GOOGLE] = make_provider("google")


class TestFromCredentials:
    def test_only_present_keys_get_adapters(self):
        creds = CredentialSet(anthropic="sk-ant")
        with patch("portfolio_ai.providers.anthropic_provider.anthropic.AsyncAnthropic"):
            orchestrator = AIOrchestrator.from_credentials(creds)
        assert list(orchestrator.providers) == [ProviderName.ANTHROPIC]
        assert orchestrator.has_provider("claude")
        assert not orchestrator.has_provider("openai")

    def test_config_models_and_limits_applied(self):
        creds = CredentialSet(openai="sk-openai")
        config = AppConfig(llm=LLMConfig(openai_model="gpt-4o", timeout=12, max_attempts=5))
        with patch("portfolio_ai.providers.openai_provider.openai.AsyncOpenAI"):
            orchestrator = AIOrchestrator.from_credentials(creds, config)
        adapter = orchestrator.providers[ProviderName.OPENAI]
        assert adapter.model == "gpt-4o"
        assert adapter.timeout == 12
        assert orchestrator.max_attempts == 5

    def test_empty_credentials_build_empty_orchestrator(self):
        orchestrator = AIOrchestrator.from_credentials(CredentialSet())
        assert dict(orchestrator.providers) == {}

    async def test_only_secondary_configured_serves_openai_preference(self):
        """With only the Anthropic key set, a request preferring OpenAI is served by Claude."""
        message = MagicMock()
        message.content = [MagicMock(type="text", text='{"rewritten": "Better."}')]
        message.usage.input_tokens = 20
        message.usage.output_tokens = 8
        with patch("portfolio_ai.providers.anthropic_provider.anthropic.AsyncAnthropic") as mock_cls:
            mock_cls.return_value.messages.create = AsyncMock(return_value=message)
            orchestrator = AIOrchestrator.from_credentials(CredentialSet(anthropic="sk-ant"))
            response = await orchestrator.generate_content("prompt", "system", "openai")

        assert response.model == "claude-3-haiku-20240307"
        assert response.provider == "anthropic"
        mock_cls.return_value.messages.create.assert_awaited_once()


class TestGenerateContent:
    async def test_routes_to_preferred(self):
        openai_adapter = make_provider("openai", '{"a": 1}')
        anthropic_adapter = make_provider("anthropic")
        orchestrator = make_orchestrator(openai=openai_adapter, anthropic=anthropic_adapter)

        response = await orchestrator.generate_content("prompt", "system", "openai")

        assert response.content == '{"a": 1}'
        openai_adapter.generate_text.assert_awaited_once_with("prompt", "system")
        anthropic_adapter.generate_text.assert_not_called()

    async def test_zero_providers_makes_no_call(self):
        orchestrator = make_orchestrator()
        with pytest.raises(NoProviderAvailableError):
            await orchestrator.generate_content("prompt")

    async def test_transient_errors_retried(self):
        adapter = make_provider("openai")
        ok = GenerationResponse(content="{}", model="gpt-4o-mini", provider="openai")
        adapter.generate_text.side_effect = [
            ProviderError("openai", "HTTP 429: slow down", transient=True),
            ProviderError("openai", "timed out after 60s", transient=True),
            ok,
        ]
        orchestrator = make_orchestrator(openai=adapter)

        response = await orchestrator.generate_content("prompt")

        assert response is ok
        assert adapter.generate_text.await_count == 3

    async def test_retries_stop_at_max_attempts(self):
        adapter = make_provider("openai")
        adapter.generate_text.side_effect = ProviderError("openai", "HTTP 503: down", transient=True)
        orchestrator = AIOrchestrator({"openai": adapter}, max_attempts=2, retry_wait_min=0, retry_wait_max=0)

        with pytest.raises(ProviderError, match="503"):
            await orchestrator.generate_content("prompt")
        assert adapter.generate_text.await_count == 2

    async def test_non_transient_error_not_retried(self):
        adapter = make_provider("openai")
        adapter.generate_text.side_effect = ProviderError("openai", "HTTP 401: bad key")
        orchestrator = make_orchestrator(openai=adapter)

        with pytest.raises(ProviderError, match="401"):
            await orchestrator.generate_content("prompt")
        assert adapter.generate_text.await_count == 1

    async def test_failure_does_not_switch_provider(self):
        openai_adapter = make_provider("openai")
        openai_adapter.generate_text.side_effect = ProviderError("openai", "HTTP 400: bad")
        anthropic_adapter = make_provider("anthropic")
        orchestrator = make_orchestrator(openai=openai_adapter, anthropic=anthropic_adapter)

        with pytest.raises(ProviderError):
            await orchestrator.generate_content("prompt", preferred_provider="openai")
        anthropic_adapter.generate_text.assert_not_called()


class TestParseResume:
    async def test_parses_profile(self, sample_resume_text, extraction_json):
        adapter = make_provider("openai", extraction_json)
        orchestrator = make_orchestrator(openai=adapter)

        profile = await orchestrator.parse_resume(sample_resume_text)

        assert profile.personal.name == "Jane Doe"
        assert len(profile.experience) == 2
        prompt, system = adapter.generate_text.call_args.args
        assert sample_resume_text in prompt
        assert "resume parser" in system

    async def test_fenced_and_bare_responses_equal(self, sample_resume_text, extraction_json):
        bare = make_orchestrator(openai=make_provider("openai", extraction_json))
        fenced = make_orchestrator(
            openai=make_provider("openai", f"```json\n{extraction_json}\n```")
        )
        assert await bare.parse_resume(sample_resume_text) == await fenced.parse_resume(sample_resume_text)

    async def test_requires_openai(self, sample_resume_text):
        anthropic_adapter = make_provider("anthropic")
        orchestrator = make_orchestrator(anthropic=anthropic_adapter)

        with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
            await orchestrator.parse_resume(sample_resume_text)
        anthropic_adapter.generate_text.assert_not_called()

    async def test_empty_text(self):
        adapter = make_provider("openai")
        orchestrator = make_orchestrator(openai=adapter)
        with pytest.raises(ValueError, match="empty"):
            await orchestrator.parse_resume("   \n")
        adapter.generate_text.assert_not_called()

    async def test_not_json(self, sample_resume_text):
        orchestrator = make_orchestrator(openai=make_provider("openai", "I could not read that resume."))
        with pytest.raises(MalformedResponseError) as exc_info:
            await orchestrator.parse_resume(sample_resume_text)
        assert exc_info.value.raw == "I could not read that resume."

    async def test_missing_required_keys(self, sample_resume_text):
        content = json.dumps({"personal": {"name": "Jane"}, "experience": []})
        orchestrator = make_orchestrator(openai=make_provider("openai", content))
        with pytest.raises(MalformedResponseError, match="education, skills"):
            await orchestrator.parse_resume(sample_resume_text)

    async def test_wrong_shape(self, sample_resume_text):
        content = json.dumps(
            {"personal": {}, "experience": [], "education": [], "skills": [{"category": "soft"}]}
        )
        orchestrator = make_orchestrator(openai=make_provider("openai", content))
        with pytest.raises(MalformedResponseError, match="profile shape"):
            await orchestrator.parse_resume(sample_resume_text)

    async def test_null_lists_normalized(self, sample_resume_text):
        content = json.dumps(
            {"personal": {"name": "Jane"}, "experience": None, "education": [], "skills": [], "awards": None}
        )
        orchestrator = make_orchestrator(openai=make_provider("openai", content))
        profile = await orchestrator.parse_resume(sample_resume_text)
        assert profile.experience == []
        assert profile.awards == []


class TestEnhanceProfile:
    async def test_default_enhances_summary_only(self, sample_profile):
        adapter = make_provider("anthropic")
        adapter.generate_text.side_effect = _enhancement_router()
        orchestrator = make_orchestrator(anthropic=adapter)
        before = sample_profile.model_copy(deep=True)

        enhanced = await orchestrator.enhance_profile(sample_profile)

        assert adapter.generate_text.await_count == 1
        summary = enhanced.enhanced.summary
        assert summary.original == before.summary
        assert summary.recommended == "Backend engineer who ships reliable payment systems."
        assert summary.versions == {"anthropic": summary.recommended}
        assert enhanced.confidence.summary == pytest.approx(0.8)
        assert enhanced.confidence.experience == 1.0
        assert enhanced.confidence.overall == pytest.approx(0.95)
        assert enhanced.metadata["calls"] == 1
        assert enhanced.metadata["model"] == "claude-3-haiku-20240307"
        # Pass-through entries are unchanged
        first = enhanced.enhanced.experience[0]
        assert first.entry == before.experience[0]
        assert first.ai_enhanced.description == before.experience[0].description
        assert first.enhanced_by is None

    async def test_original_preserved(self, sample_profile):
        adapter = make_provider("anthropic")
        adapter.generate_text.side_effect = _enhancement_router()
        orchestrator = make_orchestrator(anthropic=adapter)
        before = sample_profile.model_copy(deep=True)

        enhanced = await orchestrator.enhance_profile(
            sample_profile, ["summary", "experience", "projects"]
        )

        assert enhanced.original == before
        assert sample_profile == before
        assert enhanced.original is not sample_profile

    async def test_experience_and_projects_enhanced(self, sample_profile):
        adapter = make_provider("anthropic")
        adapter.generate_text.side_effect = _enhancement_router()
        orchestrator = make_orchestrator(anthropic=adapter)

        enhanced = await orchestrator.enhance_profile(
            sample_profile, ["summary", "experience", "projects"]
        )

        # summary + 2 experience entries + 1 project
        assert adapter.generate_text.await_count == 4
        first = enhanced.enhanced.experience[0]
        assert first.ai_enhanced.description == "Led the settlement platform."
        assert first.ai_enhanced.impact_metrics == ("15min settlement",)
        assert first.enhanced_by == "claude-3-haiku-20240307"
        assert enhanced.enhanced.projects[0].ai_enhanced.description == "A fast ledger."
        assert enhanced.confidence.overall == pytest.approx((0.8 + 0.8 + 1.0 + 0.8) / 4)
        assert enhanced.metadata["usage"]["total_tokens"] == 60

    async def test_skills_categorized(self, sample_profile):
        adapter = make_provider("anthropic")
        adapter.generate_text.side_effect = _enhancement_router()
        enhanced = await make_orchestrator(anthropic=adapter).enhance_profile(sample_profile)

        skills = enhanced.enhanced.skills
        assert [s.name for s in skills.technical] == ["Python"]
        assert [s.name for s in skills.soft] == ["Mentoring"]
        assert [s.name for s in skills.tools] == ["Docker"]
        assert [s.name for s in skills.frameworks] == ["Django"]
        assert [lang.name for lang in skills.languages] == ["English", "German"]

    async def test_no_sections_makes_no_calls(self, sample_profile):
        adapter = make_provider("anthropic")
        enhanced = await make_orchestrator(anthropic=adapter).enhance_profile(sample_profile, [])

        adapter.generate_text.assert_not_called()
        assert enhanced.enhanced.summary.recommended == sample_profile.summary
        assert enhanced.confidence.overall == 1.0

    async def test_requires_anthropic(self, sample_profile):
        openai_adapter = make_provider("openai")
        orchestrator = make_orchestrator(openai=openai_adapter)
        with pytest.raises(ConfigurationError, match="ANTHROPIC_API_KEY"):
            await orchestrator.enhance_profile(sample_profile)
        openai_adapter.generate_text.assert_not_called()

    async def test_unknown_section(self, sample_profile):
        orchestrator = make_orchestrator(anthropic=make_provider("anthropic"))
        with pytest.raises(ValueError, match="hobbies"):
            await orchestrator.enhance_profile(sample_profile, ["hobbies"])

    async def test_empty_summary_response(self, sample_profile):
        orchestrator = make_orchestrator(anthropic=make_provider("anthropic", "  "))
        with pytest.raises(MalformedResponseError):
            await orchestrator.enhance_profile(sample_profile)

    async def test_experience_response_missing_description(self, sample_profile):
        adapter = make_provider("anthropic", json.dumps({"highlights": ["x"]}))
        orchestrator = make_orchestrator(anthropic=adapter)
        with pytest.raises(MalformedResponseError, match="enhancedDescription"):
            await orchestrator.enhance_profile(sample_profile, ["experience"])

    async def test_failure_cancels_sibling_calls(self, sample_profile):
        """When one entry fails, the other in-flight calls are cancelled, not left running."""
        completed = []
        answer = _enhancement_router()

        async def _generate(prompt, system_instruction=None):
            if "Company: Widget GmbH" in prompt:
                raise ProviderError("anthropic", "HTTP 400: bad request")
            await asyncio.sleep(0.2)
            completed.append(prompt)
            return await answer(prompt, system_instruction)

        adapter = make_provider("anthropic")
        adapter.generate_text.side_effect = _generate
        orchestrator = make_orchestrator(anthropic=adapter)

        with pytest.raises(ProviderError, match="400"):
            await orchestrator.enhance_profile(
                sample_profile, ["summary", "experience", "projects"]
            )
        await asyncio.sleep(0.3)

        assert completed == []

    async def test_uncategorized_skills_kept_apart(self, sample_profile):
        profile = sample_profile.model_copy(
            update={"skills": [*sample_profile.skills, Skill(name="Grit")]}
        )
        adapter = make_provider("anthropic", "A sharper summary.")

        enhanced = await make_orchestrator(anthropic=adapter).enhance_profile(profile)

        assert [s.name for s in enhanced.enhanced.skills.technical] == ["Python"]
        assert [s.name for s in enhanced.enhanced.skills.uncategorized] == ["Grit"]

    async def test_later_changes_to_input_do_not_reach_original(self, sample_profile):
        adapter = make_provider("anthropic", "A sharper summary.")
        enhanced = await make_orchestrator(anthropic=adapter).enhance_profile(sample_profile)

        sample_profile.experience.append(Experience(company="Later Corp"))
        sample_profile.experience[0].highlights.append("added afterwards")

        assert len(enhanced.original.experience) == 2
        assert "added afterwards" not in enhanced.original.experience[0].highlights
        assert "added afterwards" not in enhanced.enhanced.experience[0].entry.highlights
