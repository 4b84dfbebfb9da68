"""AI orchestrator - owns the provider adapters and picks one per call."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from portfolio_ai.config import (
    ENHANCEABLE_SECTIONS,
    ENV_KEYS,
    FALLBACK_ORDER,
    PRIMARY_PROVIDER,
    SECONDARY_PROVIDER,
    AppConfig,
    CredentialSet,
    ProviderName,
)
from portfolio_ai.errors import (
    ConfigurationError,
    MalformedResponseError,
    NoProviderAvailableError,
    ProviderError,
)
from portfolio_ai.models.enhanced import (
    CategorizedSkills,
    ConfidenceScores,
    EnhancedExperience,
    EnhancedProfile,
    EnhancedProject,
    EnhancedSections,
    ExperienceEnhancement,
    ProjectEnhancement,
    SummaryVersions,
)
from portfolio_ai.models.generation import (
    ContentType,
    ExperienceInput,
    GenerationResponse,
    ProjectInput,
    TokenUsage,
)
from portfolio_ai.models.profile import Experience, Project, StructuredResumeProfile
from portfolio_ai.prompts.extraction import (
    EXTRACTION_SYSTEM_PROMPT,
    REQUIRED_PROFILE_KEYS,
    SUMMARY_ENHANCEMENT_SYSTEM_PROMPT,
    extraction_prompt,
    summary_enhancement_prompt,
)
from portfolio_ai.prompts.portfolio import (
    JSON_ONLY_SUFFIX,
    SYSTEM_PROMPTS,
    experience_prompt,
    project_prompt,
)
from portfolio_ai.providers.anthropic_provider import AnthropicProvider
from portfolio_ai.providers.base import ModelProvider
from portfolio_ai.providers.google_provider import GoogleProvider
from portfolio_ai.providers.openai_provider import OpenAIProvider
from portfolio_ai.utils.json_parser import extract_json_object, strip_code_fences

logger = logging.getLogger(__name__)

ADAPTERS: dict[ProviderName, type[ModelProvider]] = {
    ProviderName.OPENAI: OpenAIProvider,
    ProviderName.ANTHROPIC: AnthropicProvider,
    ProviderName.GOOGLE: GoogleProvider,
}

# Names the web client used for model preferences.
PROVIDER_ALIASES: dict[str, ProviderName] = {
    "gpt4": ProviderName.OPENAI,
    "claude": ProviderName.ANTHROPIC,
    "gemini": ProviderName.GOOGLE,
}

PASS_THROUGH_CONFIDENCE = 1.0


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, ProviderError) and exc.transient


def resolve_provider_name(name: ProviderName | str | None) -> ProviderName | None:
    """Map a provider name or alias to a ProviderName; unknown names give None."""
    if name is None or isinstance(name, ProviderName):
        return name
    key = str(name).strip().lower()
    if key in PROVIDER_ALIASES:
        return PROVIDER_ALIASES[key]
    try:
        return ProviderName(key)
    except ValueError:
        return None


def _sum_usage(responses: Iterable[GenerationResponse]) -> TokenUsage | None:
    reported = [r.usage for r in responses if r.usage is not None]
    if not reported:
        return None
    return TokenUsage(
        prompt_tokens=sum(u.prompt_tokens for u in reported),
        completion_tokens=sum(u.completion_tokens for u in reported),
        total_tokens=sum(u.total_tokens for u in reported),
    )


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else PASS_THROUGH_CONFIDENCE


class AIOrchestrator:
    """Routes generation work to whichever model providers are configured.

    The provider map is built once and never mutated, so one instance can
    serve concurrent calls. Each call moves through
    selecting-provider -> calling-adapter -> success | provider-error | parse-error.
    """

    def __init__(
        self,
        providers: Mapping[ProviderName | str, ModelProvider | None] | None = None,
        *,
        max_attempts: int = 3,
        retry_wait_min: float = 1.0,
        retry_wait_max: float = 10.0,
        enhance_sections: Iterable[str] = ("summary",),
        ai_confidence: float = 0.8,
    ):
        resolved = {
            ProviderName(name): adapter
            for name, adapter in (providers or {}).items()
            if adapter is not None
        }
        self._providers: Mapping[ProviderName, ModelProvider] = MappingProxyType(resolved)
        self.max_attempts = max_attempts
        self.retry_wait_min = retry_wait_min
        self.retry_wait_max = retry_wait_max
        self.enhance_sections = tuple(enhance_sections)
        self.ai_confidence = ai_confidence
        logger.debug(
            "Orchestrator ready with providers: %s",
            ", ".join(p.value for p in self._providers) or "none",
        )

    @classmethod
    def from_credentials(
        cls, credentials: CredentialSet, config: AppConfig | None = None
    ) -> AIOrchestrator:
        """Build one adapter per present credential. Missing keys are not an error here."""
        config = config or AppConfig()
        providers: dict[ProviderName, ModelProvider] = {}
        for name, adapter_cls in ADAPTERS.items():
            key = credentials.get(name)
            if key is None:
                continue
            providers[name] = adapter_cls(
                key,
                config.llm.model_for(name),
                timeout=config.llm.timeout,
                max_tokens=config.llm.max_tokens,
            )
        return cls(
            providers,
            max_attempts=config.llm.max_attempts,
            enhance_sections=config.enhancement.sections,
            ai_confidence=config.enhancement.ai_confidence,
        )

    @property
    def providers(self) -> Mapping[ProviderName, ModelProvider]:
        return self._providers

    def has_provider(self, name: ProviderName | str) -> bool:
        return resolve_provider_name(name) in self._providers

    def _require(self, name: ProviderName, purpose: str) -> ModelProvider:
        adapter = self._providers.get(name)
        if adapter is None:
            env = " or ".join(ENV_KEYS[name])
            raise ConfigurationError(
                f"{purpose} requires the {name.value} provider. Set {env} to configure it."
            )
        return adapter

    def select_provider(self, preferred: ProviderName | str | None = None) -> ModelProvider:
        """Preferred provider if configured, else the first present in fallback order."""
        wanted = resolve_provider_name(preferred)
        if preferred is not None and wanted is None:
            logger.warning("Unknown preferred provider %r; using fallback order", preferred)
        if wanted is not None and wanted in self._providers:
            return self._providers[wanted]
        for name in FALLBACK_ORDER:
            if name in self._providers:
                if wanted is not None:
                    logger.info("Preferred provider %s not configured; falling back to %s", wanted.value, name.value)
                return self._providers[name]
        raise NoProviderAvailableError()

    async def _call(
        self, adapter: ModelProvider, prompt: str, system_instruction: str | None
    ) -> GenerationResponse:
        """Call an adapter, retrying transient provider errors with backoff."""
        logger.debug("Calling %s (model=%s)", adapter.name, adapter.model)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(min=self.retry_wait_min, max=self.retry_wait_max),
            retry=retry_if_exception(_is_transient),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await adapter.generate_text(prompt, system_instruction)
        return response

    async def parse_resume(self, text: str) -> StructuredResumeProfile:
        """Extract a structured profile from plain resume text."""
        if not text or not text.strip():
            raise ValueError("Resume text is empty")
        adapter = self._require(PRIMARY_PROVIDER, "Resume parsing")

        response = await self._call(adapter, extraction_prompt(text), EXTRACTION_SYSTEM_PROMPT)
        data = extract_json_object(response.content)

        missing = [key for key in REQUIRED_PROFILE_KEYS if key not in data]
        if missing:
            raise MalformedResponseError(
                f"Extraction response is missing required keys: {', '.join(missing)}",
                raw=response.content,
            )
        try:
            profile = StructuredResumeProfile.model_validate(data)
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Extraction response does not match the profile shape: {exc.error_count()} error(s)",
                raw=response.content,
            ) from exc

        logger.info(
            "Parsed resume: %d experience, %d education, %d skills",
            len(profile.experience), len(profile.education), len(profile.skills),
        )
        return profile

    async def enhance_profile(
        self,
        profile: StructuredResumeProfile,
        sections: Iterable[str] | None = None,
    ) -> EnhancedProfile:
        """Rewrite narrative sections of a profile with the secondary provider.

        By default only the summary is rewritten; experience, projects and
        skills pass through unchanged. Adding ``"experience"`` or
        ``"projects"`` to ``sections`` enhances each entry with its own call.
        """
        wanted = tuple(self.enhance_sections if sections is None else sections)
        unknown = [s for s in wanted if s not in ENHANCEABLE_SECTIONS]
        if unknown:
            raise ValueError(f"Cannot enhance unknown sections: {unknown}")
        adapter = self._require(SECONDARY_PROVIDER, "Profile enhancement")

        original = profile.model_copy(deep=True)
        responses: list[GenerationResponse] = []

        async def _summary() -> tuple[SummaryVersions, float]:
            current = original.summary
            if "summary" not in wanted:
                return SummaryVersions(original=current, recommended=current or ""), PASS_THROUGH_CONFIDENCE
            response = await self._call(
                adapter, summary_enhancement_prompt(original), SUMMARY_ENHANCEMENT_SYSTEM_PROMPT
            )
            responses.append(response)
            text = strip_code_fences(response.content)
            if not text:
                raise MalformedResponseError("Summary enhancement returned no text", raw=response.content)
            return (
                SummaryVersions(original=current, recommended=text, versions={adapter.name: text}),
                self.ai_confidence,
            )

        summary_task = _summary()
        experience_tasks = [
            self._enhance_experience(adapter, entry.model_copy(deep=True), "experience" in wanted, responses)
            for entry in original.experience
        ]
        project_tasks = [
            self._enhance_project(adapter, entry.model_copy(deep=True), "projects" in wanted, responses)
            for entry in original.projects
        ]
        tasks = [
            asyncio.ensure_future(coro)
            for coro in (summary_task, *experience_tasks, *project_tasks)
        ]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            # One failure fails the whole enhancement; stop the sibling calls.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        summary, summary_confidence = results[0]
        experience = tuple(results[1 : 1 + len(experience_tasks)])
        projects = tuple(results[1 + len(experience_tasks) :])

        skills = CategorizedSkills(
            technical=tuple(original.skills_in("technical")),
            soft=tuple(original.skills_in("soft")),
            languages=tuple(original.languages),
            tools=tuple(original.skills_in("tool")),
            frameworks=tuple(original.skills_in("framework")),
            uncategorized=tuple(original.skills_in(None)),
        )
        scores = {
            "summary": summary_confidence,
            "experience": _mean([e.confidence for e in experience]),
            "skills": PASS_THROUGH_CONFIDENCE,
            "projects": _mean([p.confidence for p in projects]),
        }
        usage = _sum_usage(responses)
        return EnhancedProfile(
            original=original,
            enhanced=EnhancedSections(
                summary=summary,
                experience=experience,
                skills=skills,
                projects=projects,
            ),
            confidence=ConfidenceScores(overall=_mean(list(scores.values())), **scores),
            metadata={
                "provider": adapter.name,
                "model": adapter.model,
                "sections": list(wanted),
                "calls": len(responses),
                "usage": usage.model_dump() if usage else None,
            },
        )

    async def _enhance_experience(
        self,
        adapter: ModelProvider,
        entry: Experience,
        enabled: bool,
        responses: list[GenerationResponse],
    ) -> EnhancedExperience:
        if not (enabled and entry.company and entry.position and entry.description):
            return EnhancedExperience(
                entry=entry,
                ai_enhanced=ExperienceEnhancement(
                    description=entry.description,
                    highlights=tuple(entry.highlights),
                ),
                confidence=PASS_THROUGH_CONFIDENCE,
            )
        prompt = experience_prompt(
            ExperienceInput(
                company=entry.company,
                position=entry.position,
                description=entry.description,
                technologies=entry.technologies or None,
            )
        )
        response = await self._call(
            adapter, prompt, SYSTEM_PROMPTS[ContentType.EXPERIENCE] + JSON_ONLY_SUFFIX
        )
        responses.append(response)
        data = extract_json_object(response.content)
        description = data.get("enhancedDescription")
        if not isinstance(description, str) or not description.strip():
            raise MalformedResponseError(
                "Experience enhancement is missing 'enhancedDescription'", raw=response.content
            )
        return EnhancedExperience(
            entry=entry,
            ai_enhanced=ExperienceEnhancement(
                description=description.strip(),
                highlights=tuple(str(h) for h in data.get("highlights") or ()),
                impact_metrics=tuple(str(m) for m in data.get("impactMetrics") or ()),
            ),
            confidence=self.ai_confidence,
            enhanced_by=adapter.model,
        )

    async def _enhance_project(
        self,
        adapter: ModelProvider,
        entry: Project,
        enabled: bool,
        responses: list[GenerationResponse],
    ) -> EnhancedProject:
        if not (enabled and entry.name and entry.description):
            return EnhancedProject(
                entry=entry,
                ai_enhanced=ProjectEnhancement(
                    description=entry.description,
                    highlights=tuple(entry.highlights),
                ),
                confidence=PASS_THROUGH_CONFIDENCE,
            )
        prompt = project_prompt(
            ProjectInput(
                name=entry.name,
                technologies=entry.technologies,
                basic_description=entry.description,
            )
        )
        response = await self._call(
            adapter, prompt, SYSTEM_PROMPTS[ContentType.PROJECT] + JSON_ONLY_SUFFIX
        )
        responses.append(response)
        data = extract_json_object(response.content)
        description = data.get("description")
        if not isinstance(description, str) or not description.strip():
            raise MalformedResponseError(
                "Project enhancement is missing 'description'", raw=response.content
            )
        return EnhancedProject(
            entry=entry,
            ai_enhanced=ProjectEnhancement(
                description=description.strip(),
                highlights=tuple(str(h) for h in data.get("highlights") or ()),
            ),
            confidence=self.ai_confidence,
            enhanced_by=adapter.model,
        )

    async def generate_content(
        self,
        prompt: str,
        system_instruction: str | None = None,
        preferred_provider: ProviderName | str | None = None,
    ) -> GenerationResponse:
        """Generate text with the preferred provider, falling back when it is absent.

        Callers that care which model answered should read ``response.model``.
        """
        adapter = self.select_provider(preferred_provider)
        return await self._call(adapter, prompt, system_instruction)
