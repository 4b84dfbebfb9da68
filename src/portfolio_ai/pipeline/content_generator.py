"""Content generation façade used by UI-triggered actions."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel

from portfolio_ai.config import AppConfig, CredentialSet, ProviderName
from portfolio_ai.errors import ConfigurationError
from portfolio_ai.models.enhanced import EnhancedProfile
from portfolio_ai.models.generation import (
    ContentGenerationRequest,
    ContentType,
    GenerationResult,
)
from portfolio_ai.models.profile import StructuredResumeProfile
from portfolio_ai.pipeline.orchestrator import AIOrchestrator
from portfolio_ai.prompts.portfolio import (
    JSON_ONLY_SUFFIX,
    build_prompt,
    resolve_content_type,
    system_instruction_for,
)
from portfolio_ai.utils.json_parser import extract_json

logger = logging.getLogger(__name__)

MISSING_KEYS_MESSAGE = (
    "No AI API keys configured. Set OPENAI_API_KEY, ANTHROPIC_API_KEY or GOOGLE_AI_API_KEY."
)


class ContentGenerator:
    """Turns a content-generation request into a prompt, a model call and parsed JSON.

    The credential set is checked before any prompt is built, so a missing
    configuration never costs a network call.
    """

    def __init__(
        self,
        credentials: CredentialSet,
        config: AppConfig | None = None,
        *,
        orchestrator: AIOrchestrator | None = None,
    ):
        self.credentials = credentials
        self.config = config or AppConfig()
        self._orchestrator = orchestrator

    @property
    def orchestrator(self) -> AIOrchestrator:
        if self._orchestrator is None:
            self._orchestrator = AIOrchestrator.from_credentials(self.credentials, self.config)
        return self._orchestrator

    def _check_credentials(self) -> None:
        if self.credentials.is_empty:
            raise ConfigurationError(MISSING_KEYS_MESSAGE)

    def preferred_provider(self) -> ProviderName:
        """OpenAI when configured, then Anthropic, then Google."""
        available = self.credentials.available()
        for name in (ProviderName.OPENAI, ProviderName.ANTHROPIC, ProviderName.GOOGLE):
            if name in available:
                return name
        raise ConfigurationError(MISSING_KEYS_MESSAGE)

    async def generate(self, request: ContentGenerationRequest) -> GenerationResult:
        self._check_credentials()
        content_type = resolve_content_type(request.content_type)
        prompt = build_prompt(content_type, request.input)
        system = system_instruction_for(content_type) + JSON_ONLY_SUFFIX

        response = await self.orchestrator.generate_content(
            prompt, system, self.preferred_provider()
        )
        data = extract_json(response.content)
        logger.info("Generated %s content with %s", content_type.value, response.model)
        return GenerationResult(
            content_type=content_type,
            data=data,
            model=response.model,
            provider=response.provider,
            usage=response.usage,
        )

    async def submit(
        self,
        content_type: ContentType | str,
        data: BaseModel | Mapping[str, Any],
    ) -> Any:
        """Generate content and return the parsed JSON body."""
        self._check_credentials()
        request = ContentGenerationRequest.model_construct(
            content_type=resolve_content_type(content_type), input=data
        )
        result = await self.generate(request)
        return result.data

    async def parse_resume(self, text: str) -> StructuredResumeProfile:
        self._check_credentials()
        return await self.orchestrator.parse_resume(text)

    async def enhance_profile(
        self,
        profile: StructuredResumeProfile,
        sections: Iterable[str] | None = None,
    ) -> EnhancedProfile:
        self._check_credentials()
        return await self.orchestrator.enhance_profile(profile, sections)
