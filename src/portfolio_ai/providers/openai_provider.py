"""GPT adapter built on the async OpenAI SDK."""

from __future__ import annotations

import logging

import openai

from portfolio_ai.models.generation import GenerationResponse, TokenUsage
from portfolio_ai.providers.base import ModelProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(ModelProvider):
    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        *,
        timeout: float = 60.0,
        max_tokens: int = 4096,
    ):
        super().__init__(api_key, model, timeout=timeout, max_tokens=max_tokens)
        self.client = openai.AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    async def generate_text(
        self, prompt: str, system_instruction: str | None = None
    ) -> GenerationResponse:
        messages = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": prompt})

        logger.debug("OpenAI call: model=%s", self.model)
        try:
            response = await self._bounded(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    max_tokens=self.max_tokens,
                )
            )
        except openai.APIStatusError as exc:
            raise self._fail(exc.message, status=exc.status_code) from exc
        except openai.APIConnectionError as exc:
            raise self._fail(str(exc), transient=True) from exc
        except openai.APIError as exc:
            raise self._fail(str(exc)) from exc

        if not response.choices:
            raise self._fail("response contained no choices")
        content = response.choices[0].message.content or ""

        usage = None
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
            )

        return GenerationResponse(content=content, usage=usage, model=self.model, provider=self.name)
