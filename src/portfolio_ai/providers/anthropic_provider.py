"""Claude adapter built on the async Anthropic SDK."""

from __future__ import annotations

import logging

import anthropic

from portfolio_ai.models.generation import GenerationResponse, TokenUsage
from portfolio_ai.providers.base import ModelProvider

logger = logging.getLogger(__name__)


class AnthropicProvider(ModelProvider):
    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-haiku-20240307",
        *,
        timeout: float = 60.0,
        max_tokens: int = 4096,
    ):
        super().__init__(api_key, model, timeout=timeout, max_tokens=max_tokens)
        # SDK-level retries off: one outbound call per invocation.
        self.client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)

    async def generate_text(
        self, prompt: str, system_instruction: str | None = None
    ) -> GenerationResponse:
        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_instruction:
            kwargs["system"] = system_instruction

        logger.debug("Anthropic call: model=%s", self.model)
        try:
            message = await self._bounded(self.client.messages.create(**kwargs))
        except anthropic.APIStatusError as exc:
            raise self._fail(exc.message, status=exc.status_code) from exc
        except anthropic.APIConnectionError as exc:
            # APITimeoutError is a subclass
            raise self._fail(str(exc), transient=True) from exc
        except anthropic.APIError as exc:
            raise self._fail(str(exc)) from exc

        if not message.content:
            raise self._fail("response contained no content blocks")
        block = message.content[0]
        content = block.text if getattr(block, "type", "text") == "text" else ""

        usage = None
        if message.usage is not None:
            input_tokens = message.usage.input_tokens
            output_tokens = message.usage.output_tokens
            usage = TokenUsage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            )
            logger.debug("Anthropic response: %d input, %d output tokens", input_tokens, output_tokens)

        return GenerationResponse(content=content or "", usage=usage, model=self.model, provider=self.name)
