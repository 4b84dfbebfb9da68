"""Gemini adapter built on the google-genai SDK."""

from __future__ import annotations

import logging

import httpx
from google import genai
from google.genai import errors, types

from portfolio_ai.models.generation import GenerationResponse, TokenUsage
from portfolio_ai.providers.base import ModelProvider

logger = logging.getLogger(__name__)


class GoogleProvider(ModelProvider):
    name = "google"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        *,
        timeout: float = 60.0,
        max_tokens: int = 4096,
    ):
        super().__init__(api_key, model, timeout=timeout, max_tokens=max_tokens)
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000)),  # milliseconds
        )

    async def generate_text(
        self, prompt: str, system_instruction: str | None = None
    ) -> GenerationResponse:
        config = types.GenerateContentConfig(
            system_instruction=system_instruction or None,
            max_output_tokens=self.max_tokens,
        )

        logger.debug("Gemini call: model=%s", self.model)
        try:
            response = await self._bounded(
                self.client.aio.models.generate_content(
                    model=self.model,
                    contents=prompt,
                    config=config,
                )
            )
        except errors.APIError as exc:
            raise self._fail(exc.message or str(exc), status=exc.code) from exc
        except httpx.TransportError as exc:
            # the SDK does not wrap connection failures or read timeouts
            raise self._fail(str(exc) or type(exc).__name__, transient=True) from exc

        if response is None:
            raise self._fail("empty response")

        # Usage reporting differs from the other SDKs; keep it only when present.
        usage = None
        meta = getattr(response, "usage_metadata", None)
        if meta is not None and meta.prompt_token_count is not None:
            prompt_tokens = meta.prompt_token_count or 0
            completion_tokens = meta.candidates_token_count or 0
            usage = TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=meta.total_token_count or prompt_tokens + completion_tokens,
            )

        return GenerationResponse(
            content=response.text or "", usage=usage, model=self.model, provider=self.name
        )
