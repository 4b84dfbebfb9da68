"""Common interface for model provider adapters."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import TypeVar

from portfolio_ai.errors import ProviderError
from portfolio_ai.models.generation import GenerationResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_STATUS_CODES = frozenset({408, 409, 429, 500, 502, 503, 504, 529})


class ModelProvider(ABC):
    """One backend model family behind the ``generate_text`` capability.

    An adapter holds one API key and one model id and keeps no other state
    between calls. Each call performs exactly one outbound request, bounded by
    ``timeout`` seconds, and never retries.
    """

    name: str = ""

    def __init__(self, api_key: str, model: str, *, timeout: float = 60.0, max_tokens: int = 4096):
        if not api_key:
            raise ValueError(f"{self.name} adapter requires an API key")
        self.model = model
        self.timeout = timeout
        self.max_tokens = max_tokens

    @abstractmethod
    async def generate_text(
        self, prompt: str, system_instruction: str | None = None
    ) -> GenerationResponse:
        """Send one prompt and return the normalized response."""
        raise NotImplementedError

    async def _bounded(self, call: Awaitable[T]) -> T:
        """Await a backend call under the adapter timeout."""
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise ProviderError(
                self.name, f"timed out after {self.timeout:g}s", transient=True
            ) from exc

    def _fail(self, message: str, *, transient: bool = False, status: int | None = None) -> ProviderError:
        if status is not None:
            transient = transient or status in TRANSIENT_STATUS_CODES
            message = f"HTTP {status}: {message}"
        logger.error("%s call failed (model=%s): %s", self.name, self.model, message)
        return ProviderError(self.name, message, transient=transient)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"
