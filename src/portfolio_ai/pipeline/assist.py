"""Request-lifecycle wrapper for interactive content generation."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel

from portfolio_ai.models.generation import ContentType
from portfolio_ai.pipeline.content_generator import ContentGenerator

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to generate content"


class AssistState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    SUCCESS = "success"
    ERROR = "error"


class AIAssist:
    """Tracks idle -> generating -> success/error for one generation at a time.

    Starting a request while another is pending is allowed: state resets to
    generating and the in-flight call is not cancelled. Whichever response
    lands last overwrites the state. When that is an older request landing
    after a newer one started, the overwrite is counted in
    ``stale_overwrites`` and logged.
    """

    def __init__(
        self,
        generator: ContentGenerator,
        *,
        on_success: Callable[[Any], None] | None = None,
        on_error: Callable[[str], None] | None = None,
    ):
        self.generator = generator
        self.on_success = on_success
        self.on_error = on_error
        self.state = AssistState.IDLE
        self.result: Any = None
        self.error: str | None = None
        self.stale_overwrites = 0
        self._latest_request = 0

    @property
    def generating(self) -> bool:
        return self.state is AssistState.GENERATING

    async def generate(
        self,
        content_type: ContentType | str,
        data: BaseModel | Mapping[str, Any],
    ) -> Any:
        self._latest_request += 1
        request_id = self._latest_request
        self.state = AssistState.GENERATING
        self.error = None
        self.result = None

        try:
            content = await self.generator.submit(content_type, data)
        except Exception as exc:
            self._flag_if_stale(request_id)
            self.error = str(exc) or DEFAULT_ERROR_MESSAGE
            self.state = AssistState.ERROR
            logger.warning("Content generation failed: %s", self.error)
            if self.on_error:
                self.on_error(self.error)
            raise

        self._flag_if_stale(request_id)
        self.result = content
        self.state = AssistState.SUCCESS
        if self.on_success:
            self.on_success(content)
        return content

    def reset(self) -> None:
        """Clear result and error without starting a new call."""
        self.result = None
        self.error = None
        if self.state is not AssistState.GENERATING:
            self.state = AssistState.IDLE

    def _flag_if_stale(self, request_id: int) -> None:
        if request_id != self._latest_request:
            self.stale_overwrites += 1
            logger.warning(
                "Response for request %d landed after request %d started; overwriting state",
                request_id, self._latest_request,
            )
