"""Error types raised by the orchestration core."""

from __future__ import annotations


class PortfolioAIError(Exception):
    """Base class for all errors raised by portfolio_ai."""


class ConfigurationError(PortfolioAIError):
    """A required credential or provider is missing. Not retryable."""


class NoProviderAvailableError(ConfigurationError):
    """No configured provider could serve a generation request."""

    def __init__(self, message: str = "No AI provider available. Configure at least one API key."):
        super().__init__(message)


class ProviderError(PortfolioAIError):
    """A model backend call failed (status error, bad transport, timeout)."""

    def __init__(self, provider: str, message: str, *, transient: bool = False):
        super().__init__(f"{provider} request failed: {message}")
        self.provider = provider
        self.message = message
        self.transient = transient


class MalformedResponseError(PortfolioAIError):
    """The provider answered but the body was not the expected JSON shape."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class UnsupportedContentTypeError(PortfolioAIError, ValueError):
    """No prompt builder exists for the requested content type."""

    def __init__(self, content_type: object):
        super().__init__(f"Unsupported content type: {content_type!r}")
        self.content_type = content_type
