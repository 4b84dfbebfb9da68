"""Application configuration loaded from config.yaml and the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import yaml


class ProviderName(str, Enum):
    """Model backends, in primary / secondary / tertiary order."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


PRIMARY_PROVIDER = ProviderName.OPENAI
SECONDARY_PROVIDER = ProviderName.ANTHROPIC
TERTIARY_PROVIDER = ProviderName.GOOGLE

# Order used when the preferred provider is not configured.
FALLBACK_ORDER: tuple[ProviderName, ...] = (
    SECONDARY_PROVIDER,
    TERTIARY_PROVIDER,
    PRIMARY_PROVIDER,
)

ENV_KEYS: dict[ProviderName, tuple[str, ...]] = {
    ProviderName.OPENAI: ("OPENAI_API_KEY",),
    ProviderName.ANTHROPIC: ("ANTHROPIC_API_KEY",),
    ProviderName.GOOGLE: ("GOOGLE_AI_API_KEY", "GOOGLE_API_KEY"),
}

ENHANCEABLE_SECTIONS = ("summary", "experience", "projects")


@dataclass(frozen=True)
class CredentialSet:
    """Named API keys. An empty or missing key means the provider is absent."""

    openai: str | None = field(default=None, repr=False)
    anthropic: str | None = field(default=None, repr=False)
    google: str | None = field(default=None, repr=False)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> CredentialSet:
        """Read keys from the process environment (or a given mapping)."""
        env = os.environ if environ is None else environ
        values: dict[str, str | None] = {}
        for provider, names in ENV_KEYS.items():
            values[provider.value] = next(
                (env[name] for name in names if env.get(name, "").strip()), None
            )
        return cls(**values)

    def get(self, provider: ProviderName | str) -> str | None:
        key = getattr(self, ProviderName(provider).value)
        if key is None or not key.strip():
            return None
        return key.strip()

    def available(self) -> list[ProviderName]:
        """Providers whose key is present, in declaration order."""
        return [p for p in ProviderName if self.get(p) is not None]

    @property
    def is_empty(self) -> bool:
        return not self.available()

    def __repr__(self) -> str:
        names = ", ".join(p.value for p in self.available()) or "none"
        return f"CredentialSet(configured={names})"


@dataclass(frozen=True)
class LLMConfig:
    openai_model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-3-haiku-20240307"
    google_model: str = "gemini-1.5-flash"
    max_attempts: int = 3
    timeout: float = 60.0
    max_tokens: int = 4096

    def __post_init__(self) -> None:
        if not 1 <= self.max_attempts <= 10:
            raise ValueError(f"max_attempts must be between 1 and 10, got {self.max_attempts}")
        if not 1 <= self.timeout <= 600:
            raise ValueError(f"timeout must be between 1 and 600 seconds, got {self.timeout}")
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")

    def model_for(self, provider: ProviderName | str) -> str:
        return getattr(self, f"{ProviderName(provider).value}_model")


@dataclass(frozen=True)
class EnhancementConfig:
    sections: tuple[str, ...] = ("summary",)
    ai_confidence: float = 0.8

    def __post_init__(self) -> None:
        # YAML gives lists
        object.__setattr__(self, "sections", tuple(self.sections))
        unknown = [s for s in self.sections if s not in ENHANCEABLE_SECTIONS]
        if unknown:
            raise ValueError(f"sections contains unknown entries: {unknown}")
        if not 0.0 <= self.ai_confidence <= 1.0:
            raise ValueError(f"ai_confidence must be between 0 and 1, got {self.ai_confidence}")


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    enhancement: EnhancementConfig = field(default_factory=EnhancementConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        enhancement=EnhancementConfig(**raw.get("enhancement", {})),
    )
