"""Models for provider responses and content-generation requests."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class GenerationResponse(BaseModel):
    """Uniform answer from any provider adapter."""

    content: str = ""
    usage: TokenUsage | None = None  # not every provider reports it
    model: str
    provider: str | None = None


class ContentType(str, Enum):
    SUMMARY = "summary"
    EXPERIENCE = "experience"
    PROJECT = "project"
    SKILLS = "skills"
    REWRITE = "rewrite"
    CAPTION = "caption"


class _TaskInput(BaseModel):
    # Accepts both ``years_experience`` and the camelCase ``yearsExperience``.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SummaryInput(_TaskInput):
    name: str
    title: str
    skills: list[str] = []
    years_experience: int | None = None
    industry: str | None = None


class ExperienceInput(_TaskInput):
    company: str
    position: str
    description: str
    technologies: list[str] | None = None


class ProjectInput(_TaskInput):
    name: str
    technologies: list[str] = []
    basic_description: str
    type: Literal["personal", "professional", "open-source"] | None = None


class ExperienceSummary(_TaskInput):
    position: str
    description: str


class SkillsInput(_TaskInput):
    experiences: list[ExperienceSummary] = []
    existing_skills: list[str] = []


class RewriteInput(_TaskInput):
    content: str
    context: str
    tone: Literal["professional", "conversational", "creative"] | None = None


class CaptionInput(_TaskInput):
    project_name: str
    category: Literal["screenshot", "certificate", "award", "whitepaper", "process"]
    context: str | None = None


INPUT_MODELS: dict[ContentType, type[_TaskInput]] = {
    ContentType.SUMMARY: SummaryInput,
    ContentType.EXPERIENCE: ExperienceInput,
    ContentType.PROJECT: ProjectInput,
    ContentType.SKILLS: SkillsInput,
    ContentType.REWRITE: RewriteInput,
    ContentType.CAPTION: CaptionInput,
}


class ContentGenerationRequest(BaseModel):
    """One user action asking for generated portfolio copy. Never persisted."""

    content_type: ContentType
    input: dict[str, Any] | _TaskInput


class GenerationResult(BaseModel):
    content_type: ContentType
    data: Any  # parsed JSON
    model: str
    provider: str | None = None
    usage: TokenUsage | None = None
