"""Pydantic models for AI-enhanced profiles.

An ``EnhancedProfile`` is built once per enhancement call and is frozen. The
original profile travels alongside the enhanced one so callers can diff or
roll back.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from portfolio_ai.models.profile import (
    Experience,
    Language,
    Project,
    Skill,
    StructuredResumeProfile,
)

Confidence = Annotated[float, Field(ge=0.0, le=1.0)]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class SummaryVersions(_Frozen):
    original: str | None = None
    recommended: str
    versions: dict[str, str] = {}  # provider name -> text


class ExperienceEnhancement(_Frozen):
    description: str | None = None
    highlights: tuple[str, ...] = ()
    impact_metrics: tuple[str, ...] = ()


class ProjectEnhancement(_Frozen):
    description: str | None = None
    highlights: tuple[str, ...] = ()


class EnhancedExperience(_Frozen):
    entry: Experience
    ai_enhanced: ExperienceEnhancement
    confidence: Confidence
    enhanced_by: str | None = None  # model id, None when passed through


class EnhancedProject(_Frozen):
    entry: Project
    ai_enhanced: ProjectEnhancement
    confidence: Confidence
    enhanced_by: str | None = None


class CategorizedSkills(_Frozen):
    technical: tuple[Skill, ...] = ()
    soft: tuple[Skill, ...] = ()
    languages: tuple[Language, ...] = ()
    tools: tuple[Skill, ...] = ()
    frameworks: tuple[Skill, ...] = ()
    uncategorized: tuple[Skill, ...] = ()


class EnhancedSections(_Frozen):
    summary: SummaryVersions
    experience: tuple[EnhancedExperience, ...] = ()
    skills: CategorizedSkills = CategorizedSkills()
    projects: tuple[EnhancedProject, ...] = ()


class ConfidenceScores(_Frozen):
    overall: Confidence
    summary: Confidence
    experience: Confidence
    skills: Confidence
    projects: Confidence


class EnhancedProfile(_Frozen):
    """Frozen at the top level: fields cannot be reassigned.

    ``original`` is a private deep copy taken when the enhancement starts, so
    later changes to the caller's profile never reach it. The profile models
    themselves are plain pydantic models; their lists are not frozen.
    """

    original: StructuredResumeProfile
    enhanced: EnhancedSections
    confidence: ConfidenceScores
    metadata: dict[str, Any] = {}  # models used, token usage
