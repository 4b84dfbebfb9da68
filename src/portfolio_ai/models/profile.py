"""Pydantic models for the structured resume profile."""

from __future__ import annotations

from typing import Any, Literal, get_origin

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

SkillCategory = Literal["technical", "soft", "language", "tool", "framework"]

_CATEGORY_ALIASES = {"languages": "language", "tools": "tool", "frameworks": "framework"}


class _ProfileModel(BaseModel):
    # Wire format is camelCase (startDate, issueDate, ...).
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def null_lists_to_empty(cls, data: Any) -> Any:
        """Models sometimes answer ``null`` for an empty list; lists are never null."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for name, info in cls.model_fields.items():
            if get_origin(info.annotation) is not list:
                continue
            for key in {name, info.alias or name}:
                if key in data and data[key] is None:
                    data[key] = []
        return data


class SocialLinks(_ProfileModel):
    linkedin: str | None = None
    github: str | None = None
    twitter: str | None = None
    medium: str | None = None
    devto: str | None = None
    portfolio: str | None = None


class ContactInfo(_ProfileModel):
    name: str | None = None
    title: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    website: str | None = None
    social: SocialLinks | None = None


class Experience(_ProfileModel):
    id: str | None = None
    company: str | None = None
    position: str | None = None
    location: str | None = None
    start_date: str | None = None
    end_date: str | None = None  # None = current
    description: str | None = None
    highlights: list[str] = []
    technologies: list[str] = []


class Education(_ProfileModel):
    id: str | None = None
    institution: str | None = None
    degree: str | None = None
    field: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    gpa: str | None = None
    honors: list[str] = []
    description: str | None = None


class Skill(_ProfileModel):
    id: str | None = None
    name: str
    category: SkillCategory | None = None  # absent when the resume gives none
    proficiency: Literal["beginner", "intermediate", "advanced", "expert"] | None = None

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            return _CATEGORY_ALIASES.get(value, value)
        return value


class Project(_ProfileModel):
    id: str | None = None
    name: str | None = None
    description: str | None = None
    technologies: list[str] = []
    url: str | None = None
    github: str | None = None
    image: str | None = None
    highlights: list[str] = []
    start_date: str | None = None
    end_date: str | None = None


class Certification(_ProfileModel):
    id: str | None = None
    name: str | None = None
    issuer: str | None = None
    issue_date: str | None = None
    expiry_date: str | None = None
    credential_id: str | None = None
    url: str | None = None


class Language(_ProfileModel):
    name: str
    proficiency: Literal["native", "fluent", "professional", "conversational", "basic"] | None = None


class Award(_ProfileModel):
    id: str | None = None
    name: str | None = None
    issuer: str | None = None
    date: str | None = None
    description: str | None = None


class StructuredResumeProfile(_ProfileModel):
    """Normalized record produced from free-text resume parsing."""

    personal: ContactInfo
    summary: str | None = None
    experience: list[Experience] = []
    education: list[Education] = []
    skills: list[Skill] = []
    projects: list[Project] = []
    certifications: list[Certification] = []
    languages: list[Language] = []
    awards: list[Award] = []

    def to_dict(self) -> dict[str, Any]:
        """Dump only the fields that were actually present, using wire names."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)

    def skills_in(self, category: SkillCategory | None) -> list[Skill]:
        """Skills in ``category``; ``None`` selects the uncategorized ones."""
        return [s for s in self.skills if s.category == category]
