"""Data models for the portfolio AI core."""

from portfolio_ai.models.enhanced import (
    CategorizedSkills,
    ConfidenceScores,
    EnhancedExperience,
    EnhancedProfile,
    EnhancedProject,
    EnhancedSections,
    ExperienceEnhancement,
    ProjectEnhancement,
    SummaryVersions,
)
from portfolio_ai.models.generation import (
    CaptionInput,
    ContentGenerationRequest,
    ContentType,
    ExperienceInput,
    GenerationResponse,
    GenerationResult,
    ProjectInput,
    RewriteInput,
    SkillsInput,
    SummaryInput,
    TokenUsage,
)
from portfolio_ai.models.profile import (
    Award,
    Certification,
    ContactInfo,
    Education,
    Experience,
    Language,
    Project,
    Skill,
    SocialLinks,
    StructuredResumeProfile,
)

__all__ = [
    "Award",
    "CaptionInput",
    "CategorizedSkills",
    "Certification",
    "ConfidenceScores",
    "ContactInfo",
    "ContentGenerationRequest",
    "ContentType",
    "Education",
    "EnhancedExperience",
    "EnhancedProfile",
    "EnhancedProject",
    "EnhancedSections",
    "Experience",
    "ExperienceEnhancement",
    "ExperienceInput",
    "GenerationResponse",
    "GenerationResult",
    "Language",
    "Project",
    "ProjectEnhancement",
    "ProjectInput",
    "RewriteInput",
    "Skill",
    "SkillsInput",
    "SocialLinks",
    "StructuredResumeProfile",
    "SummaryInput",
    "SummaryVersions",
    "TokenUsage",
]
