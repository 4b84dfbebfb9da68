"""Prompt templates for portfolio content generation.

Every builder is a pure function of its input record. Optional fields are
checked for presence and their line is left out entirely when absent, so a
prompt never carries a placeholder such as "None" or "Not specified".
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel

from portfolio_ai.errors import UnsupportedContentTypeError
from portfolio_ai.models.generation import (
    INPUT_MODELS,
    CaptionInput,
    ContentType,
    ExperienceInput,
    ProjectInput,
    RewriteInput,
    SkillsInput,
    SummaryInput,
)

SYSTEM_PROMPTS: dict[ContentType, str] = {
    ContentType.SUMMARY: (
        "You are a professional portfolio content writer specializing in compelling "
        "personal summaries. Generate authentic, achievement-focused content that "
        "highlights the candidate's unique value proposition."
    ),
    ContentType.EXPERIENCE: (
        "You are an expert resume and portfolio writer. Transform job descriptions into "
        "impactful narratives that showcase achievements, leadership, and measurable results."
    ),
    ContentType.PROJECT: (
        "You are a technical portfolio writer who excels at describing projects in a way "
        "that highlights both technical depth and business impact."
    ),
    ContentType.SKILLS: (
        "You are a career coach who helps professionals identify and articulate their "
        "technical and soft skills based on their experience."
    ),
    ContentType.REWRITE: (
        "You are an expert editor specializing in portfolio content. Improve clarity, "
        "impact, and professionalism while maintaining authenticity."
    ),
    ContentType.CAPTION: (
        "You are a technical writer who creates clear, descriptive captions for portfolio visuals."
    ),
}

JSON_ONLY_SUFFIX = "\nOutput MUST be valid JSON."


def _line(label: str, value: Any) -> str | None:
    """Render ``label: value`` or nothing when the value is missing or blank."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        items = [str(v).strip() for v in value if v is not None and str(v).strip()]
        if not items:
            return None
        return f"{label}: {', '.join(items)}"
    text = str(value).strip()
    if not text:
        return None
    return f"{label}: {text}"


def _join(*blocks: str | None) -> str:
    return "\n".join(b for b in blocks if b is not None)


def summary_prompt(data: SummaryInput) -> str:
    details = _join(
        _line("Name", data.name),
        _line("Title", data.title),
        _line("Years of Experience", data.years_experience),
        _line("Key Skills", data.skills),
        _line("Industry", data.industry),
    )
    return f"""Generate a professional summary for a portfolio.

{details}

Create 3 variations:
1. PROFESSIONAL (formal, corporate tone)
2. CONVERSATIONAL (friendly, approachable tone)
3. CREATIVE (unique, memorable tone)

Each should be:
- 2-3 sentences
- Highlight key strengths
- Be compelling and authentic
- Avoid clichés

Return as JSON:
{{
  "professional": "...",
  "conversational": "...",
  "creative": "..."
}}"""


def experience_prompt(data: ExperienceInput) -> str:
    details = _join(
        _line("Company", data.company),
        _line("Position", data.position),
        _line("Current Description", data.description),
        _line("Technologies", data.technologies),
    )
    return f"""Enhance this job experience description for a portfolio.

{details}

Improve the description by:
- Using strong action verbs
- Quantifying impact where possible
- Highlighting leadership and initiative
- Making it concise and impactful

Also generate 3-5 key achievement highlights as bullet points.

Return as JSON:
{{
  "enhancedDescription": "...",
  "highlights": ["...", "...", "..."]
}}"""


def project_prompt(data: ProjectInput) -> str:
    details = _join(
        _line("Project Name", data.name),
        _line("Technologies", data.technologies),
        _line("Basic Description", data.basic_description),
        _line("Project Type", data.type),
    )
    return f"""Generate a compelling project description for a portfolio.

{details}

Create a description that:
- Explains what the project does
- Highlights technical challenges solved
- Emphasizes impact or results
- Is engaging and clear
- Is 2-3 sentences

Also generate 3-4 key highlights as bullet points.

Return as JSON:
{{
  "description": "...",
  "highlights": ["...", "...", "..."]
}}"""


def skills_prompt(data: SkillsInput) -> str:
    experience_lines = [
        f"- {exp.position}: {exp.description}" for exp in data.experiences
    ]
    blocks = []
    if experience_lines:
        blocks.append("Work Experience:\n" + "\n".join(experience_lines))
    existing = _line("Existing Skills", data.existing_skills)
    if existing:
        blocks.append(existing)
    details = "\n\n".join(blocks)
    return f"""Based on this work experience, suggest additional skills to add to a portfolio.

{details}

Suggest 5-10 additional skills that are:
- Relevant to the experience
- Not already listed
- Valuable for the industry
- Specific (not generic)

Categorize each skill as: technical, soft, language, tool, or framework

Return as JSON:
{{
  "suggestions": [
    {{ "name": "...", "category": "technical" }}
  ]
}}"""


def rewrite_prompt(data: RewriteInput) -> str:
    details = _join(
        _line("Content to Rewrite", data.content),
        _line("Context", data.context),
        _line("Desired Tone", data.tone or "professional"),
    )
    return f"""Rewrite this portfolio content to improve clarity and impact.

{details}

Rewrite the content to be:
- More compelling and engaging
- Clear and concise
- Free of clichés and generic phrases
- Authentic and specific
- Appropriate for a professional portfolio

Return as JSON:
{{
  "rewritten": "..."
}}"""


def caption_prompt(data: CaptionInput) -> str:
    details = _join(
        _line("Project", data.project_name),
        _line("Image Category", data.category),
        _line("Context", data.context),
    )
    return f"""Generate a caption for a portfolio image.

{details}

Create a caption that:
- Describes what the image shows
- Relates to the project/achievement
- Is concise (1-2 sentences)
- Is professional and descriptive

Return as JSON:
{{
  "caption": "..."
}}"""


PROMPT_BUILDERS: Mapping[ContentType, Callable[[Any], str]] = {
    ContentType.SUMMARY: summary_prompt,
    ContentType.EXPERIENCE: experience_prompt,
    ContentType.PROJECT: project_prompt,
    ContentType.SKILLS: skills_prompt,
    ContentType.REWRITE: rewrite_prompt,
    ContentType.CAPTION: caption_prompt,
}


def resolve_content_type(task: ContentType | str) -> ContentType:
    try:
        return ContentType(task)
    except ValueError:
        raise UnsupportedContentTypeError(task) from None


def coerce_input(task: ContentType | str, data: BaseModel | Mapping[str, Any]) -> BaseModel:
    """Validate a raw mapping into the input record for ``task``."""
    model = INPUT_MODELS[resolve_content_type(task)]
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump()
    return model.model_validate(data)


def build_prompt(task: ContentType | str, data: BaseModel | Mapping[str, Any]) -> str:
    """Build the user prompt for a content-generation task."""
    content_type = resolve_content_type(task)
    return PROMPT_BUILDERS[content_type](coerce_input(content_type, data))


def system_instruction_for(task: ContentType | str) -> str:
    return SYSTEM_PROMPTS[resolve_content_type(task)]
