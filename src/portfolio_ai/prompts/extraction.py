"""Prompts for resume extraction and profile enhancement."""

from __future__ import annotations

import json

from portfolio_ai.models.profile import StructuredResumeProfile

EXTRACTION_SYSTEM_PROMPT = """\
You are an expert resume parser. Your goal is to extract structured information from a resume text.
Output the data in valid JSON format according to the provided schema.
Be precise and don't hallucinate. If a field is not in the resume, leave the key out; \
use an empty array for a list with no entries.
Output MUST be valid JSON matching the schema below and nothing else.

Schema:
{
  "personal": {"name": "", "title": "", "email": "", "phone": "", "location": "", "website": "",
               "social": {"linkedin": "", "github": "", "twitter": ""}},
  "summary": "",
  "experience": [{"company": "", "position": "", "location": "", "startDate": "", "endDate": "",
                  "description": "", "highlights": [""], "technologies": [""]}],
  "education": [{"institution": "", "degree": "", "field": "", "startDate": "", "endDate": "",
                 "gpa": "", "honors": [""]}],
  "skills": [{"name": "", "category": "technical|soft|language|tool|framework"}],
  "projects": [{"name": "", "description": "", "technologies": [""], "url": "", "highlights": [""]}],
  "certifications": [{"name": "", "issuer": "", "issueDate": "", "url": ""}],
  "languages": [{"name": "", "proficiency": "native|fluent|professional|conversational|basic"}],
  "awards": [{"name": "", "issuer": "", "date": "", "description": ""}]
}"""

# Keys the extraction response must carry at the top level.
REQUIRED_PROFILE_KEYS = ("personal", "experience", "education", "skills")

ENHANCEMENT_SYSTEM_PROMPT = """\
You are a professional career coach and copywriter.
Your goal is to enhance a user's resume data for their portfolio.
Improve the tone, highlight impact and metrics, and ensure the language is professional and compelling.
Avoid clichés and use strong action verbs."""

SUMMARY_ENHANCEMENT_SYSTEM_PROMPT = (
    ENHANCEMENT_SYSTEM_PROMPT + "\nFocus on narrative and professional tone."
)


def extraction_prompt(text: str) -> str:
    return f"""Extract the following information from the resume text below:
1. Contact Info (name, title, email, phone, location, website, social links)
2. Professional Summary
3. Work Experience (company, position, location, dates, description, highlights, technologies)
4. Education (institution, degree, field, dates, gpa, honors)
5. Skills (categorized into technical, soft, language, tool, framework)
6. Projects
7. Certifications
8. Languages
9. Awards

Resume Text:
---
{text}
---

Output only the JSON."""


def summary_enhancement_prompt(profile: StructuredResumeProfile) -> str:
    """Ask for a rewritten professional summary, returned as plain text."""
    data = json.dumps(profile.to_dict(), indent=2, ensure_ascii=False)
    current = profile.summary.strip() if profile.summary else ""
    current_block = f"\nCurrent Summary:\n{current}\n" if current else ""
    return f"""Write an enhanced professional summary for this person's portfolio, based on the resume data below.
{current_block}
Resume Data:
{data}

The summary should be 2-4 sentences, grounded only in the data above, and emphasize impact and results.
Respond with the summary text only: no heading, no quotes, no JSON."""
