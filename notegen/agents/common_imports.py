from textwrap import dedent
from typing import Optional

from notegen.agents.model_client import ModelClient
from notegen.core.logging_config import get_logger
from notegen.models.article_schemas import WebResearchResult, parse_payload
from notegen.models.workflow_schemas import GenerationSettings

TONE_LABELS = {
    "friendly": "friendly and approachable",
    "polite": "polite and easy to follow",
    "professional": "expert and logical",
}

READER_LEVEL_LABELS = {
    "beginner": "beginners",
    "intermediate": "intermediate readers",
    "advanced": "advanced readers",
}


def tone_label(settings: GenerationSettings) -> str:
    return TONE_LABELS[settings.tone]


def reader_label(settings: GenerationSettings) -> str:
    return READER_LEVEL_LABELS[settings.reader_level]


def numbered(items: list[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, 1))


def sections(*parts: str) -> str:
    """
    Join prompt sections with blank lines, skipping empty ones.

    Multi-line values (outlines, search results, article text) go in as their own
    section instead of inside a `dedent` template, so they never break its margin.
    """
    return "\n\n".join(part.strip("\n") for part in parts if part and part.strip())


def research_section(research: Optional[WebResearchResult], guidance: str) -> str:
    if not research:
        return ""
    return sections(
        "## Key findings from web research\n" + numbered(research.key_findings),
        "## How competing articles cover the topic\n" + research.competitor_summary,
        guidance,
    )
