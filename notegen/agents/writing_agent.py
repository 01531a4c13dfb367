# Writes the full article in two synchronized renderings: HTML and Markdown
import math
from datetime import date
from typing import Optional

from .common_imports import (
    dedent,
    numbered,
    parse_payload,
    reader_label,
    sections,
    tone_label,
    GenerationSettings,
    ModelClient,
)

from notegen.models.article_schemas import ArticleBody, ArticleDraft, ArticleStructure, WebResearchResult

AUTHOR_LABEL = "Staff Writer"
WORDS_PER_MINUTE = 500

SYSTEM_INSTRUCTION = (
    "You are a professional editor and writer. You write natural prose that does not read like AI output. "
    "Respond in JSON."
)


def format_outline(structure: ArticleStructure) -> str:
    return "\n".join(f"{'#' * heading.level} {heading.text}" for heading in structure.headings)


def format_faq(structure: ArticleStructure) -> str:
    return "\n\n".join(f"Q: {item.question}\nA: {item.answer}" for item in structure.faq)


WRITING_RULES = dedent("""
    # Writing rules (mandatory)
    - Remove every trace of AI-sounding text: template phrasing, manual-like explanations, symbol overload, excessive politeness, hedges, empty abstractions
    - Loosen the too-perfect structure a little. Prefer a natural rhythm of conversation, explanation, empathy
    - Give the piece emotional movement: mix in failures, surprises and discoveries
    - Vary the rhythm. Mix short and long sentences and avoid uniform sentence length
    - Include first-person experience and concrete examples
    - No preamble announcements such as "In this article" or "Below we explain"
    - Drop safety cushions such as "generally" or "in many cases"
    - Do not lean on bare abstractions like "important", "effective" or "optimal"
    - No strings of synonyms restating the same point. Say it once
    - No stock closing phrases
""")

OUTPUT_FORMAT = dedent("""
    # Output format
    Respond in this JSON format:
    {
      "content": "The article body using HTML tags (<h1>, <h2>, <h3>, <p>, <strong>), following the outline.",
      "contentMarkdown": "The same article body in Markdown."
    }
""")


def writing_instructions(
    settings: GenerationSettings,
    structure: ArticleStructure,
    research: Optional[WebResearchResult] = None,
) -> str:
    role = (
        "# Role\n"
        "You are a professional editor and writer. Write this blog article so that readers feel a person wrote it."
    )
    article_info = "\n".join([
        "# Article information",
        f"Title: {structure.title}",
        f"Keyword: {settings.keyword}",
        f"Audience: {reader_label(settings)}",
        f"Target length: {settings.word_count} words",
        f"Tone: {tone_label(settings)}",
    ])
    if research:
        research_instruction = sections(
            "# Research findings\n" + numbered(research.key_findings),
            "Work the concrete figures and examples from these findings into the article. Cite the actual numbers "
            "instead of describing them in general terms.",
        )
    else:
        research_instruction = ""

    return sections(
        role,
        article_info,
        "# Outline\n" + format_outline(structure),
        "# FAQ\n" + format_faq(structure),
        research_instruction,
        WRITING_RULES,
        OUTPUT_FORMAT,
    )


def parse_article_draft(payload: dict) -> ArticleDraft:
    return parse_payload(ArticleDraft, payload)


def format_article_date(day: date) -> str:
    return f"{day:%B} {day.day}, {day.year}"


def reading_time(word_count: int) -> str:
    return f"{math.ceil(word_count / WORDS_PER_MINUTE)} min read"


def build_article_body(
    settings: GenerationSettings,
    structure: ArticleStructure,
    draft: ArticleDraft,
    today: Optional[date] = None,
) -> ArticleBody:
    return ArticleBody(
        title=structure.title,
        author=AUTHOR_LABEL,
        date=format_article_date(today or date.today()),
        reading_time=reading_time(settings.word_count),
        hero_image="",
        content=draft.content,
        content_markdown=draft.content_markdown,
    )


async def run_article_body(
    client: ModelClient,
    settings: GenerationSettings,
    structure: ArticleStructure,
    research: Optional[WebResearchResult] = None,
) -> ArticleBody:
    payload = await client.complete(
        SYSTEM_INSTRUCTION,
        writing_instructions(settings, structure, research),
        structured=True,
        name="Writing Agent",
    )
    return build_article_body(settings, structure, parse_article_draft(payload))
