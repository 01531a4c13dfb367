from datetime import date
from typing import Optional

from .common_imports import (
    dedent,
    parse_payload,
    reader_label,
    research_section,
    sections,
    tone_label,
    GenerationSettings,
    ModelClient,
)

from notegen.models.article_schemas import ArticleStructure, SeoAnalysis, WebResearchResult

SYSTEM_INSTRUCTION = "You are a popular blog writer. Respond in JSON."

RESEARCH_GUIDANCE = (
    "Build the outline around these findings. Plan each section so the concrete facts above have a place to land, "
    "and base the FAQ answers on them."
)


def output_format(year: int, faq_answer_hint: str) -> str:
    return dedent(f"""
    Respond in this JSON format:
    {{
      "title": "A compelling title that includes \\"[{year} Update]\\" (60 characters max)",
      "headings": [
        {{"level": 2, "text": "Section 1"}},
        {{"level": 3, "text": "Subsection 1-1"}},
        {{"level": 3, "text": "Subsection 1-2"}},
        {{"level": 2, "text": "Section 2"}},
        {{"level": 3, "text": "Subsection 2-1"}},
        {{"level": 2, "text": "Section 3"}},
        {{"level": 2, "text": "Frequently Asked Questions"}}
      ],
      "faq": [
        {{"question": "Question 1", "answer": "{faq_answer_hint}"}},
        {{"question": "Question 2", "answer": "Answer 2"}},
        {{"question": "Question 3", "answer": "Answer 3"}}
      ],
      "metaDescription": "Meta description (120-160 characters)"
    }}

    Rules:
    - heading levels are only 2 or 3
    - exactly 3 FAQ entries
    """)


def structure_instructions(
    settings: GenerationSettings,
    seo: SeoAnalysis,
    research: Optional[WebResearchResult] = None,
    year: Optional[int] = None,
) -> str:
    year = year or date.today().year
    faq_answer_hint = "Answer 1 (specific, based on the research findings)" if research else "Answer 1"

    task = "\n".join([
        "You are a popular blog writer. Using the information below, design the outline of an SEO-optimized article.",
        "",
        f"Keyword: {settings.keyword}",
        f"Tone: {tone_label(settings)}",
        f"Audience: {reader_label(settings)}",
        f"Target length: {settings.word_count} words",
        f"Search intent: {seo.search_intent}",
        f"Related keywords: {', '.join(seo.related_keywords)}",
    ])
    return sections(
        task,
        research_section(research, RESEARCH_GUIDANCE),
        output_format(year, faq_answer_hint),
    )


def parse_article_structure(payload: dict) -> ArticleStructure:
    return parse_payload(ArticleStructure, payload)


async def run_article_structure(
    client: ModelClient,
    settings: GenerationSettings,
    seo: SeoAnalysis,
    research: Optional[WebResearchResult] = None,
) -> ArticleStructure:
    payload = await client.complete(
        SYSTEM_INSTRUCTION,
        structure_instructions(settings, seo, research),
        structured=True,
        name="Structure Agent",
    )
    return parse_article_structure(payload)
