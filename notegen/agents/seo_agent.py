from typing import Optional

from .common_imports import (
    dedent,
    parse_payload,
    research_section,
    sections,
    GenerationSettings,
    ModelClient,
)

from notegen.models.article_schemas import RELATED_KEYWORD_COUNT, SeoAnalysis, WebResearchResult

SYSTEM_INSTRUCTION = "You are an SEO specialist. Respond in JSON."

OUTPUT_FORMAT = dedent(f"""
    Respond in this JSON format:
    {{
      "searchIntent": "What people searching this keyword want (around 200 characters)",
      "relatedKeywords": ["related keyword 1", "related keyword 2", "related keyword 3", "related keyword 4", "related keyword 5"],
      "competitorInsights": "Patterns in the top-ranking articles (around 200 characters)"
    }}

    relatedKeywords must contain exactly {RELATED_KEYWORD_COUNT} entries.
""")


def seo_instructions(settings: GenerationSettings, research: Optional[WebResearchResult] = None) -> str:
    task = "\n".join([
        "You are an SEO specialist. Run an SEO analysis for the keyword below.",
        "",
        f"Keyword: {settings.keyword}",
        f"Category: {settings.category}",
        f"Reader level: {settings.reader_level}",
    ])
    return sections(
        task,
        research_section(
            research, "Base the search intent and competitor insight on the findings above, not on guesswork."
        ),
        OUTPUT_FORMAT,
    )


def parse_seo_analysis(payload: dict) -> SeoAnalysis:
    return parse_payload(SeoAnalysis, payload)


async def run_seo_analysis(
    client: ModelClient,
    settings: GenerationSettings,
    research: Optional[WebResearchResult] = None,
) -> SeoAnalysis:
    payload = await client.complete(
        SYSTEM_INSTRUCTION,
        seo_instructions(settings, research),
        structured=True,
        name="SEO Agent",
    )
    return parse_seo_analysis(payload)
