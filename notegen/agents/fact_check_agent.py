from .common_imports import (
    dedent,
    parse_payload,
    sections,
    ModelClient,
)

from notegen.models.article_schemas import ArticleBody, FactCheckResult

ARTICLE_EXCERPT_CHARS = 3000

SYSTEM_INSTRUCTION = "You are a fact checker. Respond in JSON."

OUTPUT_FORMAT = dedent("""
    Respond in this JSON format:
    {
      "totalChecked": 5,
      "verified": 2,
      "inaccurate": 0,
      "unverified": 3,
      "overallConfidence": "medium",
      "items": [
        {
          "id": "fc-1",
          "claim": "The factual claim, quoted verbatim from the article",
          "accuracy": "accurate, inaccurate, partial or unverified",
          "confidence": "high, medium or low",
          "explanation": "Why you reached this verdict (around 100 characters)",
          "sources": [
            {
              "title": "Title of the reference",
              "url": "https://example.com",
              "relevance": 80,
              "date": "2025-01-01"
            }
          ],
          "suggestion": "A corrected wording if one is needed, otherwise null"
        }
      ]
    }

    Important:
    - verified + inaccurate + unverified must equal totalChecked
    - count items whose accuracy is "accurate" as verified
    - when you are not sure, use "unverified"
    - judge overallConfidence from the balance of the whole check
""")


def fact_check_instructions(article: ArticleBody) -> str:
    return sections(
        "You are a fact checker. Extract at most 5 factual claims from the article below and verify them against your knowledge.",
        "Article:\n" + article.content_markdown[:ARTICLE_EXCERPT_CHARS],
        OUTPUT_FORMAT,
    )


def parse_fact_check(payload: dict) -> FactCheckResult:
    """Validate a fact-check reply, rejecting counts that do not add up."""
    return parse_payload(FactCheckResult, payload)


async def run_fact_check(client: ModelClient, article: ArticleBody) -> FactCheckResult:
    payload = await client.complete(
        SYSTEM_INSTRUCTION,
        fact_check_instructions(article),
        structured=True,
        name="Fact Check Agent",
    )
    return parse_fact_check(payload)
