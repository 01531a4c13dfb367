from typing import List

from .common_imports import (
    dedent,
    get_logger,
    parse_payload,
    sections,
    ModelClient,
)

from notegen.models.article_schemas import TopicCandidate, TopicCandidates, XPost

logger = get_logger(__name__)

SYSTEM_INSTRUCTION = dedent("""
You help a blogger find article ideas.
From the collected X posts and trends, extract article topic candidates that fit the user's content strategy.

Output format (JSON):
{
  "candidates": [
    {
      "title": "Proposed article title",
      "keyword": "Short keyword to generate the article from",
      "summary": "What the topic is and why it is worth writing (1-2 sentences)",
      "relevance": 8,
      "source": "URL of the post or the trend name"
    }
  ]
}

Rules:
- order by relevance to the strategy, highest first
- at most 10 candidates
- relevance is an integer from 1 to 10
- base every topic on actual posts or trends
- keep keywords short enough to feed straight into article generation
""")


def format_posts(posts: List[XPost]) -> str:
    return "\n".join(
        f"[{i}] @{p.author}: {p.text} (likes {p.like_count}, reposts {p.repost_count}) URL: {p.url}"
        for i, p in enumerate(posts, 1)
    )


def format_trends(trends: List[str]) -> str:
    return "\n".join(f"[T{i}] {t}" for i, t in enumerate(trends, 1))


def topic_instructions(strategy: str, posts: List[XPost], trends: List[str]) -> str:
    return sections(
        "## The user's strategy\n" + strategy,
        "## Collected posts\n" + (format_posts(posts) or "(no posts)"),
        "## Trends\n" + (format_trends(trends) or "(no trends)"),
    )


def parse_topic_candidates(payload: dict) -> List[TopicCandidate]:
    candidates = parse_payload(TopicCandidates, payload).candidates
    return sorted(candidates, key=lambda c: c.relevance, reverse=True)


async def analyze_topics(
    client: ModelClient,
    strategy: str,
    posts: List[XPost],
    trends: List[str],
) -> List[TopicCandidate]:
    payload = await client.complete(
        SYSTEM_INSTRUCTION,
        topic_instructions(strategy, posts, trends),
        structured=True,
        name="Topic Analyzer Agent",
    )
    candidates = parse_topic_candidates(payload)
    logger.info("Extracted %d topic candidates", len(candidates))
    return candidates
