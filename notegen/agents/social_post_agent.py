import json
from datetime import date
from typing import Optional

from .common_imports import (
    dedent,
    parse_payload,
    sections,
    GenerationSettings,
    ModelClient,
)

from notegen.models.article_schemas import SHORT_POST_MAX_CHARS, ArticleStructure, XPostSuggestions

SYSTEM_INSTRUCTION = "You are a social media marketing specialist writing X (Twitter) posts. Respond in JSON."

SHORT_POST_TARGETS = ["Beginners", "Intermediate readers", "Business professionals", "Busy parents"]

THREAD_OUTLINE = [
    "Hook that pulls the reader in",
    "The conclusion and key point",
    "A concrete example or caveat",
    "How to put it into practice",
    "A personal experience",
    "Downsides and an honest take",
    "Wrap-up, link to the article, hashtags",
]


def output_example(today: date) -> dict:
    """A filled-in reply the model can copy the shape of."""
    return {
        "recommendedTime": f"{today.isoformat()} 12:00",
        "recommendedReason": "Why this time works (e.g. Tuesday lunch break, high engagement)",
        "shortPosts": [
            {
                "id": f"sp-{i}",
                "target": target,
                "content": f"Post of at most {SHORT_POST_MAX_CHARS} characters (emoji allowed, no hashtags)",
                "hashtags": ["#tag1", "#tag2", "#tag3"],
                "tags": ["tag1", "tag2", "tag3"],
                "charCount": 135,
                "maxChars": SHORT_POST_MAX_CHARS,
                "engagement": "medium",
            }
            for i, target in enumerate(SHORT_POST_TARGETS, 1)
        ],
        "longPosts": [
            {
                "id": "lp-1",
                "type": "Story",
                "content": "A 300-500 character post built on personal experience, hashtags at the end",
                "hashtags": ["#tag1", "#tag2", "#tag3", "#tag4", "#tag5"],
                "tags": ["tag1", "tag2", "tag3", "tag4", "tag5"],
                "charCount": 480,
                "engagement": "high",
            }
        ],
        "thread": {
            "totalTweets": len(THREAD_OUTLINE),
            "totalChars": 1100,
            "posts": [
                {"id": f"th-{i}", "number": i, "content": content, "charCount": 150}
                for i, content in enumerate(THREAD_OUTLINE, 1)
            ],
        },
    }


def social_post_instructions(
    settings: GenerationSettings,
    structure: ArticleStructure,
    today: Optional[date] = None,
) -> str:
    today = today or date.today()
    task = "\n".join([
        "You are a social media marketing specialist. Write X (Twitter) posts that promote the article below.",
        "",
        f"Article title: {structure.title}",
        f"Keyword: {settings.keyword}",
        f"Meta description: {structure.meta_description}",
    ])
    rules = dedent(f"""
    Important:
    - every shortPosts content is at most {SHORT_POST_MAX_CHARS} characters
    - one short post per target: {", ".join(SHORT_POST_TARGETS)}
    - charCount matches the real character count
    - thread.totalTweets is the number of thread posts and thread.totalChars is the sum of their charCount
    - write each post in a tone that fits its target
    """)
    return sections(
        task,
        "Respond in this JSON format:\n" + json.dumps(output_example(today), indent=2, ensure_ascii=False),
        rules,
    )


def recount(suggestions: XPostSuggestions) -> XPostSuggestions:
    """Replace model-reported character counts with the real ones."""
    thread_posts = [p.model_copy(update={"char_count": len(p.content)}) for p in suggestions.thread.posts]
    thread = suggestions.thread.model_copy(
        update={
            "posts": thread_posts,
            "total_tweets": len(thread_posts),
            "total_chars": sum(p.char_count for p in thread_posts),
        }
    )
    return suggestions.model_copy(
        update={
            "short_posts": [p.model_copy(update={"char_count": len(p.content)}) for p in suggestions.short_posts],
            "long_posts": [p.model_copy(update={"char_count": len(p.content)}) for p in suggestions.long_posts],
            "thread": thread,
        }
    )


def parse_x_posts(payload: dict) -> XPostSuggestions:
    return recount(parse_payload(XPostSuggestions, payload))


async def run_x_post_generation(
    client: ModelClient,
    settings: GenerationSettings,
    structure: ArticleStructure,
) -> XPostSuggestions:
    payload = await client.complete(
        SYSTEM_INSTRUCTION,
        social_post_instructions(settings, structure),
        structured=True,
        name="Social Post Agent",
    )
    return parse_x_posts(payload)
