"""Shared fixtures: a scripted model client and well-formed replies for every step."""

import copy

import pytest

from notegen.core.config import Config
from notegen.core.errors import ConfigurationError
from notegen.models.workflow_schemas import GenerationSettings


SEO_PAYLOAD = {
    "searchIntent": "Readers want practical ways to get more done in less time",
    "relatedKeywords": ["productivity", "time blocking", "prioritization", "focus", "habits"],
    "competitorInsights": "Top articles lean on listicles with one framework each",
}

STRUCTURE_PAYLOAD = {
    "title": "Time Management for Beginners [2026 Update]",
    "headings": [
        {"level": 2, "text": "Why time slips away"},
        {"level": 3, "text": "The hidden cost of switching tasks"},
        {"level": 2, "text": "Three habits that stick"},
        {"level": 2, "text": "Frequently Asked Questions"},
    ],
    "faq": [
        {"question": "How long until a new habit sticks?", "answer": "Most people need about two months."},
        {"question": "Is multitasking ever worth it?", "answer": "Only for routine, low-focus work."},
        {"question": "Which tool should I start with?", "answer": "A paper list beats any app at first."},
    ],
    "metaDescription": "A beginner-friendly guide to time management with habits you can start today.",
}

ARTICLE_PAYLOAD = {
    "content": "<h2>Why time slips away</h2><p>I used to lose whole mornings to email.</p>",
    "contentMarkdown": "## Why time slips away\n\nI used to lose whole mornings to email.",
}

FACT_CHECK_PAYLOAD = {
    "totalChecked": 3,
    "verified": 1,
    "inaccurate": 1,
    "unverified": 1,
    "overallConfidence": "medium",
    "items": [
        {
            "id": "fc-1",
            "claim": "Habits take about two months to form",
            "accuracy": "accurate",
            "confidence": "high",
            "explanation": "Matches the 66-day average reported by UCL researchers",
            "sources": [{"title": "UCL study", "url": "https://example.com/ucl", "relevance": 90, "date": "2009-07-16"}],
            "suggestion": None,
        },
        {
            "id": "fc-2",
            "claim": "Multitasking doubles output",
            "accuracy": "inaccurate",
            "confidence": "medium",
            "explanation": "Task switching is measured to lower output",
            "sources": [],
            "suggestion": "Multitasking usually lowers output",
        },
        {
            "id": "fc-3",
            "claim": "Paper lists are more popular than apps",
            "accuracy": "unverified",
            "confidence": "low",
            "explanation": "No reliable survey found",
            "sources": [],
        },
    ],
}

DIAGRAMS_PAYLOAD = {
    "diagrams": [
        {
            "id": "diagram-1",
            "title": "Daily planning flow",
            "type": "Flowchart of the planning steps",
            "description": "How a day gets planned",
            "mermaidCode": 'flowchart TD\n  A["List tasks"] --> B["Pick three"]',
            "insertAfterParagraph": 3,
        },
        {
            "id": "diagram-2",
            "title": "Where the hours go",
            "type": "Pie chart",
            "description": "Share of time per activity",
            "mermaidCode": 'pie\n  "Email" : 30\n  "Deep work" : 70',
            "insertAfterParagraph": 8,
        },
    ]
}

X_POSTS_PAYLOAD = {
    "recommendedTime": "2026-10-20 12:00",
    "recommendedReason": "Tuesday lunch break",
    "shortPosts": [
        {
            "id": "sp-1",
            "target": "Beginners",
            "content": "Lost your morning to email again? Three habits fixed it for me.",
            "hashtags": ["#productivity"],
            "tags": ["productivity"],
            "charCount": 999,
            "maxChars": 140,
            "engagement": "medium",
        }
    ],
    "longPosts": [
        {
            "id": "lp-1",
            "type": "Story",
            "content": "A year ago I tried every app there is. What finally worked was a paper list.",
            "hashtags": ["#habits"],
            "tags": ["habits"],
            "charCount": 1,
            "engagement": "high",
        }
    ],
    "thread": {
        "totalTweets": 9,
        "totalChars": 9,
        "posts": [
            {"id": "th-1", "number": 1, "content": "Time management is not about apps.", "charCount": 3},
            {"id": "th-2", "number": 2, "content": "Start with a paper list.", "charCount": 3},
        ],
    },
}

RESEARCH_PAYLOAD = {
    "keyFindings": [
        "Knowledge workers switch tasks every 3 minutes on average",
        "Time blocking adoption grew 40% since 2023",
    ],
    "competitorSummary": "Top results are tool roundups with little first-hand experience",
}

STEP_PAYLOADS = {
    "SEO Agent": SEO_PAYLOAD,
    "Structure Agent": STRUCTURE_PAYLOAD,
    "Writing Agent": ARTICLE_PAYLOAD,
    "Fact Check Agent": FACT_CHECK_PAYLOAD,
    "Diagram Agent": DIAGRAMS_PAYLOAD,
    "Social Post Agent": X_POSTS_PAYLOAD,
    "Research Agent": RESEARCH_PAYLOAD,
}


class FakeModelClient:
    """Stands in for ModelClient: replies by agent name and records every call.

    A scripted reply that is an exception instance is raised instead of returned.
    """

    def __init__(self, replies=None, configured=True):
        self.replies = copy.deepcopy(STEP_PAYLOADS)
        self.replies.update(replies or {})
        self.configured = configured
        self.calls = []

    def ensure_configured(self):
        if not self.configured:
            raise ConfigurationError("Missing required environment variables: OPENAI_API_KEY")

    async def complete(self, system_instruction, user_instruction, structured=True, *, name="Model Client"):
        self.ensure_configured()
        self.calls.append({"name": name, "system": system_instruction, "user": user_instruction})
        reply = self.replies[name]
        if isinstance(reply, Exception):
            raise reply
        return copy.deepcopy(reply)

    def prompt_for(self, name):
        return next(call["user"] for call in self.calls if call["name"] == name)


@pytest.fixture
def settings():
    return GenerationSettings(keyword="time management", tone="friendly", reader_level="beginner", category="business")


@pytest.fixture
def config(tmp_path):
    return Config(
        OPENAI_API_KEY="sk-test",
        TAVILY_API_KEY="tvly-test",
        DATA_DIR=tmp_path,
        X_COOKIE_PATH=tmp_path / ".x-cookies.json",
        X_DEBUG_DIR=tmp_path / ".x-debug",
        STEP_PAUSE_SECONDS=0,
    )


@pytest.fixture
def fake_client():
    return FakeModelClient()
