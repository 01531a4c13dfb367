from __future__ import annotations

from typing import Any, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from notegen.core.errors import MalformedResponse

SHORT_POST_MAX_CHARS = 140
RELATED_KEYWORD_COUNT = 5


class Schema(BaseModel):
    """Base for every record a step produces: camelCase on the wire, frozen in memory."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


SchemaT = TypeVar("SchemaT", bound=Schema)


# ===== Research =====

class ResearchSource(Schema):
    title: str
    url: str
    snippet: str = ""


class ResearchFindings(Schema):
    """What the model distills out of raw search results."""
    key_findings: List[str] = Field(min_length=1)
    competitor_summary: str


class WebResearchResult(Schema):
    key_findings: List[str]
    sources: List[ResearchSource] = []
    competitor_summary: str
    raw_summary: str = ""


# ===== SEO =====

class SeoAnalysis(Schema):
    search_intent: str
    related_keywords: List[str] = Field(min_length=RELATED_KEYWORD_COUNT, max_length=RELATED_KEYWORD_COUNT)
    competitor_insights: str


# ===== Structure =====

class Heading(Schema):
    level: Literal[2, 3]
    text: str


class FaqItem(Schema):
    question: str
    answer: str


class ArticleStructure(Schema):
    title: str
    headings: List[Heading] = Field(min_length=1)
    faq: List[FaqItem] = Field(min_length=3, max_length=3)
    meta_description: str


# ===== Article body =====

class ArticleDraft(Schema):
    """The two synchronized renderings returned by the writing model."""
    content: str
    content_markdown: str


class ArticleBody(Schema):
    title: str
    author: str
    date: str
    reading_time: str
    hero_image: str = ""
    content: str
    content_markdown: str


# ===== Diagrams =====

class Diagram(Schema):
    id: str
    title: str
    type: str
    description: str
    mermaid_code: str
    insert_after_paragraph: int = Field(ge=0)


class DiagramSet(Schema):
    diagrams: List[Diagram] = Field(min_length=2, max_length=2)


# ===== Fact check =====

FactAccuracy = Literal["accurate", "inaccurate", "partial", "unverified"]
FactConfidence = Literal["high", "medium", "low"]


class FactSource(Schema):
    title: str
    url: str
    relevance: int = Field(ge=0, le=100)
    date: str = ""


class FactCheckItem(Schema):
    id: str
    claim: str
    accuracy: FactAccuracy
    confidence: FactConfidence
    explanation: str
    sources: List[FactSource] = []
    suggestion: Optional[str] = None


class FactCheckResult(Schema):
    total_checked: int = Field(ge=0, le=5)
    verified: int = Field(ge=0)
    inaccurate: int = Field(ge=0)
    unverified: int = Field(ge=0)
    overall_confidence: FactConfidence
    items: List[FactCheckItem] = Field(max_length=5)

    @model_validator(mode="after")
    def _counts_add_up(self) -> "FactCheckResult":
        counted = self.verified + self.inaccurate + self.unverified
        if counted != self.total_checked:
            raise ValueError(
                f"verified + inaccurate + unverified = {counted} does not match totalChecked = {self.total_checked}"
            )
        return self


# ===== X posts =====

Engagement = Literal["low", "medium", "high"]


class XShortPost(Schema):
    id: str
    target: str
    content: str = Field(max_length=SHORT_POST_MAX_CHARS)
    hashtags: List[str] = []
    tags: List[str] = []
    char_count: int = 0
    max_chars: int = SHORT_POST_MAX_CHARS
    engagement: Engagement = "medium"


class XLongPost(Schema):
    id: str
    type: str
    content: str
    hashtags: List[str] = []
    tags: List[str] = []
    char_count: int = 0
    engagement: Engagement = "medium"


class XThreadPost(Schema):
    id: str
    number: int
    content: str
    char_count: int = 0


class XThread(Schema):
    total_tweets: int = 0
    total_chars: int = 0
    posts: List[XThreadPost] = Field(min_length=1)


class XPostSuggestions(Schema):
    recommended_time: str
    recommended_reason: str
    short_posts: List[XShortPost] = Field(min_length=1)
    long_posts: List[XLongPost] = Field(min_length=1)
    thread: XThread


# ===== Topics =====

class TopicCandidate(Schema):
    title: str
    keyword: str
    summary: str
    relevance: int = Field(ge=1, le=10)
    source: str


class TopicCandidates(Schema):
    candidates: List[TopicCandidate] = Field(max_length=10)


class XPost(Schema):
    text: str
    author: str
    like_count: int = 0
    repost_count: int = 0
    url: str = ""


# ===== Whole run =====

class GenerationResult(Schema):
    research: Optional[WebResearchResult] = None
    seo_analysis: SeoAnalysis
    structure: ArticleStructure
    article: ArticleBody
    diagrams: List[Diagram]
    fact_check: FactCheckResult
    x_posts: XPostSuggestions


def parse_payload(model: type[SchemaT], payload: Any) -> SchemaT:
    """Validate a decoded model reply against `model`, failing closed."""
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise MalformedResponse(f"{model.__name__} failed validation: {e}") from e
