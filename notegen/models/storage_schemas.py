from typing import Optional

from notegen.models.article_schemas import GenerationResult, Schema, TopicCandidate


class HistoryItem(Schema):
    id: str
    keyword: str
    settings: dict
    result: GenerationResult
    created_at: str


class Template(Schema):
    id: str
    name: str
    header: str = ""
    footer: str = ""
    created_at: str


class TopicStockItem(TopicCandidate):
    id: str
    collected_at: str
    used: bool = False


class SavedCookies(Schema):
    auth_token: str
    ct0: Optional[str] = ""
    saved_at: str
