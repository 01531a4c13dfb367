from __future__ import annotations

import json
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, TypeVar

from pydantic import ValidationError as PydanticValidationError
from slugify import slugify

from notegen.core.errors import ValidationError
from notegen.core.logging_config import get_logger
from notegen.models.article_schemas import GenerationResult, Schema, TopicCandidate
from notegen.models.storage_schemas import HistoryItem, Template, TopicStockItem
from notegen.models.workflow_schemas import GenerationSettings

logger = get_logger(__name__)

T = TypeVar("T", bound=Schema)

MAX_HISTORY = 50


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id(prefix: str, label: str = "") -> str:
    parts = [prefix, str(int(time.time() * 1000))]
    if label:
        parts.append(slugify(label, max_length=40) or "item")
    parts.append(uuid.uuid4().hex[:6])
    return "-".join(parts)


class WorkflowDataManager:
    """
    Handles persistence for the generator: run history, reusable templates and the topic stock.

    Each list lives in its own JSON file under `data_dir`. A missing or corrupt file reads as an empty list.
    """

    HISTORY_FILE = "history.json"
    TEMPLATES_FILE = "templates.json"
    TOPIC_STOCK_FILE = "topic_stock.json"

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    # ── generic list storage ─────────────────────────────────────────────────

    def save_data(self, filename: str, items: List[Schema]) -> None:
        """Save a list of records to disk with proper serialization"""
        file_path = self.data_dir / filename
        payload = [item.model_dump(mode="json", by_alias=True) for item in items]
        file_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    def load_data(self, filename: str, output_model: type[T]) -> List[T]:
        """Load a list of records from disk with proper deserialization"""
        file_path = self.data_dir / filename

        if not file_path.exists():
            return []

        try:
            content = json.loads(file_path.read_text(encoding="utf-8"))
            if not isinstance(content, list):
                raise ValueError(f"expected a list, got {type(content).__name__}")
            return [output_model.model_validate(item) for item in content]
        except (ValueError, PydanticValidationError) as e:
            logger.warning("Could not load %s, starting empty: %s", file_path, e)
            return []

    # ── history ──────────────────────────────────────────────────────────────

    def list_history(self) -> List[HistoryItem]:
        return self.load_data(self.HISTORY_FILE, HistoryItem)

    def add_history_item(self, settings: GenerationSettings, result: GenerationResult) -> HistoryItem:
        item = HistoryItem(
            id=_new_id("hist", settings.keyword),
            keyword=settings.keyword,
            settings=settings.to_dict(),
            result=result,
            created_at=_now_iso(),
        )
        self.save_data(self.HISTORY_FILE, ([item] + self.list_history())[:MAX_HISTORY])
        return item

    def remove_history_item(self, item_id: str) -> None:
        self.save_data(self.HISTORY_FILE, [item for item in self.list_history() if item.id != item_id])

    def clear_history(self) -> None:
        self.save_data(self.HISTORY_FILE, [])

    # ── templates ────────────────────────────────────────────────────────────

    def list_templates(self) -> List[Template]:
        return self.load_data(self.TEMPLATES_FILE, Template)

    def add_template(self, name: str, header: str = "", footer: str = "") -> Template:
        name, header, footer = name.strip(), header.strip(), footer.strip()
        if not name or not (header or footer):
            raise ValidationError("a template needs a name and a header or footer")
        template = Template(id=_new_id("tmpl"), name=name, header=header, footer=footer, created_at=_now_iso())
        self.save_data(self.TEMPLATES_FILE, self.list_templates() + [template])
        return template

    def update_template(self, template_id: str, name: str, header: str = "", footer: str = "") -> Optional[Template]:
        updated = None
        templates = []
        for template in self.list_templates():
            if template.id == template_id:
                template = template.model_copy(
                    update={"name": name.strip(), "header": header.strip(), "footer": footer.strip()}
                )
                updated = template
            templates.append(template)
        self.save_data(self.TEMPLATES_FILE, templates)
        return updated

    def remove_template(self, template_id: str) -> None:
        self.save_data(self.TEMPLATES_FILE, [t for t in self.list_templates() if t.id != template_id])

    # ── topic stock ──────────────────────────────────────────────────────────

    def list_topics(self) -> List[TopicStockItem]:
        return self.load_data(self.TOPIC_STOCK_FILE, TopicStockItem)

    def add_topic_candidates(self, candidates: List[TopicCandidate]) -> List[TopicStockItem]:
        collected_at = _now_iso()
        new_items = [
            TopicStockItem(
                **candidate.model_dump(),
                id=_new_id("topic"),
                collected_at=collected_at,
                used=False,
            )
            for candidate in candidates
        ]
        self.save_data(self.TOPIC_STOCK_FILE, new_items + self.list_topics())
        return new_items

    def mark_topic_used(self, topic_id: str) -> None:
        self.save_data(
            self.TOPIC_STOCK_FILE,
            [t.model_copy(update={"used": True}) if t.id == topic_id else t for t in self.list_topics()],
        )

    def remove_topic(self, topic_id: str) -> None:
        self.save_data(self.TOPIC_STOCK_FILE, [t for t in self.list_topics() if t.id != topic_id])

    def clear_topics(self) -> None:
        self.save_data(self.TOPIC_STOCK_FILE, [])
