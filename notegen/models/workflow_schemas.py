from dataclasses import asdict, dataclass
from typing import Literal, get_args

from notegen.core.errors import ValidationError

Tone = Literal["friendly", "polite", "professional"]
ReaderLevel = Literal["beginner", "intermediate", "advanced"]
Category = Literal["business", "technology", "lifestyle", "education", "entertainment"]

MIN_WORD_COUNT = 1000
MAX_WORD_COUNT = 20000


@dataclass(frozen=True)
class GenerationSettings:
    """User-chosen parameters for one pipeline run. Validated on construction."""

    keyword: str
    tone: Tone = "friendly"
    reader_level: ReaderLevel = "beginner"
    category: Category = "business"
    word_count: int = 5000
    image_theme: str = ""

    def __post_init__(self):
        if not isinstance(self.keyword, str) or not self.keyword.strip():
            raise ValidationError("keyword must be a non-empty string")
        for name, allowed in (
            ("tone", Tone),
            ("reader_level", ReaderLevel),
            ("category", Category),
        ):
            value = getattr(self, name)
            if value not in get_args(allowed):
                raise ValidationError(f"{name} must be one of {', '.join(get_args(allowed))}, got {value!r}")
        if not isinstance(self.word_count, int) or not MIN_WORD_COUNT <= self.word_count <= MAX_WORD_COUNT:
            raise ValidationError(
                f"word_count must be an integer between {MIN_WORD_COUNT} and {MAX_WORD_COUNT}, got {self.word_count!r}"
            )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "GenerationSettings":
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass(frozen=True)
class PipelineStep:
    name: str
    description: str
    running_message: str


@dataclass(frozen=True)
class StepEvent:
    step_index: int
    status: Literal["running", "done"]
    message: str
