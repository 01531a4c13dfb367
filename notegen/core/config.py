import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from notegen.core.errors import ConfigurationError

# Values shipped in example .env files; treated the same as a missing key.
PLACEHOLDER_VALUES = {
    "",
    "your_openai_api_key",
    "your_tavily_api_key",
    "paste-your-key-here",
}


def _is_missing(value: Optional[str]) -> bool:
    return value is None or value.strip() in PLACEHOLDER_VALUES


@dataclass(frozen=True)
class Config:
    """
    Configuration for the note generator.

    A Config is an explicit value: build one per process (or per tenant) and
    hand it to the model client and collaborators when they are constructed.
    Nothing in the package reads environment variables after this point.

    Usage:
    1. Put your keys in a .env.local or .env file at the project root.
       Example content:
       OPENAI_API_KEY="sk-..."
       TAVILY_API_KEY="tvly-..."
       MODEL_NAME="gpt-4.1-mini"

    2. Build the config:
       `config = Config.from_env()`

    3. Fail fast on missing keys where a run needs them:
       `config.validate_config()`
       This raises ConfigurationError naming every missing key.

    4. To show the model settings:
       `config.get_model_config()`
    """

    # API Keys
    OPENAI_API_KEY: Optional[str] = None
    TAVILY_API_KEY: Optional[str] = None

    # Model configuration
    MODEL_NAME: str = "gpt-4.1-mini"
    TEMPERATURE: float = 0.8
    TOPIC_TEMPERATURE: float = 0.7

    # Logging
    LOGGING_LEVEL: str = "INFO"

    # Storage
    DATA_DIR: Path = field(default_factory=lambda: Path("data"))
    X_COOKIE_PATH: Path = field(default_factory=lambda: Path("data/.x-cookies.json"))
    X_DEBUG_DIR: Path = field(default_factory=lambda: Path("data/.x-debug"))
    DEBUG_SCRAPER: bool = False

    # Pacing for the steps that make no external call
    STEP_PAUSE_SECONDS: float = 0.5

    @classmethod
    def from_env(cls) -> "Config":
        """Load .env.local then .env, and build a Config from the environment."""
        load_dotenv(".env.local")
        load_dotenv()
        data_dir = Path(os.getenv("DATA_DIR", "data"))
        return cls(
            OPENAI_API_KEY=os.getenv("OPENAI_API_KEY"),
            TAVILY_API_KEY=os.getenv("TAVILY_API_KEY"),
            MODEL_NAME=os.getenv("MODEL_NAME", "gpt-4.1-mini"),
            TEMPERATURE=float(os.getenv("TEMPERATURE", "0.8")),
            LOGGING_LEVEL=os.getenv("LOGGING_LEVEL", "INFO"),
            DATA_DIR=data_dir,
            X_COOKIE_PATH=Path(os.getenv("X_COOKIE_PATH", str(data_dir / ".x-cookies.json"))),
            X_DEBUG_DIR=Path(os.getenv("X_DEBUG_DIR", str(data_dir / ".x-debug"))),
            DEBUG_SCRAPER=os.getenv("DEBUG_SCRAPER", "false").lower() == "true",
            STEP_PAUSE_SECONDS=float(os.getenv("STEP_PAUSE_SECONDS", "0.5")),
        )

    @property
    def has_tavily_key(self) -> bool:
        return not _is_missing(self.TAVILY_API_KEY)

    def validate_config(self, required_keys: tuple[str, ...] = ("OPENAI_API_KEY",)) -> bool:
        """Validate that required configuration is present."""
        missing_keys = [key for key in required_keys if _is_missing(getattr(self, key))]

        if missing_keys:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing_keys)}")

        return True

    def get_model_config(self) -> dict:
        """Get all model configurations as a dictionary."""
        return {
            "model": self.MODEL_NAME,
            "temperature": self.TEMPERATURE,
            "topic_temperature": self.TOPIC_TEMPERATURE,
            "logging_level": self.LOGGING_LEVEL,
        }
