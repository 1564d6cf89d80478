"""Engine configuration."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    PROJECT_NAME: str = "Tag Normalization Engine"
    LOG_LEVEL: str = "INFO"

    # Similarity
    MAX_EDIT_DISTANCE: int = 3
    SIMILARITY_THRESHOLD: float = 0.7

    # Tokenizer / extractors
    MIN_TOKEN_LENGTH: int = 2
    MAX_VALUE_LENGTH: int = 256
    TITLE_MAX_WORDS: int = 3

    # Grouping
    CONFIDENCE_FLOOR: float = 0.1
    CONFIDENCE_WINDOW: float = 0.1

    # Optional JSON file overriding the built-in curated pattern table
    TAG_PATTERNS_PATH: Optional[str] = None


settings = Settings()
