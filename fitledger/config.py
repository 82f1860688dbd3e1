"""Application configuration from environment variables (and .env file)."""

import tempfile
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CATALOG_PATH = Path(__file__).parent / "exercises.json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FITLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "FitLedger"
    database_url: str = "sqlite:///fitledger.db"
    log_level: str = "INFO"

    # Exercise catalog seed, synced by name on startup
    seed_catalog: bool = True
    catalog_path: Path = DEFAULT_CATALOG_PATH

    export_dir: Path = Path(tempfile.gettempdir())

    # Structural limits for generated workouts
    min_generated_exercises: int = 4
    max_generated_exercises: int = 8
    min_generated_sets: int = 3
    max_generated_sets: int = 4


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
