"""Application settings loaded from .env via pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration: values come from environment / .env file."""

    # App
    library_title: str = "GH Player"
    default_publisher: str = "Goalhanger"
    log_level: str = "INFO"

    # Database (credential store)
    db_path: str = "./data/autobrowse.db"

    # Content API
    page_size: int = 50
    content_api_connect_timeout: float = 5.0
    content_api_read_timeout: float = 15.0

    # Artwork
    artwork_connect_timeout: float = 7.0
    artwork_read_timeout: float = 7.0
    artwork_max_bytes: int = 6 * 1024 * 1024
    artwork_cache_max_bytes: int = 8 * 1024 * 1024
    artwork_max_dim_px: int = 512
    artwork_jpeg_quality: int = 85

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def db_abs_path(self) -> Path:
        """Return the database path as an absolute Path, creating parents if needed."""
        p = Path(self.db_path)
        p.parent.mkdir(parents=True, exist_ok=True)
        return p.resolve()


@lru_cache
def get_settings() -> Settings:
    """Cached singleton so .env is read only once."""
    return Settings()
