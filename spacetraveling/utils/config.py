"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root, so the .env file is found regardless of the working directory
_PROJECT_ROOT = Path(__file__).parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Prismic
    prismic_api_endpoint: str = Field(
        default="https://spacetraveling.cdn.prismic.io/api/v2",
        description="Prismic repository API v2 endpoint",
    )
    prismic_access_token: str = Field(default="", description="Prismic access token")
    prismic_document_type: str = Field(default="posts", description="Custom type of blog posts")
    prismic_timeout: float = Field(default=10.0, description="HTTP timeout in seconds")

    # Mock Mode (for running without a Prismic repository)
    use_mock_prismic: bool = Field(
        default=False, description="Use in-memory sample posts instead of Prismic"
    )

    # Listing
    posts_page_size: int = Field(default=1, ge=1, description="Posts per listing page")

    # Presentation
    words_per_minute: int = Field(default=150, gt=0, description="Reading speed for estimates")
    date_locale: str = Field(default="pt_BR", description="Locale for publication dates")
    missing_date_label: str = Field(
        default="Não publicado", description="Shown when a post has no publication date"
    )

    # Static generation
    revalidate_seconds: int = Field(
        default=60 * 60 * 24, description="Seconds before the listing page is regenerated"
    )
    build_concurrency: int = Field(default=4, ge=1, description="Parallel fetches during build")
    build_output_dir: str = Field(default="out", description="Static export directory")
    prerender_on_startup: bool = Field(
        default=True, description="Render the listing and known posts when the server starts"
    )
    page_cache_size: int = Field(
        default=1000, ge=1, description="Rendered routes kept in memory by the server"
    )

    # Server
    host: str = Field(default="127.0.0.1", description="Bind host for `serve`")
    port: int = Field(default=3000, description="Bind port for `serve`")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
