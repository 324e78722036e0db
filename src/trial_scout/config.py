"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # API Keys
    anthropic_api_key: str = ""
    openfda_api_key: str = ""
    similarity_api_key: str = ""

    # LLM Settings
    llm_base_url: str | None = None
    llm_model: str = "claude-sonnet-4-6"
    llm_max_tokens: int = 4096

    # Similarity Settings
    similarity_backend: Literal["remote", "local"] = "remote"
    similarity_url: str = "https://llmfoundry.straive.com/similarity"
    similarity_model: str = "text-embedding-3-small"
    embedding_model: str = "FremyCompany/BioLORD-2023"

    # HTTP Settings
    request_timeout: float | None = None

    # App Settings
    debug: bool = False
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
