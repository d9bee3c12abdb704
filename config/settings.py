from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Literal
from pathlib import Path

from exceptions import ConfigurationMissing


PLACEHOLDER_KEYS = {
    "your_gemini_api_key_here",
    "your_api_key_here",
    "changeme",
    "none",
    "null",
}


def is_placeholder_key(key: Optional[str]) -> bool:
    """True when a credential is empty or an unedited template value."""
    if key is None:
        return True
    normalized = key.strip().lower()
    if not normalized:
        return True
    return normalized in PLACEHOLDER_KEYS or normalized.startswith("your_")


class Settings(BaseSettings):
    """Engine configuration with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    # Upstream credential; may be absent, in which case every call falls back
    llm_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("llm_api_key", "LLM_API_KEY", "GEMINI_API_KEY", "OPENAI_API_KEY"),
    )

    # Upstream service (OpenAI-compatible endpoint)
    llm_model: str = Field(default="gemini-2.0-flash")
    llm_base_url: str = Field(default="https://generativelanguage.googleapis.com/v1beta/openai/")

    # Generation parameters, fixed per deployment
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_p: float = Field(default=0.9, gt=0.0, le=1.0)
    top_k: int = Field(default=40, ge=1, le=200)
    max_output_tokens: int = Field(default=2048, ge=64, le=8192)
    timeout: int = Field(default=60, ge=5, le=120)

    # Retry-then-fallback policy; 0 means a single attempt
    upstream_retries: int = Field(default=0, ge=0, le=5)
    retry_backoff: float = Field(default=1.0, ge=0.0, le=30.0)

    # Note retrieval
    notes_analysis_limit: int = Field(default=10, ge=1, le=100)
    chat_notes_limit: int = Field(default=5, ge=0, le=50)
    summary_days: int = Field(default=30, ge=1, le=365)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_file: Optional[Path] = Field(default=Path("engine.log"))

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    def upstream_configured(self) -> bool:
        key = self.llm_api_key.get_secret_value() if self.llm_api_key else None
        return not is_placeholder_key(key)

    def api_key(self) -> str:
        """
        Return the usable upstream key.

        Raises:
            ConfigurationMissing: If the key is absent or a placeholder
        """
        if not self.upstream_configured():
            raise ConfigurationMissing("Upstream API key is not configured")
        return self.llm_api_key.get_secret_value().strip()
