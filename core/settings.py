"""Runtime settings loaded from the environment and ``.env``."""

from __future__ import annotations

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from content.base import ProviderConfig
from match_engine.executor import MATCH_DELAY_SECONDS, MISMATCH_DELAY_SECONDS

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://localhost:3000",
)


class Settings(BaseSettings):
    """Application settings.

    Game settings use the ``MEMORY_MATCH_`` prefix; API keys and the
    production frontend URL keep their conventional names.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MEMORY_MATCH_",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    provider: str = "gemini"
    gemini_api_key: str | None = Field(
        None, validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY", "gemini_api_key")
    )
    anthropic_api_key: str | None = Field(
        None, validation_alias=AliasChoices("ANTHROPIC_API_KEY", "anthropic_api_key")
    )

    # Settle time after a matching pair / time both faces stay visible after a miss
    match_delay_ms: int = Field(int(MATCH_DELAY_SECONDS * 1000), ge=0)
    mismatch_delay_ms: int = Field(int(MISMATCH_DELAY_SECONDS * 1000), ge=0)

    # Production frontend URL, allowed alongside the local dev origins
    frontend_url: str | None = Field(
        None, validation_alias=AliasChoices("FRONTEND_URL", "frontend_url")
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = False

    @field_validator("provider")
    @classmethod
    def _normalize_provider(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def cors_origins(self) -> tuple[str, ...]:
        if self.frontend_url:
            return DEFAULT_CORS_ORIGINS + (self.frontend_url,)
        return DEFAULT_CORS_ORIGINS

    @property
    def match_delay(self) -> float:
        return self.match_delay_ms / 1000

    @property
    def mismatch_delay(self) -> float:
        return self.mismatch_delay_ms / 1000

    def provider_config(self, provider: str | None = None) -> ProviderConfig:
        """Provider configuration carrying the matching API key."""
        name = (provider or self.provider).lower()
        if name == "gemini":
            return ProviderConfig(api_key=self.gemini_api_key)
        if name in ("anthropic", "claude"):
            return ProviderConfig(api_key=self.anthropic_api_key)
        return ProviderConfig()
