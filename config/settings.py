"""Pydantic Settings — typed configuration with .env auto-loading."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from config.llm_config import LLMConfig


class Settings(BaseSettings):
    """Application configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    service_port: int = 5000
    cors_origins: list[str] = ["*"]
    debug: bool = False
    log_level: str = "INFO"

    # ── LLM ──────────────────────────────────────────────────
    default_model: str = "openai/gpt-4o-mini"
    content_model: str = "openai/gpt-4o-mini"  # Grounded answers about slide content
    router_model: str = "openai/gpt-4o-mini"  # General-path resolution when no flag matches
    chat_model: str = "openai/gpt-4o-mini"  # General-purpose replies outside the presentation
    max_tokens: int = 1024
    max_concurrent_llm: int = 10

    # ── LLM Generation Defaults (all optional, None = model default) ──
    temperature: float | None = None
    top_p: float | None = None
    seed: int | None = None
    stop: list[str] | None = None

    # Provider API keys
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    dashscope_api_key: str = ""
    deepseek_api_key: str = ""

    # ── Presentation ─────────────────────────────────────────
    presentation_topic: str = "carvedilol"
    ui_refresh_interval: float = 5.0  # seconds between message refresh passes

    # ── Conversation Memory ──────────────────────────────────
    conversation_ttl: int = 1800  # seconds (30 min)
    conversation_cleanup_interval: int = 300

    # ── Helpers ───────────────────────────────────────────────

    def get_default_llm_config(self) -> LLMConfig:
        """Build an :class:`LLMConfig` from global .env defaults."""
        return LLMConfig(
            model=self.default_model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            top_p=self.top_p,
            seed=self.seed,
            stop=self.stop,
        )

    def model_settings_for(self, agent_config: LLMConfig) -> dict:
        """Global defaults overlaid with an agent's own config, as ``model_settings``."""
        return self.get_default_llm_config().merge(agent_config).to_model_settings()


@lru_cache
def get_settings() -> Settings:
    """Singleton accessor for application settings."""
    return Settings()
