"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables.
See .env.example for required variables.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant engaged in a voice conversation. "
    "Keep responses concise and natural."
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # ==========================================================================
    # API Keys
    # ==========================================================================
    deepgram_api_key: SecretStr = Field(description="Deepgram API key for STT")
    groq_api_key: SecretStr = Field(description="Groq API key for LLM")
    elevenlabs_api_key: SecretStr | None = Field(
        default=None, description="ElevenLabs API key for TTS and the voice catalog"
    )
    firecrawl_api_key: SecretStr | None = Field(
        default=None, description="Firecrawl API key for website crawling"
    )

    # ==========================================================================
    # Database
    # ==========================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/agentvox.db",
        description="SQLAlchemy async database URL",
    )

    # ==========================================================================
    # Application
    # ==========================================================================
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Deployment environment"
    )
    provider_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout applied to every outbound provider HTTP call",
    )

    # ==========================================================================
    # Transcription (Deepgram)
    # ==========================================================================
    deepgram_url: str = Field(
        default="https://api.deepgram.com/v1/listen",
        description="Deepgram pre-recorded transcription endpoint",
    )
    deepgram_encoding: str = Field(default="webm", description="Audio container/encoding")
    deepgram_mimetype: str = Field(
        default="audio/webm;codecs=opus",
        description="Content-Type sent with each audio chunk",
    )
    deepgram_language: str = Field(default="en-US", description="Transcription language")
    deepgram_sample_rate: int = Field(
        default=48000, description="Sample rate of browser opus audio"
    )

    # ==========================================================================
    # Completion (Groq)
    # ==========================================================================
    llm_model: str = Field(
        default="llama-3.3-70b-versatile",
        description="Chat completion model",
    )
    default_system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="System message that opens every conversation context",
    )
    use_agent_system_prompt: bool = Field(
        default=False,
        description="Use the agent's own system prompt instead of the default one",
    )
    context_max_messages: int | None = Field(
        default=None,
        ge=1,
        description="Max messages sent to the LLM per turn (None = whole context)",
    )

    # ==========================================================================
    # Synthesis (ElevenLabs)
    # ==========================================================================
    elevenlabs_url: str = Field(
        default="https://api.elevenlabs.io/v1",
        description="ElevenLabs REST base URL (voice catalog)",
    )
    elevenlabs_model_id: str = Field(
        default="eleven_monolingual_v1",
        description="ElevenLabs model ID",
    )
    default_voice_stability: float = Field(default=0.75, ge=0.0, le=1.0)
    default_voice_similarity_boost: float = Field(default=0.75, ge=0.0, le=1.0)

    # ==========================================================================
    # Website Crawling (Firecrawl)
    # ==========================================================================
    firecrawl_url: str = Field(
        default="https://api.firecrawl.io/v1/crawl",
        description="Firecrawl crawl endpoint",
    )
    crawl_default_depth: int = Field(default=2, ge=1)
    crawl_default_max_pages: int = Field(default=10, ge=1)
    crawl_default_selector: str = Field(default="article, p, h1, h2, h3, h4, h5, h6")

    # ==========================================================================
    # Derived Properties
    # ==========================================================================
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Use dependency injection in FastAPI:
        settings: Settings = Depends(get_settings)
    """
    return Settings()  # type: ignore[call-arg]  # loads from env
