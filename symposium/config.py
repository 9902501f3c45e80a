"""Application configuration from environment variables."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Session key used when sessions are not partitioned by topic
DEFAULT_TOPIC_KEY = "__default__"


# =============================================================================
# Settings
# =============================================================================


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=62887, description="Bind port")
    sse_ping_seconds: float = Field(
        default=15.0, description="Keep-alive interval for event streams"
    )

    # Coordinator settings
    quiet_period_seconds: float = Field(
        default=0.5,
        description="Quiet period after the last registration before registration closes",
    )
    max_rounds: int = Field(
        default=4,
        description="Maximum rounds per participant (registration counts as round 1)",
    )
    inline_responses_on_submit: bool = Field(
        default=False,
        description="Return the full response list with every submit acknowledgement",
    )
    partition_by_topic: bool = Field(
        default=True,
        description="Keep one session per topic instead of one process-wide session",
    )

    @field_validator("quiet_period_seconds")
    @classmethod
    def positive_quiet_period(cls, v: float) -> float:
        """Reject a zero or negative debounce window."""
        if v <= 0:
            raise ValueError("quiet_period_seconds must be positive")
        return v

    @field_validator("max_rounds")
    @classmethod
    def at_least_one_round(cls, v: int) -> int:
        """Registration itself is round 1."""
        if v < 1:
            raise ValueError("max_rounds must be at least 1")
        return v

    def session_key(self, topic: str) -> str:
        """Get the registry key that a registration for ``topic`` joins."""
        return topic if self.partition_by_topic else DEFAULT_TOPIC_KEY


# =============================================================================
# Singleton
# =============================================================================


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
