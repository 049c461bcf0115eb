"""
Application configuration management
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field("WARNING", description="Root log level")

    # AI Model Configuration
    ai_model: str = Field("", description="Model flag, e.g. 'anthropic:claude-sonnet-4-6'")
    ai_temperature: float = Field(0.2, description="Sampling temperature")
    ai_max_tokens: int = Field(4096, description="Max response tokens")
    ai_retries: int = Field(3, description="Attempts for transient provider errors")
    ai_request_timeout: float = Field(180.0, description="Per-request timeout in seconds")

    # Anthropic Configuration
    anthropic_api_key: Optional[str] = None
    anthropic_model_name: str = "claude-sonnet-4-6"
    anthropic_base_url: Optional[str] = None

    # OpenAI Configuration
    openai_api_key: Optional[str] = None
    openai_model_name: str = "gpt-4o"
    openai_base_url: Optional[str] = None

    # Output limits
    max_issues: int = Field(50, description="Issues kept after truncation")
    max_questions: int = Field(20, description="Questions kept after truncation")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and check the log level name"""
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level

    @field_validator("ai_temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        """Temperature must be within the range the vendor APIs accept"""
        if not 0.0 <= v <= 2.0:
            raise ValueError("ai_temperature must be between 0.0 and 2.0")
        return v

    @field_validator("ai_retries", "ai_max_tokens", "max_issues", "max_questions")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Counts must be at least 1"""
        if v < 1:
            raise ValueError("value must be >= 1")
        return v

    def __repr__(self) -> str:
        """Secure representation that doesn't expose secrets"""
        return (
            f"<{self.__class__.__name__} ai_model={self.ai_model or '(auto)'} "
            f"log_level={self.log_level}>"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance"""
    return Settings()
