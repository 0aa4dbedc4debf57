"""Application configuration using Pydantic Settings."""

from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from config.calibration import RankingCalibration

# NOTE: logfire.configure() is not called here. Logfire is configured once at
# application startup (main.py via observability/logfire_config.py) or in the
# pytest hooks (conftest.py).


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Nothing here is required at import time: a missing OPENAI_API_KEY only
    surfaces as a ConfigurationError when a model call is attempted.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    environment: str = Field(default="development", description="Environment: development, staging, production")
    debug: bool = Field(default=False, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # CORS Settings
    allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins"
    )

    # Generative text service
    openai_api_key: str = Field(default="", description="OpenAI API key")
    openai_model_default: str = Field(default="gpt-5.2", description="Default model name")
    openai_model_high: str = Field(default="", description="Model for high-tier tasks (falls back to default)")

    llm_timeout_seconds: float = Field(default=120.0, gt=0, description="Per-attempt timeout for one completion call")
    llm_max_attempts: int = Field(default=3, ge=1, le=6, description="Attempts per call on transient upstream failures")
    llm_retry_base_delay: float = Field(default=1.0, ge=0, description="First backoff delay in seconds (doubles per attempt)")

    # Flow generation
    flow_candidate_count: int = Field(default=6, ge=3, le=12, description="Candidates requested per generation")
    flow_min_candidates: int = Field(default=3, ge=1, description="Minimum valid candidates required to continue")
    flow_generation_max_tokens: int = Field(default=7000, description="Max output tokens for candidate generation")
    flow_roleplay_max_tokens: int = Field(default=2600, description="Max output tokens for roleplay evaluation")
    prompt_render_max_tokens: int = Field(default=1200, description="Max output tokens for one message render")

    calibration: RankingCalibration = Field(
        default_factory=RankingCalibration,
        description="Ranking coefficients and gate thresholds (override with CALIBRATION__<FIELD>)"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Observability
    logfire_token: str = Field(default="", description="Logfire observability token")

    @field_validator("allowed_origins")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"


# Create a singleton instance
settings = Settings()


def get_settings() -> "Settings":
    """Return the singleton settings instance."""
    return settings
