"""
Configuration settings for the Activity Insights backend.
Uses pydantic-settings for type-safe environment variable management.
"""
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App Info
    app_name: str = "Activity Insights API"
    app_version: str = "1.0.0"
    git_commit: Optional[str] = None  # Git commit hash from environment
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./insights.db"

    # CORS - comma-separated list in environment variable
    # Example: CORS_ORIGINS="http://localhost:5173,http://localhost:8080"
    cors_origins_str: str = Field(
        default="http://localhost:5173,http://localhost:8080",
        validation_alias="CORS_ORIGINS"
    )

    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    # OpenAI (or any OpenAI-compatible endpoint, e.g. Groq)
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    # Optional model id from env (e.g., model_id=gpt-4o)
    model_id: Optional[str] = None
    llm_temperature: float = 0.2
    max_tool_iterations: int = 10

    # Strava
    strava_client_id: Optional[str] = None
    strava_client_secret: Optional[str] = None
    strava_access_token: Optional[str] = None
    strava_refresh_token: Optional[str] = None
    strava_api_url: str = "https://www.strava.com/api/v3"
    strava_token_url: str = "https://www.strava.com/oauth/token"
    strava_page_size: int = 200
    strava_request_timeout: float = 30.0

    # Activity cache
    activity_cache_ttl_seconds: float = 5 * 60  # 5 minutes

    # Pydantic v2 settings config
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars so unexpected keys don't crash
    )


# Global settings instance
settings = Settings()
