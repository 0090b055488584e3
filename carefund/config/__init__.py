"""
Application Settings
Load from environment variables
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Directory holding sources.yml, cities.yml, occupations.yml, plans.yml.
    # Empty means the repository's config/ directory.
    CONFIG_DIR: str = ""

    # ======================
    # External data sources
    # ======================
    OPENWEATHER_API_KEY: Optional[str] = None
    AQICN_API_KEY: Optional[str] = None
    NEWS_API_KEY: Optional[str] = None

    # ======================
    # Narrative enrichment
    # ======================
    NARRATIVE_ENABLED: bool = True
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TIMEOUT_SECONDS: float = 30.0

    # ======================
    # Cache
    # ======================
    CACHE_SWEEP_INTERVAL_SECONDS: int = 300

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="forbid",
    )


settings = Settings()
