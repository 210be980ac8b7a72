"""
Application Settings
Load from environment variables
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 5000
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

    # ======================
    # Storage
    # ======================
    PROFILES_DIR: str = "profiles"

    # ======================
    # Market Data
    # ======================
    INSTRUMENTS_CONFIG: str = "config/instruments.yml"
    FRED_API_KEY: Optional[str] = None
    FRED_API_BASE_URL: str = "https://api.stlouisfed.org/fred"
    HTTP_TIMEOUT_SECONDS: float = 30.0
    HISTORY_LOOKBACK_DAYS: int = 1840
    QUOTE_FAIL_FAST: bool = False

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="forbid",
    )


settings = Settings()
