"""Application settings loaded from environment variables."""
from typing import List, Optional
from pathlib import Path
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Houselyzer"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = ["http://localhost:8081", "http://localhost:19006"]
    # Database
    database_url: str = "sqlite+aiosqlite:///./houselyzer.db"
    api_key: str = ""

    # Page fetching
    browser_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )
    request_timeout: int = 30
    fetch_max_retries: int = 2
    proxy_api_key: str = ""
    proxy_endpoint: str = "http://api.scraperapi.com"

    # Extraction service, as seen by the importer
    extraction_service_url: Optional[str] = None
    extraction_service_key: str = ""

    # AI / GenAI
    google_genai_api_key: str = ""
    google_genai_model: str = "gemini-2.5-flash"
    google_genai_temperature: float = 0.1
    ai_max_content_chars: int = 8000

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v):
        if not v.startswith(('postgresql+asyncpg://', 'sqlite+aiosqlite://')):
            raise ValueError('database_url must use async driver')
        return v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            import json
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        if not v:
            import warnings
            warnings.warn(
                "API_KEY is not configured; protected endpoints will reject every request.",
                stacklevel=2,
            )
        return v


settings = Settings()
