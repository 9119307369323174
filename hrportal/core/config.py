"""
Application configuration

Environment variables and application settings managed with pydantic-settings
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
import json

# Project root (the directory holding pyproject.toml)
BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "XLSMART-HR-Portal"
    app_env: str = "development"
    debug: bool = True

    # Database
    database_url: str = f"sqlite+aiosqlite:///{BASE_DIR / 'data' / 'hrportal.db'}"

    # CORS
    cors_origins: List[str] = ["*"]

    # LLM (any OpenAI-compatible chat completion endpoint, e.g. a LiteLLM proxy)
    llm_model: str = "azure/gpt-4.1"
    llm_api_key: str = ""
    llm_base_url: str = "https://proxyllm.ximplify.id/v1"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 3000
    llm_timeout: int = 120
    llm_max_concurrency: int = 5
    llm_rate_limit: int = 60

    # Auth (bearer tokens issued by the identity platform)
    auth_jwt_secret: str = ""
    auth_jwt_algorithm: str = "HS256"
    system_user_id: str = "00000000-0000-0000-0000-000000000000"

    # Bulk jobs and progress polling
    bulk_batch_delay: float = 1.0
    poll_interval: float = 2.0
    poll_timeout: float = 300.0

    # Prompts
    prompt_hot_reload: Optional[bool] = None

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("database_url", mode="before")
    @classmethod
    def fix_database_path(cls, v):
        if isinstance(v, str) and "./data/" in v:
            return v.replace("./data/", str(BASE_DIR / "data") + "/")
        return v

    @property
    def is_development(self) -> bool:
        """Running in development"""
        return self.app_env == "development"


@lru_cache
def get_settings() -> Settings:
    """Settings singleton"""
    return Settings()


settings = get_settings()
