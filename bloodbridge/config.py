from __future__ import annotations

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]
ENV_FILES = [BASE_DIR / ".env.local", BASE_DIR / ".env"]
DATA_DIR = Path(__file__).resolve().parent / "data"


class Settings(BaseSettings):
    api_base_url: str = "http://localhost:5001"
    api_timeout_s: float = 10.0
    cors_origins: List[str] = ["*"]
    session_cookie_name: str = "token"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=[str(path) for path in ENV_FILES],
        case_sensitive=False,
        env_prefix="",
    )


def get_settings() -> Settings:
    return Settings()


settings = get_settings()
