from functools import lru_cache
from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    server_port: int = 8000
    # Allow both localhost and 127.0.0.1 for local development
    allowed_origins: List[AnyHttpUrl] = [
        "http://localhost:5000",
        "http://127.0.0.1:5000",
    ]  # type: ignore
    log_level: str = "INFO"

    # Storage: SQLite by default, or the in-process store when memory_mode is set
    database_url: str = "sqlite+aiosqlite:///./dreambees.db"
    memory_mode: bool = False

    # fal.ai credentials; either variable name is accepted
    fal_key: Optional[str] = None
    fal_api_key: Optional[str] = None
    fal_run_url: str = "https://fal.run"
    fal_storage_url: str = "https://rest.alpha.fal.ai"
    fal_model: str = "fal-ai/flux-pro/kontext"
    edit_timeout_seconds: float = 300.0

    max_upload_bytes: int = 10 * 1024 * 1024

    # pydantic-settings v2 style config: load env from both ../.env (repo root) and .env
    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=("../.env", ".env"),
        extra="ignore",  # ignore env vars not defined as fields
    )

    @property
    def fal_credentials(self) -> Optional[str]:
        return self.fal_key or self.fal_api_key or None


@lru_cache()
def get_settings() -> Settings:
    return Settings()
