from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional, ClassVar

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    data_root: Path = Field(default=Path(__file__).resolve().parents[1] / "data")

    # Completion backend
    llm_mode: Literal["openai", "mock"] = Field(default="openai")
    openai_api_key: Optional[str] = Field(default=None)
    openai_model: str = Field(default="gpt-4")
    openai_base_url: Optional[str] = Field(default=None)  # any OpenAI-compatible endpoint
    completion_max_tokens: int = Field(default=4000, ge=1)
    request_timeout_seconds: float = Field(default=10.0, gt=0)

    # Record store (Cloudflare D1)
    store_mode: Literal["d1", "memory"] = Field(default="d1")
    cf_account_id: Optional[str] = Field(default=None)
    cf_api_token: Optional[str] = Field(default=None)
    cf_database_id: Optional[str] = Field(default=None)
    cf_api_base: str = Field(default="https://api.cloudflare.com/client/v4")

    # Pipeline
    cycle_delay_seconds: float = Field(default=10.0, ge=0)
    cycle_timeout_seconds: Optional[float] = Field(default=None, gt=0)
    scout_max_attempts: Optional[int] = Field(default=None, ge=1)  # None = retry forever
    qa_review_chars: int = Field(default=3000, ge=1)

    log_level: str = Field(default="INFO")

    # Load the repo-root .env regardless of the process cwd.
    root_env: ClassVar[str] = str(Path(__file__).resolve().parents[1] / ".env")

    model_config = SettingsConfigDict(
        env_file=root_env,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def fallback_dir(self) -> Path:
        return self.data_root / "fallback"


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.data_root.mkdir(parents=True, exist_ok=True)
    return settings
