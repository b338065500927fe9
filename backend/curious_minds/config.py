import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    local_database_url: str = Field("sqlite:///data/curious_minds_cache.db", alias="CURIOUS_LOCAL_DATABASE_URL")
    local_database_echo: bool = Field(False, alias="CURIOUS_LOCAL_DATABASE_ECHO")
    supabase_url: Optional[str] = Field(None, alias="CURIOUS_SUPABASE_URL")
    supabase_anon_key: Optional[str] = Field(None, alias="CURIOUS_SUPABASE_ANON_KEY")
    remote_timeout_seconds: float = Field(15.0, gt=0, alias="CURIOUS_REMOTE_TIMEOUT_SECONDS")
    sync_page_size: int = Field(1000, ge=1, alias="CURIOUS_SYNC_PAGE_SIZE")
    sync_freshness_hours: int = Field(24, ge=0, alias="CURIOUS_SYNC_FRESHNESS_HOURS")
    sync_min_local_items: int = Field(100, ge=0, alias="CURIOUS_SYNC_MIN_LOCAL_ITEMS")
    question_push_batch_size: int = Field(1000, ge=1, alias="CURIOUS_QUESTION_PUSH_BATCH_SIZE")
    registry_push_batch_size: int = Field(500, ge=1, alias="CURIOUS_REGISTRY_PUSH_BATCH_SIZE")
    log_level: str = Field("INFO", alias="CURIOUS_LOG_LEVEL")
    debug_http: bool = Field(False, alias="CURIOUS_DEBUG_HTTP")
    sql_log_level: str = Field("WARNING", alias="CURIOUS_SQL_LOG_LEVEL")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True

    @property
    def remote_configured(self) -> bool:
        """Whether the remote store credentials look usable."""
        url = (self.supabase_url or "").strip()
        key = (self.supabase_anon_key or "").strip()
        if not url or not key:
            return False
        if not url.startswith("https://"):
            return False
        for value in (url, key):
            if value == "undefined" or "placeholder" in value:
                return False
        return True


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[arg-type]
    except ValidationError as exc:
        raise RuntimeError(f"Invalid backend configuration: {exc}") from exc
