from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Relational store backing the task table
    database_url: str = Field("sqlite:///./todolist.db")
    database_ssl: bool = Field(False)

    # "production" turns on the CORS allow-list and hides /api/init-db
    app_env: str = Field("development")
    cors_allow_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5500"],
    )

    host: str = Field("0.0.0.0")
    port: int = Field(10000)

    # 0 means the store is only probed once at startup
    store_probe_interval_sec: float = Field(30.0)

    log_level: str = Field("INFO")

    # Client side
    todo_api_url: str = Field("http://localhost:10000")
    todo_cache_path: str = Field("~/.todolist/cache.json")

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
