from __future__ import annotations

import os
from functools import lru_cache
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MOCK_SERVER__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    fixture_path: str = Field(default="db.json")
    static_dir: str = Field(default="public")
    id_field: str = Field(default="id")
    foreign_key_suffix: str = Field(default="Id")

    read_only: bool = Field(default=False)
    no_cors: bool = Field(default=False)
    no_gzip: bool = Field(default=False)
    no_cache: bool = Field(default=False)
    cors_origins: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["*"])

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors(cls, value: str | List[str]) -> List[str]:
        if isinstance(value, str):
            if not value:
                return []
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("fixture_path", "static_dir")
    @classmethod
    def expand_user_paths(cls, value: str) -> str:
        return os.path.expanduser(value)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
