import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from services.formatting import MAX_MESSAGE_LENGTH


class BotConfig(BaseModel):
    telegram_token: str

    @field_validator("telegram_token")
    @classmethod
    def token_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("telegram_token must not be empty")
        return value.strip()


class DatabaseConfig(BaseModel):
    path: str = "workout.db"


class SessionConfig(BaseModel):
    idle_timeout_seconds: int = Field(default=3600, gt=0)
    max_sessions: int = Field(default=10000, gt=0)


class HistoryConfig(BaseModel):
    max_message_length: int = Field(default=MAX_MESSAGE_LENGTH, gt=0, le=4096)


class Settings(BaseModel):
    bot: BotConfig
    database: DatabaseConfig = DatabaseConfig()
    sessions: SessionConfig = SessionConfig()
    history: HistoryConfig = HistoryConfig()

    @classmethod
    def load(cls, environment: Literal["local", "prod"], directory: str = ".") -> "Settings":
        """
        Load all configuration from ``config-<environment>.yaml``.

        A BOT_TOKEN environment variable overrides the token from the file.
        """
        path = Path(directory) / f"config-{environment}.yaml"
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        token = os.getenv("BOT_TOKEN")
        if token:
            data.setdefault("bot", {})["telegram_token"] = token
        return cls(**data)
