import os
from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def default_data_dir() -> Path:
    base = os.environ.get("XDG_DATA_HOME") or os.path.join(Path.home(), ".local", "share")
    return Path(base) / "weekboard"


def default_database_url() -> str:
    return f"sqlite:///{default_data_dir() / 'weekboard.db'}"


class Settings(BaseSettings):
    database_url: str = ""
    log_level: LogLevel = "WARNING"

    # terminal board
    alt_screen: bool = True
    color: Literal["auto", "always", "never"] = "auto"

    # load .env, ignore unknown keys so new vars don't break boot
    model_config = SettingsConfigDict(
        env_prefix="WEEKBOARD_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

    @property
    def resolved_database_url(self) -> str:
        return self.database_url or default_database_url()

    @property
    def color_enabled(self) -> bool:
        if self.color == "never" or os.environ.get("NO_COLOR") is not None:
            return False
        if self.color == "always":
            return True
        return os.isatty(1)


def get_settings(**overrides) -> Settings:
    return Settings(**overrides)
