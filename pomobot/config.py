from __future__ import annotations

from pathlib import Path
from typing import Dict

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pomobot.services.pomodoro import PomodoroConfig


DEFAULT_COMMAND_PREFIXES: Dict[str, str] = {
    "help": "!help",
    "task_add": "!task add",
    "task_remove": "!task remove",
    "task_list": "!task list",
    "pomodoro_start": "!pomodoro start",
    "pomodoro_break": "!pomodoro break",
    "pomodoro_check": "!pomodoro check",
    "pomodoro_pause": "!pomodoro pause",
    "pomodoro_resume": "!pomodoro resume",
    "pomodoro_stop": "!pomodoro stop",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    BOT_TOKEN: str
    DATABASE_URL: str = "sqlite+aiosqlite:///pomodoro.db"
    LOG_LEVEL: str = "INFO"

    # Pomodoro durations; the clock has no hour rollover
    WORK_MINUTES: int = Field(default=25, ge=1, le=59)
    SHORT_BREAK_MINUTES: int = Field(default=5, ge=1, le=59)
    LONG_BREAK_MINUTES: int = Field(default=15, ge=1, le=59)

    PROGRESS_UPDATE_SECONDS: int = Field(default=60, ge=1)
    SESSION_IDLE_TTL_MINUTES: int = Field(default=60, ge=1)
    MAX_TASK_DESCRIPTION_LENGTH: int = Field(default=500, ge=1)

    COMMAND_PREFIXES: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_COMMAND_PREFIXES))

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent.parent / ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("COMMAND_PREFIXES")
    @classmethod
    def check_command_prefixes(cls, value: Dict[str, str]) -> Dict[str, str]:
        unknown = sorted(set(value) - set(DEFAULT_COMMAND_PREFIXES))
        if unknown:
            raise ValueError(f"unknown command(s) {unknown}, expected some of {sorted(DEFAULT_COMMAND_PREFIXES)}")
        empty = sorted(name for name, prefix in value.items() if not prefix.strip())
        if empty:
            raise ValueError(f"empty prefix for {empty}")
        return value

    @property
    def pomodoro_config(self) -> PomodoroConfig:
        return PomodoroConfig(
            work_minutes=self.WORK_MINUTES,
            short_break_minutes=self.SHORT_BREAK_MINUTES,
            long_break_minutes=self.LONG_BREAK_MINUTES,
        )

    def command_prefixes(self) -> Dict[str, str]:
        """Configured prefixes merged over the defaults, so partial overrides keep every command."""
        merged = dict(DEFAULT_COMMAND_PREFIXES)
        merged.update(self.COMMAND_PREFIXES)
        return merged


settings = Settings()
