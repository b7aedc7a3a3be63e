"""
RenderWatch Configuration Module.

Centralizes all configuration settings using Pydantic Settings.
Requires Python 3.11+.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file into os.environ at module import time
# so nested BaseSettings classes can read the values
_env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    load_dotenv()


class CompilerSettings(BaseSettings):
    """Template compilation settings."""

    model_config = SettingsConfigDict(env_prefix="COMPILER_")

    input: str | None = Field(
        default=None,
        description="Directory prefix stripped from sources and used for the watch pattern",
    )
    output: str | list[str] = Field(
        default_factory=list,
        description="Output root(s); one output file is written per root",
    )
    default_ext: str = Field(default="html", min_length=1)
    auto_append_file_ext: bool = Field(default=False)
    template_ext: str = Field(default="j2", min_length=1, description="Template suffix")
    render_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Opaque options forwarded to the render engine",
    )
    compile_on_start: bool = Field(default=False)
    isolate_write_errors: bool = Field(default=True)

    @field_validator("output", mode="before")
    @classmethod
    def parse_output(cls, v: str | list[str] | None) -> list[str]:
        """Parse output roots from comma-separated string or list."""
        if v is None:
            return []
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return list(v)

    @field_validator("template_ext", "default_ext")
    @classmethod
    def strip_leading_dot(cls, v: str) -> str:
        """Accept ".j2" as well as "j2"."""
        return v.lstrip(".")


class NotificationSettings(BaseSettings):
    """Failure notification settings."""

    model_config = SettingsConfigDict(env_prefix="NOTIFICATIONS_")

    enabled: bool = Field(
        default=True,
        description="When false, compile every source once instead of watching",
    )


class LiveReloadSettings(BaseSettings):
    """Reserved for a companion live-reload server."""

    model_config = SettingsConfigDict(env_prefix="LIVERELOAD_")

    port: int = Field(default=3111, ge=1, le=65535)


class WatcherSettings(BaseSettings):
    """File watcher configuration settings."""

    model_config = SettingsConfigDict(env_prefix="WATCHER_")

    debounce_delay_ms: int = Field(default=200, ge=100, le=5000)
    recursive: bool = Field(default=True)
    enabled: bool = Field(
        default=True,
        description="When false, compile every source once instead of watching",
    )

    ignore_patterns: list[str] = Field(
        default=[
            ".git",
            ".venv",
            "venv",
            ".idea",
            ".vscode",
            "node_modules",
            "__pycache__",
            "*.swp",
            "*~",
            ".#*",
        ],
        description="Glob patterns or substrings ignored by the watcher",
    )

    @field_validator("ignore_patterns", mode="before")
    @classmethod
    def parse_ignore_patterns(cls, v: str | list[str]) -> list[str]:
        """Parse ignore patterns from comma-separated string or list."""
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="console")  # "json" or "console"
    file_path: Path | None = Field(default=None)


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="RenderWatch")
    app_version: str = Field(default="0.1.0")

    compiler: CompilerSettings = Field(default_factory=CompilerSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    livereload: LiveReloadSettings = Field(default_factory=LiveReloadSettings)
    watcher: WatcherSettings = Field(default_factory=WatcherSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance of Settings. Components receive what they
    need from it at construction time instead of calling this directly.
    """
    return Settings()

