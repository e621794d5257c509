"""
config/settings.py — socketbot Runtime Settings

Merges config.yaml (defaults/structure) with .env (secrets).
Pydantic-powered: all fields are validated and typed.

  - SlackConfig / EchoConfig / LoggingConfig reject bad values at parse time
  - validate_all() performs full startup validation and raises ConfigError
    with a clear, human-readable message listing every problem found
  - load_settings() respects SOCKETBOT_CONFIG env var as a fallback
    when no explicit config_path argument is given
"""

from __future__ import annotations

import os
import threading as _threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from socketbot.exceptions import ConfigError

__all__ = [
    "ConfigError",
    "Credentials",
    "EchoConfig",
    "LoggingConfig",
    "Settings",
    "SlackConfig",
    "get_settings",
    "load_settings",
]


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

DEFAULT_ECHO_TEMPLATE = "You said: ```{text}```"


# ─────────────────────────────────────────────────────────────────────────────
# Credentials
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Credentials:
    """
    The two Slack tokens, loaded once at startup.

    app_token authorizes apps.connections.open; bot_token authorizes
    chat.postMessage replies.
    """
    app_token: str
    bot_token: str

    def __repr__(self) -> str:
        return "Credentials(app_token=***, bot_token=***)"


# ─────────────────────────────────────────────────────────────────────────────
# Sub-models
# ─────────────────────────────────────────────────────────────────────────────

class SlackConfig(BaseModel):
    api_base_url: str = "https://slack.com/api"
    request_timeout_seconds: float = 10.0
    open_timeout_seconds: float = 10.0
    max_frame_bytes: int = 2**20

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("request_timeout_seconds", "open_timeout_seconds")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("slack timeouts must be > 0 seconds")
        return v

    @field_validator("max_frame_bytes")
    @classmethod
    def _sane_frame_size(cls, v: int) -> int:
        if v < 1024:
            raise ValueError("slack.max_frame_bytes must be >= 1024")
        return v


class EchoConfig(BaseModel):
    template: str = DEFAULT_ECHO_TEMPLATE

    @field_validator("template")
    @classmethod
    def _has_text_placeholder(cls, v: str) -> str:
        if "{text}" not in v:
            raise ValueError("echo.template must contain the '{text}' placeholder")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    log_dir: str = "./data/logs"
    max_file_size_mb: int = 100
    backup_count: int = 5
    console_output: bool = True
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def _valid_log_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"logging.level '{v}' is not valid. "
                f"Must be one of: {sorted(_VALID_LOG_LEVELS)}"
            )
        return upper

    @field_validator("max_file_size_mb")
    @classmethod
    def _positive_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("logging.max_file_size_mb must be >= 1")
        return v


# ─────────────────────────────────────────────────────────────────────────────
# Root Settings
# ─────────────────────────────────────────────────────────────────────────────

class Settings(BaseSettings):
    """
    socketbot runtime settings.

    Priority (highest to lowest):
      1. Environment variables
      2. .env file
      3. config.yaml
      4. Field defaults
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    # -- Secrets from .env ---------------------------------------------------
    slack_app_level_token: Optional[str] = Field(default=None, alias="SLACK_APP_LEVEL_TOKEN")
    slack_user_oauth_token: Optional[str] = Field(default=None, alias="SLACK_USER_OAUTH_TOKEN")

    # -- Structured config (from config.yaml) --------------------------------
    slack: SlackConfig = Field(default_factory=SlackConfig)
    echo: EchoConfig = Field(default_factory=EchoConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("slack_app_level_token", "slack_user_oauth_token", mode="before")
    @classmethod
    def _blank_token_is_missing(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("slack", mode="before")
    @classmethod
    def _coerce_slack(cls, v: Any) -> Any:
        return SlackConfig(**v) if isinstance(v, dict) else v

    @field_validator("echo", mode="before")
    @classmethod
    def _coerce_echo(cls, v: Any) -> Any:
        return EchoConfig(**v) if isinstance(v, dict) else v

    @field_validator("logging", mode="before")
    @classmethod
    def _coerce_logging(cls, v: Any) -> Any:
        return LoggingConfig(**v) if isinstance(v, dict) else v

    # -- Convenience properties ----------------------------------------------

    @property
    def log_level(self) -> str:
        return self.logging.level.upper()

    @property
    def log_dir(self) -> Path:
        return Path(self.logging.log_dir)

    @property
    def log_json_format(self) -> bool:
        return self.logging.json_format

    @property
    def log_console_output(self) -> bool:
        return self.logging.console_output

    @property
    def log_max_bytes(self) -> int:
        return self.logging.max_file_size_mb * 1024 * 1024

    def missing_credentials(self) -> list[str]:
        """Return the env var names of every missing Slack token."""
        missing = []
        if not self.slack_app_level_token:
            missing.append("SLACK_APP_LEVEL_TOKEN")
        if not self.slack_user_oauth_token:
            missing.append("SLACK_USER_OAUTH_TOKEN")
        return missing

    def credentials(self) -> Credentials:
        """Return the immutable token pair. Raises ConfigError if incomplete."""
        missing = self.missing_credentials()
        if missing:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        return Credentials(
            app_token=self.slack_app_level_token,  # type: ignore[arg-type]
            bot_token=self.slack_user_oauth_token,  # type: ignore[arg-type]
        )

    def validate_all(self) -> None:
        """
        Full startup validation. Raises ConfigError listing every problem found.

        Pydantic field validators catch type/value errors at parse time;
        this method catches what only makes sense once everything is
        merged (token presence, token kind, URL scheme).
        """
        errors: list[str] = []

        # ── Tokens ───────────────────────────────────────────────────────────
        for env_name in self.missing_credentials():
            errors.append(f"{env_name} must be set in the environment or your .env file.")

        app_token = self.slack_app_level_token
        if app_token and not app_token.startswith("xapp-"):
            errors.append(
                "SLACK_APP_LEVEL_TOKEN does not look like an app-level token "
                "(expected the 'xapp-' prefix). Generate one with the "
                "connections:write scope."
            )

        # ── API base URL ─────────────────────────────────────────────────────
        if not self.slack.api_base_url.startswith(("https://", "http://")):
            errors.append(
                f"slack.api_base_url '{self.slack.api_base_url}' must start "
                f"with https:// or http://."
            )

        # ── Report all errors together ───────────────────────────────────────
        if errors:
            numbered = "\n".join(f"  {i+1}. {e}" for i, e in enumerate(errors))
            raise ConfigError(
                f"\n\nsocketbot startup failed: {len(errors)} configuration "
                f"problem(s) found:\n\n{numbered}\n\n"
                f"Fix the issues above in config/config.yaml or your .env file "
                f"and restart.\n"
            )


# ─────────────────────────────────────────────────────────────────────────────
# Loader + singleton
# ─────────────────────────────────────────────────────────────────────────────

_KNOWN_SECTIONS = {"slack", "echo", "logging"}

_singleton: Optional[Settings] = None
_singleton_lock = _threading.Lock()


def _load_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _resolve_config_path(config_path: str | Path | None) -> Path:
    """
    Resolve the config file path with this priority:
      1. Explicit config_path argument (from --config CLI flag)
      2. SOCKETBOT_CONFIG environment variable
      3. Default: config/config.yaml
    """
    if config_path is not None:
        return Path(config_path)
    env_path = os.environ.get("SOCKETBOT_CONFIG")
    if env_path:
        return Path(env_path)
    return Path("config/config.yaml")


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings by merging config.yaml with environment variables."""
    global _singleton
    yaml_data = _load_yaml(_resolve_config_path(config_path))
    init_kwargs = {k: v for k, v in yaml_data.items() if k in _KNOWN_SECTIONS}

    instance = Settings(**init_kwargs)
    with _singleton_lock:
        _singleton = instance
    return instance


def get_settings() -> Settings:
    """
    Return the global Settings singleton, loading it from the default
    config path on first use.
    """
    global _singleton
    if _singleton is not None:
        return _singleton
    with _singleton_lock:
        if _singleton is None:
            _singleton = Settings(**{
                k: v for k, v in _load_yaml(_resolve_config_path(None)).items()
                if k in _KNOWN_SECTIONS
            })
        return _singleton
