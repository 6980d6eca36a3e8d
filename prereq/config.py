"""Configuration loading from YAML and environment.

Secrets (GitHub token, webhook secret) are taken from environment variables
or from files (Docker secrets). Never put real tokens in config files
committed to the repo.
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


# Injected by load_config so properties can read env/file
_current_env: dict[str, str] = {}

_PLACEHOLDERS = ("your-token-here", "your-webhook-secret-here")


def _is_real_value(value: str | None) -> bool:
    return bool(value) and not value.startswith("$") and value not in _PLACEHOLDERS


class BotConfig(BaseSettings):
    """Check run identity and evaluation limits."""

    model_config = SettingsConfigDict(env_prefix="BOT_", extra="ignore")

    check_name: str = Field(default="PRereq Checks", description="Name of the published check run")
    bypass_labels: list[str] = Field(
        default_factory=lambda: ["prereq:deps", "skip-prereq"],
        description="Labels that bypass dependency enforcement",
    )
    max_explored_nodes: int = Field(default=200, ge=1, description="Cycle detection exploration budget")
    status_workers: int = Field(default=8, ge=1, le=64, description="Threads for dependency status lookups")
    webhook_secret: str = Field(default="", description="Secret for webhook signature verification")


class GitHubConfig(BaseSettings):
    """GitHub API and webhook settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT or app token; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="API base URL")
    webhook_path: str = Field(default="/webhook/github", description="Webhook URL path")


class StoreConfig(BaseSettings):
    """Dependency edge store settings."""

    model_config = SettingsConfigDict(env_prefix="STORE_", extra="ignore")

    backend: Literal["yaml", "memory"] = Field(default="yaml", description="yaml (on disk) or memory")
    path: str = Field(default=".prereq/deps", description="Directory for YAML edge files")


class WebhookConfig(BaseSettings):
    """Webhook server settings."""

    model_config = SettingsConfigDict(env_prefix="WEBHOOK_", extra="ignore")

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port")
    enabled: bool = Field(default=True, description="Enable webhook server")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    bot: BotConfig = Field(default_factory=BotConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env or Docker secret file."""
        t = self.github.token
        if _is_real_value(t):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")

    @property
    def webhook_secret_resolved(self) -> str:
        """Resolve webhook secret from config, env or Docker secret file."""
        s = self.bot.webhook_secret
        if _is_real_value(s):
            return s
        return _read_secret("WEBHOOK_SECRET", "WEBHOOK_SECRET_FILE") or ""


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Secrets: GITHUB_TOKEN or GITHUB_TOKEN_FILE, WEBHOOK_SECRET or WEBHOOK_SECRET_FILE.
    """
    global _current_env
    import os

    _current_env = dict(os.environ)

    path = config_path or Path("config.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    return AppConfig(
        bot=BotConfig(**(raw.get("bot") or {})),
        github=GitHubConfig(**(raw.get("github") or {})),
        store=StoreConfig(**(raw.get("store") or {})),
        webhook=WebhookConfig(**(raw.get("webhook") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
