"""Tests for config loading (YAML, env substitution, secrets)."""

from pathlib import Path

import pytest

from prereq.config import AppConfig, load_config


def test_missing_file_gives_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """No config file: defaults, no error."""
    monkeypatch.delenv("BOT_CHECK_NAME", raising=False)
    config = load_config(tmp_path / "missing.yaml")
    assert isinstance(config, AppConfig)
    assert config.bot.check_name == "PRereq Checks"
    assert config.bot.bypass_labels == ["prereq:deps", "skip-prereq"]
    assert config.bot.max_explored_nodes == 200
    assert config.store.backend == "yaml"


def test_yaml_values_loaded(tmp_path: Path) -> None:
    """Values from the YAML file override defaults."""
    path = tmp_path / "config.yaml"
    path.write_text(
        "bot:\n"
        "  check_name: Deps\n"
        "  bypass_labels: [no-deps]\n"
        "  max_explored_nodes: 50\n"
        "store:\n"
        "  backend: memory\n"
        "webhook:\n"
        "  port: 9000\n"
        "logging:\n"
        "  level: DEBUG\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.bot.check_name == "Deps"
    assert config.bot.bypass_labels == ["no-deps"]
    assert config.bot.max_explored_nodes == 50
    assert config.store.backend == "memory"
    assert config.webhook.port == 9000
    assert config.logging.level == "DEBUG"


def test_env_substitution_and_token(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """${VAR} in YAML is replaced from the environment."""
    monkeypatch.setenv("MY_TOKEN", "ghp_abc")
    path = tmp_path / "config.yaml"
    path.write_text("github:\n  token: ${MY_TOKEN}\n", encoding="utf-8")
    config = load_config(path)
    assert config.github.token == "ghp_abc"
    assert config.github_token_resolved == "ghp_abc"


def test_unresolved_placeholder_falls_back_to_secret_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """An unset ${VAR} webhook secret is read from WEBHOOK_SECRET_FILE."""
    secret = tmp_path / "secret"
    secret.write_text("from-file\n", encoding="utf-8")
    monkeypatch.delenv("WEBHOOK_SECRET", raising=False)
    monkeypatch.delenv("UNSET_VAR", raising=False)
    monkeypatch.setenv("WEBHOOK_SECRET_FILE", str(secret))
    path = tmp_path / "config.yaml"
    path.write_text("bot:\n  webhook_secret: ${UNSET_VAR}\n", encoding="utf-8")
    config = load_config(path)
    assert config.webhook_secret_resolved == "from-file"
