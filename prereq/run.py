"""
prereq: webhook server that checks cross-repository PR dependencies.

Listens for GitHub webhooks; on PR changes extracts dependency references,
records them in the edge store, detects cycles and publishes a check run.
On merge re-evaluates the PRs that depend on the merged one.
"""

import argparse
import logging
import sys
from pathlib import Path

from prereq.config import AppConfig, LoggingConfig, load_config
from prereq.webhook.server import run_webhook_server


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="prereq",
        description="prereq - pull request dependency checks",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    return parser.parse_args(argv)


def setup_logging(config: LoggingConfig) -> None:
    """Configure root logger. Unknown level names fall back to INFO."""
    level = getattr(logging, config.level.strip().upper(), None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=config.format, force=True)


def run_server(config: AppConfig) -> None:
    """Set up logging and run the webhook server."""
    setup_logging(config.logging)
    log = logging.getLogger("prereq.run")

    if not config.webhook.enabled:
        log.warning("Webhook disabled in config; nothing to do.")
        return
    log.info(
        "prereq started | check=%s | store=%s:%s",
        config.bot.check_name,
        config.store.backend,
        config.store.path,
    )
    run_webhook_server(config)


def main(argv: list[str] | None = None) -> int:
    """Entry point for prereq."""
    args = parse_args(argv)
    config_path = args.config
    if not config_path.is_file() and config_path == Path("config.yaml"):
        if Path("config.example.yaml").is_file():
            config_path = Path("config.example.yaml")
            logging.basicConfig(level=logging.INFO)
            logging.getLogger("prereq.run").warning("config.yaml not found, using config.example.yaml")

    config = load_config(config_path)

    if args.check:
        print("Config OK:", config.bot.check_name, config.store.backend)
        return 0

    try:
        run_server(config)
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        logging.getLogger("prereq.run").exception("Fatal error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
