"""Webhook server and handlers for GitHub events."""

from prereq.webhook.handlers import handle_github_event
from prereq.webhook.server import run_webhook_server

__all__ = ["handle_github_event", "run_webhook_server"]
