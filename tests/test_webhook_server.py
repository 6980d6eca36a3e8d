"""Tests for the webhook HTTP server (signature check, routing)."""

import hashlib
import hmac
import json
import threading
from http.server import HTTPServer
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import requests

from prereq.graph import MemoryEdgeStore
from prereq.webhook.server import WebhookHandler, verify_signature

SECRET = "s3cret"


def _sign(body: bytes, secret: str = SECRET) -> str:
    return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


class TestVerifySignature:
    def test_valid(self) -> None:
        """Matching sha256 signature is accepted."""
        assert verify_signature(SECRET, b"{}", _sign(b"{}"))

    def test_wrong_secret(self) -> None:
        """Signature made with another secret is rejected."""
        assert not verify_signature(SECRET, b"{}", _sign(b"{}", "other"))

    def test_missing_header(self) -> None:
        """Missing header is rejected when a secret is set."""
        assert not verify_signature(SECRET, b"{}", None)

    def test_wrong_prefix(self) -> None:
        """Only the sha256= scheme is accepted."""
        assert not verify_signature(SECRET, b"{}", _sign(b"{}").replace("sha256=", "sha1="))

    def test_no_secret_accepts_anything(self) -> None:
        """Without a secret every request is accepted."""
        assert verify_signature("", b"{}", None)


@pytest.fixture
def server_url():
    """Run WebhookHandler on a free port for the duration of a test."""
    WebhookHandler.config = SimpleNamespace(
        webhook_secret_resolved=SECRET,
        github=SimpleNamespace(webhook_path="/webhook/github"),
    )
    WebhookHandler.store = MemoryEdgeStore()
    server = HTTPServer(("127.0.0.1", 0), WebhookHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


def test_health(server_url: str) -> None:
    """GET /health answers ok."""
    resp = requests.get(f"{server_url}/health", timeout=5)
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "prereq"}


def test_unknown_path_404(server_url: str) -> None:
    """Unknown paths answer 404."""
    assert requests.post(f"{server_url}/other", data=b"{}", timeout=5).status_code == 404


def test_invalid_signature_rejected(server_url: str) -> None:
    """Bad signature answers 401 and nothing is dispatched."""
    with patch("prereq.webhook.handlers.handle_github_event") as handler:
        resp = requests.post(
            f"{server_url}/webhook/github",
            data=b"{}",
            headers={"X-GitHub-Event": "pull_request", "X-Hub-Signature-256": "sha256=bad"},
            timeout=5,
        )
    assert resp.status_code == 401
    handler.assert_not_called()


def test_signed_event_dispatched(server_url: str) -> None:
    """Signed event is passed to the handler."""
    body = json.dumps({"action": "opened"}).encode()
    with patch("prereq.webhook.handlers.handle_github_event") as handler:
        resp = requests.post(
            f"{server_url}/webhook/github",
            data=body,
            headers={
                "Content-Type": "application/json",
                "X-GitHub-Event": "pull_request",
                "X-Hub-Signature-256": _sign(body),
            },
            timeout=5,
        )
    assert resp.status_code == 200
    assert resp.json() == {"received": True}
    handler.assert_called_once()
    assert handler.call_args[0][1] == "pull_request"
    assert handler.call_args[0][2] == {"action": "opened"}
    assert handler.call_args[1]["store"] is WebhookHandler.store
