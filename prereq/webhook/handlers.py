"""Handle GitHub webhook events.

Events that (re)evaluate a PR's dependencies:
- pull_request: opened, reopened, synchronize, edited, ready_for_review,
  labeled, unlabeled -> evaluate the PR in the payload
- pull_request: closed with merged=true -> re-evaluate every PR that
  depends on the merged one
- issues: edited on an issue that is a PR -> fetch the PR and evaluate it
"""

import logging
from typing import Any, Dict

from prereq.adapters.base import GitPlatformAdapter, GitPlatformError
from prereq.adapters.github import GitHubAdapter, pull_request_from_api
from prereq.evaluation import Evaluator
from prereq.graph import EdgeStore, make_edge_store
from prereq.models import PRRef

EVALUATE_ACTIONS = frozenset(
    {
        "opened",
        "reopened",
        "synchronize",
        "edited",
        "ready_for_review",
        "labeled",
        "unlabeled",
    }
)


def _repo_from_payload(payload: Dict[str, Any]) -> tuple[str, str] | None:
    """Return (owner, repo) from payload.repository, or None."""
    repo_payload = payload.get("repository") or {}
    full_name = repo_payload.get("full_name") or ""
    if "/" in full_name:
        owner, name = full_name.split("/", 1)
        return owner, name
    owner = (repo_payload.get("owner") or {}).get("login")
    name = repo_payload.get("name")
    if owner and name:
        return owner, name
    return None


def make_evaluator(config: Any, adapter: GitPlatformAdapter, store: EdgeStore) -> Evaluator:
    """Build an Evaluator from config.bot settings."""
    bot = config.bot
    return Evaluator(
        store,
        adapter,
        bypass_labels=getattr(bot, "bypass_labels", ("prereq:deps", "skip-prereq")),
        max_nodes=getattr(bot, "max_explored_nodes", 200),
        workers=getattr(bot, "status_workers", 8),
    )


def _handle_pull_request(
    config: Any,
    evaluator: Evaluator,
    payload: Dict[str, Any],
    log: logging.Logger,
) -> None:
    action = payload.get("action")
    pull = payload.get("pull_request") or {}
    repo = _repo_from_payload(payload)
    if pull.get("number") is None or repo is None:
        log.warning("pull_request payload missing number or repository")
        return
    node = PRRef(owner=repo[0], repo=repo[1], num=int(pull["number"]))
    check_name = getattr(config.bot, "check_name", "PRereq Checks")

    if action == "closed":
        if pull.get("merged"):
            _reevaluate_dependents(evaluator, node, check_name, log)
        return
    if action not in EVALUATE_ACTIONS:
        return
    pr = pull_request_from_api(pull)
    evaluator.evaluate_pull_request(node, pr, check_name=check_name)


def _reevaluate_dependents(
    evaluator: Evaluator,
    merged: PRRef,
    check_name: str,
    log: logging.Logger,
) -> None:
    """On merge: fetch each dependent PR fresh and evaluate it again."""
    dependents = evaluator.dependents_of(merged)
    if not dependents:
        return
    log.info("%s merged: re-evaluating %d dependent PR(s)", merged, len(dependents))
    for dependent in dependents:
        try:
            pr = evaluator.platform.get_pull_request(dependent)
        except GitPlatformError as e:
            log.warning("Could not fetch dependent %s: %s", dependent, e)
            continue
        if pr.merged or pr.state != "open":
            log.debug("Skipping %s: no longer open", dependent)
            continue
        evaluator.evaluate_pull_request(dependent, pr, check_name=check_name)


def _handle_issues(
    config: Any,
    evaluator: Evaluator,
    payload: Dict[str, Any],
    log: logging.Logger,
) -> None:
    """issues.edited on a PR: the description changed, evaluate again."""
    if payload.get("action") != "edited":
        return
    issue = payload.get("issue") or {}
    if not issue.get("pull_request"):
        return
    repo = _repo_from_payload(payload)
    if issue.get("number") is None or repo is None:
        return
    node = PRRef(owner=repo[0], repo=repo[1], num=int(issue["number"]))
    try:
        pr = evaluator.platform.get_pull_request(node)
    except GitPlatformError as e:
        log.warning("Could not fetch %s: %s", node, e)
        return
    evaluator.evaluate_pull_request(node, pr, check_name=getattr(config.bot, "check_name", "PRereq Checks"))


def handle_github_event(
    config: Any,
    event: str,
    payload: Dict[str, Any],
    adapter: GitPlatformAdapter | None = None,
    store: EdgeStore | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Handle a GitHub webhook event.

    Supported events:
    - pull_request: evaluate on content/label/state changes; on merge re-evaluate dependents.
    - issues (action=edited, issue is a PR): fetch PR and evaluate.

    Edge store failures propagate; platform errors are logged.
    """
    logger = log or logging.getLogger("prereq.webhook.handlers")
    if event not in ("pull_request", "issues"):
        return

    if adapter is None:
        token = getattr(config, "github_token_resolved", None)
        if not token:
            logger.warning("No GitHub token; cannot process %s event", event)
            return
        adapter = GitHubAdapter(
            token=token,
            api_url=getattr(config.github, "api_url", "https://api.github.com"),
        )
    if store is None:
        store = make_edge_store(config)
    evaluator = make_evaluator(config, adapter, store)

    try:
        if event == "pull_request":
            _handle_pull_request(config, evaluator, payload, logger)
        else:
            _handle_issues(config, evaluator, payload, logger)
    except GitPlatformError as e:
        logger.warning("Failed to process %s event: %s", event, e)
