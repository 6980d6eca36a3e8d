"""GitHub API adapter."""

import logging
from typing import Any, Dict, List

import requests

from prereq.adapters.base import GitPlatformAdapter, GitPlatformError
from prereq.models import Comment, DepStatus, PRRef, PullRequest, Verdict

LOG = logging.getLogger("prereq.adapters.github")

PER_PAGE = 100


def pull_request_from_api(data: Dict[str, Any]) -> PullRequest:
    head = data.get("head") or {}
    labels = [lb["name"] for lb in (data.get("labels") or []) if isinstance(lb, dict) and lb.get("name")]
    return PullRequest(
        number=data["number"],
        title=data.get("title") or "",
        body=data.get("body") or "",
        labels=labels,
        state=data.get("state", "open"),
        merged=bool(data.get("merged")),
        draft=bool(data.get("draft")),
        head_sha=head.get("sha", ""),
        html_url=data.get("html_url"),
    )


def _comment_from_api(data: Dict[str, Any]) -> Comment:
    user = data.get("user") or {}
    return Comment(
        id=data["id"],
        body=data.get("body") or "",
        author=user.get("login", ""),
    )


def status_from_pull_request(pr: PullRequest) -> DepStatus:
    """Map PR fields to a dependency status."""
    if pr.merged:
        return DepStatus.MERGED
    if pr.state == "open":
        return DepStatus.DRAFT if pr.draft else DepStatus.OPEN
    return DepStatus.CLOSED


class GitHubAdapter(GitPlatformAdapter):
    """GitHub API implementation."""

    def __init__(self, token: str | None = None, api_url: str = "https://api.github.com") -> None:
        self._api_url = api_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers["Accept"] = "application/vnd.github+json"
        self._session.headers["X-GitHub-Api-Version"] = "2022-11-28"
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> requests.Response:
        url = f"{self._api_url}{path}" if path.startswith("/") else f"{self._api_url}/{path}"
        try:
            resp = self._session.request(method, url, params=params, json=json, timeout=30)
        except requests.RequestException as e:
            raise GitPlatformError(f"{method} {path} failed: {e}") from e
        if resp.status_code == 404:
            raise GitPlatformError(f"Not found: {path}")
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                msg = resp.json().get("message", msg)
            except ValueError:
                pass
            raise GitPlatformError(f"{resp.status_code}: {msg}")
        return resp

    def _json(self, resp: requests.Response, path: str) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise GitPlatformError(f"Invalid JSON from {path}: {e}") from e

    def get_pull_request(self, ref: PRRef) -> PullRequest:
        path = f"/repos/{ref.full_name}/pulls/{ref.num}"
        data = self._json(self._request("GET", path), path)
        try:
            return pull_request_from_api(data)
        except (KeyError, TypeError, ValueError) as e:
            raise GitPlatformError(f"Unexpected pull request payload from {path}: {e}") from e

    def get_dependency_status(self, ref: PRRef) -> DepStatus:
        try:
            pr = self.get_pull_request(ref)
        except GitPlatformError as e:
            LOG.warning("Status of %s unknown: %s", ref, e)
            return DepStatus.UNKNOWN
        return status_from_pull_request(pr)

    def list_comments(self, ref: PRRef) -> List[Comment]:
        path = f"/repos/{ref.full_name}/issues/{ref.num}/comments"
        comments: List[Comment] = []
        page = 1
        while True:
            resp = self._request("GET", path, params={"per_page": PER_PAGE, "page": page})
            data = self._json(resp, path) or []
            if not isinstance(data, list):
                raise GitPlatformError(f"Expected a list of comments from {path}")
            try:
                comments.extend(_comment_from_api(d) for d in data)
            except (KeyError, TypeError, ValueError) as e:
                raise GitPlatformError(f"Unexpected comment payload from {path}: {e}") from e
            if len(data) < PER_PAGE:
                return comments
            page += 1

    def create_comment(self, ref: PRRef, body: str) -> Comment:
        path = f"/repos/{ref.full_name}/issues/{ref.num}/comments"
        data = self._json(self._request("POST", path, json={"body": body}), path)
        try:
            return _comment_from_api(data)
        except (KeyError, TypeError, ValueError) as e:
            raise GitPlatformError(f"Unexpected comment payload from {path}: {e}") from e

    def create_check_run(self, ref: PRRef, head_sha: str, name: str, verdict: Verdict) -> None:
        self._request(
            "POST",
            f"/repos/{ref.full_name}/check-runs",
            json={
                "name": name,
                "head_sha": head_sha,
                "status": "completed",
                "conclusion": verdict.conclusion.value,
                "output": {"title": verdict.title, "summary": verdict.summary},
            },
        )
