"""Shared fixtures: in-memory edge store and a fake Git platform."""

from typing import Dict, List

import pytest

from prereq.adapters.base import GitPlatformAdapter, GitPlatformError
from prereq.graph import MemoryEdgeStore
from prereq.models import Comment, DepStatus, PRRef, PullRequest, Verdict


class FakePlatform(GitPlatformAdapter):
    """Records comments and check runs; statuses and PRs set by the test."""

    def __init__(self) -> None:
        self.statuses: Dict[PRRef, DepStatus] = {}
        self.pulls: Dict[PRRef, PullRequest] = {}
        self.comments: Dict[PRRef, List[str]] = {}
        self.check_runs: List[tuple[PRRef, str, str, Verdict]] = []
        self.fail_status: set[PRRef] = set()

    def get_pull_request(self, ref: PRRef) -> PullRequest:
        if ref not in self.pulls:
            raise GitPlatformError(f"Not found: {ref}")
        return self.pulls[ref]

    def get_dependency_status(self, ref: PRRef) -> DepStatus:
        if ref in self.fail_status:
            raise RuntimeError("connection reset")
        return self.statuses.get(ref, DepStatus.UNKNOWN)

    def list_comments(self, ref: PRRef) -> List[Comment]:
        return [Comment(id=i, body=b) for i, b in enumerate(self.comments.get(ref, []), start=1)]

    def create_comment(self, ref: PRRef, body: str) -> Comment:
        self.comments.setdefault(ref, []).append(body)
        return Comment(id=len(self.comments[ref]), body=body)

    def create_check_run(self, ref: PRRef, head_sha: str, name: str, verdict: Verdict) -> None:
        self.check_runs.append((ref, head_sha, name, verdict))


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def store() -> MemoryEdgeStore:
    return MemoryEdgeStore()
