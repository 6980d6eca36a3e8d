"""Abstract base for Git platform adapters."""

from abc import ABC, abstractmethod
from typing import List

from prereq.models import Comment, DepStatus, PRRef, PullRequest, Verdict


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    pass


class GitPlatformAdapter(ABC):
    """Abstract interface for the Git hosting platform the bot talks to."""

    @abstractmethod
    def get_pull_request(self, ref: PRRef) -> PullRequest:
        """Fetch PR by reference."""
        ...

    @abstractmethod
    def get_dependency_status(self, ref: PRRef) -> DepStatus:
        """Return merged, open, closed, draft or unknown. Never raises."""
        ...

    @abstractmethod
    def list_comments(self, ref: PRRef) -> List[Comment]:
        """List all comments on an issue or PR."""
        ...

    @abstractmethod
    def create_comment(self, ref: PRRef, body: str) -> Comment:
        """Post a comment on an issue or PR."""
        ...

    @abstractmethod
    def create_check_run(self, ref: PRRef, head_sha: str, name: str, verdict: Verdict) -> None:
        """Publish a completed check run for head_sha in ref's repository."""
        ...

    def list_comment_bodies(self, ref: PRRef) -> List[str]:
        """Bodies of existing comments on ref."""
        return [c.body for c in self.list_comments(ref)]
