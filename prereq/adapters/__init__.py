"""Git platform adapters (base and implementations)."""

from prereq.adapters.base import GitPlatformAdapter, GitPlatformError
from prereq.adapters.github import GitHubAdapter

__all__ = ["GitPlatformAdapter", "GitPlatformError", "GitHubAdapter"]
