"""Data models for PR references, pull requests, cycles and verdicts (Pydantic)."""

from prereq.models.comment import Comment
from prereq.models.cycle import CycleResult
from prereq.models.extracted import ExtractedDeps
from prereq.models.pr_ref import PRRef
from prereq.models.pull_request import PullRequest
from prereq.models.status import DepStatus
from prereq.models.verdict import Conclusion, Verdict

__all__ = [
    "Comment",
    "Conclusion",
    "CycleResult",
    "DepStatus",
    "ExtractedDeps",
    "PRRef",
    "PullRequest",
    "Verdict",
]
