"""Publish verdicts as GitHub check runs."""

import logging

from prereq.adapters.base import GitPlatformAdapter
from prereq.models import PRRef, Verdict

LOG = logging.getLogger("prereq.check")

DEFAULT_CHECK_NAME = "PRereq Checks"


def publish_verdict(
    adapter: GitPlatformAdapter,
    ref: PRRef,
    head_sha: str,
    verdict: Verdict,
    name: str = DEFAULT_CHECK_NAME,
) -> None:
    """Create a completed check run on head_sha with the verdict's conclusion."""
    if not head_sha:
        LOG.warning("%s: no head sha, check run '%s' not published", ref, name)
        return
    adapter.create_check_run(ref, head_sha, name, verdict)
    LOG.info("%s: check '%s' -> %s (%s)", ref, name, verdict.conclusion.value, verdict.title)
