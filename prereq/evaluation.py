"""
Evaluate a pull request's declared dependencies and decide its check verdict.

Per evaluation, in order:
1. Extract references from the PR text and replace the PR's stored edges.
2. Bypass label present: neutral (edges are still recorded).
3. No references: success.
4. Cycle reachable from the PR: failure with the dependency chain.
5. No enforcement keyword: neutral.
6. Post a "blocking" notice on each dependency (once) and look up each
   dependency's status concurrently; unreachable ones become unknown.
7. All merged: success, otherwise failure listing the unmet ones.

When a PR is merged its dependents (inbound edges) are re-evaluated.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Sequence

from prereq.adapters.base import GitPlatformAdapter
from prereq.check import DEFAULT_CHECK_NAME, publish_verdict
from prereq.graph import MAX_NODES, EdgeStore, detect_cycle, format_path
from prereq.models import Conclusion, CycleResult, DepStatus, PRRef, PullRequest, Verdict
from prereq.parse import extract_deps

LOG = logging.getLogger("prereq.evaluation")

DEFAULT_BYPASS_LABELS = ("prereq:deps", "skip-prereq")

BLOCKING_NOTICE_TEMPLATE = "This PR is blocking {dependent}"


def blocking_notice(dependent: PRRef) -> str:
    """Body of the notice posted on a dependency."""
    return BLOCKING_NOTICE_TEMPLATE.format(dependent=dependent)


def _bypassed_verdict(bypass_labels: Sequence[str]) -> Verdict:
    names = " or ".join(f"'{label}'" for label in bypass_labels)
    return Verdict(
        conclusion=Conclusion.NEUTRAL,
        title="PR Dependency Checks Bypassed",
        summary=f"PR has label {names} to bypass checks.",
    )


NO_DEPENDENCIES = Verdict(
    conclusion=Conclusion.SUCCESS,
    title="No PR Dependencies Found",
    summary="No PR dependencies were found in the PR.",
)

NOT_ENFORCED = Verdict(
    conclusion=Conclusion.NEUTRAL,
    title="PR Dependencies Found (Not Enforced)",
    summary="PR dependencies were found, but no enforcement keywords were present.",
)

ALL_MET = Verdict(
    conclusion=Conclusion.SUCCESS,
    title="All PR Dependencies Met",
    summary="All PR dependencies have been merged.",
)


def cycle_verdict(cycle: CycleResult, max_nodes: int = MAX_NODES) -> Verdict:
    """Failure verdict for a detected cycle or an exhausted traversal."""
    chain = format_path(cycle.cycle_path)
    if cycle.exhausted:
        return Verdict(
            conclusion=Conclusion.FAILURE,
            title="Dependency Graph Too Large",
            summary=(
                f"Dependency graph exploration stopped after {max_nodes} PRs without "
                "finishing, so a circular dependency cannot be ruled out. This is not "
                f"a confirmed cycle.\n\nPartial path explored:\n\n{chain}"
            ),
        )
    return Verdict(
        conclusion=Conclusion.FAILURE,
        title="Circular Dependency Detected",
        summary=f"A circular dependency was detected involving this PR.\n\nDependency chain:\n\n{chain}",
    )


def unmet_verdict(unmet: Sequence[tuple[PRRef, DepStatus]]) -> Verdict:
    """Failure verdict listing each unmet dependency and its status."""
    lines = "\n".join(f"- {ref} → not merged ({status.value})" for ref, status in unmet)
    return Verdict(
        conclusion=Conclusion.FAILURE,
        title="Unmet PR Dependencies",
        summary=f"The following PR dependencies must first be merged:\n\n{lines}",
    )


class Evaluator:
    """Runs the dependency check for one PR at a time.

    Holds no per-evaluation state, so one instance may serve concurrent
    evaluations of different PRs.
    """

    def __init__(
        self,
        store: EdgeStore,
        platform: GitPlatformAdapter,
        bypass_labels: Iterable[str] = DEFAULT_BYPASS_LABELS,
        max_nodes: int = MAX_NODES,
        workers: int = 8,
        log: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.platform = platform
        self.bypass_labels = tuple(bypass_labels)
        self.max_nodes = max_nodes
        self.workers = max(1, workers)
        self.log = log or LOG

    def is_bypassed(self, labels: Iterable[str]) -> bool:
        return any(label in self.bypass_labels for label in labels)

    def evaluate(self, node: PRRef, text: str | None, labels: Iterable[str] = ()) -> Verdict:
        """Evaluate node's dependencies declared in text.

        Raises:
            EdgeStoreError: If the edges cannot be persisted
        """
        extracted = extract_deps(text, node.owner, node.repo)
        deps = sorted(extracted.deps, key=lambda d: (d.owner, d.repo, d.num))
        self.store.replace_edges(node, deps)
        self.log.debug("%s: %d dependencies recorded (enforce=%s)", node, len(deps), extracted.enforce)

        if self.is_bypassed(labels):
            self.log.info("%s: bypass label present, dependencies not enforced", node)
            return _bypassed_verdict(self.bypass_labels)

        if not deps:
            return NO_DEPENDENCIES

        cycle = detect_cycle(node, self.store.inbound_lookup(), self.max_nodes)
        if cycle.has_cycle:
            self.log.info("%s: cycle found: %s", node, format_path(cycle.cycle_path))
            return cycle_verdict(cycle, self.max_nodes)

        if not extracted.enforce:
            return NOT_ENFORCED

        self.ensure_blocking_notices(node, deps)

        statuses = self.lookup_statuses(deps)
        unmet = [(dep, status) for dep, status in zip(deps, statuses) if status is not DepStatus.MERGED]
        if not unmet:
            return ALL_MET
        return unmet_verdict(unmet)

    def _status_of(self, dep: PRRef) -> DepStatus:
        try:
            return DepStatus(self.platform.get_dependency_status(dep))
        except Exception as e:
            self.log.warning("Status lookup for %s failed: %s", dep, e)
            return DepStatus.UNKNOWN

    def lookup_statuses(self, deps: Sequence[PRRef]) -> List[DepStatus]:
        """Status of each dependency, in the order given."""
        if not deps:
            return []
        with ThreadPoolExecutor(max_workers=min(self.workers, len(deps))) as pool:
            return list(pool.map(self._status_of, deps))

    def ensure_blocking_notices(self, dependent: PRRef, deps: Iterable[PRRef]) -> None:
        """Post "This PR is blocking <dependent>" on each dependency unless already there."""
        body = blocking_notice(dependent)
        for dep in deps:
            try:
                existing = self.platform.list_comment_bodies(dep)
            except Exception as e:
                self.log.warning("Could not list comments on %s: %s", dep, e)
                existing = []
            if any(b.strip() == body for b in existing):
                continue
            try:
                self.platform.create_comment(dep, body)
                self.log.info("Posted blocking notice on %s for %s", dep, dependent)
            except Exception as e:
                self.log.warning("Could not post blocking notice on %s: %s", dep, e)

    def dependents_of(self, merged: PRRef) -> List[PRRef]:
        """PRs whose dependencies include merged, to re-evaluate after a merge."""
        return self.store.inbound_of(merged)

    def evaluate_pull_request(
        self,
        node: PRRef,
        pr: PullRequest,
        check_name: str = DEFAULT_CHECK_NAME,
    ) -> Verdict:
        """Evaluate pr and publish the verdict as a check run on its head commit."""
        verdict = self.evaluate(node, pr.text, pr.labels)
        publish_verdict(self.platform, node, pr.head_sha, verdict, name=check_name)
        return verdict
