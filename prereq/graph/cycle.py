"""Cycle detection over the dependency graph.

Walks from a start PR along the inbound relation ("who depends on this
node") depth first. A neighbor already on the active path is a back-edge:
the path from that neighbor's position through the current node, plus the
neighbor again, is returned as the cycle. Fully explored nodes are pruned,
so the first cycle met in edge-iteration order wins, not the shortest.

Traversal stops after max_nodes nodes have been entered; the result is then
flagged exhausted rather than reported as no cycle.
"""

import logging
from typing import Callable, Dict, Iterable, Iterator, List, Sequence, Set

from prereq.models import CycleResult, PRRef

LOG = logging.getLogger("prereq.graph.cycle")

MAX_NODES = 200

EdgeLookup = Callable[[PRRef], Iterable[PRRef]]


class _Traversal:
    """State of a single detect_cycle call. Never shared between calls."""

    def __init__(self, start: PRRef, edge_lookup: EdgeLookup, max_nodes: int) -> None:
        self.start = start
        self.edge_lookup = edge_lookup
        self.max_nodes = max_nodes
        self.visited: Set[PRRef] = set()
        self.on_path: Dict[PRRef, int] = {}
        self.path: List[PRRef] = []
        self.pending: List[Iterator[PRRef]] = []
        self.explored = 0

    def enter(self, node: PRRef) -> CycleResult | None:
        self.visited.add(node)
        self.on_path[node] = len(self.path)
        self.path.append(node)
        self.explored += 1
        if self.explored > self.max_nodes:
            LOG.warning(
                "Cycle detection from %s stopped after %d nodes",
                self.start,
                self.max_nodes,
            )
            return CycleResult(has_cycle=True, cycle_path=[*self.path, self.start], exhausted=True)
        self.pending.append(iter(self.edge_lookup(node)))
        return None

    def leave(self) -> None:
        self.pending.pop()
        node = self.path.pop()
        del self.on_path[node]

    def run(self) -> CycleResult:
        result = self.enter(self.start)
        if result is not None:
            return result
        while self.pending:
            neighbor = next(self.pending[-1], None)
            if neighbor is None:
                self.leave()
                continue
            if neighbor in self.on_path:
                cycle = [*self.path[self.on_path[neighbor] :], neighbor]
                LOG.debug("Back-edge to %s found from %s", neighbor, self.path[-1])
                return CycleResult(has_cycle=True, cycle_path=cycle)
            if neighbor in self.visited:
                continue
            result = self.enter(neighbor)
            if result is not None:
                return result
        return CycleResult()


def detect_cycle(start: PRRef, edge_lookup: EdgeLookup, max_nodes: int = MAX_NODES) -> CycleResult:
    """Find a cycle reachable from start.

    Args:
        start: Node to start from
        edge_lookup: Returns the neighbors of a node (normally store.inbound_of)
        max_nodes: Exploration budget; exceeding it returns an exhausted result

    Returns:
        CycleResult: no cycle, cycle with path (first node == last node),
        or exhausted with the partial path followed by start.
    """
    return _Traversal(start, edge_lookup, max_nodes).run()


def format_path(path: Sequence[PRRef]) -> str:
    """Render a path as owner/repo#1 → owner/repo#2 → ..."""
    return " → ".join(str(p) for p in path)
