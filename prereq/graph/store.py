"""Dependency edge store: dependent PR -> the PRs it depends on.

Each dependent's outbound edge set is replaced as a whole on every
evaluation, so dependencies removed from a PR description disappear.
Self loops and cycles are stored as given; the cycle detector handles them.

Backends:
- MemoryEdgeStore: in-process dict (tests, single-run tools)
- YamlEdgeStore: one YAML file per dependent under a base directory,
  {path}/{owner}/{repo}/{num}.yaml, written atomically
"""

import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError

from prereq.models import PRRef

LOG = logging.getLogger("prereq.graph.store")


class EdgeStoreError(Exception):
    """Raised when edges cannot be read or persisted."""

    pass


class _KeyLocks:
    """One lock per dependent node so replacements for a node never interleave.

    A node's lock is dropped once no thread holds or waits on it.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[PRRef, List] = {}

    @contextmanager
    def hold(self, node: PRRef) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(node)
            if entry is None:
                entry = self._locks[node] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[node]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


def _unique(deps: Iterable[PRRef]) -> List[PRRef]:
    seen: Dict[PRRef, None] = {}
    for d in deps:
        seen.setdefault(d, None)
    return list(seen)


class EdgeStore(ABC):
    """Graph edge contract used by the evaluation engine and cycle detector."""

    @abstractmethod
    def replace_edges(self, dependent: PRRef, deps: Iterable[PRRef]) -> None:
        """Remove all outbound edges of dependent and insert deps instead."""
        ...

    @abstractmethod
    def outbound_of(self, node: PRRef) -> List[PRRef]:
        """Dependencies declared by node (empty for unknown nodes)."""
        ...

    @abstractmethod
    def inbound_of(self, node: PRRef) -> List[PRRef]:
        """Nodes that declare node as a dependency (empty for unknown nodes)."""
        ...

    def inbound_lookup(self) -> Callable[[PRRef], List[PRRef]]:
        """inbound_of for one traversal. Backends with costly reads may snapshot."""
        return self.inbound_of


class MemoryEdgeStore(EdgeStore):
    """Edge store kept in a dict; iteration order is insertion order."""

    def __init__(self) -> None:
        self._edges: Dict[PRRef, Tuple[PRRef, ...]] = {}
        self._locks = _KeyLocks()

    def replace_edges(self, dependent: PRRef, deps: Iterable[PRRef]) -> None:
        new_edges = tuple(_unique(deps))
        with self._locks.hold(dependent):
            if new_edges:
                self._edges[dependent] = new_edges
            else:
                self._edges.pop(dependent, None)
        LOG.debug("Replaced edges of %s: %d dependencies", dependent, len(new_edges))

    def outbound_of(self, node: PRRef) -> List[PRRef]:
        return list(self._edges.get(node, ()))

    def inbound_of(self, node: PRRef) -> List[PRRef]:
        return [dependent for dependent, deps in list(self._edges.items()) if node in deps]


class EdgeRow(BaseModel):
    """One stored edge, dependent -> dependency."""

    dependent_owner: str
    dependent_repo: str
    dependent_num: int
    dep_owner: str
    dep_repo: str
    dep_num: int

    model_config = {"extra": "forbid"}


class EdgeFile(BaseModel):
    """Edge set of one dependent as stored in {owner}/{repo}/{num}.yaml."""

    dependent: PRRef
    edges: List[EdgeRow] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    def dependencies(self) -> List[PRRef]:
        return [PRRef(owner=e.dep_owner, repo=e.dep_repo, num=e.dep_num) for e in self.edges]


class YamlEdgeStore(EdgeStore):
    """Edge store persisted as YAML files, one per dependent.

    replace_edges writes to a temporary file and renames it over the old
    one, so readers see either the previous or the new edge set, never a
    mix, and a crash mid-write leaves the previous set in place.
    """

    def __init__(self, base_dir: Path) -> None:
        self._base = Path(base_dir)
        self._locks = _KeyLocks()

    def _path(self, node: PRRef) -> Path:
        return self._base / node.owner / node.repo / f"{node.num}.yaml"

    def _load(self, path: Path) -> EdgeFile | None:
        if not path.is_file():
            return None
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
            if not data:
                return None
            return EdgeFile.model_validate(data)
        except (OSError, yaml.YAMLError, ValidationError) as e:
            raise EdgeStoreError(f"Failed to read edges from {path}: {e}") from e

    def replace_edges(self, dependent: PRRef, deps: Iterable[PRRef]) -> None:
        new_deps = _unique(deps)
        path = self._path(dependent)
        with self._locks.hold(dependent):
            try:
                if not new_deps:
                    path.unlink(missing_ok=True)
                    LOG.debug("Cleared edges of %s", dependent)
                    return
                edge_file = EdgeFile(
                    dependent=dependent,
                    edges=[
                        EdgeRow(
                            dependent_owner=dependent.owner,
                            dependent_repo=dependent.repo,
                            dependent_num=dependent.num,
                            dep_owner=d.owner,
                            dep_repo=d.repo,
                            dep_num=d.num,
                        )
                        for d in new_deps
                    ],
                )
                raw = yaml.dump(
                    edge_file.model_dump(mode="json"),
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                )
                path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{dependent.num}.", suffix=".tmp")
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as fh:
                        fh.write(raw)
                    os.replace(tmp_name, path)
                except BaseException:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
            except OSError as e:
                raise EdgeStoreError(f"Failed to write edges of {dependent}: {e}") from e
        LOG.debug("Saved %d edges of %s to %s", len(new_deps), dependent, path)

    def outbound_of(self, node: PRRef) -> List[PRRef]:
        edge_file = self._load(self._path(node))
        return edge_file.dependencies() if edge_file else []

    def _edge_files(self) -> Iterator[EdgeFile]:
        """Every readable edge file, in sorted path order."""
        if not self._base.is_dir():
            return
        for path in sorted(self._base.glob("*/*/*.yaml")):
            try:
                edge_file = self._load(path)
            except EdgeStoreError as e:
                LOG.warning("Skipping unreadable edge file: %s", e)
                continue
            if edge_file:
                yield edge_file

    def inbound_of(self, node: PRRef) -> List[PRRef]:
        return [f.dependent for f in self._edge_files() if node in f.dependencies()]

    def inbound_lookup(self) -> Callable[[PRRef], List[PRRef]]:
        """Read every edge file once and answer inbound_of from a reverse index.

        Edges replaced after this call are not seen by the returned lookup.
        """
        index: Dict[PRRef, List[PRRef]] = {}
        for edge_file in self._edge_files():
            for dep in _unique(edge_file.dependencies()):
                index.setdefault(dep, []).append(edge_file.dependent)
        LOG.debug("Indexed inbound edges of %d nodes", len(index))
        return lambda node: list(index.get(node, ()))


def make_edge_store(config) -> EdgeStore:
    """Build the edge store configured in config.store."""
    backend = getattr(config.store, "backend", "yaml")
    if backend == "memory":
        return MemoryEdgeStore()
    return YamlEdgeStore(Path(getattr(config.store, "path", ".prereq/deps")))
