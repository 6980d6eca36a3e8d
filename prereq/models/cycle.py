"""Outcome of cycle detection from a start node."""

from typing import List

from pydantic import BaseModel, Field

from prereq.models.pr_ref import PRRef


class CycleResult(BaseModel):
    """No cycle, a cycle with its path, or an exhausted exploration budget.

    cycle_path starts and ends at the same node for a real cycle. When
    exhausted is set, cycle_path is the partial path explored followed by
    the start node.
    """

    has_cycle: bool = False
    cycle_path: List[PRRef] = Field(default_factory=list)
    exhausted: bool = False
