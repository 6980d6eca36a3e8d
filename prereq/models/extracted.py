"""Result of scanning PR text for dependency references."""

from pydantic import BaseModel, ConfigDict, Field

from prereq.models.pr_ref import PRRef


class ExtractedDeps(BaseModel):
    """References found in text plus whether enforcement keywords were present."""

    model_config = ConfigDict(frozen=True)

    deps: frozenset[PRRef] = Field(default_factory=frozenset)
    enforce: bool = False
