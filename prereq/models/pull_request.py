"""Pull request model."""

from typing import List

from pydantic import BaseModel, Field


class PullRequest(BaseModel):
    """Pull request fields needed to evaluate its dependencies."""

    number: int
    title: str = ""
    body: str = ""
    labels: List[str] = Field(default_factory=list)
    state: str = "open"
    merged: bool = False
    draft: bool = False
    head_sha: str = ""
    html_url: str | None = None

    @property
    def text(self) -> str:
        """Title and body joined, as scanned for references."""
        return f"{self.title}\n{self.body}"
