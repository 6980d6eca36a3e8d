"""Pull request reference: owner, repository and number."""

from pydantic import BaseModel, ConfigDict, Field


class PRRef(BaseModel):
    """One pull request (or issue-like item) in one repository.

    Frozen and hashable; equality is structural and case-sensitive on
    owner and repo.
    """

    model_config = ConfigDict(frozen=True)

    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    num: int = Field(gt=0)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}#{self.num}"
