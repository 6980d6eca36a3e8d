"""Check run verdict."""

from enum import Enum

from pydantic import BaseModel


class Conclusion(str, Enum):
    """Check run conclusion values used by the bot."""

    SUCCESS = "success"
    FAILURE = "failure"
    NEUTRAL = "neutral"


class Verdict(BaseModel):
    """Conclusion plus title and summary shown on the check run."""

    conclusion: Conclusion
    title: str
    summary: str
