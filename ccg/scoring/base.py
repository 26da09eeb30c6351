"""Scoring result types and errors."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


class ScoringError(Exception):
    """Base exception for scoring errors."""
    pass


class InvalidInput(ScoringError):
    """Raised when a scoring operation receives an unusable argument."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


@dataclass(frozen=True)
class ScoreEstimate:
    """Preview of the score a piece of code would earn right now."""
    byte_count: int
    min_bytes: int  # Minimum the code would be scored against
    score: int


@dataclass(frozen=True)
class RankingEntry:
    """A handle's best submission to one challenge."""
    rank: int
    handle: str
    byte_count: int
    score: int
    submitted_at: datetime
    submission_id: Optional[str] = None


@dataclass(frozen=True)
class LadderEntry:
    """A handle's standing across all challenges."""
    rank: int
    handle: str
    total_score: int
    solved_count: int
