"""Scoring engine and leaderboard ordering."""

from .base import InvalidInput, LadderEntry, RankingEntry, ScoreEstimate, ScoringError
from .engine import (
    build_ladder,
    byte_length,
    compute_score,
    estimate_score,
    rank_submissions,
    update_minimum,
    validate_handle,
)
from .minimums import MinimumStore

__all__ = [
    "InvalidInput",
    "LadderEntry",
    "MinimumStore",
    "RankingEntry",
    "ScoreEstimate",
    "ScoringError",
    "build_ladder",
    "byte_length",
    "compute_score",
    "estimate_score",
    "rank_submissions",
    "update_minimum",
    "validate_handle",
]
