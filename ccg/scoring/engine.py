"""
Code golf scoring.

A submission's score scales the challenge difficulty by how close its UTF-8
byte length is to the shortest accepted submission:

    score = round(difficulty * min_bytes / byte_count)

Rounding is half away from zero, done in integer arithmetic so that scores
never depend on float representation. The shortest submission earns the full
difficulty.

Ranking and ladder functions accept any objects exposing ``handle``,
``challenge_id``, ``byte_count``, ``score`` and ``submitted_at`` (ORM rows or
plain records alike).
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from .base import InvalidInput, LadderEntry, RankingEntry, ScoreEstimate

ENCODING = "utf-8"


def _require_positive(field: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(field, f"must be an integer, got {type(value).__name__}")
    if value <= 0:
        raise InvalidInput(field, f"must be positive, got {value}")
    return value


def validate_handle(handle) -> str:
    """Return ``handle`` without surrounding whitespace, or raise InvalidInput."""
    if not isinstance(handle, str) or not handle.strip():
        raise InvalidInput("handle", "must be a non-empty string")
    return handle.strip()


def byte_length(code: str) -> int:
    """Size of ``code`` in bytes once encoded as UTF-8."""
    return len(code.encode(ENCODING))


def compute_score(difficulty: int, min_bytes: int, candidate_bytes: int) -> int:
    """
    Score a candidate against the current minimum byte length.

    Args:
        difficulty: Challenge D-value, the maximum score
        min_bytes: Shortest accepted byte length for the challenge
        candidate_bytes: Byte length of the code being scored

    Returns:
        Integer score in [0, difficulty]

    Raises:
        InvalidInput: if any argument is not a positive integer
    """
    _require_positive("difficulty", difficulty)
    _require_positive("min_bytes", min_bytes)
    _require_positive("candidate_bytes", candidate_bytes)

    # A candidate shorter than a stale minimum is capped at full credit
    if candidate_bytes <= min_bytes:
        return difficulty

    # floor(x + 1/2) == round-half-away-from-zero for positive x
    return (2 * difficulty * min_bytes + candidate_bytes) // (2 * candidate_bytes)


def update_minimum(current_min: Optional[int], new_bytes: int) -> int:
    """Fold a newly accepted byte length into the running minimum."""
    _require_positive("new_bytes", new_bytes)
    if current_min is None:
        return new_bytes
    _require_positive("current_min", current_min)
    return min(current_min, new_bytes)


def estimate_score(difficulty: int, current_min: Optional[int], code: str) -> ScoreEstimate:
    """Score ``code`` as if it were submitted now, without recording anything."""
    if not code:
        raise InvalidInput("code", "must not be empty")
    byte_count = byte_length(code)
    min_bytes = update_minimum(current_min, byte_count)
    return ScoreEstimate(
        byte_count=byte_count,
        min_bytes=min_bytes,
        score=compute_score(difficulty, min_bytes, byte_count),
    )


def _ranking_key(submission):
    return (-submission.score, submission.submitted_at, submission.handle)


def rank_submissions(submissions: Iterable) -> List[RankingEntry]:
    """
    Build a challenge leaderboard.

    Each handle is represented by its best submission. Entries are ordered by
    score (high first), then by who got there first, then by handle. Ranks run
    1..n without gaps or shared positions.
    """
    best: Dict[str, object] = {}
    challenge_id = None

    for sub in submissions:
        validate_handle(sub.handle)
        if challenge_id is None:
            challenge_id = sub.challenge_id
        elif sub.challenge_id != challenge_id:
            raise InvalidInput(
                "challenge_id",
                f"cannot rank challenges {challenge_id} and {sub.challenge_id} together",
            )
        current = best.get(sub.handle)
        if current is None or _ranking_key(sub) < _ranking_key(current):
            best[sub.handle] = sub

    ordered = sorted(best.values(), key=_ranking_key)
    return [
        RankingEntry(
            rank=i + 1,
            handle=sub.handle,
            byte_count=sub.byte_count,
            score=sub.score,
            submitted_at=sub.submitted_at,
            submission_id=getattr(sub, "id", None),
        )
        for i, sub in enumerate(ordered)
    ]


def build_ladder(submissions: Iterable) -> List[LadderEntry]:
    """
    Build the aggregate ladder across all challenges.

    A handle's total is the sum of its best score on every challenge it has
    submitted to. Ties on total go to the handle that solved more challenges,
    then alphabetically.
    """
    best: Dict[str, Dict[int, int]] = defaultdict(dict)

    for sub in submissions:
        validate_handle(sub.handle)
        per_challenge = best[sub.handle]
        previous = per_challenge.get(sub.challenge_id)
        if previous is None or sub.score > previous:
            per_challenge[sub.challenge_id] = sub.score

    rows = [
        (handle, sum(scores.values()), len(scores))
        for handle, scores in best.items()
    ]
    rows.sort(key=lambda row: (-row[1], -row[2], row[0]))

    return [
        LadderEntry(rank=i + 1, handle=handle, total_score=total, solved_count=solved)
        for i, (handle, total, solved) in enumerate(rows)
    ]
