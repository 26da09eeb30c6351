"""Submission API - score, record and rank code golf submissions."""

import uuid
from datetime import datetime, timedelta
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func, or_, select, update
import structlog

from ..db import get_db, Challenge, Submission
from ..config import MAX_CODE_BYTES, SUBMISSIONS_PER_HOUR
from ..scoring import InvalidInput, MinimumStore, byte_length, rank_submissions, validate_handle
from .schemas import SubmissionCreate, SubmissionInfo, Leaderboard, LeaderboardEntry
from .challenges import get_challenge

router = APIRouter(prefix="/challenges", tags=["submissions"])

log = structlog.get_logger()

# Running minimum byte length per challenge, seeded from the database
minimums = MinimumStore()


# ============ Helper Functions ============

def check_rate_limit(db: Session, handle: str, challenge_id: int) -> None:
    """Check if a handle has exceeded the rate limit."""
    one_hour_ago = datetime.utcnow() - timedelta(hours=1)
    
    recent_submissions = db.query(Submission).filter(
        Submission.handle == handle,
        Submission.challenge_id == challenge_id,
        Submission.submitted_at > one_hour_ago,
    ).count()
    
    if recent_submissions >= SUBMISSIONS_PER_HOUR:
        raise HTTPException(
            status_code=429,
            detail={
                "error_code": "RATE_LIMITED",
                "message": f"Rate limit exceeded. Max {SUBMISSIONS_PER_HOUR} submissions per hour.",
                "retry_after_seconds": 3600,
            }
        )


def challenge_submissions(db: Session, challenge_id: int) -> list:
    return db.query(Submission).filter(Submission.challenge_id == challenge_id).all()


def current_rank(db: Session, challenge_id: int, handle: str):
    """The handle's position on the challenge leaderboard, if it has one."""
    for entry in rank_submissions(challenge_submissions(db, challenge_id)):
        if entry.handle == handle:
            return entry.rank
    return None


def stored_min_bytes(db: Session, challenge_id: int) -> Optional[int]:
    """Current persisted minimum, read fresh rather than from a loaded row."""
    return db.execute(
        select(Challenge.min_bytes).where(Challenge.id == challenge_id).with_for_update()
    ).scalar_one_or_none()


def lower_min_bytes(db: Session, challenge_id: int, new_min: int) -> None:
    """Write the minimum only if it is lower than what is stored."""
    db.execute(
        update(Challenge)
        .where(
            Challenge.id == challenge_id,
            or_(Challenge.min_bytes.is_(None), Challenge.min_bytes > new_min),
        )
        .values(min_bytes=new_min)
        .execution_options(synchronize_session=False)
    )


def accept_submission(db: Session, challenge: Challenge, handle: str, code: str) -> Submission:
    """
    Score and record a submission.
    
    The persisted minimum is re-read and updated before scoring, so the first
    submission to a challenge earns its full difficulty. The in-process
    minimum only moves once the submission is committed. Earlier scores are
    left untouched when a shorter submission arrives.
    """
    byte_count = byte_length(code)
    if byte_count > MAX_CODE_BYTES:
        raise HTTPException(
            status_code=413,
            detail={
                "error_code": "CODE_TOO_LARGE",
                "message": f"Code too large ({byte_count} bytes > {MAX_CODE_BYTES} limit)",
            }
        )
    
    submission = Submission(
        id=str(uuid.uuid4()),
        challenge_id=challenge.id,
        handle=handle,
        code=code,
        byte_count=byte_count,
    )
    
    def load() -> Optional[int]:
        return stored_min_bytes(db, challenge.id)
    
    def persist(score: int, new_min: int) -> None:
        submission.score = score
        submission.min_bytes_at_submission = new_min
        submission.submitted_at = datetime.utcnow()
        db.add(submission)
        lower_min_bytes(db, challenge.id, new_min)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
    
    score, new_min = minimums.accept(
        challenge.id, challenge.difficulty, byte_count, load=load, persist=persist,
    )
    db.refresh(submission)
    
    log.info(
        "submission_accepted",
        submission_id=submission.id,
        challenge_id=challenge.id,
        handle=handle,
        byte_count=byte_count,
        score=score,
        min_bytes=new_min,
    )
    return submission


def submission_info(db: Session, submission: Submission) -> SubmissionInfo:
    info = SubmissionInfo.model_validate(submission)
    info.rank = current_rank(db, submission.challenge_id, submission.handle)
    return info


# ============ Endpoints ============

@router.post("/{challenge_id}/submit", response_model=SubmissionInfo)
async def submit_solution(
    challenge_id: int,
    submission: SubmissionCreate,
    db: Session = Depends(get_db),
):
    """
    Submit code to a challenge.
    
    The score is computed immediately from the code's UTF-8 byte length and
    the shortest submission so far.
    """
    challenge = get_challenge(db, challenge_id)
    
    handle = validate_handle(submission.handle)
    if not submission.code:
        raise InvalidInput("code", "must not be empty")
    
    check_rate_limit(db, handle, challenge_id)
    
    accepted = accept_submission(db, challenge, handle, submission.code)
    return submission_info(db, accepted)


@router.get("/submissions/{submission_id}", response_model=SubmissionInfo)
async def get_submission(
    submission_id: str,
    db: Session = Depends(get_db),
):
    """Get a submission with the handle's current rank."""
    submission = db.query(Submission).filter(Submission.id == submission_id).first()
    
    if not submission:
        raise HTTPException(
            status_code=404,
            detail={"error_code": "NOT_FOUND", "message": "Submission not found"}
        )
    
    return submission_info(db, submission)


@router.get("/{challenge_id}/leaderboard", response_model=Leaderboard)
async def get_leaderboard(
    challenge_id: int,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    """Get the leaderboard for a challenge."""
    challenge = get_challenge(db, challenge_id)
    
    submissions = challenge_submissions(db, challenge_id)
    ranking = rank_submissions(submissions)
    
    entries = [
        LeaderboardEntry(
            id=entry.submission_id,
            rank=entry.rank,
            handle=entry.handle,
            byte_count=entry.byte_count,
            score=entry.score,
            submitted_at=entry.submitted_at,
        )
        for entry in ranking[:limit]
    ]
    
    unique_handles = db.query(func.count(func.distinct(Submission.handle))).filter(
        Submission.challenge_id == challenge_id,
    ).scalar()
    
    return Leaderboard(
        challenge_id=challenge.id,
        difficulty=challenge.difficulty,
        min_bytes=challenge.min_bytes,
        entries=entries,
        total_submissions=len(submissions),
        unique_handles=unique_handles or 0,
    )
