"""Handle and ladder API endpoints."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func

from ..db import get_db, Submission
from ..scoring import build_ladder
from .schemas import HandleInfo, LadderEntry, SubmissionInfo

router = APIRouter(tags=["handles"])


def ladder_entries(db: Session) -> list:
    return build_ladder(db.query(Submission).all())


@router.get("/ladder", response_model=list[LadderEntry])
async def get_ladder(limit: int = 100, db: Session = Depends(get_db)):
    """Aggregate ranking: sum of each handle's best score per challenge."""
    return [
        LadderEntry(
            id=entry.handle,
            handle=entry.handle,
            total_score=entry.total_score,
            rank=entry.rank,
            solved_count=entry.solved_count,
        )
        for entry in ladder_entries(db)[:limit]
    ]


@router.get("/handles/{handle}", response_model=HandleInfo)
async def get_handle(handle: str, db: Session = Depends(get_db)):
    """Get a handle's submission count, best scores and ladder standing."""
    submission_count = db.query(Submission).filter(
        Submission.handle == handle
    ).count()
    if submission_count == 0:
        raise HTTPException(
            status_code=404,
            detail={"error_code": "NOT_FOUND", "message": f"Handle '{handle}' has no submissions"},
        )
    
    best_per_challenge = db.query(
        Submission.challenge_id,
        func.max(Submission.score).label('best_score'),
    ).filter(
        Submission.handle == handle,
    ).group_by(Submission.challenge_id).all()
    
    standing = next(
        (entry for entry in ladder_entries(db) if entry.handle == handle),
        None,
    )
    
    return HandleInfo(
        handle=handle,
        submission_count=submission_count,
        best_scores={challenge_id: score for challenge_id, score in best_per_challenge},
        total_score=standing.total_score if standing else 0,
        solved_count=standing.solved_count if standing else 0,
        ladder_rank=standing.rank if standing else None,
    )


@router.get("/handles/{handle}/submissions", response_model=list[SubmissionInfo])
async def get_handle_submissions(
    handle: str,
    challenge_id: Optional[int] = None,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    """Get submission history for a handle, newest first."""
    query = db.query(Submission).filter(Submission.handle == handle)
    
    if challenge_id is not None:
        query = query.filter(Submission.challenge_id == challenge_id)
    
    return query.order_by(Submission.submitted_at.desc()).limit(limit).all()
