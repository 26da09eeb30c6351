"""Challenge API endpoints."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Response
from sqlalchemy.orm import Session
import structlog

from ..db import get_db, Challenge
from ..content import ChallengeExample, ChallengeRecord, ContentAPIError, ContentClient, ServerError
from ..scoring import estimate_score
from .schemas import (
    ChallengeInfo,
    ChallengeListItem,
    ScoreEstimateRequest,
    ScoreEstimateResult,
    SyncResult,
)

router = APIRouter(prefix="/challenges", tags=["challenges"])

log = structlog.get_logger()

# Launch challenges, registered on first listing
CHALLENGES = {
    0: ChallengeRecord(
        id=0,
        title="Print a Diamond",
        description="Print a diamond of the given size using the shortest code.",
        difficulty=150,
        input_format="An integer n (1 <= n <= 100), the size of the diamond",
        output_format="A diamond made of * characters",
        examples=[
            ChallengeExample(
                input="3",
                output="  *\n ***\n*****\n ***\n  *",
                explanation="A diamond of size 3",
            ),
        ],
        detail_url="https://chenyuheee.github.io/c/competition/0.html",
        ranking_url="https://chenyuheee.github.io/c/competition/rank/week.html?problem=0",
    ),
    1: ChallengeRecord(
        id=1,
        title="Fibonacci",
        description="Compute the n-th Fibonacci number.",
        difficulty=100,
        input_format="An integer n (1 <= n <= 40)",
        output_format="The n-th Fibonacci number",
        examples=[
            ChallengeExample(input="5", output="5", explanation="The 5th Fibonacci number is 5"),
        ],
        detail_url="https://chenyuheee.github.io/c/competition/1.html",
        ranking_url="https://chenyuheee.github.io/c/competition/rank/week.html?problem=1",
    ),
}


async def get_content_client():
    """Dependency yielding a client for the content site."""
    client = ContentClient()
    try:
        yield client
    finally:
        await client.aclose()


def challenge_from_record(record: ChallengeRecord) -> Challenge:
    return Challenge(
        id=record.id,
        title=record.title,
        description=record.description,
        difficulty=record.difficulty,
        input_format=record.input_format,
        output_format=record.output_format,
        examples=[example.model_dump() for example in record.examples],
        detail_url=record.detail_url,
        ranking_url=record.ranking_url,
        is_active=True,
    )


def register_challenges(db: Session, records) -> SyncResult:
    """Insert challenges that are not stored yet. Published challenges are never rewritten."""
    records = list(records)
    created, skipped = [], []
    for record in records:
        if db.get(Challenge, record.id) is not None:
            skipped.append(record.id)
            continue
        db.add(challenge_from_record(record))
        created.append(record.id)
    db.commit()
    return SyncResult(fetched=len(records), created=created, skipped=skipped)


def get_challenge(db: Session, challenge_id: int) -> Challenge:
    """Get challenge by ID or raise 404."""
    challenge = db.get(Challenge, challenge_id)
    if challenge is None and challenge_id in CHALLENGES:
        register_challenges(db, [CHALLENGES[challenge_id]])
        challenge = db.get(Challenge, challenge_id)
    if challenge is None:
        raise HTTPException(
            status_code=404,
            detail={"error_code": "NOT_FOUND", "message": f"Challenge {challenge_id} not found"},
        )
    return challenge


@router.get("", response_model=list[ChallengeListItem])
async def list_challenges(q: Optional[str] = None, db: Session = Depends(get_db)):
    """
    List all active challenges.
    
    ``q`` keeps challenges whose title or description contains it, ignoring case.
    """
    register_challenges(db, CHALLENGES.values())
    
    challenges = db.query(Challenge).filter(Challenge.is_active == True).order_by(Challenge.id).all()
    if q:
        needle = q.casefold()
        challenges = [
            c for c in challenges
            if needle in c.title.casefold() or needle in c.description.casefold()
        ]
    return challenges


@router.post("/sync", response_model=SyncResult)
async def sync_challenges(
    db: Session = Depends(get_db),
    client: ContentClient = Depends(get_content_client),
):
    """Import newly published challenges from the content site."""
    try:
        records = await client.fetch_challenges()
    except ContentAPIError as e:
        raise HTTPException(
            status_code=502,
            detail={"error_code": "CONTENT_UNAVAILABLE", "message": str(e)},
        )
    
    result = register_challenges(db, records)
    log.info("challenges_synced", fetched=result.fetched, created=result.created)
    return result


@router.get("/{challenge_id}", response_model=ChallengeInfo)
async def get_challenge_info(challenge_id: int, db: Session = Depends(get_db)):
    """Get detailed information about a challenge."""
    return get_challenge(db, challenge_id)


@router.get("/{challenge_id}/examples", response_model=list[ChallengeExample])
async def get_challenge_examples(challenge_id: int, db: Session = Depends(get_db)):
    """Example input/output pairs for a challenge."""
    return get_challenge(db, challenge_id).examples


@router.get("/{challenge_id}/detail")
async def get_challenge_detail(
    challenge_id: int,
    db: Session = Depends(get_db),
    client: ContentClient = Depends(get_content_client),
):
    """The challenge's rendered detail page from the content site."""
    get_challenge(db, challenge_id)
    
    try:
        html = await client.fetch_challenge_detail(challenge_id)
    except ServerError as e:
        status_code = 404 if e.status_code == 404 else 502
        raise HTTPException(
            status_code=status_code,
            detail={"error_code": "DETAIL_UNAVAILABLE", "message": str(e)},
        )
    except ContentAPIError as e:
        raise HTTPException(
            status_code=502,
            detail={"error_code": "CONTENT_UNAVAILABLE", "message": str(e)},
        )
    
    return Response(content=html, media_type="text/html; charset=utf-8")


@router.post("/{challenge_id}/estimate", response_model=ScoreEstimateResult)
async def estimate_challenge_score(
    challenge_id: int,
    request: ScoreEstimateRequest,
    db: Session = Depends(get_db),
):
    """
    Preview the score for a piece of code without submitting it.
    
    The code is scored against the current shortest submission, or against
    itself if it would become the new shortest.
    """
    challenge = get_challenge(db, challenge_id)
    estimate = estimate_score(challenge.difficulty, challenge.min_bytes, request.code)
    
    return ScoreEstimateResult(
        challenge_id=challenge.id,
        byte_count=estimate.byte_count,
        min_bytes=estimate.min_bytes,
        score=estimate.score,
        difficulty=challenge.difficulty,
    )
