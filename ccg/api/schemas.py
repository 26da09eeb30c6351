"""Pydantic schemas for API."""

from datetime import datetime
from typing import Optional, List, Dict
from pydantic import BaseModel, Field

from ..content.models import ChallengeRecord


# Challenge schemas
class ChallengeInfo(ChallengeRecord):
    is_active: bool = True
    min_bytes: Optional[int] = None
    
    class Config:
        from_attributes = True


class ChallengeListItem(BaseModel):
    id: int
    title: str
    difficulty: int
    is_active: bool
    min_bytes: Optional[int] = None
    
    class Config:
        from_attributes = True


class SyncResult(BaseModel):
    fetched: int
    created: List[int]
    skipped: List[int]


# Scoring schemas
class ScoreEstimateRequest(BaseModel):
    code: str


class ScoreEstimateResult(BaseModel):
    challenge_id: int
    byte_count: int
    min_bytes: int
    score: int
    difficulty: int


# Submission schemas
class SubmissionCreate(BaseModel):
    handle: str = Field(..., max_length=64)
    code: str


class SubmissionInfo(BaseModel):
    id: str
    challenge_id: int
    handle: str
    code: str
    byte_count: int
    score: int
    min_bytes_at_submission: int
    submitted_at: datetime
    rank: Optional[int] = None
    
    class Config:
        from_attributes = True


# Leaderboard schemas
class LeaderboardEntry(BaseModel):
    id: str
    rank: int
    handle: str
    byte_count: int
    score: int
    submitted_at: datetime


class Leaderboard(BaseModel):
    challenge_id: int
    difficulty: int
    min_bytes: Optional[int]
    entries: List[LeaderboardEntry]
    total_submissions: int
    unique_handles: int


class LadderEntry(BaseModel):
    id: str
    handle: str
    total_score: int
    rank: int
    solved_count: int


# Handle schemas
class HandleInfo(BaseModel):
    handle: str
    submission_count: int = 0
    best_scores: Dict[int, int] = {}  # challenge_id -> best score
    total_score: int = 0
    solved_count: int = 0
    ladder_rank: Optional[int] = None

