"""Records published by the static content site."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class ChallengeExample(BaseModel):
    input: str
    output: str
    explanation: Optional[str] = None


class ChallengeRecord(BaseModel):
    id: int
    title: str
    description: str
    difficulty: int = Field(..., gt=0)
    input_format: str = ""
    output_format: str = ""
    examples: List[ChallengeExample] = []
    detail_url: str = ""
    ranking_url: str = ""


class RankingRecord(BaseModel):
    id: str
    handle: str
    byte_count: int
    score: int
    rank: int
    submitted_at: datetime


class LadderRecord(BaseModel):
    id: str
    handle: str
    total_score: int
    rank: int
    solved_count: int
