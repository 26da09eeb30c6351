"""SQLAlchemy models for CCG Arena."""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, Index, JSON
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


class Challenge(Base):
    """A code golf challenge. Immutable once published."""
    
    __tablename__ = "challenges"
    
    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String(256), nullable=False)
    description = Column(Text, nullable=False)
    difficulty = Column(Integer, nullable=False)  # D value, maximum score
    input_format = Column(Text, nullable=False, default="")
    output_format = Column(Text, nullable=False, default="")
    examples = Column(JSON, nullable=False, default=list)  # [{input, output, explanation}]
    detail_url = Column(String(512), nullable=False, default="")
    ranking_url = Column(String(512), nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow)
    is_active = Column(Boolean, default=True)
    
    # Running minimum byte length, null until the first submission
    min_bytes = Column(Integer, nullable=True)
    
    submissions = relationship("Submission", back_populates="challenge")
    
    def __repr__(self):
        return f"<Challenge {self.id} D={self.difficulty}>"


class Submission(Base):
    """A scored submission. Resubmitting creates a new row."""
    
    __tablename__ = "submissions"
    
    id = Column(String(36), primary_key=True)  # UUID
    challenge_id = Column(Integer, ForeignKey("challenges.id"), nullable=False)
    handle = Column(String(64), nullable=False)
    code = Column(Text, nullable=False)
    byte_count = Column(Integer, nullable=False)  # UTF-8 length of code
    score = Column(Integer, nullable=False)  # Higher is better
    min_bytes_at_submission = Column(Integer, nullable=False)
    submitted_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    
    challenge = relationship("Challenge", back_populates="submissions")
    
    __table_args__ = (
        Index("ix_submissions_challenge_score", "challenge_id", "score"),
        Index("ix_submissions_handle_challenge", "handle", "challenge_id"),
    )
    
    def __repr__(self):
        return f"<Submission {self.id[:8]} {self.handle} score={self.score}>"
