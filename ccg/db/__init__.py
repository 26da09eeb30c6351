"""Database module."""

from .database import get_db, get_db_session, init_db, reset_db, SessionLocal
from .models import Base, Challenge, Submission

__all__ = ["get_db", "get_db_session", "init_db", "reset_db", "SessionLocal", "Base", "Challenge", "Submission"]
