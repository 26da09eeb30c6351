"""Shared fixtures."""

import os
import tempfile

# Point the database at a throwaway directory before ccg is imported
os.environ["CCG_DATA_DIR"] = tempfile.mkdtemp(prefix="ccg-test-")

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from ccg.db import reset_db
from ccg.main import app
from ccg.api.submissions import minimums


@dataclass(frozen=True)
class Record:
    """Plain submission record for scoring tests."""
    handle: str
    challenge_id: int
    byte_count: int
    score: int
    submitted_at: datetime
    id: Optional[str] = None


BASE_TIME = datetime(2025, 11, 8, 10, 30)


def at(minutes: int) -> datetime:
    return BASE_TIME + timedelta(minutes=minutes)


@pytest.fixture
def client():
    reset_db()
    minimums.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
