"""Configuration for CCG Arena."""

import os
from pathlib import Path

# Paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("CCG_DATA_DIR", BASE_DIR / "data"))
DB_PATH = Path(os.getenv("DB_PATH", DATA_DIR / "ccg.db"))

# Static content site (problems.json, <id>.html, rank/*.json)
CONTENT_BASE_URL = os.getenv("CONTENT_BASE_URL", "https://chenyuheee.github.io/c/competition")
CONTENT_TIMEOUT_SECONDS = float(os.getenv("CONTENT_TIMEOUT_SECONDS", "30"))

# Submissions
SUBMISSIONS_PER_HOUR = int(os.getenv("SUBMISSIONS_PER_HOUR", "30"))
MAX_CODE_BYTES = int(os.getenv("MAX_CODE_BYTES", str(64 * 1024)))  # 64KB

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# API
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
