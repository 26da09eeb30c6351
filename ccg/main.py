"""
CCG Arena - Main FastAPI Application

Code golf challenges: shortest code wins.
"""

from datetime import datetime
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
import structlog

from .db import init_db, SessionLocal
from .api import challenges_router, submissions_router, handles_router
from .logging_setup import configure_logging
from .scoring import InvalidInput
from . import __version__

configure_logging()
log = structlog.get_logger()

app = FastAPI(
    title="CCG Arena",
    description="Code golf challenges. Scores scale with how close your byte count is to the shortest solution.",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_timing_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = f"{process_time:.3f}s"
    return response


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "error_code": "INVALID_INPUT",
                "message": exc.message,
                "field": exc.field,
            }
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    log.error("unhandled_error", path=request.url.path, error=repr(exc))
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "error_code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
        }
    )


app.include_router(challenges_router)
app.include_router(submissions_router)
app.include_router(handles_router)


@app.get("/")
async def root():
    return {
        "name": "CCG Arena",
        "version": __version__,
        "description": "Code golf challenges, scoring and leaderboards",
        "docs": "/docs",
        "endpoints": {
            "challenges": "/challenges",
            "estimate": "/challenges/{id}/estimate",
            "submit": "/challenges/{id}/submit",
            "leaderboard": "/challenges/{id}/leaderboard",
            "ladder": "/ladder",
            "handles": "/handles/{handle}",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    health_status = {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }
    
    try:
        db = SessionLocal()
        db.execute(text("SELECT 1"))
        db.close()
        health_status["database"] = "connected"
    except Exception as e:
        health_status["status"] = "degraded"
        health_status["database"] = f"error: {str(e)}"
    
    return health_status


@app.on_event("startup")
async def startup():
    """Initialize database on startup."""
    init_db()
    log.info("startup", version=__version__)


if __name__ == "__main__":
    import uvicorn
    from .config import API_HOST, API_PORT
    
    uvicorn.run(app, host=API_HOST, port=API_PORT)
