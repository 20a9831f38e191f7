"""
Gauntlet - Main FastAPI Application

Timed, strictly ordered capture-the-flag challenges with a live leaderboard.
"""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import CHALLENGES_FILE, LOG_LEVEL
from .db import init_db, get_db_session
from .engine import seed_challenges
from .api import challenges_router, participants_router, leaderboard_router
from . import __version__

logger = logging.getLogger(__name__)

# Create app
app = FastAPI(
    title="Gauntlet",
    description="Progressive capture-the-flag challenges: solve in order, beat the clock, climb the leaderboard.",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS - allow all for API access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_timing_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = f"{process_time:.3f}s"
    return response


# Exception handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "error_code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "retryable": False,
        }
    )


# Include routers
app.include_router(challenges_router)
app.include_router(participants_router)
app.include_router(leaderboard_router)


# Root endpoint
@app.get("/")
async def root():
    return {
        "name": "Gauntlet",
        "version": __version__,
        "description": "Progressive capture-the-flag challenges",
        "docs": "/docs",
        "endpoints": {
            "challenges": "/challenges",
            "event": "/event",
            "board": "/participants/{participant_id}/challenges",
            "submit": "/participants/{participant_id}/challenges/{id}/submit",
            "hints": "/participants/{participant_id}/challenges/{id}/hints",
            "timer": "/participants/{participant_id}/challenges/{id}/timer",
            "leaderboard": "/leaderboard",
        },
    }


# Health check
@app.get("/health")
async def health():
    """Health check endpoint for monitoring."""
    from datetime import datetime
    from sqlalchemy import text
    from .db import SessionLocal
    
    health_status = {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }
    
    # Check database connectivity
    try:
        db = SessionLocal()
        db.execute(text("SELECT 1"))
        db.close()
        health_status["database"] = "connected"
    except Exception as e:
        health_status["status"] = "degraded"
        health_status["database"] = f"error: {str(e)}"
    
    return health_status


# Startup event
@app.on_event("startup")
async def startup():
    """Initialize logging, database and challenge catalog on startup."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    with get_db_session() as db:
        seed_challenges(db, CHALLENGES_FILE)
    logger.info("Gauntlet v%s started", __version__)


# For direct running
if __name__ == "__main__":
    import uvicorn
    from .config import API_HOST, API_PORT
    
    uvicorn.run(app, host=API_HOST, port=API_PORT)
