"""AI Feedback Engine — FastAPI Application."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from feedback_engine.config import settings
from feedback_engine.database import init_db
from feedback_engine.api import analysis, feedback, integrations, reports, seed
from feedback_engine.services.classifier import feedback_classifier
from feedback_engine.services.digest import digest_generator
from feedback_engine.services.suggestions import suggestion_engine

# Logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger("ai-feedback-engine")

# Background digest task handle
_digest_task: asyncio.Task = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic."""
    global _digest_task

    # Startup
    logger.info("=" * 60)
    logger.info("AI Feedback Engine starting up")
    logger.info(f"Database: {settings.database_url.split('@')[-1]}")
    if settings.llm_enabled:
        logger.info(f"Model: {settings.ollama_model} @ {settings.ollama_url}")
    else:
        logger.info("Model disabled, using keyword fallback only")
    logger.info("=" * 60)

    await init_db()
    logger.info("Database initialized")

    if settings.digest_enabled:
        _digest_task = asyncio.create_task(digest_generator.run_forever())
        logger.info(f"Daily digest task started ({settings.digest_hour_utc:02d}:00 UTC)")

    yield

    # Shutdown
    logger.info("Shutting down...")
    if _digest_task:
        _digest_task.cancel()
        try:
            await _digest_task
        except asyncio.CancelledError:
            pass
    await feedback_classifier.close()
    await suggestion_engine.close()
    logger.info("Shutdown complete")


# Create app
app = FastAPI(
    title="AI Feedback Engine",
    description="Product feedback intake with AI theme, sentiment and urgency analysis",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS: the dashboard UI calls the API directly
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["content-type"],
)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"ok": False, "error": "Internal error", "details": str(exc)},
    )


# Register routers
app.include_router(feedback.router)
app.include_router(analysis.router)
app.include_router(reports.router)
app.include_router(integrations.router)
app.include_router(seed.router)


@app.get("/")
async def root():
    """Root endpoint — basic info."""
    return {
        "app": "AI Feedback Engine",
        "version": "0.1.0",
        "status": "running",
        "model_enabled": settings.llm_enabled,
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "digest_scheduled": _digest_task is not None and not _digest_task.done(),
    }
