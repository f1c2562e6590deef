"""Reporting API endpoints — summary, bug report, daily digest."""

from fastapi import APIRouter, Query

from feedback_engine.config import settings
from feedback_engine.services.digest import digest_generator
from feedback_engine.services.reports import report_service

router = APIRouter(prefix="/api", tags=["reports"])


@router.get("/summary")
async def get_summary():
    """Counts by sentiment, theme and type."""
    return {"ok": True, **await report_service.summary()}


@router.get("/bug-report")
async def get_bug_report(
    min_urgency: int = Query(4, ge=1, le=5),
    limit: int = Query(10, ge=1, le=200),
):
    """Prioritized issues plus a ready-to-send message for engineering."""
    return {"ok": True, **await report_service.bug_report(min_urgency=min_urgency, limit=limit)}


@router.get("/digest")
async def get_digest():
    """Latest daily digest."""
    digest = await digest_generator.latest_digest()
    if digest is None:
        return {
            "ok": False,
            "message": (
                "No digest available yet. First digest will be generated "
                f"at {settings.digest_hour_utc:02d}:00 UTC."
            ),
        }
    return {"ok": True, "digest": digest}


@router.post("/digest/generate")
async def generate_digest():
    """Build today's digest now instead of waiting for the schedule."""
    return {"ok": True, "digest": await digest_generator.generate_daily_digest()}
