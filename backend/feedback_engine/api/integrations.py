"""Integration API endpoints — feedback channels and their items."""

from fastapi import APIRouter

from feedback_engine.services.reports import report_service

router = APIRouter(prefix="/api/integrations", tags=["integrations"])


@router.get("")
async def list_integrations():
    """Feedback channels with per-source counts."""
    return {"ok": True, **await report_service.integrations()}


@router.get("/{source}/feedback")
async def get_integration_feedback(source: str):
    """Latest feedback received through one channel."""
    items = await report_service.integration_feedback(source)
    return {"ok": True, "source": source, "items": items, "count": len(items)}
