"""Feedback API endpoints — submit, browse, and get next-step suggestions."""

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel
from typing import Optional

from feedback_engine.services.processor import feedback_processor
from feedback_engine.services.reports import report_service

router = APIRouter(prefix="/api/feedback", tags=["feedback"])


class FeedbackCreate(BaseModel):
    content: Optional[str] = None
    source: Optional[str] = None  # e.g. discord, github, email
    type: Optional[str] = None  # bug, idea, general, testimonial


@router.post("")
async def create_feedback(body: FeedbackCreate):
    """Submit feedback; it is analyzed before the response is returned."""
    content = (body.content or "").strip()
    if not content:
        raise HTTPException(status_code=400, detail="Field `content` is required.")

    result = await feedback_processor.create_feedback(
        content=content,
        source=body.source,
        feedback_type=body.type,
    )
    return {"ok": True, **result}


@router.get("")
async def list_feedback(
    limit: int = Query(50, ge=1),
    theme: Optional[str] = None,
):
    """List feedback, most urgent first."""
    items = await report_service.list_feedback(limit=min(limit, 200), theme=theme)
    return {"ok": True, "count": len(items), "items": items}


@router.get("/{feedback_id}/suggestions")
async def get_suggestions(feedback_id: int):
    """Suggest what to do next with a feedback item."""
    suggestions = await feedback_processor.suggest_for(feedback_id)
    if suggestions is None:
        raise HTTPException(status_code=404, detail="Feedback not found")

    return {
        "ok": True,
        "id": feedback_id,
        "suggestions": [s.to_dict() for s in suggestions],
    }
