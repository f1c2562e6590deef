"""Analysis API endpoints — re-run classification on demand."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from feedback_engine.services.processor import feedback_processor

router = APIRouter(prefix="/api", tags=["analysis"])


class AnalyzeRequest(BaseModel):
    id: int


class AnalyzeAllResult(BaseModel):
    ok: bool = True
    message: str
    total: int
    analyzed: int
    failed: int
    errors: list[str] = []


@router.post("/analyze")
async def analyze_feedback(body: AnalyzeRequest):
    """Classify (or re-classify) a single feedback item."""
    analysis = await feedback_processor.analyze_by_id(body.id)
    if analysis is None:
        raise HTTPException(status_code=404, detail="Feedback not found")
    return {"ok": True, "id": body.id, "analysis": analysis.to_dict()}


@router.post("/analyze-all", response_model=AnalyzeAllResult)
async def analyze_all():
    """Classify every feedback item that has no theme or sentiment yet."""
    result = await feedback_processor.analyze_unanalyzed()
    return AnalyzeAllResult(
        message=f"Analyzed {result['analyzed']} out of {result['total']} unanalyzed feedback items.",
        **result,
    )
