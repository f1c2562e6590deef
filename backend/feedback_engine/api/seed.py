"""Demo data endpoint."""

from fastapi import APIRouter

from feedback_engine.services.seed import seed_database

router = APIRouter(prefix="/api", tags=["seed"])


@router.post("/seed")
async def seed():
    """Replace all feedback with the demo set (analyzed on insert)."""
    ids = await seed_database()
    return {
        "ok": True,
        "message": f"Seeded {len(ids)} feedback items. All items have been analyzed.",
        "ids": ids,
    }
