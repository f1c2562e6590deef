"""Daily digest — snapshot of top themes and urgent items, one per UTC day."""

import asyncio
import logging
from datetime import datetime, timezone, timedelta
from typing import Optional

from sqlalchemy import select, func, desc

from feedback_engine.config import settings
from feedback_engine.database import async_session
from feedback_engine.models.digest import DailyDigest
from feedback_engine.models.feedback import Feedback
from feedback_engine.services.taxonomy import URGENT_THRESHOLD

logger = logging.getLogger(__name__)

TOP_THEMES = 3
TOP_URGENT = 5


def digest_to_dict(d: DailyDigest) -> dict:
    return {
        "date": d.date,
        "top_themes": d.top_themes or [],
        "urgent_items": d.urgent_items or [],
        "total_feedback": d.total_feedback,
        "created_at": d.created_at.isoformat() if d.created_at else None,
    }


def seconds_until_next_run(now: datetime, hour_utc: int) -> float:
    """Seconds from *now* until the next occurrence of ``hour_utc:00`` UTC."""
    target = now.replace(hour=hour_utc, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class DigestGenerator:
    """Builds and stores the daily digest."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or async_session

    async def generate_daily_digest(self, now: Optional[datetime] = None) -> dict:
        """Create or refresh today's digest."""
        now = now or datetime.now(timezone.utc)
        today = now.date().isoformat()

        async with self.session_factory() as db:
            theme_rows = await db.execute(
                select(Feedback.theme, func.count(Feedback.id).label("count"))
                .where(Feedback.theme.is_not(None))
                .group_by(Feedback.theme)
                .order_by(desc("count"))
                .limit(TOP_THEMES)
            )
            top_themes = [{"theme": row[0], "count": row[1]} for row in theme_rows.all()]

            urgent_rows = await db.execute(
                select(Feedback)
                .where(Feedback.urgency >= URGENT_THRESHOLD)
                .order_by(desc(Feedback.urgency), desc(Feedback.id))
                .limit(TOP_URGENT)
            )
            urgent_items = [
                {
                    "id": f.id,
                    "content": f.content[:100] + ("..." if len(f.content) > 100 else ""),
                    "theme": f.theme,
                    "urgency": f.urgency,
                }
                for f in urgent_rows.scalars().all()
            ]

            total = (await db.execute(select(func.count(Feedback.id)))).scalar() or 0

            existing = (await db.execute(
                select(DailyDigest).where(DailyDigest.date == today)
            )).scalar_one_or_none()

            digest = existing or DailyDigest(date=today)
            digest.top_themes = top_themes
            digest.urgent_items = urgent_items
            digest.total_feedback = total
            digest.created_at = now
            if existing is None:
                db.add(digest)
            await db.commit()

        logger.info(
            f"Daily digest generated for {today}: "
            f"themes={len(top_themes)}, urgent={len(urgent_items)}, total={total}"
        )
        return digest_to_dict(digest)

    async def latest_digest(self) -> Optional[dict]:
        async with self.session_factory() as db:
            digest = (await db.execute(
                select(DailyDigest).order_by(desc(DailyDigest.date)).limit(1)
            )).scalar_one_or_none()
            return digest_to_dict(digest) if digest else None

    async def run_forever(self):
        """Background task that regenerates the digest once a day."""
        while True:
            try:
                delay = seconds_until_next_run(datetime.now(timezone.utc), settings.digest_hour_utc)
                logger.info(f"Next daily digest in {delay / 3600:.1f}h")
                await asyncio.sleep(delay)
                await self.generate_daily_digest()
            except asyncio.CancelledError:
                logger.info("Daily digest task cancelled")
                break
            except Exception as e:
                logger.error(f"Daily digest error: {e}")
                await asyncio.sleep(60)  # Brief pause on error before retry


# Singleton
digest_generator = DigestGenerator()
