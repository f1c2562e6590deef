"""Daily digest model — one aggregated snapshot per UTC day."""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from feedback_engine.database import Base


class DailyDigest(Base):
    __tablename__ = "daily_digest"

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[str] = mapped_column(String(10), unique=True, nullable=False, index=True)  # YYYY-MM-DD
    top_themes: Mapped[list] = mapped_column(JSON, default=list)  # [{"theme": "r2", "count": 4}]
    urgent_items: Mapped[list] = mapped_column(JSON, default=list)
    total_feedback: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self):
        return f"<DailyDigest {self.date}: {self.total_feedback} items>"
