"""Feedback model — core storage for submitted product feedback."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, Text, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from feedback_engine.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Feedback(Base):
    __tablename__ = "feedback"

    id: Mapped[int] = mapped_column(primary_key=True)
    source: Mapped[str] = mapped_column(String(64), default="manual", index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)
    type: Mapped[Optional[str]] = mapped_column(String(32), index=True)  # bug, idea, general, testimonial

    # Analysis (NULL / 0 until classified)
    theme: Mapped[Optional[str]] = mapped_column(String(32), index=True)
    sentiment: Mapped[Optional[str]] = mapped_column(String(16))
    urgency: Mapped[int] = mapped_column(Integer, default=0, index=True)

    def __repr__(self):
        return f"<Feedback {self.id}: {self.theme or 'unanalyzed'} ({self.urgency}/5)>"
