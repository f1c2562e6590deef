"""Feedback processor — intake, single and batch analysis, suggestions."""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, or_

from feedback_engine.database import async_session
from feedback_engine.models.feedback import Feedback
from feedback_engine.services.classifier import feedback_classifier, FeedbackClassifier, ClassificationResult
from feedback_engine.services.suggestions import suggestion_engine, SuggestionEngine, Suggestion

logger = logging.getLogger(__name__)


class FeedbackProcessor:
    """Stores feedback and runs it through the classification pipeline."""

    def __init__(
        self,
        classifier: FeedbackClassifier = None,
        suggester: SuggestionEngine = None,
        session_factory=None,
    ):
        self.classifier = classifier or feedback_classifier
        self.suggester = suggester or suggestion_engine
        self.session_factory = session_factory or async_session

    async def create_feedback(
        self,
        content: str,
        source: Optional[str] = None,
        feedback_type: Optional[str] = None,
    ) -> dict:
        """Insert a feedback item and analyze it straight away."""
        async with self.session_factory() as db:
            feedback = Feedback(
                source=(source or "").strip() or "manual",
                content=content,
                type=(feedback_type or "").strip() or None,
                created_at=datetime.now(timezone.utc),
                theme=None,
                sentiment=None,
                urgency=0,
            )
            db.add(feedback)
            await db.commit()

        result = {
            "id": feedback.id,
            "source": feedback.source,
            "type": feedback.type,
            "created_at": feedback.created_at.isoformat(),
            "analysis": None,
        }

        try:
            analysis = await self.classifier.classify(content, feedback.id)
            result["analysis"] = analysis.to_dict()
        except Exception as e:
            logger.error(f"Auto-analysis failed for feedback {feedback.id}: {e}")

        return result

    async def get_feedback(self, feedback_id: int) -> Optional[Feedback]:
        async with self.session_factory() as db:
            return await db.get(Feedback, feedback_id)

    async def analyze_by_id(self, feedback_id: int) -> Optional[ClassificationResult]:
        """Re-run analysis for one feedback item; None if it does not exist."""
        feedback = await self.get_feedback(feedback_id)
        if feedback is None:
            return None
        return await self.classifier.classify(feedback.content, feedback.id)

    async def analyze_unanalyzed(self) -> dict:
        """Analyze every item still missing a theme or sentiment, one at a time."""
        async with self.session_factory() as db:
            rows = await db.execute(
                select(Feedback.id, Feedback.content)
                .where(or_(Feedback.theme.is_(None), Feedback.sentiment.is_(None)))
                .order_by(Feedback.id)
            )
            pending = rows.all()

        result = {"total": len(pending), "analyzed": 0, "failed": 0, "errors": []}
        if not pending:
            logger.info("No unanalyzed feedback found")
            return result

        logger.info(f"Analyzing {len(pending)} unanalyzed feedback items...")

        for feedback_id, content in pending:
            try:
                await self.classifier.classify(content, feedback_id)
                result["analyzed"] += 1
            except Exception as e:
                logger.error(f"Failed to analyze feedback {feedback_id}: {e}")
                result["failed"] += 1
                result["errors"].append(f"Failed to analyze feedback #{feedback_id}: {e}")

        logger.info(f"Batch analysis done: {result['analyzed']} ok, {result['failed']} failed")
        return result

    async def suggest_for(self, feedback_id: int) -> Optional[list[Suggestion]]:
        """Suggest next actions for one feedback item; None if it does not exist."""
        feedback = await self.get_feedback(feedback_id)
        if feedback is None:
            return None
        return await self.suggester.suggest(feedback)


# Singleton
feedback_processor = FeedbackProcessor()
