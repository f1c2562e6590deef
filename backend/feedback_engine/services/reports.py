"""Reporting queries — summary breakdowns, bug report, integration counts."""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, func, desc, case, or_

from feedback_engine.config import settings
from feedback_engine.database import async_session
from feedback_engine.models.feedback import Feedback
from feedback_engine.services.taxonomy import DEFAULT_THEME, URGENT_THRESHOLD

logger = logging.getLogger(__name__)

# Feedback channels shown on the dashboard
INTEGRATIONS = [
    {
        "name": "Email",
        "type": "email",
        "icon": "📧",
        "logo": "https://ssl.gstatic.com/ui/v1/icons/mail/rfr/gmail.ico",
    },
    {
        "name": "GitHub Issues",
        "type": "github",
        "icon": "🐙",
        "logo": "https://github.githubassets.com/images/modules/logos_page/GitHub-Mark.png",
    },
    {
        "name": "Discord",
        "type": "discord",
        "icon": "💬",
        "logo": "https://discord.com/assets/f9bb9c4af2b9c32a2c5ee0014661546d.png",
    },
    {
        "name": "Cloudflare",
        "type": "cloudflare",
        "icon": "☁️",
        "logo": "https://www.cloudflare.com/favicon.ico",
    },
    {
        "name": "LinkedIn",
        "type": "linkedin",
        "icon": "💼",
        "logo": "https://static.licdn.com/sc/h/al2o9zrvru7aqj8e1x2rzsrca",
    },
]


def feedback_to_dict(f: Feedback) -> dict:
    return {
        "id": f.id,
        "source": f.source,
        "content": f.content,
        "created_at": f.created_at.isoformat() if f.created_at else None,
        "type": f.type,
        "theme": f.theme,
        "sentiment": f.sentiment,
        "urgency": f.urgency,
    }


def _urgent_count():
    return func.sum(case((Feedback.urgency >= URGENT_THRESHOLD, 1), else_=0))


def _truncate(text: str, length: int) -> str:
    return text[:length] + ("..." if len(text) > length else "")


def format_bug_report(bugs: list[dict], bugs_by_theme: dict[str, list[dict]]) -> str:
    """Render the prioritized bug list as a Markdown message for engineering."""
    critical = sum(1 for b in bugs if b["urgency"] >= 5)
    high = sum(1 for b in bugs if b["urgency"] == 4)
    confirmed = sum(1 for b in bugs if b["type"] == "bug")

    lines = [
        "🚨 **Prioritized Bug Report for Engineering Team**",
        "",
        "**Summary:**",
        f"• {critical} Critical issues (Urgency 5/5)",
        f"• {high} High priority issues (Urgency 4/5)",
        f"• {confirmed} Confirmed bugs",
        f"• Total items requiring attention: {len(bugs)}",
        "",
        "**Breakdown by Product Theme:**",
        "",
    ]

    for theme, items in sorted(bugs_by_theme.items(), key=lambda kv: len(kv[1]), reverse=True):
        critical_in_theme = sum(1 for b in items if b["urgency"] >= 5)
        lines.append(f"**{theme.upper()}** ({len(items)} items, {critical_in_theme} critical):")

        for bug in sorted(items, key=lambda b: b["urgency"], reverse=True):
            if bug["urgency"] >= 5:
                urgency_label = "🔴 CRITICAL"
            elif bug["urgency"] >= 4:
                urgency_label = "🟠 HIGH"
            else:
                urgency_label = "🟡 MEDIUM"
            bug_label = "🐛 BUG" if bug["type"] == "bug" else ""
            sentiment_label = "😞 Negative" if bug["sentiment"] == "negative" else ""

            lines.append("")
            lines.append(f"{urgency_label} {bug_label} {sentiment_label}")
            lines.append(f"ID: #{bug['id']} | Source: {bug['source']}")
            lines.append(f"\"{_truncate(bug['content'], 150)}\"")
            lines.append(f"Created: {(bug['created_at'] or '')[:10]}")
        lines.append("")

    lines += [
        "**Action Items:**",
        "1. Review critical issues (Urgency 5) immediately",
        "2. Prioritize confirmed bugs for next sprint",
        "3. Address negative sentiment items to improve user experience",
        "4. Follow up on high-priority items within 24-48 hours",
        "",
        "**Next Steps:**",
        "• Engineering team to triage and assign owners",
        "• PM to follow up on user-facing issues",
        "• Update status in tracking system",
        "",
        "---",
        f"Generated: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')}",
        f"Dashboard: [View Full Details]({settings.dashboard_url})",
    ]
    return "\n".join(lines) + "\n"


class ReportService:
    """Read-only aggregate views over the feedback table."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or async_session

    async def summary(self) -> dict:
        async with self.session_factory() as db:
            total = (await db.execute(select(func.count(Feedback.id)))).scalar() or 0

            sentiment_rows = await db.execute(
                select(Feedback.sentiment, func.count(Feedback.id))
                .where(Feedback.sentiment.is_not(None))
                .group_by(Feedback.sentiment)
            )
            by_sentiment = {row[0]: row[1] for row in sentiment_rows.all()}

            theme_rows = await db.execute(
                select(Feedback.theme, func.count(Feedback.id), _urgent_count())
                .where(Feedback.theme.is_not(None))
                .group_by(Feedback.theme)
            )
            by_theme = [
                {"theme": row[0], "count": row[1], "urgent_count": row[2] or 0}
                for row in theme_rows.all()
            ]
            by_theme.sort(key=lambda t: t["count"], reverse=True)

            type_rows = await db.execute(
                select(
                    Feedback.type,
                    func.count(Feedback.id),
                    _urgent_count(),
                    func.sum(case((Feedback.sentiment == "negative", 1), else_=0)),
                )
                .where(Feedback.type.is_not(None))
                .group_by(Feedback.type)
            )
            by_type = [
                {"type": row[0], "count": row[1], "urgent_count": row[2] or 0, "negative_count": row[3] or 0}
                for row in type_rows.all()
            ]

            urgent = (await db.execute(
                select(func.count(Feedback.id)).where(Feedback.urgency >= URGENT_THRESHOLD)
            )).scalar() or 0

        return {
            "total": total,
            "sentiment": by_sentiment,
            "theme": by_theme,
            "type": by_type,
            "urgent": urgent,
        }

    async def bug_report(self, min_urgency: int = URGENT_THRESHOLD, limit: int = 10) -> dict:
        """Items needing engineering attention, grouped by theme."""
        async with self.session_factory() as db:
            rows = await db.execute(
                select(Feedback)
                .where(or_(
                    Feedback.urgency >= min_urgency,
                    Feedback.type == "bug",
                    Feedback.sentiment == "negative",
                ))
                .order_by(desc(Feedback.urgency), desc(Feedback.created_at))
                .limit(limit)
            )
            bugs = [feedback_to_dict(f) for f in rows.scalars().all()]

        if not bugs:
            return {
                "message": "No prioritized bugs found.",
                "total": 0,
                "bugs": [],
                "bugs_by_theme": {},
                "formatted_message": "No prioritized bugs to report at this time.",
            }

        bugs_by_theme: dict[str, list[dict]] = {}
        for bug in bugs:
            bugs_by_theme.setdefault(bug["theme"] or DEFAULT_THEME, []).append(bug)

        return {
            "total": len(bugs),
            "bugs": bugs,
            "bugs_by_theme": bugs_by_theme,
            "formatted_message": format_bug_report(bugs, bugs_by_theme),
            "summary": {
                "critical": sum(1 for b in bugs if b["urgency"] >= 5),
                "high": sum(1 for b in bugs if b["urgency"] == 4),
                "bugs": sum(1 for b in bugs if b["type"] == "bug"),
                "negative": sum(1 for b in bugs if b["sentiment"] == "negative"),
            },
        }

    async def integrations(self) -> dict:
        """Known feedback channels with how many items each has sent."""
        async with self.session_factory() as db:
            rows = await db.execute(
                select(Feedback.source, func.count(Feedback.id)).group_by(Feedback.source)
            )
            counts = {row[0]: row[1] for row in rows.all()}

        integrations = [
            {**item, "status": "connected", "count": counts.get(item["type"], 0)}
            for item in INTEGRATIONS
        ]
        return {
            "integrations": integrations,
            "total": sum(i["count"] for i in integrations),
        }

    async def integration_feedback(self, source: str, limit: int = 100) -> list[dict]:
        async with self.session_factory() as db:
            rows = await db.execute(
                select(Feedback)
                .where(Feedback.source == source)
                .order_by(desc(Feedback.created_at))
                .limit(limit)
            )
            return [feedback_to_dict(f) for f in rows.scalars().all()]

    async def list_feedback(self, limit: int = 50, theme: Optional[str] = None) -> list[dict]:
        """Most urgent first, newest first within the same urgency."""
        async with self.session_factory() as db:
            query = select(Feedback)
            if theme:
                query = query.where(Feedback.theme == theme)
            query = query.order_by(desc(Feedback.urgency), desc(Feedback.id)).limit(limit)
            rows = await db.execute(query)
            return [feedback_to_dict(f) for f in rows.scalars().all()]


# Singleton
report_service = ReportService()
