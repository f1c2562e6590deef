"""Demo data — realistic product feedback for populating an empty dashboard."""

import logging
from datetime import datetime, timezone, timedelta

from sqlalchemy import delete

from feedback_engine.database import async_session
from feedback_engine.models.feedback import Feedback
from feedback_engine.services.classifier import feedback_classifier, FeedbackClassifier

logger = logging.getLogger(__name__)

# (source, type, content)
SEED_FEEDBACK = [
    # Workers
    ("github", "testimonial", "Workers are amazing! The edge computing capabilities have reduced our API latency by 60%. Love the developer experience."),
    ("discord", "idea", "Workers timeout limits are too restrictive for our data processing pipeline. We need longer execution times for batch jobs."),
    ("email", "bug", "Worker deployed but returning 500 errors in production. Stack traces are not showing up in dashboard. This is blocking our release."),
    ("github", "idea", "The Workers editor in dashboard is great, but we need better debugging tools. Can we get step-through debugging?"),
    ("discord", "testimonial", "Workers AI integration is fantastic! We're using it for image processing and it's incredibly fast at the edge."),
    # Pages
    ("email", "bug", "Cloudflare Pages deployment is broken after the last update. Builds are failing with 'deployment timeout' errors. ASAP please!"),
    ("github", "testimonial", "Pages preview deployments are a game changer for our team. The instant preview URLs save us so much time."),
    ("discord", "idea", "Would love to see support for monorepos in Pages. Currently we have to deploy each app separately which is annoying."),
    ("github", "general", "Pages build logs are confusing. Error messages don't point to the actual file causing issues. Need better error reporting."),
    # R2
    ("email", "testimonial", "R2 storage costs are way better than S3. We've cut our storage bill in half. Amazing product!"),
    ("github", "bug", "R2 multipart upload is failing for large files (>5GB). Getting 'connection reset' errors randomly. This is urgent."),
    ("discord", "idea", "Need lifecycle policies for R2 similar to S3. We want to automatically delete old backups after 30 days."),
    ("github", "idea", "R2 dashboard is slow when listing buckets with thousands of objects. Pagination would help a lot."),
    # D1
    ("discord", "testimonial", "D1 database is perfect for our use case. The SQLite compatibility made migration from our existing setup seamless."),
    ("email", "bug", "D1 queries are timing out on large tables. We have 100k+ rows and SELECT queries take 30+ seconds. Performance needs improvement."),
    ("github", "idea", "Would love to see D1 support for transactions across multiple statements. Currently we have to use workarounds."),
    ("discord", "idea", "D1 backup and restore feature is missing. We need a way to export our database for local development."),
    # Auth
    ("email", "bug", "Cloudflare Access login is broken after the last update. Users can't authenticate. This is blocking all our users!"),
    ("github", "testimonial", "Access integration with Workers is great. The seamless auth flow improved our app security significantly."),
    ("discord", "idea", "Need support for OAuth providers beyond Google and GitHub. We use Okta for SSO and it's not supported yet."),
    # Billing
    ("email", "general", "Billing dashboard doesn't show itemized costs for Workers requests. Hard to understand what we're paying for."),
    ("github", "testimonial", "The pay-as-you-go pricing is perfect for our startup. No upfront costs and we only pay for what we use."),
    # API
    ("discord", "idea", "Cloudflare API rate limits are too strict. We're building a monitoring tool and hitting limits constantly."),
    ("github", "testimonial", "API documentation is excellent. The examples in the docs helped us integrate Workers AI in minutes."),
    # Docs
    ("email", "general", "Documentation for D1 migrations is confusing. The examples don't match the actual API. Need clearer guides."),
    ("github", "testimonial", "The Workers tutorials are amazing! Learned edge computing concepts I didn't understand before."),
    # Dashboard
    ("discord", "idea", "Dashboard analytics for Workers are limited. We need more detailed metrics on request patterns and errors."),
    ("email", "testimonial", "The new dashboard design is clean and fast. Much better than the old interface!"),
    # General
    ("github", "testimonial", "Overall, Cloudflare's developer experience is top-notch. The platform just works and scales beautifully."),
    ("email", "general", "Support response times are slow. We submitted a ticket 3 days ago about R2 upload issues and still no response."),
    # LinkedIn
    ("linkedin", "testimonial", "Just shared our Cloudflare Workers success story on LinkedIn! Reduced our API costs by 40% while improving performance. Highly recommend!"),
    ("linkedin", "idea", "Looking for advice: Has anyone migrated from AWS S3 to Cloudflare R2? We're considering it for cost savings but worried about migration complexity."),
    ("linkedin", "testimonial", "Cloudflare Pages integration with GitHub is seamless. Our team loves the automatic deployments and preview URLs."),
    # Cloudflare platform
    ("cloudflare", "idea", "The Cloudflare dashboard needs better analytics. We can't see detailed bandwidth usage per service. This is critical for our billing."),
    ("cloudflare", "testimonial", "Cloudflare Workers AI is revolutionary! We're using it for real-time image processing and it's incredibly fast."),
    ("cloudflare", "idea", "D1 database connection pooling would be a game changer. Right now we're hitting connection limits during peak traffic."),
]


async def seed_database(classifier: FeedbackClassifier = None, session_factory=None) -> list[int]:
    """Replace all feedback with the demo set and analyze each item."""
    classifier = classifier or feedback_classifier
    session_factory = session_factory or async_session
    now = datetime.now(timezone.utc)
    inserted_ids = []

    async with session_factory() as db:
        await db.execute(delete(Feedback))

        for i, (source, feedback_type, content) in enumerate(SEED_FEEDBACK):
            # Spread creation times over the past two weeks
            created_at = now - timedelta(days=i // 2, hours=i % 24)
            feedback = Feedback(
                source=source,
                content=content,
                type=feedback_type,
                created_at=created_at,
                urgency=0,
            )
            db.add(feedback)
            await db.flush()
            inserted_ids.append(feedback.id)

        await db.commit()

    logger.info(f"Seeded {len(inserted_ids)} feedback items, analyzing...")

    for feedback_id, (_, _, content) in zip(inserted_ids, SEED_FEEDBACK):
        try:
            await classifier.classify(content, feedback_id)
        except Exception as e:
            logger.error(f"Auto-analysis failed for feedback {feedback_id}: {e}")

    return inserted_ids
