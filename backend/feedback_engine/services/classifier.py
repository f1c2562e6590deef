"""AI Feedback Classifier — tags feedback with theme, sentiment and urgency.

The model path asks the configured text generator for a JSON verdict and
normalizes every field independently. Whenever the model is unreachable or
its answer cannot be parsed, a keyword heuristic takes over, so callers
always get a complete, in-domain result.
"""

import logging
import math
from dataclasses import dataclass, asdict

from sqlalchemy import update

from feedback_engine.config import settings
from feedback_engine.database import async_session
from feedback_engine.models.feedback import Feedback
from feedback_engine.services.json_extract import parse_json_object
from feedback_engine.services.llm_client import GenerationOptions, OllamaGenerator, TextGenerator
from feedback_engine.services.taxonomy import (
    DEFAULT_SENTIMENT,
    DEFAULT_THEME,
    SENTIMENTS,
    THEMES,
    URGENCY_MAX,
    URGENCY_MIN,
)

logger = logging.getLogger(__name__)

CLASSIFY_SYSTEM = "You are a feedback analysis assistant. Always respond with valid JSON only, no additional text."

CLASSIFY_PROMPT = """Analyze the following feedback about Cloudflare products and services. Return a JSON object with:
1. "theme": One of these Cloudflare product categories: "workers", "pages", "r2", "d1", "kv", "auth", "billing", "docs", "dashboard", "api", or "general"
2. "sentiment": One of "positive", "negative", or "neutral"
3. "urgency": A number from 1-5 where 1=low priority, 3=medium, 5=critical/urgent (use 5 for blocking issues, ASAP requests, or production outages)

Feedback text:
"{content}"

Return ONLY valid JSON in this exact format:
{{"theme": "workers", "sentiment": "positive", "urgency": 2}}"""

# Ordered: the first matching theme wins
FALLBACK_THEME_KEYWORDS = [
    ("workers", ("worker", "workers")),
    ("pages", ("pages", "cloudflare pages")),
    ("r2", ("r2", "object storage", "s3")),
    ("d1", ("d1", "database", "sqlite")),
    ("kv", ("kv", "key-value")),
    ("auth", ("auth", "login", "authentication")),
    ("billing", ("billing", "price", "payment", "cost")),
    ("docs", ("docs", "documentation", "tutorial")),
    ("dashboard", ("ui", "dashboard", "interface")),
    ("api", ("api", "endpoint")),
]

POSITIVE_KEYWORDS = ("love", "great", "amazing", "fantastic")
NEGATIVE_KEYWORDS = ("hate", "broken", "bug", "terrible", "failing")
CRITICAL_KEYWORDS = ("blocked", "urgent", "asap", "down")
MODERATE_KEYWORDS = ("annoying", "slow", "confusing")


@dataclass(frozen=True)
class ClassificationResult:
    """Theme, sentiment and urgency for one feedback item."""
    theme: str = DEFAULT_THEME
    sentiment: str = DEFAULT_SENTIMENT
    urgency: int = URGENCY_MIN

    def to_dict(self) -> dict:
        return asdict(self)


def _contains_any(text: str, keywords) -> bool:
    return any(k in text for k in keywords)


def classify_fallback(content: str) -> ClassificationResult:
    """Keyword-based classification used when the model path fails."""
    text = (content or "").lower()

    if _contains_any(text, POSITIVE_KEYWORDS):
        sentiment = "positive"
    elif _contains_any(text, NEGATIVE_KEYWORDS):
        sentiment = "negative"
    else:
        sentiment = "neutral"

    theme = DEFAULT_THEME
    for candidate, keywords in FALLBACK_THEME_KEYWORDS:
        if _contains_any(text, keywords):
            theme = candidate
            break

    if _contains_any(text, CRITICAL_KEYWORDS):
        urgency = 5
    elif _contains_any(text, MODERATE_KEYWORDS):
        urgency = 3
    else:
        urgency = 1

    return ClassificationResult(theme=theme, sentiment=sentiment, urgency=urgency)


def _choice(value, allowed: list[str], default: str) -> str:
    if not isinstance(value, str):
        return default
    value = value.lower()
    return value if value in allowed else default


def coerce_urgency(value) -> int:
    """Round half-up and clamp to the urgency scale; unusable input becomes 1."""
    if isinstance(value, (list, dict)):
        return URGENCY_MIN
    try:
        number = float(value)
    except (TypeError, ValueError):
        return URGENCY_MIN
    except OverflowError:
        # Integers beyond float range
        return URGENCY_MAX if value > 0 else URGENCY_MIN
    if math.isnan(number) or number == 0:
        return URGENCY_MIN
    if math.isinf(number):
        return URGENCY_MAX if number > 0 else URGENCY_MIN
    return max(URGENCY_MIN, min(URGENCY_MAX, math.floor(number + 0.5)))


def normalize_classification(data: dict) -> ClassificationResult:
    """Field-level validation of a parsed model verdict."""
    return ClassificationResult(
        theme=_choice(data.get("theme"), THEMES, DEFAULT_THEME),
        sentiment=_choice(data.get("sentiment"), SENTIMENTS, DEFAULT_SENTIMENT),
        urgency=coerce_urgency(data.get("urgency")),
    )


class FeedbackClassifier:
    """Classifies feedback with a language model, falling back to keywords."""

    def __init__(self, generator: TextGenerator = None, session_factory=None, enabled: bool = None):
        self.generator = generator or OllamaGenerator()
        self.session_factory = session_factory or async_session
        self.enabled = settings.llm_enabled if enabled is None else enabled

    async def classify(self, content: str, feedback_id: int) -> ClassificationResult:
        """Classify *content* and store the result on feedback *feedback_id*.

        Model and parsing errors are absorbed; database errors are not.
        """
        if self.enabled:
            try:
                result = await self._classify_with_model(content)
            except Exception as e:
                logger.error(f"AI analysis failed for feedback {feedback_id}, using fallback: {e}")
                result = classify_fallback(content)
        else:
            logger.debug(f"Model disabled, fallback analysis for feedback {feedback_id}")
            result = classify_fallback(content)

        await self._save(feedback_id, result)

        logger.info(
            f"Analyzed feedback {feedback_id}: "
            f"theme={result.theme}, sentiment={result.sentiment}, urgency={result.urgency}"
        )
        return result

    async def _classify_with_model(self, content: str) -> ClassificationResult:
        response_text = await self.generator.generate(
            CLASSIFY_PROMPT.format(content=content),
            GenerationOptions(
                system=CLASSIFY_SYSTEM,
                max_tokens=settings.classify_max_tokens,
                temperature=settings.classify_temperature,
                json_mode=True,
            ),
        )
        try:
            data = parse_json_object(response_text)
        except ValueError:
            logger.warning("Failed to parse classification response")
            logger.debug(f"Raw response: {(response_text or '')[:500]}")
            raise
        return normalize_classification(data)

    async def _save(self, feedback_id: int, result: ClassificationResult):
        async with self.session_factory() as db:
            await db.execute(
                update(Feedback)
                .where(Feedback.id == feedback_id)
                .values(theme=result.theme, sentiment=result.sentiment, urgency=result.urgency)
            )
            await db.commit()

    async def close(self):
        await self.generator.close()


# Singleton
feedback_classifier = FeedbackClassifier()
