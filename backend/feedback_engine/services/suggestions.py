"""Suggestion engine — proposes next actions for a classified feedback item."""

import logging
import math
from dataclasses import dataclass, asdict

from feedback_engine.config import settings
from feedback_engine.models.feedback import Feedback
from feedback_engine.services.json_extract import parse_json_object
from feedback_engine.services.llm_client import GenerationOptions, OllamaGenerator, TextGenerator
from feedback_engine.services.taxonomy import (
    DEFAULT_CATEGORY,
    DEFAULT_PRIORITY,
    DEFAULT_THEME,
    SUGGESTION_CATEGORIES,
    SUGGESTION_PRIORITIES,
    THEMES,
    URGENT_THRESHOLD,
)

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5
DEFAULT_CONFIDENCE = 0.75
DEFAULT_REASONING = "Based on feedback analysis"

SUGGEST_SYSTEM = "You are a product manager assistant. Always respond with valid JSON only, no additional text."

SUGGEST_PROMPT = """You are a product manager assistant for Cloudflare. Based on the following feedback, provide actionable suggestions on what to do next.

Feedback Details:
- Content: "{content}"
- Type: {type}
- Theme: {theme}
- Sentiment: {sentiment}
- Urgency: {urgency}/5
- Source: {source}

Provide 3-5 specific, actionable suggestions as a JSON array of objects. Each suggestion object must have:
- "action": A short action verb phrase (e.g., "Escalate to support", "Add to roadmap", "Fix bug", "Update documentation")
- "description": A detailed description of what to do (max 60 words)
- "category": One of "immediate", "product", "bug", "documentation", "communication", "follow-up"
- "priority": "high", "medium", or "low"
- "theme": The relevant Cloudflare product theme (one of "workers", "pages", "r2", "d1", "kv", "auth", "billing", "docs", "dashboard", "api", "general")
- "reasoning": A brief explanation of why this suggestion was made (max 30 words, e.g., "Detected: R2 upload issues + delayed support response")
- "confidence": A confidence score between 0.0 and 1.0 (e.g., 0.82)

Return ONLY valid JSON in this exact format:
{{
  "suggestions": [
    {{
      "action": "Escalate to support",
      "description": "Immediately escalate the ticket to a senior support engineer to ensure a timely response.",
      "category": "immediate",
      "priority": "high",
      "theme": "r2",
      "reasoning": "Detected: R2 upload issues + delayed support response",
      "confidence": 0.85
    }}
  ]
}}"""


@dataclass(frozen=True)
class Suggestion:
    """One recommended follow-up action."""
    action: str
    description: str
    category: str = DEFAULT_CATEGORY
    priority: str = DEFAULT_PRIORITY
    theme: str = DEFAULT_THEME
    reasoning: str = DEFAULT_REASONING
    confidence: float = DEFAULT_CONFIDENCE

    def to_dict(self) -> dict:
        return asdict(self)


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _choice(value, allowed: list[str], default: str) -> str:
    value = _text(value).lower()
    return value if value in allowed else default


def coerce_confidence(value) -> float:
    """Clamp to [0, 1]; missing, zero or non-numeric values become 0.75."""
    if isinstance(value, (list, dict)):
        return DEFAULT_CONFIDENCE
    try:
        number = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    except OverflowError:
        return 1.0 if value > 0 else 0.0
    if math.isnan(number) or number == 0:
        return DEFAULT_CONFIDENCE
    return max(0.0, min(1.0, number))


def normalize_suggestions(data: dict) -> list[Suggestion]:
    """Validate the ``suggestions`` array of a parsed model answer."""
    raw = data.get("suggestions") or []
    if not isinstance(raw, list):
        return []

    suggestions = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        action = _text(item.get("action"))
        description = _text(item.get("description"))
        if not action or not description:
            continue
        suggestions.append(Suggestion(
            action=action,
            description=description,
            category=_choice(item.get("category"), SUGGESTION_CATEGORIES, DEFAULT_CATEGORY),
            priority=_choice(item.get("priority"), SUGGESTION_PRIORITIES, DEFAULT_PRIORITY),
            theme=_choice(item.get("theme"), THEMES, DEFAULT_THEME),
            reasoning=_text(item.get("reasoning")) or DEFAULT_REASONING,
            confidence=coerce_confidence(item.get("confidence")),
        ))

    return suggestions[:MAX_SUGGESTIONS]


def fallback_suggestions(feedback: Feedback) -> list[Suggestion]:
    """Rule-based suggestions, evaluated in a fixed order."""
    urgency = feedback.urgency or 0
    theme = feedback.theme or DEFAULT_THEME
    suggestions = []

    if urgency >= URGENT_THRESHOLD:
        suggestions.append(Suggestion(
            action="Prioritize immediately",
            description="High urgency: Prioritize this feedback and assign to the appropriate team immediately.",
            category="immediate",
            priority="high",
            theme=theme,
            reasoning=f"Detected: High urgency ({urgency}/5) + {theme} theme",
            confidence=0.9,
        ))
    if feedback.type == "bug":
        suggestions.append(Suggestion(
            action="Create bug ticket",
            description="Bug report: Create a ticket in the bug tracking system and assign to engineering.",
            category="bug",
            priority="high" if urgency >= URGENT_THRESHOLD else "medium",
            theme=theme,
            reasoning=f"Detected: Bug report for {theme} product",
            confidence=0.85,
        ))
    if feedback.type == "idea":
        suggestions.append(Suggestion(
            action="Add to roadmap",
            description="Feature idea: Add to product roadmap for consideration in next planning cycle.",
            category="product",
            priority="medium",
            theme=theme,
            reasoning=f"Detected: Feature idea for {theme} product",
            confidence=0.8,
        ))
    if feedback.sentiment == "negative":
        suggestions.append(Suggestion(
            action="Reach out to user",
            description="Negative sentiment: Consider reaching out to the user to understand their concerns better.",
            category="communication",
            priority="medium",
            theme=theme,
            reasoning="Detected: Negative sentiment requiring user outreach",
            confidence=0.75,
        ))
    suggestions.append(Suggestion(
        action="Review with team",
        description="Review the feedback with the product team and determine next steps.",
        category="follow-up",
        priority="low",
        theme=theme,
        reasoning="Standard follow-up action",
        confidence=0.7,
    ))

    return suggestions[:MAX_SUGGESTIONS]


class SuggestionEngine:
    """Generates next-step suggestions with a language model, falling back to rules."""

    def __init__(self, generator: TextGenerator = None, enabled: bool = None):
        self.generator = generator or OllamaGenerator()
        self.enabled = settings.llm_enabled if enabled is None else enabled

    async def suggest(self, feedback: Feedback) -> list[Suggestion]:
        """Return between one and five suggestions for *feedback*."""
        if not self.enabled:
            return fallback_suggestions(feedback)

        try:
            suggestions = await self._suggest_with_model(feedback)
        except Exception as e:
            logger.error(f"AI suggestions failed for feedback {feedback.id}, using fallback: {e}")
            return fallback_suggestions(feedback)

        logger.info(f"Generated {len(suggestions)} suggestions for feedback {feedback.id}")
        return suggestions

    async def close(self):
        await self.generator.close()

    async def _suggest_with_model(self, feedback: Feedback) -> list[Suggestion]:
        prompt = SUGGEST_PROMPT.format(
            content=feedback.content,
            type=feedback.type or "unknown",
            theme=feedback.theme or "unknown",
            sentiment=feedback.sentiment or "unknown",
            urgency=feedback.urgency or 0,
            source=feedback.source,
        )
        response_text = await self.generator.generate(
            prompt,
            GenerationOptions(
                system=SUGGEST_SYSTEM,
                max_tokens=settings.suggest_max_tokens,
                temperature=settings.suggest_temperature,
                json_mode=True,
            ),
        )
        suggestions = normalize_suggestions(parse_json_object(response_text))
        if not suggestions:
            raise ValueError("Model returned no usable suggestions")
        return suggestions


# Singleton
suggestion_engine = SuggestionEngine()
