"""Closed vocabularies shared by the classifier and the suggestion engine."""

# Product areas a feedback item can be tagged with
THEMES = [
    "workers",
    "pages",
    "r2",
    "d1",
    "kv",
    "auth",
    "billing",
    "docs",
    "dashboard",
    "api",
    "general",
]

SENTIMENTS = ["positive", "negative", "neutral"]

URGENCY_MIN = 1
URGENCY_MAX = 5
URGENT_THRESHOLD = 4  # urgency >= 4 counts as urgent in reports

SUGGESTION_CATEGORIES = [
    "immediate",
    "product",
    "bug",
    "documentation",
    "communication",
    "follow-up",
]

SUGGESTION_PRIORITIES = ["high", "medium", "low"]

# Submitter-provided, not enforced
FEEDBACK_TYPES = ["bug", "idea", "general", "testimonial"]

DEFAULT_THEME = "general"
DEFAULT_SENTIMENT = "neutral"
DEFAULT_CATEGORY = "follow-up"
DEFAULT_PRIORITY = "medium"
