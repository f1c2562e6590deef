from feedback_engine.models.feedback import Feedback
from feedback_engine.models.digest import DailyDigest

__all__ = [
    "Feedback",
    "DailyDigest",
]
