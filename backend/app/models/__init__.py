"""SQLAlchemy ORM models package."""
from app.models.feedback import Feedback
from app.models.feedback_target import FeedbackTarget

__all__ = [
    "Feedback",
    "FeedbackTarget",
]
