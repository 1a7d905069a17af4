"""Persistence of feedback records.

All reads skip soft-deleted rows. Writes only flush; committing is the job
of the unit of work that owns the session.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.models.feedback import Feedback, utcnow

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = frozenset({"type", "date", "link", "content"})


class FeedbackStore:
    def __init__(self, db: Session):
        self.db = db

    def _active(self):
        return self.db.query(Feedback).filter(Feedback.deleted_at.is_(None))

    def insert(self, owner_id: int, fields: dict[str, Any]) -> int:
        """Stage a new feedback row and return its generated id."""
        values = {k: v for k, v in fields.items() if k in MUTABLE_FIELDS}
        feedback = Feedback(owner_id=owner_id, **values)
        self.db.add(feedback)
        self.db.flush()
        logger.debug("Inserted feedback %s for owner %s", feedback.id, owner_id)
        return feedback.id

    def find_by_id(self, feedback_id: int, for_update: bool = False) -> Optional[Feedback]:
        query = self._active().filter(Feedback.id == feedback_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def list_active_by_owner(self, owner_id: int) -> list[Feedback]:
        """Owner's live feedback, most recent first."""
        return (
            self._active()
            .filter(Feedback.owner_id == owner_id)
            .order_by(Feedback.created_at.desc(), Feedback.id.desc())
            .all()
        )

    def update_fields(self, feedback_id: int, fields: dict[str, Any]) -> bool:
        """Write the given mutable columns and bump ``updated_at``.

        Returns False when no live feedback has this id.
        """
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Not updatable: {', '.join(sorted(unknown))}")
        feedback = self.find_by_id(feedback_id)
        if feedback is None:
            return False
        for field, value in fields.items():
            setattr(feedback, field, value)
        feedback.updated_at = utcnow()
        self.db.flush()
        return True

    def mark_deleted(self, feedback_id: int) -> bool:
        """Soft-delete a feedback; a second call is a no-op.

        Returns False only when the id never existed.
        """
        feedback = self.db.get(Feedback, feedback_id)
        if feedback is None:
            return False
        if feedback.deleted_at is None:
            feedback.deleted_at = utcnow()
            self.db.flush()
        return True
