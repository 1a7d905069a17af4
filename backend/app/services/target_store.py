"""Persistence of feedback target rows, one per (lecture, student) pair."""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from sqlalchemy.orm import Session

from app.models.feedback_target import FeedbackTarget

logger = logging.getLogger(__name__)


class TargetStore:
    def __init__(self, db: Session):
        self.db = db

    def insert_many(self, feedback_id: int, pairs: Iterable[tuple[int, Iterable[int]]]) -> int:
        """Insert one row per (lecture, student) combination as a single batch.

        The rows are flushed together; nothing is visible outside the
        enclosing transaction until it commits.
        """
        rows = [
            FeedbackTarget(feedback_id=feedback_id, lecture_id=lecture_id, student_id=student_id)
            for lecture_id, student_ids in pairs
            for student_id in student_ids
        ]
        self.db.add_all(rows)
        self.db.flush()
        logger.debug("Inserted %d target rows for feedback %s", len(rows), feedback_id)
        return len(rows)

    def find_by_feedback_id(self, feedback_id: int) -> dict[int, set[int]]:
        """Group the rows of one feedback back into lecture -> students."""
        return self.find_by_feedback_ids([feedback_id]).get(feedback_id, {})

    def find_by_feedback_ids(self, feedback_ids: Iterable[int]) -> dict[int, dict[int, set[int]]]:
        ids = list(feedback_ids)
        if not ids:
            return {}
        rows = (
            self.db.query(FeedbackTarget.feedback_id, FeedbackTarget.lecture_id, FeedbackTarget.student_id)
            .filter(FeedbackTarget.feedback_id.in_(ids))
            .all()
        )
        grouped: dict[int, dict[int, set[int]]] = defaultdict(lambda: defaultdict(set))
        for feedback_id, lecture_id, student_id in rows:
            grouped[feedback_id][lecture_id].add(student_id)
        return {fid: dict(lectures) for fid, lectures in grouped.items()}

    def row_ids(self, feedback_id: int) -> list[int]:
        return [
            r[0]
            for r in self.db.query(FeedbackTarget.id)
            .filter(FeedbackTarget.feedback_id == feedback_id)
            .order_by(FeedbackTarget.id)
            .all()
        ]

    def delete_by_feedback_id(self, feedback_id: int) -> int:
        """Remove every row of a feedback. Deleting nothing is not an error."""
        count = (
            self.db.query(FeedbackTarget)
            .filter(FeedbackTarget.feedback_id == feedback_id)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        logger.debug("Deleted %d target rows for feedback %s", count, feedback_id)
        return count
