"""Feedback/target consistency coordinator.

The only component that writes to both the feedback and the target store in
one logical operation. Every such operation runs inside the caller-supplied
unit of work, so either all of its writes commit or none do:

  - create:  insert feedback, then its target rows
  - update:  write fields; replace target rows only when the target
             specification actually changed
  - delete:  purge target rows, then soft-delete the feedback

Usage:
    uow = UnitOfWork(db)
    coordinator = ConsistencyCoordinator(uow)
    feedback_id = coordinator.create(principal, fields, targets)
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from app.models.feedback import Feedback
from app.schemas.common import MAX_ROW_ID, FeedbackType, Principal
from app.schemas.feedback import FeedbackListItem, FeedbackResponse, TargetEntry
from app.services.authorization import AuthorizationGuard, Operation
from app.services.errors import NotFoundError, ValidationError
from app.services.feedback_store import MUTABLE_FIELDS, FeedbackStore
from app.services.target_store import TargetStore
from app.services.unit_of_work import UnitOfWork
from app.utils.target_spec import as_response, count_pairs, normalize_target_spec, same_targets

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("type", "date", "link", "content")

TargetInput = Sequence[TargetEntry | Mapping[str, Any]]


def _clean_fields(fields: Mapping[str, Any], partial: bool) -> dict[str, Any]:
    """Validate feedback columns and coerce ``type`` to its stored value."""
    unknown = set(fields) - MUTABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown feedback field(s): {', '.join(sorted(unknown))}")
    if not partial:
        missing = [f for f in REQUIRED_FIELDS if fields.get(f) in (None, "")]
        if missing:
            raise ValidationError(f"Missing feedback field(s): {', '.join(missing)}")

    cleaned: dict[str, Any] = {}
    for field, value in fields.items():
        if value is None:
            continue
        if value == "" and field in REQUIRED_FIELDS:
            raise ValidationError(f"Feedback field '{field}' must not be empty")
        if field == "type":
            try:
                value = FeedbackType(value).value
            except ValueError:
                raise ValidationError(f"Unknown feedback type: {value!r}") from None
        elif not isinstance(value, str):
            raise ValidationError(f"Feedback field '{field}' must be a string")
        cleaned[field] = value
    return cleaned


class ConsistencyCoordinator:
    """Keeps a feedback and its target rows consistent across writes."""

    def __init__(
        self,
        uow: UnitOfWork,
        guard: Optional[AuthorizationGuard] = None,
        feedback_store: Optional[FeedbackStore] = None,
        target_store: Optional[TargetStore] = None,
    ):
        self.uow = uow
        self.guard = guard or AuthorizationGuard()
        self.feedbacks = feedback_store or FeedbackStore(uow.session)
        self.targets = target_store or TargetStore(uow.session)

    # ── Writes ─────────────────────────────────────────────────────────

    def create(self, principal: Principal, fields: Mapping[str, Any], targets: TargetInput) -> int:
        """Create a feedback together with its targets and return its id."""
        self.guard.require(principal, Operation.CREATE)
        values = _clean_fields(fields, partial=False)
        spec = normalize_target_spec(targets)

        with self.uow.transaction():
            feedback_id = self.feedbacks.insert(principal.id, values)
            self.targets.insert_many(feedback_id, spec.items())

        logger.info(
            "Created feedback %s for owner %s with %d target(s)",
            feedback_id, principal.id, count_pairs(spec),
        )
        return feedback_id

    def update(
        self,
        principal: Principal,
        feedback_id: int,
        fields: Mapping[str, Any],
        targets: Optional[TargetInput] = None,
    ) -> bool:
        """Update a feedback; returns True when its target rows were replaced.

        The target rows are rewritten only when ``targets`` is structurally
        different from what is stored. Otherwise the stored rows are left
        untouched and only the feedback row is written.
        """
        values = _clean_fields(fields, partial=True)
        spec = normalize_target_spec(targets) if targets is not None else None

        with self.uow.transaction():
            self._load_authorized(principal, feedback_id, Operation.UPDATE, for_update=True)
            current = self.targets.find_by_feedback_id(feedback_id)
            replace = spec is not None and not same_targets(current, spec)

            if values or replace:
                if not self.feedbacks.update_fields(feedback_id, values):
                    # Soft-deleted since it was loaded; leave its targets alone
                    raise NotFoundError(f"Feedback {feedback_id} not found")
            if replace:
                self.targets.delete_by_feedback_id(feedback_id)
                self.targets.insert_many(feedback_id, spec.items())

        if replace:
            logger.info(
                "Updated feedback %s and replaced its targets (%d row(s))",
                feedback_id, count_pairs(spec),
            )
        elif values:
            logger.info("Updated feedback %s fields: %s", feedback_id, ", ".join(sorted(values)))
        else:
            logger.debug("Update of feedback %s changed nothing", feedback_id)
        return replace

    def delete(self, principal: Principal, feedback_id: int) -> None:
        """Purge the targets and soft-delete the feedback, atomically."""
        with self.uow.transaction():
            self._load_authorized(principal, feedback_id, Operation.DELETE, for_update=True)
            removed = self.targets.delete_by_feedback_id(feedback_id)
            self.feedbacks.mark_deleted(feedback_id)

        logger.info("Deleted feedback %s (%d target row(s) removed)", feedback_id, removed)

    # ── Reads ──────────────────────────────────────────────────────────

    def get(self, principal: Principal, feedback_id: int) -> FeedbackResponse:
        with self.uow.transaction():
            feedback = self._load_authorized(principal, feedback_id, Operation.READ)
            targets = self.targets.find_by_feedback_id(feedback_id)
            return self._to_response(feedback, targets)

    def list_for_owner(self, principal: Principal) -> list[FeedbackListItem]:
        """The caller's own feedback, newest first."""
        self.guard.require(principal, Operation.LIST)
        with self.uow.transaction():
            feedbacks = self.feedbacks.list_active_by_owner(principal.id)
            targets = self.targets.find_by_feedback_ids(f.id for f in feedbacks)
            return [
                FeedbackListItem(
                    id=f.id,
                    type=f.type,
                    date=f.date,
                    content=f.content,
                    targets=as_response(targets.get(f.id, {})),
                    created_at=f.created_at,
                )
                for f in feedbacks
            ]

    # ── Helpers ────────────────────────────────────────────────────────

    def _load_authorized(
        self,
        principal: Principal,
        feedback_id: int,
        operation: Operation,
        for_update: bool = False,
    ) -> Feedback:
        if not 1 <= feedback_id <= MAX_ROW_ID:
            raise NotFoundError(f"Feedback {feedback_id} not found")
        feedback = self.feedbacks.find_by_id(feedback_id, for_update=for_update)
        if feedback is None:
            raise NotFoundError(f"Feedback {feedback_id} not found")
        self.guard.require(principal, operation, feedback.owner_id)
        return feedback

    @staticmethod
    def _to_response(feedback: Feedback, targets: Mapping[int, set[int]]) -> FeedbackResponse:
        return FeedbackResponse(
            id=feedback.id,
            owner_id=feedback.owner_id,
            type=feedback.type,
            date=feedback.date,
            link=feedback.link,
            content=feedback.content,
            targets=as_response(targets),
            created_at=feedback.created_at,
            updated_at=feedback.updated_at,
        )
