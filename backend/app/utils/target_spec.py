"""Target specification helpers: validation, canonical form, comparison.

A target specification maps lecture ids to the set of students a feedback is
addressed to. The canonical form is a dict with sorted lecture keys, each
mapped to a sorted tuple of unique student ids, so two specifications are
structurally equal exactly when their canonical forms compare equal.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from pydantic import ValidationError as PydanticValidationError

from app.schemas.feedback import TargetEntry
from app.services.errors import ValidationError

TargetSpec = dict[int, tuple[int, ...]]


def _coerce_entry(entry: Any, position: int) -> TargetEntry:
    if isinstance(entry, TargetEntry):
        return entry
    if not isinstance(entry, Mapping):
        raise ValidationError(f"Target entry #{position} must be an object")
    try:
        return TargetEntry.model_validate(entry)
    except PydanticValidationError as exc:
        raise ValidationError(f"Target entry #{position} is malformed: {exc.errors()[0]['msg']}") from exc


def normalize_target_spec(entries: Sequence[TargetEntry | Mapping[str, Any]] | None) -> TargetSpec:
    """Validate the incoming entries and return their canonical form.

    Raises ValidationError for an empty sequence, an entry without students,
    or a lecture id that appears in more than one entry.
    """
    if not entries:
        raise ValidationError("At least one feedback target is required")
    if isinstance(entries, (str, bytes, Mapping)):
        raise ValidationError("Feedback targets must be a list of entries")

    spec: dict[int, tuple[int, ...]] = {}
    for position, raw in enumerate(entries):
        entry = _coerce_entry(raw, position)
        if not entry.student_ids:
            raise ValidationError(f"Lecture {entry.lecture_id} has no students")
        if entry.lecture_id in spec:
            raise ValidationError(f"Lecture {entry.lecture_id} is listed more than once")
        spec[entry.lecture_id] = tuple(sorted(set(entry.student_ids)))
    return dict(sorted(spec.items()))


def canonical_targets(mapping: Mapping[int, Iterable[int]]) -> TargetSpec:
    """Canonicalize a stored lecture -> students mapping."""
    return {
        lecture_id: tuple(sorted(set(students)))
        for lecture_id, students in sorted(mapping.items())
    }


def same_targets(a: Mapping[int, Iterable[int]], b: Mapping[int, Iterable[int]]) -> bool:
    """Order-independent structural equality of two specifications."""
    return canonical_targets(a) == canonical_targets(b)


def count_pairs(spec: Mapping[int, Iterable[int]]) -> int:
    """Number of target rows a specification expands to."""
    return sum(len(students) for students in canonical_targets(spec).values())


def as_response(spec: Mapping[int, Iterable[int]]) -> dict[int, list[int]]:
    return {lecture_id: list(students) for lecture_id, students in canonical_targets(spec).items()}
