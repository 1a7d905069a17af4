"""Feedback CRUD endpoints.

Thin adapter over the consistency coordinator: errors raised there are
turned into HTTP responses by the app-level exception handlers.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.api.deps import get_coordinator, get_principal
from app.schemas.common import MAX_ROW_ID, MessageResponse, Principal
from app.schemas.feedback import (
    FeedbackCreate,
    FeedbackCreated,
    FeedbackListItem,
    FeedbackResponse,
    FeedbackUpdate,
)
from app.services.consistency_coordinator import ConsistencyCoordinator

router = APIRouter()

FeedbackId = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]


@router.get("", response_model=list[FeedbackListItem])
def list_feedback(
    principal: Principal = Depends(get_principal),
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    """List the caller's feedback, newest first."""
    return coordinator.list_for_owner(principal)


@router.get("/{feedback_id}", response_model=FeedbackResponse)
def get_feedback(
    feedback_id: FeedbackId,
    principal: Principal = Depends(get_principal),
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    return coordinator.get(principal, feedback_id)


@router.post("", response_model=FeedbackCreated, status_code=201)
def create_feedback(
    payload: FeedbackCreate,
    principal: Principal = Depends(get_principal),
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    feedback_id = coordinator.create(principal, payload.feedback_values(), payload.targets)
    return FeedbackCreated(feedback_id=feedback_id)


@router.patch("/{feedback_id}", response_model=MessageResponse)
def update_feedback(
    feedback_id: FeedbackId,
    payload: FeedbackUpdate,
    principal: Principal = Depends(get_principal),
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    replaced = coordinator.update(principal, feedback_id, payload.feedback_values(), payload.targets)
    return MessageResponse(
        message="Feedback updated",
        detail="targets replaced" if replaced else None,
    )


@router.delete("/{feedback_id}", response_model=MessageResponse)
def delete_feedback(
    feedback_id: FeedbackId,
    principal: Principal = Depends(get_principal),
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    coordinator.delete(principal, feedback_id)
    return MessageResponse(message="Feedback deleted")
