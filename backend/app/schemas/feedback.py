"""Feedback schemas for request/response validation."""
from datetime import datetime
from pydantic import BaseModel, Field
from app.schemas.common import FeedbackType, RowId


class TargetEntry(BaseModel):
    """One lecture and the students of it a feedback is addressed to."""

    lecture_id: RowId = Field(..., alias="lectureId")
    student_ids: list[RowId] = Field(..., min_length=1, alias="studentIds")

    model_config = {"populate_by_name": True}


class FeedbackCreate(BaseModel):
    type: FeedbackType
    date: str = Field(..., min_length=1, max_length=32)
    link: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    targets: list[TargetEntry] = Field(..., min_length=1)

    def feedback_values(self) -> dict:
        return self.model_dump(exclude={"targets"})


class FeedbackUpdate(BaseModel):
    type: FeedbackType | None = None
    date: str | None = Field(None, min_length=1, max_length=32)
    link: str | None = Field(None, min_length=1)
    content: str | None = Field(None, min_length=1)
    # Omitted means "keep the current targets"
    targets: list[TargetEntry] | None = None

    def feedback_values(self) -> dict:
        return self.model_dump(exclude={"targets"}, exclude_unset=True, exclude_none=True)


class FeedbackListItem(BaseModel):
    id: int
    type: FeedbackType
    date: str
    content: str
    targets: dict[int, list[int]]
    created_at: datetime

    model_config = {"from_attributes": True}


class FeedbackResponse(BaseModel):
    id: int
    owner_id: int
    type: FeedbackType
    date: str
    link: str
    content: str
    targets: dict[int, list[int]]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FeedbackCreated(BaseModel):
    feedback_id: int
    message: str = "Feedback created"
