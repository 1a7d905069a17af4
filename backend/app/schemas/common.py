"""Shared / common schemas: enums, principal, base responses."""
from datetime import datetime
from enum import Enum
from typing import Annotated
from pydantic import BaseModel, Field

# Largest value a signed 64-bit INTEGER column can hold
MAX_ROW_ID = 2**63 - 1

RowId = Annotated[int, Field(ge=1, le=MAX_ROW_ID)]


# ── Enums ──────────────────────────────────────────────────────────────

class FeedbackType(str, Enum):
    GROUP = "group"
    PERSONAL = "personal"


class UserRole(str, Enum):
    INSTRUCTOR = "instructor"
    CUSTOMER = "customer"


# ── Principal ──────────────────────────────────────────────────────────

class Principal(BaseModel):
    """The already-authenticated caller."""

    id: RowId
    role: UserRole

    model_config = {"frozen": True}

    @property
    def is_instructor(self) -> bool:
        return self.role == UserRole.INSTRUCTOR


# ── Common Responses ───────────────────────────────────────────────────

class MessageResponse(BaseModel):
    message: str
    detail: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime
