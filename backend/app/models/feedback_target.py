"""FeedbackTarget model: one (lecture, student) pairing of a feedback's audience."""
from sqlalchemy import Integer, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base


class FeedbackTarget(Base):
    __tablename__ = "feedback_targets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    feedback_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("feedbacks.id", ondelete="CASCADE"), nullable=False
    )
    lecture_id: Mapped[int] = mapped_column(Integer, nullable=False)
    student_id: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    feedback = relationship("Feedback", back_populates="targets")

    __table_args__ = (
        UniqueConstraint("feedback_id", "lecture_id", "student_id", name="uq_feedback_targets_pair"),
        Index("ix_feedback_targets_feedback_id", "feedback_id"),
    )

    def __repr__(self) -> str:
        return f"<FeedbackTarget feedback={self.feedback_id} lecture={self.lecture_id} student={self.student_id}>"
