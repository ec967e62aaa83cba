from datetime import datetime

from sqlalchemy import Integer, Float, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from reportcard.core.database import Base, utcnow
from reportcard.domain.types import MarkKey

class Mark(Base):
    __tablename__ = "mark"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    student_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    academic_year_id: Mapped[int] = mapped_column(Integer, nullable=False)
    term_id: Mapped[int] = mapped_column(Integer, nullable=False)
    assessment_id: Mapped[int] = mapped_column(Integer, ForeignKey("assessment.id"), nullable=False)
    subject_id: Mapped[int] = mapped_column(Integer, ForeignKey("subject.id", ondelete="CASCADE"), nullable=False)
    paper_id: Mapped[int] = mapped_column(Integer, ForeignKey("subject_paper.id", ondelete="CASCADE"), nullable=True)
    score100: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def key(self) -> MarkKey:
        return MarkKey(
            student_id=self.student_id,
            academic_year_id=self.academic_year_id,
            term_id=self.term_id,
            assessment_id=self.assessment_id,
            subject_id=self.subject_id,
            paper_id=self.paper_id,
        )


# O-Level marks have no paper; NULLs never collide in a plain unique constraint
Index(
    "uq_mark_key",
    Mark.student_id,
    Mark.academic_year_id,
    Mark.term_id,
    Mark.assessment_id,
    Mark.subject_id,
    func.coalesce(Mark.paper_id, 0),
    unique=True,
)
