from datetime import datetime

from sqlalchemy import Integer, String, Float, Boolean, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from reportcard.core.database import Base, utcnow
from reportcard.domain.types import (
    GradeRule,
    RangeRule,
    RemarkMatchType,
    RemarkOverride as RemarkOverrideRecord,
    RemarkRule as RemarkRuleRecord,
    RemarkTarget,
    ReportType,
)

class RemarkRule(Base):
    __tablename__ = "remark_rule"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    target: Mapped[str] = mapped_column(String, nullable=False)
    report_type: Mapped[str] = mapped_column(String, nullable=False)
    match_type: Mapped[str] = mapped_column(String, nullable=False)
    grade: Mapped[str] = mapped_column(String, nullable=True)
    min: Mapped[float] = mapped_column(Float, nullable=True)
    max: Mapped[float] = mapped_column(Float, nullable=True)
    text: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def to_domain(self) -> RemarkRuleRecord:
        if self.match_type == RemarkMatchType.GRADE.value:
            return GradeRule(
                id=self.id,
                target=RemarkTarget(self.target),
                report_type=ReportType(self.report_type),
                grade=self.grade or "",
                text=self.text,
                is_active=self.is_active,
            )
        return RangeRule(
            id=self.id,
            target=RemarkTarget(self.target),
            report_type=ReportType(self.report_type),
            min=self.min,
            max=self.max,
            text=self.text,
            is_active=self.is_active,
        )


class RemarkOverride(Base):
    __tablename__ = "remark_override"
    __table_args__ = (
        UniqueConstraint("student_id", "academic_year_id", "term_id", "report_type", name="uq_remark_override_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    student_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    academic_year_id: Mapped[int] = mapped_column(Integer, nullable=False)
    term_id: Mapped[int] = mapped_column(Integer, nullable=False)
    report_type: Mapped[str] = mapped_column(String, nullable=False)
    teacher_remark: Mapped[str] = mapped_column(String, nullable=True)
    head_teacher_comment: Mapped[str] = mapped_column(String, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_domain(self) -> RemarkOverrideRecord:
        return RemarkOverrideRecord(
            student_id=self.student_id,
            academic_year_id=self.academic_year_id,
            term_id=self.term_id,
            report_type=ReportType(self.report_type),
            teacher_remark=self.teacher_remark,
            head_teacher_comment=self.head_teacher_comment,
        )
