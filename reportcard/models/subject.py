from sqlalchemy import Integer, String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reportcard.core.database import Base

class Subject(Base):
    __tablename__ = "subject"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    code: Mapped[str] = mapped_column(String, nullable=True)
    level: Mapped[str] = mapped_column(String(1), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    papers: Mapped[list["SubjectPaper"]] = relationship(
        "SubjectPaper",
        back_populates="subject",
        cascade="all, delete-orphan",
        order_by="SubjectPaper.sort_order",
        passive_deletes=True
    )


class SubjectPaper(Base):
    __tablename__ = "subject_paper"
    __table_args__ = (UniqueConstraint("subject_id", "name", name="uq_subject_paper_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    subject_id: Mapped[int] = mapped_column(Integer, ForeignKey("subject.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    code: Mapped[str] = mapped_column(String, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    subject: Mapped["Subject"] = relationship("Subject", back_populates="papers", passive_deletes=True)
