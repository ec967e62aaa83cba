from sqlalchemy import Integer, String, Float, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reportcard.core.database import Base
from reportcard.domain.types import ReportScheme as ReportSchemeRecord, ReportType, SchemeComponent as SchemeComponentRecord

class ReportScheme(Base):
    __tablename__ = "report_scheme"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    report_type: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)

    components: Mapped[list["SchemeComponent"]] = relationship(
        "SchemeComponent",
        back_populates="scheme",
        cascade="all, delete-orphan",
        order_by="SchemeComponent.position",
        passive_deletes=True
    )

    def to_domain(self) -> ReportSchemeRecord:
        return ReportSchemeRecord(
            id=self.id,
            report_type=ReportType(self.report_type),
            name=self.name,
            components=tuple(
                SchemeComponentRecord(assessment_id=c.assessment_id, weight_out_of=c.weight_out_of)
                for c in self.components
            ),
        )


class SchemeComponent(Base):
    __tablename__ = "scheme_component"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    scheme_id: Mapped[int] = mapped_column(Integer, ForeignKey("report_scheme.id", ondelete="CASCADE"), nullable=False)
    # no foreign key: a scheme may outlive a removed assessment and then reads as "no mark"
    assessment_id: Mapped[int] = mapped_column(Integer, nullable=False)
    weight_out_of: Mapped[float] = mapped_column(Float, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    scheme: Mapped["ReportScheme"] = relationship("ReportScheme", back_populates="components", passive_deletes=True)
