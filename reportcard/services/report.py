from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.exc import SQLAlchemyError

from reportcard.core.logger import logger
from reportcard.domain.aggregation import (
    aggregate_a_level,
    aggregate_o_level,
    compute_a_level_paper_score,
    compute_o_level_subject_total,
)
from reportcard.domain.grading import grade_a_level, grade_o_level, round_half_up
from reportcard.domain.remarks import resolve_remarks
from reportcard.domain.types import (
    AssessmentDefinition,
    Level,
    PaperScore,
    ReportScheme,
    ReportType,
    SubjectTotal,
)
from reportcard.models import Subject
from reportcard.services.assessment import AssessmentService
from reportcard.services.mark import MarkBook, MarkService
from reportcard.services.remark import RemarkService
from reportcard.services.scheme import SchemeService


@dataclass
class ScoringContext:
    """Everything the scoring core reads for one student, year and term."""

    marks: MarkBook
    scheme_lookup: Callable[[ReportType], Optional[ReportScheme]]
    assessments_by_code: Dict[str, AssessmentDefinition]

    def assessment_lookup(self, code: str) -> Optional[AssessmentDefinition]:
        return self.assessments_by_code.get(code)


def _parts_payload(result: SubjectTotal) -> List[dict]:
    return [
        {
            "assessment_id": p.assessment_id,
            "weight_out_of": p.weight_out_of,
            "score100": p.score100,
            "contribution": p.contribution,
        }
        for p in result.parts
    ]


def _paper_payload(result: PaperScore) -> dict:
    return {"mid": result.mid, "eot": result.eot, "final": result.final, "note": result.note}


class ReportService:
    @staticmethod
    async def load_context(student_id: int, academic_year_id: int, term_id: int, db: AsyncSession) -> ScoringContext:
        return ScoringContext(
            marks=await MarkService.load_mark_book(student_id, academic_year_id, term_id, db),
            scheme_lookup=await SchemeService.load_scheme_lookup(db),
            assessments_by_code=await AssessmentService.load_by_code(db),
        )

    @staticmethod
    async def o_level_subject_total(
            student_id: int,
            academic_year_id: int,
            term_id: int,
            report_type: ReportType,
            subject_id: int,
            db: AsyncSession
    ) -> SubjectTotal:
        context = await ReportService.load_context(student_id, academic_year_id, term_id, db)
        return compute_o_level_subject_total(
            student_id, academic_year_id, term_id, report_type, subject_id,
            scheme_lookup=context.scheme_lookup,
            mark_lookup=context.marks,
        )

    @staticmethod
    async def a_level_paper_score(
            student_id: int,
            academic_year_id: int,
            term_id: int,
            report_type: ReportType,
            subject_id: int,
            paper_id: int,
            db: AsyncSession
    ) -> PaperScore:
        context = await ReportService.load_context(student_id, academic_year_id, term_id, db)
        return compute_a_level_paper_score(
            student_id, academic_year_id, term_id, report_type, subject_id, paper_id,
            assessment_lookup=context.assessment_lookup,
            mark_lookup=context.marks,
        )

    @staticmethod
    async def list_report_subjects(
            level: Level,
            db: AsyncSession,
            subject_ids: Optional[Sequence[int]] = None
    ) -> List[Subject]:
        stmt = (
            select(Subject)
            .where(Subject.level == level.value, Subject.is_active.is_(True))
            .options(selectinload(Subject.papers))
            .order_by(Subject.id)
        )
        if subject_ids:
            stmt = stmt.where(Subject.id.in_(list(subject_ids)))
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def build_report_card(
            student_id: int,
            academic_year_id: int,
            term_id: int,
            report_type: ReportType,
            db: AsyncSession,
            subject_ids: Optional[Sequence[int]] = None
    ) -> dict:
        """
        Assemble the scores, overall grade and remarks of one report card.

        O-Level reports list a total and grade per subject; A-Level reports list
        every active paper of every subject. The overall score is the mean of
        the available subject totals (O-Level) or paper finals (A-Level) and
        drives the automatic remarks unless a manual override is stored.

        Args:
            student_id: Student identifier
            academic_year_id: Academic year identifier
            term_id: Term identifier
            report_type: One of O_MID, O_EOT, A_MID, A_EOT
            db: Async SQLAlchemy session
            subject_ids: Restrict the report to these subjects; all active subjects of the level otherwise

        Returns:
            dict: Report card payload matching ReportCardResponse

        Raises:
            HTTPException: 500 - Database error
        """
        report_type = ReportType(report_type)
        level = report_type.level

        try:
            await RemarkService.seed_rules_if_empty(db)
            context = await ReportService.load_context(student_id, academic_year_id, term_id, db)
            subjects = await ReportService.list_report_subjects(level, db, subject_ids)
            rules = await RemarkService.load_rules(db)
            override = await RemarkService.get_override(student_id, academic_year_id, term_id, report_type, db)
        except SQLAlchemyError as e:
            logger.error(f"[REPORT CARD] Database error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Error while loading report card data"
            ) from e

        o_level_rows = []
        a_level_rows = []

        if level == Level.O_LEVEL:
            totals = []
            for subject in subjects:
                result = compute_o_level_subject_total(
                    student_id, academic_year_id, term_id, report_type, subject.id,
                    scheme_lookup=context.scheme_lookup,
                    mark_lookup=context.marks,
                )
                totals.append(result.total)
                rounded = None if result.total is None else round_half_up(result.total)
                o_level_rows.append({
                    "subject_id": subject.id,
                    "subject_name": subject.name,
                    "total": result.total,
                    "rounded_total": rounded,
                    "grade": grade_o_level(rounded),
                    "parts": _parts_payload(result),
                })
            overall = aggregate_o_level(totals)
        else:
            finals = []
            for subject in subjects:
                papers = []
                for paper in subject.papers:
                    if not paper.is_active:
                        continue
                    result = compute_a_level_paper_score(
                        student_id, academic_year_id, term_id, report_type, subject.id, paper.id,
                        assessment_lookup=context.assessment_lookup,
                        mark_lookup=context.marks,
                    )
                    finals.append(result.final)
                    papers.append({
                        "paper_id": paper.id,
                        "paper_name": paper.name,
                        "grade": grade_a_level(None if result.final is None else round_half_up(result.final)),
                        **_paper_payload(result),
                    })
                a_level_rows.append({
                    "subject_id": subject.id,
                    "subject_name": subject.name,
                    "papers": papers,
                })
            overall = aggregate_a_level(finals)

        remarks = resolve_remarks(
            rules,
            report_type,
            grade=overall.grade,
            score=overall.score,
            override=override.to_domain() if override else None,
        )

        logger.info(
            f"[REPORT CARD] Student {student_id}, {report_type.value}: overall "
            f"{overall.score if overall.score is None else round(overall.score, 2)} grade {overall.grade.value}"
        )

        return {
            "student_id": student_id,
            "academic_year_id": academic_year_id,
            "term_id": term_id,
            "report_type": report_type,
            "level": level,
            "o_level_subjects": o_level_rows,
            "a_level_subjects": a_level_rows,
            "overall": overall.score,
            "overall_rounded": None if overall.score is None else round_half_up(overall.score),
            "grade": overall.grade,
            "remarks": {
                "teacher_remark": remarks.teacher_remark,
                "head_teacher_comment": remarks.head_teacher_comment,
                "teacher_override_applied": remarks.teacher_override_applied,
                "head_teacher_override_applied": remarks.head_teacher_override_applied,
            },
        }

    @staticmethod
    def subject_total_payload(result: SubjectTotal) -> dict:
        return {"total": result.total, "parts": _parts_payload(result)}

    @staticmethod
    def paper_score_payload(result: PaperScore) -> dict:
        return _paper_payload(result)
