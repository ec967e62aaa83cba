from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from reportcard.api.v1.schemas.report import PaperScoreResponse, ReportCardResponse, SubjectTotalResponse
from reportcard.core.database import get_db
from reportcard.core.logger import logger
from reportcard.domain.types import ReportType
from reportcard.services.report import ReportService

router = APIRouter(prefix="/report", tags=["Report"])


@router.get("/o-level/subject-total", response_model=SubjectTotalResponse)
async def get_o_level_subject_total(
        student_id: int,
        academic_year_id: int,
        term_id: int,
        report_type: ReportType,
        subject_id: int,
        db: AsyncSession = Depends(get_db),
):
    """
    Weighted total of one O-Level subject with its per-assessment parts.

    Raises:
        HTTPException: 400 - Report type is not an O-Level report type
    """
    try:
        result = await ReportService.o_level_subject_total(
            student_id, academic_year_id, term_id, report_type, subject_id, db
        )
    except ValueError as e:
        logger.warning(f"[SUBJECT TOTAL] Validation error: {str(e)}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return ReportService.subject_total_payload(result)


@router.get("/a-level/paper-score", response_model=PaperScoreResponse)
async def get_a_level_paper_score(
        student_id: int,
        academic_year_id: int,
        term_id: int,
        report_type: ReportType,
        subject_id: int,
        paper_id: int,
        db: AsyncSession = Depends(get_db),
):
    """
    MID, EOT and final score of one A-Level paper.

    Raises:
        HTTPException: 400 - Report type is not an A-Level report type
    """
    try:
        result = await ReportService.a_level_paper_score(
            student_id, academic_year_id, term_id, report_type, subject_id, paper_id, db
        )
    except ValueError as e:
        logger.warning(f"[PAPER SCORE] Validation error: {str(e)}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return ReportService.paper_score_payload(result)


@router.get("/card/{student_id}", response_model=ReportCardResponse)
async def get_report_card(
        student_id: int,
        academic_year_id: int,
        term_id: int,
        report_type: ReportType,
        subject_ids: Optional[List[int]] = Query(None),
        db: AsyncSession = Depends(get_db),
):
    """
    Full report card of a student: subject scores, overall grade and remarks.

    Args:
        student_id: Student identifier
        academic_year_id: Academic year identifier
        term_id: Term identifier
        report_type: One of O_MID, O_EOT, A_MID, A_EOT
        subject_ids: Optional subset of subjects
        db: Async SQLAlchemy session

    Returns:
        ReportCardResponse: Report card data
    """
    return await ReportService.build_report_card(
        student_id, academic_year_id, term_id, report_type, db, subject_ids=subject_ids
    )
