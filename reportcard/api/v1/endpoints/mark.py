from typing import Optional

from fastapi import APIRouter, Depends, Body, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from reportcard.api.v1.schemas.mark import MarkBatchResult, MarkResponse, MarkUpdateBatch
from reportcard.core.database import get_db
from reportcard.core.logger import logger
from reportcard.domain.types import MarkKey
from reportcard.services.mark import MarkService

router = APIRouter(prefix="/mark", tags=["Mark"])


@router.patch("/batch", response_model=MarkBatchResult, status_code=status.HTTP_200_OK)
async def update_marks_batch(
        marks_data: MarkUpdateBatch = Body(...),
        db: AsyncSession = Depends(get_db),
):
    """
    Batch entry of marks out of 100.

    Args:
        marks_data: Entries with composite keys and raw scores; blank scores are skipped
        db: Async SQLAlchemy session

    Returns:
        MarkBatchResult: Counts of written and skipped entries

    Raises:
        HTTPException: 400 - Invalid score
        HTTPException: 500 - Internal server error
    """
    updated_count, skipped_count = await MarkService.batch_update_marks(marks_data.marks, db)

    logger.info(f"[MARK UPDATE] Batch processed: {updated_count} saved, {skipped_count} skipped")

    return {
        "detail": "Marks saved",
        "updated_count": updated_count,
        "skipped_count": skipped_count,
        "total_attempts": len(marks_data.marks)
    }


@router.get("/", response_model=MarkResponse)
async def get_mark(
        student_id: int,
        academic_year_id: int,
        term_id: int,
        assessment_id: int,
        subject_id: int,
        paper_id: Optional[int] = Query(None),
        db: AsyncSession = Depends(get_db),
):
    """
    Read a single mark by its composite key.

    Raises:
        HTTPException: 404 - No mark recorded for this key
    """
    key = MarkKey(
        student_id=student_id,
        academic_year_id=academic_year_id,
        term_id=term_id,
        assessment_id=assessment_id,
        subject_id=subject_id,
        paper_id=paper_id,
    )
    mark = await MarkService.get_mark(key, db)
    if not mark:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mark not found")
    return mark
