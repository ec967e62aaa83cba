from typing import List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from reportcard.api.v1.schemas.assessment import (
    AssessmentActive,
    AssessmentCreate,
    AssessmentResponse,
    AssessmentUpdate,
)
from reportcard.core.database import get_db
from reportcard.services.assessment import AssessmentService

router = APIRouter(prefix="/assessment", tags=["Assessment"])


@router.get("/", response_model=List[AssessmentResponse])
async def get_assessments(active_only: bool = False, db: AsyncSession = Depends(get_db)):
    return await AssessmentService.list_assessments(db, active_only=active_only)


@router.post("/", response_model=AssessmentResponse, status_code=status.HTTP_201_CREATED)
async def create_assessment(data: AssessmentCreate, db: AsyncSession = Depends(get_db)):
    """
    Create an assessment definition.

    Raises:
        HTTPException: 409 - Duplicate code
        HTTPException: 500 - Internal server error
    """
    return await AssessmentService.create_assessment(data, db)


@router.patch("/{assessment_id}", response_model=AssessmentResponse)
async def update_assessment(
        data: AssessmentUpdate,
        assessment_id: int = Path(...),
        db: AsyncSession = Depends(get_db),
):
    return await AssessmentService.update_assessment(assessment_id, data, db)


@router.patch("/{assessment_id}/active", response_model=AssessmentResponse)
async def set_assessment_active(
        data: AssessmentActive,
        assessment_id: int = Path(...),
        db: AsyncSession = Depends(get_db),
):
    return await AssessmentService.set_active(assessment_id, data.is_active, db)


@router.delete("/{assessment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assessment(assessment_id: int = Path(...), db: AsyncSession = Depends(get_db)):
    """
    Delete an assessment that is not referenced by any scheme or mark.

    Raises:
        HTTPException: 404 - Assessment not found
        HTTPException: 409 - Assessment is in use
    """
    await AssessmentService.delete_assessment(assessment_id, db)


@router.post("/reset-defaults", response_model=List[AssessmentResponse])
async def reset_assessments(db: AsyncSession = Depends(get_db)):
    return await AssessmentService.reset_to_defaults(db)
