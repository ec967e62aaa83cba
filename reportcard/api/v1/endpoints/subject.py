from typing import List, Optional

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from reportcard.api.v1.schemas.subject import (
    PaperBatch,
    PaperResponse,
    SubjectActive,
    SubjectCreate,
    SubjectResponse,
)
from reportcard.core.database import get_db
from reportcard.domain.types import Level
from reportcard.services.subject import SubjectService

router = APIRouter(prefix="/subject", tags=["Subject"])


@router.get("/", response_model=List[SubjectResponse])
async def get_subjects(
        level: Optional[Level] = None,
        active_only: bool = False,
        db: AsyncSession = Depends(get_db),
):
    return await SubjectService.list_subjects(db, level=level, active_only=active_only)


@router.post("/", response_model=SubjectResponse, status_code=status.HTTP_201_CREATED)
async def create_subject(data: SubjectCreate, db: AsyncSession = Depends(get_db)):
    return await SubjectService.create_subject(data, db)


@router.get("/{subject_id}", response_model=SubjectResponse)
async def get_subject(subject_id: int = Path(...), db: AsyncSession = Depends(get_db)):
    return await SubjectService.get_subject(subject_id, db)


@router.patch("/{subject_id}/active", response_model=SubjectResponse)
async def set_subject_active(
        data: SubjectActive,
        subject_id: int = Path(...),
        db: AsyncSession = Depends(get_db),
):
    return await SubjectService.set_active(subject_id, data.is_active, db)


@router.post("/{subject_id}/papers", response_model=SubjectResponse)
async def add_papers(
        data: PaperBatch,
        subject_id: int = Path(...),
        db: AsyncSession = Depends(get_db),
):
    """
    Create or re-activate papers of an A-Level subject.

    Args:
        data: Papers with name, optional code and sort order
        subject_id: Subject identifier
        db: Async SQLAlchemy session

    Returns:
        SubjectResponse: The subject with all of its papers

    Raises:
        HTTPException: 400 - Subject is not A-Level
        HTTPException: 404 - Subject not found
        HTTPException: 500 - Internal server error
    """
    return await SubjectService.add_papers(subject_id, data.papers, db)


@router.patch("/papers/{paper_id}/active", response_model=PaperResponse)
async def set_paper_active(
        data: SubjectActive,
        paper_id: int = Path(...),
        db: AsyncSession = Depends(get_db),
):
    return await SubjectService.set_paper_active(paper_id, data.is_active, db)
