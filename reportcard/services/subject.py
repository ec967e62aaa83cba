from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from reportcard.api.v1.schemas.subject import PaperCreate, SubjectCreate
from reportcard.core.logger import logger
from reportcard.domain.types import Level
from reportcard.models import Subject, SubjectPaper


class SubjectService:
    @staticmethod
    async def list_subjects(
            db: AsyncSession,
            level: Optional[Level] = None,
            active_only: bool = False
    ) -> List[Subject]:
        stmt = select(Subject).options(selectinload(Subject.papers)).order_by(Subject.name, Subject.id)
        if level:
            stmt = stmt.where(Subject.level == Level(level).value)
        if active_only:
            stmt = stmt.where(Subject.is_active.is_(True))
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_subject(subject_id: int, db: AsyncSession) -> Subject:
        """
        Fetch a subject together with its papers.

        Raises:
            HTTPException: 404 - Subject not found
        """
        result = await db.execute(
            select(Subject)
            .where(Subject.id == subject_id)
            .options(selectinload(Subject.papers))
            .execution_options(populate_existing=True)
        )
        subject = result.scalars().first()
        if not subject:
            logger.warning(f"[SUBJECT] Subject not found: ID {subject_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")
        return subject

    @staticmethod
    async def create_subject(data: SubjectCreate, db: AsyncSession) -> Subject:
        try:
            subject = Subject(name=data.name, code=data.code or None, level=data.level.value, is_active=True)
            db.add(subject)
            await db.commit()

            logger.info(f"[SUBJECT CREATE] Created subject ID {subject.id}: {subject.name} ({subject.level})")
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[SUBJECT CREATE] Database error: {str(e)}")
            raise HTTPException(status_code=500, detail="Error while creating subject") from e

        return await SubjectService.get_subject(subject.id, db)

    @staticmethod
    async def set_active(subject_id: int, is_active: bool, db: AsyncSession) -> Subject:
        subject = await SubjectService.get_subject(subject_id, db)
        subject.is_active = is_active

        try:
            await db.commit()
            logger.info(f"[SUBJECT ACTIVE] Subject ID {subject_id} active={is_active}")
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[SUBJECT ACTIVE] Database error: {str(e)}")
            raise HTTPException(status_code=500, detail="Error while updating subject") from e

        return await SubjectService.get_subject(subject_id, db)

    @staticmethod
    async def add_papers(subject_id: int, papers: List[PaperCreate], db: AsyncSession) -> Subject:
        """
        Register papers of an A-Level subject.

        A paper whose name already exists on the subject is re-activated and
        gets the new code and sort order instead of being duplicated.

        Args:
            subject_id: Subject identifier
            papers: Papers to create or refresh
            db: Async SQLAlchemy session

        Returns:
            Subject: The subject with all of its papers

        Raises:
            HTTPException: 400 - The subject is not an A-Level subject
            HTTPException: 404 - Subject not found
            HTTPException: 500 - Database error
        """
        subject = await SubjectService.get_subject(subject_id, db)
        if subject.level != Level.A_LEVEL.value:
            raise HTTPException(status_code=400, detail="Only A-Level subjects have papers")

        existing = {paper.name: paper for paper in subject.papers}
        created_count = 0

        try:
            for item in papers:
                paper = existing.get(item.name)
                if paper:
                    paper.code = item.code or paper.code
                    paper.sort_order = item.sort_order
                    paper.is_active = True
                else:
                    paper = SubjectPaper(
                        subject_id=subject_id,
                        name=item.name,
                        code=item.code or None,
                        sort_order=item.sort_order,
                        is_active=True,
                    )
                    db.add(paper)
                    existing[item.name] = paper
                    created_count += 1

            await db.commit()
            logger.info(
                f"[SUBJECT PAPERS] Subject ID {subject_id}: {created_count} created, "
                f"{len(papers) - created_count} refreshed"
            )
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[SUBJECT PAPERS] Database error: {str(e)}")
            raise HTTPException(status_code=500, detail="Error while saving papers") from e

        return await SubjectService.get_subject(subject_id, db)

    @staticmethod
    async def set_paper_active(paper_id: int, is_active: bool, db: AsyncSession) -> SubjectPaper:
        paper = await db.get(SubjectPaper, paper_id)
        if not paper:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Paper not found")
        paper.is_active = is_active

        try:
            await db.commit()
            await db.refresh(paper)
            logger.info(f"[SUBJECT PAPERS] Paper ID {paper_id} active={is_active}")
            return paper
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[SUBJECT PAPERS] Database error: {str(e)}")
            raise HTTPException(status_code=500, detail="Error while updating paper") from e
