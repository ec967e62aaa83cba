from typing import Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from reportcard.api.v1.schemas.assessment import AssessmentCreate, AssessmentUpdate
from reportcard.core.logger import logger
from reportcard.domain.schemes import DEFAULT_ASSESSMENTS
from reportcard.domain.types import AssessmentDefinition
from reportcard.models import Assessment, Mark, SchemeComponent


class AssessmentService:
    @staticmethod
    async def list_assessments(db: AsyncSession, active_only: bool = False) -> List[Assessment]:
        stmt = select(Assessment).order_by(Assessment.id)
        if active_only:
            stmt = stmt.where(Assessment.is_active.is_(True))
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_assessment(assessment_id: int, db: AsyncSession) -> Assessment:
        """
        Fetch an assessment by id.

        Raises:
            HTTPException: 404 - Assessment not found
        """
        assessment = await db.get(Assessment, assessment_id)
        if not assessment:
            logger.warning(f"[ASSESSMENT] Assessment not found: ID {assessment_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assessment not found")
        return assessment

    @staticmethod
    async def get_by_code(code: str, db: AsyncSession) -> Optional[Assessment]:
        result = await db.execute(select(Assessment).where(Assessment.code == code.strip().upper()))
        return result.scalars().first()

    @staticmethod
    async def load_by_code(db: AsyncSession) -> Dict[str, AssessmentDefinition]:
        """All assessment definitions keyed by code, inactive ones included."""
        result = await db.execute(select(Assessment))
        return {a.code: a.to_domain() for a in result.scalars().all()}

    @staticmethod
    async def create_assessment(data: AssessmentCreate, db: AsyncSession) -> Assessment:
        """
        Create a new assessment definition.

        Args:
            data: Name and code of the assessment; the code is stored upper-cased
            db: Async SQLAlchemy session

        Returns:
            Assessment: The created assessment

        Raises:
            HTTPException: 409 - An assessment with this code already exists
            HTTPException: 500 - Database error
        """
        if await AssessmentService.get_by_code(data.code, db):
            logger.warning(f"[ASSESSMENT CREATE] Duplicate code: {data.code}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Assessment with code {data.code} already exists"
            )

        try:
            assessment = Assessment(name=data.name, code=data.code, is_active=True)
            db.add(assessment)
            await db.commit()
            await db.refresh(assessment)

            logger.info(f"[ASSESSMENT CREATE] Created assessment ID {assessment.id}, code: {assessment.code}")
            return assessment

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[ASSESSMENT CREATE] Database error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Error while creating assessment"
            ) from e

    @staticmethod
    async def update_assessment(assessment_id: int, data: AssessmentUpdate, db: AsyncSession) -> Assessment:
        assessment = await AssessmentService.get_assessment(assessment_id, db)

        if data.code and data.code != assessment.code:
            if await AssessmentService.get_by_code(data.code, db):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"Assessment with code {data.code} already exists"
                )
            assessment.code = data.code
        if data.name:
            assessment.name = data.name

        try:
            await db.commit()
            await db.refresh(assessment)
            logger.info(f"[ASSESSMENT UPDATE] Updated assessment ID {assessment.id}")
            return assessment
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[ASSESSMENT UPDATE] Database error: {str(e)}")
            raise HTTPException(status_code=500, detail="Error while updating assessment") from e

    @staticmethod
    async def set_active(assessment_id: int, is_active: bool, db: AsyncSession) -> Assessment:
        assessment = await AssessmentService.get_assessment(assessment_id, db)
        assessment.is_active = is_active

        try:
            await db.commit()
            await db.refresh(assessment)
            logger.info(f"[ASSESSMENT ACTIVE] Assessment ID {assessment_id} active={is_active}")
            return assessment
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[ASSESSMENT ACTIVE] Database error: {str(e)}")
            raise HTTPException(status_code=500, detail="Error while updating assessment") from e

    @staticmethod
    async def delete_assessment(assessment_id: int, db: AsyncSession) -> None:
        """
        Delete an assessment that nothing refers to.

        Raises:
            HTTPException: 404 - Assessment not found
            HTTPException: 409 - The assessment is used by a scheme or by marks; deactivate it instead
            HTTPException: 500 - Database error
        """
        assessment = await AssessmentService.get_assessment(assessment_id, db)

        scheme_refs = await db.scalar(
            select(func.count()).select_from(SchemeComponent).where(SchemeComponent.assessment_id == assessment_id)
        )
        mark_refs = await db.scalar(
            select(func.count()).select_from(Mark).where(Mark.assessment_id == assessment_id)
        )
        if scheme_refs or mark_refs:
            logger.warning(
                f"[ASSESSMENT DELETE] Assessment ID {assessment_id} is referenced "
                f"(schemes: {scheme_refs}, marks: {mark_refs})"
            )
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Assessment is in use; deactivate it instead"
            )

        try:
            await db.delete(assessment)
            await db.commit()
            logger.info(f"[ASSESSMENT DELETE] Deleted assessment ID {assessment_id}")
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[ASSESSMENT DELETE] Database error: {str(e)}")
            raise HTTPException(status_code=500, detail="Error while deleting assessment") from e

    @staticmethod
    async def ensure_default_assessments(db: AsyncSession) -> Dict[str, int]:
        """
        Create whichever of the CA1, CA2, MID and EOT assessments are missing.

        Returns:
            Dict[str, int]: Assessment ids keyed by code, for every stored assessment
        """
        existing = await AssessmentService.load_by_code(db)
        created = []

        try:
            for code, name in DEFAULT_ASSESSMENTS:
                if code not in existing:
                    assessment = Assessment(name=name, code=code, is_active=True)
                    db.add(assessment)
                    created.append(assessment)

            if created:
                await db.commit()
                logger.info(
                    f"[ASSESSMENT DEFAULTS] Created missing assessments: {', '.join(a.code for a in created)}"
                )

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[ASSESSMENT DEFAULTS] Database error: {str(e)}")
            raise HTTPException(status_code=500, detail="Error while creating default assessments") from e

        ids = {code: definition.id for code, definition in existing.items()}
        ids.update({a.code: a.id for a in created})
        return ids

    @staticmethod
    async def reset_to_defaults(db: AsyncSession) -> List[Assessment]:
        """
        Restore the recommended assessments.

        Defaults are created or renamed and re-activated; every other assessment
        is deactivated, not deleted, since marks may still refer to it.
        """
        await AssessmentService.ensure_default_assessments(db)
        default_names = dict(DEFAULT_ASSESSMENTS)

        try:
            for assessment in await AssessmentService.list_assessments(db):
                if assessment.code in default_names:
                    assessment.name = default_names[assessment.code]
                    assessment.is_active = True
                else:
                    assessment.is_active = False
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[ASSESSMENT RESET] Database error: {str(e)}")
            raise HTTPException(status_code=500, detail="Error while resetting assessments") from e

        logger.info("[ASSESSMENT RESET] Assessments reset to defaults")
        return await AssessmentService.list_assessments(db, active_only=True)
