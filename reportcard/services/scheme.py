from typing import Callable, Dict, List, Optional, Sequence

from fastapi import HTTPException
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.exc import SQLAlchemyError

from reportcard.core.logger import logger
from reportcard.domain.schemes import build_default_schemes, missing_default_codes
from reportcard.domain.types import (
    ReportScheme as ReportSchemeRecord,
    ReportType,
    SchemeComponent as SchemeComponentRecord,
)
from reportcard.models import ReportScheme, SchemeComponent
from reportcard.services.assessment import AssessmentService


class SchemeService:
    @staticmethod
    async def list_schemes(db: AsyncSession) -> List[ReportSchemeRecord]:
        result = await db.execute(
            select(ReportScheme)
            .options(selectinload(ReportScheme.components))
            .order_by(ReportScheme.id)
        )
        return [scheme.to_domain() for scheme in result.scalars().all()]

    @staticmethod
    async def get_scheme(report_type: ReportType, db: AsyncSession) -> Optional[ReportSchemeRecord]:
        result = await db.execute(
            select(ReportScheme)
            .where(ReportScheme.report_type == ReportType(report_type).value)
            .options(selectinload(ReportScheme.components))
        )
        scheme = result.scalars().first()
        return scheme.to_domain() if scheme else None

    @staticmethod
    async def load_scheme_lookup(db: AsyncSession) -> Callable[[ReportType], Optional[ReportSchemeRecord]]:
        schemes: Dict[ReportType, ReportSchemeRecord] = {
            s.report_type: s for s in await SchemeService.list_schemes(db)
        }
        return lambda report_type: schemes.get(ReportType(report_type))

    @staticmethod
    async def upsert_scheme(
            report_type: ReportType,
            name: str,
            components: Sequence[SchemeComponentRecord],
            db: AsyncSession
    ) -> ReportSchemeRecord:
        """
        Create or replace the weighting scheme of a report type.

        Args:
            report_type: Report type the scheme applies to
            name: Display name of the scheme
            components: Ordered (assessment, weight) pairs; replaces any existing ones
            db: Async SQLAlchemy session

        Returns:
            ReportScheme: The stored scheme

        Raises:
            HTTPException: 500 - Database error
        """
        report_type = ReportType(report_type)
        total_weight = sum(c.weight_out_of for c in components)
        if total_weight != 100:
            logger.warning(f"[SCHEME UPSERT] Weights of {report_type.value} sum to {total_weight}, not 100")

        try:
            result = await db.execute(
                select(ReportScheme)
                .where(ReportScheme.report_type == report_type.value)
                .options(selectinload(ReportScheme.components))
            )
            scheme = result.scalars().first()

            new_components = [
                SchemeComponent(assessment_id=c.assessment_id, weight_out_of=c.weight_out_of, position=i)
                for i, c in enumerate(components)
            ]

            if scheme:
                scheme.name = name.strip()
                scheme.components = new_components
            else:
                scheme = ReportScheme(report_type=report_type.value, name=name.strip(), components=new_components)
                db.add(scheme)

            await db.commit()
            logger.info(f"[SCHEME UPSERT] Saved scheme {report_type.value} with {len(new_components)} components")
            return scheme.to_domain()

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[SCHEME UPSERT] Database error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Error while saving scheme"
            ) from e

    @staticmethod
    async def reset_to_defaults(db: AsyncSession) -> List[ReportSchemeRecord]:
        """
        Replace every scheme with the recommended defaults.

        Runs in two phases: the CA1, CA2, MID and EOT assessments are created if
        missing, then all schemes are dropped and the four defaults written.

        Raises:
            HTTPException: 500 - Default assessments are still missing or database error
        """
        assessment_ids = await AssessmentService.ensure_default_assessments(db)

        missing = missing_default_codes(assessment_ids)
        if missing:
            logger.critical(f"[SCHEME RESET] Default assessments unavailable: {', '.join(missing)}")
            raise HTTPException(
                status_code=500,
                detail="Default assessments could not be created"
            )

        defaults = build_default_schemes(assessment_ids)

        try:
            await db.execute(delete(SchemeComponent))
            await db.execute(delete(ReportScheme))

            for record in defaults:
                db.add(
                    ReportScheme(
                        report_type=record.report_type.value,
                        name=record.name,
                        components=[
                            SchemeComponent(assessment_id=c.assessment_id, weight_out_of=c.weight_out_of, position=i)
                            for i, c in enumerate(record.components)
                        ],
                    )
                )

            await db.commit()
            logger.info(f"[SCHEME RESET] Schemes reset to defaults ({len(defaults)} schemes)")

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[SCHEME RESET] Database error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Error while resetting schemes"
            ) from e

        return await SchemeService.list_schemes(db)
