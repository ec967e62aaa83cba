from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from reportcard.api.v1.schemas.scheme import SchemeResponse, SchemeUpsert
from reportcard.core.database import get_db
from reportcard.core.logger import logger
from reportcard.domain.types import ReportScheme, ReportType, SchemeComponent
from reportcard.services.scheme import SchemeService

router = APIRouter(prefix="/scheme", tags=["Scheme"])


def _to_response(scheme: ReportScheme) -> SchemeResponse:
    return SchemeResponse(
        id=scheme.id,
        report_type=scheme.report_type,
        name=scheme.name,
        components=[
            {"assessment_id": c.assessment_id, "weight_out_of": c.weight_out_of}
            for c in scheme.components
        ],
        total_weight=scheme.total_weight,
    )


@router.get("/", response_model=List[SchemeResponse])
async def get_schemes(db: AsyncSession = Depends(get_db)):
    return [_to_response(s) for s in await SchemeService.list_schemes(db)]


@router.get("/{report_type}", response_model=SchemeResponse)
async def get_scheme(report_type: ReportType, db: AsyncSession = Depends(get_db)):
    """
    Weighting scheme of one report type.

    Raises:
        HTTPException: 404 - No scheme configured for this report type
    """
    scheme = await SchemeService.get_scheme(report_type, db)
    if not scheme:
        logger.warning(f"[SCHEME] No scheme configured for {report_type.value}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No scheme configured for {report_type.value}"
        )
    return _to_response(scheme)


@router.put("/{report_type}", response_model=SchemeResponse)
async def upsert_scheme(report_type: ReportType, data: SchemeUpsert, db: AsyncSession = Depends(get_db)):
    """
    Create or replace the scheme of a report type.

    Args:
        report_type: Report type the scheme applies to
        data: Scheme name and ordered components
        db: Async SQLAlchemy session

    Returns:
        SchemeResponse: The stored scheme
    """
    components = [
        SchemeComponent(assessment_id=c.assessment_id, weight_out_of=c.weight_out_of)
        for c in data.components
    ]
    scheme = await SchemeService.upsert_scheme(report_type, data.name, components, db)
    return _to_response(scheme)


@router.post("/reset-defaults", response_model=List[SchemeResponse])
async def reset_schemes(db: AsyncSession = Depends(get_db)):
    schemes = await SchemeService.reset_to_defaults(db)
    return [_to_response(s) for s in schemes]
