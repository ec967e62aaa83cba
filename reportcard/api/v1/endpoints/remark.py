from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from reportcard.api.v1.schemas.remark import (
    PickRemarkRequest,
    PickRemarkResponse,
    RemarkOverrideResponse,
    RemarkOverrideUpsert,
    RemarkRuleCreate,
    RemarkRuleResponse,
    RemarkRuleUpdate,
)
from reportcard.core.database import get_db
from reportcard.domain.types import RemarkTarget, ReportType
from reportcard.services.remark import RemarkService

router = APIRouter(prefix="/remark", tags=["Remark"])


@router.get("/rules", response_model=List[RemarkRuleResponse])
async def get_rules(
        report_type: Optional[ReportType] = None,
        target: Optional[RemarkTarget] = None,
        db: AsyncSession = Depends(get_db),
):
    return await RemarkService.list_rules(db, report_type=report_type, target=target)


@router.post("/rules", response_model=RemarkRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_rule(data: RemarkRuleCreate, db: AsyncSession = Depends(get_db)):
    return await RemarkService.create_rule(data, db)


@router.patch("/rules/{rule_id}", response_model=RemarkRuleResponse)
async def update_rule(data: RemarkRuleUpdate, rule_id: int = Path(...), db: AsyncSession = Depends(get_db)):
    """
    Partial update of a remark rule, including enabling or disabling it.

    Raises:
        HTTPException: 400 - Inconsistent rule
        HTTPException: 404 - Rule not found
    """
    return await RemarkService.update_rule(rule_id, data, db)


@router.delete("/rules/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rule(rule_id: int = Path(...), db: AsyncSession = Depends(get_db)):
    await RemarkService.delete_rule(rule_id, db)


@router.post("/rules/seed")
async def seed_rules(db: AsyncSession = Depends(get_db)):
    created = await RemarkService.seed_rules_if_empty(db)
    return {"detail": "Default remark rules seeded" if created else "Remark rules already present", "created": created}


@router.post("/pick", response_model=PickRemarkResponse)
async def pick_remark(request: PickRemarkRequest, db: AsyncSession = Depends(get_db)):
    return {"text": await RemarkService.pick_remark(request, db)}


@router.get("/override", response_model=RemarkOverrideResponse)
async def get_override(
        student_id: int,
        academic_year_id: int,
        term_id: int,
        report_type: ReportType,
        db: AsyncSession = Depends(get_db),
):
    override = await RemarkService.get_override(student_id, academic_year_id, term_id, report_type, db)
    if not override:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No remark override for this report")
    return override


@router.put("/override", response_model=RemarkOverrideResponse)
async def upsert_override(data: RemarkOverrideUpsert, db: AsyncSession = Depends(get_db)):
    return await RemarkService.upsert_override(data, db)
