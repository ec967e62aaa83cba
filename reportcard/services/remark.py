from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from reportcard.api.v1.schemas.remark import (
    PickRemarkRequest,
    RemarkOverrideUpsert,
    RemarkRuleCreate,
    RemarkRuleUpdate,
)
from reportcard.core.logger import logger
from reportcard.domain.remarks import default_remark_rules, pick_remark
from reportcard.domain.types import (
    RemarkMatchType,
    RemarkRule as RemarkRuleRecord,
    RemarkTarget,
    ReportType,
)
from reportcard.models import RemarkOverride, RemarkRule


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class RemarkService:
    @staticmethod
    async def list_rules(
            db: AsyncSession,
            report_type: Optional[ReportType] = None,
            target: Optional[RemarkTarget] = None
    ) -> List[RemarkRule]:
        # newest first; the first matching rule wins
        stmt = select(RemarkRule).order_by(RemarkRule.id.desc())
        if report_type:
            stmt = stmt.where(RemarkRule.report_type == ReportType(report_type).value)
        if target:
            stmt = stmt.where(RemarkRule.target == RemarkTarget(target).value)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def load_rules(db: AsyncSession) -> List[RemarkRuleRecord]:
        return [rule.to_domain() for rule in await RemarkService.list_rules(db)]

    @staticmethod
    async def get_rule(rule_id: int, db: AsyncSession) -> RemarkRule:
        rule = await db.get(RemarkRule, rule_id)
        if not rule:
            logger.warning(f"[REMARK RULE] Rule not found: ID {rule_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Remark rule not found")
        return rule

    @staticmethod
    async def create_rule(data: RemarkRuleCreate, db: AsyncSession) -> RemarkRule:
        is_grade = data.match_type == RemarkMatchType.GRADE
        try:
            rule = RemarkRule(
                target=data.target.value,
                report_type=data.report_type.value,
                match_type=data.match_type.value,
                grade=data.grade if is_grade else None,
                min=None if is_grade else data.min,
                max=None if is_grade else data.max,
                text=data.text,
                is_active=data.is_active,
            )
            db.add(rule)
            await db.commit()
            await db.refresh(rule)

            logger.info(f"[REMARK RULE CREATE] Created rule ID {rule.id} for {rule.report_type}/{rule.target}")
            return rule

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[REMARK RULE CREATE] Database error: {str(e)}")
            raise HTTPException(status_code=500, detail="Error while creating remark rule") from e

    @staticmethod
    async def update_rule(rule_id: int, data: RemarkRuleUpdate, db: AsyncSession) -> RemarkRule:
        """
        Partial update of a rule; the match type, target and report type are fixed.

        Raises:
            HTTPException: 400 - The update leaves a range rule with min > max or a grade rule without grade
            HTTPException: 404 - Rule not found
            HTTPException: 500 - Database error
        """
        rule = await RemarkService.get_rule(rule_id, db)
        changes = data.model_dump(exclude_unset=True)

        if rule.match_type == RemarkMatchType.GRADE.value:
            changes.pop("min", None)
            changes.pop("max", None)
            if "grade" in changes and not changes["grade"]:
                raise HTTPException(status_code=400, detail="A grade rule needs a grade")
        else:
            changes.pop("grade", None)
            low = changes.get("min", rule.min)
            high = changes.get("max", rule.max)
            if low is None or high is None or low > high:
                raise HTTPException(status_code=400, detail="A range rule needs min <= max")

        for field in ("text", "is_active"):
            if field in changes and changes[field] is None:
                changes.pop(field)

        for field, value in changes.items():
            setattr(rule, field, value)

        try:
            await db.commit()
            await db.refresh(rule)
            logger.info(f"[REMARK RULE UPDATE] Updated rule ID {rule_id}: {', '.join(changes) or 'no changes'}")
            return rule
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[REMARK RULE UPDATE] Database error: {str(e)}")
            raise HTTPException(status_code=500, detail="Error while updating remark rule") from e

    @staticmethod
    async def delete_rule(rule_id: int, db: AsyncSession) -> None:
        rule = await RemarkService.get_rule(rule_id, db)
        try:
            await db.delete(rule)
            await db.commit()
            logger.info(f"[REMARK RULE DELETE] Deleted rule ID {rule_id}")
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[REMARK RULE DELETE] Database error: {str(e)}")
            raise HTTPException(status_code=500, detail="Error while deleting remark rule") from e

    @staticmethod
    async def seed_rules_if_empty(db: AsyncSession) -> int:
        """
        Store the default grade remarks when no rule exists at all.

        Returns:
            int: Number of rules created; 0 when rules were already present
        """
        existing = await db.scalar(select(func.count()).select_from(RemarkRule))
        if existing:
            logger.debug(f"[REMARK SEED] Skipped, {existing} rules already present")
            return 0

        defaults = default_remark_rules()
        try:
            # reversed so the newest-first listing reads A to F
            for record in reversed(defaults):
                db.add(
                    RemarkRule(
                        target=record.target.value,
                        report_type=record.report_type.value,
                        match_type=RemarkMatchType.GRADE.value,
                        grade=record.grade,
                        text=record.text,
                        is_active=True,
                    )
                )
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[REMARK SEED] Database error: {str(e)}")
            raise HTTPException(status_code=500, detail="Error while seeding remark rules") from e

        logger.info(f"[REMARK SEED] Seeded {len(defaults)} default remark rules")
        return len(defaults)

    @staticmethod
    async def pick_remark(request: PickRemarkRequest, db: AsyncSession) -> str:
        rules = await RemarkService.load_rules(db)
        return pick_remark(
            rules,
            target=request.target,
            report_type=request.report_type,
            grade=request.grade,
            score=request.score,
        )

    @staticmethod
    async def get_override(
            student_id: int,
            academic_year_id: int,
            term_id: int,
            report_type: ReportType,
            db: AsyncSession
    ) -> Optional[RemarkOverride]:
        result = await db.execute(
            select(RemarkOverride).where(
                RemarkOverride.student_id == student_id,
                RemarkOverride.academic_year_id == academic_year_id,
                RemarkOverride.term_id == term_id,
                RemarkOverride.report_type == ReportType(report_type).value,
            )
        )
        return result.scalars().first()

    @staticmethod
    async def upsert_override(data: RemarkOverrideUpsert, db: AsyncSession) -> RemarkOverride:
        """
        Create or replace the manual remarks of a report.

        Both fields are written; a blank or missing field clears that override
        so the automatic remark applies again.

        Raises:
            HTTPException: 500 - Database error
        """
        teacher_remark = _blank_to_none(data.teacher_remark)
        head_teacher_comment = _blank_to_none(data.head_teacher_comment)

        try:
            override = await RemarkService.get_override(
                data.student_id, data.academic_year_id, data.term_id, data.report_type, db
            )
            if override:
                override.teacher_remark = teacher_remark
                override.head_teacher_comment = head_teacher_comment
            else:
                override = RemarkOverride(
                    student_id=data.student_id,
                    academic_year_id=data.academic_year_id,
                    term_id=data.term_id,
                    report_type=data.report_type.value,
                    teacher_remark=teacher_remark,
                    head_teacher_comment=head_teacher_comment,
                )
                db.add(override)

            await db.commit()
            await db.refresh(override)
            logger.info(
                f"[REMARK OVERRIDE] Saved override for student {data.student_id}, "
                f"{data.report_type.value} (teacher: {teacher_remark is not None}, "
                f"head teacher: {head_teacher_comment is not None})"
            )
            return override

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[REMARK OVERRIDE] Database error: {str(e)}")
            raise HTTPException(status_code=500, detail="Error while saving remark override") from e
