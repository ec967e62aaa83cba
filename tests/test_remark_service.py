import pytest
from fastapi import HTTPException
from sqlalchemy import select, func

from reportcard.api.v1.schemas.remark import (
    PickRemarkRequest,
    RemarkOverrideUpsert,
    RemarkRuleCreate,
    RemarkRuleUpdate,
)
from reportcard.domain.types import RemarkMatchType, RemarkTarget, ReportType
from reportcard.models import RemarkRule
from reportcard.services.remark import RemarkService


async def count_rules(db):
    return await db.scalar(select(func.count()).select_from(RemarkRule))


async def test_seed_runs_once(db):
    assert await RemarkService.seed_rules_if_empty(db) == 44
    assert await RemarkService.seed_rules_if_empty(db) == 0
    assert await count_rules(db) == 44


async def test_seed_is_noop_when_any_rule_exists(db):
    await RemarkService.create_rule(
        RemarkRuleCreate(
            target=RemarkTarget.TEACHER,
            report_type=ReportType.O_MID,
            match_type=RemarkMatchType.RANGE,
            min=0,
            max=100,
            text="Keep working.",
        ),
        db,
    )
    assert await RemarkService.seed_rules_if_empty(db) == 0
    assert await count_rules(db) == 1


async def test_pick_seeded_b_band(db):
    await RemarkService.seed_rules_if_empty(db)
    text = await RemarkService.pick_remark(
        PickRemarkRequest(target=RemarkTarget.TEACHER, report_type=ReportType.O_EOT, grade="B"), db
    )
    assert text == "Very good results. Maintain your effort."


async def test_seeded_rules_keep_order(db):
    await RemarkService.seed_rules_if_empty(db)
    rules = await RemarkService.list_rules(db, report_type=ReportType.O_MID, target=RemarkTarget.TEACHER)
    assert [r.grade for r in rules] == ["A", "B", "C", "D", "E", "F"]


async def test_disabled_rule_is_skipped(db):
    await RemarkService.seed_rules_if_empty(db)
    rules = await RemarkService.list_rules(db, report_type=ReportType.O_EOT, target=RemarkTarget.TEACHER)
    b_rule = next(r for r in rules if r.grade == "B")

    await RemarkService.update_rule(b_rule.id, RemarkRuleUpdate(is_active=False), db)

    text = await RemarkService.pick_remark(
        PickRemarkRequest(target=RemarkTarget.TEACHER, report_type=ReportType.O_EOT, grade="B", score=75), db
    )
    assert text == ""


async def test_range_rule_update_validates_bounds(db):
    rule = await RemarkService.create_rule(
        RemarkRuleCreate(
            target=RemarkTarget.HEAD_TEACHER,
            report_type=ReportType.A_EOT,
            match_type=RemarkMatchType.RANGE,
            min=50,
            max=60,
            text="Average.",
        ),
        db,
    )
    with pytest.raises(HTTPException) as exc:
        await RemarkService.update_rule(rule.id, RemarkRuleUpdate(min=70), db)
    assert exc.value.status_code == 400


def test_rule_schema_requires_match_fields():
    with pytest.raises(ValueError):
        RemarkRuleCreate(
            target=RemarkTarget.TEACHER, report_type=ReportType.O_MID, match_type=RemarkMatchType.GRADE, text="x"
        )
    with pytest.raises(ValueError):
        RemarkRuleCreate(
            target=RemarkTarget.TEACHER,
            report_type=ReportType.O_MID,
            match_type=RemarkMatchType.RANGE,
            min=80,
            max=10,
            text="x",
        )


async def test_delete_rule(db):
    await RemarkService.seed_rules_if_empty(db)
    rule = (await RemarkService.list_rules(db))[0]
    await RemarkService.delete_rule(rule.id, db)
    assert await count_rules(db) == 43
    with pytest.raises(HTTPException):
        await RemarkService.get_rule(rule.id, db)


async def test_override_upsert_and_lookup(db):
    assert await RemarkService.get_override(1, 2025, 1, ReportType.O_EOT, db) is None

    created = await RemarkService.upsert_override(
        RemarkOverrideUpsert(
            student_id=1, academic_year_id=2025, term_id=1, report_type=ReportType.O_EOT,
            teacher_remark="  Custom text  ",
        ),
        db,
    )
    assert created.teacher_remark == "Custom text"
    assert created.head_teacher_comment is None

    updated = await RemarkService.upsert_override(
        RemarkOverrideUpsert(
            student_id=1, academic_year_id=2025, term_id=1, report_type=ReportType.O_EOT,
            teacher_remark="", head_teacher_comment="Well done",
        ),
        db,
    )
    assert updated.id == created.id
    assert updated.teacher_remark is None
    assert updated.head_teacher_comment == "Well done"

    other_report = await RemarkService.get_override(1, 2025, 1, ReportType.O_MID, db)
    assert other_report is None


async def test_newest_matching_rule_wins(db):
    for text in ("Older rule", "Newer rule"):
        await RemarkService.create_rule(
            RemarkRuleCreate(
                target=RemarkTarget.TEACHER,
                report_type=ReportType.O_EOT,
                match_type=RemarkMatchType.RANGE,
                min=0,
                max=100,
                text=text,
            ),
            db,
        )

    text = await RemarkService.pick_remark(
        PickRemarkRequest(target=RemarkTarget.TEACHER, report_type=ReportType.O_EOT, score=55), db
    )
    assert text == "Newer rule"
    assert [r.text for r in await RemarkService.list_rules(db)] == ["Newer rule", "Older rule"]


async def test_explicit_null_fields_leave_rule_unchanged(db):
    await RemarkService.seed_rules_if_empty(db)
    rule = (await RemarkService.list_rules(db, report_type=ReportType.O_MID, target=RemarkTarget.TEACHER))[0]
    text = rule.text

    updated = await RemarkService.update_rule(rule.id, RemarkRuleUpdate(is_active=None, text=None), db)

    assert updated.is_active is True
    assert updated.text == text


def test_pick_request_normalises_grade():
    request = PickRemarkRequest(target=RemarkTarget.TEACHER, report_type=ReportType.O_EOT, grade=" b ")
    assert request.grade == "B"
