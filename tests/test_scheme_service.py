import pytest
from fastapi import HTTPException
from sqlalchemy import select, func

from reportcard.domain.types import ReportType, SchemeComponent
from reportcard.models import Assessment, SchemeComponent as SchemeComponentRow
from reportcard.services.assessment import AssessmentService
from reportcard.services.scheme import SchemeService


def weights_by_code(scheme, ids):
    codes = {v: k for k, v in ids.items()}
    return [(codes[c.assessment_id], c.weight_out_of) for c in scheme.components]


async def test_reset_creates_missing_assessments_then_schemes(db):
    schemes = await SchemeService.reset_to_defaults(db)

    codes = {a.code for a in await AssessmentService.list_assessments(db)}
    assert codes == {"CA1", "CA2", "MID", "EOT"}
    assert {s.report_type for s in schemes} == set(ReportType)


async def test_reset_is_idempotent(db):
    await SchemeService.reset_to_defaults(db)
    schemes = await SchemeService.reset_to_defaults(db)
    ids = await AssessmentService.ensure_default_assessments(db)

    assert len(schemes) == 4
    by_type = {s.report_type: s for s in schemes}
    assert weights_by_code(by_type[ReportType.O_MID], ids) == [("CA1", 50), ("CA2", 50)]
    assert weights_by_code(by_type[ReportType.O_EOT], ids) == [("CA1", 10), ("CA2", 10), ("EOT", 80)]
    assert weights_by_code(by_type[ReportType.A_MID], ids) == [("MID", 100)]
    assert weights_by_code(by_type[ReportType.A_EOT], ids) == [("MID", 50), ("EOT", 50)]

    assessment_count = await db.scalar(select(func.count()).select_from(Assessment))
    component_count = await db.scalar(select(func.count()).select_from(SchemeComponentRow))
    assert assessment_count == 4
    assert component_count == 8


async def test_reset_keeps_existing_assessment_ids(db):
    db.add(Assessment(name="Midterm exam", code="MID", is_active=True))
    await db.commit()
    existing = await AssessmentService.get_by_code("MID", db)

    schemes = await SchemeService.reset_to_defaults(db)

    a_mid = next(s for s in schemes if s.report_type == ReportType.A_MID)
    assert a_mid.components[0].assessment_id == existing.id


async def test_upsert_replaces_scheme_for_report_type(db):
    ids = await AssessmentService.ensure_default_assessments(db)

    first = await SchemeService.upsert_scheme(
        ReportType.O_MID, "First", [SchemeComponent(ids["CA1"], 100)], db
    )
    second = await SchemeService.upsert_scheme(
        ReportType.O_MID, "  Second  ", [SchemeComponent(ids["CA1"], 30), SchemeComponent(ids["CA2"], 70)], db
    )

    schemes = await SchemeService.list_schemes(db)
    assert len(schemes) == 1
    assert second.id == first.id
    assert schemes[0].name == "Second"
    assert [c.weight_out_of for c in schemes[0].components] == [30, 70]


async def test_upsert_accepts_weights_not_summing_to_100(db):
    ids = await AssessmentService.ensure_default_assessments(db)
    scheme = await SchemeService.upsert_scheme(ReportType.O_EOT, "Odd", [SchemeComponent(ids["EOT"], 60)], db)
    assert scheme.total_weight == 60


async def test_get_scheme_missing(db):
    assert await SchemeService.get_scheme(ReportType.A_EOT, db) is None


async def test_scheme_lookup(db):
    await SchemeService.reset_to_defaults(db)
    lookup = await SchemeService.load_scheme_lookup(db)
    assert lookup(ReportType.O_EOT).name == "O-Level Endterm (CA1/10 + CA2/10 + EOT/80)"
    assert lookup("A_MID").report_type == ReportType.A_MID


async def test_assessment_in_use_cannot_be_deleted(db):
    await SchemeService.reset_to_defaults(db)
    ca1 = await AssessmentService.get_by_code("CA1", db)

    with pytest.raises(HTTPException) as exc:
        await AssessmentService.delete_assessment(ca1.id, db)
    assert exc.value.status_code == 409

    deactivated = await AssessmentService.set_active(ca1.id, False, db)
    assert deactivated.is_active is False
