"""
Score resolution for report cards.

O-Level subjects are totalled through the weighting scheme of the report
type and accept partial data: a component without a mark simply contributes
nothing. A-Level papers ignore schemes and are resolved from the ``MID`` and
``EOT`` assessments with an all-or-nothing rule for the endterm average.
The two policies are intentionally different.
"""
from __future__ import annotations

from typing import Callable, Iterable, Optional, Sequence, Tuple

from reportcard.domain.grading import grade_a_level, grade_o_level, round_half_up
from reportcard.domain.types import (
    AssessmentDefinition,
    ComponentPart,
    Level,
    MarkKey,
    OverallResult,
    PaperNote,
    PaperScore,
    ReportScheme,
    ReportType,
    SubjectTotal,
)

MID_CODE = "MID"
EOT_CODE = "EOT"

MarkLookup = Callable[[MarkKey], Optional[float]]
SchemeLookup = Callable[[ReportType], Optional[ReportScheme]]
AssessmentLookup = Callable[[str], Optional[AssessmentDefinition]]


def weighted_contribution(score100: float, weight_out_of: float) -> float:
    return (score100 / 100) * weight_out_of


def aggregate_weighted(components: Iterable[Tuple[Optional[float], float]]) -> Optional[float]:
    """
    Sum the weighted contributions of the components that have a score.

    Returns None when no component has a score. The result is not rounded.
    """
    total = 0.0
    scored = False
    for score100, weight_out_of in components:
        if score100 is None:
            continue
        total += weighted_contribution(score100, weight_out_of)
        scored = True
    return total if scored else None


def compute_o_level_subject_total(
    student_id: int,
    academic_year_id: int,
    term_id: int,
    report_type: ReportType,
    subject_id: int,
    *,
    scheme_lookup: SchemeLookup,
    mark_lookup: MarkLookup,
) -> SubjectTotal:
    report_type = ReportType(report_type)
    if report_type.level != Level.O_LEVEL:
        raise ValueError(f"{report_type.value} is not an O-Level report type")

    scheme = scheme_lookup(report_type)
    if scheme is None:
        return SubjectTotal(total=None, parts=())

    parts = []
    for component in scheme.components:
        score = mark_lookup(
            MarkKey(
                student_id=student_id,
                academic_year_id=academic_year_id,
                term_id=term_id,
                assessment_id=component.assessment_id,
                subject_id=subject_id,
            )
        )
        parts.append(
            ComponentPart(
                assessment_id=component.assessment_id,
                weight_out_of=component.weight_out_of,
                score100=score,
                contribution=None if score is None else weighted_contribution(score, component.weight_out_of),
            )
        )

    total = aggregate_weighted((p.score100, p.weight_out_of) for p in parts)
    return SubjectTotal(total=total, parts=tuple(parts))


def compute_a_level_paper_score(
    student_id: int,
    academic_year_id: int,
    term_id: int,
    report_type: ReportType,
    subject_id: int,
    paper_id: int,
    *,
    assessment_lookup: AssessmentLookup,
    mark_lookup: MarkLookup,
) -> PaperScore:
    report_type = ReportType(report_type)
    if report_type.level != Level.A_LEVEL:
        raise ValueError(f"{report_type.value} is not an A-Level report type")

    def score_for(code: str) -> Optional[float]:
        assessment = assessment_lookup(code)
        if assessment is None:
            return None
        return mark_lookup(
            MarkKey(
                student_id=student_id,
                academic_year_id=academic_year_id,
                term_id=term_id,
                assessment_id=assessment.id,
                subject_id=subject_id,
                paper_id=paper_id,
            )
        )

    mid = score_for(MID_CODE)

    if report_type == ReportType.A_MID:
        return PaperScore(
            mid=mid,
            eot=None,
            final=mid,
            note=PaperNote.NONE if mid is not None else PaperNote.NOT_EXAMINED,
        )

    eot = score_for(EOT_CODE)
    if mid is None or eot is None:
        note = PaperNote.INCOMPLETE if (mid is not None or eot is not None) else PaperNote.NOT_EXAMINED
        return PaperScore(mid=mid, eot=eot, final=None, note=note)

    return PaperScore(mid=mid, eot=eot, final=(mid + eot) / 2, note=PaperNote.NONE)


def _mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def aggregate_o_level(totals: Iterable[Optional[float]]) -> OverallResult:
    """Mean of the subject totals that exist; missing subjects are not zeros."""
    present = [t for t in totals if t is not None]
    overall = _mean(present)
    if overall is None:
        return OverallResult(score=None, grade=grade_o_level(None))
    return OverallResult(score=overall, grade=grade_o_level(round_half_up(overall)), contributing=len(present))


def aggregate_a_level(finals: Iterable[Optional[float]]) -> OverallResult:
    present = [f for f in finals if f is not None]
    overall = _mean(present)
    if overall is None:
        return OverallResult(score=None, grade=grade_a_level(None))
    return OverallResult(score=overall, grade=grade_a_level(round_half_up(overall)), contributing=len(present))
