from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Union

from reportcard.domain.types import (
    Grade,
    GradeRule,
    RangeRule,
    RemarkOverride,
    RemarkRule,
    RemarkTarget,
    ReportType,
    ResolvedRemarks,
)

DEFAULT_REMARKS: Dict[RemarkTarget, Dict[ReportType, Dict[str, str]]] = {
    RemarkTarget.TEACHER: {
        ReportType.O_MID: {
            "A": "Excellent work. Keep it up!",
            "B": "Very good performance. Aim even higher.",
            "C": "Good effort. Improve with more practice.",
            "D": "Fair attempt. Work harder for better results.",
            "E": "Below average. Seek help and revise regularly.",
            "F": "Poor performance. More effort is required.",
        },
        ReportType.O_EOT: {
            "A": "Excellent end-of-term performance. Keep it up!",
            "B": "Very good results. Maintain your effort.",
            "C": "Good performance. Continue improving.",
            "D": "Fair result. Put in more effort next term.",
            "E": "Below average. You need to improve.",
            "F": "Unsatisfactory. Serious improvement needed.",
        },
        ReportType.A_MID: {
            "A": "Excellent paper work. Stay focused.",
            "B": "Very good performance. Keep revising.",
            "C": "Good effort. Practise more past papers.",
            "D": "Fair attempt. Consult your subject teachers.",
            "E": "Weak performance. Much more effort is required.",
        },
        ReportType.A_EOT: {
            "A": "Excellent end-of-term results. Keep it up!",
            "B": "Very good results. Keep the effort.",
            "C": "Good results. Aim higher next term.",
            "D": "Fair results. Work harder next term.",
            "E": "Poor results. Serious revision needed.",
        },
    },
    RemarkTarget.HEAD_TEACHER: {
        ReportType.O_MID: {
            "A": "Outstanding performance. Keep the momentum.",
            "B": "Good work. Continue aiming for excellence.",
            "C": "Good progress. Keep improving steadily.",
            "D": "Work harder and consult your teachers.",
            "E": "More effort and consistency are needed.",
            "F": "Immediate improvement is required.",
        },
        ReportType.O_EOT: {
            "A": "Excellent results. Congratulations!",
            "B": "Very good results. Maintain your effort.",
            "C": "Good. Continue working to improve.",
            "D": "You can do better. Put in more effort.",
            "E": "You need to improve next term.",
            "F": "Serious improvement needed next term.",
        },
        ReportType.A_MID: {
            "A": "Excellent. Keep your focus.",
            "B": "Very good. Maintain consistency.",
            "C": "Good. Improve with more revision.",
            "D": "Work harder and seek guidance.",
            "E": "More effort is required.",
        },
        ReportType.A_EOT: {
            "A": "Excellent. Keep it up.",
            "B": "Very good. Keep improving.",
            "C": "Good. More effort needed.",
            "D": "Work harder next term.",
            "E": "Immediate improvement required.",
        },
    },
}


def default_remark_rules() -> List[GradeRule]:
    """One grade rule per band, per report type and target, in seeding order."""
    return [
        GradeRule(target=target, report_type=report_type, grade=grade, text=text)
        for target, by_report_type in DEFAULT_REMARKS.items()
        for report_type, by_grade in by_report_type.items()
        for grade, text in by_grade.items()
    ]


def pick_remark(
    rules: Iterable[RemarkRule],
    target: RemarkTarget,
    report_type: ReportType,
    grade: Optional[Union[Grade, str]] = None,
    score: Optional[float] = None,
) -> str:
    """
    Select the auto-generated remark for a report.

    Only active rules of the given target and report type take part. A grade
    rule for the exact grade wins; otherwise the first range rule covering the
    score is used. Rule order is the tie-break. Returns "" when nothing
    matches.
    """
    candidates = [
        r for r in rules
        if r.is_active and r.target == target and r.report_type == report_type
    ]

    if grade:
        wanted = grade.value if isinstance(grade, Grade) else str(grade)
        for rule in candidates:
            if isinstance(rule, GradeRule) and rule.grade == wanted:
                return rule.text

    if score is not None:
        for rule in candidates:
            if isinstance(rule, RangeRule) and rule.covers(score):
                return rule.text

    return ""


def resolve_remarks(
    rules: Iterable[RemarkRule],
    report_type: ReportType,
    grade: Optional[Union[Grade, str]],
    score: Optional[float],
    override: Optional[RemarkOverride] = None,
) -> ResolvedRemarks:
    rules = list(rules)
    auto_teacher = pick_remark(rules, RemarkTarget.TEACHER, report_type, grade=grade, score=score)
    auto_head = pick_remark(rules, RemarkTarget.HEAD_TEACHER, report_type, grade=grade, score=score)

    teacher_override = override.teacher_remark if override else None
    head_override = override.head_teacher_comment if override else None

    return ResolvedRemarks(
        teacher_remark=teacher_override or auto_teacher,
        head_teacher_comment=head_override or auto_head,
        teacher_override_applied=bool(teacher_override),
        head_teacher_override_applied=bool(head_override),
        auto_teacher_remark=auto_teacher,
        auto_head_teacher_comment=auto_head,
    )
