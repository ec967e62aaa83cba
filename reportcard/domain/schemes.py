from __future__ import annotations

from typing import Dict, List, Mapping, Tuple

from reportcard.domain.types import ReportScheme, ReportType, SchemeComponent

DEFAULT_ASSESSMENTS: List[Tuple[str, str]] = [
    ("CA1", "Continuous Assessment 1"),
    ("CA2", "Continuous Assessment 2"),
    ("MID", "Midterm"),
    ("EOT", "End of Term"),
]

# report type -> (name, [(assessment code, weight out of)])
DEFAULT_SCHEMES: Dict[ReportType, Tuple[str, List[Tuple[str, float]]]] = {
    ReportType.O_MID: ("O-Level Midterm (Average CA1 & CA2)", [("CA1", 50), ("CA2", 50)]),
    ReportType.O_EOT: ("O-Level Endterm (CA1/10 + CA2/10 + EOT/80)", [("CA1", 10), ("CA2", 10), ("EOT", 80)]),
    ReportType.A_MID: ("A-Level Midterm (MID /100 per paper)", [("MID", 100)]),
    ReportType.A_EOT: ("A-Level Endterm (Average MID & EOT per paper)", [("MID", 50), ("EOT", 50)]),
}


def missing_default_codes(assessment_ids_by_code: Mapping[str, int]) -> List[str]:
    return [code for code, _ in DEFAULT_ASSESSMENTS if code not in assessment_ids_by_code]


def build_default_schemes(assessment_ids_by_code: Mapping[str, int]) -> List[ReportScheme]:
    """
    Recommended schemes bound to the given assessment ids.

    Raises:
        KeyError: one of the default assessment codes has no id
    """
    missing = missing_default_codes(assessment_ids_by_code)
    if missing:
        raise KeyError(f"Missing default assessments: {', '.join(missing)}")

    return [
        ReportScheme(
            report_type=report_type,
            name=name,
            components=tuple(
                SchemeComponent(assessment_id=assessment_ids_by_code[code], weight_out_of=weight)
                for code, weight in components
            ),
        )
        for report_type, (name, components) in DEFAULT_SCHEMES.items()
    ]
