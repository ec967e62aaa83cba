from .aggregation import (
    aggregate_a_level,
    aggregate_o_level,
    aggregate_weighted,
    compute_a_level_paper_score,
    compute_o_level_subject_total,
)
from .grading import grade_a_level, grade_o_level, round_half_up
from .remarks import default_remark_rules, pick_remark, resolve_remarks
from .schemes import build_default_schemes

__all__ = [
    "aggregate_a_level",
    "aggregate_o_level",
    "aggregate_weighted",
    "build_default_schemes",
    "compute_a_level_paper_score",
    "compute_o_level_subject_total",
    "default_remark_rules",
    "grade_a_level",
    "grade_o_level",
    "pick_remark",
    "resolve_remarks",
    "round_half_up",
]
