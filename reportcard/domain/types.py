from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


class Level(str, Enum):
    O_LEVEL = "O"
    A_LEVEL = "A"


class ReportType(str, Enum):
    O_MID = "O_MID"
    O_EOT = "O_EOT"
    A_MID = "A_MID"
    A_EOT = "A_EOT"

    @property
    def level(self) -> Level:
        return Level.O_LEVEL if self.value.startswith("O_") else Level.A_LEVEL


class Grade(str, Enum):
    """Letter grade shown on a report. ``NOT_EXAMINED`` renders as "X"."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"
    NOT_EXAMINED = "X"


class PaperNote(str, Enum):
    NONE = ""
    INCOMPLETE = "Incomplete"
    NOT_EXAMINED = "X"


class RemarkTarget(str, Enum):
    TEACHER = "teacher"
    HEAD_TEACHER = "headTeacher"


class RemarkMatchType(str, Enum):
    GRADE = "grade"
    RANGE = "range"


@dataclass(frozen=True)
class AssessmentDefinition:
    id: int
    name: str
    code: str
    is_active: bool = True


@dataclass(frozen=True)
class SchemeComponent:
    assessment_id: int
    weight_out_of: float


@dataclass(frozen=True)
class ReportScheme:
    report_type: ReportType
    name: str
    components: Tuple[SchemeComponent, ...]
    id: Optional[int] = None

    @property
    def total_weight(self) -> float:
        return sum(c.weight_out_of for c in self.components)


@dataclass(frozen=True)
class MarkKey:
    """Composite key of a mark. ``paper_id`` is set only for A-Level papers."""

    student_id: int
    academic_year_id: int
    term_id: int
    assessment_id: int
    subject_id: int
    paper_id: Optional[int] = None


@dataclass(frozen=True)
class GradeRule:
    target: RemarkTarget
    report_type: ReportType
    grade: str
    text: str
    is_active: bool = True
    id: Optional[int] = None

    match_type = RemarkMatchType.GRADE


@dataclass(frozen=True)
class RangeRule:
    target: RemarkTarget
    report_type: ReportType
    min: float
    max: float
    text: str
    is_active: bool = True
    id: Optional[int] = None

    match_type = RemarkMatchType.RANGE

    def covers(self, score: float) -> bool:
        return self.min <= score <= self.max


RemarkRule = Union[GradeRule, RangeRule]


@dataclass(frozen=True)
class RemarkOverride:
    student_id: int
    academic_year_id: int
    term_id: int
    report_type: ReportType
    teacher_remark: Optional[str] = None
    head_teacher_comment: Optional[str] = None


@dataclass(frozen=True)
class ComponentPart:
    assessment_id: int
    weight_out_of: float
    score100: Optional[float]
    contribution: Optional[float]


@dataclass(frozen=True)
class SubjectTotal:
    total: Optional[float]
    parts: Tuple[ComponentPart, ...] = ()


@dataclass(frozen=True)
class PaperScore:
    mid: Optional[float]
    eot: Optional[float]
    final: Optional[float]
    note: PaperNote


@dataclass(frozen=True)
class OverallResult:
    score: Optional[float]
    grade: Grade
    contributing: int = 0


@dataclass(frozen=True)
class ResolvedRemarks:
    teacher_remark: str
    head_teacher_comment: str
    teacher_override_applied: bool = False
    head_teacher_override_applied: bool = False
    auto_teacher_remark: str = field(default="", compare=False)
    auto_head_teacher_comment: str = field(default="", compare=False)
