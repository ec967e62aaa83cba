from typing import Optional

from pydantic import BaseModel, ConfigDict, constr, model_validator

from reportcard.domain.types import RemarkMatchType, RemarkTarget, ReportType


class RemarkRuleCreate(BaseModel):
    target: RemarkTarget
    report_type: ReportType
    match_type: RemarkMatchType
    grade: Optional[constr(strip_whitespace=True, to_upper=True, min_length=1, max_length=2)] = None
    min: Optional[float] = None
    max: Optional[float] = None
    text: constr(strip_whitespace=True, min_length=1)
    is_active: bool = True

    @model_validator(mode="after")
    def check_match_fields(self):
        if self.match_type == RemarkMatchType.GRADE and not self.grade:
            raise ValueError("A grade rule needs a grade")
        if self.match_type == RemarkMatchType.RANGE:
            if self.min is None or self.max is None:
                raise ValueError("A range rule needs both min and max")
            if self.min > self.max:
                raise ValueError("min must not be greater than max")
        return self


class RemarkRuleUpdate(BaseModel):
    grade: Optional[constr(strip_whitespace=True, to_upper=True, min_length=1, max_length=2)] = None
    min: Optional[float] = None
    max: Optional[float] = None
    text: Optional[constr(strip_whitespace=True, min_length=1)] = None
    is_active: Optional[bool] = None


class RemarkRuleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    target: RemarkTarget
    report_type: ReportType
    match_type: RemarkMatchType
    grade: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    text: str
    is_active: bool


class PickRemarkRequest(BaseModel):
    target: RemarkTarget
    report_type: ReportType
    grade: Optional[constr(strip_whitespace=True, to_upper=True, max_length=2)] = None
    score: Optional[float] = None


class PickRemarkResponse(BaseModel):
    text: str


class RemarkOverrideUpsert(BaseModel):
    student_id: int
    academic_year_id: int
    term_id: int
    report_type: ReportType
    teacher_remark: Optional[str] = None
    head_teacher_comment: Optional[str] = None


class RemarkOverrideResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    academic_year_id: int
    term_id: int
    report_type: ReportType
    teacher_remark: Optional[str] = None
    head_teacher_comment: Optional[str] = None
