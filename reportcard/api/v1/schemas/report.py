from typing import List, Optional

from pydantic import BaseModel

from reportcard.domain.types import Grade, Level, PaperNote, ReportType


class ComponentPartResponse(BaseModel):
    assessment_id: int
    weight_out_of: float
    score100: Optional[float] = None
    contribution: Optional[float] = None


class SubjectTotalResponse(BaseModel):
    total: Optional[float] = None
    parts: List[ComponentPartResponse]


class PaperScoreResponse(BaseModel):
    mid: Optional[float] = None
    eot: Optional[float] = None
    final: Optional[float] = None
    note: PaperNote


class OLevelSubjectRow(BaseModel):
    subject_id: int
    subject_name: str
    total: Optional[float] = None
    rounded_total: Optional[int] = None
    grade: Grade
    parts: List[ComponentPartResponse]


class ALevelPaperRow(PaperScoreResponse):
    paper_id: int
    paper_name: str
    grade: Grade


class ALevelSubjectRow(BaseModel):
    subject_id: int
    subject_name: str
    papers: List[ALevelPaperRow]


class ReportRemarks(BaseModel):
    teacher_remark: str
    head_teacher_comment: str
    teacher_override_applied: bool
    head_teacher_override_applied: bool


class ReportCardResponse(BaseModel):
    student_id: int
    academic_year_id: int
    term_id: int
    report_type: ReportType
    level: Level
    o_level_subjects: List[OLevelSubjectRow] = []
    a_level_subjects: List[ALevelSubjectRow] = []
    overall: Optional[float] = None
    overall_rounded: Optional[int] = None
    grade: Grade
    remarks: ReportRemarks
