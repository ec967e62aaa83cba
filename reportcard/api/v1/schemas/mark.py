from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict


class MarkEntryItem(BaseModel):
    student_id: int
    academic_year_id: int
    term_id: int
    assessment_id: int
    subject_id: int
    paper_id: Optional[int] = None
    score: Optional[Union[float, str]] = None


class MarkUpdateBatch(BaseModel):
    marks: List[MarkEntryItem]


class MarkBatchResult(BaseModel):
    detail: str
    updated_count: int
    skipped_count: int
    total_attempts: int


class MarkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    academic_year_id: int
    term_id: int
    assessment_id: int
    subject_id: int
    paper_id: Optional[int] = None
    score100: float
