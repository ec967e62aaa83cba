from typing import List, Optional

from pydantic import BaseModel, ConfigDict, constr

from reportcard.domain.types import Level


class SubjectCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1)
    code: Optional[constr(strip_whitespace=True, to_upper=True, max_length=10)] = None
    level: Level


class SubjectActive(BaseModel):
    is_active: bool


class PaperCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1)
    code: Optional[constr(strip_whitespace=True, to_upper=True, max_length=10)] = None
    sort_order: int = 1


class PaperBatch(BaseModel):
    papers: List[PaperCreate]


class PaperResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    subject_id: int
    name: str
    code: Optional[str] = None
    sort_order: int
    is_active: bool


class SubjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: Optional[str] = None
    level: Level
    is_active: bool
    papers: List[PaperResponse] = []
