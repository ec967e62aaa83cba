from typing import List, Optional

from pydantic import BaseModel, Field, constr

from reportcard.domain.types import ReportType


class SchemeComponentSchema(BaseModel):
    assessment_id: int
    weight_out_of: float = Field(ge=0, le=100)


class SchemeUpsert(BaseModel):
    name: constr(strip_whitespace=True, min_length=1)
    components: List[SchemeComponentSchema] = Field(min_length=1)


class SchemeResponse(BaseModel):
    id: Optional[int] = None
    report_type: ReportType
    name: str
    components: List[SchemeComponentSchema]
    total_weight: float
