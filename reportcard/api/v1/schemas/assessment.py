from typing import Optional

from pydantic import BaseModel, ConfigDict, constr


class AssessmentCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1)
    code: constr(strip_whitespace=True, to_upper=True, min_length=1, max_length=10)


class AssessmentUpdate(BaseModel):
    name: Optional[constr(strip_whitespace=True, min_length=1)] = None
    code: Optional[constr(strip_whitespace=True, to_upper=True, min_length=1, max_length=10)] = None


class AssessmentActive(BaseModel):
    is_active: bool


class AssessmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    is_active: bool
