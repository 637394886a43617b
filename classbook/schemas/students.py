from typing import Literal

from pydantic import BaseModel, Field

StudentStatus = Literal["active", "inactive"]


class StudentCreateRequest(BaseModel):
    student_id: str | None = Field(default=None, max_length=64)
    name: str = Field(..., min_length=1, max_length=128)
    school: str = Field(default="", max_length=128)
    generation: str = Field(default="", max_length=32)
    number: str = Field(default="", max_length=32)
    enrollment_date: str = Field(default="", max_length=32)
    status: StudentStatus = "active"


class StudentCreateResponse(BaseModel):
    message: str
    updated_rows: int
    student_ids: list[str]


class StudentStatusRequest(BaseModel):
    status: StudentStatus


class OperationResponse(BaseModel):
    success: bool
    message: str
