from typing import Literal

from pydantic import BaseModel, Field, model_validator

from classbook.schemas.records import Score

ExamStatus = Literal["active", "pending", "completed"]


class ExamProblemCreate(BaseModel):
    problem_id: str | None = Field(default=None, max_length=64)
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=2000)
    max_score: int = Field(..., gt=0, le=10000)
    problem_number: int = Field(..., ge=1, le=1000)


class ExamCreateRequest(BaseModel):
    exam_id: str | None = Field(default=None, max_length=64)
    title: str = Field(default="", max_length=255)
    date: str = Field(default="", max_length=32)
    class_id: str = Field(default="", max_length=64)
    status: ExamStatus = "pending"
    description: str = Field(default="", max_length=2000)
    problems: list[ExamProblemCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_problem_numbers(self):
        numbers = [problem.problem_number for problem in self.problems]
        if len(numbers) != len(set(numbers)):
            raise ValueError("problem_number must be unique within an exam")
        return self


class ExamCreateResponse(BaseModel):
    success: bool
    message: str
    exam_id: str


class ScoreEdit(BaseModel):
    id: str | None = Field(default=None, max_length=64)
    student_id: str = Field(..., min_length=1, max_length=64)
    problem_id: str = Field(..., min_length=1, max_length=64)
    score: int = Field(..., ge=0)
    comment: str = Field(default="", max_length=1000)


class ScoreSaveRequest(BaseModel):
    exam_id: str = Field(default="", max_length=64)
    scores: list[ScoreEdit] = Field(default_factory=list)


class ScoreSaveResponse(BaseModel):
    success: bool
    message: str
    updated: int
    inserted: int


class ExamProblemView(BaseModel):
    id: str
    exam_problem_id: str
    title: str
    description: str
    max_score: int
    problem_number: int


class StudentResult(BaseModel):
    id: str
    name: str
    total_score: int
    max_score: int
    percentage: int
    scores: list[Score]


class ExamDetail(BaseModel):
    id: str
    title: str
    description: str
    class_id: str
    class_name: str
    date: str
    status: str
    max_score: int
    problems: list[ExamProblemView]
    students: list[StudentResult]
    average_percentage: int


class ExamSummary(BaseModel):
    id: str
    title: str
    description: str
    class_id: str
    class_name: str
    date: str
    status: str
    total_problems: int
    total_score: int


class ExamStatistics(BaseModel):
    total_exams: int
    active_exams: int
    average_percentage: int
