from typing import Literal

from pydantic import BaseModel, Field, model_validator

AttendanceStatus = Literal["present", "late", "absent", "video", "excused", "N/A"]
HomeworkClassification = Literal["", "excellent", "good", "average", "needs_improvement", "incomplete"]


class AttendanceEntry(BaseModel):
    attendance_id: str | None = Field(default=None, max_length=64)
    student_id: str = Field(..., min_length=1, max_length=64)
    status: AttendanceStatus


class HomeworkEntry(BaseModel):
    homework_id: str | None = Field(default=None, max_length=64)
    student_id: str = Field(..., min_length=1, max_length=64)
    total_problems: int = Field(default=0, ge=0, le=1000)
    completed_problems: int = Field(default=0, ge=0, le=1000)
    classification: HomeworkClassification = ""
    comments: str = Field(default="", max_length=1000)

    @model_validator(mode="after")
    def validate_counts(self):
        if self.completed_problems > self.total_problems:
            raise ValueError("completed_problems cannot exceed total_problems")
        return self


class AttendanceRecordRequest(BaseModel):
    lecture_id: str = Field(..., min_length=1, max_length=64)
    attendance_data: list[AttendanceEntry] = Field(..., min_length=1)


class AttendanceRecordResponse(BaseModel):
    message: str
    attendance_records: int


class LectureAttendanceItem(BaseModel):
    id: str
    lecture_id: str
    student_id: str
    status: str
    student_name: str
    student_school: str
    student_generation: str


class LectureAttendanceResponse(BaseModel):
    lecture_id: str
    attendance: list[LectureAttendanceItem]


class AttendanceHomeworkSaveRequest(BaseModel):
    lecture_id: str = Field(..., min_length=1, max_length=64)
    attendance_data: list[AttendanceEntry] = Field(default_factory=list)
    homework_data: list[HomeworkEntry] = Field(default_factory=list)


class UpsertCounts(BaseModel):
    updated: int
    inserted: int


class AttendanceHomeworkSaveResponse(BaseModel):
    success: bool
    message: str
    attendance: UpsertCounts
    homework: UpsertCounts
