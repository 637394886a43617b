from pydantic import BaseModel, Field

from classbook.schemas.records import Lecture


class LectureCreate(BaseModel):
    lecture_id: str | None = Field(default=None, max_length=64)
    lecture_date: str = Field(..., min_length=1, max_length=32)
    lecture_time: str = Field(default="", max_length=32)
    lecture_topic: str = Field(default="", max_length=255)


class EnrollmentCreate(BaseModel):
    enrollment_id: str | None = Field(default=None, max_length=64)
    student_id: str = Field(..., min_length=1, max_length=64)
    enrollment_date: str = Field(default="", max_length=32)


class ClassCreateRequest(BaseModel):
    class_id: str | None = Field(default=None, max_length=64)
    school: str = Field(..., min_length=1, max_length=128)
    year: str = Field(..., min_length=1, max_length=16)
    semester: str = Field(default="", max_length=16)
    generation: str = Field(default="", max_length=32)
    schedule: str = Field(default="", max_length=255)
    status: str = Field(default="active", max_length=32)
    lectures: list[LectureCreate] = Field(default_factory=list)
    enrollments: list[EnrollmentCreate] = Field(default_factory=list)


class ClassCreateResponse(BaseModel):
    message: str
    class_id: str
    lectures_added: int
    enrollments_added: int


class EnrolledStudent(BaseModel):
    student_id: str
    name: str
    school: str
    generation: str
    number: str
    enrollment_date: str


class ClassDetail(BaseModel):
    class_id: str
    school: str
    year: str
    semester: str
    generation: str
    schedule: str
    status: str
    lectures: list[Lecture]
    enrolled_students: list[EnrolledStudent]


class EnrollmentRequest(BaseModel):
    student_id: str = Field(..., min_length=1, max_length=64)
    class_id: str = Field(..., min_length=1, max_length=64)
    enrollment_date: str = Field(default="", max_length=32)


class LectureRequest(BaseModel):
    class_id: str = Field(..., min_length=1, max_length=64)
    lecture_date: str = Field(..., min_length=1, max_length=32)
    lecture_time: str = Field(default="", max_length=32)
    lecture_topic: str = Field(..., min_length=1, max_length=255)
