"""Typed records marshalled from positional sheet rows.

Field order of each record is the column order of its sheet (see
``classbook.core.sheets``). Empty cells fall back to the field default.
"""

from collections.abc import Sequence
from typing import Annotated, Self

from pydantic import BaseModel, BeforeValidator, ConfigDict

EXAM_STATUS_ACTIVE = "active"
EXAM_STATUS_PENDING = "pending"
EXAM_STATUS_COMPLETED = "completed"

STUDENT_STATUS_ACTIVE = "active"
STUDENT_STATUS_INACTIVE = "inactive"

ENROLLMENT_STATUS_INACTIVE = "inactive"

SCORE_STATUS_GRADED = "graded"

ATTENDANCE_STATUS_NONE = "N/A"


def parse_int(value: object) -> int:
    if isinstance(value, (bool, int)):
        return int(value)
    if isinstance(value, float):
        return int(value) if value == value else 0
    try:
        return int(float(str(value).strip()))
    except (ValueError, OverflowError):
        return 0


SheetInt = Annotated[int, BeforeValidator(parse_int)]


class SheetRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, coerce_numbers_to_str=True)

    id: str

    @classmethod
    def from_row(cls, row: Sequence[object]) -> Self:
        data = {name: value for name, value in zip(cls.model_fields, row) if value is not None and value != ""}
        return cls.model_validate(data)

    def to_row(self) -> list[object]:
        return [getattr(self, name) for name in type(self).model_fields]


class Student(SheetRecord):
    name: str = ""
    school: str = ""
    generation: str = ""
    number: str = ""
    enrollment_date: str = ""
    status: str = ""

    @property
    def is_active(self) -> bool:
        return self.status == STUDENT_STATUS_ACTIVE


class SchoolClass(SheetRecord):
    school: str = ""
    year: str = ""
    semester: str = ""
    generation: str = ""
    schedule: str = ""
    status: str = ""

    @property
    def label(self) -> str:
        return f"{self.school} - {self.year} {self.semester}".strip()


class Lecture(SheetRecord):
    class_id: str = ""
    date: str = ""
    time: str = ""
    topic: str = "Untitled Lecture"


class Enrollment(SheetRecord):
    student_id: str = ""
    class_id: str = ""
    enrollment_date: str = ""
    status: str = ""


class Attendance(SheetRecord):
    lecture_id: str = ""
    student_id: str = ""
    status: str = ATTENDANCE_STATUS_NONE
    class_id: str = ""
    date: str = ""


class Homework(SheetRecord):
    lecture_id: str = ""
    student_id: str = ""
    total_problems: SheetInt = 0
    completed_problems: SheetInt = 0
    classification: str = ""
    comments: str = ""
    last_updated: str = ""


class Exam(SheetRecord):
    title: str = "Untitled Exam"
    description: str = ""
    date: str = ""
    class_id: str = ""
    status: str = ""


class Problem(SheetRecord):
    title: str = "Untitled Problem"
    description: str = ""


class ExamProblem(SheetRecord):
    exam_id: str = ""
    problem_id: str = ""
    max_score: SheetInt = 0
    problem_number: SheetInt = 0
    date: str = ""
    class_id: str = ""
    status: str = EXAM_STATUS_PENDING


class Score(SheetRecord):
    exam_id: str = ""
    student_id: str = ""
    problem_id: str = ""
    score: SheetInt = 0
    comment: str = ""
    date: str = ""
    status: str = ""
    last_updated: str = ""

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.exam_id, self.student_id, self.problem_id)


RECORD_TYPES: dict[str, type[SheetRecord]] = {
    "student": Student,
    "class": SchoolClass,
    "lecture": Lecture,
    "enrollment": Enrollment,
    "attendance": Attendance,
    "homework": Homework,
    "exam": Exam,
    "problem": Problem,
    "exam_problem": ExamProblem,
    "score": Score,
}
