from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Generic, TypeVar

from classbook.schemas.attendance import AttendanceEntry, HomeworkEntry
from classbook.schemas.records import Attendance, Homework, Lecture
from classbook.services.ids import IdAllocator

RecordT = TypeVar("RecordT", Attendance, Homework)


@dataclass
class UpsertPlan(Generic[RecordT]):
    updated: list[RecordT] = field(default_factory=list)
    inserted: list[RecordT] = field(default_factory=list)


def _upsert_by_student(
    existing: Sequence[RecordT],
    lecture: Lecture,
    entries: Iterable[tuple[str, str | None, dict]],
    create: Callable[[str, str, dict], RecordT],
    allocator: IdAllocator,
) -> UpsertPlan[RecordT]:
    current: dict[str, RecordT] = {}
    for record in existing:
        if record.lecture_id == lecture.id:
            current.setdefault(record.student_id, record)

    updated: dict[str, RecordT] = {}
    inserted: dict[str, RecordT] = {}
    for student_id, requested_id, values in entries:
        if student_id in inserted:
            inserted[student_id] = inserted[student_id].model_copy(update=values)
        elif student_id in current:
            updated[student_id] = (updated.get(student_id) or current[student_id]).model_copy(update=values)
        else:
            record_id = requested_id if requested_id and allocator.reserve(requested_id) else allocator.next()
            inserted[student_id] = create(record_id, student_id, values)
    return UpsertPlan(updated=list(updated.values()), inserted=list(inserted.values()))


def plan_attendance(
    existing: Sequence[Attendance],
    lecture: Lecture,
    entries: Iterable[AttendanceEntry],
    allocator: IdAllocator,
) -> UpsertPlan[Attendance]:
    """Upsert attendance keyed on (lecture_id, student_id); new rows copy the lecture's class and date."""

    def create(record_id: str, student_id: str, values: dict) -> Attendance:
        return Attendance(
            id=record_id,
            lecture_id=lecture.id,
            student_id=student_id,
            class_id=lecture.class_id,
            date=lecture.date,
            **values,
        )

    return _upsert_by_student(
        existing,
        lecture,
        ((entry.student_id, entry.attendance_id, {"status": entry.status}) for entry in entries),
        create,
        allocator,
    )


def plan_homework(
    existing: Sequence[Homework],
    lecture: Lecture,
    entries: Iterable[HomeworkEntry],
    allocator: IdAllocator,
    *,
    now: datetime | None = None,
) -> UpsertPlan[Homework]:
    stamp = (now or datetime.now(UTC)).isoformat()

    def create(record_id: str, student_id: str, values: dict) -> Homework:
        return Homework(id=record_id, lecture_id=lecture.id, student_id=student_id, **values)

    return _upsert_by_student(
        existing,
        lecture,
        (
            (
                entry.student_id,
                entry.homework_id,
                {
                    "total_problems": entry.total_problems,
                    "completed_problems": entry.completed_problems,
                    "classification": entry.classification,
                    "comments": entry.comments,
                    "last_updated": stamp,
                },
            )
            for entry in entries
        ),
        create,
        allocator,
    )
