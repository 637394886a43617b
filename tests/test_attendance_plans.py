from datetime import UTC, datetime

from classbook.schemas.attendance import AttendanceEntry, HomeworkEntry
from classbook.schemas.records import Attendance, Homework, Lecture
from classbook.services.attendance import plan_attendance, plan_homework
from classbook.services.ids import IdAllocator

LECTURE = Lecture(id="L1", class_id="C1", date="2025-03-03", time="18:00", topic="Linear equations")


def test_attendance_updates_existing_and_inserts_new():
    existing = [
        Attendance(id="AT1", lecture_id="L1", student_id="S1", status="present", class_id="C1", date="2025-03-03"),
        Attendance(id="AT2", lecture_id="L2", student_id="S2", status="late"),
    ]
    plan = plan_attendance(
        existing,
        LECTURE,
        [
            AttendanceEntry(student_id="S1", status="late"),
            AttendanceEntry(student_id="S2", status="absent"),
        ],
        IdAllocator("AT", ["AT1", "AT2"]),
    )

    assert [(record.id, record.status) for record in plan.updated] == [("AT1", "late")]
    assert len(plan.inserted) == 1
    inserted = plan.inserted[0]
    assert inserted.id == "AT3"
    assert inserted.lecture_id == "L1"
    assert inserted.class_id == "C1"
    assert inserted.date == "2025-03-03"


def test_attendance_repeated_student_collapses():
    plan = plan_attendance(
        [],
        LECTURE,
        [
            AttendanceEntry(attendance_id="AT10", student_id="S1", status="present"),
            AttendanceEntry(student_id="S1", status="excused"),
        ],
        IdAllocator("AT"),
    )

    assert plan.updated == []
    assert [(record.id, record.status) for record in plan.inserted] == [("AT10", "excused")]


def test_homework_stamps_last_updated():
    now = datetime(2025, 3, 4, 8, 0, tzinfo=UTC)
    existing = [Homework(id="HW1", lecture_id="L1", student_id="S1", total_problems=10, completed_problems=8)]
    plan = plan_homework(
        existing,
        LECTURE,
        [
            HomeworkEntry(student_id="S1", total_problems=10, completed_problems=10, classification="excellent"),
            HomeworkEntry(student_id="S2", total_problems=10, completed_problems=3, comments="late start"),
        ],
        IdAllocator("HW", ["HW1"]),
        now=now,
    )

    assert plan.updated[0].id == "HW1"
    assert plan.updated[0].completed_problems == 10
    assert plan.updated[0].last_updated == now.isoformat()
    assert plan.inserted[0].id == "HW2"
    assert plan.inserted[0].comments == "late start"
    assert plan.inserted[0].last_updated == now.isoformat()
