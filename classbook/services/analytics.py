"""Dashboard figures over the student, class, attendance, homework and score sheets.

Rates are percentages rounded half up to one decimal.
"""

import math
from collections.abc import Sequence
from datetime import date

from classbook.schemas.analytics import (
    AttendanceAnalytics,
    AttendanceByDay,
    AttendancePattern,
    OverviewStats,
    StatusShare,
)
from classbook.schemas.records import Attendance, ExamProblem, Homework, Lecture, SchoolClass, Score, Student
from classbook.services.lectures import parse_sheet_date
from classbook.services.statistics import exam_student_percentages

TRACKED_STATUSES = ("present", "absent", "late", "excused")
DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def round_one_decimal(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def rate(part: int | float, whole: int | float) -> float:
    if whole <= 0:
        return 0.0
    return round_one_decimal(part / whole * 100)


def _is_present(record: Attendance) -> bool:
    return record.status.lower() == "present"


def overview_stats(
    students: Sequence[Student],
    classes: Sequence[SchoolClass],
    attendance: Sequence[Attendance],
    homework: Sequence[Homework],
    exam_problems: Sequence[ExamProblem],
    scores: Sequence[Score],
) -> OverviewStats:
    percentages = exam_student_percentages(exam_problems, scores)
    return OverviewStats(
        total_students=len(students),
        active_students=sum(1 for student in students if student.is_active),
        total_classes=len(classes),
        attendance_rate=rate(sum(1 for record in attendance if _is_present(record)), len(attendance)),
        homework_completion=rate(
            sum(item.completed_problems for item in homework),
            sum(item.total_problems for item in homework),
        ),
        avg_exam_score=round_one_decimal(sum(percentages) / len(percentages)) if percentages else 0.0,
    )


def _sunday_first_index(day: date) -> int:
    return (day.weekday() + 1) % 7


def attendance_analytics(attendance: Sequence[Attendance], lectures: Sequence[Lecture]) -> AttendanceAnalytics:
    """Present rate per lecture date and per weekday, plus the status distribution.

    Records whose lecture is unknown or undated only count toward the distribution.
    """
    lecture_days: dict[str, date] = {}
    for lecture in reversed(lectures):
        day = parse_sheet_date(lecture.date)
        if day is not None:
            lecture_days[lecture.id] = day

    by_date: dict[date, list[int]] = {}
    by_weekday = [[0, 0] for _ in DAY_NAMES]
    for record in attendance:
        day = lecture_days.get(record.lecture_id)
        if day is None:
            continue
        present = 1 if _is_present(record) else 0
        counts = by_date.setdefault(day, [0, 0])
        counts[0] += present
        counts[1] += 1
        weekday = by_weekday[_sunday_first_index(day)]
        weekday[0] += present
        weekday[1] += 1

    dates = sorted(by_date)
    status_counts = {status: 0 for status in TRACKED_STATUSES}
    for record in attendance:
        status = record.status.lower()
        if status in status_counts:
            status_counts[status] += 1

    return AttendanceAnalytics(
        attendance_pattern=AttendancePattern(
            dates=[day.isoformat() for day in dates],
            present_rates=[rate(*by_date[day]) for day in dates],
        ),
        attendance_by_day=AttendanceByDay(
            days=list(DAY_NAMES),
            rates=[rate(present, total) for present, total in by_weekday],
        ),
        status_distribution=[
            StatusShare(status=status, count=count, percentage=rate(count, len(attendance)))
            for status, count in status_counts.items()
        ],
    )
