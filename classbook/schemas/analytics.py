from pydantic import BaseModel


class OverviewStats(BaseModel):
    total_students: int
    active_students: int
    total_classes: int
    attendance_rate: float
    homework_completion: float
    avg_exam_score: float


class AttendancePattern(BaseModel):
    dates: list[str]
    present_rates: list[float]


class AttendanceByDay(BaseModel):
    days: list[str]
    rates: list[float]


class StatusShare(BaseModel):
    status: str
    count: int
    percentage: float


class AttendanceAnalytics(BaseModel):
    attendance_pattern: AttendancePattern
    attendance_by_day: AttendanceByDay
    status_distribution: list[StatusShare]
