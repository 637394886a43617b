from collections.abc import Sequence

from classbook.schemas.exams import ExamStatistics
from classbook.schemas.records import EXAM_STATUS_ACTIVE, ExamProblem, Score
from classbook.services.exam_details import round_half_up
from classbook.services.loader import ExamState


def count_active_exams(exam_problems: Sequence[ExamProblem]) -> int:
    # An exam counts once, by the status of its first exam-problem row.
    first_rows: dict[str, ExamProblem] = {}
    for row in exam_problems:
        first_rows.setdefault(row.exam_id, row)
    return sum(1 for row in first_rows.values() if row.status == EXAM_STATUS_ACTIVE)


def exam_student_percentages(exam_problems: Sequence[ExamProblem], scores: Sequence[Score]) -> list[float]:
    """Unrounded percentage per (exam, student) pair; exams with no max score are skipped."""
    max_by_exam: dict[str, int] = {}
    for row in exam_problems:
        max_by_exam[row.exam_id] = max_by_exam.get(row.exam_id, 0) + row.max_score

    totals: dict[tuple[str, str], int] = {}
    for score in scores:
        key = (score.exam_id, score.student_id)
        totals[key] = totals.get(key, 0) + score.score

    return [
        total / max_by_exam[exam_id] * 100
        for (exam_id, _), total in totals.items()
        if max_by_exam.get(exam_id, 0) > 0
    ]


def overall_average_percentage(exam_problems: Sequence[ExamProblem], scores: Sequence[Score]) -> int:
    percentages = exam_student_percentages(exam_problems, scores)
    if not percentages:
        return 0
    return round_half_up(sum(percentages) / len(percentages))


def summarize(state: ExamState) -> ExamStatistics:
    return ExamStatistics(
        total_exams=len(state.exams),
        active_exams=count_active_exams(state.exam_problems),
        average_percentage=overall_average_percentage(state.exam_problems, state.scores),
    )
