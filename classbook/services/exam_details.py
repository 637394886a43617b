import math

from classbook.schemas.exams import ExamDetail, ExamProblemView, ExamSummary, StudentResult
from classbook.schemas.records import (
    ENROLLMENT_STATUS_INACTIVE,
    EXAM_STATUS_PENDING,
    Exam,
    ExamProblem,
    Student,
)
from classbook.services.loader import ExamState

UNKNOWN_PROBLEM_TITLE = "Unknown Problem"
UNKNOWN_STUDENT_NAME = "Unknown Student"
UNKNOWN_CLASS_LABEL = "Unknown class"
NOT_SCHEDULED = "Not scheduled"


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def percentage(total: int, maximum: int) -> int:
    if maximum <= 0:
        return 0
    return round_half_up(total / maximum * 100)


def exam_problems_for(exam_id: str, state: ExamState) -> list[ExamProblem]:
    # sorted() is stable, so rows sharing a problem_number keep sheet order.
    rows = [row for row in state.exam_problems if row.exam_id == exam_id]
    return sorted(rows, key=lambda row: row.problem_number)


def _effective_metadata(exam: Exam, rows: list[ExamProblem]) -> tuple[str, str, str]:
    first = rows[0] if rows else None
    class_id = exam.class_id or (first.class_id if first else "")
    date = exam.date or (first.date if first else "") or NOT_SCHEDULED
    status = exam.status or (first.status if first else "") or EXAM_STATUS_PENDING
    return class_id, date, status


def _class_label(class_id: str, state: ExamState) -> str:
    school_class = next((item for item in state.classes if item.id == class_id), None) if class_id else None
    return school_class.label if school_class else UNKNOWN_CLASS_LABEL


def resolve_roster(exam_id: str, class_id: str, state: ExamState) -> list[str]:
    """Students scored on the exam, then the exam's expected population.

    The expected population is the class enrollment; a class without any
    enrollment rows falls back to every active student.
    """
    score_holders = [score.student_id for score in state.scores if score.exam_id == exam_id]

    class_enrollments = [item for item in state.enrollments if class_id and item.class_id == class_id]
    if class_enrollments:
        expected = [item.student_id for item in class_enrollments if item.status != ENROLLMENT_STATUS_INACTIVE]
    else:
        expected = [student.id for student in state.students if student.is_active]

    return list(dict.fromkeys([*score_holders, *expected]))


def build_exam_detail(exam_id: str, state: ExamState) -> ExamDetail | None:
    exam = state.find_exam(exam_id)
    if exam is None:
        return None

    rows = exam_problems_for(exam_id, state)
    problems_by_id = {problem.id: problem for problem in reversed(state.problems)}
    problems: list[ExamProblemView] = []
    for row in rows:
        problem = problems_by_id.get(row.problem_id)
        problems.append(
            ExamProblemView(
                id=row.problem_id,
                exam_problem_id=row.id,
                title=problem.title if problem else UNKNOWN_PROBLEM_TITLE,
                description=problem.description if problem else "",
                max_score=row.max_score,
                problem_number=row.problem_number,
            )
        )
    max_score = sum(problem.max_score for problem in problems)

    class_id, date, status = _effective_metadata(exam, rows)

    students_by_id: dict[str, Student] = {student.id: student for student in reversed(state.students)}
    exam_scores = [score for score in state.scores if score.exam_id == exam_id]
    results: list[StudentResult] = []
    for student_id in resolve_roster(exam_id, class_id, state):
        student = students_by_id.get(student_id)
        student_scores = [score for score in exam_scores if score.student_id == student_id]
        total = sum(score.score for score in student_scores)
        results.append(
            StudentResult(
                id=student_id,
                name=student.name if student else UNKNOWN_STUDENT_NAME,
                total_score=total,
                max_score=max_score,
                percentage=percentage(total, max_score),
                scores=student_scores,
            )
        )

    average = round_half_up(sum(item.percentage for item in results) / len(results)) if results else 0

    return ExamDetail(
        id=exam.id,
        title=exam.title,
        description=exam.description,
        class_id=class_id,
        class_name=_class_label(class_id, state),
        date=date,
        status=status,
        max_score=max_score,
        problems=problems,
        students=results,
        average_percentage=average,
    )


def summarize_exam(exam: Exam, state: ExamState) -> ExamSummary:
    rows = [row for row in state.exam_problems if row.exam_id == exam.id]
    class_id, date, status = _effective_metadata(exam, rows)
    return ExamSummary(
        id=exam.id,
        title=exam.title,
        description=exam.description,
        class_id=class_id,
        class_name=_class_label(class_id, state),
        date=date,
        status=status,
        total_problems=len(rows),
        total_score=sum(row.max_score for row in rows),
    )


def list_exam_summaries(state: ExamState) -> list[ExamSummary]:
    """Most recent exam first; unscheduled exams last, in sheet order."""
    summaries = [summarize_exam(exam, state) for exam in state.exams]
    scheduled = sorted(
        (item for item in summaries if item.date != NOT_SCHEDULED),
        key=lambda item: item.date,
        reverse=True,
    )
    unscheduled = [item for item in summaries if item.date == NOT_SCHEDULED]
    return scheduled + unscheduled
