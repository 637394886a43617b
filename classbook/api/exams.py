import logging

from fastapi import APIRouter, Depends, HTTPException

from classbook.api.deps import get_exam_state, get_store
from classbook.schemas.exams import (
    ExamCreateRequest,
    ExamCreateResponse,
    ExamDetail,
    ExamStatistics,
    ExamSummary,
    ScoreSaveRequest,
    ScoreSaveResponse,
)
from classbook.schemas.records import Exam, ExamProblem, Problem, Score
from classbook.services.exam_details import build_exam_detail, list_exam_summaries
from classbook.services.ids import allocator_for
from classbook.services.loader import ExamState, load_records
from classbook.services.score_reconciler import reconcile_scores
from classbook.services.sheet_store import SheetStore, sheet_write_lock
from classbook.services.statistics import summarize

logger = logging.getLogger(__name__)

router = APIRouter(tags=["exams"])


@router.get("/exams", response_model=list[ExamSummary])
def list_exams(state: ExamState = Depends(get_exam_state)):
    return list_exam_summaries(state)


@router.get("/exams/statistics", response_model=ExamStatistics)
def exam_statistics(state: ExamState = Depends(get_exam_state)):
    return summarize(state)


@router.get("/exams/{exam_id}", response_model=ExamDetail)
def exam_details(exam_id: str, state: ExamState = Depends(get_exam_state)):
    detail = build_exam_detail(exam_id, state)
    if detail is None:
        raise HTTPException(status_code=404, detail="Exam not found")
    return detail


@router.post("/add-exam", response_model=ExamCreateResponse)
def add_exam(payload: ExamCreateRequest, store: SheetStore = Depends(get_store)):
    if not payload.title.strip() or not payload.date or not payload.class_id or not payload.problems:
        raise HTTPException(status_code=400, detail="Missing required exam information")

    with sheet_write_lock("exam", "problem", "exam_problem"):
        exam_ids = allocator_for(store, "exam")
        if payload.exam_id and not exam_ids.reserve(payload.exam_id):
            raise HTTPException(status_code=409, detail=f"Exam {payload.exam_id} already exists")
        exam_id = payload.exam_id or exam_ids.next()

        exam = Exam(
            id=exam_id,
            title=payload.title.strip(),
            description=payload.description,
            date=payload.date,
            class_id=payload.class_id,
            status=payload.status,
        )

        # A problem_id naming an existing problem reuses it instead of writing a copy.
        problem_ids = allocator_for(store, "problem")
        exam_problem_ids = allocator_for(store, "exam_problem")
        problems: list[Problem] = []
        exam_problems: list[ExamProblem] = []
        for item in sorted(payload.problems, key=lambda entry: entry.problem_number):
            if item.problem_id and problem_ids.is_taken(item.problem_id):
                problem_id = item.problem_id
            else:
                problem_id = item.problem_id or problem_ids.next()
                problem_ids.reserve(problem_id)
                problems.append(Problem(id=problem_id, title=item.title, description=item.description))
            # Exam-level metadata is mirrored onto each row for readers of the flat exam_problem sheet.
            exam_problems.append(
                ExamProblem(
                    id=exam_problem_ids.next(),
                    exam_id=exam_id,
                    problem_id=problem_id,
                    max_score=item.max_score,
                    problem_number=item.problem_number,
                    date=payload.date,
                    class_id=payload.class_id,
                    status=payload.status,
                )
            )

        with store.batch() as batch:
            batch.append_rows("exam", [exam.to_row()])
            if problems:
                batch.append_rows("problem", [problem.to_row() for problem in problems])
            batch.append_rows("exam_problem", [row.to_row() for row in exam_problems])

    logger.info(
        "Created exam %s with %d problem(s), %d new.", exam_id, len(exam_problems), len(problems)
    )
    return ExamCreateResponse(success=True, message="Exam created successfully", exam_id=exam_id)


@router.post("/save-exam-scores", response_model=ScoreSaveResponse)
def save_exam_scores(payload: ScoreSaveRequest, store: SheetStore = Depends(get_store)):
    if not payload.exam_id or not payload.scores:
        raise HTTPException(status_code=400, detail="Missing required score information")
    if not any(exam.id == payload.exam_id for exam in load_records(store, "exam", Exam)):
        raise HTTPException(status_code=404, detail="Exam not found")

    # Score ids share one SC<n> space across exams, so every save holds the score sheet lock.
    with sheet_write_lock("score"):
        scores = load_records(store, "score", Score)
        plan = reconcile_scores(scores, payload.exam_id, payload.scores)
        with store.batch() as batch:
            for score in plan.updated:
                batch.update_row("score", score.id, score.to_row())
            if plan.inserted:
                batch.append_rows("score", [score.to_row() for score in plan.inserted])

    logger.info(
        "Saved scores for exam %s: updated=%d inserted=%d",
        payload.exam_id,
        len(plan.updated),
        len(plan.inserted),
    )
    return ScoreSaveResponse(
        success=True,
        message="Exam scores saved successfully",
        updated=len(plan.updated),
        inserted=len(plan.inserted),
    )
