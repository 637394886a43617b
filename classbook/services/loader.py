import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TypeVar

from classbook.schemas.records import (
    RECORD_TYPES,
    Enrollment,
    Exam,
    ExamProblem,
    Problem,
    SchoolClass,
    Score,
    SheetRecord,
    Student,
)
from classbook.services.sheet_store import SheetStore, SheetStoreError

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=SheetRecord)


def parse_records(rows: list[list[str]], model: type[RecordT]) -> list[RecordT]:
    # Cleared or blank rows carry no id and are skipped.
    return [model.from_row(row) for row in rows if row and row[0]]


def load_records(store: SheetStore, sheet: str, model: type[RecordT] | None = None) -> list[RecordT]:
    record_type = model or RECORD_TYPES[sheet]
    return parse_records(store.load_list(sheet), record_type)


@dataclass
class ExamState:
    """Record sets one exam request works on. Built per request, never shared."""

    exams: list[Exam] = field(default_factory=list)
    classes: list[SchoolClass] = field(default_factory=list)
    students: list[Student] = field(default_factory=list)
    enrollments: list[Enrollment] = field(default_factory=list)
    problems: list[Problem] = field(default_factory=list)
    exam_problems: list[ExamProblem] = field(default_factory=list)
    scores: list[Score] = field(default_factory=list)

    def find_exam(self, exam_id: str) -> Exam | None:
        return next((exam for exam in self.exams if exam.id == exam_id), None)


_EXAM_STATE_SHEETS: dict[str, tuple[str, type[SheetRecord]]] = {
    "exams": ("exam", Exam),
    "classes": ("class", SchoolClass),
    "students": ("student", Student),
    "enrollments": ("enrollment", Enrollment),
    "problems": ("problem", Problem),
    "exam_problems": ("exam_problem", ExamProblem),
    "scores": ("score", Score),
}


def _load_scores(store: SheetStore) -> list[Score]:
    try:
        return load_records(store, "score", Score)
    except SheetStoreError as exc:
        logger.warning("Score sheet unavailable, continuing without scores: %s", exc)
        return []


def load_exam_state(store: SheetStore, max_workers: int = 6) -> ExamState:
    """Load every sheet an exam view needs, concurrently.

    A failing score load degrades to an empty score list; any other failure
    propagates and no state is returned.
    """
    with ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="sheet-load") as pool:
        futures = {}
        for attr, (sheet, model) in _EXAM_STATE_SHEETS.items():
            if attr == "scores":
                futures[attr] = pool.submit(_load_scores, store)
            else:
                futures[attr] = pool.submit(load_records, store, sheet, model)
        loaded = {attr: future.result() for attr, future in futures.items()}
    return ExamState(**loaded)
