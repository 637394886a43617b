from fastapi import Depends

from classbook.core.config import get_settings
from classbook.db.session import get_session_factory
from classbook.services.loader import ExamState, load_exam_state
from classbook.services.sheet_store import SheetStore


def get_store() -> SheetStore:
    return SheetStore(get_session_factory())


def get_exam_state(store: SheetStore = Depends(get_store)) -> ExamState:
    return load_exam_state(store, max_workers=get_settings().loader_max_workers)
