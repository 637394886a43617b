import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from classbook.api.deps import get_store
from classbook.schemas.classes import LectureRequest
from classbook.schemas.records import Lecture, SchoolClass
from classbook.services.ids import allocator_for
from classbook.services.lectures import lectures_for_class, upcoming_lectures
from classbook.services.loader import load_records
from classbook.services.sheet_store import SheetStore, sheet_write_lock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lectures", tags=["lectures"])


def _class_exists(store: SheetStore, class_id: str) -> bool:
    return any(item.id == class_id for item in load_records(store, "class", SchoolClass))


@router.get("/upcoming", response_model=list[Lecture])
def list_upcoming_lectures(store: SheetStore = Depends(get_store)):
    return upcoming_lectures(load_records(store, "lecture", Lecture), date.today())


@router.get("/class/{class_id}", response_model=list[Lecture])
def class_lectures(class_id: str, store: SheetStore = Depends(get_store)):
    if not _class_exists(store, class_id):
        raise HTTPException(status_code=404, detail="Class not found")
    return lectures_for_class(load_records(store, "lecture", Lecture), class_id)


@router.post("", response_model=Lecture, status_code=201)
def create_lecture(payload: LectureRequest, store: SheetStore = Depends(get_store)):
    if not _class_exists(store, payload.class_id):
        raise HTTPException(status_code=400, detail=f"Class with ID {payload.class_id} not found")

    with sheet_write_lock("lecture"):
        lecture = Lecture(
            id=allocator_for(store, "lecture").next(),
            class_id=payload.class_id,
            date=payload.lecture_date,
            time=payload.lecture_time,
            topic=payload.lecture_topic,
        )
        store.append_rows("lecture", [lecture.to_row()])

    logger.info("Created lecture %s for class %s.", lecture.id, lecture.class_id)
    return lecture
