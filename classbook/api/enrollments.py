import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from classbook.api.deps import get_store
from classbook.schemas.classes import EnrollmentRequest
from classbook.schemas.records import ENROLLMENT_STATUS_INACTIVE, Enrollment, SchoolClass, Student
from classbook.schemas.students import OperationResponse
from classbook.services.ids import allocator_for
from classbook.services.loader import load_records
from classbook.services.sheet_store import SheetStore, sheet_write_lock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


@router.get("/class/{class_id}", response_model=list[Enrollment])
def class_enrollments(class_id: str, store: SheetStore = Depends(get_store)):
    if not any(item.id == class_id for item in load_records(store, "class", SchoolClass)):
        raise HTTPException(status_code=404, detail="Class not found")
    return [item for item in load_records(store, "enrollment", Enrollment) if item.class_id == class_id]


@router.post("", response_model=Enrollment, status_code=201)
def enroll_student(payload: EnrollmentRequest, store: SheetStore = Depends(get_store)):
    if not any(item.id == payload.student_id for item in load_records(store, "student", Student)):
        raise HTTPException(status_code=400, detail=f"Student with ID {payload.student_id} not found")
    if not any(item.id == payload.class_id for item in load_records(store, "class", SchoolClass)):
        raise HTTPException(status_code=400, detail=f"Class with ID {payload.class_id} not found")

    with sheet_write_lock("enrollment"):
        enrollments = load_records(store, "enrollment", Enrollment)
        if any(
            item.student_id == payload.student_id
            and item.class_id == payload.class_id
            and item.status != ENROLLMENT_STATUS_INACTIVE
            for item in enrollments
        ):
            raise HTTPException(status_code=409, detail="Student is already enrolled in this class")

        enrollment = Enrollment(
            id=allocator_for(store, "enrollment").next(),
            student_id=payload.student_id,
            class_id=payload.class_id,
            enrollment_date=payload.enrollment_date or date.today().isoformat(),
            status="active",
        )
        store.append_rows("enrollment", [enrollment.to_row()])

    logger.info("Enrolled student %s in class %s as %s.", enrollment.student_id, enrollment.class_id, enrollment.id)
    return enrollment


@router.delete("/{enrollment_id}", response_model=OperationResponse)
def delete_enrollment(enrollment_id: str, store: SheetStore = Depends(get_store)):
    if not store.delete_row("enrollment", enrollment_id):
        raise HTTPException(status_code=404, detail=f"Enrollment with ID {enrollment_id} not found")
    logger.info("Deleted enrollment %s.", enrollment_id)
    return OperationResponse(success=True, message="Enrollment deleted successfully")
