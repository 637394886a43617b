import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from classbook.api.deps import get_store
from classbook.core.config import get_settings
from classbook.schemas.records import Score, Student
from classbook.schemas.students import (
    OperationResponse,
    StudentCreateRequest,
    StudentCreateResponse,
    StudentStatusRequest,
)
from classbook.services.ids import allocator_for
from classbook.services.loader import load_records
from classbook.services.sheet_store import SheetStore, sheet_write_lock
from classbook.services.student_import import StudentImportError, read_student_workbook

logger = logging.getLogger(__name__)

router = APIRouter(tags=["students"])


@router.get("/students", response_model=list[Student])
def list_students(store: SheetStore = Depends(get_store)):
    return load_records(store, "student", Student)


@router.post("/add-student", response_model=StudentCreateResponse)
def add_students(
    payload: StudentCreateRequest | list[StudentCreateRequest],
    store: SheetStore = Depends(get_store),
):
    items = payload if isinstance(payload, list) else [payload]
    if not items:
        raise HTTPException(status_code=400, detail="No students provided")

    with sheet_write_lock("student"):
        allocator = allocator_for(store, "student")
        students: list[Student] = []
        for item in items:
            if item.student_id and not allocator.reserve(item.student_id):
                raise HTTPException(status_code=409, detail=f"Student {item.student_id} already exists")
            students.append(
                Student(
                    id=item.student_id or allocator.next(),
                    name=item.name,
                    school=item.school,
                    generation=item.generation,
                    number=item.number,
                    enrollment_date=item.enrollment_date,
                    status=item.status,
                )
            )
        added = store.append_rows("student", [student.to_row() for student in students])
    logger.info("Added %d student(s).", added)
    return StudentCreateResponse(
        message=f"{added} students added successfully",
        updated_rows=added,
        student_ids=[student.id for student in students],
    )


@router.post("/upload-student-file", response_model=StudentCreateResponse)
async def upload_student_file(
    file: UploadFile = File(...),
    common_school: str = Form(default="", alias="commonSchool"),
    common_generation: str = Form(default="", alias="commonGeneration"),
    common_enrollment_date: str = Form(default="", alias="commonEnrollmentDate"),
    store: SheetStore = Depends(get_store),
):
    content = await file.read()
    if len(content) > get_settings().student_import_max_bytes:
        raise HTTPException(status_code=413, detail="Uploaded file is too large")

    try:
        drafts = read_student_workbook(
            content,
            common_school=common_school,
            common_generation=common_generation,
            common_enrollment_date=common_enrollment_date,
        )
    except StudentImportError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if not drafts:
        raise HTTPException(status_code=400, detail="No students found in uploaded file")

    with sheet_write_lock("student"):
        allocator = allocator_for(store, "student")
        students = [Student(id=allocator.next(), **draft) for draft in drafts]
        added = store.append_rows("student", [student.to_row() for student in students])
    logger.info("Imported %d student(s) from %s.", added, file.filename)
    return StudentCreateResponse(
        message=f"{added} students imported successfully",
        updated_rows=added,
        student_ids=[student.id for student in students],
    )


@router.post("/update-student-status/{student_id}", response_model=OperationResponse)
def update_student_status(
    student_id: str,
    payload: StudentStatusRequest,
    store: SheetStore = Depends(get_store),
):
    if not store.update_row("student", student_id, {"status": payload.status}):
        raise HTTPException(status_code=404, detail=f"Student with ID {student_id} not found")
    return OperationResponse(success=True, message="Student status updated successfully")


@router.delete("/students/{student_id}", response_model=OperationResponse)
def delete_student(student_id: str, store: SheetStore = Depends(get_store)):
    if not store.delete_row("student", student_id):
        raise HTTPException(status_code=404, detail=f"Student with ID {student_id} not found")
    logger.info("Deleted student %s.", student_id)
    return OperationResponse(success=True, message="Student deleted successfully")


@router.get("/students/{student_id}/scores", response_model=list[Score])
def student_scores(student_id: str, store: SheetStore = Depends(get_store)):
    students = load_records(store, "student", Student)
    if not any(student.id == student_id for student in students):
        raise HTTPException(status_code=404, detail=f"Student with ID {student_id} not found")
    return [score for score in load_records(store, "score", Score) if score.student_id == student_id]
