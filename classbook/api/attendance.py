import logging

from fastapi import APIRouter, Depends, HTTPException

from classbook.api.deps import get_store
from classbook.core.sheets import get_layout
from classbook.schemas.attendance import (
    AttendanceHomeworkSaveRequest,
    AttendanceHomeworkSaveResponse,
    AttendanceRecordRequest,
    AttendanceRecordResponse,
    LectureAttendanceItem,
    LectureAttendanceResponse,
    UpsertCounts,
)
from classbook.schemas.records import Attendance, Homework, Lecture, Student
from classbook.services.attendance import plan_attendance, plan_homework
from classbook.services.ids import IdAllocator, allocator_for
from classbook.services.loader import load_records
from classbook.services.sheet_store import SheetStore, sheet_write_lock

logger = logging.getLogger(__name__)

router = APIRouter(tags=["attendance"])

UNKNOWN = "Unknown"


def _get_lecture(store: SheetStore, lecture_id: str) -> Lecture:
    lecture = next((item for item in load_records(store, "lecture", Lecture) if item.id == lecture_id), None)
    if lecture is None:
        raise HTTPException(status_code=404, detail="Lecture not found")
    return lecture


@router.post("/attendance", response_model=AttendanceRecordResponse)
def record_attendance(payload: AttendanceRecordRequest, store: SheetStore = Depends(get_store)):
    lecture = _get_lecture(store, payload.lecture_id)
    with sheet_write_lock("attendance"):
        allocator = allocator_for(store, "attendance")
        records = [
            Attendance(
                id=entry.attendance_id
                if entry.attendance_id and allocator.reserve(entry.attendance_id)
                else allocator.next(),
                lecture_id=lecture.id,
                student_id=entry.student_id,
                status=entry.status,
                class_id=lecture.class_id,
                date=lecture.date,
            )
            for entry in payload.attendance_data
        ]
        added = store.append_rows("attendance", [record.to_row() for record in records])
    return AttendanceRecordResponse(message="Attendance recorded successfully", attendance_records=added)


@router.get("/attendance/{lecture_id}", response_model=LectureAttendanceResponse)
def lecture_attendance(lecture_id: str, store: SheetStore = Depends(get_store)):
    students_by_id = {student.id: student for student in reversed(load_records(store, "student", Student))}
    items: list[LectureAttendanceItem] = []
    for record in load_records(store, "attendance", Attendance):
        if record.lecture_id != lecture_id:
            continue
        student = students_by_id.get(record.student_id)
        items.append(
            LectureAttendanceItem(
                id=record.id,
                lecture_id=record.lecture_id,
                student_id=record.student_id,
                status=record.status,
                student_name=student.name if student else UNKNOWN,
                student_school=student.school if student else UNKNOWN,
                student_generation=student.generation if student else UNKNOWN,
            )
        )
    return LectureAttendanceResponse(lecture_id=lecture_id, attendance=items)


@router.post("/save-attendance-homework", response_model=AttendanceHomeworkSaveResponse)
def save_attendance_homework(payload: AttendanceHomeworkSaveRequest, store: SheetStore = Depends(get_store)):
    lecture = _get_lecture(store, payload.lecture_id)

    with sheet_write_lock("attendance", "homework"):
        attendance_rows = store.load_list("attendance")
        homework_rows = store.load_list("homework")
        attendance_plan = plan_attendance(
            [Attendance.from_row(row) for row in attendance_rows if row and row[0]],
            lecture,
            payload.attendance_data,
            IdAllocator(get_layout("attendance").id_prefix, (row[0] for row in attendance_rows if row)),
        )
        homework_plan = plan_homework(
            [Homework.from_row(row) for row in homework_rows if row and row[0]],
            lecture,
            payload.homework_data,
            IdAllocator(get_layout("homework").id_prefix, (row[0] for row in homework_rows if row)),
        )

        with store.batch() as batch:
            for record in attendance_plan.updated:
                batch.update_row("attendance", record.id, record.to_row())
            if attendance_plan.inserted:
                batch.append_rows("attendance", [record.to_row() for record in attendance_plan.inserted])
            for record in homework_plan.updated:
                batch.update_row("homework", record.id, record.to_row())
            if homework_plan.inserted:
                batch.append_rows("homework", [record.to_row() for record in homework_plan.inserted])

    logger.info(
        "Saved lecture %s: attendance updated=%d inserted=%d, homework updated=%d inserted=%d",
        lecture.id,
        len(attendance_plan.updated),
        len(attendance_plan.inserted),
        len(homework_plan.updated),
        len(homework_plan.inserted),
    )
    return AttendanceHomeworkSaveResponse(
        success=True,
        message="Attendance and homework data saved successfully",
        attendance=UpsertCounts(updated=len(attendance_plan.updated), inserted=len(attendance_plan.inserted)),
        homework=UpsertCounts(updated=len(homework_plan.updated), inserted=len(homework_plan.inserted)),
    )
