import logging
from concurrent.futures import ThreadPoolExecutor

from fastapi import APIRouter, Depends, HTTPException

from classbook.api.deps import get_store
from classbook.schemas.classes import ClassCreateRequest, ClassCreateResponse, ClassDetail, EnrolledStudent
from classbook.schemas.records import ENROLLMENT_STATUS_INACTIVE, Enrollment, Lecture, SchoolClass, Student
from classbook.services.ids import allocator_for
from classbook.services.loader import load_records
from classbook.services.sheet_store import SheetStore, sheet_write_lock

logger = logging.getLogger(__name__)

router = APIRouter(tags=["classes"])


@router.get("/classes", response_model=list[SchoolClass])
def list_classes(store: SheetStore = Depends(get_store)):
    return load_records(store, "class", SchoolClass)


@router.post("/add-class", response_model=ClassCreateResponse)
def add_class(payload: ClassCreateRequest, store: SheetStore = Depends(get_store)):
    with sheet_write_lock("class", "lecture", "enrollment"):
        class_ids = allocator_for(store, "class")
        if payload.class_id and not class_ids.reserve(payload.class_id):
            raise HTTPException(status_code=409, detail=f"Class {payload.class_id} already exists")
        class_id = payload.class_id or class_ids.next()

        school_class = SchoolClass(
            id=class_id,
            school=payload.school,
            year=payload.year,
            semester=payload.semester,
            generation=payload.generation,
            schedule=payload.schedule,
            status=payload.status,
        )

        lecture_ids = allocator_for(store, "lecture")
        lectures = [
            Lecture(
                id=item.lecture_id
                if item.lecture_id and lecture_ids.reserve(item.lecture_id)
                else lecture_ids.next(),
                class_id=class_id,
                date=item.lecture_date,
                time=item.lecture_time,
                topic=item.lecture_topic,
            )
            for item in payload.lectures
        ]

        enrollment_ids = allocator_for(store, "enrollment")
        enrollments = [
            Enrollment(
                id=item.enrollment_id
                if item.enrollment_id and enrollment_ids.reserve(item.enrollment_id)
                else enrollment_ids.next(),
                student_id=item.student_id,
                class_id=class_id,
                enrollment_date=item.enrollment_date,
                status="active",
            )
            for item in payload.enrollments
        ]

        with store.batch() as batch:
            batch.append_rows("class", [school_class.to_row()])
            if lectures:
                batch.append_rows("lecture", [lecture.to_row() for lecture in lectures])
            if enrollments:
                batch.append_rows("enrollment", [enrollment.to_row() for enrollment in enrollments])

    logger.info(
        "Created class %s with %d lecture(s) and %d enrollment(s).", class_id, len(lectures), len(enrollments)
    )
    return ClassCreateResponse(
        message="Class created successfully",
        class_id=class_id,
        lectures_added=len(lectures),
        enrollments_added=len(enrollments),
    )


@router.get("/class-details/{class_id}", response_model=ClassDetail)
def class_details(class_id: str, store: SheetStore = Depends(get_store)):
    school_class = next(
        (item for item in load_records(store, "class", SchoolClass) if item.id == class_id),
        None,
    )
    if not school_class:
        raise HTTPException(status_code=404, detail="Class not found")

    with ThreadPoolExecutor(max_workers=3, thread_name_prefix="sheet-load") as pool:
        lectures_future = pool.submit(load_records, store, "lecture", Lecture)
        enrollments_future = pool.submit(load_records, store, "enrollment", Enrollment)
        students_future = pool.submit(load_records, store, "student", Student)
        lectures = lectures_future.result()
        enrollments = enrollments_future.result()
        students = students_future.result()

    students_by_id = {student.id: student for student in reversed(students)}
    enrolled_students: list[EnrolledStudent] = []
    listed: set[str] = set()
    for enrollment in enrollments:
        if enrollment.class_id != class_id or enrollment.status == ENROLLMENT_STATUS_INACTIVE:
            continue
        if enrollment.student_id in listed:
            continue
        student = students_by_id.get(enrollment.student_id)
        if student is None:
            continue
        listed.add(student.id)
        enrolled_students.append(
            EnrolledStudent(
                student_id=student.id,
                name=student.name,
                school=student.school,
                generation=student.generation,
                number=student.number,
                enrollment_date=enrollment.enrollment_date,
            )
        )

    return ClassDetail(
        class_id=school_class.id,
        school=school_class.school,
        year=school_class.year,
        semester=school_class.semester,
        generation=school_class.generation,
        schedule=school_class.schedule,
        status=school_class.status,
        lectures=[lecture for lecture in lectures if lecture.class_id == class_id],
        enrolled_students=enrolled_students,
    )
