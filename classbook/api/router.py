from fastapi import APIRouter

from classbook.api import analytics, attendance, classes, enrollments, exams, lectures, lists, students, system

api_router = APIRouter()
api_router.include_router(system.router)
api_router.include_router(lists.router)
api_router.include_router(students.router)
api_router.include_router(classes.router)
api_router.include_router(lectures.router)
api_router.include_router(enrollments.router)
api_router.include_router(attendance.router)
api_router.include_router(exams.router)
api_router.include_router(analytics.router)
