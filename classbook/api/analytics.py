from concurrent.futures import ThreadPoolExecutor

from fastapi import APIRouter, Depends

from classbook.api.deps import get_store
from classbook.core.config import get_settings
from classbook.schemas.analytics import AttendanceAnalytics, OverviewStats
from classbook.services.analytics import attendance_analytics, overview_stats
from classbook.services.loader import load_records
from classbook.services.sheet_store import SheetStore

router = APIRouter(prefix="/analytics", tags=["analytics"])

_OVERVIEW_SHEETS = ("student", "class", "attendance", "homework", "exam_problem", "score")


@router.get("/overview", response_model=OverviewStats)
def analytics_overview(store: SheetStore = Depends(get_store)):
    workers = max(1, get_settings().loader_max_workers)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sheet-load") as pool:
        futures = [pool.submit(load_records, store, sheet) for sheet in _OVERVIEW_SHEETS]
        students, classes, attendance, homework, exam_problems, scores = [future.result() for future in futures]
    return overview_stats(students, classes, attendance, homework, exam_problems, scores)


@router.get("/attendance", response_model=AttendanceAnalytics)
def analytics_attendance(store: SheetStore = Depends(get_store)):
    return attendance_analytics(load_records(store, "attendance"), load_records(store, "lecture"))
