from fastapi import APIRouter, Depends
from sqlalchemy.engine import make_url

from classbook.core.config import get_settings
from classbook.core.sheets import SHEETS
from classbook.api.deps import get_store
from classbook.services.sheet_store import SheetStore

router = APIRouter(tags=["system"])


@router.get("/health")
def health():
    settings = get_settings()
    return {"status": "ok", "version": settings.app_version}


@router.get("/system/info")
def system_info(store: SheetStore = Depends(get_store)):
    settings = get_settings()
    counts = store.count_rows()
    return {
        "app_name": settings.app_name,
        "app_env": settings.app_env,
        "app_version": settings.app_version,
        "database_backend": make_url(settings.database_url).get_backend_name(),
        "sheet_rows": {sheet: counts.get(sheet, 0) for sheet in SHEETS},
    }
