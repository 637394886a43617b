from fastapi import APIRouter, Depends

from classbook.api.deps import get_store
from classbook.core.sheets import get_layout
from classbook.services.sheet_store import SheetStore

router = APIRouter(tags=["lists"])


@router.get("/load-list/{sheet}")
def load_list(sheet: str, store: SheetStore = Depends(get_store)):
    layout = get_layout(sheet)
    rows = [row for row in store.load_list(layout.name) if row and row[0]]
    return {"success": True, "data": rows}
