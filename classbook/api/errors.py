import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from classbook.core.sheets import UnknownSheetError
from classbook.services.sheet_store import SheetStoreError

logger = logging.getLogger(__name__)


async def sheet_store_error_handler(request: Request, exc: SheetStoreError) -> JSONResponse:
    logger.error("Sheet store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"success": False, "error": str(exc)})


async def unknown_sheet_error_handler(request: Request, exc: UnknownSheetError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "error": f"Invalid sheet ID: {exc.args[0]}"})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SheetStoreError, sheet_store_error_handler)
    app.add_exception_handler(UnknownSheetError, unknown_sheet_error_handler)
