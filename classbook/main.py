from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from classbook.api.errors import register_error_handlers
from classbook.api.router import api_router
from classbook.core.config import get_settings
from classbook.core.logging import configure_logging
from classbook.db.base import Base
from classbook.db.session import get_engine
from classbook.models import sheet_row as _sheet_row_model  # noqa: F401


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if settings.auto_create_schema:
            Base.metadata.create_all(bind=get_engine())
        yield

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    return app


app = create_app()
