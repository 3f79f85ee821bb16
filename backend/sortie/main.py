import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from sortie.core.config import settings
from sortie.core.logging import setup_logging
from sortie.database.session import init_db
from sortie.routers.web import admin, admin_coupons, admin_gallery, admin_sheets, admin_trips, auth, public

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("%s started", settings.APP_NAME)
    yield


def create_app(run_init_db: bool = True) -> FastAPI:
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        lifespan=lifespan if run_init_db else None,
    )

    Path(settings.STORAGE_ROOT).mkdir(parents=True, exist_ok=True)
    # uploads are mounted first so the broader /static mount does not shadow them
    app.mount(settings.STORAGE_PUBLIC_URL, StaticFiles(directory=settings.STORAGE_ROOT), name="uploads")
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    app.include_router(public.router)
    app.include_router(auth.router)
    app.include_router(admin.router)
    app.include_router(admin_trips.router)
    app.include_router(admin_gallery.router)
    app.include_router(admin_coupons.router)
    app.include_router(admin_sheets.router)

    return app


app = create_app()
