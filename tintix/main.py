from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tintix.core.logging import configure_logging
from tintix import models  # noqa: F401
from tintix.routers.analytics import router as analytics_router
from tintix.routers.auth import router as auth_router
from tintix.routers.films import router as films_router
from tintix.routers.installers import router as installers_router
from tintix.routers.inventory import router as inventory_router
from tintix.routers.job_entries import router as job_entries_router
from tintix.routers.users import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Tintix API starting")
    yield


app = FastAPI(
    title="Tintix Shop Performance",
    lifespan=lifespan,
)


@app.middleware("http")
async def catch_unhandled_exceptions(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled exception", extra={"path": request.url.path, "method": request.method})
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(installers_router)
app.include_router(films_router)
app.include_router(inventory_router)
app.include_router(job_entries_router)
app.include_router(analytics_router)


@app.get("/")
def root():
    return {"status": "Tintix Shop Performance running"}


@app.get("/health")
def health():
    return {
        "status": "ok",
        "version": "1.0.0",
    }
