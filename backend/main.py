import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.config import (
    CORS_ALLOW_CREDENTIALS,
    CORS_ALLOW_HEADERS,
    CORS_ALLOW_METHODS,
    CORS_ALLOW_ORIGINS,
    LOG_LEVEL,
    TIMEZONE,
)
from backend.errors import PontoError, StorageFailure
from backend.routers.auth import router as auth_router
from backend.routers.core import router as core_router
from backend.routers.punches import router as punches_router
from backend.services.day_window import load_zone
from database import db

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("backend")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # an unknown PONTO_TIMEZONE fails startup instead of every request
    app.state.zone = load_zone(TIMEZONE)
    db.create_tables()
    app.state.punch_store = db.SQLitePunchStore()
    logger.info("Punch store ready at %s (reference zone %s)", app.state.punch_store.db_path, TIMEZONE)
    yield
    app.state.punch_store = None


app = FastAPI(title="Ponto API", lifespan=lifespan)


# -----------------------------
# CORS
# -----------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=CORS_ALLOW_CREDENTIALS,
    allow_methods=CORS_ALLOW_METHODS,
    allow_headers=CORS_ALLOW_HEADERS,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %s (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


# -----------------------------
# Error mapping
# -----------------------------
@app.exception_handler(PontoError)
async def ponto_error_handler(request: Request, exc: PontoError):
    if isinstance(exc, StorageFailure):
        # details were logged where the store failed
        return JSONResponse(status_code=500, content={"detail": "Internal server error."})

    content: dict = {"detail": exc.detail}
    if exc.errors:
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid value')}"
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": "Invalid request.", "errors": errors})


# -----------------------------
# Routers
# -----------------------------
app.include_router(core_router)
app.include_router(auth_router)
app.include_router(punches_router)
