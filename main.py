"""Vocab Voice quiz service – FastAPI application entry point."""

from __future__ import annotations

import datetime as dt
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vocab_quiz.config import settings
from vocab_quiz.database import engine, init_db
from vocab_quiz.errors import QuizError

# --- Configure logging so vocab_quiz.* loggers are visible alongside uvicorn ---
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(levelname)s:    %(name)s - %(message)s",
    stream=sys.stdout,
    force=True,  # override uvicorn's config
)

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    # --- startup ---
    await init_db()
    log.info("Database ready")

    yield

    # --- shutdown ---
    await engine.dispose()
    log.info("Database connections closed")


app = FastAPI(title="Vocab Voice Quiz", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.cors_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error envelope: {success: false, error, kind} ---


@app.exception_handler(QuizError)
async def quiz_error_handler(request: Request, exc: QuizError):
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        {"success": False, "error": exc.message, "kind": exc.kind},
        status_code=exc.status_code,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}"
        for err in exc.errors()
    )
    return JSONResponse(
        {"success": False, "error": f"Invalid request: {problems}", "kind": "invalid_argument"},
        status_code=400,
    )


_HTTP_ERROR_KINDS = {404: "not_found", 405: "method_not_allowed", 409: "conflict", 503: "unavailable"}


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    kind = _HTTP_ERROR_KINDS.get(
        exc.status_code, "internal" if exc.status_code >= 500 else "invalid_argument"
    )
    return JSONResponse(
        {"success": False, "error": str(exc.detail), "kind": kind},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"success": False, "error": "Internal server error", "kind": "internal"},
        status_code=500,
    )


# --- Register routers ---
from vocab_quiz.routes.quiz import router as quiz_router  # noqa: E402

app.include_router(quiz_router, prefix="/api")


@app.get("/health")
async def health():
    return {"status": "OK", "timestamp": dt.datetime.now(dt.timezone.utc).isoformat()}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
