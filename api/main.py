"""FastAPI application for the study log.

Endpoints:
  GET    /health                    — Store status
  GET    /days/{key}/notes          — Notes recorded on a day, newest first
  POST   /days/{key}/notes          — Record a new note
  PUT    /days/{key}/notes/{id}     — Edit a note in place
  DELETE /days/{key}/notes/{id}     — Delete a note (plan unless confirm=true)
  GET    /review                    — Yesterday / one week / two weeks ago
  GET    /review/offsets            — Selectable review offsets
  GET    /review/{offset}           — Notes from N days ago
  GET    /calendar/current          — Month grid for today
  GET    /calendar/{year}/{month}   — Month grid with record markers
  GET    /backup/export             — Download a backup document
  POST   /backup/import             — Replace everything (plan unless confirm=true)
  DELETE /backup                    — Wipe everything (plan unless confirm=true)
  GET    /metrics                   — Prometheus metrics
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field, ValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from studylog.config import settings
from studylog.errors import (
    BackupValidationError,
    ImportFailedError,
    NoteNotFoundError,
    NoteValidationError,
    OffsetOutOfRangeError,
    StudyLogError,
)
from studylog.journal import Journal
from studylog.metrics import HTTP_DURATION, HTTP_REQUESTS
from studylog.models import MonthAnchor

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)

# --- Global instances ---
journal = Journal.from_settings(settings)

# Endpoints excluded from HTTP metrics to avoid cardinality explosion
_METRICS_EXCLUDE = {"/metrics", "/openapi.json", "/docs", "/redoc"}

_STATUS_BY_ERROR: dict[type[StudyLogError], int] = {
    NoteValidationError: 422,
    BackupValidationError: 422,
    NoteNotFoundError: 404,
    OffsetOutOfRangeError: 400,
    ImportFailedError: 400,
}


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record HTTP request count and duration for Prometheus."""

    async def dispatch(self, request: Request, call_next):
        """Wrap each request with timing and counting."""
        path = request.url.path
        if path in _METRICS_EXCLUDE:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start

        # Route templates keep label cardinality bounded (one per endpoint).
        route = request.scope.get("route")
        endpoint = getattr(route, "path", path)
        HTTP_REQUESTS.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        HTTP_DURATION.labels(endpoint=endpoint).observe(elapsed)
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the active store on startup and shutdown."""
    logger.info(
        "Study log API starting — backend=%s, key=%s",
        settings.storage_backend,
        settings.storage_key,
    )
    yield
    close = getattr(journal.store.backend, "close", None)
    if close:
        close()
    logger.info("Study log API shut down.")


app = FastAPI(title="Study Log", version="1.0.0", lifespan=lifespan)

app.add_middleware(MetricsMiddleware)


# --- Error handling ---


@app.exception_handler(StudyLogError)
async def study_log_error_handler(request: Request, exc: StudyLogError) -> JSONResponse:
    """Report domain errors as a short JSON message; never a crash."""
    status = _STATUS_BY_ERROR.get(type(exc), 400)
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=status, content={"error": exc.kind, "message": exc.message})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Malformed date keys and similar bad input."""
    if isinstance(exc, ValidationError):
        return JSONResponse(status_code=422, content={"error": "validation", "message": str(exc)})
    return JSONResponse(status_code=400, content={"error": "bad_request", "message": str(exc)})


# --- Request models ---


class NoteRequest(BaseModel):
    """Title and body of a note being recorded or edited."""

    title: str = Field("", description="Note title, trimmed")
    body: str = Field("", description="Note body, trimmed")


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(by_alias=True)


# --- Endpoints ---
# Handlers that touch the store are plain ``def``: the backends are blocking,
# so they run in the threadpool and the store lock serialises writers.


@app.get("/health")
def health() -> dict[str, Any]:
    """Check that the store is readable and report its size."""
    store = journal.store.load()
    return {
        "status": "healthy",
        "backend": settings.storage_backend,
        "today": journal.codec.today_key(),
        "days": len(store.root),
        "total_notes": store.note_count,
    }


@app.get("/days/{key}/notes")
def list_notes(key: str) -> list[dict[str, Any]]:
    """Notes recorded on ``key``, newest first."""
    return [_dump(n) for n in journal.notes(key)]


@app.post("/days/{key}/notes", status_code=201)
def create_note(key: str, request: NoteRequest) -> dict[str, Any]:
    """Record a new note on ``key``."""
    note = journal.save_note(request.title, request.body, key=key)
    return _dump(note)


@app.put("/days/{key}/notes/{note_id}")
def update_note(key: str, note_id: str, request: NoteRequest) -> dict[str, Any]:
    """Edit an existing note, keeping its position and creation time."""
    note = journal.save_note(request.title, request.body, note_id=note_id, key=key)
    return _dump(note)


@app.delete("/days/{key}/notes/{note_id}")
def delete_note(key: str, note_id: str, confirm: bool = False) -> dict[str, Any]:
    """Without ``confirm`` only describe the deletion."""
    plan = journal.plan_delete(key, note_id)
    if not confirm:
        return {"status": "confirmation_required", "plan": _dump(plan)}
    deleted = journal.delete_note(key, note_id)
    return {"status": "deleted" if deleted else "not_found", "plan": _dump(plan)}


@app.get("/review")
def review() -> list[dict[str, Any]]:
    """Notes from yesterday, one week ago and two weeks ago."""
    return [_dump(slot) for slot in journal.review()]


@app.get("/review/offsets")
async def review_offsets() -> list[dict[str, Any]]:
    """Offsets a caller can pick for the selectable review slot."""
    return [_dump(choice) for choice in journal.planner.offset_choices()]


@app.get("/review/{offset}")
def review_offset(offset: int) -> dict[str, Any]:
    """Notes from ``offset`` days ago."""
    return _dump(journal.review_offset(offset))


def _calendar_payload(anchor: MonthAnchor) -> dict[str, Any]:
    previous, following = anchor.previous(), anchor.next()
    return {
        "year": anchor.year,
        "month": anchor.month,
        "previous": _dump(previous) if previous is not None else None,
        "next": _dump(following) if following is not None else None,
        "weeks": [[_dump(cell) for cell in week] for week in journal.calendar(anchor)],
    }


@app.get("/calendar/current")
def calendar_current() -> dict[str, Any]:
    """Month grid for the current month."""
    return _calendar_payload(journal.calendar_index.current_month())


@app.get("/calendar/{year}/{month}")
def calendar_month(year: int, month: int) -> dict[str, Any]:
    """Month grid for ``year``/``month`` (1-12) with record markers."""
    return _calendar_payload(MonthAnchor(year=year, month=month))


@app.get("/backup/export")
def backup_export() -> Response:
    """Whole store as a downloadable JSON document."""
    document = journal.export()
    filename = journal.backups.filename()
    return Response(
        content=journal.backups.dumps(document),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/backup/import")
def backup_import(doc: Any = Body(...), confirm: bool = False) -> dict[str, Any]:
    """Validate a backup; with ``confirm`` overwrite the store with it."""
    plan = journal.plan_import(doc)
    if not confirm:
        return {"status": "confirmation_required", "plan": _dump(plan)}
    store = journal.import_document(doc)
    return {
        "status": "imported",
        "plan": _dump(plan),
        "days": len(store.root),
        "total_notes": store.note_count,
    }


@app.delete("/backup")
def backup_wipe(confirm: bool = False) -> dict[str, Any]:
    """Without ``confirm`` only describe what a wipe would remove."""
    plan = journal.plan_wipe()
    if not confirm:
        return {"status": "confirmation_required", "plan": _dump(plan)}
    journal.wipe()
    return {"status": "wiped", "plan": _dump(plan)}


@app.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
