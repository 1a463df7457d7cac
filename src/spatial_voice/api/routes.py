"""REST API routes for practice sessions, analysis and history."""

import functools
import uuid
from collections import OrderedDict
from enum import StrEnum

import structlog
from fastapi import APIRouter, HTTPException, UploadFile
from pydantic import BaseModel, Field

from spatial_voice.config import get_settings
from spatial_voice.documents.extract import extract_text_from_bytes
from spatial_voice.models.analysis import AnalysisStatus
from spatial_voice.models.session import (
    HistoryLedger,
    PracticeRecord,
    SessionState,
    SessionStateError,
)
from spatial_voice.scoring.client import ScoringClient
from spatial_voice.scoring.orchestrator import ScoringOrchestrator
from spatial_voice.storage.practice_history import read_practice_history

logger = structlog.get_logger()
router = APIRouter(prefix="/api")

# Live practice sessions, keyed by session_id, oldest first.
_sessions: OrderedDict[str, SessionState] = OrderedDict()


class DocumentKind(StrEnum):
    SCRIPT = "script"
    SLIDES = "slides"
    MARKING = "marking"


class CreateSessionRequest(BaseModel):
    duration_minutes: int | None = Field(default=None, ge=1)
    scenario_title: str | None = None


class DocumentsUpdate(BaseModel):
    script_text: str | None = None
    slides_text: str | None = None
    marking_text: str | None = None


class DurationUpdate(BaseModel):
    duration_minutes: int = Field(ge=1)


class EndPracticeRequest(BaseModel):
    actual_used_seconds: int | None = Field(default=None, ge=0)
    remaining_seconds: int | None = Field(default=None, ge=0)


@functools.lru_cache
def get_orchestrator() -> ScoringOrchestrator:
    """Build the scoring orchestrator from settings (cached)."""
    settings = get_settings()
    client = ScoringClient(
        api_key=settings.deepseek_api_key,
        base_url=settings.scoring_base_url,
        model=settings.scoring_model,
        max_tokens=settings.scoring_max_tokens,
        temperature=settings.scoring_temperature,
        timeout=settings.scoring_timeout_seconds,
        transport_retries=settings.transport_retries,
        retry_backoff_seconds=settings.retry_backoff_seconds,
    )
    return ScoringOrchestrator(
        client=client,
        scenario_title=settings.scenario_title,
        history_dir=settings.history_dir,
    )


def validate_session_id(session_id: str) -> str:
    try:
        uuid.UUID(session_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid session ID format")
    return session_id


def _get_session(session_id: str) -> SessionState:
    session_id = validate_session_id(session_id)
    session = _sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _register(session: SessionState, max_sessions: int) -> None:
    """Track a new session, evicting the oldest idle ones past the cap."""
    _sessions[session.session_id] = session
    for stale_id in list(_sessions):
        if len(_sessions) <= max_sessions:
            break
        if stale_id == session.session_id or _sessions[stale_id].is_analyzing:
            continue
        del _sessions[stale_id]
        logger.info("session_evicted", session_id=stale_id)


def _require_idle(session: SessionState) -> None:
    if session.is_analyzing:
        raise HTTPException(status_code=409, detail="Analysis in progress for this session")


def _snapshot(session: SessionState) -> dict:
    data = session.model_dump(mode="json", exclude={"history"})
    data["formatted_used_time"] = session.formatted_used_time
    data["vocal_delivery_label"] = session.vocal_delivery_label
    data["nonverbal_label"] = session.nonverbal_label
    data["practice_records"] = [_record_view(r) for r in session.practice_records]
    return data


def _record_view(record: PracticeRecord) -> dict:
    data = record.model_dump(mode="json")
    data["formatted_date"] = record.formatted_date
    data["vocal_label"] = record.vocal_label
    data["nonverbal_label"] = record.nonverbal_label
    return data


@router.post("/sessions", status_code=201)
async def create_session(request: CreateSessionRequest | None = None) -> dict:
    """Start a new practice session seeded with the saved history."""
    settings = get_settings()
    request = request or CreateSessionRequest()
    session = SessionState(
        scenario_title=request.scenario_title or settings.scenario_title,
        duration_minutes=request.duration_minutes or settings.default_duration_minutes,
        history=HistoryLedger(records=read_practice_history(settings.history_dir)),
    )
    _register(session, settings.max_live_sessions)
    logger.info("session_created", session_id=session.session_id)
    return _snapshot(session)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str) -> dict:
    """Get a session's current state and results."""
    return _snapshot(_get_session(session_id))


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str) -> None:
    """Drop a live session. Saved history is not affected."""
    session = _get_session(session_id)
    _require_idle(session)
    del _sessions[session.session_id]
    logger.info("session_deleted", session_id=session.session_id)


@router.put("/sessions/{session_id}/documents")
async def update_documents(session_id: str, update: DocumentsUpdate) -> dict:
    """Replace any of the extracted document texts."""
    session = _get_session(session_id)
    _require_idle(session)
    for field, value in update.model_dump(exclude_none=True).items():
        setattr(session, field, value)
    return _snapshot(session)


@router.post("/sessions/{session_id}/documents/{kind}")
async def upload_document(session_id: str, kind: DocumentKind, file: UploadFile) -> dict:
    """Upload a document and store its extracted text."""
    session = _get_session(session_id)
    data = await file.read()
    text = extract_text_from_bytes(data, file.filename or "")
    _require_idle(session)
    setattr(session, f"{kind.value}_text", text)
    logger.info(
        "document_extracted",
        session_id=session.session_id,
        kind=kind.value,
        chars=len(text),
    )
    return _snapshot(session)


@router.put("/sessions/{session_id}/duration")
async def set_duration(session_id: str, update: DurationUpdate) -> dict:
    session = _get_session(session_id)
    try:
        session.set_duration_minutes(update.duration_minutes)
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _snapshot(session)


@router.post("/sessions/{session_id}/timer/start")
async def start_timer(session_id: str) -> dict:
    session = _get_session(session_id)
    session.start_timer()
    return _snapshot(session)


@router.post("/sessions/{session_id}/end")
async def end_practice(session_id: str, request: EndPracticeRequest) -> dict:
    """Record the time actually used. Allowed once per session."""
    session = _get_session(session_id)
    if request.actual_used_seconds is None and request.remaining_seconds is None:
        raise HTTPException(
            status_code=422, detail="actual_used_seconds or remaining_seconds is required"
        )
    try:
        session.end_practice(
            actual_used_seconds=request.actual_used_seconds,
            remaining_seconds=request.remaining_seconds,
        )
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _snapshot(session)


@router.post("/sessions/{session_id}/analyze")
async def analyze_session(session_id: str) -> dict:
    """Score the session. Failures come back as a structured outcome."""
    session = _get_session(session_id)
    outcome = await get_orchestrator().analyze(session)
    if outcome.status == AnalysisStatus.REJECTED:
        raise HTTPException(status_code=409, detail=outcome.error_message)
    return {
        "outcome": outcome.model_dump(mode="json"),
        "session": _snapshot(session),
    }


@router.get("/history")
async def get_practice_history() -> list[dict]:
    """Return saved practice records, most recent first."""
    settings = get_settings()
    return [_record_view(r) for r in read_practice_history(settings.history_dir)]


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
