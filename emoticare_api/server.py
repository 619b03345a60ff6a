from fastapi import FastAPI, APIRouter, Depends, HTTPException, Query
from starlette.middleware.cors import CORSMiddleware
import logging
from datetime import datetime, timedelta
from typing import Optional

from emoticare import (
    EmotionRecord,
    InMemorySessionStore,
    KeywordCrisisDetector,
    SessionStore,
    Tone,
    analyze_trends,
    daily_emotions,
    format_report,
    format_weekly_digest,
    process_message,
)
from emoticare.session import Session

from . import config
from .models import (
    DailyEmotionsResponse,
    DigestResponse,
    HealthResponse,
    MessageRequest,
    ReportResponse,
    TurnResponse,
)


# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Sessions live only in this process
session_store = InMemorySessionStore()
crisis_detector = KeywordCrisisDetector()

app = FastAPI(title="EmotiCare Session Engine")

# Create a router with the /api prefix
api_router = APIRouter(prefix="/api")


def get_session_store() -> SessionStore:
    return session_store


def parse_tone(value: Optional[str]) -> Optional[Tone]:
    if not value:
        return None
    try:
        return Tone(value.lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown tone: {value}")


def require_session(store: SessionStore, session_id: str) -> Session:
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return session


@api_router.get("/health", response_model=HealthResponse)
async def health(store: SessionStore = Depends(get_session_store)):
    sessions = len(store) if isinstance(store, InMemorySessionStore) else 0
    return HealthResponse(status="ok", sessions=sessions)


@api_router.post("/messages", response_model=TurnResponse)
async def post_message(
    request: MessageRequest,
    store: SessionStore = Depends(get_session_store)
):
    """
    Process one classified user message and return reply directives.
    """
    tone = parse_tone(request.tone_preference)
    try:
        now = datetime.now()
        session = store.get_or_create(
            request.session_id,
            tone_preference=tone or parse_tone(config.DEFAULT_TONE),
            now=now
        )
        if tone:
            session.tone_preference = tone

        record = None
        if request.emotion is not None:
            record = EmotionRecord.from_classifier(request.emotion.model_dump(), now=now)

        has_crisis = request.has_crisis
        if has_crisis is None:
            has_crisis = crisis_detector.detect(request.text)

        directives = process_message(
            session,
            record,
            request.text,
            has_crisis=has_crisis,
            stress_level=request.stress_level,
            now=now
        )
        store.put(session)

        return TurnResponse(session_id=session.session_id, **directives.to_dict())

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error processing message for {request.session_id}: {e}")
        raise HTTPException(status_code=500, detail="Error processing message")


@api_router.get("/sessions/{session_id}")
async def get_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    return require_session(store, session_id).to_dict()


@api_router.get("/sessions/{session_id}/report", response_model=ReportResponse)
async def get_report(
    session_id: str,
    weeks: int = Query(2, ge=2, le=8),
    store: SessionStore = Depends(get_session_store)
):
    """
    Weekly emotion report: structured data plus formatted text.
    """
    session = require_session(store, session_id)
    report = analyze_trends(session.memory, weeks=weeks)
    return ReportResponse(
        session_id=session_id,
        weeks=weeks,
        report=report.to_dict(),
        text=format_report(report)
    )


@api_router.get("/sessions/{session_id}/emotions", response_model=DailyEmotionsResponse)
async def get_emotions(
    session_id: str,
    days: int = Query(7, ge=1, le=60),
    store: SessionStore = Depends(get_session_store)
):
    session = require_session(store, session_id)
    now = datetime.now()
    return DailyEmotionsResponse(
        session_id=session_id,
        daily_emotions=daily_emotions(session.memory, days=days, now=now),
        period_from=now - timedelta(days=days),
        period_to=now
    )


@api_router.get("/sessions/{session_id}/digest", response_model=DigestResponse)
async def get_digest(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = require_session(store, session_id)
    return DigestResponse(session_id=session_id, text=format_weekly_digest(session.memory))


@api_router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    if not store.delete(session_id):
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    logger.info(f"Deleted session {session_id}")
    return {"deleted": session_id}


# Include the router in the main app
app.include_router(api_router)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
