"""
API Models

Pydantic request/response bodies for the session service.
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime


class EmotionPayload(BaseModel):
    """Classifier output as received over the wire."""
    primary: str = "neutral"
    secondary: Optional[str] = None
    intensity: float = 1  # clamped to 1-10 by the engine adapter
    timestamp: Optional[datetime] = None


class MessageRequest(BaseModel):
    """API request body for one user message."""
    session_id: str = Field(min_length=1)
    text: str = ""
    emotion: Optional[EmotionPayload] = None
    has_crisis: Optional[bool] = None  # None = run the keyword detector
    stress_level: Optional[int] = Field(default=None, ge=1, le=10)
    tone_preference: Optional[str] = None  # calm, warm, humorous, gentle, supportive


class AdaptationModel(BaseModel):
    tone: str
    length: str
    max_tokens: int
    temperature: float
    use_silence: bool
    empathy_level: str


class TurnResponse(BaseModel):
    """Directives for the response generator."""
    session_id: str
    phase: str
    instruction: str
    adaptation: AdaptationModel
    tone_instruction: str
    empathy_instruction: str
    memory_cues: List[str] = []
    crisis: bool = False
    support_resources: Optional[str] = None
    transition: Optional[Dict[str, Any]] = None
    context_reset: bool = False


class ReportResponse(BaseModel):
    session_id: str
    weeks: int
    report: Dict[str, Any]
    text: str


class DailyEmotionsResponse(BaseModel):
    session_id: str
    daily_emotions: Dict[str, List[Dict[str, Any]]]
    period_from: datetime
    period_to: datetime


class DigestResponse(BaseModel):
    session_id: str
    text: str


class HealthResponse(BaseModel):
    status: str = "ok"
    sessions: int = 0
