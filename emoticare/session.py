"""
Session Orchestration

A Session exclusively owns one emotional memory, one emotional state and
one therapy context. process_message runs the per-message control flow on
a single passed-in session; the engine never looks sessions up itself.

Sessions are kept by a SessionStore injected into the caller. Callers must
serialize messages for the same session before they reach the engine.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
import logging

from .adaptation import AdaptiveResponse, Tone, adapt, empathy_prompt, tone_prompt
from .analytics import WeeklyEmotionReport, analyze_trends
from .crisis import SUPPORT_RESOURCES
from .memory import EmotionalMemory, create_empty_memory, record_experience, relevant_memories
from .records import EmotionRecord
from .state import EmotionalState, baseline_state, update_emotional_state
from .therapy import (
    StateTransition,
    TherapyContext,
    TherapyState,
    apply_transition,
    create_therapy_context,
    describe_trigger,
    next_state,
    should_reset_context,
    state_prompt,
)

logger = logging.getLogger(__name__)

MAX_TRANSITIONS = 20


@dataclass
class Session:
    session_id: str
    memory: EmotionalMemory
    therapy: TherapyContext
    emotional_state: Optional[EmotionalState] = None
    tone_preference: Optional[Tone] = None
    transitions: List[StateTransition] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def new(
        cls,
        session_id: str,
        tone_preference: Optional[Tone] = None,
        now: Optional[datetime] = None
    ) -> "Session":
        now = now or datetime.now()
        return cls(
            session_id=session_id,
            memory=create_empty_memory(),
            therapy=create_therapy_context(now),
            tone_preference=tone_preference,
            created_at=now,
        )

    def to_dict(self) -> Dict:
        return {
            "session_id": self.session_id,
            "created_at": self.created_at.isoformat(),
            "tone_preference": self.tone_preference.value if self.tone_preference else None,
            "emotional_state": self.emotional_state.to_dict() if self.emotional_state else None,
            "therapy": self.therapy.to_dict(),
            "memory": self.memory.to_dict(),
            "transitions": [t.to_dict() for t in self.transitions],
        }


@dataclass
class TurnDirectives:
    """Everything the response generator needs for the next reply."""
    phase: TherapyState
    instruction: str
    adaptation: AdaptiveResponse
    tone_instruction: str
    empathy_instruction: str
    memory_cues: List[str]
    crisis: bool = False
    support_resources: Optional[str] = None
    transition: Optional[StateTransition] = None
    context_reset: bool = False

    def to_dict(self) -> Dict:
        return {
            "phase": self.phase.value,
            "instruction": self.instruction,
            "adaptation": self.adaptation.to_dict(),
            "tone_instruction": self.tone_instruction,
            "empathy_instruction": self.empathy_instruction,
            "memory_cues": list(self.memory_cues),
            "crisis": self.crisis,
            "support_resources": self.support_resources,
            "transition": self.transition.to_dict() if self.transition else None,
            "context_reset": self.context_reset,
        }


def process_message(
    session: Session,
    record: Optional[EmotionRecord],
    text: str,
    has_crisis: bool = False,
    stress_level: Optional[int] = None,
    now: Optional[datetime] = None
) -> TurnDirectives:
    """
    Run one message through the engine.

    Args:
        session: Session to update (mutated in place)
        record: Classified emotion for the message, or None if the
                classifier produced nothing
        text: Raw user text
        has_crisis: Crisis signal from the crisis detector
        stress_level: Optional explicit stress reading (1-10)
        now: Message time

    Returns:
        TurnDirectives for the response generator
    """
    now = now or datetime.now()

    context_reset = should_reset_context(session.therapy, now)
    if context_reset:
        logger.debug("Session %s: therapy context reset", session.session_id)
        session.therapy = create_therapy_context(now)

    emotion = record.primary if record else None
    intensity = record.intensity if record else None

    # Cues come from memory as it was before this message
    cues: List[str] = []
    if emotion:
        cues = list(relevant_memories(session.memory, emotion, text, now=now))

    if record:
        session.emotional_state = update_emotional_state(
            session.emotional_state, emotion, intensity, stress_level
        )
        # Moments and week points carry the reading's own instant
        record_experience(
            session.memory, emotion, intensity, text, text,
            now=record.timestamp or now
        )

    previous = session.therapy.state
    target = next_state(session.therapy, emotion, intensity, has_crisis, now=now)
    session.therapy = apply_transition(session.therapy, target, now=now)

    transition = None
    if target != previous:
        transition = StateTransition(
            from_state=previous,
            to_state=target,
            timestamp=now,
            trigger=describe_trigger(previous, target, emotion, intensity),
        )
        session.transitions.append(transition)
        if len(session.transitions) > MAX_TRANSITIONS:
            session.transitions = session.transitions[-MAX_TRANSITIONS:]
        logger.info(
            "Session %s: %s -> %s (%s)",
            session.session_id, previous.value, target.value, transition.trigger
        )

    adaptation = adapt(session.emotional_state or baseline_state(), session.tone_preference)
    crisis = target == TherapyState.CRISIS_SUPPORT

    return TurnDirectives(
        phase=target,
        instruction=state_prompt(target, emotion, intensity),
        adaptation=adaptation,
        tone_instruction=tone_prompt(adaptation.tone),
        empathy_instruction=empathy_prompt(adaptation.empathy_level),
        memory_cues=cues,
        crisis=crisis,
        support_resources=SUPPORT_RESOURCES if crisis else None,
        transition=transition,
        context_reset=context_reset,
    )


def weekly_report(
    session: Session,
    weeks: int = 2,
    now: Optional[datetime] = None
) -> WeeklyEmotionReport:
    return analyze_trends(session.memory, weeks=weeks, now=now)


class SessionStore(ABC):
    """Keeps sessions by id. Implementations decide where they live."""

    @abstractmethod
    def get(self, session_id: str) -> Optional[Session]:
        ...

    @abstractmethod
    def put(self, session: Session):
        ...

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        ...

    def get_or_create(
        self,
        session_id: str,
        tone_preference: Optional[Tone] = None,
        now: Optional[datetime] = None
    ) -> Session:
        session = self.get(session_id)
        if session is None:
            session = Session.new(session_id, tone_preference, now)
            self.put(session)
        return session


class InMemorySessionStore(SessionStore):
    """Process-local store; contents are lost on restart."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def put(self, session: Session):
        self._sessions[session.session_id] = session

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions
