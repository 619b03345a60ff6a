"""
Therapy Flow State Machine

Drives the conversation through a CBT-style arc:
IDLE → REFLECTING_EMOTION → COGNITIVE_REFRAMING → BEHAVIORAL_SUGGESTION → SUMMARY

SUMMARY returns to IDLE, or loops back to REFLECTING_EMOTION while the
emotion is still acute. CRISIS_SUPPORT pre-empts every state and exits
to IDLE as soon as the crisis signal clears.

The decision (next_state) is pure; counter and timestamp bookkeeping
happens separately in apply_transition.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from enum import Enum
import logging

from .records import EmotiCareError

logger = logging.getLogger(__name__)


class TherapyState(Enum):
    IDLE = "idle"
    REFLECTING_EMOTION = "reflecting_emotion"
    COGNITIVE_REFRAMING = "cognitive_reframing"
    BEHAVIORAL_SUGGESTION = "behavioral_suggestion"
    SUMMARY = "summary"
    CRISIS_SUPPORT = "crisis_support"


class InvalidTransitionError(EmotiCareError, ValueError):
    """Raised when a transition outside the flow graph is applied."""


_ARC_STATES = [s for s in TherapyState if s != TherapyState.CRISIS_SUPPORT]

# Define valid transitions (from_state -> [to_states]); crisis is reachable from anywhere
VALID_TRANSITIONS: Dict[TherapyState, List[TherapyState]] = {
    TherapyState.IDLE: [TherapyState.REFLECTING_EMOTION],
    TherapyState.REFLECTING_EMOTION: [TherapyState.COGNITIVE_REFRAMING],
    TherapyState.COGNITIVE_REFRAMING: [TherapyState.BEHAVIORAL_SUGGESTION],
    TherapyState.BEHAVIORAL_SUGGESTION: [TherapyState.SUMMARY],
    TherapyState.SUMMARY: [TherapyState.IDLE, TherapyState.REFLECTING_EMOTION],
    TherapyState.CRISIS_SUPPORT: [TherapyState.IDLE],
}
for _state in _ARC_STATES:
    VALID_TRANSITIONS[_state].append(TherapyState.CRISIS_SUPPORT)

THRESHOLDS = {
    "intensity_to_reflect": 5,
    "intensity_to_loop": 7,
    "min_reflection_dwell": timedelta(milliseconds=2000),
    "idle_reset": timedelta(minutes=10),
    "session_reset": timedelta(minutes=30),
}


@dataclass(frozen=True)
class TherapyContext:
    state: TherapyState
    reframing_attempts: int
    suggestions_given: int
    last_state_change: datetime
    session_start: datetime

    def time_in_state(self, now: Optional[datetime] = None) -> timedelta:
        return (now or datetime.now()) - self.last_state_change

    def to_dict(self) -> Dict:
        return {
            "state": self.state.value,
            "reframing_attempts": self.reframing_attempts,
            "suggestions_given": self.suggestions_given,
            "last_state_change": self.last_state_change.isoformat(),
            "session_start": self.session_start.isoformat(),
        }


@dataclass(frozen=True)
class StateTransition:
    """Record of a state transition."""
    from_state: TherapyState
    to_state: TherapyState
    timestamp: datetime
    trigger: str

    def to_dict(self) -> Dict:
        return {
            "from_state": self.from_state.value,
            "to_state": self.to_state.value,
            "timestamp": self.timestamp.isoformat(),
            "trigger": self.trigger,
        }


def create_therapy_context(now: Optional[datetime] = None) -> TherapyContext:
    now = now or datetime.now()
    return TherapyContext(
        state=TherapyState.IDLE,
        reframing_attempts=0,
        suggestions_given=0,
        last_state_change=now,
        session_start=now,
    )


def next_state(
    context: TherapyContext,
    emotion: Optional[str] = None,
    intensity: Optional[int] = None,
    has_crisis: bool = False,
    now: Optional[datetime] = None
) -> TherapyState:
    """
    Decide the next state. Pure: the context is not modified.

    Args:
        context: Current therapy context
        emotion: Latest emotion label, if one was detected
        intensity: Latest intensity (1-10)
        has_crisis: Crisis signal for the latest message
        now: Evaluation time (for the reflection dwell guard)

    Returns:
        The state to move to (may equal the current state)
    """
    if has_crisis:
        return TherapyState.CRISIS_SUPPORT

    current = context.state
    has_emotion = bool(emotion) and intensity is not None

    if current == TherapyState.CRISIS_SUPPORT:
        return TherapyState.IDLE

    if current == TherapyState.IDLE:
        if has_emotion and intensity >= THRESHOLDS["intensity_to_reflect"]:
            return TherapyState.REFLECTING_EMOTION
        return TherapyState.IDLE

    if current == TherapyState.REFLECTING_EMOTION:
        dwell_ok = context.time_in_state(now) >= THRESHOLDS["min_reflection_dwell"]
        if context.reframing_attempts == 0 and dwell_ok:
            return TherapyState.COGNITIVE_REFRAMING
        return TherapyState.REFLECTING_EMOTION

    if current == TherapyState.COGNITIVE_REFRAMING:
        if context.reframing_attempts >= 1:
            return TherapyState.BEHAVIORAL_SUGGESTION
        return TherapyState.COGNITIVE_REFRAMING

    if current == TherapyState.BEHAVIORAL_SUGGESTION:
        if context.suggestions_given >= 1:
            return TherapyState.SUMMARY
        return TherapyState.BEHAVIORAL_SUGGESTION

    if current == TherapyState.SUMMARY:
        # Still acute: run the arc again
        if has_emotion and intensity >= THRESHOLDS["intensity_to_loop"]:
            return TherapyState.REFLECTING_EMOTION
        return TherapyState.IDLE

    return TherapyState.IDLE


def apply_transition(
    context: TherapyContext,
    new_state: TherapyState,
    now: Optional[datetime] = None
) -> TherapyContext:
    """
    Return the context after moving to ``new_state``.

    Entering COGNITIVE_REFRAMING counts a reframing attempt, entering
    BEHAVIORAL_SUGGESTION counts a suggestion. Staying in the same state
    returns the context unchanged.
    """
    if new_state == context.state:
        return context

    if new_state not in VALID_TRANSITIONS[context.state]:
        raise InvalidTransitionError(
            f"Cannot move from {context.state.value} to {new_state.value}"
        )

    reframing_attempts = context.reframing_attempts
    suggestions_given = context.suggestions_given
    if new_state == TherapyState.COGNITIVE_REFRAMING:
        reframing_attempts += 1
    elif new_state == TherapyState.BEHAVIORAL_SUGGESTION:
        suggestions_given += 1

    logger.debug("Therapy flow %s -> %s", context.state.value, new_state.value)

    return replace(
        context,
        state=new_state,
        reframing_attempts=reframing_attempts,
        suggestions_given=suggestions_given,
        last_state_change=now or datetime.now(),
    )


def should_reset_context(
    context: TherapyContext,
    now: Optional[datetime] = None
) -> bool:
    """
    Check whether the conversational session has ended.

    True after 10 minutes without a state change, or 30 minutes after
    the session started. Evaluated lazily on the next message.
    """
    now = now or datetime.now()
    if now - context.last_state_change > THRESHOLDS["idle_reset"]:
        return True
    if now - context.session_start > THRESHOLDS["session_reset"]:
        return True
    return False


def describe_trigger(
    from_state: TherapyState,
    to_state: TherapyState,
    emotion: Optional[str] = None,
    intensity: Optional[int] = None
) -> str:
    """Generate human-readable trigger reason."""
    if to_state == TherapyState.CRISIS_SUPPORT:
        return "Crisis signal detected"
    if from_state == TherapyState.CRISIS_SUPPORT:
        return "Crisis signal cleared"
    if to_state == TherapyState.REFLECTING_EMOTION:
        return f"Emotion {emotion or 'unknown'} at intensity {intensity or 0}/10"
    if to_state == TherapyState.COGNITIVE_REFRAMING:
        return "Emotion reflected, moving to reframing"
    if to_state == TherapyState.BEHAVIORAL_SUGGESTION:
        return "Reframing attempted"
    if to_state == TherapyState.SUMMARY:
        return "Suggestion given"
    return "Flow completed"


def state_prompt(
    state: TherapyState,
    emotion: Optional[str] = None,
    intensity: Optional[int] = None
) -> str:
    """Fixed instruction template for the response generator."""
    if state == TherapyState.REFLECTING_EMOTION:
        return (
            "You are reflecting the user's emotion.\n"
            "Important: deeply validate the emotion and show that you understand.\n"
            "Do not rush to give advice; first let the person feel heard.\n"
            f"Emotion: {emotion or 'unknown'}, intensity: {intensity or 0}/10"
        )
    if state == TherapyState.COGNITIVE_REFRAMING:
        return (
            "You are doing cognitive reframing.\n"
            "Important: gently help the user see alternative perspectives.\n"
            'Use "What if...?" or "How else could you look at this?"\n'
            "Avoid direct instructions; offer questions to reflect on."
        )
    if state == TherapyState.BEHAVIORAL_SUGGESTION:
        return (
            "You are offering a behavioral suggestion.\n"
            "Important: offer exactly one concrete, doable technique.\n"
            "Use CBT techniques such as breathing, grounding or behavioral activation.\n"
            "The technique is optional: ask what the person is willing to try right now."
        )
    if state == TherapyState.SUMMARY:
        return (
            "You are summarizing the session.\n"
            "Important: briefly summarize the key points of the conversation.\n"
            "Ask what the person is taking away from it.\n"
            "Suggest a next step or a practice for today."
        )
    if state == TherapyState.CRISIS_SUPPORT:
        return (
            "CRISIS SITUATION.\n"
            "Important: show the support resources immediately.\n"
            "Be as supportive and compassionate as possible.\n"
            "Do not give advice; direct the person to professional help."
        )
    return (
        "Ordinary conversation. Be empathetic and supportive.\n"
        "Listen carefully and respond naturally."
    )
