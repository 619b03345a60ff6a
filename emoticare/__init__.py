"""
EmotiCare Engine - Emotional Session Engine

A per-user conversational engine that turns classified emotion readings
into a therapy flow phase, bounded emotional memory, adaptive response
directives and weekly trend reports.

Layers:
1. Emotion Records (input) - records.py
2. Emotional Memory (recall) - memory.py
3. Emotional State (current reading) - state.py
4. Therapy Flow (state machine) - therapy.py
5. Adaptation Policy (response shaping) - adaptation.py
6. Trend Analytics (weekly reports) - analytics.py
7. Crisis Detection (boundary signal) - crisis.py
8. Sessions (orchestration + store) - session.py
"""

from .records import (
    EmotionRecord,
    EmotiCareError,
    EMOTION_VOCABULARY,
    POSITIVE_EMOTIONS,
    NEGATIVE_EMOTIONS,
    clamp_intensity,
)

from .memory import (
    EmotionalMemory,
    EmotionalMoment,
    EmotionalPatterns,
    WeeklyTrendPoint,
    TopicRecency,
    PersonalInfo,
    create_empty_memory,
    record_experience,
    relevant_memories,
    remember_personal_info,
)

from .state import (
    EmotionalState,
    StateTrend,
    update_emotional_state,
)

from .therapy import (
    TherapyState,
    TherapyContext,
    StateTransition,
    InvalidTransitionError,
    create_therapy_context,
    next_state,
    apply_transition,
    should_reset_context,
    state_prompt,
)

from .adaptation import (
    AdaptiveResponse,
    Tone,
    ResponseLength,
    EmpathyLevel,
    adapt,
    tone_prompt,
    empathy_prompt,
)

from .analytics import (
    WeeklyEmotionReport,
    EmotionTrend,
    FrequencyTrend,
    analyze_trends,
    daily_emotions,
    format_report,
    format_weekly_digest,
)

from .crisis import (
    KeywordCrisisDetector,
    SUPPORT_RESOURCES,
)

from .session import (
    Session,
    SessionStore,
    InMemorySessionStore,
    TurnDirectives,
    process_message,
    weekly_report,
)

__version__ = "1.0.0"
__all__ = [
    # Records
    "EmotionRecord",
    "EmotiCareError",
    "EMOTION_VOCABULARY",
    "POSITIVE_EMOTIONS",
    "NEGATIVE_EMOTIONS",
    "clamp_intensity",
    # Memory
    "EmotionalMemory",
    "EmotionalMoment",
    "EmotionalPatterns",
    "WeeklyTrendPoint",
    "TopicRecency",
    "PersonalInfo",
    "create_empty_memory",
    "record_experience",
    "relevant_memories",
    "remember_personal_info",
    # State
    "EmotionalState",
    "StateTrend",
    "update_emotional_state",
    # Therapy flow
    "TherapyState",
    "TherapyContext",
    "StateTransition",
    "InvalidTransitionError",
    "create_therapy_context",
    "next_state",
    "apply_transition",
    "should_reset_context",
    "state_prompt",
    # Adaptation
    "AdaptiveResponse",
    "Tone",
    "ResponseLength",
    "EmpathyLevel",
    "adapt",
    "tone_prompt",
    "empathy_prompt",
    # Analytics
    "WeeklyEmotionReport",
    "EmotionTrend",
    "FrequencyTrend",
    "analyze_trends",
    "daily_emotions",
    "format_report",
    "format_weekly_digest",
    # Crisis
    "KeywordCrisisDetector",
    "SUPPORT_RESOURCES",
    # Sessions
    "Session",
    "SessionStore",
    "InMemorySessionStore",
    "TurnDirectives",
    "process_message",
    "weekly_report",
]
