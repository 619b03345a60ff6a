"""
Emotional State Tracker

Single current-state summary, recomputed wholesale on every reading.
Only the previous intensity is retained, for trend detection.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class StateTrend(Enum):
    """
    Direction of the latest reading relative to the previous one.

    Tracks intensity magnitude, not valence: a sharply more intense joy
    is DECLINING just like intensifying fear.
    """
    IMPROVING = "improving"   # intensity dropped by more than 1
    STABLE = "stable"
    DECLINING = "declining"   # intensity rose by more than 1


TREND_TOLERANCE = 1


@dataclass(frozen=True)
class EmotionalState:
    primary_emotion: str
    intensity: int            # 1-10
    stress_level: int         # 1-10
    trend: StateTrend
    last_intensity: int

    def to_dict(self) -> Dict:
        return {
            "primary_emotion": self.primary_emotion,
            "intensity": self.intensity,
            "stress_level": self.stress_level,
            "trend": self.trend.value,
            "last_intensity": self.last_intensity,
        }


def update_emotional_state(
    previous: Optional[EmotionalState],
    emotion: str,
    intensity: int,
    stress_level: Optional[int] = None
) -> EmotionalState:
    """
    Compute the new emotional state from a fresh reading.

    Args:
        previous: Last known state, or None for the first reading
        emotion: New primary emotion
        intensity: New intensity (1-10)
        stress_level: Explicit stress reading; falls back to the previous
                      stress level, then to the new intensity

    Returns:
        A new EmotionalState (the previous one is never modified)
    """
    last_intensity = previous.intensity if previous is not None else intensity

    if intensity < last_intensity - TREND_TOLERANCE:
        trend = StateTrend.IMPROVING
    elif intensity > last_intensity + TREND_TOLERANCE:
        trend = StateTrend.DECLINING
    else:
        trend = StateTrend.STABLE

    if stress_level is None:
        stress_level = previous.stress_level if previous is not None else intensity

    return EmotionalState(
        primary_emotion=emotion,
        intensity=intensity,
        stress_level=stress_level,
        trend=trend,
        last_intensity=last_intensity,
    )


def baseline_state() -> EmotionalState:
    """Neutral mid-scale state used before any reading is available."""
    return EmotionalState(
        primary_emotion="neutral",
        intensity=5,
        stress_level=5,
        trend=StateTrend.STABLE,
        last_intensity=5,
    )
