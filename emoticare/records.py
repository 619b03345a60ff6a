"""
Emotion Records

The atomic input unit of the engine: one classified reading attached to a
single user message. Records are produced by an external classifier; this
module only normalizes what the classifier hands over.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


class EmotiCareError(Exception):
    """Base class for engine errors."""


# Labels the classifier is expected to emit. Unknown labels are still
# accepted as opaque strings.
EMOTION_VOCABULARY = (
    "joy", "sadness", "anger", "fear", "surprise", "disgust", "neutral",
    "anxiety", "calm", "excited", "tired", "overwhelmed",
)

POSITIVE_EMOTIONS = frozenset({"joy", "calm", "excited"})
NEGATIVE_EMOTIONS = frozenset({"sadness", "anger", "fear", "anxiety", "overwhelmed"})

MIN_INTENSITY = 1
MAX_INTENSITY = 10


def clamp_intensity(value: Any) -> int:
    """Round and clamp an intensity reading into [1, 10]."""
    try:
        intensity = int(round(float(value)))
    except (TypeError, ValueError):
        return MIN_INTENSITY
    return max(MIN_INTENSITY, min(MAX_INTENSITY, intensity))


def is_positive(emotion: str) -> bool:
    return emotion in POSITIVE_EMOTIONS


def is_negative(emotion: str) -> bool:
    return emotion in NEGATIVE_EMOTIONS


@dataclass(frozen=True)
class EmotionRecord:
    """One classified emotion reading."""
    primary: str
    intensity: int            # 1-10
    timestamp: datetime
    secondary: Optional[str] = None

    @classmethod
    def from_classifier(
        cls,
        payload: Dict[str, Any],
        now: Optional[datetime] = None
    ) -> "EmotionRecord":
        """
        Build a record from a raw classifier payload.

        Accepts ``primary``, ``secondary``, ``intensity`` and ``timestamp``
        keys. Labels are lower-cased, intensity is clamped and missing
        timestamps default to ``now``. Timezone-aware timestamps are
        converted to naive local time.
        """
        primary = str(payload.get("primary") or "neutral").strip().lower() or "neutral"
        secondary = payload.get("secondary")
        if secondary is not None:
            secondary = str(secondary).strip().lower() or None

        timestamp = payload.get("timestamp")
        if isinstance(timestamp, str):
            # fromisoformat only accepts "Z" from Python 3.11
            if timestamp.endswith(("Z", "z")):
                timestamp = timestamp[:-1] + "+00:00"
            timestamp = datetime.fromisoformat(timestamp)
        elif not isinstance(timestamp, datetime):
            timestamp = now or datetime.now()

        # The engine compares against naive local time
        if timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone().replace(tzinfo=None)

        return cls(
            primary=primary,
            intensity=clamp_intensity(payload.get("intensity", MIN_INTENSITY)),
            timestamp=timestamp,
            secondary=secondary,
        )

    def to_dict(self) -> Dict:
        return {
            "primary": self.primary,
            "secondary": self.secondary,
            "intensity": self.intensity,
            "timestamp": self.timestamp.isoformat(),
        }
