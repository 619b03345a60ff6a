"""
Adaptation Policy

Maps the current emotional state to response shaping directives for
the downstream generator: tone, length budget, sampling temperature,
pacing and empathy level. Pure and total.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .state import EmotionalState


class Tone(Enum):
    CALM = "calm"
    WARM = "warm"
    HUMOROUS = "humorous"
    GENTLE = "gentle"
    SUPPORTIVE = "supportive"


class ResponseLength(Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class EmpathyLevel(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class AdaptiveResponse:
    tone: Tone
    length: ResponseLength
    max_tokens: int
    temperature: float
    use_silence: bool          # caller should add a thinking delay
    empathy_level: EmpathyLevel

    def to_dict(self) -> Dict:
        return {
            "tone": self.tone.value,
            "length": self.length.value,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "use_silence": self.use_silence,
            "empathy_level": self.empathy_level.value,
        }


# Intensity / stress thresholds
THRESHOLDS = {
    "acute": 8,        # gentle tone, short replies, low temperature
    "elevated": 6,     # supportive tone, pacing pauses
    "high_empathy": 7,
    "light": 3,        # light tone allowed, longer replies
}


def adapt(
    state: EmotionalState,
    tone_preference: Optional[Tone] = None
) -> AdaptiveResponse:
    """Derive response directives from the emotional state."""
    intensity = state.intensity
    stress = state.stress_level
    base_tone = tone_preference or Tone.WARM

    tone = base_tone
    if intensity >= THRESHOLDS["acute"]:
        tone = Tone.GENTLE
    elif intensity >= THRESHOLDS["elevated"]:
        tone = Tone.SUPPORTIVE
    elif intensity <= THRESHOLDS["light"]:
        tone = Tone.HUMOROUS if base_tone == Tone.HUMOROUS else Tone.WARM

    if intensity >= THRESHOLDS["acute"] or stress >= THRESHOLDS["acute"]:
        length, max_tokens = ResponseLength.SHORT, 100
    elif intensity <= THRESHOLDS["light"]:
        length, max_tokens = ResponseLength.MEDIUM, 250
    else:
        length, max_tokens = ResponseLength.MEDIUM, 200

    # Lower temperature under acute distress for more predictable replies
    if intensity >= THRESHOLDS["acute"]:
        temperature = 0.5
    elif intensity <= THRESHOLDS["light"]:
        temperature = 0.8
    else:
        temperature = 0.7

    use_silence = intensity >= THRESHOLDS["elevated"] or stress >= THRESHOLDS["elevated"]

    if intensity >= THRESHOLDS["high_empathy"]:
        empathy = EmpathyLevel.HIGH
    elif intensity <= THRESHOLDS["light"]:
        empathy = EmpathyLevel.LOW
    else:
        empathy = EmpathyLevel.MEDIUM

    return AdaptiveResponse(
        tone=tone,
        length=length,
        max_tokens=max_tokens,
        temperature=temperature,
        use_silence=use_silence,
        empathy_level=empathy,
    )


TONE_PROMPTS: Dict[Tone, str] = {
    Tone.CALM: (
        "Speak calmly and at an even pace. Use soft wording. "
        "Create a sense of stability and safety."
    ),
    Tone.WARM: (
        "Speak warmly and in a friendly way, like a close friend. "
        "Show genuine care."
    ),
    Tone.HUMOROUS: (
        "Light humor is fine, but be careful. Never joke about serious topics. "
        "Humor must support, never belittle."
    ),
    Tone.GENTLE: (
        "Speak very softly and carefully. Every word should be considered. "
        "Create the safest possible space."
    ),
    Tone.SUPPORTIVE: (
        "Be as supportive as possible. Validate the feelings. "
        "Show the person they are not alone."
    ),
}

EMPATHY_PROMPTS: Dict[EmpathyLevel, str] = {
    EmpathyLevel.LOW: "Keep it light and friendly. No need to go deep into emotions.",
    EmpathyLevel.MEDIUM: (
        "Show understanding and sympathy. Validate feelings without overloading."
    ),
    EmpathyLevel.HIGH: (
        "Maximum empathy. Deeply validate the emotions and show full understanding "
        "and acceptance. Use active listening techniques."
    ),
}


def tone_prompt(tone: Tone) -> str:
    return TONE_PROMPTS.get(tone, TONE_PROMPTS[Tone.WARM])


def empathy_prompt(level: EmpathyLevel) -> str:
    return EMPATHY_PROMPTS[level]
