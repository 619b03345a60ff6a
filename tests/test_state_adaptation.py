"""
Tests for Emotional State Tracker and Adaptation Policy
"""

import pytest
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from emoticare.state import EmotionalState, StateTrend, update_emotional_state
from emoticare.adaptation import (
    Tone, ResponseLength, EmpathyLevel,
    adapt, tone_prompt, empathy_prompt,
)


def make_state(intensity: int, stress: int = None, emotion: str = "anxiety") -> EmotionalState:
    return EmotionalState(
        primary_emotion=emotion,
        intensity=intensity,
        stress_level=stress if stress is not None else intensity,
        trend=StateTrend.STABLE,
        last_intensity=intensity,
    )


class TestUpdateEmotionalState:
    """Test cases for update_emotional_state."""

    def test_first_reading_is_stable(self):
        state = update_emotional_state(None, "fear", 7)

        assert state.trend == StateTrend.STABLE
        assert state.last_intensity == 7
        assert state.stress_level == 7

    def test_drop_is_improving(self):
        state = update_emotional_state(make_state(8), "anxiety", 5)

        assert state.trend == StateTrend.IMPROVING
        assert state.last_intensity == 8

    def test_rise_is_declining(self):
        state = update_emotional_state(make_state(3), "anger", 6)

        assert state.trend == StateTrend.DECLINING

    def test_small_change_is_stable(self):
        assert update_emotional_state(make_state(5), "sadness", 6).trend == StateTrend.STABLE
        assert update_emotional_state(make_state(5), "sadness", 4).trend == StateTrend.STABLE

    def test_intense_joy_counts_as_declining(self):
        """Trend tracks magnitude, not valence."""
        state = update_emotional_state(make_state(3, emotion="joy"), "joy", 9)

        assert state.trend == StateTrend.DECLINING

    def test_stress_defaults_to_previous(self):
        state = update_emotional_state(make_state(4, stress=9), "calm", 2)

        assert state.stress_level == 9

    def test_explicit_stress_wins(self):
        state = update_emotional_state(make_state(4, stress=9), "calm", 2, stress_level=3)

        assert state.stress_level == 3

    def test_previous_state_untouched(self):
        previous = make_state(4)
        update_emotional_state(previous, "fear", 9)

        assert previous.intensity == 4
        assert previous.primary_emotion == "anxiety"


class TestAdapt:
    """Test cases for the adaptation policy."""

    def test_acute_intensity(self):
        response = adapt(make_state(9))

        assert response.tone == Tone.GENTLE
        assert response.length == ResponseLength.SHORT
        assert response.max_tokens == 100
        assert response.temperature == pytest.approx(0.5)
        assert response.use_silence is True
        assert response.empathy_level == EmpathyLevel.HIGH

    def test_acute_overrides_preference(self):
        assert adapt(make_state(8), Tone.HUMOROUS).tone == Tone.GENTLE

    def test_elevated_intensity(self):
        response = adapt(make_state(6))

        assert response.tone == Tone.SUPPORTIVE
        assert response.length == ResponseLength.MEDIUM
        assert response.max_tokens == 200
        assert response.temperature == pytest.approx(0.7)
        assert response.use_silence is True
        assert response.empathy_level == EmpathyLevel.MEDIUM

    def test_seven_gets_high_empathy(self):
        response = adapt(make_state(7))

        assert response.tone == Tone.SUPPORTIVE
        assert response.empathy_level == EmpathyLevel.HIGH

    def test_light_intensity_keeps_humor(self):
        response = adapt(make_state(2), Tone.HUMOROUS)

        assert response.tone == Tone.HUMOROUS
        assert response.max_tokens == 250
        assert response.temperature == pytest.approx(0.8)
        assert response.use_silence is False
        assert response.empathy_level == EmpathyLevel.LOW

    def test_light_intensity_forces_warm(self):
        assert adapt(make_state(3), Tone.CALM).tone == Tone.WARM

    def test_mid_intensity_keeps_preference(self):
        response = adapt(make_state(5), Tone.CALM)

        assert response.tone == Tone.CALM
        assert response.max_tokens == 200
        assert response.use_silence is False

    def test_default_tone_is_warm(self):
        assert adapt(make_state(4)).tone == Tone.WARM

    def test_high_stress_shortens_reply(self):
        response = adapt(make_state(4, stress=8))

        assert response.length == ResponseLength.SHORT
        assert response.max_tokens == 100
        assert response.use_silence is True
        assert response.tone == Tone.WARM

    def test_to_dict(self):
        data = adapt(make_state(9)).to_dict()

        assert data["tone"] == "gentle"
        assert data["empathy_level"] == "high"

    def test_prompts_exist_for_every_level(self):
        for tone in Tone:
            assert tone_prompt(tone)
        for level in EmpathyLevel:
            assert empathy_prompt(level)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
