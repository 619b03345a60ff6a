"""
Tests for Therapy Flow State Machine

Tests transition rules, the reflection dwell guard, crisis pre-emption,
counter bookkeeping and session reset windows.
"""

import pytest
from datetime import datetime, timedelta
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from emoticare.therapy import (
    TherapyState, TherapyContext, InvalidTransitionError, VALID_TRANSITIONS,
    create_therapy_context, next_state, apply_transition,
    should_reset_context, state_prompt,
)


T0 = datetime(2026, 10, 19, 12, 0)


def make_context(state: TherapyState, attempts: int = 0, suggestions: int = 0,
                 changed: datetime = T0, start: datetime = T0) -> TherapyContext:
    return TherapyContext(
        state=state,
        reframing_attempts=attempts,
        suggestions_given=suggestions,
        last_state_change=changed,
        session_start=start,
    )


class TestNextState:
    """Test cases for the transition decision."""

    def test_idle_to_reflecting_at_five(self):
        context = make_context(TherapyState.IDLE)

        assert next_state(context, "anxiety", 5, False, now=T0) == TherapyState.REFLECTING_EMOTION

    def test_idle_stays_below_five(self):
        context = make_context(TherapyState.IDLE)

        assert next_state(context, "anxiety", 4, False, now=T0) == TherapyState.IDLE

    def test_idle_stays_without_emotion(self):
        context = make_context(TherapyState.IDLE)

        assert next_state(context, None, None, now=T0) == TherapyState.IDLE

    @pytest.mark.parametrize("state", list(TherapyState))
    def test_crisis_from_any_state(self, state):
        context = make_context(state)

        assert next_state(context, "sadness", 2, True, now=T0) == TherapyState.CRISIS_SUPPORT

    def test_crisis_clears_to_idle(self):
        context = make_context(TherapyState.CRISIS_SUPPORT)

        assert next_state(context, "fear", 9, False, now=T0) == TherapyState.IDLE

    def test_reflection_dwell_guard(self):
        context = make_context(TherapyState.REFLECTING_EMOTION)

        early = next_state(context, "fear", 8, now=T0 + timedelta(milliseconds=1999))
        on_time = next_state(context, "fear", 8, now=T0 + timedelta(seconds=2))

        assert early == TherapyState.REFLECTING_EMOTION
        assert on_time == TherapyState.COGNITIVE_REFRAMING

    def test_reflection_stays_after_reframing_attempt(self):
        context = make_context(TherapyState.REFLECTING_EMOTION, attempts=1)

        result = next_state(context, "fear", 8, now=T0 + timedelta(minutes=5))

        assert result == TherapyState.REFLECTING_EMOTION

    def test_reframing_needs_attempt(self):
        assert next_state(
            make_context(TherapyState.COGNITIVE_REFRAMING), "fear", 3, now=T0
        ) == TherapyState.COGNITIVE_REFRAMING
        assert next_state(
            make_context(TherapyState.COGNITIVE_REFRAMING, attempts=1), "fear", 3, now=T0
        ) == TherapyState.BEHAVIORAL_SUGGESTION

    def test_suggestion_needs_suggestion(self):
        assert next_state(
            make_context(TherapyState.BEHAVIORAL_SUGGESTION), "fear", 3, now=T0
        ) == TherapyState.BEHAVIORAL_SUGGESTION
        assert next_state(
            make_context(TherapyState.BEHAVIORAL_SUGGESTION, suggestions=1), "fear", 3, now=T0
        ) == TherapyState.SUMMARY

    def test_summary_loops_when_acute(self):
        context = make_context(TherapyState.SUMMARY, attempts=1, suggestions=1)

        assert next_state(context, "sadness", 7, now=T0) == TherapyState.REFLECTING_EMOTION
        assert next_state(context, "sadness", 6, now=T0) == TherapyState.IDLE
        assert next_state(context, None, None, now=T0) == TherapyState.IDLE


class TestApplyTransition:
    """Test cases for context bookkeeping."""

    def test_entering_reframing_counts_attempt(self):
        context = make_context(TherapyState.REFLECTING_EMOTION)
        later = T0 + timedelta(seconds=3)

        updated = apply_transition(context, TherapyState.COGNITIVE_REFRAMING, now=later)

        assert updated.state == TherapyState.COGNITIVE_REFRAMING
        assert updated.reframing_attempts == 1
        assert updated.suggestions_given == 0
        assert updated.last_state_change == later
        assert updated.session_start == T0

    def test_entering_suggestion_counts_suggestion(self):
        context = make_context(TherapyState.COGNITIVE_REFRAMING, attempts=1)

        updated = apply_transition(context, TherapyState.BEHAVIORAL_SUGGESTION, now=T0)

        assert updated.suggestions_given == 1
        assert updated.reframing_attempts == 1

    def test_input_context_untouched(self):
        context = make_context(TherapyState.REFLECTING_EMOTION)

        apply_transition(context, TherapyState.COGNITIVE_REFRAMING, now=T0)

        assert context.state == TherapyState.REFLECTING_EMOTION
        assert context.reframing_attempts == 0

    def test_same_state_is_noop(self):
        context = make_context(TherapyState.SUMMARY)

        assert apply_transition(context, TherapyState.SUMMARY, now=T0 + timedelta(hours=1)) is context

    def test_crisis_leaves_counters(self):
        context = make_context(TherapyState.COGNITIVE_REFRAMING, attempts=1)

        crisis = apply_transition(context, TherapyState.CRISIS_SUPPORT, now=T0)
        back = apply_transition(crisis, TherapyState.IDLE, now=T0)

        assert crisis.reframing_attempts == 1
        assert back.reframing_attempts == 1
        assert back.suggestions_given == 0

    def test_invalid_transition_raises(self):
        context = make_context(TherapyState.IDLE)

        with pytest.raises(InvalidTransitionError):
            apply_transition(context, TherapyState.SUMMARY, now=T0)

        with pytest.raises(ValueError):
            apply_transition(context, TherapyState.COGNITIVE_REFRAMING, now=T0)

    def test_decisions_are_valid_edges(self):
        """Every decided change is an edge of the flow graph."""
        for state in TherapyState:
            for attempts, suggestions in [(0, 0), (1, 1)]:
                context = make_context(state, attempts, suggestions)
                for intensity in (None, 2, 5, 7, 9):
                    emotion = "fear" if intensity else None
                    for crisis in (False, True):
                        target = next_state(
                            context, emotion, intensity, crisis,
                            now=T0 + timedelta(seconds=5)
                        )
                        if target != state:
                            assert target in VALID_TRANSITIONS[state]


class TestResetContext:
    """Test cases for the session-boundary predicate."""

    def test_fresh_context(self):
        context = create_therapy_context(now=T0)

        assert context.state == TherapyState.IDLE
        assert context.reframing_attempts == 0
        assert context.suggestions_given == 0
        assert should_reset_context(context, now=T0 + timedelta(minutes=5)) is False

    def test_idle_timeout(self):
        context = make_context(TherapyState.SUMMARY)

        assert should_reset_context(context, now=T0 + timedelta(minutes=10)) is False
        assert should_reset_context(context, now=T0 + timedelta(minutes=10, seconds=1)) is True

    def test_session_duration_limit(self):
        context = make_context(
            TherapyState.REFLECTING_EMOTION,
            changed=T0 + timedelta(minutes=29),
            start=T0,
        )

        assert should_reset_context(context, now=T0 + timedelta(minutes=30)) is False
        assert should_reset_context(context, now=T0 + timedelta(minutes=31)) is True


class TestStatePrompt:

    def test_reflecting_includes_emotion(self):
        prompt = state_prompt(TherapyState.REFLECTING_EMOTION, "anxiety", 8)

        assert "anxiety" in prompt
        assert "8/10" in prompt

    def test_suggestion_asks_for_one_technique(self):
        assert "one" in state_prompt(TherapyState.BEHAVIORAL_SUGGESTION)

    def test_crisis_shows_resources(self):
        assert "support resources" in state_prompt(TherapyState.CRISIS_SUPPORT)

    def test_idle_default(self):
        assert state_prompt(TherapyState.IDLE).startswith("Ordinary conversation")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
