"""
Trend Analytics Module

Windowed aggregation over the emotional memory. Compares the last
7 days against the preceding baseline weeks and produces a weekly
report with templated recommendations.

Also holds the presentation helpers (emoji report text, weekly digest,
per-day aggregation for dashboards).
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .memory import EmotionalMemory, EmotionalMoment, week_id
from .records import NEGATIVE_EMOTIONS, POSITIVE_EMOTIONS, is_positive
from .state import StateTrend


class FrequencyTrend(Enum):
    """Week-over-week change of a count or an average."""
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


WEEK = timedelta(days=7)
TOP_EMOTIONS = 5

THRESHOLDS = {
    "count_increase": 1.2,     # this week > 1.2x baseline
    "count_decrease": 0.8,     # this week < 0.8x baseline
    "valence_ratio": 1.5,      # one class dominates the other
    "intensity_band": 1.0,
    "high_intensity": 7.0,
}

RECOMMENDATIONS = {
    "declining": (
        "I've noticed more negative emotions lately. Adding more "
        "self-regulation practices could help."
    ),
    "intense": (
        "Your emotions have been quite intense. It's important to find "
        "ways to lower stress."
    ),
    "anxiety": (
        "Anxiety has been showing up more often. Grounding or breathing "
        "exercises may help."
    ),
    "positive": (
        "I've noticed more positive moments. That's great! Keep tracking "
        "what helps you feel better."
    ),
}


@dataclass
class EmotionTrend:
    emotion: str
    frequency: int            # occurrences this week
    avg_intensity: float      # mean intensity this week
    trend: FrequencyTrend
    last_week: float          # baseline occurrences per week
    this_week: int

    def to_dict(self) -> Dict:
        return {
            "emotion": self.emotion,
            "frequency": self.frequency,
            "avg_intensity": round(self.avg_intensity, 2),
            "trend": self.trend.value,
            "last_week": round(self.last_week, 2),
            "this_week": self.this_week,
        }


@dataclass
class WeeklyEmotionReport:
    dominant_emotions: List[EmotionTrend] = field(default_factory=list)
    overall_trend: StateTrend = StateTrend.STABLE
    avg_intensity: float = 0.0
    most_frequent_emotion: str = "neutral"
    intensity_trend: FrequencyTrend = FrequencyTrend.STABLE
    recommendations: List[str] = field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return bool(self.dominant_emotions)

    def to_dict(self) -> Dict:
        return {
            "dominant_emotions": [t.to_dict() for t in self.dominant_emotions],
            "overall_trend": self.overall_trend.value,
            "avg_intensity": round(self.avg_intensity, 2),
            "most_frequent_emotion": self.most_frequent_emotion,
            "intensity_trend": self.intensity_trend.value,
            "recommendations": list(self.recommendations),
        }


def _aggregate(moments: List[EmotionalMoment]) -> Dict[str, Tuple[int, int]]:
    """emotion -> (count, total intensity), in first-seen order."""
    totals: Dict[str, Tuple[int, int]] = {}
    for moment in moments:
        count, total = totals.get(moment.emotion, (0, 0))
        totals[moment.emotion] = (count + 1, total + moment.intensity)
    return totals


def _mean_intensity(moments: List[EmotionalMoment]) -> float:
    if not moments:
        return 0.0
    return sum(m.intensity for m in moments) / len(moments)


def _count_trend(this_week: float, baseline: float) -> FrequencyTrend:
    if this_week > baseline * THRESHOLDS["count_increase"]:
        return FrequencyTrend.INCREASING
    if this_week < baseline * THRESHOLDS["count_decrease"]:
        return FrequencyTrend.DECREASING
    return FrequencyTrend.STABLE


def analyze_trends(
    memory: EmotionalMemory,
    weeks: int = 2,
    now: Optional[datetime] = None
) -> WeeklyEmotionReport:
    """
    Analyze emotional trends over the last weeks.

    Args:
        memory: Emotional memory to read (never modified)
        weeks: Total span in weeks; the last 7 days are compared with the
               average of the ``weeks - 1`` weeks before them (minimum 2)
        now: Report time

    Returns:
        WeeklyEmotionReport. An empty memory yields an empty, stable report.
    """
    now = now or datetime.now()
    weeks = max(2, weeks)
    baseline_weeks = weeks - 1
    week_ago = now - WEEK
    span_start = now - WEEK * weeks

    this_week_moments = [m for m in memory.emotional_moments if m.date >= week_ago]
    baseline_moments = [
        m for m in memory.emotional_moments
        if span_start <= m.date < week_ago
    ]

    this_week = _aggregate(this_week_moments)
    baseline = _aggregate(baseline_moments)

    trends: List[EmotionTrend] = []
    for emotion in list(this_week) + [e for e in baseline if e not in this_week]:
        count, total = this_week.get(emotion, (0, 0))
        base_count = baseline.get(emotion, (0, 0))[0] / baseline_weeks
        trends.append(EmotionTrend(
            emotion=emotion,
            frequency=count,
            avg_intensity=total / count if count else 0.0,
            trend=_count_trend(count, base_count),
            last_week=base_count,
            this_week=count,
        ))

    trends.sort(key=lambda t: t.frequency, reverse=True)

    positive = sum(t.frequency for t in trends if t.emotion in POSITIVE_EMOTIONS)
    negative = sum(t.frequency for t in trends if t.emotion in NEGATIVE_EMOTIONS)
    if positive > negative * THRESHOLDS["valence_ratio"]:
        overall = StateTrend.IMPROVING
    elif negative > positive * THRESHOLDS["valence_ratio"]:
        overall = StateTrend.DECLINING
    else:
        overall = StateTrend.STABLE

    avg_intensity = _mean_intensity(this_week_moments)
    baseline_intensity = _mean_intensity(baseline_moments)
    if avg_intensity > baseline_intensity + THRESHOLDS["intensity_band"]:
        intensity_trend = FrequencyTrend.INCREASING
    elif avg_intensity < baseline_intensity - THRESHOLDS["intensity_band"]:
        intensity_trend = FrequencyTrend.DECREASING
    else:
        intensity_trend = FrequencyTrend.STABLE

    recommendations: List[str] = []
    if overall == StateTrend.DECLINING:
        recommendations.append(RECOMMENDATIONS["declining"])
    if (intensity_trend == FrequencyTrend.INCREASING and
            avg_intensity > THRESHOLDS["high_intensity"]):
        recommendations.append(RECOMMENDATIONS["intense"])
    if any(t.emotion == "anxiety" and t.trend == FrequencyTrend.INCREASING for t in trends):
        recommendations.append(RECOMMENDATIONS["anxiety"])
    if any(is_positive(t.emotion) and t.trend == FrequencyTrend.INCREASING for t in trends):
        recommendations.append(RECOMMENDATIONS["positive"])

    return WeeklyEmotionReport(
        dominant_emotions=trends[:TOP_EMOTIONS],
        overall_trend=overall,
        avg_intensity=avg_intensity,
        most_frequent_emotion=trends[0].emotion if trends else "neutral",
        intensity_trend=intensity_trend,
        recommendations=recommendations,
    )


def daily_emotions(
    memory: EmotionalMemory,
    days: int = 7,
    now: Optional[datetime] = None
) -> Dict[str, List[Dict]]:
    """
    Per-day emotion breakdown for charts.

    Built from significant moments only (intensity >= 6). Readings below
    that are never stored, so days with only mild emotions are absent.

    Returns ``{"YYYY-MM-DD": [{"emotion", "intensity", "count"}, ...]}``
    sorted by date. Intensity is a running average within the day.
    """
    now = now or datetime.now()
    since = now - timedelta(days=days)

    buckets: Dict[Tuple[str, str], Dict] = {}
    for moment in memory.emotional_moments:
        if moment.date < since:
            continue
        day = moment.date.date().isoformat()
        key = (day, moment.emotion)
        if key in buckets:
            bucket = buckets[key]
            bucket["count"] += 1
            bucket["intensity"] = (bucket["intensity"] + moment.intensity) / 2
        else:
            buckets[key] = {
                "emotion": moment.emotion,
                "intensity": float(moment.intensity),
                "count": 1,
            }

    result: Dict[str, List[Dict]] = {}
    for (day, _), bucket in sorted(buckets.items(), key=lambda item: item[0][0]):
        result.setdefault(day, []).append(bucket)
    return result


EMOTION_EMOJIS = {
    "joy": "😊",
    "sadness": "😢",
    "anger": "😠",
    "fear": "😨",
    "anxiety": "😰",
    "calm": "😌",
    "excited": "🤩",
    "tired": "😴",
    "overwhelmed": "😵",
    "neutral": "😐",
}

TREND_EMOJIS = {
    "increasing": "📈",
    "stable": "➡️",
    "decreasing": "📉",
    "improving": "✨",
    "declining": "⚠️",
}

TREND_LABELS = {
    StateTrend.IMPROVING: "Improving",
    StateTrend.STABLE: "Stable",
    StateTrend.DECLINING: "Declining",
}

PRACTICES = [
    {
        "title": "4-7-8 breathing",
        "description": (
            "Inhale for 4 counts, hold for 7, exhale for 8. Repeat 4 times. "
            "Calms you down quickly."
        ),
    },
    {
        "title": "Gratitude journal",
        "description": (
            "Every day, write down 3 things you are grateful for. "
            "Lifts the overall mood."
        ),
    },
    {
        "title": "Mindfulness meditation",
        "description": (
            "5 minutes a day: sit comfortably, breathe naturally, notice "
            "thoughts without judging them."
        ),
    },
    {
        "title": "The anchor technique",
        "description": (
            "Recall a moment of complete calm. Close your eyes, picture the "
            "details and anchor the feeling."
        ),
    },
    {
        "title": "Progressive muscle relaxation",
        "description": (
            "Tense and relax muscle groups in order (legs, arms, torso). "
            "Releases tension."
        ),
    },
]


def practice_of_the_week(week: str) -> Dict[str, str]:
    """Pick a practice deterministically from the ISO week id."""
    _, _, number = week.partition("-W")
    index = int(number) if number.isdigit() else 0
    return PRACTICES[index % len(PRACTICES)]


def format_report(report: WeeklyEmotionReport) -> str:
    """Render a report as Markdown text for chat delivery."""
    lines = ["📊 *Weekly emotional analysis*", ""]
    lines.append(
        f"*Overall:* {TREND_EMOJIS[report.overall_trend.value]} "
        f"{TREND_LABELS[report.overall_trend]}"
    )
    lines.append(
        f"*Average intensity:* {report.avg_intensity:.1f}/10 "
        f"{TREND_EMOJIS[report.intensity_trend.value]}"
    )
    lines.append("")

    if not report.has_data:
        lines.append("No emotional data for this week yet.")
        return "\n".join(lines)

    lines.append("*Top emotions:*")
    for index, trend in enumerate(report.dominant_emotions, start=1):
        emoji = EMOTION_EMOJIS.get(trend.emotion, "📝")
        lines.append(
            f"{index}. {emoji} {trend.emotion}: {trend.frequency} times "
            f"(intensity {trend.avg_intensity:.1f}/10) {TREND_EMOJIS[trend.trend.value]}"
        )

    if report.recommendations:
        lines.append("")
        lines.append("*Recommendations:*")
        for index, recommendation in enumerate(report.recommendations, start=1):
            lines.append(f"{index}. {recommendation}")

    return "\n".join(lines)


def format_weekly_digest(
    memory: EmotionalMemory,
    now: Optional[datetime] = None
) -> str:
    """Weekly digest: message count, main emotion, profile and a practice."""
    now = now or datetime.now()
    report = analyze_trends(memory, now=now)
    practice = practice_of_the_week(week_id(now))
    total = sum(t.frequency for t in report.dominant_emotions)
    top = report.most_frequent_emotion

    lines = [
        "📊 *EmotiCare weekly digest*",
        "",
        f"_Period: {(now - WEEK).date().isoformat()} - {now.date().isoformat()}_",
        "",
        f"💬 *Significant moments this week:* {total}",
        f"🎭 *Main emotion:* {EMOTION_EMOJIS.get(top, '📝')} {top}",
        "",
    ]
    this_week = [t for t in report.dominant_emotions if t.frequency]
    if this_week:
        lines.append("*Emotional profile of the week:*")
        for trend in this_week:
            lines.append(
                f"{EMOTION_EMOJIS.get(trend.emotion, '📝')} {trend.emotion}: "
                f"{trend.frequency} times (intensity: {trend.avg_intensity:.1f}/10)"
            )
        lines.append("")
    lines.extend([
        "🧘 *Practice of the week:*",
        f"*{practice['title']}*",
        practice["description"],
        "",
        "💙 Keep tracking your emotions and taking care of yourself!",
    ])
    return "\n".join(lines)
