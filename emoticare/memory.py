"""
Emotional Memory Module

Append-only, size-bounded log of significant emotional moments plus
rolling aggregates:
- dominant emotion counters
- weekly intensity trend (last 8 ISO weeks)
- recent topic recency table (20 most recent topics)
- recurring negative triggers

Produces recall cues ("relevant memories") for the response generator.
Eviction is silent: the bounded collections drop their oldest entries
and never raise.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from itertools import islice
from typing import Dict, Iterator, List, Optional
import logging
import re

from .records import is_negative

logger = logging.getLogger(__name__)


MAX_MOMENTS = 50
MAX_WEEKLY_TRENDS = 8
MAX_TOPICS = 20
MAX_TRIGGERS = 10
MAX_KEYWORDS = 5
MAX_CONTEXT_CHARS = 100

SIGNIFICANT_INTENSITY = 6     # moments are stored at or above this
RECALL_INTENSITY = 7          # only strong moments are recalled
PATTERN_MIN_COUNT = 3
TOPIC_RECALL_DAYS = 7
MAX_TOPIC_CUES = 3
MAX_CUES = 3

STOP_WORDS = frozenset({
    "и", "в", "на", "с", "по", "для", "как", "что", "это", "то", "а", "но", "или",
})

# Topic label -> synonym stems (Russian and English)
TOPIC_PATTERNS: Dict[str, str] = {
    "work": r"работ|коллег|начальник|проект|дедлайн|\bwork|\bjob\b|colleague|\bboss|project|deadline",
    "family": r"семь|родител|дети|родственник|family|parent|\bmom\b|\bdad\b|\bkids?\b|relative",
    "friends": r"друз|друг|подруг|компани|friend",
    "health": r"здоров|болезн|болею|врач|лечени|health|\bsick|illness|doctor|treatment",
    "relationships": r"отношени|партнер|любов|расставани|relationship|partner|\blove\b|breakup|break up",
    "study": r"учеб|экзамен|университет|школ|\bstudy|exam|universit|school|college",
    "finances": r"деньг|денег|зарплат|покупк|финанс|money|salary|\bdebt|financ|\brent\b",
    "anxiety": r"тревог|страх|беспокой|паник|anxi|\bfear|worr|panic",
    "sadness": r"грус|печал|тоск|одиночеств|\bsad|sorrow|lonel|grief",
}

_TOPIC_COMPILED = {
    topic: re.compile(pattern, re.IGNORECASE) for topic, pattern in TOPIC_PATTERNS.items()
}
_NON_LETTERS = re.compile(r"[^\w\s]|[\d_]")


@dataclass(frozen=True)
class EmotionalMoment:
    """A retained, significant emotion reading."""
    date: datetime
    emotion: str
    intensity: int
    context: str
    keywords: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "date": self.date.isoformat(),
            "emotion": self.emotion,
            "intensity": self.intensity,
            "context": self.context,
            "keywords": list(self.keywords),
        }


@dataclass
class WeeklyTrendPoint:
    week: str                 # ISO week id, e.g. "2026-W42"
    avg_intensity: float
    top_emotion: str

    def to_dict(self) -> Dict:
        return {
            "week": self.week,
            "avg_intensity": round(self.avg_intensity, 2),
            "top_emotion": self.top_emotion,
        }


@dataclass
class TopicRecency:
    topic: str
    last_mentioned: datetime
    frequency: int = 1

    def to_dict(self) -> Dict:
        return {
            "topic": self.topic,
            "last_mentioned": self.last_mentioned.isoformat(),
            "frequency": self.frequency,
        }


@dataclass
class EmotionalPatterns:
    """Long-running aggregates over every processed reading."""
    dominant_emotions: Dict[str, int] = field(default_factory=dict)
    weekly_trends: List[WeeklyTrendPoint] = field(default_factory=list)
    triggers: List[str] = field(default_factory=list)

    def top_emotion(self) -> Optional[tuple]:
        """Most frequent (emotion, count); ties go to the first seen."""
        if not self.dominant_emotions:
            return None
        return max(self.dominant_emotions.items(), key=lambda item: item[1])

    def to_dict(self) -> Dict:
        return {
            "dominant_emotions": dict(self.dominant_emotions),
            "weekly_trends": [w.to_dict() for w in self.weekly_trends],
            "triggers": list(self.triggers),
        }


@dataclass
class PersonalInfo:
    """Free-form facts the user chose to share. Never pruned."""
    name: Optional[str] = None
    work_context: Optional[str] = None
    relationships: List[str] = field(default_factory=list)
    interests: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "work_context": self.work_context,
            "relationships": list(self.relationships),
            "interests": list(self.interests),
        }


@dataclass
class EmotionalMemory:
    """Aggregate root for everything remembered about one user."""
    emotional_moments: List[EmotionalMoment] = field(default_factory=list)
    patterns: EmotionalPatterns = field(default_factory=EmotionalPatterns)
    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    recent_topics: List[TopicRecency] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "emotional_moments": [m.to_dict() for m in self.emotional_moments],
            "patterns": self.patterns.to_dict(),
            "personal_info": self.personal_info.to_dict(),
            "recent_topics": [t.to_dict() for t in self.recent_topics],
        }


def create_empty_memory() -> EmotionalMemory:
    return EmotionalMemory()


def week_id(moment: datetime) -> str:
    """ISO week identifier, ``YYYY-Www``."""
    year, week, _ = moment.isocalendar()
    return f"{year}-W{week:02d}"


def extract_keywords(text: str) -> List[str]:
    """
    Up to 5 unique keywords in first-seen order.

    Keeps lower-cased alphabetic tokens longer than 3 characters that are
    not stop words.
    """
    cleaned = _NON_LETTERS.sub("", text.lower())
    keywords: List[str] = []
    for word in cleaned.split():
        if len(word) <= 3 or word in STOP_WORDS or word in keywords:
            continue
        keywords.append(word)
        if len(keywords) == MAX_KEYWORDS:
            break
    return keywords


def extract_topics(text: str) -> List[str]:
    """Topic labels whose synonym stems appear in the text."""
    lower_text = text.lower()
    return [
        topic for topic, pattern in _TOPIC_COMPILED.items()
        if pattern.search(lower_text)
    ]


def record_experience(
    memory: EmotionalMemory,
    emotion: str,
    intensity: int,
    context: str,
    text: str,
    now: Optional[datetime] = None
) -> EmotionalMemory:
    """
    Record a new emotional experience.

    Args:
        memory: Memory to update (mutated in place)
        emotion: Emotion label
        intensity: Intensity 1-10, already clamped by the caller
        context: Short description of the situation (cut to 100 chars)
        text: Raw user text, used only for keyword and topic extraction
        now: Timestamp of the experience

    Returns:
        The same memory instance
    """
    now = now or datetime.now()

    if intensity >= SIGNIFICANT_INTENSITY:
        memory.emotional_moments.append(EmotionalMoment(
            date=now,
            emotion=emotion,
            intensity=intensity,
            context=context[:MAX_CONTEXT_CHARS],
            keywords=extract_keywords(text),
        ))
        if len(memory.emotional_moments) > MAX_MOMENTS:
            dropped = len(memory.emotional_moments) - MAX_MOMENTS
            memory.emotional_moments = memory.emotional_moments[-MAX_MOMENTS:]
            logger.debug("Evicted %d oldest emotional moment(s)", dropped)

    patterns = memory.patterns
    patterns.dominant_emotions[emotion] = patterns.dominant_emotions.get(emotion, 0) + 1

    _update_weekly_trend(patterns, week_id(now), emotion, intensity)

    topics = extract_topics(text)
    for topic in topics:
        existing = next((t for t in memory.recent_topics if t.topic == topic), None)
        if existing:
            existing.last_mentioned = now
            existing.frequency += 1
        else:
            memory.recent_topics.append(TopicRecency(topic=topic, last_mentioned=now))

    # sorted() is stable, so ties keep insertion order
    memory.recent_topics = sorted(
        memory.recent_topics,
        key=lambda t: t.last_mentioned,
        reverse=True
    )[:MAX_TOPICS]

    if is_negative(emotion) and intensity >= SIGNIFICANT_INTENSITY:
        _update_triggers(patterns, topics)

    return memory


def _update_weekly_trend(
    patterns: EmotionalPatterns,
    week: str,
    emotion: str,
    intensity: int
):
    existing = next((w for w in patterns.weekly_trends if w.week == week), None)
    if existing:
        # Running average: recent readings weigh more than a true mean
        existing.avg_intensity = (existing.avg_intensity + intensity) / 2
        return

    patterns.weekly_trends.append(WeeklyTrendPoint(
        week=week,
        avg_intensity=float(intensity),
        top_emotion=emotion,
    ))
    if len(patterns.weekly_trends) > MAX_WEEKLY_TRENDS:
        patterns.weekly_trends = patterns.weekly_trends[-MAX_WEEKLY_TRENDS:]


def _update_triggers(patterns: EmotionalPatterns, topics: List[str]):
    for topic in topics:
        if topic in patterns.triggers:
            patterns.triggers.remove(topic)
        patterns.triggers.append(topic)
    if len(patterns.triggers) > MAX_TRIGGERS:
        patterns.triggers = patterns.triggers[-MAX_TRIGGERS:]


def remember_personal_info(memory: EmotionalMemory, **fields) -> PersonalInfo:
    """
    Merge user-shared facts into the memory.

    Scalar fields overwrite; list fields (relationships, interests) are
    merged without duplicates. Unknown field names raise TypeError.
    """
    info = memory.personal_info
    for name, value in fields.items():
        if not hasattr(info, name):
            raise TypeError(f"Unknown personal info field: {name}")
        if value is None:
            continue
        current = getattr(info, name)
        if isinstance(current, list):
            values = [value] if isinstance(value, str) else list(value)
            for item in values:
                if item not in current:
                    current.append(item)
        else:
            setattr(info, name, value)
    return info


def _days_ago(moment: datetime, now: datetime) -> int:
    return (now - moment) // timedelta(days=1)


def _candidate_cues(
    memory: EmotionalMemory,
    current_emotion: str,
    current_text: str,
    now: datetime
) -> Iterator[str]:
    lower_text = current_text.lower()

    topic_cues = 0
    for topic in memory.recent_topics:
        if topic_cues >= MAX_TOPIC_CUES:
            break
        pattern = _TOPIC_COMPILED.get(topic.topic)
        if pattern is not None:
            mentioned = pattern.search(lower_text) is not None
        else:
            mentioned = topic.topic.lower() in lower_text
        if not mentioned:
            continue
        days = _days_ago(topic.last_mentioned, now)
        if days <= TOPIC_RECALL_DAYS:
            topic_cues += 1
            yield f'You recently mentioned "{topic.topic}" ({days} days ago).'

    similar = [
        m for m in memory.emotional_moments
        if m.emotion == current_emotion and m.intensity >= RECALL_INTENSITY
    ]
    if similar:
        last = similar[-1]
        days = _days_ago(last.date, now)
        if days > 0:
            when = "yesterday" if days == 1 else f"{days} days ago"
            yield f"I remember that {when} you also felt {last.emotion} ({last.context})."

    top = memory.patterns.top_emotion()
    if top and top[1] >= PATTERN_MIN_COUNT and top[0] == current_emotion:
        yield (
            f"I notice that {top[0]} is an emotion that comes up often "
            f"in our conversations."
        )


def relevant_memories(
    memory: EmotionalMemory,
    current_emotion: str,
    current_text: str,
    now: Optional[datetime] = None,
    limit: int = MAX_CUES
) -> Iterator[str]:
    """
    Lazily yield recall cues for the current message.

    Order: topic matches, then the most recent similar strong moment,
    then a note on the dominant emotional pattern. At most ``limit``
    cues are produced. The iterator is single-use.
    """
    return islice(
        _candidate_cues(memory, current_emotion, current_text, now or datetime.now()),
        limit
    )
