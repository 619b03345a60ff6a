"""
Crisis Detection

Fixed-keyword matching over lower-cased message text. Produces the
boolean crisis signal that pre-empts the therapy flow. Zero latency,
fully deterministic; false negatives are expected, so callers with a
better signal should pass it explicitly.
"""

from typing import List, Optional
import re


CRISIS_PATTERNS: List[str] = [
    # Russian
    r"суицид", r"покончить\s+с\s+собой", r"убить\s+себя", r"убью\s+себя",
    r"не\s+хочу\s+жить", r"не\s+хочется\s+жить", r"хочу\s+умереть",
    r"свести\s+счеты\s+с\s+жизнью", r"причинить\s+себе\s+вред",
    r"порезать\s+себя", r"самоповрежд",
    # English
    r"\bsuicid", r"\bkill\s+myself\b", r"\bend\s+my\s+life\b",
    r"\bwant\s+to\s+die\b", r"\bdon'?t\s+want\s+to\s+live\b",
    r"\bself[-\s]?harm", r"\bhurt\s+myself\b", r"\bcut\s+myself\b",
    r"\bno\s+reason\s+to\s+live\b", r"\bbetter\s+off\s+dead\b",
]

SUPPORT_RESOURCES = (
    "🆘 *You are not alone. Help is available right now:*\n"
    "• Emergency services: 112 (EU / Russia), 911 (US)\n"
    "• Russia, free psychological help line: 8-800-2000-122\n"
    "• US, Suicide & Crisis Lifeline: call or text 988\n"
    "• UK & Ireland, Samaritans: 116 123\n"
    "• International directory: https://findahelpline.com\n"
    "If you are in immediate danger, please contact emergency services."
)


class KeywordCrisisDetector:
    """Regex-based detector for self-harm risk language."""

    def __init__(self, patterns: Optional[List[str]] = None):
        self._compiled = [
            re.compile(p, re.IGNORECASE) for p in (patterns or CRISIS_PATTERNS)
        ]

    def matches(self, text: str) -> List[str]:
        """All matched phrases, in pattern order."""
        lower_text = text.lower()
        found = []
        for pattern in self._compiled:
            match = pattern.search(lower_text)
            if match:
                found.append(match.group())
        return found

    def detect(self, text: str) -> bool:
        lower_text = text.lower()
        return any(pattern.search(lower_text) for pattern in self._compiled)
