"""Activity type detection and emoji mapping."""

import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from runalyze_dump.models import UNKNOWN_EMOJI

Matcher = Callable[[str], bool]


def _pattern(regex: str) -> Matcher:
    compiled = re.compile(regex)
    return lambda token: compiled.search(token) is not None


def _contains(*needles: str) -> Matcher:
    return lambda token: any(needle in token for needle in needles)


# Tried in order against the lower-cased icon class; first match wins.
ICON_RULES: List[Tuple[str, Matcher]] = [
    ("🏃", _pattern(r"icon.{0,3}running")),
    ("🚴", _pattern(r"regular.biking")),
    ("🤸", _pattern(r"sports-mode")),
    ("🏊", _contains("swimming", "swim")),
    ("🥾", _contains("hiking", "walk")),
    ("⛷️", _contains("ski")),
    ("💪", _contains("gym", "strength")),
]

# Whole-word synonyms searched in the row HTML when the icon gives nothing.
KEYWORDS: Dict[str, List[str]] = {
    "🏃": ["running", "run", "jog", "jogging", "marathon", "5k", "10k", "half marathon"],
    "🚴": ["cycling", "cycle", "bike", "biking", "bicycle", "mtb", "road bike", "mountain bike"],
    "🏊": ["swimming", "swim", "pool", "freestyle", "backstroke", "breaststroke", "butterfly"],
    "⛷️": ["skiing", "ski", "alpine", "downhill", "cross country", "nordic", "snowboard", "snowboarding"],
    "🥾": ["hiking", "hike", "walk", "walking", "trekking", "trail", "nature walk"],
    "💪": ["gym", "strength", "weight", "lifting", "bodybuilding", "fitness", "workout", "training", "crossfit"],
    "⚽": ["football", "soccer", "futbol", "match", "league", "pitch"],
    "🏀": ["basketball", "basket", "court", "dribble", "shoot", "dunk"],
    "🎾": ["tennis", "court", "racket", "serve", "match", "set"],
    "🚣": ["rowing", "row", "kayak", "canoe", "paddle", "boat", "crew"],
    "🧘": ["yoga"],
    "⛳": ["golf"],
    "🧗": ["climbing", "boulder"],
    "🛹": ["skateboard", "skate"],
    "⚾": ["baseball"],
    "🏐": ["volleyball"],
}


class ActivityTypeDetector:
    """Resolves a display emoji from an icon class, falling back to keywords in the row HTML."""

    def __init__(
        self,
        icon_rules: Optional[Sequence[Tuple[str, Matcher]]] = None,
        keywords: Optional[Dict[str, List[str]]] = None,
    ):
        self.icon_rules = list(ICON_RULES if icon_rules is None else icon_rules)
        keywords = KEYWORDS if keywords is None else keywords
        self._keyword_patterns = [
            (emoji, [re.compile(r"\b" + re.escape(word.lower()) + r"\b") for word in words])
            for emoji, words in keywords.items()
        ]

    def detect(self, activity_type: str, fallback_html: str = "") -> str:
        token = (activity_type or "").lower()
        for emoji, matches in self.icon_rules:
            if matches(token):
                return emoji

        if fallback_html:
            return self.detect_from_text(fallback_html)

        return UNKNOWN_EMOJI

    def detect_from_text(self, text: str) -> str:
        """Return the category whose keyword occurs earliest in ``text``."""
        content = text.lower()
        earliest = len(content) + 1
        matched = UNKNOWN_EMOJI

        for emoji, patterns in self._keyword_patterns:
            for pattern in patterns:
                match = pattern.search(content)
                # strict < keeps the earlier table entry on ties
                if match and match.start() < earliest:
                    earliest = match.start()
                    matched = emoji

        return matched
