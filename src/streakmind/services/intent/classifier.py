"""Message classification - general questions and new-habit requests.

`is_general_query` decides whether a message is about habit tracking at all.
`detect_tracking_request` spots requests to start tracking a new activity.
"""
import re
from typing import Iterable, Optional

from streakmind.core.config import settings
from streakmind.services.intent.commands import parse_command
from streakmind.services.intent.parser import BUILTIN_RULES

HABIT_KEYWORDS = [
    'track', 'log', 'streak', 'habit', 'points', 'score',
    'gym', 'coding', 'sleep', 'meditation', 'reading', 'exercise', 'workout',
    'did', 'completed', 'finished', 'yesterday', 'today',
]

_TRACKING_PATTERNS = [
    re.compile(r"(?:i\s+want\s+to|want\s+to|start|begin)\s+track(?:ing)?\s+(.+)$"),
    re.compile(r"add\s+(.+?)\s+(?:to\s+my\s+habits?|habit|tracking)\b"),
    re.compile(r"\btrack\s+(.+?)(?:\s+for\s+me|\s+daily|\s+habit|$)"),
]

# "keep track of", "on track" and friends are not requests for a new habit
_TRACK_IDIOM = re.compile(r"\b(?:keep|keeps|kept|keeping|on|off|lose|lost)\s+track\b")

_FILLER = re.compile(r"\b(?:habits?|daily|tracking|for\s+me)\b")
_ARTICLE = re.compile(r"^(?:my|a|an|the)\s+")


def _clean_activity_name(raw: str) -> str:
    name = _FILLER.sub(" ", raw.strip().rstrip(".!?"))
    name = re.sub(r"\s+", " ", name).strip(" ,'\"")
    return _ARTICLE.sub("", name)


def detect_tracking_request(message: str) -> Optional[str]:
    """
    Return the activity name from "I want to track X" style messages.

    The name is lowercased with filler words removed. Names that end up empty
    or too long are rejected.
    """
    text = message.lower().strip().rstrip(".!?")
    if _TRACK_IDIOM.search(text):
        return None
    max_length = settings.tracking.max_activity_name_length

    for pattern in _TRACKING_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        name = _clean_activity_name(match.group(1))
        if name and len(name) < max_length:
            return name

    return None


def is_general_query(message: str, known_activities: Iterable[str] = ()) -> bool:
    """True when the message has nothing to do with habit tracking."""
    text = message.lower()

    for keyword in HABIT_KEYWORDS:
        if keyword in text:
            return False

    for name in known_activities:
        if name.lower() in text:
            return False

    # Builtin keywords cover inflections such as "slept" or "coded"
    if any(rule.predicate(text) for rule in BUILTIN_RULES):
        return False

    if parse_command(message).is_command:
        return False

    if detect_tracking_request(message):
        return False

    return True
