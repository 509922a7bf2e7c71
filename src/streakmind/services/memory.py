"""
User memory - what StreakMind has picked up about the user across chats.

One memory document per user. It is updated from every chat message (the
user's and StreakMind's own replies) with simple phrase matching, and a short
summary of it is added to the system prompt so replies feel personal.

Sections:
- preferences: favourite activities, time of day, tone and motivation style
- personal_context: goals, challenges, achievements, recurring patterns
- conversation_context: last session, common topics, current struggles and wins
"""
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from streakmind.core.config import settings
from streakmind.core.logging import logger
from streakmind.services.intent.parser import BUILTIN_RULES
from streakmind.services.storage import DocumentStore

# Oldest items are dropped past this many per list
MAX_ITEMS = 10
MAX_PHRASE_LENGTH = 80


class PersonalityPreference(Enum):
    THERAPIST = "therapist"
    FRIEND = "friend"
    TRAINER = "trainer"
    ADAPTIVE = "adaptive"


class MotivationStyle(Enum):
    GENTLE = "gentle"
    ENCOURAGING = "encouraging"
    INTENSE = "intense"


class MemoryFieldError(ValueError):
    """Unknown memory field or category."""


def _now() -> datetime:
    return datetime.now(settings.user_timezone)


@dataclass
class Preferences:
    preferred_activities: List[str] = field(default_factory=list)
    time_of_day: Optional[str] = None
    personality_preference: PersonalityPreference = PersonalityPreference.ADAPTIVE
    motivation_style: MotivationStyle = MotivationStyle.ENCOURAGING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "preferred_activities": list(self.preferred_activities),
            "time_of_day": self.time_of_day,
            "personality_preference": self.personality_preference.value,
            "motivation_style": self.motivation_style.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Preferences":
        return cls(
            preferred_activities=list(data.get("preferred_activities", [])),
            time_of_day=data.get("time_of_day"),
            personality_preference=PersonalityPreference(data.get("personality_preference", "adaptive")),
            motivation_style=MotivationStyle(data.get("motivation_style", "encouraging")),
        )


@dataclass
class PersonalContext:
    goals: List[str] = field(default_factory=list)
    challenges: List[str] = field(default_factory=list)
    achievements: List[str] = field(default_factory=list)
    recurring_patterns: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goals": list(self.goals),
            "challenges": list(self.challenges),
            "achievements": list(self.achievements),
            "recurring_patterns": list(self.recurring_patterns),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PersonalContext":
        return cls(**{key: list(data.get(key, [])) for key in cls().to_dict()})


@dataclass
class ConversationContext:
    last_session: Optional[datetime] = None
    common_topics: List[str] = field(default_factory=list)
    struggling_with: List[str] = field(default_factory=list)
    celebrating: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "last_session": self.last_session.isoformat() if self.last_session else None,
            "common_topics": list(self.common_topics),
            "struggling_with": list(self.struggling_with),
            "celebrating": list(self.celebrating),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversationContext":
        last_session = data.get("last_session")
        return cls(
            last_session=datetime.fromisoformat(last_session) if last_session else None,
            common_topics=list(data.get("common_topics", [])),
            struggling_with=list(data.get("struggling_with", [])),
            celebrating=list(data.get("celebrating", [])),
        )


@dataclass
class UserMemory:
    """Everything remembered about the user."""
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    name: Optional[str] = None
    preferences: Preferences = field(default_factory=Preferences)
    personal_context: PersonalContext = field(default_factory=PersonalContext)
    conversation_context: ConversationContext = field(default_factory=ConversationContext)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "preferences": self.preferences.to_dict(),
            "personal_context": self.personal_context.to_dict(),
            "conversation_context": self.conversation_context.to_dict(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserMemory":
        return cls(
            id=data["id"],
            name=data.get("name"),
            preferences=Preferences.from_dict(data.get("preferences", {})),
            personal_context=PersonalContext.from_dict(data.get("personal_context", {})),
            conversation_context=ConversationContext.from_dict(data.get("conversation_context", {})),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )

    def to_context_string(self) -> str:
        """Short summary for the system prompt. Empty when nothing is known yet."""
        parts = []
        if self.name:
            parts.append(f"Name: {self.name}")

        prefs = self.preferences
        if prefs.preferred_activities:
            parts.append(f"Favourite activities: {', '.join(prefs.preferred_activities[:3])}")
        if prefs.time_of_day:
            parts.append(f"Usually active in the {prefs.time_of_day}")
        if prefs.personality_preference != PersonalityPreference.ADAPTIVE:
            parts.append(f"Prefers a {prefs.personality_preference.value} tone")
        if prefs.motivation_style != MotivationStyle.ENCOURAGING:
            parts.append(f"Likes {prefs.motivation_style.value} motivation")

        personal = self.personal_context
        for label, items in (
            ("Goals", personal.goals),
            ("Achievements", personal.achievements),
            ("Patterns", personal.recurring_patterns),
            ("Struggling with", self.conversation_context.struggling_with),
            ("Celebrating", self.conversation_context.celebrating),
        ):
            if items:
                parts.append(f"{label}: {', '.join(items[-3:])}")

        return "; ".join(parts) + "." if parts else ""


# Every list a user can prune, keyed by the name used by the API
LIST_CATEGORIES: Dict[str, Tuple[str, str]] = {
    "preferred_activities": ("preferences", "preferred_activities"),
    "goals": ("personal_context", "goals"),
    "challenges": ("personal_context", "challenges"),
    "achievements": ("personal_context", "achievements"),
    "recurring_patterns": ("personal_context", "recurring_patterns"),
    "common_topics": ("conversation_context", "common_topics"),
    "struggling_with": ("conversation_context", "struggling_with"),
    "celebrating": ("conversation_context", "celebrating"),
}

SECTIONS = ("name", "preferences", "personal_context", "conversation_context")


# =============================================================================
# Phrase extraction
# =============================================================================

_PHRASE_END = r"(?:[.!?,;]|\s+but\b|\s+and\s+i\b|$)"

_GOAL = re.compile(
    r"\b(?:i\s+want\s+to|i'd\s+like\s+to|i\s+would\s+like\s+to|my\s+goal\s+is\s+to|i'm\s+trying\s+to|i\s+am\s+trying\s+to)\s+"
    r"(.+?)" + _PHRASE_END
)
_CHALLENGE = re.compile(
    r"\b(?:struggl(?:e|ing)\s+(?:with|to)|hard\s+to|difficult\s+to|can't\s+seem\s+to|cannot\s+seem\s+to)\s+"
    r"(.+?)" + _PHRASE_END
)
_ACHIEVEMENT = re.compile(
    r"\b(?:i\s+)?(?:finally\s+)?(?:achieved|reached|managed\s+to)\s+(.+?)" + _PHRASE_END
)
_PATTERN = re.compile(
    r"\b((?:i\s+)?(?:usually|always|every\s+(?:day|morning|afternoon|evening|night|week|weekend))\b.*?)" + _PHRASE_END
)
_NAME = re.compile(r"\b(?:my\s+name\s+is|call\s+me)\s+([A-Za-z][A-Za-z'-]*)", re.IGNORECASE)
_TONE = re.compile(r"\b(?:be|act\s+like|talk\s+like)\s+(?:my|a)\s+(therapist|friend|trainer)\b")
_GENTLE = re.compile(r"\b(?:be\s+gentle|go\s+easy|take\s+it\s+easy\s+on\s+me)\b")
_INTENSE = re.compile(r"\b(?:push\s+me|be\s+tough|be\s+harder\s+on\s+me|tough\s+love|no\s+excuses)\b")
_TIME_OF_DAY = re.compile(r"\b(morning|afternoon|evening|night|tonight)\b")
_STREAK = re.compile(r"\b([a-z][a-z ]{0,40}?)\s+streak:?\s+(\d+)\s+days?\b")
_NOT_ACTIVITIES = {"your", "my", "the", "a", "current", "new", "longest"}


def _phrase(raw: str) -> Optional[str]:
    phrase = re.sub(r"\s+", " ", raw).strip(" '\"")
    if not phrase or len(phrase) > MAX_PHRASE_LENGTH:
        return None
    return phrase


def _remember(items: List[str], item: Optional[str]) -> bool:
    """Append `item` (moving it to the end if present). Returns True when the list changed."""
    if not item:
        return False
    if items and items[-1] == item:
        return False
    if item in items:
        items.remove(item)
    items.append(item)
    del items[:-MAX_ITEMS]
    return True


def update_from_message(
    memory: UserMemory,
    message: str,
    is_user: bool,
    known_activities: Iterable[str] = (),
    now: Optional[datetime] = None,
) -> bool:
    """
    Fold one chat message into `memory`.

    User messages feed goals, challenges, achievements, patterns, name, tone,
    time of day and topics. StreakMind's own replies only feed the list of
    streaks being celebrated.

    Returns:
        True when anything in the memory changed
    """
    text = message.lower().strip()
    if not text:
        return False

    changed = False
    personal = memory.personal_context
    conversation = memory.conversation_context

    if is_user:
        conversation.last_session = now or _now()
        changed = True

        for match in _GOAL.finditer(text):
            changed |= _remember(personal.goals, _phrase(match.group(1)))
        for match in _CHALLENGE.finditer(text):
            challenge = _phrase(match.group(1))
            changed |= _remember(personal.challenges, challenge)
            changed |= _remember(conversation.struggling_with, challenge)
        for match in _ACHIEVEMENT.finditer(text):
            changed |= _remember(personal.achievements, _phrase(match.group(1)))
        for match in _PATTERN.finditer(text):
            changed |= _remember(personal.recurring_patterns, _phrase(match.group(1)))

        name_match = _NAME.search(message)
        if name_match:
            memory.name = name_match.group(1).capitalize()

        tone = _TONE.search(text)
        if tone:
            memory.preferences.personality_preference = PersonalityPreference(tone.group(1))
        if _GENTLE.search(text):
            memory.preferences.motivation_style = MotivationStyle.GENTLE
        elif _INTENSE.search(text):
            memory.preferences.motivation_style = MotivationStyle.INTENSE

        time_of_day = _TIME_OF_DAY.search(text)
        if time_of_day:
            memory.preferences.time_of_day = "night" if time_of_day.group(1) == "tonight" else time_of_day.group(1)

        topics = [rule.activity for rule in BUILTIN_RULES if rule.predicate(text)]
        topics += [name.lower() for name in known_activities if name.lower() in text]
        for topic in topics:
            changed |= _remember(conversation.common_topics, topic)
    else:
        for match in _STREAK.finditer(text):
            activity = match.group(1).strip().split()[-1]
            if activity in _NOT_ACTIVITIES:
                continue
            celebration = f"{activity} {match.group(2)}-day streak"
            stale = [item for item in conversation.celebrating if item.startswith(f"{activity} ")]
            for item in stale:
                conversation.celebrating.remove(item)
            changed |= _remember(conversation.celebrating, celebration) or bool(stale)

    if changed:
        memory.updated_at = now or _now()
    return changed


def note_activity(memory: UserMemory, activity: str) -> None:
    """Move a just-logged activity to the front of the preferred activities."""
    preferred = memory.preferences.preferred_activities
    if activity in preferred:
        preferred.remove(activity)
    preferred.insert(0, activity)
    del preferred[MAX_ITEMS:]


def decode_memory(raw: Any) -> UserMemory:
    return UserMemory.from_dict(raw)


def encode_memory(memory: UserMemory) -> Dict[str, Any]:
    return memory.to_dict()


class MemoryService:
    """Reads and updates the user memory document."""

    def __init__(self, store: DocumentStore[UserMemory]):
        self.store = store

    def get(self) -> UserMemory:
        return self.store.load()

    def record_message(self, message: str, is_user: bool, known_activities: Iterable[str] = ()) -> UserMemory:
        """Update the memory from one chat message and save it if anything changed."""
        memory = self.store.load()
        if update_from_message(memory, message, is_user, known_activities):
            self.store.save(memory)
        return memory

    def record_activity(self, activity: str) -> None:
        memory = self.store.load()
        note_activity(memory, activity)
        memory.updated_at = _now()
        self.store.save(memory)

    def clear(self, fields: Iterable[str]) -> UserMemory:
        """
        Reset parts of the memory.

        Args:
            fields: section names (name, preferences, personal_context,
                conversation_context), list categories, or "all"

        Raises:
            MemoryFieldError: for an unknown field; nothing is changed
        """
        fields = list(fields)
        unknown = [name for name in fields if name not in SECTIONS and name not in LIST_CATEGORIES and name != "all"]
        if unknown:
            raise MemoryFieldError(f"Unknown memory fields: {', '.join(unknown)}")

        memory = self.store.load()
        if "all" in fields:
            memory = UserMemory(id=memory.id, created_at=memory.created_at)
        else:
            fresh = UserMemory()
            for name in fields:
                if name in SECTIONS:
                    setattr(memory, name, getattr(fresh, name))
                else:
                    section, attr = LIST_CATEGORIES[name]
                    setattr(getattr(memory, section), attr, [])

        memory.updated_at = _now()
        self.store.save(memory)
        logger.info(f"Cleared memory fields: {', '.join(fields)}")
        return memory

    def remove_item(self, category: str, item: str) -> bool:
        """
        Forget one remembered item.

        Returns:
            False if the item is not in that category

        Raises:
            MemoryFieldError: for an unknown category
        """
        if category not in LIST_CATEGORIES:
            raise MemoryFieldError(f"Unknown memory category: {category}")

        memory = self.store.load()
        section, attr = LIST_CATEGORIES[category]
        items = getattr(getattr(memory, section), attr)
        if item not in items:
            return False

        items.remove(item)
        memory.updated_at = _now()
        self.store.save(memory)
        logger.info(f"Removed '{item}' from memory {category}")
        return True
