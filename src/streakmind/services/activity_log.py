"""Activity log - append-only ledger of accepted log entries."""
import uuid
from dataclasses import dataclass, field, asdict, replace
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Any, Union

from streakmind.core.config import settings

Number = Union[int, float]


class Unit(Enum):
    """Unit an amount is measured in."""
    QUESTIONS = "questions"
    MINUTES = "minutes"
    HOURS = "hours"
    PAGES = "pages"
    SESSION = "session"
    DISTANCE = "distance"


@dataclass(frozen=True)
class LogEntry:
    """One accepted record of an activity on a calendar day.

    `date` is a YYYY-MM-DD string, `timestamp` an ISO instant.
    """
    activity: str
    amount: Number
    unit: Unit
    date: str
    message: str
    points: int
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(default_factory=lambda: datetime.now(settings.user_timezone).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["unit"] = self.unit.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        data = dict(data)
        data["unit"] = Unit(data.get("unit", "session"))
        return cls(**data)


class ActivityLogStore:
    """Ledger of log entries. Entries are never mutated, only replaced on rename."""

    def __init__(self, entries: Optional[List[LogEntry]] = None):
        self._entries: List[LogEntry] = list(entries or [])

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries))

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)

    def for_activity(self, activity: str) -> List[LogEntry]:
        return [entry for entry in self._entries if entry.activity == activity]

    def recent(self, limit: Optional[int] = None) -> List[LogEntry]:
        """Entries newest first."""
        ordered = sorted(
            self._entries,
            key=lambda entry: datetime.fromisoformat(entry.timestamp),
            reverse=True,
        )
        return ordered[:limit] if limit is not None else ordered

    def total_points(self) -> int:
        return sum(entry.points for entry in self._entries)

    def rename_activity(self, old_name: str, new_name: str) -> int:
        """Move every entry of `old_name` to `new_name`. Returns how many moved."""
        moved = 0
        for index, entry in enumerate(self._entries):
            if entry.activity == old_name:
                self._entries[index] = replace(entry, activity=new_name)
                moved += 1
        return moved

    def remove(self, entry_id: str) -> Optional[LogEntry]:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return self._entries.pop(index)
        return None

    def remove_activity(self, activity: str) -> int:
        before = len(self._entries)
        self._entries = [entry for entry in self._entries if entry.activity != activity]
        return before - len(self._entries)

    def to_list(self) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]

    @classmethod
    def from_list(cls, data: List[Dict[str, Any]]) -> "ActivityLogStore":
        return cls([LogEntry.from_dict(item) for item in data])
