"""Habit state - activity definitions, the log and streaks as one document.

Activity names are the keys that tie the three together, so every operation
that changes a name or removes an activity updates all three at once.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from streakmind.core.logging import logger
from streakmind.services.activities import ActivityDefinition, ActivityDefinitionStore, VisualizationType
from streakmind.services.activity_log import ActivityLogStore, LogEntry
from streakmind.services.intent.parser import BUILTIN_ACTIVITIES, ParsedIntent
from streakmind.services.points import calculate_points
from streakmind.services.storage import JsonFileStore
from streakmind.services.streaks import StreakEngine

# Distinguishes "leave unchanged" from "clear" for optional updates
UNSET: Any = object()


@dataclass
class HabitState:
    """Activities, log and streak map."""
    activities: ActivityDefinitionStore = field(default_factory=ActivityDefinitionStore)
    logs: ActivityLogStore = field(default_factory=ActivityLogStore)
    streaks: Dict[str, int] = field(default_factory=dict)

    def known_activities(self) -> List[str]:
        """Definition names followed by streak-only names, in insertion order."""
        names = self.activities.names()
        names.extend(name for name in self.streaks if name not in names)
        return names

    def custom_activities(self) -> List[str]:
        """Known names that have no builtin parsing rule."""
        return [name for name in self.known_activities() if name not in BUILTIN_ACTIVITIES]

    def resolve_name(self, name: str) -> Optional[str]:
        """Map a user-typed name to the stored key, ignoring case if needed."""
        definition = self.activities.find(name)
        if definition is not None:
            return definition.name
        for known in self.streaks:
            if known.lower() == name.lower():
                return known
        return None

    def create_activity(
        self,
        name: str,
        custom_points: Optional[float] = None,
        visualization_type: Optional[VisualizationType] = None,
        description: Optional[str] = None,
    ) -> Optional[ActivityDefinition]:
        """Add a definition and a zero streak. Returns None if the name exists."""
        if name in self.activities or name in self.streaks:
            return None
        definition = self.activities.create(name, custom_points, visualization_type, description)
        self.streaks[name] = 0
        logger.info(f"Created activity '{name}'")
        return definition

    def update_activity(
        self,
        old_name: str,
        name: Optional[str] = None,
        visualization_type: Optional[VisualizationType] = None,
        custom_points: Any = UNSET,
        description: Any = UNSET,
    ) -> bool:
        """
        Update a definition. A new name is carried into every log entry and the
        streak map, keeping the streak's position.

        Returns:
            False if the activity does not exist or the new name is taken
        """
        definition = self.activities.get(old_name)
        if definition is None:
            return False

        if name and name != old_name:
            if name in self.activities or name in self.streaks:
                return False
            self.activities.rename(old_name, name)
            moved = self.logs.rename_activity(old_name, name)
            self.streaks = {
                (name if key == old_name else key): count for key, count in self.streaks.items()
            }
            logger.info(f"Renamed activity '{old_name}' to '{name}' ({moved} log entries)")

        if visualization_type is not None:
            definition.visualization_type = visualization_type
        if custom_points is not UNSET:
            definition.custom_points_per_unit = custom_points
        if description is not UNSET:
            definition.description = description
        return True

    def delete_activity(self, name: str) -> bool:
        """Remove the definition, its streak and all of its log entries."""
        if name not in self.activities and name not in self.streaks:
            return False
        self.activities.remove(name)
        self.streaks.pop(name, None)
        removed = self.logs.remove_activity(name)
        logger.info(f"Deleted activity '{name}' and {removed} log entries")
        return True

    def record_log(self, intent: ParsedIntent, message: str, engine: StreakEngine) -> Tuple[LogEntry, bool]:
        """
        Score and append a log entry, creating the activity on first use.

        Returns:
            (entry, streak_updated)
        """
        if intent.activity not in self.activities:
            self.activities.create(intent.activity)
            self.streaks.setdefault(intent.activity, 0)
            logger.info(f"Activity '{intent.activity}' created from first log")

        points = calculate_points(intent.activity, intent.amount, intent.unit, self.activities)
        streak_updated = engine.record(self.streaks, self.logs, intent.activity, intent.date)

        entry = LogEntry(
            activity=intent.activity,
            amount=intent.amount,
            unit=intent.unit,
            date=intent.date,
            message=message,
            points=points,
        )
        self.logs.append(entry)
        return entry, streak_updated

    def delete_log_entry(self, entry_id: str, engine: StreakEngine) -> Optional[LogEntry]:
        """Remove one entry and recount that activity's streak from what is left."""
        entry = self.logs.remove(entry_id)
        if entry is None:
            return None
        if entry.activity in self.streaks:
            rebuilt = engine.rebuild(self.logs.for_activity(entry.activity))
            self.streaks[entry.activity] = rebuilt.get(entry.activity, 0)
        return entry

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activities": self.activities.to_dict(),
            "logs": self.logs.to_list(),
            "streaks": dict(self.streaks),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HabitState":
        return cls(
            activities=ActivityDefinitionStore.from_dict(data.get("activities") or {}),
            logs=ActivityLogStore.from_list(data.get("logs") or []),
            streaks={name: int(count) for name, count in (data.get("streaks") or {}).items()},
        )


def habit_state_file(path: Path) -> JsonFileStore[HabitState]:
    return JsonFileStore(path, default=HabitState, decode=HabitState.from_dict, encode=HabitState.to_dict)
