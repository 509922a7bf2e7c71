"""Streak engine - per-activity consecutive-day counters.

A streak policy decides the new counter value when an activity is logged for a
date. Policies are plain functions so they can be swapped without touching
callers:

    no_gap_check     every new calendar day adds one, gaps are ignored
    contiguous_days  a new day extends the streak only if the day before was
                     logged, otherwise the streak restarts at 1
"""
from datetime import date, timedelta
from typing import Callable, Dict, Iterable

from streakmind.core.logging import logger
from streakmind.services.activity_log import LogEntry

StreakMap = Dict[str, int]
StreakPolicy = Callable[[Iterable[LogEntry], str, str, int], int]


def should_increment(log: Iterable[LogEntry], activity: str, day: str) -> bool:
    """True when the activity has no entry on `day` yet."""
    return not any(entry.activity == activity and entry.date == day for entry in log)


def no_gap_check(log: Iterable[LogEntry], activity: str, day: str, current: int) -> int:
    """Count distinct logged days without checking that they are consecutive."""
    if should_increment(log, activity, day):
        return current + 1
    return current


def contiguous_days(log: Iterable[LogEntry], activity: str, day: str, current: int) -> int:
    """Extend only when yesterday (relative to `day`) is already logged."""
    entries = list(log)
    if not should_increment(entries, activity, day):
        return current
    previous = (date.fromisoformat(day) - timedelta(days=1)).isoformat()
    if any(entry.activity == activity and entry.date == previous for entry in entries):
        return current + 1
    return 1


STREAK_POLICIES: Dict[str, StreakPolicy] = {
    "no_gap_check": no_gap_check,
    "contiguous_days": contiguous_days,
}


def get_policy(name: str) -> StreakPolicy:
    if name not in STREAK_POLICIES:
        logger.warning(f"Unknown streak policy '{name}', using no_gap_check")
        return no_gap_check
    return STREAK_POLICIES[name]


class StreakEngine:
    """Applies a streak policy to a streak map."""

    def __init__(self, policy: StreakPolicy = no_gap_check):
        self.policy = policy

    def record(self, streaks: StreakMap, log: Iterable[LogEntry], activity: str, day: str) -> bool:
        """
        Update `streaks` for a new log of `activity` on `day`.

        Must be called before the new entry is appended to the log.

        Returns:
            True if the counter changed
        """
        current = streaks.get(activity, 0)
        updated = self.policy(log, activity, day, current)
        streaks[activity] = updated
        return updated != current

    def rebuild(self, log: Iterable[LogEntry]) -> StreakMap:
        """Replay the log in date order to reconstruct the streak map."""
        entries = sorted(log, key=lambda entry: (entry.date, entry.timestamp))
        streaks: StreakMap = {}
        replayed = []
        for entry in entries:
            self.record(streaks, replayed, entry.activity, entry.date)
            replayed.append(entry)
        return streaks
