"""Badges derived from streaks. Never stored."""
from dataclasses import dataclass, asdict
from typing import Dict, List, Mapping


@dataclass(frozen=True)
class Badge:
    name: str
    icon: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


# Highest threshold first; only the top tier reached is awarded
BADGE_TIERS = [
    (30, "Champion", "🏆"),
    (14, "Medal", "🏅"),
    (7, "Glow", "🌟"),
    (3, "Spark", "🔥"),
]


def badge_for(activity: str, streak: int):
    for threshold, tier, icon in BADGE_TIERS:
        if streak >= threshold:
            return Badge(name=f"{activity} {tier}", icon=icon, description=f"{threshold}-day streak!")
    return None


def evaluate_badges(streaks: Mapping[str, int]) -> List[Badge]:
    """One badge per activity at most, in streak map order."""
    badges = []
    for activity, count in streaks.items():
        badge = badge_for(activity, count)
        if badge is not None:
            badges.append(badge)
    return badges
