"""Points calculation for log entries."""
from typing import Optional

from streakmind.services.activities import ActivityDefinitionStore
from streakmind.services.activity_log import Number, Unit


def builtin_points(activity: str, amount: Number, unit: Unit) -> int:
    """Default scoring table, by activity and unit."""
    if activity == 'coding':
        if unit == Unit.QUESTIONS:
            return int(amount * 5)
        if unit == Unit.MINUTES:
            return int(amount // 5)
        return 10

    if activity == 'gym':
        return 10

    if activity == 'sleep':
        return int(amount)

    if activity == 'reading':
        if unit == Unit.PAGES:
            return int(amount * 2)
        if unit == Unit.MINUTES:
            return int(amount // 10)
        return 8

    if activity == 'meditation':
        if unit == Unit.MINUTES:
            return int(amount)
        return 10

    # User-defined activities
    if unit == Unit.MINUTES:
        return int(amount // 10)
    if unit == Unit.HOURS:
        return int(amount * 10)
    if unit == Unit.PAGES:
        return int(amount * 2)
    return 5


def calculate_points(
    activity: str,
    amount: Number,
    unit: Unit,
    definitions: Optional[ActivityDefinitionStore] = None,
) -> int:
    """Points for one log entry. A custom rate on the definition replaces the table."""
    definition = definitions.get(activity) if definitions is not None else None
    if definition is not None and definition.custom_points_per_unit is not None:
        # Truncate toward zero
        return int(definition.custom_points_per_unit * amount)
    return builtin_points(activity, amount, unit)
