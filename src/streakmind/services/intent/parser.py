"""Intent Parser - turns a free-form habit message into a structured log intent.

Parsing is an ordered list of rules. Each rule pairs a predicate (does this
message talk about the activity?) with an extractor (how much, in which unit?).
The first rule whose predicate matches wins, so the order of `BUILTIN_RULES`
is the tie-break between categories.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, List, Optional, Tuple

from streakmind.core.config import settings
from streakmind.services.activity_log import Number, Unit

NUMBER_PATTERN = r"(\d+(?:\.\d+)?)"


@dataclass(frozen=True)
class ParsedIntent:
    """A recognised logging intent."""
    activity: str
    amount: Number
    unit: Unit
    date: str


@dataclass(frozen=True)
class LogRule:
    """A builtin category: keyword predicate plus amount/unit extractor."""
    activity: str
    predicate: Callable[[str], bool]
    extractor: Callable[[str], Tuple[Number, Unit]]

    def apply(self, text: str) -> Optional[Tuple[Number, Unit]]:
        if not self.predicate(text):
            return None
        return self.extractor(text)


def to_number(raw: str) -> Number:
    """'2' -> 2, '7.5' -> 7.5"""
    return float(raw) if "." in raw else int(raw)


def resolve_date(text: str, today: Optional[date] = None) -> str:
    """Target calendar day for a message: yesterday if mentioned, else today."""
    today = today or datetime.now(settings.user_timezone).date()
    if "yesterday" in text.lower():
        today = today - timedelta(days=1)
    return today.isoformat()


def infer_unit(text: str) -> Unit:
    """Keyword scan used for user-defined activities."""
    text = text.lower()
    # "min"/"hr" must stand alone, otherwise "mindful" or "three" would match
    if "minute" in text or re.search(r"\d\s*mins?\b|\bmins?\b", text):
        return Unit.MINUTES
    if "hour" in text or re.search(r"\d\s*hrs?\b|\bhrs?\b", text):
        return Unit.HOURS
    if "page" in text or "chapter" in text:
        return Unit.PAGES
    if "mile" in text or "km" in text or "step" in text:
        return Unit.DISTANCE
    return Unit.SESSION


def first_number(text: str, default: Number = 1) -> Number:
    match = re.search(NUMBER_PATTERN, text)
    return to_number(match.group(1)) if match else default


def _contains_any(*keywords: str) -> Callable[[str], bool]:
    return lambda text: any(keyword in text for keyword in keywords)


def _extract_coding(text: str) -> Tuple[Number, Unit]:
    questions = re.search(
        r"(\d+)\s*(?:coding|leetcode|algorithm|dsa)?\s*(?:problems?|questions?|challenges?)", text
    )
    if questions:
        return int(questions.group(1)), Unit.QUESTIONS

    minutes = re.search(r"(?:coded|coding)\s*(?:for\s*)?(\d+)\s*(?:minutes?|mins?)", text)
    if minutes:
        return int(minutes.group(1)), Unit.MINUTES

    return 1, Unit.SESSION


def _extract_gym(text: str) -> Tuple[Number, Unit]:
    return 1, Unit.SESSION


def _extract_sleep(text: str) -> Tuple[Number, Unit]:
    match = re.search(r"(?:slept|sleep)\s*(?:for\s*)?" + NUMBER_PATTERN + r"\s*(?:hours?|hrs?)", text)
    return (to_number(match.group(1)) if match else 8), Unit.HOURS


def _extract_reading(text: str) -> Tuple[Number, Unit]:
    pages = re.search(NUMBER_PATTERN + r"\s*(?:pages?|chapters?)", text)
    if pages:
        return to_number(pages.group(1)), Unit.PAGES

    minutes = re.search(NUMBER_PATTERN + r"\s*(?:minutes?|mins?)", text)
    if minutes:
        return to_number(minutes.group(1)), Unit.MINUTES

    return 1, Unit.SESSION


def _extract_meditation(text: str) -> Tuple[Number, Unit]:
    minutes = re.search(NUMBER_PATTERN + r"\s*(?:minutes?|mins?)", text)
    return (to_number(minutes.group(1)) if minutes else 10), Unit.MINUTES


def _mentions_reading(text: str) -> bool:
    return bool(re.search(r"\bread\b|reading|\bbooks?\b", text))


BUILTIN_RULES: List[LogRule] = [
    LogRule("coding", _contains_any("coding", "dsa", "code", "leetcode", "problems", "algorithm"), _extract_coding),
    LogRule("gym", _contains_any("gym", "workout", "exercise"), _extract_gym),
    LogRule("sleep", _contains_any("sleep", "slept"), _extract_sleep),
    LogRule("reading", _mentions_reading, _extract_reading),
    LogRule("meditation", _contains_any("meditat", "mindful"), _extract_meditation),
]

BUILTIN_ACTIVITIES = [rule.activity for rule in BUILTIN_RULES]


def matches_known_activity(text: str, name: str) -> bool:
    """Substring match on the lowercased name, no word boundaries."""
    lowered = name.lower()
    if lowered in text:
        return True
    return bool(re.search(r"(?:did|completed|finished)\s+" + re.escape(lowered), text))


class IntentParser:
    """Parses habit logging messages. Stateless."""

    def __init__(self, rules: Optional[List[LogRule]] = None):
        self.rules = rules if rules is not None else BUILTIN_RULES

    def parse(
        self,
        message: str,
        known_activities: Iterable[str] = (),
        today: Optional[date] = None,
    ) -> Optional[ParsedIntent]:
        """
        Parse a message into a ParsedIntent.

        Args:
            message: Raw user text
            known_activities: User-defined activity names, checked before builtins
            today: Override for the current calendar day (tests)

        Returns:
            ParsedIntent, or None when the message is not a logging intent
        """
        text = message.lower().strip()
        target_date = resolve_date(text, today)

        for name in known_activities:
            if matches_known_activity(text, name):
                return ParsedIntent(
                    activity=name,
                    amount=first_number(text),
                    unit=infer_unit(text),
                    date=target_date,
                )

        for rule in self.rules:
            extracted = rule.apply(text)
            if extracted is not None:
                amount, unit = extracted
                return ParsedIntent(activity=rule.activity, amount=amount, unit=unit, date=target_date)

        return None


intent_parser = IntentParser()


def parse_log_intent(
    message: str,
    known_activities: Iterable[str] = (),
    today: Optional[date] = None,
) -> Optional[ParsedIntent]:
    """Module-level shortcut for `intent_parser.parse`."""
    return intent_parser.parse(message, known_activities, today)
