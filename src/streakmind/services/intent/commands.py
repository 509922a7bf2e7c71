"""Command Interpreter - recognises CRUD-style commands about activities."""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from streakmind.services.activity_log import Number
from streakmind.services.intent.parser import to_number


class CommandAction(Enum):
    """Activity management commands."""
    NONE = "none"
    DELETE = "delete"
    RENAME = "rename"
    SET_POINTS = "set_points"


@dataclass(frozen=True)
class Command:
    """Result of command interpretation."""
    action: CommandAction = CommandAction.NONE
    activity: Optional[str] = None
    new_name: Optional[str] = None
    points: Optional[Number] = None

    @property
    def is_command(self) -> bool:
        return self.action != CommandAction.NONE


NO_COMMAND = Command()

_DELETE_PATTERN = re.compile(r"(?:delete|remove)\s+(?:the\s+)?(.+?)(?:\s+(?:activity|habit))?$", re.IGNORECASE)
_RENAME_PATTERN = re.compile(r"(?:rename|change\s+(?:the\s+)?name\s+of)\s+(.+?)\s+to\s+(.+)$", re.IGNORECASE)
_SET_POINTS_PATTERN = re.compile(
    r"set\s+(.+?)\s+(?:points?\s+)?to\s+(\d+(?:\.\d+)?)(?:\s*points?)?$", re.IGNORECASE
)
_STRAY_POINTS = re.compile(r"\bpoints?\b", re.IGNORECASE)
_LEADING_FILLER = re.compile(r"^(?:for|of)\s+", re.IGNORECASE)


def _clean_name(raw: str) -> str:
    name = raw.strip().strip("\"'")
    return re.sub(r"\s+", " ", name).strip()


def parse_command(message: str) -> Command:
    """
    Interpret a management command.

    Keyword presence selects the command; the pattern must then capture every
    required part, otherwise the message is not treated as a command.
    """
    text = message.strip().rstrip(".!?")
    lowered = text.lower()

    if "delete" in lowered or "remove" in lowered:
        match = _DELETE_PATTERN.search(text)
        if match and _clean_name(match.group(1)):
            return Command(action=CommandAction.DELETE, activity=_clean_name(match.group(1)))

    if "rename" in lowered or "change name" in lowered or "change the name" in lowered:
        match = _RENAME_PATTERN.search(text)
        if match:
            old_name, new_name = _clean_name(match.group(1)), _clean_name(match.group(2))
            if old_name and new_name:
                return Command(action=CommandAction.RENAME, activity=old_name, new_name=new_name)

    if "set points" in lowered or "points to" in lowered:
        match = _SET_POINTS_PATTERN.search(text)
        if match:
            name = _STRAY_POINTS.sub(" ", match.group(1))
            name = _clean_name(_LEADING_FILLER.sub("", _clean_name(name)))
            if name:
                return Command(action=CommandAction.SET_POINTS, activity=name, points=to_number(match.group(2)))

    return NO_COMMAND
