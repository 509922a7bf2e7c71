"""Activity definitions - the set of habits the user tracks."""
import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Any, Iterator

from streakmind.core.config import settings


class VisualizationType(Enum):
    """Dashboard hint for how an activity is charted."""
    HEATMAP = "heatmap"
    BAR = "bar"
    PROGRESS = "progress"
    PIE = "pie"


def infer_visualization(name: str) -> VisualizationType:
    """Pick a default chart from keywords in the activity name."""
    text = name.lower()
    if "coding" in text or "code" in text:
        return VisualizationType.HEATMAP
    if "gym" in text or "workout" in text:
        return VisualizationType.PROGRESS
    if "sleep" in text:
        return VisualizationType.BAR
    return VisualizationType.PIE


@dataclass
class ActivityDefinition:
    """A named, trackable habit."""
    name: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    custom_points_per_unit: Optional[float] = None
    visualization_type: VisualizationType = VisualizationType.PIE
    created_at: str = field(default_factory=lambda: datetime.now(settings.user_timezone).isoformat())
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["visualization_type"] = self.visualization_type.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActivityDefinition":
        data = dict(data)
        if "visualization_type" in data:
            data["visualization_type"] = VisualizationType(data["visualization_type"])
        return cls(**data)


class ActivityDefinitionStore:
    """Insertion-ordered collection of activity definitions keyed by name.

    Names are case-sensitive. The store only knows about definitions; the
    cascade into logs and streaks on rename/delete is done by the tracker.
    """

    def __init__(self, definitions: Optional[List[ActivityDefinition]] = None):
        self._definitions: Dict[str, ActivityDefinition] = {}
        for definition in definitions or []:
            self._definitions[definition.name] = definition

    def __contains__(self, name: str) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[ActivityDefinition]:
        return iter(list(self._definitions.values()))

    def __len__(self) -> int:
        return len(self._definitions)

    def get(self, name: str) -> Optional[ActivityDefinition]:
        return self._definitions.get(name)

    def names(self) -> List[str]:
        return list(self._definitions.keys())

    def find(self, name: str) -> Optional[ActivityDefinition]:
        """Exact lookup, falling back to a case-insensitive match."""
        if name in self._definitions:
            return self._definitions[name]
        lowered = name.lower()
        for definition in self._definitions.values():
            if definition.name.lower() == lowered:
                return definition
        return None

    def create(
        self,
        name: str,
        custom_points_per_unit: Optional[float] = None,
        visualization_type: Optional[VisualizationType] = None,
        description: Optional[str] = None,
    ) -> Optional[ActivityDefinition]:
        """Create a definition. Returns None if the name is taken."""
        if name in self._definitions:
            return None

        definition = ActivityDefinition(
            name=name,
            custom_points_per_unit=custom_points_per_unit,
            visualization_type=visualization_type or infer_visualization(name),
            description=description,
        )
        self._definitions[name] = definition
        return definition

    def rename(self, old_name: str, new_name: str) -> bool:
        """Rename in place, keeping the definition's position."""
        if old_name not in self._definitions or new_name in self._definitions:
            return False

        renamed: Dict[str, ActivityDefinition] = {}
        for name, definition in self._definitions.items():
            if name == old_name:
                definition.name = new_name
                renamed[new_name] = definition
            else:
                renamed[name] = definition
        self._definitions = renamed
        return True

    def remove(self, name: str) -> bool:
        return self._definitions.pop(name, None) is not None

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: definition.to_dict() for name, definition in self._definitions.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, Any]]) -> "ActivityDefinitionStore":
        return cls([ActivityDefinition.from_dict(item) for item in data.values()])
