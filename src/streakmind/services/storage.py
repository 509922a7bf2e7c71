"""
Document storage - whole-snapshot load/save for the app's state documents.

Three documents are kept independently: habit state (activities, log, streaks),
the chat transcript, and user settings. Each is read and written as a single
unit; there is no transaction spanning documents.

A document that is missing, unreadable or corrupt loads as its default value.
"""
import copy
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Generic, TypeVar

from streakmind.core.logging import logger

T = TypeVar("T")


class DocumentStore(ABC, Generic[T]):
    """Load/save contract for one named document."""

    @abstractmethod
    def load(self) -> T:
        """Return the stored snapshot, or the default when there is none."""

    @abstractmethod
    def save(self, snapshot: T) -> None:
        """Replace the stored snapshot."""


class JsonFileStore(DocumentStore[T]):
    """Document kept as a JSON file."""

    def __init__(
        self,
        path: Path,
        default: Callable[[], T],
        decode: Callable[[Any], T] = lambda raw: raw,
        encode: Callable[[T], Any] = lambda value: value,
    ):
        self.path = Path(path)
        self.default = default
        self.decode = decode
        self.encode = encode

    def load(self) -> T:
        try:
            if self.path.exists():
                with open(self.path, 'r', encoding='utf-8') as f:
                    return self.decode(json.load(f))
        except Exception as e:
            logger.error(f"Error loading {self.path}, starting from defaults: {e}")
        return self.default()

    def save(self, snapshot: T) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(self.encode(snapshot), f, indent=2, ensure_ascii=False)
        tmp_path.replace(self.path)


class InMemoryStore(DocumentStore[T]):
    """Document kept in process memory. Snapshots are copied on the way in and out."""

    def __init__(self, default: Callable[[], T]):
        self.default = default
        self._snapshot = None

    def load(self) -> T:
        if self._snapshot is None:
            return self.default()
        return copy.deepcopy(self._snapshot)

    def save(self, snapshot: T) -> None:
        self._snapshot = copy.deepcopy(snapshot)
