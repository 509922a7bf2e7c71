"""Conversation transcript (the messages document)."""
import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List

from streakmind.core.config import settings
from streakmind.core.logging import logger
from streakmind.services.storage import DocumentStore


@dataclass
class ChatMessage:
    """One transcript line."""
    role: str  # user or assistant
    message: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(default_factory=lambda: datetime.now(settings.user_timezone).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatMessage":
        return cls(**data)


def decode_transcript(raw: Any) -> List[ChatMessage]:
    return [ChatMessage.from_dict(item) for item in raw]


def encode_transcript(messages: List[ChatMessage]) -> List[Dict[str, Any]]:
    return [message.to_dict() for message in messages]


class Transcript:
    """Chat history. Clearing it never touches the activity log."""

    def __init__(self, store: DocumentStore[List[ChatMessage]]):
        self.store = store

    def list(self) -> List[ChatMessage]:
        return self.store.load()

    def as_history(self, limit: int) -> List[Dict[str, str]]:
        """The last `limit` messages as chat-completion turns, oldest first."""
        if limit <= 0:
            return []
        return [{"role": message.role, "content": message.message} for message in self.store.load()[-limit:]]

    def add(self, *messages: ChatMessage) -> None:
        history = self.store.load()
        history.extend(messages)
        self.store.save(history)

    def delete(self, message_id: str) -> bool:
        history = self.store.load()
        remaining = [message for message in history if message.id != message_id]
        if len(remaining) == len(history):
            return False
        self.store.save(remaining)
        return True

    def clear(self) -> int:
        count = len(self.store.load())
        self.store.save([])
        logger.info(f"Cleared {count} transcript messages")
        return count
