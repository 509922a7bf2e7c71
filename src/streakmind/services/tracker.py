"""
Habit tracker - the single entry point for messages, stats and activity CRUD.

Each operation is one load-mutate-save transaction on the habit state, guarded
by a process-wide lock. For chat messages the habit state is saved before the
reply is generated, so a failed or slow generator never loses a log. The
transcript is written after the reply exists. The user memory is updated from both
sides of every exchange.
"""
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from streakmind.core.config import settings
from streakmind.core.logging import logger
from streakmind.services.activities import ActivityDefinition, VisualizationType
from streakmind.services.activity_log import LogEntry
from streakmind.services.badges import evaluate_badges
from streakmind.services.chat.orchestrator import ChatOrchestrator
from streakmind.services.habit_state import HabitState, UNSET, habit_state_file
from streakmind.services.llm import GenerationError, get_llm_service
from streakmind.services.memory import MemoryService, UserMemory, decode_memory, encode_memory
from streakmind.services.storage import DocumentStore, InMemoryStore, JsonFileStore
from streakmind.services.streaks import StreakEngine, get_policy
from streakmind.services.transcript import ChatMessage, Transcript, decode_transcript, encode_transcript
from streakmind.services.user_settings import AppSettings, SettingsService, decode_settings, encode_settings


class ReplyGenerator(Protocol):
    """Anything that turns a prompt into reply text (see LLMService.call)."""

    def call(self, system_prompt: str, user_content: str, history: Optional[List[Dict]] = None) -> str:
        ...

    def health_check(self) -> str:
        ...


@dataclass
class IngestResult:
    """Outcome of one chat message."""
    reply: str
    action: str
    log_entry: Optional[LogEntry] = None
    points_awarded: int = 0
    streak_updated: bool = False
    current_streak: Optional[int] = None
    activity_created: Optional[str] = None
    command_action: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reply": self.reply,
            "action": self.action,
            "log_entry": self.log_entry.to_dict() if self.log_entry else None,
            "points_awarded": self.points_awarded,
            "streak_updated": self.streak_updated,
            "current_streak": self.current_streak,
            "activity_created": self.activity_created,
            "command_action": self.command_action,
        }


class HabitTracker:
    """Coordinates parsing, scoring, streaks, persistence and replies."""

    def __init__(
        self,
        state_store: DocumentStore[HabitState],
        transcript_store: DocumentStore[List[ChatMessage]],
        settings_store: DocumentStore[AppSettings],
        generator: Optional[ReplyGenerator] = None,
        streak_engine: Optional[StreakEngine] = None,
        memory_store: Optional[DocumentStore[UserMemory]] = None,
    ):
        self.state_store = state_store
        self.transcript = Transcript(transcript_store)
        self.settings = SettingsService(settings_store)
        self.memory = MemoryService(memory_store or InMemoryStore(UserMemory))
        self.streak_engine = streak_engine or StreakEngine(get_policy(settings.tracking.streak_policy))
        self.orchestrator = ChatOrchestrator(streak_engine=self.streak_engine)
        self._generator = generator
        self._lock = threading.Lock()

    @property
    def generator(self) -> ReplyGenerator:
        if self._generator is None:
            self._generator = get_llm_service()
        return self._generator

    # =========================================================================
    # Chat
    # =========================================================================

    def ingest(self, message: str) -> IngestResult:
        """
        Handle one user message.

        Args:
            message: Raw user text

        Returns:
            IngestResult with the reply and whatever was logged or changed
        """
        with self._lock:
            state = self.state_store.load()
            app_settings = self.settings.get()
            memory = self.memory.record_message(message, is_user=True, known_activities=state.known_activities())
            history = self.transcript.as_history(settings.tracking.history_messages)
            response = self.orchestrator.handle(message, state, app_settings, memory.to_context_string())
            if response.state_changed:
                self.state_store.save(state)
            if response.log_entry is not None:
                self.memory.record_activity(response.log_entry.activity)

        reply = response.answer
        if not response.is_final:
            reply = self._generate_reply(
                message, response.context_for_llm, response.system_prompt_override, reply, history
            )

        with self._lock:
            self.transcript.add(
                ChatMessage(role='user', message=message),
                ChatMessage(role='assistant', message=reply),
            )
            self.memory.record_message(reply, is_user=False)

        return IngestResult(
            reply=reply,
            action=response.action or 'parse_miss',
            log_entry=response.log_entry,
            points_awarded=response.points_awarded,
            streak_updated=response.streak_updated,
            current_streak=response.current_streak,
            activity_created=response.activity_created,
            command_action=response.command_action,
        )

    def _generate_reply(
        self,
        message: str,
        context_for_llm: str,
        system_prompt: Optional[str],
        fallback: str,
        history: List[Dict[str, str]],
    ) -> str:
        """Ask the generator for a reply; any failure yields the templated fallback."""
        user_content = context_for_llm or message
        try:
            return self.generator.call(system_prompt=system_prompt or "", user_content=user_content, history=history)
        except GenerationError as e:
            logger.warning(f"Reply generation failed, using fallback: {e}")
        except Exception as e:
            logger.error(f"Unexpected reply generation error, using fallback: {e}", exc_info=True)
        return fallback

    # =========================================================================
    # Stats
    # =========================================================================

    def get_stats(self) -> Dict[str, Any]:
        """Totals, streaks, badges, recent logs (newest first) and activities."""
        state = self.state_store.load()
        return {
            "total_points": state.logs.total_points(),
            "streaks": dict(state.streaks),
            "badges": [badge.to_dict() for badge in evaluate_badges(state.streaks)],
            "logs": [entry.to_dict() for entry in state.logs.recent(settings.tracking.stats_log_limit)],
            "activities": state.activities.to_dict(),
        }

    # =========================================================================
    # Activities
    # =========================================================================

    def create_activity(
        self,
        name: str,
        custom_points: Optional[float] = None,
        visualization_type: Optional[VisualizationType] = None,
        description: Optional[str] = None,
    ) -> Optional[ActivityDefinition]:
        """Create an activity. Returns None if one with that name exists."""
        with self._lock:
            state = self.state_store.load()
            definition = state.create_activity(name, custom_points, visualization_type, description)
            if definition is not None:
                self.state_store.save(state)
            return definition

    def update_activity(
        self,
        old_name: str,
        name: Optional[str] = None,
        visualization_type: Optional[VisualizationType] = None,
        custom_points: Any = UNSET,
        description: Any = UNSET,
    ) -> bool:
        """Update an activity; a rename moves its logs and streak too."""
        with self._lock:
            state = self.state_store.load()
            updated = state.update_activity(old_name, name, visualization_type, custom_points, description)
            if updated:
                self.state_store.save(state)
            return updated

    def delete_activity(self, name: str) -> bool:
        """Delete an activity with its streak and every log entry for it."""
        with self._lock:
            state = self.state_store.load()
            deleted = state.delete_activity(name)
            if deleted:
                self.state_store.save(state)
            return deleted

    def delete_log_entry(self, entry_id: str) -> Optional[LogEntry]:
        """Delete a single log entry and recount its activity's streak."""
        with self._lock:
            state = self.state_store.load()
            entry = state.delete_log_entry(entry_id, self.streak_engine)
            if entry is not None:
                self.state_store.save(state)
                logger.info(f"Deleted log entry {entry_id} ({entry.activity} on {entry.date})")
            return entry

    # =========================================================================
    # Transcript & settings
    # =========================================================================

    def get_messages(self) -> List[ChatMessage]:
        return self.transcript.list()

    def delete_message(self, message_id: str) -> bool:
        with self._lock:
            return self.transcript.delete(message_id)

    def clear_messages(self) -> int:
        with self._lock:
            return self.transcript.clear()

    def get_settings(self) -> AppSettings:
        return self.settings.get()

    def update_settings(self, updates: Dict[str, Any]) -> AppSettings:
        with self._lock:
            return self.settings.update(updates)

    def reset_settings(self) -> AppSettings:
        with self._lock:
            return self.settings.reset()

    # =========================================================================
    # Memory & health
    # =========================================================================

    def get_memory(self) -> UserMemory:
        return self.memory.get()

    def clear_memory(self, fields: List[str]) -> UserMemory:
        """Reset memory sections or categories. Raises MemoryFieldError for unknown names."""
        with self._lock:
            return self.memory.clear(fields)

    def remove_memory_item(self, category: str, item: str) -> bool:
        with self._lock:
            return self.memory.remove_item(category, item)

    def llm_health(self) -> str:
        """Status reported by the reply generator's health check."""
        return self.generator.health_check()


def create_tracker(generator: Optional[ReplyGenerator] = None) -> HabitTracker:
    """Build a tracker backed by JSON files in the configured data folder."""
    return HabitTracker(
        state_store=habit_state_file(settings.state_file),
        transcript_store=JsonFileStore(
            settings.transcript_file, default=list, decode=decode_transcript, encode=encode_transcript
        ),
        settings_store=JsonFileStore(
            settings.settings_file, default=AppSettings, decode=decode_settings, encode=encode_settings
        ),
        generator=generator,
        memory_store=JsonFileStore(
            settings.memory_file, default=UserMemory, decode=decode_memory, encode=encode_memory
        ),
    )
