"""Base classes for chat intent handlers."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Any, List, Optional

from streakmind.services.activity_log import LogEntry
from streakmind.services.habit_state import HabitState
from streakmind.services.intent import Command, ParsedIntent
from streakmind.services.streaks import StreakEngine
from streakmind.services.user_settings import AppSettings


@dataclass
class ChatContext:
    """Context passed to intent handlers.

    Handlers may mutate `state`; the caller persists it when the response says
    the state changed.
    """
    message: str
    intent: Dict[str, Any]
    state: HabitState
    app_settings: AppSettings
    streak_engine: StreakEngine
    memory_context: str = ""

    @property
    def action(self) -> str:
        return self.intent.get('action', 'parse_miss')

    @property
    def parsed(self) -> Optional[ParsedIntent]:
        return self.intent.get('parsed')

    @property
    def command(self) -> Optional[Command]:
        return self.intent.get('command')

    @property
    def new_activity(self) -> Optional[str]:
        return self.intent.get('new_activity')


@dataclass
class ChatResponse:
    """Standard response from intent handlers.

    When `is_final` is False the orchestrator's caller asks the text generator
    for a reply using `context_for_llm`, and `answer` is the templated reply used
    if generation fails.
    """
    message: str
    answer: str

    # Logging results
    log_entry: Optional[LogEntry] = None
    points_awarded: int = 0
    streak_updated: bool = False
    current_streak: Optional[int] = None

    # Management results
    activity_created: Optional[str] = None
    command_action: Optional[str] = None

    # Whether the habit state was mutated and must be saved
    state_changed: bool = False

    intent: Optional[Dict[str, Any]] = None

    is_final: bool = True
    context_for_llm: str = ""
    system_prompt_override: Optional[str] = None

    @property
    def action(self) -> Optional[str]:
        return self.intent.get('action') if self.intent else None


class IntentHandler(ABC):
    """Abstract base class for intent handlers.

    Each handler is responsible for processing a specific intent type
    and returning a ChatResponse.
    """

    actions: List[str] = []

    @abstractmethod
    def handle(self, context: ChatContext) -> ChatResponse:
        """
        Handle the intent and return a response.

        Args:
            context: ChatContext with message, intent and habit state

        Returns:
            ChatResponse with the result
        """
        pass

    def _final_response(self, context: ChatContext, answer: str, **kwargs) -> ChatResponse:
        """Create a response that needs no generated text."""
        return ChatResponse(message=context.message, answer=answer, is_final=True, **kwargs)

    def _generated_response(
        self,
        context: ChatContext,
        fallback: str,
        context_for_llm: str,
        **kwargs
    ) -> ChatResponse:
        """Create a response whose text comes from the generator, with a templated fallback."""
        return ChatResponse(
            message=context.message,
            answer=fallback,
            is_final=False,
            context_for_llm=context_for_llm,
            **kwargs
        )
