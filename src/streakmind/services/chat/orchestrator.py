"""Chat Orchestrator - routes a message to the right handler.

Routing order for one message:
1. "start tracking X" requests (never also logged)
2. general questions unrelated to habits (never logged, never commands)
3. delete / rename / set-points commands
4. activity logging
5. anything else is a parse miss
"""
from typing import Any, Dict, Optional, Type

from streakmind.core.logging import logger
from streakmind.services.chat.handlers.base import IntentHandler, ChatContext, ChatResponse
from streakmind.services.habit_state import HabitState
from streakmind.services.intent import (
    IntentParser,
    detect_tracking_request,
    intent_parser,
    is_general_query,
    parse_command,
)
from streakmind.services.personality import build_system_prompt, detect_personality
from streakmind.services.streaks import StreakEngine
from streakmind.services.user_settings import AppSettings


class HandlerRegistry:
    """Registry for intent handlers.

    Handlers register themselves with the actions they can handle.
    The orchestrator looks up handlers by action name.
    """

    def __init__(self):
        self._handlers: Dict[str, IntentHandler] = {}
        self._handler_instances: Dict[Type[IntentHandler], IntentHandler] = {}

    def register(self, handler_class: Type[IntentHandler]) -> None:
        """Register a handler class for its declared actions."""
        if handler_class not in self._handler_instances:
            self._handler_instances[handler_class] = handler_class()

        handler = self._handler_instances[handler_class]

        for action in handler.actions:
            if action in self._handlers:
                logger.warning(
                    f"Action '{action}' already registered to {self._handlers[action].__class__.__name__}, "
                    f"overwriting with {handler_class.__name__}"
                )
            self._handlers[action] = handler
            logger.debug(f"Registered handler {handler_class.__name__} for action '{action}'")

    def get_handler(self, action: str) -> Optional[IntentHandler]:
        """Get the handler for a given action."""
        return self._handlers.get(action)

    def list_handlers(self) -> Dict[str, str]:
        """List all registered handlers and their actions."""
        return {action: handler.__class__.__name__ for action, handler in self._handlers.items()}

    def clear(self) -> None:
        """Clear all registered handlers (useful for testing)."""
        self._handlers.clear()
        self._handler_instances.clear()


def route_message(message: str, state: HabitState, parser: IntentParser = intent_parser) -> Dict[str, Any]:
    """Decide what a message is. Pure: does not touch the state."""
    new_activity = detect_tracking_request(message)
    if new_activity:
        return {'action': 'activity_track', 'new_activity': new_activity}

    if is_general_query(message, state.known_activities()):
        return {'action': 'general'}

    command = parse_command(message)
    if command.is_command:
        return {'action': 'activity_command', 'command': command}

    parsed = parser.parse(message, state.custom_activities())
    if parsed is not None:
        return {'action': 'activity_log', 'parsed': parsed}

    return {'action': 'parse_miss'}


class ChatOrchestrator:
    """Routes messages and dispatches them to handlers.

    The orchestrator works on an already-loaded HabitState; loading, saving and
    reply generation belong to the caller.
    """

    def __init__(
        self,
        registry: Optional[HandlerRegistry] = None,
        parser: IntentParser = intent_parser,
        streak_engine: Optional[StreakEngine] = None,
    ):
        self.registry = registry or HandlerRegistry()
        self.parser = parser
        self.streak_engine = streak_engine or StreakEngine()
        if not self.registry.list_handlers():
            self._register_handlers()

    def _register_handlers(self) -> None:
        """Register all available intent handlers."""
        from streakmind.services.chat.handlers.tracking import ActivityTrackHandler
        from streakmind.services.chat.handlers.commands import ActivityCommandHandler
        from streakmind.services.chat.handlers.activity_log import ActivityLogHandler
        from streakmind.services.chat.handlers.general import GeneralHandler, ParseMissHandler

        self.registry.register(ActivityTrackHandler)
        self.registry.register(ActivityCommandHandler)
        self.registry.register(ActivityLogHandler)
        self.registry.register(GeneralHandler)
        self.registry.register(ParseMissHandler)

        logger.info(f"Registered {len(self.registry.list_handlers())} handlers")

    def handle(
        self,
        message: str,
        state: HabitState,
        app_settings: AppSettings,
        memory_context: str = "",
    ) -> ChatResponse:
        """
        Route and handle one message against `state`.

        `memory_context` summarises what is remembered about the user and goes
        into the system prompt of generated replies.

        Returns:
            ChatResponse; when `is_final` is False the caller should generate
            the reply from `context_for_llm` and `system_prompt_override`
        """
        logger.info(f"[Orchestrator] Routing: {message[:50]}...")
        intent = route_message(message, state, self.parser)
        action = intent['action']
        logger.info(f"[Orchestrator] Intent: {action}")

        context = ChatContext(
            message=message,
            intent=intent,
            state=state,
            app_settings=app_settings,
            streak_engine=self.streak_engine,
            memory_context=memory_context,
        )

        handler = self.registry.get_handler(action)
        if handler is None:
            logger.error(f"[Orchestrator] No handler for action '{action}'")
            return ChatResponse(
                message=message,
                answer="I don't know how to handle that request yet.",
                intent=intent,
            )

        try:
            response = handler.handle(context)
        except Exception as e:
            logger.error(f"Handler error: {e}", exc_info=True)
            return ChatResponse(
                message=message,
                answer="Something went wrong while handling that. Nothing was saved.",
                intent=intent,
            )

        response.intent = intent
        if not response.is_final and response.system_prompt_override is None:
            response.system_prompt_override = build_system_prompt(
                detect_personality(message), state.streaks, app_settings, memory_context=memory_context
            )
        return response
