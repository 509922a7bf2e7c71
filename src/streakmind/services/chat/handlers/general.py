"""General handlers - open questions and messages nothing else understood."""
from streakmind.services.chat.handlers.base import IntentHandler, ChatContext, ChatResponse
from streakmind.services.personality import PersonalityMode, build_system_prompt

GENERATION_UNAVAILABLE = "⚠️ I couldn't reach the brain right now. Please try again in a moment."

PARSE_MISS_REPLY = (
    "I didn't quite catch that. Try something like \"Did 2 coding questions\", "
    "\"Slept 7 hours yesterday\" or \"I want to track yoga\"."
)


class GeneralHandler(IntentHandler):
    """Handle general intent - questions unrelated to habits go to the assistant as-is."""

    actions = ['general']

    def handle(self, context: ChatContext) -> ChatResponse:
        response = self._generated_response(
            context,
            fallback=GENERATION_UNAVAILABLE,
            context_for_llm="",
        )
        response.system_prompt_override = build_system_prompt(
            PersonalityMode.DEFAULT,
            context.state.streaks,
            context.app_settings,
            general=True,
            memory_context=context.memory_context,
        )
        return response


class ParseMissHandler(IntentHandler):
    """Handle parse_miss intent - habit-sounding text with nothing to log."""

    actions = ['parse_miss']

    def handle(self, context: ChatContext) -> ChatResponse:
        return self._final_response(context, PARSE_MISS_REPLY)
