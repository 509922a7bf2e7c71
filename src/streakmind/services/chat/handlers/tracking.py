"""Tracking handler - start tracking a new activity from chat."""
from streakmind.core.logging import logger
from streakmind.services.chat.handlers.base import IntentHandler, ChatContext, ChatResponse


class ActivityTrackHandler(IntentHandler):
    """Handle activity_track intent - "I want to track yoga"."""

    actions = ['activity_track']

    def handle(self, context: ChatContext) -> ChatResponse:
        name = context.new_activity
        if not name:
            return self._final_response(context, "Tell me which habit you'd like to track.")

        existing = context.state.resolve_name(name)
        if existing is not None:
            return self._final_response(
                context,
                f'You\'re already tracking "{existing}". Just tell me when you do it!',
            )

        context.state.create_activity(name)
        logger.info(f"[Track] New activity from chat: {name}")

        return self._generated_response(
            context,
            fallback=(
                f'Perfect! I\'ve added "{name}" to your habits. '
                "You can now track it by mentioning it in our chat!"
            ),
            context_for_llm=(
                f'User wants to start tracking a new habit: "{name}". Congratulate them on adding '
                "this new habit and encourage them to start their first log."
            ),
            activity_created=name,
            current_streak=0,
            state_changed=True,
        )
