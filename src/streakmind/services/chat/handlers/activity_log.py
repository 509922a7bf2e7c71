"""Log handler - record an activity described in chat."""
from streakmind.core.logging import logger
from streakmind.services.chat.handlers.base import IntentHandler, ChatContext, ChatResponse


def fallback_reply(activity: str, points: int, streak_updated: bool, streak: int) -> str:
    """Templated reply used when no generated text is available."""
    reply = f"Great job! +{points} points."
    if streak_updated:
        reply += f" {activity} streak: {streak} days!"
    return reply


class ActivityLogHandler(IntentHandler):
    """Handle activity_log intent - score the entry and update the streak."""

    actions = ['activity_log']

    def handle(self, context: ChatContext) -> ChatResponse:
        parsed = context.parsed
        if parsed is None:
            return self._final_response(context, "I couldn't find an activity to log.")

        state = context.state
        entry, streak_updated = state.record_log(parsed, context.message, context.streak_engine)
        streak = state.streaks.get(entry.activity, 0)

        logger.info(
            f"[Log] {entry.activity}: {entry.amount} {entry.unit.value} on {entry.date} "
            f"(+{entry.points} points, streak {streak})"
        )

        summary = (
            f"User logged: {entry.activity} ({entry.amount} {entry.unit.value}). "
            f"Points awarded: {entry.points}. "
            + (f"Streak updated to {streak}." if streak_updated else "Streak unchanged.")
        )

        return self._generated_response(
            context,
            fallback=fallback_reply(entry.activity, entry.points, streak_updated, streak),
            context_for_llm=summary,
            log_entry=entry,
            points_awarded=entry.points,
            streak_updated=streak_updated,
            current_streak=streak,
            state_changed=True,
        )
