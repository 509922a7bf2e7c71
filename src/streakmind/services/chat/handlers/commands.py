"""Command handler - delete, rename and set points on activities from chat."""
from streakmind.services.chat.handlers.base import IntentHandler, ChatContext, ChatResponse
from streakmind.services.intent import CommandAction


class ActivityCommandHandler(IntentHandler):
    """Handle activity_command intent.

    Unknown activity names produce a plain reply rather than an error.
    """

    actions = ['activity_command']

    def handle(self, context: ChatContext) -> ChatResponse:
        command = context.command
        if command is None or not command.is_command:
            return self._final_response(context, "I couldn't work out which activity you meant.")

        state = context.state
        name = state.resolve_name(command.activity) or command.activity
        changed = False

        if command.action == CommandAction.DELETE:
            changed = state.delete_activity(name)
            answer = (
                f'Deleted "{name}" from your habits.' if changed
                else f'Couldn\'t find "{command.activity}" to delete.'
            )

        elif command.action == CommandAction.RENAME:
            changed = state.update_activity(name, name=command.new_name)
            answer = (
                f'Renamed "{name}" to "{command.new_name}".' if changed
                else f'Couldn\'t rename "{command.activity}".'
            )

        else:
            changed = state.update_activity(name, custom_points=command.points)
            answer = (
                f'Set "{name}" to {command.points} points per session.' if changed
                else f'Couldn\'t set points for "{command.activity}".'
            )

        return self._final_response(
            context,
            answer,
            command_action=command.action.value,
            state_changed=changed,
        )
