"""Chat intent handlers."""
from streakmind.services.chat.handlers.base import IntentHandler, ChatResponse, ChatContext
from streakmind.services.chat.handlers.tracking import ActivityTrackHandler
from streakmind.services.chat.handlers.commands import ActivityCommandHandler
from streakmind.services.chat.handlers.activity_log import ActivityLogHandler
from streakmind.services.chat.handlers.general import GeneralHandler, ParseMissHandler

__all__ = [
    # Base classes
    'IntentHandler',
    'ChatResponse',
    'ChatContext',
    # Handlers
    'ActivityTrackHandler',
    'ActivityCommandHandler',
    'ActivityLogHandler',
    'GeneralHandler',
    'ParseMissHandler',
]
