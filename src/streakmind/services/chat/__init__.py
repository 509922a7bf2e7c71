"""Chat service package.

The ChatOrchestrator coordinates:
1. Message routing (tracking request, general query, command, log, miss)
2. Handler dispatch (via HandlerRegistry)
"""
from streakmind.services.chat.orchestrator import ChatOrchestrator, HandlerRegistry, route_message
from streakmind.services.chat.handlers.base import IntentHandler, ChatContext, ChatResponse

__all__ = [
    'ChatOrchestrator',
    'HandlerRegistry',
    'route_message',
    'IntentHandler',
    'ChatContext',
    'ChatResponse',
]
