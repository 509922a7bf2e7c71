"""Intent recognition for habit messages.

- parser: free text -> ParsedIntent (activity, amount, unit, date)
- commands: delete / rename / set-points commands
- classifier: general-question detection and "start tracking X" requests
"""
from streakmind.services.intent.parser import (
    IntentParser,
    LogRule,
    ParsedIntent,
    BUILTIN_ACTIVITIES,
    intent_parser,
    parse_log_intent,
)
from streakmind.services.intent.commands import Command, CommandAction, parse_command
from streakmind.services.intent.classifier import detect_tracking_request, is_general_query

__all__ = [
    'IntentParser',
    'LogRule',
    'ParsedIntent',
    'BUILTIN_ACTIVITIES',
    'intent_parser',
    'parse_log_intent',
    'Command',
    'CommandAction',
    'parse_command',
    'detect_tracking_request',
    'is_general_query',
]
