"""StreakMind - chat-driven habit tracker."""

__version__ = "1.0.0"
