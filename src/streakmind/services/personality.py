"""Personality modes and system prompts for generated replies."""
from enum import Enum
from typing import Mapping

from streakmind.services.user_settings import AppSettings


class PersonalityMode(Enum):
    THERAPIST = "therapist"
    TRAINER = "trainer"
    FRIEND = "friend"
    DEFAULT = "default"


_THERAPIST_WORDS = [
    'feel', 'struggle', 'depressed', 'anxious', 'stressed', 'motivation',
    'hard time', 'difficult', 'help me',
]
_TRAINER_WORDS = [
    'gym', 'workout', 'exercise', 'push', 'harder', 'challenge', 'pr',
    'personal record', 'lift', 'lazy', 'procrastinating', 'excuse', 'skip',
    'missed', "didn't do", 'failed', 'disappointed',
]
_FRIEND_WORDS = [
    'awesome', 'great', 'amazing', 'love', 'friend', 'chat', 'how are', "what's up",
]


def detect_personality(message: str) -> PersonalityMode:
    """Pick a tone from the message. Checked in order: therapist, trainer, friend."""
    text = message.lower()
    if any(word in text for word in _THERAPIST_WORDS):
        return PersonalityMode.THERAPIST
    if any(word in text for word in _TRAINER_WORDS):
        return PersonalityMode.TRAINER
    if any(word in text for word in _FRIEND_WORDS):
        return PersonalityMode.FRIEND
    return PersonalityMode.DEFAULT


GENERAL_PROMPT = (
    "You are a helpful AI assistant. Answer the user's question naturally and helpfully. "
    "You can discuss any topic, provide information, help with tasks, or have casual "
    "conversation. Be knowledgeable, friendly, and engaging."
)

_MODE_PROMPTS = {
    PersonalityMode.THERAPIST: (
        "You are StreakMind in therapist mode: warm, empathetic, understanding, and supportive. "
        "Provide emotional support and gentle encouragement. Keep responses caring but concise "
        "(2-3 sentences max)."
    ),
    PersonalityMode.TRAINER: (
        "You are StreakMind in trainer mode: energetic, motivational, focused on pushing limits and "
        "celebrating victories. When the user shows accountability issues, give firm but caring "
        "motivation. Keep responses high-energy but concise (2-3 sentences max)."
    ),
    PersonalityMode.FRIEND: (
        "You are StreakMind in friend mode: casual, supportive, fun, and relatable. Be encouraging "
        "and positive. Keep responses friendly and conversational (2-3 sentences max)."
    ),
    PersonalityMode.DEFAULT: (
        "You are StreakMind, an adaptive AI companion that helps users track habits and stay "
        "motivated. Be positive, supportive, and encouraging. Keep responses helpful and concise "
        "(2-3 sentences max)."
    ),
}


def stats_context(streaks: Mapping[str, int]) -> str:
    highest = max(streaks.values(), default=0)
    return f"Current user stats: {len(streaks)} active habits, highest streak: {highest} days."


def build_system_prompt(
    mode: PersonalityMode,
    streaks: Mapping[str, int],
    app_settings: AppSettings,
    general: bool = False,
    memory_context: str = "",
) -> str:
    """
    System prompt for the reply. Disabled personalities fall back to the default tone.

    `memory_context` is the summary of what is remembered about the user; it is
    left out when empty.
    """
    if general:
        return f"{GENERAL_PROMPT} Remember: {memory_context}" if memory_context else GENERAL_PROMPT

    enabled = app_settings.enabled_personalities.model_dump()
    if mode != PersonalityMode.DEFAULT and not enabled.get(mode.value, False):
        mode = PersonalityMode.DEFAULT

    prompt = f"{_MODE_PROMPTS[mode]} {stats_context(streaks)}"
    if memory_context:
        prompt += f" Personal context: {memory_context}"
    return prompt
