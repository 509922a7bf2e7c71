"""Unit tests for settings, transcript, personality and the LLM service."""
from unittest.mock import Mock

import pytest
from pydantic import ValidationError

from streakmind.services.llm import GenerationError, LLMService
from streakmind.services.personality import (
    GENERAL_PROMPT,
    PersonalityMode,
    build_system_prompt,
    detect_personality,
    stats_context,
)
from streakmind.services.storage import InMemoryStore
from streakmind.services.transcript import ChatMessage, Transcript
from streakmind.services.user_settings import AppSettings, SettingsService


@pytest.fixture
def settings_service():
    return SettingsService(InMemoryStore(AppSettings))


@pytest.mark.unit
class TestSettingsService:
    """Tests for the settings document."""

    def test_defaults(self, settings_service):
        current = settings_service.get()

        assert current.theme == 'dark'
        assert current.enabled_personalities.trainer is True

    def test_partial_update_merges_nested(self, settings_service):
        updated = settings_service.update({"notifications": {"weekly_reports": True}})

        assert updated.notifications.weekly_reports is True
        assert updated.notifications.streak_reminders is True
        assert settings_service.get().notifications.weekly_reports is True

    def test_invalid_value_rejected(self, settings_service):
        with pytest.raises(ValidationError):
            settings_service.update({"theme": "neon"})

        assert settings_service.get().theme == 'dark'

    def test_reset(self, settings_service):
        settings_service.update({"theme": "light", "show_scores": False})

        reset = settings_service.reset()

        assert reset == AppSettings()
        assert settings_service.get().theme == 'dark'


@pytest.mark.unit
class TestTranscript:
    """Tests for the chat transcript."""

    def test_as_history(self):
        transcript = Transcript(InMemoryStore(list))
        transcript.add(
            ChatMessage(role='user', message='one'),
            ChatMessage(role='assistant', message='two'),
            ChatMessage(role='user', message='three'),
        )

        assert transcript.as_history(2) == [
            {"role": "assistant", "content": "two"},
            {"role": "user", "content": "three"},
        ]
        assert transcript.as_history(0) == []

    def test_add_and_delete(self):
        transcript = Transcript(InMemoryStore(list))
        first = ChatMessage(role='user', message='hi')
        transcript.add(first, ChatMessage(role='assistant', message='hello'))

        assert transcript.delete(first.id) is True
        assert transcript.delete(first.id) is False
        assert [message.message for message in transcript.list()] == ['hello']

    def test_clear(self):
        transcript = Transcript(InMemoryStore(list))
        transcript.add(ChatMessage(role='user', message='hi'))

        assert transcript.clear() == 1
        assert transcript.list() == []


@pytest.mark.unit
class TestPersonality:
    """Tests for tone detection and system prompts."""

    @pytest.mark.parametrize("message,mode", [
        ("I feel stressed about my habits", PersonalityMode.THERAPIST),
        ("Skipped the gym again", PersonalityMode.TRAINER),
        ("This is awesome", PersonalityMode.FRIEND),
        ("Slept 8 hours", PersonalityMode.DEFAULT),
    ])
    def test_detect_personality(self, message, mode):
        assert detect_personality(message) == mode

    def test_prompt_includes_stats(self):
        prompt = build_system_prompt(PersonalityMode.TRAINER, {"gym": 4, "coding": 9}, AppSettings())

        assert "trainer mode" in prompt
        assert "2 active habits, highest streak: 9 days" in prompt

    def test_disabled_personality_uses_default(self):
        app_settings = AppSettings.model_validate({"enabled_personalities": {"trainer": False}})

        prompt = build_system_prompt(PersonalityMode.TRAINER, {}, app_settings)

        assert "trainer mode" not in prompt
        assert prompt.startswith("You are StreakMind, an adaptive AI companion")

    def test_general_prompt(self):
        assert build_system_prompt(PersonalityMode.FRIEND, {}, AppSettings(), general=True) == GENERAL_PROMPT

    def test_general_prompt_remembers_user(self):
        prompt = build_system_prompt(
            PersonalityMode.DEFAULT, {}, AppSettings(), general=True, memory_context="Name: Sam."
        )

        assert prompt == f"{GENERAL_PROMPT} Remember: Name: Sam."

    def test_mode_prompt_adds_personal_context(self):
        prompt = build_system_prompt(
            PersonalityMode.FRIEND, {"gym": 2}, AppSettings(), memory_context="Goals: run a 10k."
        )

        assert prompt.endswith("highest streak: 2 days. Personal context: Goals: run a 10k.")

    def test_stats_context_empty(self):
        assert stats_context({}) == "Current user stats: 0 active habits, highest streak: 0 days."


@pytest.mark.unit
class TestLLMService:
    """Tests for LLMService with a mocked client."""

    def _client(self, content=None, error=None):
        client = Mock()
        if error is not None:
            client.chat.completions.create.side_effect = error
        else:
            client.chat.completions.create.return_value = Mock(
                choices=[Mock(message=Mock(content=content))]
            )
        return client

    def test_call_returns_stripped_text(self):
        client = self._client(content="  Nice work!  ")
        service = LLMService(client=client)

        reply = service.call("system", "user said hi", history=[{"role": "user", "content": "earlier"}])

        assert reply == "Nice work!"
        messages = client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "system"}
        assert messages[1] == {"role": "user", "content": "earlier"}
        assert messages[-1] == {"role": "user", "content": "user said hi"}

    def test_backend_error_raises_generation_error(self):
        service = LLMService(client=self._client(error=TimeoutError("slow")))

        with pytest.raises(GenerationError):
            service.call("system", "hi")

    def test_empty_reply_raises_generation_error(self):
        service = LLMService(client=self._client(content="   "))

        with pytest.raises(GenerationError):
            service.call("system", "hi")

    def test_health_check(self):
        client = Mock()
        client.models.list.side_effect = ConnectionError("down")

        assert LLMService(client=client).health_check().startswith("unhealthy")
