"""Unit tests for the habit tracker ingest pipeline and stats."""
import pytest

from streakmind.services.activity_log import LogEntry, Unit
from streakmind.services.chat.handlers.general import PARSE_MISS_REPLY
from streakmind.services.habit_state import HabitState
from streakmind.services.personality import GENERAL_PROMPT
from streakmind.services.storage import InMemoryStore
from streakmind.services.streaks import StreakEngine
from streakmind.services.tracker import HabitTracker
from streakmind.services.user_settings import AppSettings


@pytest.fixture
def failing_tracker(failing_generator) -> HabitTracker:
    return HabitTracker(
        state_store=InMemoryStore(HabitState),
        transcript_store=InMemoryStore(list),
        settings_store=InMemoryStore(AppSettings),
        generator=failing_generator,
        streak_engine=StreakEngine(),
    )


@pytest.mark.unit
class TestIngestLogging:
    """Tests for logging activities through chat."""

    def test_log_activity(self, tracker, mock_generator):
        result = tracker.ingest("Did 2 coding questions today")

        assert result.action == 'activity_log'
        assert result.reply == "Generated reply"
        assert result.log_entry.activity == 'coding'
        assert result.points_awarded == 10
        assert result.streak_updated is True
        assert result.current_streak == 1

        stats = tracker.get_stats()
        assert stats["total_points"] == 10
        assert stats["streaks"] == {"coding": 1}

    def test_generator_gets_log_summary(self, tracker, mock_generator):
        tracker.ingest("Did 2 coding questions today")

        kwargs = mock_generator.call.call_args.kwargs
        assert "User logged: coding" in kwargs["user_content"]
        assert "Points awarded: 10" in kwargs["user_content"]
        assert "StreakMind" in kwargs["system_prompt"]

    def test_same_day_twice_counts_streak_once(self, tracker):
        tracker.ingest("Did 2 coding questions today")
        second = tracker.ingest("Did 3 coding questions today")

        assert second.streak_updated is False
        assert second.current_streak == 1
        assert tracker.get_stats()["total_points"] == 25

    def test_generation_failure_keeps_log(self, failing_tracker):
        result = failing_tracker.ingest("Did 2 coding questions today")

        assert result.reply == "Great job! +10 points. coding streak: 1 days!"
        assert result.log_entry is not None
        assert len(failing_tracker.get_stats()["logs"]) == 1

    def test_unexpected_generator_error_falls_back(self, tracker, mock_generator):
        mock_generator.call.side_effect = RuntimeError("boom")

        result = tracker.ingest("Went to gym yesterday")

        assert result.reply.startswith("Great job! +10 points.")
        assert tracker.get_stats()["total_points"] == 10

    def test_transcript_records_both_sides(self, tracker):
        tracker.ingest("Did 2 coding questions today")

        messages = tracker.get_messages()
        assert [message.role for message in messages] == ['user', 'assistant']
        assert messages[0].message == "Did 2 coding questions today"
        assert messages[1].message == "Generated reply"


@pytest.mark.unit
class TestIngestRouting:
    """Tests for the non-logging routes."""

    def test_track_new_activity_creates_definition_without_log(self, tracker):
        result = tracker.ingest("I want to track yoga")

        assert result.action == 'activity_track'
        assert result.activity_created == 'yoga'
        assert result.log_entry is None

        stats = tracker.get_stats()
        assert "yoga" in stats["activities"]
        assert stats["streaks"]["yoga"] == 0
        assert stats["logs"] == []

    def test_track_existing_activity(self, tracker, mock_generator):
        tracker.ingest("I want to track yoga")
        mock_generator.call.reset_mock()

        result = tracker.ingest("I want to track yoga")

        assert result.activity_created is None
        assert "already tracking" in result.reply
        mock_generator.call.assert_not_called()

    def test_general_query_is_never_logged(self, tracker, mock_generator):
        result = tracker.ingest("What's the capital of France?")

        assert result.action == 'general'
        assert result.log_entry is None
        assert tracker.get_stats()["logs"] == []
        kwargs = mock_generator.call.call_args.kwargs
        assert kwargs["system_prompt"] == GENERAL_PROMPT
        assert kwargs["user_content"] == "What's the capital of France?"

    def test_parse_miss(self, tracker, mock_generator):
        result = tracker.ingest("I did something today")

        assert result.action == 'parse_miss'
        assert result.reply == PARSE_MISS_REPLY
        assert result.points_awarded == 0
        mock_generator.call.assert_not_called()

    def test_logging_a_tracked_activity(self, tracker):
        tracker.ingest("I want to track yoga")

        result = tracker.ingest("Did 30 minutes of yoga")

        assert result.log_entry.activity == 'yoga'
        assert result.log_entry.unit == Unit.MINUTES
        assert result.points_awarded == 3


@pytest.mark.unit
class TestChatCommands:
    """Tests for activity commands sent as chat messages."""

    def test_set_points_then_log(self, tracker):
        tracker.ingest("I want to track yoga")

        result = tracker.ingest("Set yoga points to 15")
        assert result.action == 'activity_command'
        assert result.command_action == 'set_points'
        assert result.reply == 'Set "yoga" to 15 points per session.'

        logged = tracker.ingest("Did yoga today")
        assert logged.points_awarded == 15

    def test_rename(self, tracker):
        tracker.ingest("Did 30 minutes of coding")
        tracker.ingest("I want to track yoga")
        tracker.ingest("Did 20 minutes of yoga")

        result = tracker.ingest("Rename yoga to stretching")

        assert result.reply == 'Renamed "yoga" to "stretching".'
        stats = tracker.get_stats()
        assert "yoga" not in stats["streaks"]
        assert stats["streaks"]["stretching"] == 1
        assert {entry["activity"] for entry in stats["logs"]} == {"coding", "stretching"}

    def test_delete(self, tracker):
        tracker.ingest("I want to track yoga")
        tracker.ingest("Did 20 minutes of yoga")

        result = tracker.ingest("Delete yoga")

        assert result.command_action == 'delete'
        stats = tracker.get_stats()
        assert "yoga" not in stats["activities"]
        assert "yoga" not in stats["streaks"]
        assert stats["logs"] == []

    def test_command_name_is_case_insensitive(self, tracker):
        tracker.ingest("I want to track yoga")

        result = tracker.ingest("Delete Yoga")

        assert result.reply == 'Deleted "yoga" from your habits.'

    def test_unknown_activity(self, tracker):
        result = tracker.ingest("Delete pilates")

        assert result.reply == 'Couldn\'t find "pilates" to delete.'
        assert tracker.get_stats()["activities"] == {}


@pytest.mark.unit
class TestStatsAndCrud:
    """Tests for stats and direct activity management."""

    def _seed(self, tracker, count):
        state = HabitState()
        for day in range(1, count + 1):
            state.logs.append(LogEntry(
                "gym", 1, Unit.SESSION, f"2024-01-{day:02d}", "gym", 10,
                timestamp=f"2024-01-{day:02d}T07:00:00+00:00",
            ))
        state.streaks["gym"] = count
        tracker.state_store.save(state)

    def test_stats_logs_newest_first_and_capped(self, tracker):
        self._seed(tracker, 31)

        stats = tracker.get_stats()

        assert stats["total_points"] == 310
        assert len(stats["logs"]) == 31
        assert stats["logs"][0]["date"] == "2024-01-31"
        assert stats["badges"] == [{"name": "gym Champion", "icon": "🏆", "description": "30-day streak!"}]

    def test_stats_log_limit(self, tracker, monkeypatch):
        from streakmind.core.config import settings

        monkeypatch.setattr(settings.tracking, "stats_log_limit", 5)
        self._seed(tracker, 8)

        logs = tracker.get_stats()["logs"]

        assert [entry["date"] for entry in logs] == [f"2024-01-{day:02d}" for day in (8, 7, 6, 5, 4)]

    def test_create_update_delete(self, tracker):
        created = tracker.create_activity("pottery", custom_points=4)
        assert created.name == "pottery"
        assert tracker.create_activity("pottery") is None

        assert tracker.update_activity("pottery", name="ceramics") is True
        assert "ceramics" in tracker.get_stats()["activities"]

        assert tracker.delete_activity("ceramics") is True
        assert tracker.delete_activity("ceramics") is False

    def test_delete_log_entry(self, tracker):
        result = tracker.ingest("Went to gym today")

        removed = tracker.delete_log_entry(result.log_entry.id)

        assert removed.id == result.log_entry.id
        stats = tracker.get_stats()
        assert stats["logs"] == []
        assert stats["streaks"]["gym"] == 0
        assert tracker.delete_log_entry(result.log_entry.id) is None

    def test_clear_messages_keeps_log(self, tracker):
        tracker.ingest("Went to gym today")

        assert tracker.clear_messages() == 2
        assert tracker.get_messages() == []
        assert len(tracker.get_stats()["logs"]) == 1


@pytest.mark.unit
class TestConversationMemory:
    """Tests for history and user memory flowing into generated replies."""

    def test_recent_transcript_is_sent_as_history(self, tracker, mock_generator):
        tracker.ingest("What's the capital of France?")
        assert mock_generator.call.call_args.kwargs["history"] == []

        tracker.ingest("And of Spain?")

        assert mock_generator.call.call_args.kwargs["history"] == [
            {"role": "user", "content": "What's the capital of France?"},
            {"role": "assistant", "content": "Generated reply"},
        ]

    def test_history_limit(self, tracker, mock_generator, monkeypatch):
        from streakmind.core.config import settings
        monkeypatch.setattr(settings.tracking, "history_messages", 1)

        tracker.ingest("What's the capital of France?")
        tracker.ingest("And of Spain?")

        assert mock_generator.call.call_args.kwargs["history"] == [
            {"role": "assistant", "content": "Generated reply"},
        ]

    def test_remembered_goal_reaches_general_prompt(self, tracker, mock_generator):
        tracker.ingest("I want to run a marathon, what should I eat?")

        kwargs = mock_generator.call.call_args.kwargs
        assert kwargs["system_prompt"] == f"{GENERAL_PROMPT} Remember: Goals: run a marathon."

    def test_log_updates_memory(self, failing_tracker):
        failing_tracker.ingest("Went to gym today")

        memory = failing_tracker.get_memory()
        assert memory.preferences.preferred_activities == ["gym"]
        assert memory.conversation_context.common_topics == ["gym"]
        assert memory.conversation_context.celebrating == ["gym 1-day streak"]
        assert memory.conversation_context.last_session is not None

    def test_clear_and_remove(self, tracker):
        tracker.ingest("I want to run a marathon, what should I eat?")

        assert tracker.remove_memory_item("goals", "run a marathon") is True
        assert tracker.remove_memory_item("goals", "run a marathon") is False

        tracker.ingest("I struggle with waking up early")
        cleared = tracker.clear_memory(["struggling_with"])
        assert cleared.conversation_context.struggling_with == []
        assert cleared.personal_context.challenges == ["waking up early"]

    def test_llm_health(self, tracker):
        assert tracker.llm_health() == "healthy"
