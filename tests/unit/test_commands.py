"""Unit tests for activity management commands and message classification."""
import pytest

from streakmind.services.intent import (
    Command,
    CommandAction,
    detect_tracking_request,
    is_general_query,
    parse_command,
)


@pytest.mark.unit
class TestParseCommand:
    """Tests for delete / rename / set-points recognition."""

    @pytest.mark.parametrize("message,activity", [
        ("Delete yoga", "yoga"),
        ("Remove the meditation habit", "meditation"),
        ("delete morning walk activity", "morning walk"),
        ("DELETE Yoga!", "Yoga"),
    ])
    def test_delete(self, message, activity):
        command = parse_command(message)

        assert command.action == CommandAction.DELETE
        assert command.activity == activity

    def test_rename(self):
        command = parse_command("Rename yoga to stretching")

        assert command == Command(action=CommandAction.RENAME, activity="yoga", new_name="stretching")

    def test_change_name_of(self):
        command = parse_command("Change the name of reading to books")

        assert command.action == CommandAction.RENAME
        assert command.activity == "reading"
        assert command.new_name == "books"

    def test_set_points(self):
        command = parse_command("Set yoga points to 15")

        assert command.action == CommandAction.SET_POINTS
        assert command.activity == "yoga"
        assert command.points == 15

    def test_set_points_strips_points_word_and_filler(self):
        """Test 'set points for X to N' keeps only the name."""
        command = parse_command("Set points for yoga to 20")

        assert command.activity == "yoga"
        assert command.points == 20

    def test_set_points_decimal(self):
        command = parse_command("set cold shower points to 2.5")

        assert command.activity == "cold shower"
        assert command.points == 2.5

    @pytest.mark.parametrize("message", [
        "Rename yoga",
        "Set yoga points to lots",
        "Did 2 coding questions",
        "What's the capital of France?",
    ])
    def test_incomplete_or_unrelated_is_not_a_command(self, message):
        """Test a keyword without its captures falls through."""
        command = parse_command(message)

        assert command.action == CommandAction.NONE
        assert not command.is_command


@pytest.mark.unit
class TestTrackingRequest:
    """Tests for 'start tracking X' detection."""

    @pytest.mark.parametrize("message,name", [
        ("I want to track yoga", "yoga"),
        ("Start tracking my daily walks", "walks"),
        ("Add journaling to my habits", "journaling"),
        ("Track stretching for me", "stretching"),
        ("I want to track Cold Showers.", "cold showers"),
        ("Can you track yoga for me?", "yoga"),
        ("Please track my reading habit", "reading"),
    ])
    def test_detects_name(self, message, name):
        assert detect_tracking_request(message) == name

    def test_regular_log_is_not_a_request(self):
        assert detect_tracking_request("Did 2 coding questions") is None

    @pytest.mark.parametrize("message", [
        "Help me keep track of my water intake",
        "I am on track with the gym this week",
    ])
    def test_track_idioms_are_not_requests(self, message):
        assert detect_tracking_request(message) is None

    def test_filler_only_name_rejected(self):
        assert detect_tracking_request("I want to track habit") is None

    def test_long_name_rejected(self):
        assert detect_tracking_request("I want to track " + "x" * 60) is None


@pytest.mark.unit
class TestGeneralQuery:
    """Tests for general-question classification."""

    def test_general_question(self):
        assert is_general_query("What's the capital of France?") is True

    def test_habit_log_is_not_general(self):
        assert is_general_query("Did 2 coding questions") is False

    def test_known_activity_is_not_general(self):
        assert is_general_query("Yoga was great", ["yoga"]) is False
        assert is_general_query("Yoga was great") is True

    def test_command_is_not_general(self):
        assert is_general_query("Rename piano to guitar") is False

    def test_tracking_request_is_not_general(self):
        assert is_general_query("Add journaling to my habits") is False
