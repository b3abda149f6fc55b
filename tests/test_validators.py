"""Tests for input sanitization."""
import pytest

from helpers import (
    ValidationError,
    escape_html,
    parse_client_frame,
    sanitize_display_name,
    sanitize_message,
    sanitize_room,
)
from helpers.constants import MAX_MESSAGE_LENGTH, MAX_USERNAME_LENGTH


def test_escape_html_replaces_markup_characters():
    assert escape_html("<a href=\"x\">Tom & Jerry's</a>") == (
        "&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&#39;s&lt;/a&gt;"
    )


def test_sanitize_message_trims_and_escapes():
    assert sanitize_message("  <b>hi</b>  ") == "&lt;b&gt;hi&lt;/b&gt;"


def test_sanitize_message_empty_and_non_string():
    assert sanitize_message("   \n\t ") == ""
    assert sanitize_message(None) == ""
    assert sanitize_message(42) == ""


def test_sanitize_message_truncates_before_escaping():
    text = "a" * (MAX_MESSAGE_LENGTH - 1) + "<<<"
    result = sanitize_message(text)
    assert result == "a" * (MAX_MESSAGE_LENGTH - 1) + "&lt;"


def test_sanitize_message_strips_control_characters():
    assert sanitize_message("hel\x00lo\x07") == "hello"


def test_sanitize_room_normalizes():
    assert sanitize_room("  SUPPORT ") == "support"
    assert sanitize_room("ran<dom>!") == "random"
    assert sanitize_room("my_room-2") == "my_room-2"
    assert sanitize_room(None) == ""
    assert sanitize_room(["general"]) == ""


def test_sanitize_display_name_strips_and_collapses():
    assert sanitize_display_name("  Ada    Lovelace  ") == "Ada Lovelace"
    assert sanitize_display_name("x_y-z 9") == "x_y-z 9"


def test_sanitize_display_name_removes_markup():
    name = sanitize_display_name("<script>")
    assert name == "script"
    assert "<" not in name and ">" not in name


def test_sanitize_display_name_truncates():
    assert len(sanitize_display_name("n" * 100)) == MAX_USERNAME_LENGTH


@pytest.mark.parametrize("raw", ["", "   ", "<>!!", None, 7])
def test_sanitize_display_name_rejects_empty(raw):
    with pytest.raises(ValidationError) as exc_info:
        sanitize_display_name(raw)
    assert exc_info.value.message == "Name cannot be empty."


def test_parse_client_frame():
    assert parse_client_frame({"type": "post-message", "message": "hi"}) == (
        True, "post-message", {"type": "post-message", "message": "hi"}
    )
    assert parse_client_frame(["post-message"]) == (False, "", None)
    assert parse_client_frame({"message": "hi"}) == (False, "", None)
    assert parse_client_frame({"type": 3}) == (False, "", None)


def test_sanitize_display_name_keeps_space_left_by_removed_characters():
    assert sanitize_display_name("a <") == "a "
