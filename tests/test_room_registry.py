"""Tests for the room allow-list and broadcast groups."""
import pytest

from helpers import RoomRegistry


def test_default_rooms(registry):
    assert registry.rooms == ["general", "support", "random"]
    assert registry.default_room == "general"
    assert registry.is_allowed("support")
    assert not registry.is_allowed("admin")
    assert not registry.is_allowed("")


def test_rooms_list_is_a_copy(registry):
    registry.rooms.append("hacked")
    assert registry.rooms == ["general", "support", "random"]


def test_join_and_move_keep_exactly_one_group(registry):
    assert registry.join("c1", "general") is None
    assert registry.members("general") == ["c1"]

    assert registry.move("c1", "support") == "general"
    assert registry.members("general") == []
    assert registry.members("support") == ["c1"]
    assert registry.room_of("c1") == "support"
    assert sum(registry.member_counts().values()) == 1


def test_move_requires_existing_membership(registry):
    with pytest.raises(KeyError):
        registry.move("ghost", "support")


def test_join_unknown_room_rejected(registry):
    with pytest.raises(ValueError):
        registry.join("c1", "secret")
    assert registry.room_of("c1") is None


def test_leave(registry):
    registry.join("c1", "random")
    registry.join("c2", "random")
    assert registry.leave("c1") == "random"
    assert registry.leave("c1") is None
    assert registry.members("random") == ["c2"]


def test_member_counts(registry):
    registry.join("c1", "general")
    registry.join("c2", "general")
    registry.join("c3", "random")
    assert registry.member_counts() == {"general": 2, "support": 0, "random": 1}


def test_custom_rooms_validation():
    assert RoomRegistry(["lobby", "ops"]).default_room == "lobby"
    with pytest.raises(ValueError):
        RoomRegistry([])
    with pytest.raises(ValueError):
        RoomRegistry(["a", "a"])
