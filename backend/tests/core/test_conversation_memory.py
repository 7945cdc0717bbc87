"""Conversation memory tests — bounded per-session turns and history rendering."""

import pytest

from chainlab.core.conversation_memory import ConversationMemory


def test_history_format_oldest_first():
    memory = ConversationMemory()
    memory.add_turn("s1", "hi", "hello")
    memory.add_turn("s1", "how are you?", "fine")
    assert memory.format_history("s1") == "User: hi\nAI: hello\nUser: how are you?\nAI: fine"


def test_empty_sides_and_missing_session_are_skipped():
    memory = ConversationMemory()
    assert not memory.add_turn("s1", "  ", "answer")
    assert not memory.add_turn("s1", "question", "")
    assert not memory.add_turn(None, "q", "a")
    assert memory.turns("s1") == []
    assert memory.format_history(None) == ""


def test_oldest_turns_dropped_past_max():
    memory = ConversationMemory(max_turns=2)
    for i in range(3):
        memory.add_turn("s", f"q{i}", f"a{i}")
    assert [t.human for t in memory.turns("s")] == ["q1", "q2"]


def test_sessions_are_isolated():
    memory = ConversationMemory()
    memory.add_turn("a", "q", "x")
    assert memory.turns("b") == []
    assert memory.session_count() == 1


def test_as_messages_alternates_roles():
    memory = ConversationMemory()
    memory.add_turn("s", "q", "a")
    assert memory.as_messages("s") == [
        {"role": "user", "content": "q"},
        {"role": "assistant", "content": "a"},
    ]


def test_clear_and_clear_all():
    memory = ConversationMemory()
    memory.add_turn("a", "q", "x")
    memory.add_turn("b", "q", "x")
    assert memory.clear("a")
    assert not memory.clear("a")
    assert memory.clear_all() == 1
    assert memory.session_count() == 0


def test_max_turns_must_be_positive():
    with pytest.raises(ValueError):
        ConversationMemory(0)
