"""Chat service tests — message normalization and request shape."""

import pytest

from chainlab.core.errors import InvalidInputError
from chainlab.services.chat_service import ChatService, normalize_messages
from chainlab.services.system_prompt import QUERY_SYSTEM_PROMPT
from tests.services.mock_anthropic import MockAnthropicClient, text_response


def test_system_messages_lifted_and_same_roles_merged():
    system, turns = normalize_messages([
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "Hi"},
        {"role": "user", "content": "Anyone there?"},
        {"role": "assistant", "content": ""},
        {"role": "system", "content": "Use English."},
    ])
    assert system == "Be brief.\n\nUse English."
    assert turns == [{"role": "user", "content": "Hi\n\nAnyone there?"}]


def test_conversation_must_start_with_user():
    with pytest.raises(InvalidInputError):
        normalize_messages([{"role": "assistant", "content": "hello"}])
    with pytest.raises(InvalidInputError):
        normalize_messages([{"role": "system", "content": "only system"}])


def test_unknown_role_rejected():
    with pytest.raises(InvalidInputError):
        normalize_messages([{"role": "tool", "content": "x"}])


@pytest.mark.asyncio
async def test_chat_sends_system_and_turns():
    llm = MockAnthropicClient([text_response("Hello!")])
    service = ChatService(llm, model="test-model", max_tokens=100, temperature=0.1)
    answer = await service.chat([
        {"role": "system", "content": "Be kind."},
        {"role": "user", "content": "Hi"},
    ])
    assert answer == "Hello!"
    call = llm.calls[0]
    assert call["system"] == "Be kind."
    assert call["messages"] == [{"role": "user", "content": "Hi"}]
    assert call["model"] == "test-model"
    assert call["max_tokens"] == 100
    assert call["temperature"] == 0.1


@pytest.mark.asyncio
async def test_query_uses_fixed_system_prompt():
    llm = MockAnthropicClient([text_response("42")])
    assert await ChatService(llm, model="m").query("  meaning of life?  ") == "42"
    assert llm.calls[0]["system"] == QUERY_SYSTEM_PROMPT
    assert llm.calls[0]["messages"] == [{"role": "user", "content": "meaning of life?"}]


@pytest.mark.asyncio
async def test_empty_query_rejected_without_calling_model():
    llm = MockAnthropicClient([])
    with pytest.raises(InvalidInputError):
        await ChatService(llm, model="m").query("   ")
    assert llm.calls == []


@pytest.mark.asyncio
async def test_complete_prepends_history():
    llm = MockAnthropicClient([text_response("ok")])
    history = [{"role": "user", "content": "a"}, {"role": "assistant", "content": "b"}]
    await ChatService(llm, model="m").complete("c", history=history)
    assert [m["content"] for m in llm.calls[0]["messages"]] == ["a", "b", "c"]
