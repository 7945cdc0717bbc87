"""Chat Service — plain chat and single-prompt completion over the resilient Anthropic client.

Invariants:
    - "system" messages are lifted into the system prompt (joined with blank lines)
    - Consecutive same-role messages are merged; the conversation must start with a user turn
    - Empty model output is returned as "" (callers decide how to present it)

Design Decisions:
    - One small service shared by /chat, /query and the RAG service: model, temperature and
      max_tokens are configured in exactly one place
"""

import logging

from chainlab.core.domain_types import ChatRole
from chainlab.core.errors import ErrorContext, InvalidInputError
from chainlab.infrastructure.anthropic_client import ResilientAnthropicClient
from chainlab.services.agent_runner_helpers import response_text
from chainlab.services.system_prompt import QUERY_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


def normalize_messages(messages: list[dict]) -> tuple[str, list[dict]]:
    """Split system text out and merge consecutive same-role turns."""
    system_parts: list[str] = []
    turns: list[dict] = []
    for message in messages:
        role = message.get("role")
        content = str(message.get("content") or "").strip()
        if role == ChatRole.SYSTEM.value:
            if content:
                system_parts.append(content)
            continue
        if role not in (ChatRole.USER.value, ChatRole.ASSISTANT.value):
            raise InvalidInputError(f"Unsupported message role '{role}'", "messages")
        if not content:
            continue
        if turns and turns[-1]["role"] == role:
            turns[-1]["content"] += "\n\n" + content
        else:
            turns.append({"role": role, "content": content})
    if not turns or turns[0]["role"] != ChatRole.USER.value:
        raise InvalidInputError(
            "Conversation must contain a user message before any assistant message",
            "messages",
        )
    return "\n\n".join(system_parts), turns


class ChatService:
    def __init__(
        self,
        client: ResilientAnthropicClient,
        model: str,
        max_tokens: int = 800,
        temperature: float = 0.3,
    ):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def chat(self, messages: list[dict], session_id: str | None = None) -> str:
        system, turns = normalize_messages(messages)
        return await self._complete(turns, system or None, ErrorContext(session_id=session_id))

    async def query(self, query: str) -> str:
        """Prompt-chain query: fixed system prompt, single user turn."""
        if not query or not query.strip():
            raise InvalidInputError("Query must not be empty", "query")
        return await self.complete(query.strip(), system=QUERY_SYSTEM_PROMPT)

    async def complete(
        self,
        prompt: str,
        system: str | None = None,
        history: list[dict] | None = None,
        session_id: str | None = None,
    ) -> str:
        messages = list(history or [])
        messages.append({"role": "user", "content": prompt})
        return await self._complete(messages, system, ErrorContext(session_id=session_id))

    async def _complete(
        self, messages: list[dict], system: str | None, ctx: ErrorContext,
    ) -> str:
        response = await self.client.create_message(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=system,
            messages=messages,
            context=ctx,
        )
        text = response_text(response)
        if not text:
            logger.warning("Model returned no text", extra={"session_id": ctx.session_id})
        return text
