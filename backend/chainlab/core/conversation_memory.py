"""Conversation Memory — per-session buffer of (human, ai) turns.

Invariants:
    - Turns with empty human input or empty AI output are never stored
    - Each session keeps at most max_turns turns (oldest dropped first)
    - Calls without a session id are no-ops / empty history
    - format_history renders "User: ..." / "AI: ..." lines, oldest first

Design Decisions:
    - Plain in-process dict owned by app.state: single-process uvicorn, state lost on restart
"""

from collections import deque
from dataclasses import dataclass

DEFAULT_MAX_TURNS = 20


@dataclass(frozen=True)
class Turn:
    human: str
    ai: str


class ConversationMemory:
    """Bounded turn buffers keyed by session id."""

    def __init__(self, max_turns: int = DEFAULT_MAX_TURNS):
        if max_turns <= 0:
            raise ValueError("max_turns must be positive")
        self.max_turns = max_turns
        self._sessions: dict[str, deque[Turn]] = {}

    def add_turn(self, session_id: str | None, human: str | None, ai: str | None) -> bool:
        """Store a turn. Returns False when skipped (no session or empty side)."""
        if not session_id:
            return False
        human_text = (human or "").strip()
        ai_text = (ai or "").strip()
        if not human_text or not ai_text:
            return False
        buffer = self._sessions.setdefault(session_id, deque(maxlen=self.max_turns))
        buffer.append(Turn(human_text, ai_text))
        return True

    def turns(self, session_id: str | None) -> list[Turn]:
        if not session_id:
            return []
        return list(self._sessions.get(session_id, ()))

    def format_history(self, session_id: str | None) -> str:
        lines = []
        for turn in self.turns(session_id):
            lines.append(f"User: {turn.human}")
            lines.append(f"AI: {turn.ai}")
        return "\n".join(lines)

    def as_messages(self, session_id: str | None) -> list[dict]:
        """History as alternating user/assistant messages for the Messages API."""
        messages = []
        for turn in self.turns(session_id):
            messages.append({"role": "user", "content": turn.human})
            messages.append({"role": "assistant", "content": turn.ai})
        return messages

    def clear(self, session_id: str | None) -> bool:
        if not session_id:
            return False
        return self._sessions.pop(session_id, None) is not None

    def clear_all(self) -> int:
        count = len(self._sessions)
        self._sessions.clear()
        return count

    def session_count(self) -> int:
        return len(self._sessions)
