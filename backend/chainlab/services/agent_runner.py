"""Agent Runner — async tool-use loop over the Messages API.

Invariants:
    - At most max_iterations model calls; exceeding it raises AgentLoopExceededError
    - Tool errors never crash the loop: they return to the model as is_error tool_results
    - Token usage accumulated over every call of the loop
    - With a session id, the final (question, answer) pair lands in ConversationMemory

Design Decisions:
    - Non-streaming create_message: the API returns one JSON answer, so there is nothing
      to stream to the caller mid-loop
    - Session history sent as prior user/assistant messages, not pasted into the system prompt
    - Pure helpers live in agent_runner_helpers.py
"""

import logging
from dataclasses import dataclass, field

from chainlab.core.conversation_memory import ConversationMemory
from chainlab.core.errors import AgentLoopExceededError, ChainlabError, ErrorContext
from chainlab.infrastructure.anthropic_client import ResilientAnthropicClient
from chainlab.services.agent_runner_helpers import (
    account_usage, has_tool_use, response_text, serialize_content,
    tool_result_block, tool_trace_entry,
)
from chainlab.services.system_prompt import AGENT_SYSTEM_PROMPT
from chainlab.services.tool_dispatch import ToolDispatch
from chainlab.services.tools_registry import get_agent_tools

logger = logging.getLogger(__name__)


@dataclass
class AgentResult:
    answer: str
    tool_calls: list[dict] = field(default_factory=list)
    iterations: int = 0
    usage: dict[str, int] = field(default_factory=dict)


class AgentRunner:
    """Runs one agent request to completion."""

    def __init__(
        self,
        client: ResilientAnthropicClient,
        model: str,
        memory: ConversationMemory,
        max_iterations: int = 5,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ):
        self.client = client
        self.model = model
        self.memory = memory
        self.max_iterations = max_iterations
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def run(
        self, question: str, dispatch: ToolDispatch, session_id: str | None = None,
    ) -> AgentResult:
        ctx = ErrorContext(session_id=session_id)
        names = set(dispatch.tool_names)
        tools = get_agent_tools(
            include_knowledge_base="knowledge_base" in names,
            include_weather="get_weather" in names,
        )
        messages = self.memory.as_messages(session_id)
        messages.append({"role": "user", "content": question})

        result = AgentResult(answer="")
        for iteration in range(1, self.max_iterations + 1):
            response = await self.client.create_message(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=AGENT_SYSTEM_PROMPT,
                tools=tools,
                messages=messages,
                context=ctx,
            )
            result.iterations = iteration
            account_usage(result.usage, response)

            if not has_tool_use(response):
                result.answer = response_text(response)
                self.memory.add_turn(session_id, question, result.answer)
                logger.info(
                    f"Agent finished after {iteration} iteration(s)",
                    extra={"session_id": session_id, **result.usage},
                )
                return result

            messages.append({"role": "assistant", "content": serialize_content(response)})
            tool_results = []
            for block in response.content:
                if getattr(block, "type", None) != "tool_use":
                    continue
                outcome = await self._execute_tool_safe(dispatch, block.name, block.input)
                result.tool_calls.append(tool_trace_entry(block.name, block.input, outcome))
                tool_results.append(tool_result_block(block.id, outcome))
            messages.append({"role": "user", "content": tool_results})

        raise AgentLoopExceededError(self.max_iterations, ctx)

    async def _execute_tool_safe(
        self, dispatch: ToolDispatch, tool_name: str, tool_input: dict,
    ) -> dict:
        """Execute tool with error boundary. Never raises."""
        try:
            return await dispatch.execute(tool_name, tool_input)
        except ChainlabError as e:
            logger.warning(
                f"Tool error: {e.message}",
                extra={"tool_name": tool_name, "error_code": e.code},
            )
            return e.to_tool_result()
        except Exception as e:
            logger.error(
                f"Unexpected error in tool '{tool_name}': {e}",
                extra={"tool_name": tool_name}, exc_info=True,
            )
            return {
                "status": "error",
                "error_code": "TOOL_EXECUTION_ERROR",
                "message": f"Internal error executing {tool_name}",
            }
