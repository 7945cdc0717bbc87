"""Agent Runner Helpers — pure response introspection and tool_result builders.

Invariants:
    - All functions are pure (stateless, deterministic)
    - tool_result content is always a JSON string (ensure_ascii=False)
"""

import json
from typing import Any


def has_tool_use(response: Any) -> bool:
    return any(
        getattr(b, "type", None) == "tool_use"
        for b in response.content
    )


def response_text(response: Any) -> str:
    """Concatenate all text blocks of a Messages API response."""
    return "".join(
        b.text for b in response.content
        if getattr(b, "type", None) == "text"
    ).strip()


def serialize_content(response: Any) -> list[dict]:
    return [b.model_dump(exclude_none=True) for b in response.content]


def tool_result_block(tool_use_id: str, result: dict) -> dict:
    block = {
        "type": "tool_result",
        "tool_use_id": tool_use_id,
        "content": json.dumps(result, ensure_ascii=False, default=str),
    }
    if result.get("status") == "error":
        block["is_error"] = True
    return block


def tool_trace_entry(name: str, tool_input: dict, result: dict) -> dict:
    """Compact record of one tool call for the API response."""
    entry = {"tool": name, "input": tool_input, "status": result.get("status", "ok")}
    if result.get("status") == "error":
        entry["error_code"] = result.get("error_code")
    return entry


def account_usage(totals: dict[str, int], response: Any) -> None:
    usage = response.usage
    totals["input_tokens"] = totals.get("input_tokens", 0) + usage.input_tokens
    totals["output_tokens"] = totals.get("output_tokens", 0) + usage.output_tokens
