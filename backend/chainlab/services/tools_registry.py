"""Tools Registry — which tools the agent is offered for a request.

Invariants:
    - knowledge_base offered only when the request names a vector store
    - weather tools offered only when a weather client is configured
    - Database tools always offered

Design Decisions:
    - Explicit imports from each define_*_tools.py: no auto-discovery
"""

from chainlab.services.define_database_tools import TOOLS_DATABASE
from chainlab.services.define_retrieval_tools import TOOL_KNOWLEDGE_BASE, TOOLS_WEATHER


def get_agent_tools(include_knowledge_base: bool, include_weather: bool = True) -> list[dict]:
    tools = list(TOOLS_DATABASE)
    if include_knowledge_base:
        tools.append(TOOL_KNOWLEDGE_BASE)
    if include_weather:
        tools.extend(TOOLS_WEATHER)
    return tools


def all_tool_names() -> list[str]:
    return [t["name"] for t in get_agent_tools(True, True)]
