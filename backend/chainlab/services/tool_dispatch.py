"""Tool Dispatch — explicit routing from tool_name to handler function.

Invariants:
    - Every tool->handler mapping is visible in one dict, no getattr lookup
    - Unknown tools return UNKNOWN_TOOL error (never raises)
    - Tools not offered for this request (no store, no weather client) are not routable
    - Handler exceptions propagate; AgentRunner._execute_tool_safe is the error boundary

Design Decisions:
    - One dispatch per agent request: store name and threshold are bound at construction,
      so the model cannot query a store the caller did not choose
"""

import logging

from chainlab.infrastructure.weather_client import QWeatherClient
from chainlab.services.database_service import DatabaseService
from chainlab.services.handle_database import DatabaseHandlers
from chainlab.services.handle_retrieval import KnowledgeHandlers, WeatherHandlers
from chainlab.services.rag_service import RagService

logger = logging.getLogger(__name__)


class ToolDispatch:
    """Routes tool_name -> handler. Explicit registration."""

    def __init__(
        self,
        database: DatabaseService,
        rag: RagService | None = None,
        weather: QWeatherClient | None = None,
        store_name: str | None = None,
        threshold: float = 0.6,
    ):
        db = DatabaseHandlers(database)

        self._handlers = {
            "run_sql_query": db.run_sql_query,
            "get_table_info": db.get_table_info,
            "list_tables": db.list_tables,
        }
        if rag is not None and store_name:
            knowledge = KnowledgeHandlers(rag, store_name, threshold)
            self._handlers["knowledge_base"] = knowledge.knowledge_base
        if weather is not None:
            forecasts = WeatherHandlers(weather)
            self._handlers["get_weather"] = forecasts.get_weather
            self._handlers["compare_weather"] = forecasts.compare_weather

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    async def execute(self, tool_name: str, input_data: dict) -> dict:
        handler = self._handlers.get(tool_name)
        if not handler:
            logger.warning("Unknown tool requested", extra={"tool_name": tool_name})
            return {
                "status": "error",
                "error_code": "UNKNOWN_TOOL",
                "message": f"Tool '{tool_name}' does not exist.",
            }
        logger.info("Tool call", extra={"tool_name": tool_name})
        return await handler(input_data or {})
