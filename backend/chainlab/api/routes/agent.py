"""Agent Routes — tool-using agent over database, knowledge base and weather tools.

Invariants:
    - knowledge_base tool offered only when the request names a store
    - Weather tools offered only when a QWeather key is configured
    - The query is truncated like a RAG query before it reaches the model
"""

import logging

from fastapi import APIRouter, Depends

from chainlab.api.dependencies import (
    get_agent_runner, get_database, get_rag_service, get_weather_client,
)
from chainlab.infrastructure.weather_client import QWeatherClient
from chainlab.schemas.agent import AgentQueryRequest, AgentQueryResponse, ToolCallResponse
from chainlab.services.agent_runner import AgentRunner
from chainlab.services.database_service import DatabaseService
from chainlab.services.rag_service import RagService
from chainlab.services.tool_dispatch import ToolDispatch

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/agent", tags=["agent"])


async def run_agent_query(
    runner: AgentRunner,
    database: DatabaseService,
    rag: RagService,
    weather: QWeatherClient | None,
    query: str,
    store_name: str | None,
    threshold: float,
    session_id: str | None,
) -> AgentQueryResponse:
    """Shared by /agent/query and /rag/query with use_agent."""
    question, truncated = rag.prepare_query(query)
    if store_name:
        # Fail with 404 up front rather than as a tool error mid-loop.
        rag.repository.load(store_name)
    dispatch = ToolDispatch(
        database,
        rag=rag,
        weather=weather if weather is not None and weather.api_key else None,
        store_name=store_name,
        threshold=threshold,
    )
    result = await runner.run(question, dispatch, session_id=session_id)
    return AgentQueryResponse(
        answer=result.answer,
        tool_calls=[ToolCallResponse(**call) for call in result.tool_calls],
        iterations=result.iterations,
        usage=result.usage,
        truncated=truncated,
        session_id=session_id,
    )


@router.post("/query", response_model=AgentQueryResponse)
async def agent_query(
    body: AgentQueryRequest,
    runner: AgentRunner = Depends(get_agent_runner),
    database: DatabaseService = Depends(get_database),
    rag: RagService = Depends(get_rag_service),
    weather: QWeatherClient | None = Depends(get_weather_client),
):
    return await run_agent_query(
        runner, database, rag, weather,
        body.query, body.store_name, body.similarity_threshold, body.session_id,
    )
