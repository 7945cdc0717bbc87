"""RAG Routes — knowledge-base answers, raw similarity search, session memory reset.

Invariants:
    - use_agent=true hands the question to the tool-using agent with the store bound
    - A missing store is a 404, never an empty answer
    - use_web_search=true searches the web before any general-model fallback
"""

import logging

from fastapi import APIRouter, Depends

from chainlab.api.dependencies import (
    get_agent_runner, get_database, get_memory, get_rag_service, get_weather_client,
)
from chainlab.api.routes.agent import run_agent_query
from chainlab.core.conversation_memory import ConversationMemory
from chainlab.infrastructure.weather_client import QWeatherClient
from chainlab.schemas.rag import (
    MemoryClearRequest, MemoryClearResponse, RagQueryRequest, RagQueryResponse,
    SearchHit, SearchRequest, SearchResponse, SourceResponse, WebSearchResultResponse,
)
from chainlab.services.agent_runner import AgentRunner
from chainlab.services.database_service import DatabaseService
from chainlab.services.rag_service import RagService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["rag"])


@router.post("/rag/query", response_model=RagQueryResponse)
async def rag_query(
    body: RagQueryRequest,
    rag: RagService = Depends(get_rag_service),
    runner: AgentRunner = Depends(get_agent_runner),
    database: DatabaseService = Depends(get_database),
    weather: QWeatherClient | None = Depends(get_weather_client),
):
    if body.use_agent:
        agent = await run_agent_query(
            runner, database, rag, weather, body.query,
            body.store_name or rag.default_store, body.similarity_threshold, body.session_id,
        )
        return RagQueryResponse(
            answer=agent.answer,
            used_agent=True,
            used_knowledge_base=any(c.tool == "knowledge_base" for c in agent.tool_calls),
            truncated=agent.truncated,
            session_id=body.session_id,
        )

    answer = await rag.execute_query(
        body.query,
        store_name=body.store_name,
        similarity_threshold=body.similarity_threshold,
        use_general_model_fallback=body.use_general_model_fallback,
        session_id=body.session_id,
        use_web_search=body.use_web_search,
    )
    return RagQueryResponse(
        answer=answer.answer,
        sources=[SourceResponse(**s) for s in answer.sources],
        used_general_model=answer.used_general_model,
        used_knowledge_base=answer.used_knowledge_base,
        used_web_search=answer.used_web_search,
        search_results=[WebSearchResultResponse(**r) for r in answer.search_results],
        truncated=answer.truncated,
        session_id=body.session_id,
    )


@router.post("/rag/search", response_model=SearchResponse)
async def rag_search(body: SearchRequest, rag: RagService = Depends(get_rag_service)):
    hits = rag.search_similar_docs(
        body.query,
        store_name=body.store_name,
        num_results=body.num_results,
        similarity_threshold=body.similarity_threshold,
    )
    return SearchResponse(results=[SearchHit(**h) for h in hits], count=len(hits))


@router.post("/memory/clear", response_model=MemoryClearResponse)
async def clear_memory(
    body: MemoryClearRequest, memory: ConversationMemory = Depends(get_memory),
):
    cleared = memory.clear(body.session_id)
    logger.info("Session memory cleared", extra={"session_id": body.session_id})
    return MemoryClearResponse(session_id=body.session_id, cleared=cleared)
