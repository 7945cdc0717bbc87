"""chainlab API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ChainlabError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Every long-lived handle (database, Anthropic client, HTTP client, vector store
      repository, session memory) is created in the lifespan, stored on app.state
      and closed on shutdown
    - A failure part-way through startup still closes whatever was already opened

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - AsyncExitStack registers each close right after its handle exists, so shutdown
      order is the reverse of startup order
    - build_services() split out of the lifespan so tests can wire the same graph
      around fakes
"""

import logging
import os
from contextlib import AsyncExitStack, asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from chainlab.api.error_handlers import register_error_handlers
from chainlab.api.routes import agent, chat, database, documents, health, rag, weather
from chainlab.config import Settings, get_settings
from chainlab.core.conversation_memory import ConversationMemory
from chainlab.core.hash_embedding import HashingEmbedder
from chainlab.infrastructure.anthropic_client import ResilientAnthropicClient
from chainlab.infrastructure.observability import setup_logging
from chainlab.infrastructure.vector_index import VectorIndexRepository
from chainlab.infrastructure.weather_client import QWeatherClient
from chainlab.infrastructure.web_search_client import SerperClient
from chainlab.services.chat_service import ChatService
from chainlab.services.database_service import DatabaseService
from chainlab.services.document_service import DocumentService
from chainlab.services.rag_service import RagService

logger = logging.getLogger(__name__)


def build_services(
    app: FastAPI,
    settings: Settings,
    database: DatabaseService,
    anthropic: ResilientAnthropicClient,
    http_client: httpx.AsyncClient,
) -> None:
    """Wire the service graph onto app.state."""
    embedder = HashingEmbedder(settings.embedding_dimension)
    repository = VectorIndexRepository(settings.vector_store_dir)
    memory = ConversationMemory(settings.memory_max_turns)
    chat_service = ChatService(
        anthropic,
        model=settings.agent_model,
        max_tokens=settings.llm_max_tokens,
        temperature=settings.llm_temperature,
    )

    app.state.database = database
    app.state.anthropic = anthropic
    app.state.http = http_client
    app.state.memory = memory
    app.state.chat = chat_service
    web_search = SerperClient(
        settings.serper_api_key, http_client,
        search_url=settings.serper_search_url,
        ttl_seconds=settings.web_search_cache_ttl_seconds,
        max_results=settings.web_search_max_results,
    )

    app.state.web_search = web_search
    app.state.rag = RagService(
        chat_service, repository, embedder, memory,
        default_store=settings.default_store_name,
        max_query_chars=settings.max_query_chars,
        web_search=web_search,
    )
    app.state.documents = DocumentService(
        repository, embedder,
        default_store=settings.default_store_name,
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
        max_files=settings.max_upload_files,
        max_bytes=settings.max_upload_bytes,
    )
    app.state.weather = QWeatherClient(
        settings.qweather_key, http_client,
        geo_url=settings.qweather_geo_url,
        api_url=settings.qweather_api_url,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    async with AsyncExitStack() as stack:
        database = DatabaseService.from_settings(settings)
        stack.push_async_callback(database.close)
        await database.init(seed_sample=settings.database_seed_sample)
        anthropic = ResilientAnthropicClient(
            settings.anthropic_api_key,
            max_retries=settings.anthropic_max_retries,
            base_delay_ms=settings.anthropic_base_delay_ms,
            max_delay_ms=settings.anthropic_max_delay_ms,
            timeout_seconds=settings.anthropic_timeout_seconds,
        )
        stack.push_async_callback(anthropic.close)
        http_client = await stack.enter_async_context(
            httpx.AsyncClient(timeout=settings.qweather_timeout_seconds),
        )
        build_services(app, settings, database, anthropic, http_client)
        if not settings.qweather_key:
            logger.warning("QWEATHER_KEY not set: weather tools disabled")
        if not settings.serper_api_key:
            logger.warning("SERPER_API_KEY not set: web search answers with a fixed message")
        logger.info("chainlab API started", extra={"backend": database.backend.value})
        try:
            yield
        finally:
            logger.info("chainlab API shutting down")


app = FastAPI(title="chainlab API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(health.router)
app.include_router(chat.router)
app.include_router(rag.router)
app.include_router(agent.router)
app.include_router(database.router)
app.include_router(documents.router)
app.include_router(weather.router)

# Mounted after the API routes so /api/v1/* takes precedence.
if os.path.isdir("static"):
    app.mount("/", StaticFiles(directory="static", html=True), name="static")
