"""Request Dependencies — hand the lifespan-owned handles to route functions.

Invariants:
    - Every handle is read from request.app.state; none is created per request
      except AgentRunner, which is stateless apart from the shared handles it wraps
"""

from fastapi import Request

from chainlab.config import Settings, get_settings
from chainlab.core.conversation_memory import ConversationMemory
from chainlab.infrastructure.weather_client import QWeatherClient
from chainlab.services.agent_runner import AgentRunner
from chainlab.services.chat_service import ChatService
from chainlab.services.database_service import DatabaseService
from chainlab.services.document_service import DocumentService
from chainlab.services.rag_service import RagService


def get_database(request: Request) -> DatabaseService:
    return request.app.state.database


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat


def get_rag_service(request: Request) -> RagService:
    return request.app.state.rag


def get_memory(request: Request) -> ConversationMemory:
    return request.app.state.memory


def get_document_service(request: Request) -> DocumentService:
    return request.app.state.documents


def get_weather_client(request: Request) -> QWeatherClient | None:
    return getattr(request.app.state, "weather", None)


def get_agent_runner(request: Request) -> AgentRunner:
    settings: Settings = get_settings()
    state = request.app.state
    return AgentRunner(
        state.anthropic,
        model=settings.agent_model,
        memory=state.memory,
        max_iterations=settings.agent_max_iterations,
        max_tokens=settings.agent_max_tokens,
        temperature=settings.llm_temperature,
    )
