"""Service test fixtures — service graph around fakes + FastAPI test client.

Invariants:
    - Every test gets a fresh memory-backed DatabaseService seeded with the sample tables
    - Vector stores live under tmp_path: nothing touches the working directory
    - The Anthropic boundary is a MockAnthropicClient; tests queue its responses
    - QWeather and Serper share one httpx.MockTransport that routes by host
      (tests/fake_qweather.py, tests/fake_serper.py)

Design Decisions:
    - ASGITransport does not run the lifespan: the client fixture wires app.state with
      build_services(), the same function the lifespan uses
"""

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from chainlab.config import Settings
from chainlab.core.conversation_memory import ConversationMemory
from chainlab.core.domain_types import DatabaseBackend, Document
from chainlab.core.hash_embedding import HashingEmbedder
from chainlab.infrastructure.table_store import TableStore
from chainlab.infrastructure.vector_index import VectorIndexRepository
from chainlab.infrastructure.web_search_client import SerperClient
from chainlab.main import app, build_services
from chainlab.services.chat_service import ChatService
from chainlab.services.database_service import DatabaseService
from chainlab.services.rag_service import RagService
from tests import fake_qweather, fake_serper
from tests.services.mock_anthropic import MockAnthropicClient

KNOWLEDGE_DOCS = [
    Document(
        "Chainlab supports uploading text documents and answering questions about them.",
        {"source": "guide.md"},
    ),
    Document(
        "The office cafeteria opens at eight in the morning and closes at six.",
        {"source": "facilities.txt"},
    ),
]


@pytest.fixture
def settings(tmp_path):
    return Settings(
        anthropic_api_key="sk-ant-test-fake-key",
        vector_store_dir=str(tmp_path / "stores"),
        embedding_dimension=256,
        qweather_key="test-weather-key",
        qweather_geo_url=fake_qweather.GEO_URL,
        qweather_api_url=fake_qweather.API_URL,
        serper_api_key="test-serper-key",
        serper_search_url=fake_serper.SEARCH_URL,
        _env_file=None,
    )


@pytest.fixture
def mock_llm():
    return MockAnthropicClient([])


@pytest.fixture
async def database():
    db = DatabaseService(DatabaseBackend.MEMORY, table_store=TableStore())
    await db.init(seed_sample=True)
    yield db
    await db.close()


@pytest.fixture
def embedder():
    return HashingEmbedder(256)


@pytest.fixture
def repository(tmp_path):
    return VectorIndexRepository(tmp_path / "stores")


@pytest.fixture
def knowledge_store(repository, embedder):
    """A 'kb' store holding KNOWLEDGE_DOCS."""
    repository.create("kb", KNOWLEDGE_DOCS, embedder)
    return "kb"


@pytest.fixture
def memory():
    return ConversationMemory(max_turns=5)


@pytest.fixture
def search_calls():
    return []


@pytest.fixture
def web_search(search_calls):
    return SerperClient(
        "test-serper-key", fake_serper.make_http_client(search_calls),
        search_url=fake_serper.SEARCH_URL,
    )


@pytest.fixture
def rag_service(mock_llm, repository, embedder, memory, web_search):
    chat = ChatService(mock_llm, model="test-model")
    return RagService(
        chat, repository, embedder, memory, default_store="kb", web_search=web_search,
    )


def _http_client() -> httpx.AsyncClient:
    weather = fake_qweather.make_handler()
    search = fake_serper.make_handler()

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "serper.test":
            return search(request)
        return weather(request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
async def client(settings, database, mock_llm):
    """FastAPI test client with app.state wired around the fakes."""
    http_client = _http_client()
    build_services(app, settings, database, mock_llm, http_client)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    await http_client.aclose()
