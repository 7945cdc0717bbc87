"""RAG Service — retrieval-augmented answers and raw similarity search over named vector stores.

Invariants:
    - Queries are stripped and truncated to max_query_chars before embedding
    - Retrieval uses k=4 and the caller's threshold (applied after top-k)
    - No hits: web search when requested, otherwise the general-model fallback
      (if enabled), otherwise the fixed NOT_FOUND_ANSWER
    - A failed or empty web search answers with a fixed message, never an exception
    - Hits: answer from a context prompt; sources de-duplicated per source file
    - With a session id, every answered turn lands in ConversationMemory
      (the fixed not-found reply is not a model answer and is not stored)

Design Decisions:
    - Store loaded per request from its JSON file: uploads from another request are visible
      immediately, and stores stay small enough for a linear scan anyway
"""

import logging
from dataclasses import dataclass, field

from chainlab.core.conversation_memory import ConversationMemory
from chainlab.core.domain_types import Embedder, ScoredDocument
from chainlab.core.errors import InvalidInputError, WebSearchError
from chainlab.core.vector_math import dedupe_sources
from chainlab.infrastructure.vector_index import DEFAULT_K, VectorIndexRepository
from chainlab.infrastructure.web_search_client import SerperClient
from chainlab.services.chat_service import ChatService
from chainlab.services.system_prompt import (
    NO_WEB_RESULTS_ANSWER, NOT_FOUND_ANSWER, RAG_SYSTEM_PROMPT, WEB_SEARCH_SYSTEM_PROMPT,
    build_general_prompt, build_rag_prompt, build_web_search_prompt, format_knowledge_results,
    web_search_failed_answer,
)

logger = logging.getLogger(__name__)


@dataclass
class RagAnswer:
    answer: str
    sources: list[dict] = field(default_factory=list)
    used_general_model: bool = False
    used_knowledge_base: bool = False
    used_web_search: bool = False
    search_results: list[dict] = field(default_factory=list)
    truncated: bool = False


class RagService:
    def __init__(
        self,
        chat: ChatService,
        repository: VectorIndexRepository,
        embedder: Embedder,
        memory: ConversationMemory,
        default_store: str = "default_vector_store",
        max_query_chars: int = 1000,
        web_search: SerperClient | None = None,
    ):
        self.chat = chat
        self.repository = repository
        self.embedder = embedder
        self.memory = memory
        self.default_store = default_store
        self.max_query_chars = max_query_chars
        self.web_search = web_search

    def prepare_query(self, query: str) -> tuple[str, bool]:
        """Strip and truncate. Returns (query, was_truncated)."""
        text = (query or "").strip()
        if not text:
            raise InvalidInputError("Query must not be empty", "query")
        if len(text) > self.max_query_chars:
            logger.info(f"Query truncated from {len(text)} to {self.max_query_chars} chars")
            return text[:self.max_query_chars], True
        return text, False

    def retrieve(
        self, query: str, store_name: str | None, k: int = DEFAULT_K, threshold: float = 0.0,
    ) -> list[ScoredDocument]:
        index = self.repository.load(store_name or self.default_store)
        return index.similarity_search(query, self.embedder, k=k, threshold=threshold)

    async def execute_query(
        self,
        query: str,
        store_name: str | None = None,
        similarity_threshold: float = 0.6,
        use_general_model_fallback: bool = True,
        session_id: str | None = None,
        use_web_search: bool = False,
    ) -> RagAnswer:
        question, truncated = self.prepare_query(query)
        results = self.retrieve(question, store_name, DEFAULT_K, similarity_threshold)
        history = self.memory.format_history(session_id)

        if not results:
            if use_web_search and self.web_search is not None:
                return await self._answer_from_web(question, history, session_id, truncated)
            if not use_general_model_fallback:
                return RagAnswer(NOT_FOUND_ANSWER, truncated=truncated)
            logger.info(
                "No chunk above threshold, falling back to general model",
                extra={"session_id": session_id},
            )
            answer = await self.chat.complete(
                build_general_prompt(question, history), session_id=session_id,
            )
            self.memory.add_turn(session_id, question, answer)
            return RagAnswer(answer, used_general_model=True, truncated=truncated)

        answer = await self.chat.complete(
            build_rag_prompt(question, results, history),
            system=RAG_SYSTEM_PROMPT,
            session_id=session_id,
        )
        self.memory.add_turn(session_id, question, answer)
        return RagAnswer(
            answer,
            sources=dedupe_sources(results),
            used_knowledge_base=True,
            truncated=truncated,
        )

    async def _answer_from_web(
        self, question: str, history: str, session_id: str | None, truncated: bool,
    ) -> RagAnswer:
        logger.info(
            "No chunk above threshold, trying web search", extra={"session_id": session_id},
        )
        try:
            results = await self.web_search.search(question)
        except WebSearchError as e:
            logger.warning(
                f"Web search failed: {e.message}",
                extra={"session_id": session_id, "error_code": e.code},
            )
            return RagAnswer(
                web_search_failed_answer(e.message), used_web_search=True, truncated=truncated,
            )
        if not results:
            return RagAnswer(NO_WEB_RESULTS_ANSWER, used_web_search=True, truncated=truncated)

        answer = await self.chat.complete(
            build_web_search_prompt(question, results, history),
            system=WEB_SEARCH_SYSTEM_PROMPT,
            session_id=session_id,
        )
        self.memory.add_turn(session_id, question, answer)
        return RagAnswer(
            answer,
            used_web_search=True,
            search_results=[r.to_dict() for r in results],
            truncated=truncated,
        )

    def search_similar_docs(
        self,
        query: str,
        store_name: str | None = None,
        num_results: int = DEFAULT_K,
        similarity_threshold: float = 0.0,
    ) -> list[dict]:
        question, _ = self.prepare_query(query)
        results = self.retrieve(question, store_name, num_results, similarity_threshold)
        return [
            {
                "content": hit.document.page_content,
                "source": hit.document.metadata.get("source"),
                "metadata": hit.document.metadata,
                "similarity": round(hit.score, 4),
            }
            for hit in results
        ]

    def knowledge_search(
        self, query: str, store_name: str | None, threshold: float,
    ) -> str:
        """Formatted hits for the agent's knowledge_base tool."""
        question, _ = self.prepare_query(query)
        return format_knowledge_results(self.retrieve(question, store_name, DEFAULT_K, threshold))
