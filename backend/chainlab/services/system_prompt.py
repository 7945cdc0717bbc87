"""Prompt Templates — system prompts and user-prompt builders for every request mode.

Invariants:
    - Every builder is pure: same inputs -> same string
    - RAG prompts tell the model to admit ignorance rather than invent facts
    - History is injected as the "User: / AI:" transcript from ConversationMemory
"""

from chainlab.core.domain_types import ScoredDocument
from chainlab.infrastructure.web_search_client import SearchResult

QUERY_SYSTEM_PROMPT = (
    "You are a helpful assistant. Answer the user's question concisely."
)

RAG_SYSTEM_PROMPT = (
    "You answer questions using the supplied knowledge-base excerpts. "
    "If the excerpts do not contain the answer, say you don't know. "
    "Do not make up information. Keep answers short and direct."
)

AGENT_SYSTEM_PROMPT = (
    "You are an assistant with tools. Decide which tools, if any, the question needs: "
    "use the SQL tools for questions about stored data (call list_tables or get_table_info "
    "before writing a query you are unsure about), the knowledge_base tool for questions "
    "about uploaded documents, and the weather tools for weather questions. "
    "Answer concisely once you have what you need."
)

NOT_FOUND_ANSWER = (
    "Sorry, I could not find information related to your question in the knowledge base."
)

WEB_SEARCH_SYSTEM_PROMPT = (
    "You answer questions using the supplied web search results. "
    "If the results are not enough to answer, say so. Keep answers short and direct."
)

NO_WEB_RESULTS_ANSWER = (
    "Sorry, neither the knowledge base nor a web search turned up anything relevant."
)


def web_search_failed_answer(reason: str) -> str:
    return f"Sorry, the web search could not be completed. {reason}"


def build_general_prompt(question: str, history: str = "") -> str:
    """Prompt for the general-model fallback (no retrieved context)."""
    if history:
        return (
            f"Conversation so far:\n{history}\n\n"
            f"Using that history where relevant, answer the user's question: {question}\n"
            "Answer concisely:"
        )
    return (
        "Answer the following question. If you are not sure of the answer, say that you "
        "don't know; do not make things up.\n\n"
        f"Question: {question}\n\n"
        "Answer concisely:"
    )


def format_context(results: list[ScoredDocument]) -> str:
    blocks = []
    for i, hit in enumerate(results, start=1):
        source = hit.document.metadata.get("source", "unknown")
        blocks.append(f"[{i}] (source: {source})\n{hit.document.page_content}")
    return "\n\n".join(blocks)


def build_rag_prompt(question: str, results: list[ScoredDocument], history: str = "") -> str:
    """Prompt that answers from retrieved chunks, with optional conversation history."""
    parts = [
        "Answer the user's question from the information below. If the answer is not in "
        "the information, say clearly that you don't know; do not make things up.",
        f"Information:\n{format_context(results)}",
    ]
    if history:
        parts.append(f"Conversation history:\n{history}")
    parts.append(f"User question: {question}")
    parts.append("Answer concisely:")
    return "\n\n".join(parts)


def format_knowledge_results(results: list[ScoredDocument]) -> str:
    """Tool-result text for the agent's knowledge_base tool."""
    if not results:
        return "No relevant information found in the knowledge base."
    lines = ["Found the following relevant content in the knowledge base:"]
    for i, hit in enumerate(results, start=1):
        source = hit.document.metadata.get("source") or "unknown"
        lines.append(
            f"[{i}] relevance: {hit.score:.2f}\n{hit.document.page_content}\nsource: {source}\n"
        )
    return "\n".join(lines)


def format_search_results(results: list[SearchResult]) -> str:
    return "\n\n".join(
        f"[{i}] {r.title}\nsource: {r.display_link}\nlink: {r.link}\nsnippet: {r.snippet}"
        for i, r in enumerate(results, start=1)
    )


def build_web_search_prompt(
    question: str, results: list[SearchResult], history: str = "",
) -> str:
    """Prompt that answers from web search results when the knowledge base had nothing."""
    parts = [
        "Answer the user's question from the web search results below. If they do not "
        "contain enough information, say so.",
        f"Search results:\n{format_search_results(results)}",
    ]
    if history:
        parts.append(f"Conversation history:\n{history}")
    parts.append(f"User question: {question}")
    parts.append("Answer concisely:")
    return "\n\n".join(parts)
