"""Chat Routes — plain chat and prompt-chain query.

Invariants:
    - /chat passes the whole message list; system entries become the system prompt
    - /query always uses the fixed query system prompt
"""

import logging

from fastapi import APIRouter, Depends

from chainlab.api.dependencies import get_chat_service
from chainlab.schemas.chat import (
    ChatContent, ChatRequest, ChatResponse, QueryRequest, QueryResponse, QueryText,
)
from chainlab.services.chat_service import ChatService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["chat"])


@router.post("/chat", response_model=ChatResponse)
async def chat(body: ChatRequest, chat_service: ChatService = Depends(get_chat_service)):
    content = await chat_service.chat(
        [m.model_dump() for m in body.messages], session_id=body.session_id,
    )
    return ChatResponse(response=ChatContent(content=content))


@router.post("/query", response_model=QueryResponse)
async def query(body: QueryRequest, chat_service: ChatService = Depends(get_chat_service)):
    text = await chat_service.query(body.query)
    return QueryResponse(result=QueryText(text=text))
