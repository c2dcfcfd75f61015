"""POST /api/chat - AI assistant proxy"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from demo_bank.api.dependencies import get_chat_client
from demo_bank.api.schemas import ChatRequest
from demo_bank.infrastructure.clients.chat import ChatClient

router = APIRouter()


@router.post("/chat")
async def chat(body: ChatRequest, chat_client: ChatClient = Depends(get_chat_client)):
    """Forward the conversation upstream and pass its status and body through"""
    status_code, payload = await chat_client.complete(body.messages)
    return JSONResponse(status_code=status_code, content=payload)
