"""
Chat API routes.
"""
from fastapi import APIRouter
from pydantic import BaseModel

from services.chat_rules import GREETING, find_answer, get_default_chat_rules

router = APIRouter()


class ChatRequest(BaseModel):
    message: str


class ChatResponse(BaseModel):
    answer: str


class ChatGreetingResponse(BaseModel):
    greeting: str


@router.get("", response_model=ChatGreetingResponse)
async def chat_greeting():
    """Opening message for a new chat."""
    return ChatGreetingResponse(greeting=GREETING)


@router.post("", response_model=ChatResponse)
async def ask(data: ChatRequest):
    return ChatResponse(answer=find_answer(get_default_chat_rules(), data.message))
