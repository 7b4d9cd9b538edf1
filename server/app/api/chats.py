from fastapi import APIRouter, Depends, HTTPException
from typing import Dict, List, Optional
import logging

from app.api.deps import get_container
from app.container import Container
from app.core.exceptions import NotFoundError
from app.domain.entities import MessageRole
from app.schemas.chat import ChatCreate
from app.services.commands import CreateChatCommand, CreateMessageCommand
from app.services.queries import GetChatsQuery

router = APIRouter()
logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Hello! I'm your DreamBees Art assistant, ready to transform your images into artistic visions. "
    "Upload an image and describe your creative ideas - I'll bring them to life with AI-powered editing."
)


@router.get("/chats")
async def get_chats(container: Container = Depends(get_container)) -> List[Dict]:
    """Get all chats (most recent first)."""
    try:
        chats = await container.get_chats_handler.execute(GetChatsQuery())
        return [c.to_dict() for c in chats]
    except Exception:
        logger.exception("Error fetching chats")
        raise HTTPException(status_code=500, detail="Failed to fetch chats")


@router.post("/chats", status_code=201)
async def create_chat(body: Optional[ChatCreate] = None, container: Container = Depends(get_container)) -> Dict:
    """Create a chat and seed it with the welcome message."""
    try:
        chat = await container.create_chat_handler.execute(CreateChatCommand(title=body.title if body else None))
        await container.create_message_handler.execute(
            CreateMessageCommand(chat_id=chat.id, role=MessageRole.ASSISTANT, content=WELCOME_MESSAGE)
        )
        logger.info("chat created id=%s", chat.id)
        return chat.to_dict()
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error creating chat")
        raise HTTPException(status_code=500, detail="Failed to create chat")


@router.delete("/chats/{chat_id}")
async def delete_chat(chat_id: int, container: Container = Depends(get_container)) -> Dict[str, str]:
    """Delete a chat and all of its messages."""
    ok = await container.chat_repository.delete(chat_id)
    if not ok:
        raise NotFoundError("Chat")
    return {"status": "deleted", "id": str(chat_id)}
