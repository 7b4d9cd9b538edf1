from fastapi import APIRouter, Depends, HTTPException
from typing import Any, Dict, List
import logging

from app.api.deps import get_container
from app.container import Container
from app.core.exceptions import NotFoundError
from app.domain.entities import EditStatus, MessageMetadata, MessageRole
from app.schemas.chat import MessageCreate
from app.services.commands import CreateMessageCommand
from app.services.image_editing import ImageEditRequest
from app.services.queries import GetMessagesQuery

router = APIRouter()
logger = logging.getLogger(__name__)

PROCESSING_REPLY = "I'll help you edit that image. Let me process your request..."
START_FAILED_REPLY = "I'm sorry, I encountered an error while trying to process your image. Please try again."
GUIDANCE_REPLY = (
    "Hello! I'm your DreamBees Art assistant. Please upload an image and describe your creative vision. "
    "I can enhance colors, transform scenes, add artistic effects, and bring your imagination to life "
    "through AI-powered editing."
)


@router.get("/chats/{chat_id}/messages")
async def list_messages(chat_id: int, container: Container = Depends(get_container)) -> List[Dict]:
    """List messages for a chat (oldest first)."""
    try:
        messages = await container.get_messages_handler.execute(GetMessagesQuery(chat_id=chat_id))
        return [m.to_dict() for m in messages]
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error fetching messages chat=%s", chat_id)
        raise HTTPException(status_code=500, detail="Failed to fetch messages")


@router.post("/chats/{chat_id}/messages", status_code=201)
async def create_message(chat_id: int, body: MessageCreate, container: Container = Depends(get_container)) -> List[Dict]:
    """Create a message; user turns also get an assistant reply.

    A user turn carrying an image starts an edit job and returns the
    assistant reply in ``processing`` state without waiting for it.
    """
    try:
        handler = container.create_message_handler
        user_message = await handler.execute(
            CreateMessageCommand(
                chat_id=chat_id,
                role=MessageRole(body.role),
                content=body.content,
                image_url=body.imageUrl,
                edited_image_url=body.editedImageUrl,
                metadata=body.metadata.to_domain() if body.metadata else None,
            )
        )

        if not user_message.is_user_message():
            return [user_message.to_dict()]

        if user_message.has_image() and user_message.content.strip():
            assistant_message = None
            try:
                assistant_message = await handler.execute(
                    CreateMessageCommand(
                        chat_id=chat_id,
                        role=MessageRole.ASSISTANT,
                        content=PROCESSING_REPLY,
                        metadata=MessageMetadata(status=EditStatus.PROCESSING.value),
                    )
                )
                container.image_editing.schedule(
                    ImageEditRequest(
                        message_id=assistant_message.id,
                        image_url=user_message.image_url,
                        prompt=user_message.content,
                        chat_id=chat_id,
                    )
                )
                logger.info("image edit scheduled message=%s chat=%s", assistant_message.id, chat_id)
            except Exception:
                logger.exception("Error starting image processing chat=%s", chat_id)
                if assistant_message is not None:
                    # The apology replaces the reply that would otherwise stay in processing
                    await container.message_repository.delete(assistant_message.id)
                assistant_message = await handler.execute(
                    CreateMessageCommand(chat_id=chat_id, role=MessageRole.ASSISTANT, content=START_FAILED_REPLY)
                )
            return [user_message.to_dict(), assistant_message.to_dict()]

        assistant_message = await handler.execute(
            CreateMessageCommand(chat_id=chat_id, role=MessageRole.ASSISTANT, content=GUIDANCE_REPLY)
        )
        return [user_message.to_dict(), assistant_message.to_dict()]
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error creating message chat=%s", chat_id)
        raise HTTPException(status_code=500, detail="Failed to create message")


@router.get("/messages/{message_id}/status")
async def get_message_status(message_id: int, container: Container = Depends(get_container)) -> Dict[str, Any]:
    """Report the edit-job status recorded on a message."""
    message = await container.message_repository.find_by_id(message_id)
    if message is None:
        raise NotFoundError("Message")
    metadata = message.metadata
    # Messages that never carried an edit job are complete as written
    status = metadata.status if metadata and metadata.status else EditStatus.COMPLETED.value
    payload: Dict[str, Any] = {"status": status}
    if metadata and metadata.error:
        payload["error"] = metadata.error
    if message.edited_image_url:
        payload["editedImageUrl"] = message.edited_image_url
    return payload
