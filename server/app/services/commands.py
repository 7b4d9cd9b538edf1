from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Optional

from app.core.exceptions import NotFoundError, ValidationError
from app.domain.entities import Chat, Message, MessageMetadata, MessageRole
from app.repositories.base import ChatRepository, MessageRepository


def default_chat_title(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"Chat {today.month}/{today.day}/{today.year}"


@dataclass
class CreateChatCommand:
    title: Optional[str] = None


class CreateChatCommandHandler:
    def __init__(self, chat_repository: ChatRepository) -> None:
        self.chat_repository = chat_repository

    async def execute(self, command: CreateChatCommand) -> Chat:
        title = (command.title or "").strip() or default_chat_title()
        return await self.chat_repository.create(title)


@dataclass
class CreateMessageCommand:
    chat_id: int
    role: MessageRole
    content: str
    image_url: Optional[str] = None
    edited_image_url: Optional[str] = None
    metadata: Optional[MessageMetadata] = None


class CreateMessageCommandHandler:
    def __init__(self, chat_repository: ChatRepository, message_repository: MessageRepository) -> None:
        self.chat_repository = chat_repository
        self.message_repository = message_repository

    async def execute(self, command: CreateMessageCommand) -> Message:
        if command.chat_id <= 0:
            raise ValidationError("Invalid chat ID")
        if not command.content or not command.content.strip():
            raise ValidationError("Message content must not be empty")
        if await self.chat_repository.find_by_id(command.chat_id) is None:
            raise NotFoundError("Chat")

        return await self.message_repository.create(
            chat_id=command.chat_id,
            role=MessageRole(command.role),
            content=command.content,
            image_url=command.image_url or None,
            edited_image_url=command.edited_image_url or None,
            metadata=command.metadata or None,
        )
