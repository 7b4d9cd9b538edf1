from __future__ import annotations
from dataclasses import dataclass
from typing import List

from app.core.exceptions import NotFoundError
from app.domain.entities import Chat, Message
from app.repositories.base import ChatRepository, MessageRepository


@dataclass
class GetChatsQuery:
    pass


class GetChatsQueryHandler:
    def __init__(self, chat_repository: ChatRepository) -> None:
        self.chat_repository = chat_repository

    async def execute(self, query: GetChatsQuery) -> List[Chat]:
        return await self.chat_repository.find_all()


@dataclass
class GetMessagesQuery:
    chat_id: int


class GetMessagesQueryHandler:
    def __init__(self, chat_repository: ChatRepository, message_repository: MessageRepository) -> None:
        self.chat_repository = chat_repository
        self.message_repository = message_repository

    async def execute(self, query: GetMessagesQuery) -> List[Message]:
        if await self.chat_repository.find_by_id(query.chat_id) is None:
            raise NotFoundError("Chat")
        return await self.message_repository.find_by_chat_id(query.chat_id)
