from __future__ import annotations
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncEngine

from app.config import Settings
from app.core.memory_store import MemoryStore
from app.db.session import build_engine, build_session_factory, init_db
from app.providers.base import ImageEditProvider
from app.providers.fal import FalProvider
from app.repositories.memory import MemoryChatRepository, MemoryMessageRepository
from app.repositories.sql import SqlChatRepository, SqlMessageRepository
from app.services.commands import CreateChatCommandHandler, CreateMessageCommandHandler
from app.services.image_editing import ImageEditingService
from app.services.queries import GetChatsQueryHandler, GetMessagesQueryHandler


class Container:
    """Wires repositories, handlers and the edit service for one app instance."""

    def __init__(
        self,
        settings: Settings,
        provider: Optional[ImageEditProvider] = None,
        store: Optional[MemoryStore] = None,
    ) -> None:
        self.settings = settings
        self.engine: Optional[AsyncEngine] = None

        if settings.memory_mode:
            self.store = store or MemoryStore()
            self.chat_repository = MemoryChatRepository(self.store)
            self.message_repository = MemoryMessageRepository(self.store)
        else:
            self.engine = build_engine(settings.database_url)
            session_factory = build_session_factory(self.engine)
            self.chat_repository = SqlChatRepository(session_factory)
            self.message_repository = SqlMessageRepository(session_factory)

        self.provider: ImageEditProvider = provider or FalProvider(settings)

        self.create_chat_handler = CreateChatCommandHandler(self.chat_repository)
        self.create_message_handler = CreateMessageCommandHandler(self.chat_repository, self.message_repository)
        self.get_chats_handler = GetChatsQueryHandler(self.chat_repository)
        self.get_messages_handler = GetMessagesQueryHandler(self.chat_repository, self.message_repository)

        self.image_editing = ImageEditingService(self.message_repository, self.provider)

    async def startup(self) -> None:
        if self.engine is not None:
            # Ensure SQLite tables exist
            await init_db(self.engine)

    async def shutdown(self) -> None:
        await self.image_editing.aclose()
        if self.engine is not None:
            await self.engine.dispose()
