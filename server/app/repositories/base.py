from __future__ import annotations
from typing import List, Optional, Protocol

from app.domain.entities import Chat, Message, MessageMetadata, MessagePatch, MessageRole


class ChatRepository(Protocol):
    async def create(self, title: str) -> Chat:
        ...

    async def find_all(self) -> List[Chat]:
        """Newest first."""
        ...

    async def find_by_id(self, chat_id: int) -> Optional[Chat]:
        ...

    async def delete(self, chat_id: int) -> bool:
        """Remove the chat and its messages."""
        ...


class MessageRepository(Protocol):
    async def create(
        self,
        chat_id: int,
        role: MessageRole,
        content: str,
        image_url: Optional[str] = None,
        edited_image_url: Optional[str] = None,
        metadata: Optional[MessageMetadata] = None,
    ) -> Message:
        ...

    async def find_by_chat_id(self, chat_id: int) -> List[Message]:
        """Oldest first."""
        ...

    async def find_by_id(self, message_id: int) -> Optional[Message]:
        ...

    async def update(self, message_id: int, patch: MessagePatch) -> Optional[Message]:
        """Apply ``patch``; id, chat_id, role, content and created_at never change."""
        ...

    async def delete(self, message_id: int) -> bool:
        ...
