from __future__ import annotations
from typing import List, Optional

from app.core.memory_store import MemoryStore
from app.domain.entities import Chat, Message, MessageMetadata, MessagePatch, MessageRole


class MemoryChatRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def create(self, title: str) -> Chat:
        chat = Chat.create(title, self._store.next_chat_id())
        self._store.chats[chat.id] = chat
        return chat

    async def find_all(self) -> List[Chat]:
        rows = list(self._store.chats.values())
        rows.sort(key=lambda c: (c.created_at, c.id), reverse=True)
        return rows

    async def find_by_id(self, chat_id: int) -> Optional[Chat]:
        return self._store.chats.get(chat_id)

    async def delete(self, chat_id: int) -> bool:
        if self._store.chats.pop(chat_id, None) is None:
            return False
        for mid in [m.id for m in self._store.messages.values() if m.chat_id == chat_id]:
            del self._store.messages[mid]
        return True


class MemoryMessageRepository:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def create(
        self,
        chat_id: int,
        role: MessageRole,
        content: str,
        image_url: Optional[str] = None,
        edited_image_url: Optional[str] = None,
        metadata: Optional[MessageMetadata] = None,
    ) -> Message:
        msg = Message.create(
            id=self._store.next_message_id(),
            chat_id=chat_id,
            role=role,
            content=content,
            image_url=image_url,
            edited_image_url=edited_image_url,
            metadata=metadata,
        )
        self._store.messages[msg.id] = msg
        return msg

    async def find_by_chat_id(self, chat_id: int) -> List[Message]:
        msgs = [m for m in self._store.messages.values() if m.chat_id == chat_id]
        # chronological chat order
        msgs.sort(key=lambda m: (m.created_at, m.id))
        return msgs

    async def find_by_id(self, message_id: int) -> Optional[Message]:
        return self._store.messages.get(message_id)

    async def update(self, message_id: int, patch: MessagePatch) -> Optional[Message]:
        msg = self._store.messages.get(message_id)
        if msg is None:
            return None
        updated = msg.apply(patch)
        self._store.messages[message_id] = updated
        return updated

    async def delete(self, message_id: int) -> bool:
        return self._store.messages.pop(message_id, None) is not None
