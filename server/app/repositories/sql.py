from __future__ import annotations
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.orm import sessionmaker
from sqlmodel import select, desc

from app.db.models import Chat as ChatModel, Message as MessageModel
from app.db.session import get_session
from app.domain.entities import Chat, Message, MessageMetadata, MessagePatch, MessageRole, utcnow


def _aware(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they are stored as UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _chat_from_row(row: ChatModel) -> Chat:
    return Chat(id=row.id, title=row.title, created_at=_aware(row.created_at))


def _message_from_row(row: MessageModel) -> Message:
    return Message(
        id=row.id,
        chat_id=row.chat_id,
        role=MessageRole(row.role),
        content=row.content,
        image_url=row.image_url,
        edited_image_url=row.edited_image_url,
        metadata=MessageMetadata.from_dict(row.meta),
        created_at=_aware(row.created_at),
    )


class SqlChatRepository:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    async def create(self, title: str) -> Chat:
        async with get_session(self._session_factory) as session:
            row = ChatModel(title=title, created_at=utcnow())
            session.add(row)
            await session.flush()
            await session.refresh(row)
            return _chat_from_row(row)

    async def find_all(self) -> List[Chat]:
        async with get_session(self._session_factory) as session:
            stmt = select(ChatModel).order_by(desc(ChatModel.created_at), desc(ChatModel.id))
            result = await session.exec(stmt)
            return [_chat_from_row(row) for row in result.all()]

    async def find_by_id(self, chat_id: int) -> Optional[Chat]:
        async with get_session(self._session_factory) as session:
            row = await session.get(ChatModel, chat_id)
            return _chat_from_row(row) if row else None

    async def delete(self, chat_id: int) -> bool:
        async with get_session(self._session_factory) as session:
            inst = await session.get(ChatModel, chat_id)
            if not inst:
                return False
            # Delete messages first (no relationship cascade defined)
            res = await session.exec(select(MessageModel).where(MessageModel.chat_id == chat_id))
            for m in res.all():
                await session.delete(m)
            await session.flush()
            await session.delete(inst)
            return True


class SqlMessageRepository:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    async def create(
        self,
        chat_id: int,
        role: MessageRole,
        content: str,
        image_url: Optional[str] = None,
        edited_image_url: Optional[str] = None,
        metadata: Optional[MessageMetadata] = None,
    ) -> Message:
        async with get_session(self._session_factory) as session:
            row = MessageModel(
                chat_id=chat_id,
                role=MessageRole(role).value,
                content=content,
                image_url=image_url or None,
                edited_image_url=edited_image_url or None,
                meta=metadata.to_dict() if metadata else None,
                created_at=utcnow(),
            )
            session.add(row)
            await session.flush()
            await session.refresh(row)
            return _message_from_row(row)

    async def find_by_chat_id(self, chat_id: int) -> List[Message]:
        async with get_session(self._session_factory) as session:
            stmt = (
                select(MessageModel)
                .where(MessageModel.chat_id == chat_id)
                .order_by(MessageModel.created_at, MessageModel.id)
            )
            result = await session.exec(stmt)
            return [_message_from_row(row) for row in result.all()]

    async def find_by_id(self, message_id: int) -> Optional[Message]:
        async with get_session(self._session_factory) as session:
            row = await session.get(MessageModel, message_id)
            return _message_from_row(row) if row else None

    async def update(self, message_id: int, patch: MessagePatch) -> Optional[Message]:
        async with get_session(self._session_factory) as session:
            row = await session.get(MessageModel, message_id)
            if not row:
                return None
            for name, value in patch.changes():
                if name == "metadata":
                    row.meta = value.to_dict() if value else None
                else:
                    setattr(row, name, value)
            session.add(row)
            await session.flush()
            await session.refresh(row)
            return _message_from_row(row)

    async def delete(self, message_id: int) -> bool:
        async with get_session(self._session_factory) as session:
            row = await session.get(MessageModel, message_id)
            if not row:
                return False
            await session.delete(row)
            return True
