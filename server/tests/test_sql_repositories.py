"""Tests for the SQLModel-backed repositories on a throwaway SQLite file."""

from datetime import timedelta

import pytest
import pytest_asyncio

from app.db.models import Message as MessageModel
from app.db.session import build_engine, build_session_factory, get_session, init_db
from app.domain.entities import MessageMetadata, MessagePatch, MessageRole
from app.repositories.sql import SqlChatRepository, SqlMessageRepository


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'dreambees-test.db'}")
    await init_db(engine)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def sql_chats(session_factory):
    return SqlChatRepository(session_factory)


@pytest.fixture
def sql_messages(session_factory):
    return SqlMessageRepository(session_factory)


class TestSqlChatRepository:
    @pytest.mark.asyncio
    async def test_create_and_find(self, sql_chats):
        chat = await sql_chats.create("Portrait touch-ups")
        assert chat.id == 1
        assert chat.created_at.tzinfo is not None
        found = await sql_chats.find_by_id(chat.id)
        assert found.title == "Portrait touch-ups"
        assert await sql_chats.find_by_id(999) is None

    @pytest.mark.asyncio
    async def test_find_all_newest_first(self, sql_chats):
        ids = [(await sql_chats.create(f"c{i}")).id for i in range(3)]
        assert [c.id for c in await sql_chats.find_all()] == list(reversed(ids))

    @pytest.mark.asyncio
    async def test_delete_cascades_to_messages(self, sql_chats, sql_messages):
        chat = await sql_chats.create("temp")
        await sql_messages.create(chat.id, MessageRole.USER, "hi")
        assert await sql_chats.delete(chat.id) is True
        assert await sql_chats.delete(chat.id) is False
        assert await sql_messages.find_by_chat_id(chat.id) == []


class TestSqlMessageRepository:
    @pytest.mark.asyncio
    async def test_metadata_round_trips(self, sql_chats, sql_messages):
        chat = await sql_chats.create("c")
        msg = await sql_messages.create(
            chat.id,
            MessageRole.ASSISTANT,
            "working",
            metadata=MessageMetadata(status="processing"),
        )
        found = await sql_messages.find_by_id(msg.id)
        assert found.metadata == MessageMetadata(status="processing")
        assert found.role is MessageRole.ASSISTANT
        assert found.image_url is None

    @pytest.mark.asyncio
    async def test_find_by_chat_id_oldest_first(self, session_factory, sql_chats, sql_messages):
        chat = await sql_chats.create("c")
        m1 = await sql_messages.create(chat.id, MessageRole.USER, "one")
        m2 = await sql_messages.create(chat.id, MessageRole.ASSISTANT, "two")
        async with get_session(session_factory) as session:
            row = await session.get(MessageModel, m2.id)
            row.created_at = m1.created_at - timedelta(seconds=10)
            session.add(row)

        msgs = await sql_messages.find_by_chat_id(chat.id)
        assert [m.id for m in msgs] == [m2.id, m1.id]

    @pytest.mark.asyncio
    async def test_update_is_partial(self, sql_chats, sql_messages):
        chat = await sql_chats.create("c")
        msg = await sql_messages.create(
            chat.id, MessageRole.ASSISTANT, "working", image_url="https://x/src.jpg",
            metadata=MessageMetadata(status="processing"),
        )
        updated = await sql_messages.update(
            msg.id,
            MessagePatch(
                edited_image_url="https://cdn/out.jpg",
                metadata=MessageMetadata(status="completed", original_prompt="brighten it", seed=9),
            ),
        )
        assert updated.edited_image_url == "https://cdn/out.jpg"
        assert updated.image_url == "https://x/src.jpg"
        assert updated.metadata.to_dict() == {"status": "completed", "originalPrompt": "brighten it", "seed": 9}
        assert (updated.chat_id, updated.role, updated.content) == (msg.chat_id, msg.role, msg.content)
        assert updated.created_at == msg.created_at

    @pytest.mark.asyncio
    async def test_update_missing(self, sql_messages):
        assert await sql_messages.update(123, MessagePatch(metadata=None)) is None

    @pytest.mark.asyncio
    async def test_delete(self, sql_chats, sql_messages):
        chat = await sql_chats.create("c")
        msg = await sql_messages.create(chat.id, MessageRole.USER, "bye")
        assert await sql_messages.delete(msg.id) is True
        assert await sql_messages.delete(msg.id) is False
