"""Tests for the background image-edit orchestrator."""

import asyncio

import pytest

from app.config import Settings
from app.domain.entities import MessageMetadata, MessageRole
from app.providers.base import ImageEditError
from app.providers.fal import FalProvider
from app.services.image_editing import ImageEditingService, ImageEditRequest


async def pending_message(message_repo):
    return await message_repo.create(
        1, MessageRole.ASSISTANT, "working", metadata=MessageMetadata(status="processing")
    )


def request_for(message, prompt="brighten it"):
    return ImageEditRequest(message_id=message.id, image_url="https://x/img.jpg", prompt=prompt, chat_id=1)


class BrokenUpdateRepository:
    """Message repository whose writes always fail."""

    def __init__(self, inner):
        self.inner = inner

    async def find_by_id(self, message_id):
        return await self.inner.find_by_id(message_id)

    async def update(self, message_id, patch):
        raise RuntimeError("database is locked")


class TestProcessImageEdit:
    @pytest.mark.asyncio
    async def test_success_completes(self, message_repo, provider):
        msg = await pending_message(message_repo)
        await ImageEditingService(message_repo, provider).process_image_edit(request_for(msg))

        done = await message_repo.find_by_id(msg.id)
        assert done.edited_image_url == "https://cdn.example/edited.jpg"
        assert done.metadata.to_dict() == {"status": "completed", "originalPrompt": "brighten it", "seed": 42}
        assert provider.calls == [("https://x/img.jpg", "brighten it")]

    @pytest.mark.asyncio
    async def test_success_without_seed(self, message_repo, provider):
        provider.seed = None
        msg = await pending_message(message_repo)
        await ImageEditingService(message_repo, provider).process_image_edit(request_for(msg))
        done = await message_repo.find_by_id(msg.id)
        assert done.metadata.status == "completed"
        assert done.metadata.seed is None

    @pytest.mark.asyncio
    async def test_failure_records_error(self, message_repo, provider):
        provider.error = ImageEditError("[fal] Too many requests. Please wait a moment and try again.")
        msg = await pending_message(message_repo)
        await ImageEditingService(message_repo, provider).process_image_edit(request_for(msg))

        failed = await message_repo.find_by_id(msg.id)
        assert failed.metadata.status == "error"
        assert "Too many requests" in failed.metadata.error
        assert failed.edited_image_url is None

    @pytest.mark.asyncio
    async def test_empty_result_is_error(self, message_repo, provider):
        provider.images = []
        msg = await pending_message(message_repo)
        await ImageEditingService(message_repo, provider).process_image_edit(request_for(msg))
        failed = await message_repo.find_by_id(msg.id)
        assert failed.metadata.status == "error"
        assert failed.edited_image_url is None

    @pytest.mark.asyncio
    async def test_blank_exception_text_still_describes_error(self, message_repo, provider):
        provider.error = TimeoutError()
        msg = await pending_message(message_repo)
        await ImageEditingService(message_repo, provider).process_image_edit(request_for(msg))
        failed = await message_repo.find_by_id(msg.id)
        assert failed.metadata.error == "TimeoutError"

    @pytest.mark.asyncio
    async def test_missing_credential_is_error(self, message_repo):
        settings = Settings(memory_mode=True, fal_key=None, fal_api_key=None, _env_file=None)
        msg = await pending_message(message_repo)
        await ImageEditingService(message_repo, FalProvider(settings)).process_image_edit(request_for(msg))
        failed = await message_repo.find_by_id(msg.id)
        assert failed.metadata.status == "error"
        assert "FAL_KEY" in failed.metadata.error

    @pytest.mark.asyncio
    async def test_missing_message_does_not_raise(self, message_repo, provider):
        await ImageEditingService(message_repo, provider).process_image_edit(
            ImageEditRequest(message_id=404, image_url="https://x/img.jpg", prompt="p", chat_id=1)
        )
        assert await message_repo.find_by_id(404) is None

    @pytest.mark.asyncio
    async def test_repository_failure_is_contained(self, message_repo, provider):
        msg = await pending_message(message_repo)
        service = ImageEditingService(BrokenUpdateRepository(message_repo), provider)
        await service.process_image_edit(request_for(msg))
        assert (await message_repo.find_by_id(msg.id)).metadata.status == "processing"


class TestScheduling:
    @pytest.mark.asyncio
    async def test_schedule_does_not_wait(self, message_repo, provider):
        provider.gate = asyncio.Event()
        msg = await pending_message(message_repo)
        service = ImageEditingService(message_repo, provider)

        task = service.schedule(request_for(msg))
        await asyncio.sleep(0)
        assert not task.done()
        assert service.pending == 1
        assert (await message_repo.find_by_id(msg.id)).metadata.status == "processing"

        provider.gate.set()
        await service.wait_idle()
        assert (await message_repo.find_by_id(msg.id)).metadata.status == "completed"

    @pytest.mark.asyncio
    async def test_aclose_cancels_hung_jobs(self, message_repo, provider):
        provider.gate = asyncio.Event()
        msg = await pending_message(message_repo)
        service = ImageEditingService(message_repo, provider)
        task = service.schedule(request_for(msg))
        await asyncio.sleep(0)

        await service.aclose()
        assert task.cancelled()

    @pytest.mark.asyncio
    async def test_wait_idle_without_jobs(self, message_repo, provider):
        await ImageEditingService(message_repo, provider).wait_idle()
