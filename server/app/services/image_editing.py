"""Background image-edit jobs.

Each job is tracked on the assistant message created for it:
``metadata.status`` moves from ``processing`` to ``completed`` or ``error``
and never leaves a terminal state. Jobs run as fire-and-forget asyncio tasks
and report only through ``MessageRepository.update``.
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Set

from app.domain.entities import EditStatus, MessageMetadata, MessagePatch
from app.providers.base import ImageEditProvider
from app.repositories.base import MessageRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageEditRequest:
    message_id: int
    image_url: str
    prompt: str
    chat_id: int


class ImageEditingService:
    def __init__(self, message_repository: MessageRepository, provider: ImageEditProvider) -> None:
        self.message_repository = message_repository
        self.provider = provider
        self._tasks: Set["asyncio.Task[None]"] = set()

    def schedule(self, request: ImageEditRequest) -> "asyncio.Task[None]":
        """Start the edit without waiting for it."""
        task = asyncio.create_task(
            self.process_image_edit(request), name=f"image-edit-{request.message_id}"
        )
        # The loop only keeps weak references to tasks
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def wait_idle(self) -> None:
        while True:
            pending = [t for t in self._tasks if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def aclose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.wait_idle()

    async def process_image_edit(self, request: ImageEditRequest) -> None:
        try:
            await self._update_status(request.message_id, EditStatus.PROCESSING)

            result = await self.provider.edit_image(request.image_url, request.prompt)

            message = await self.message_repository.find_by_id(request.message_id)
            if message is None:
                logger.warning("image edit finished for missing message id=%s", request.message_id)
                return
            metadata = MessageMetadata(
                status=EditStatus.COMPLETED.value,
                original_prompt=request.prompt,
                seed=result.seed,
            )
            final = message.with_edited_image(result.edited_image_url).with_metadata(metadata)
            await self.message_repository.update(
                request.message_id,
                MessagePatch(edited_image_url=final.edited_image_url, metadata=final.metadata),
            )
            logger.info("image edit completed message=%s chat=%s", request.message_id, request.chat_id)
        except Exception as e:
            logger.exception("image edit failed message=%s chat=%s", request.message_id, request.chat_id)
            try:
                await self._update_status(request.message_id, EditStatus.ERROR, str(e) or e.__class__.__name__)
            except Exception:
                logger.exception("could not record edit failure for message=%s", request.message_id)

    async def _update_status(self, message_id: int, status: EditStatus, error: Optional[str] = None) -> None:
        metadata = MessageMetadata(status=status.value, error=error)
        await self.message_repository.update(message_id, MessagePatch(metadata=metadata))
