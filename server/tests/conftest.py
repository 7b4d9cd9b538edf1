"""Shared fixtures: an isolated in-memory app wired to a fake image provider."""

import asyncio
from typing import List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

from app.config import Settings
from app.container import Container
from app.core.memory_store import MemoryStore
from app.main import create_app
from app.providers.base import ImageEditResult
from app.repositories.memory import MemoryChatRepository, MemoryMessageRepository


class FakeImageProvider:
    id = "fake"

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str]] = []
        self.uploads: List[Tuple[bytes, str, str]] = []
        self.error: Optional[Exception] = None
        self.images: List[str] = ["https://cdn.example/edited.jpg"]
        self.seed: Optional[int] = 42
        self.gate: Optional[asyncio.Event] = None

    async def edit_image(self, image_url: str, prompt: str) -> ImageEditResult:
        self.calls.append((image_url, prompt))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        if not self.images:
            raise RuntimeError("No images returned from FLUX API")
        return ImageEditResult(
            edited_image_url=self.images[0],
            original_image_url=image_url,
            prompt=prompt,
            seed=self.seed,
        )

    async def upload_image(self, content: bytes, file_name: str, content_type: str) -> str:
        self.uploads.append((content, file_name, content_type))
        return f"https://storage.example/{file_name}"


@pytest.fixture(params=["memory", "sql"])
def settings(request, tmp_path):
    return Settings(
        memory_mode=request.param == "memory",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'dreambees-api.db'}",
        fal_key=None,
        fal_api_key=None,
        _env_file=None,
    )


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def chat_repo(store):
    return MemoryChatRepository(store)


@pytest.fixture
def message_repo(store):
    return MemoryMessageRepository(store)


@pytest.fixture
def provider():
    return FakeImageProvider()


@pytest.fixture
def container(settings, provider, store):
    return Container(settings, provider=provider, store=store)


@pytest.fixture
def app(settings, container):
    return create_app(settings, container)


@pytest_asyncio.fixture
async def client(app, container):
    await container.startup()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    await container.shutdown()
