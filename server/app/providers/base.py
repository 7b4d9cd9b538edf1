from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Protocol


class ImageEditError(Exception):
    """The hosted image service could not produce an edit."""


class MissingCredentialError(ImageEditError):
    pass


@dataclass(frozen=True)
class ImageEditResult:
    edited_image_url: str
    original_image_url: str
    prompt: str
    seed: Optional[int] = None


class ImageEditProvider(Protocol):
    id: str

    async def edit_image(self, image_url: str, prompt: str) -> ImageEditResult:
        ...

    async def upload_image(self, content: bytes, file_name: str, content_type: str) -> str:
        """Store the bytes with the provider and return a public URL."""
        ...
