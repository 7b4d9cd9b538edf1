from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field

from app.domain.entities import MessageMetadata


class ChatCreate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=200)


class MetadataIn(BaseModel):
    status: Optional[str] = Field(default=None, pattern=r"^(processing|completed|error)$")
    error: Optional[str] = None
    originalPrompt: Optional[str] = None
    seed: Optional[int] = None

    def to_domain(self) -> Optional[MessageMetadata]:
        if self.status is None and self.error is None and self.originalPrompt is None and self.seed is None:
            return None
        return MessageMetadata(
            status=self.status,
            error=self.error,
            original_prompt=self.originalPrompt,
            seed=self.seed,
        )


class MessageCreate(BaseModel):
    role: str = Field(..., pattern=r"^(user|assistant)$")
    content: str
    imageUrl: Optional[str] = None
    editedImageUrl: Optional[str] = None
    metadata: Optional[MetadataIn] = None

