"""Chat and message value objects.

Entities are immutable; repositories replace them wholesale when a message is
updated. ``MessagePatch`` names the only fields an update may touch.
"""

from __future__ import annotations
import dataclasses
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class EditStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class MessageMetadata:
    status: Optional[str] = None
    error: Optional[str] = None
    original_prompt: Optional[str] = None
    seed: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "status": self.status,
            "error": self.error,
            "originalPrompt": self.original_prompt,
            "seed": self.seed,
        }
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["MessageMetadata"]:
        if not data:
            return None
        status = data.get("status")
        if isinstance(status, EditStatus):
            status = status.value
        return cls(
            status=status,
            error=data.get("error"),
            original_prompt=data.get("originalPrompt", data.get("original_prompt")),
            seed=data.get("seed"),
        )


@dataclass(frozen=True)
class Chat:
    id: int
    title: str
    created_at: datetime

    @classmethod
    def create(cls, title: str, id: int) -> "Chat":
        return cls(id=id, title=title, created_at=utcnow())

    def is_valid(self) -> bool:
        return len(self.title.strip()) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "createdAt": to_iso(self.created_at)}


@dataclass(frozen=True)
class Message:
    id: int
    chat_id: int
    role: MessageRole
    content: str
    image_url: Optional[str]
    edited_image_url: Optional[str]
    metadata: Optional[MessageMetadata]
    created_at: datetime

    @classmethod
    def create(
        cls,
        id: int,
        chat_id: int,
        role: MessageRole,
        content: str,
        image_url: Optional[str] = None,
        edited_image_url: Optional[str] = None,
        metadata: Optional[MessageMetadata] = None,
    ) -> "Message":
        return cls(
            id=id,
            chat_id=chat_id,
            role=MessageRole(role),
            content=content,
            image_url=image_url or None,
            edited_image_url=edited_image_url or None,
            metadata=metadata or None,
            created_at=utcnow(),
        )

    def is_valid(self) -> bool:
        return len(self.content.strip()) > 0 and self.chat_id > 0

    def is_user_message(self) -> bool:
        return self.role == MessageRole.USER

    def is_assistant_message(self) -> bool:
        return self.role == MessageRole.ASSISTANT

    def has_image(self) -> bool:
        return self.image_url is not None

    def has_edited_image(self) -> bool:
        return self.edited_image_url is not None

    def with_edited_image(self, edited_image_url: str) -> "Message":
        return dataclasses.replace(self, edited_image_url=edited_image_url)

    def with_metadata(self, metadata: Optional[MessageMetadata]) -> "Message":
        return dataclasses.replace(self, metadata=metadata)

    def apply(self, patch: "MessagePatch") -> "Message":
        return dataclasses.replace(self, **dict(patch.changes()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "chatId": self.chat_id,
            "role": self.role.value,
            "content": self.content,
            "imageUrl": self.image_url,
            "editedImageUrl": self.edited_image_url,
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "createdAt": to_iso(self.created_at),
        }


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True)
class MessagePatch:
    """Partial update of a message. Fields left as ``UNSET`` are not touched."""

    image_url: Optional[str] = UNSET
    edited_image_url: Optional[str] = UNSET
    metadata: Optional[MessageMetadata] = UNSET

    def changes(self) -> Iterator[Tuple[str, Any]]:
        for field in dataclasses.fields(self):
            value = getattr(self, field.name)
            if value is not UNSET:
                yield field.name, value

    def is_empty(self) -> bool:
        return next(self.changes(), None) is None
