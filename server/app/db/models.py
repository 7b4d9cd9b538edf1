from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, Optional
from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Chat(SQLModel, table=True):
    __tablename__ = "chats"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    created_at: datetime = Field(index=True)


class Message(SQLModel, table=True):
    __tablename__ = "messages"

    id: Optional[int] = Field(default=None, primary_key=True)
    chat_id: int = Field(index=True, foreign_key="chats.id")
    role: str
    content: str
    image_url: Optional[str] = None
    edited_image_url: Optional[str] = None
    # "metadata" is reserved on declarative classes, so only the column carries the name
    meta: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column("metadata", JSON, nullable=True))
    created_at: datetime = Field(index=True)
