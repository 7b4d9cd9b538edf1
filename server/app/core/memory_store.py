from __future__ import annotations
import threading
from typing import Dict

from app.domain.entities import Chat, Message


class MemoryStore:
    """Process-local tables for the in-memory repositories.

    One instance is built at startup and handed to both repositories; tests
    build their own to stay isolated.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._chat_id = 0
        self._msg_id = 0
        self.chats: Dict[int, Chat] = {}
        self.messages: Dict[int, Message] = {}

    def next_chat_id(self) -> int:
        with self._lock:
            self._chat_id += 1
            return self._chat_id

    def next_message_id(self) -> int:
        with self._lock:
            self._msg_id += 1
            return self._msg_id
