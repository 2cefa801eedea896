"""Keyed message-window memory for stateful chat turns.

Purpose of this abstraction:
    Keep the most recent messages of each conversation in process memory so a
    chat call can be given context continuity. Each conversation id owns an
    append-only log trimmed to the newest `max_messages` entries.

Persistence boundary:
    None. Memory lives for the process lifetime only and is never written to
    disk. Clearing a conversation drops its log entirely.

Concurrency:
    All reads and writes go through one `threading.Lock`; `get` returns copies
    so callers never observe concurrent mutation.
"""

import logging
import threading
from collections import defaultdict

from app.llm.provider_config import CHAT_MEMORY_MAX_MESSAGES


logger = logging.getLogger(__name__)


DEFAULT_CONVERSATION_ID = "default"


class ChatMemory:
    """Message window per conversation id."""

    def __init__(self, max_messages: int = CHAT_MEMORY_MAX_MESSAGES):
        self.max_messages = max_messages
        self._conversations: dict[str, list[dict]] = defaultdict(list)
        self._lock = threading.Lock()

    def get(self, conversation_id: str) -> list[dict]:
        """Return a copy of the stored messages, oldest first."""
        with self._lock:
            return [dict(message) for message in self._conversations.get(conversation_id, [])]

    def add(self, conversation_id: str, messages: list[dict]) -> None:
        """Append messages and trim the log to the newest `max_messages`.

        Empty contents are skipped.
        """
        with self._lock:
            log = self._conversations[conversation_id]
            for message in messages:
                if not message.get("content"):
                    continue
                log.append({"role": str(message["role"]), "content": str(message["content"])})

            overflow = len(log) - self.max_messages
            if overflow > 0:
                del log[:overflow]

    def clear(self, conversation_id: str) -> None:
        with self._lock:
            removed = self._conversations.pop(conversation_id, None)

        logger.debug(
            "Cleared conversation %s (%s messages)",
            conversation_id,
            len(removed) if removed else 0,
        )
