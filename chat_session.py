"""Client-side conversation state for the research assistant chat."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from models import ChatMessage, ChatResponse
from mutations import Mutation

LOGGER = logging.getLogger(__name__)


class ChatSession:
    """Owns the conversation history; the backend is stateless.

    Each turn sends the full history, including the new user message.
    A failed turn keeps the user message in the history and records the error.
    """

    def __init__(self, chat: Mutation[ChatResponse]) -> None:
        self._chat = chat
        self.history: list[ChatMessage] = []

    @property
    def is_loading(self) -> bool:
        return self._chat.is_pending

    @property
    def error(self) -> Exception | None:
        return self._chat.error

    def send(self, text: str) -> ChatMessage | None:
        """Send one user turn and return the assistant reply, or None."""
        if not text.strip() or self.is_loading:
            return None

        user_message = ChatMessage(
            role="user",
            content=text,
            timestamp=datetime.now(UTC).isoformat(),
        )
        self.history.append(user_message)

        response = self._chat.mutate(text, list(self.history))
        if response is None:
            LOGGER.error("Failed to send message: %s", self._chat.error)
            return None

        reply = ChatMessage(role="assistant", content=response.message, timestamp=response.timestamp)
        self.history.append(reply)
        return reply

    def clear(self) -> None:
        self.history.clear()
        self._chat.reset()
