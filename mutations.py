"""One-shot side-effecting requests with observable state."""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, TypeVar

from api_client import ApiClient
from models import (
    AISummary,
    AskResponse,
    ChatResponse,
    CompareResponse,
    ExtractResponse,
    GapsResponse,
    SummarizeResponse,
)
from query_cache import QueryCache

T = TypeVar("T")

IDLE = "idle"
PENDING = "pending"
SUCCESS = "success"
ERROR = "error"

LOGGER = logging.getLogger(__name__)


class Mutation(Generic[T]):
    """Runs ``fn`` once per call, without retry, and records the outcome.

    ``status`` is one of idle, pending, success or error. ``data`` and
    ``error`` hold the outcome of the latest call only.
    """

    def __init__(
        self,
        name: str,
        fn: Callable[..., T],
        on_success: Callable[[T], None] | None = None,
    ) -> None:
        self.name = name
        self._fn = fn
        self._on_success = on_success
        self.status = IDLE
        self.data: T | None = None
        self.error: Exception | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == PENDING

    def mutate_or_raise(self, *args: Any, **kwargs: Any) -> T:
        self.status = PENDING
        self.data = None
        self.error = None
        try:
            result = self._fn(*args, **kwargs)
        except Exception as exc:
            self.status = ERROR
            self.error = exc
            LOGGER.warning("Mutation %s failed: %s", self.name, exc)
            raise

        self.status = SUCCESS
        self.data = result
        if self._on_success is not None:
            try:
                self._on_success(result)
            except Exception:
                LOGGER.exception("on_success hook failed for mutation %s", self.name)
        return result

    def mutate(self, *args: Any, **kwargs: Any) -> T | None:
        """Like :meth:`mutate_or_raise` but leaves failures in ``error``."""
        try:
            return self.mutate_or_raise(*args, **kwargs)
        except Exception:
            return None

    def reset(self) -> None:
        self.status = IDLE
        self.data = None
        self.error = None


class BioscienceMutations:
    """One :class:`Mutation` per AI endpoint of the backend."""

    def __init__(self, client: ApiClient, cache: QueryCache) -> None:
        self.cache = cache
        self.ask: Mutation[AskResponse] = Mutation("ask", client.ask_question, on_success=self._after_ask)
        self.chat: Mutation[ChatResponse] = Mutation("chat", client.chat)
        self.summarize: Mutation[SummarizeResponse] = Mutation("summarize", client.summarize)
        self.extract: Mutation[ExtractResponse] = Mutation("extract", client.extract)
        self.find_gaps: Mutation[GapsResponse] = Mutation("find_gaps", client.find_gaps)
        self.compare: Mutation[CompareResponse] = Mutation("compare", client.compare)
        self.publication_summary: Mutation[AISummary] = Mutation(
            "publication_summary", client.get_publication_summary
        )

    def _after_ask(self, _: AskResponse) -> None:
        # No read query uses the "questions" bucket yet.
        self.cache.invalidate("questions")
