"""Typed HTTP client for the NASA bioscience backend."""

from __future__ import annotations

import logging
from typing import Any

import requests

from config import DEFAULT_API_URL, DEFAULT_TIMEOUT_SECONDS
from errors import ApiError
from models import (
    AISummary,
    AskResponse,
    ChatMessage,
    ChatResponse,
    CompareResponse,
    ExtractResponse,
    GapsResponse,
    HealthResponse,
    Publication,
    PublicationQuery,
    PublicationsResponse,
    PublicationStats,
    SummarizeResponse,
)

SUMMARY_STYLES: frozenset[str] = frozenset({"concise", "detailed", "technical"})
EXTRACT_TYPES: frozenset[str] = frozenset({"key_findings", "organisms", "methods", "results"})

LOGGER = logging.getLogger(__name__)


class ApiClient:
    """Thin wrapper over the backend's JSON endpoints.

    The client performs exactly one HTTP call per operation. It never retries;
    retry and caching belong to the query layer. Every request carries an
    explicit timeout.

    Args:
        base_url: Backend root, e.g. ``http://localhost:8000``.
        timeout: Per-request timeout in seconds.
        session: Optional ``requests.Session`` used as the transport. When
            omitted, module-level ``requests.request`` is used.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session

    def _request(
        self,
        endpoint: str,
        method: str = "GET",
        json_payload: dict[str, Any] | None = None,
        params: list[tuple[str, str]] | None = None,
    ) -> Any:
        url = f"{self.base_url}{endpoint}"
        headers = {"Content-Type": "application/json"}
        send = self._session.request if self._session is not None else requests.request

        LOGGER.debug("%s %s params=%s", method, url, params)
        try:
            response = send(
                method=method,
                url=url,
                headers=headers,
                json=json_payload,
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            LOGGER.warning("Request to %s failed: %s", url, exc)
            raise ApiError(f"Network error calling {endpoint}: {exc}") from exc

        if not response.ok:
            message = _error_message(response)
            LOGGER.warning("Backend returned status=%s for %s: %s", response.status_code, url, message)
            raise ApiError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"Invalid JSON in response from {endpoint}") from exc

    def get_health(self) -> HealthResponse:
        return HealthResponse.from_payload(self._request("/health"))

    def ask_question(self, question: str, context: str | None = None) -> AskResponse:
        payload: dict[str, Any] = {"question": question}
        if context:
            payload["context"] = context
        body = self._request("/api/ask", method="POST", json_payload=payload)
        fields = _require_fields(body, "question", "answer", "model", "timestamp")
        return AskResponse(**fields)

    def chat(self, message: str, history: list[ChatMessage] | None = None) -> ChatResponse:
        payload: dict[str, Any] = {"message": message}
        if history is not None:
            payload["history"] = [item.to_payload() for item in history]
        body = self._request("/api/chat", method="POST", json_payload=payload)
        fields = _require_fields(body, "message", "timestamp")
        return ChatResponse(message=fields["message"], role="assistant", timestamp=fields["timestamp"])

    def summarize(self, topic: str, style: str | None = None) -> SummarizeResponse:
        payload: dict[str, Any] = {"topic": topic}
        if style is not None:
            if style not in SUMMARY_STYLES:
                raise ValueError(f"Unsupported summary style: {style!r}")
            payload["style"] = style
        body = self._request("/api/summarize", method="POST", json_payload=payload)
        fields = _require_fields(body, "topic", "summary", "style", "timestamp")
        return SummarizeResponse(**fields)

    def extract(self, text: str, extract_type: str | None = None) -> ExtractResponse:
        payload: dict[str, Any] = {"text": text}
        if extract_type is not None:
            if extract_type not in EXTRACT_TYPES:
                raise ValueError(f"Unsupported extract type: {extract_type!r}")
            payload["extractType"] = extract_type
        body = self._request("/api/extract", method="POST", json_payload=payload)
        fields = _require_fields(body, "extractType", "extracted", "timestamp")
        return ExtractResponse(
            extract_type=fields["extractType"],
            extracted=fields["extracted"],
            timestamp=fields["timestamp"],
        )

    def find_gaps(self, area: str | None = None) -> GapsResponse:
        payload: dict[str, Any] = {"area": area} if area else {}
        body = self._request("/api/gaps", method="POST", json_payload=payload)
        fields = _require_fields(body, "area", "gaps", "timestamp")
        return GapsResponse(**fields)

    def compare(self, topic1: str, topic2: str) -> CompareResponse:
        payload = {"topic1": topic1, "topic2": topic2}
        body = self._request("/api/compare", method="POST", json_payload=payload)
        fields = _require_fields(body, "topic1", "topic2", "comparison", "timestamp")
        return CompareResponse(**fields)

    def get_publications(self, query: PublicationQuery | None = None) -> PublicationsResponse:
        params = query.to_params() if query is not None else []
        body = self._request("/api/publications", params=params or None)
        return PublicationsResponse.from_payload(body)

    def get_publication(self, publication_id: str | int) -> Publication:
        return Publication.from_payload(self._request(f"/api/publications/{publication_id}"))

    def get_publication_stats(self) -> PublicationStats:
        return PublicationStats.from_payload(self._request("/api/publications/stats"))

    def get_publication_summary(self, publication: Publication) -> AISummary:
        body = self._request(
            "/api/publication-summary",
            method="POST",
            json_payload=publication.summary_request(),
        )
        return AISummary.from_payload(body)


def _error_message(response: requests.Response) -> str:
    """Best-effort server message, falling back to the HTTP status."""
    try:
        data = response.json()
    except ValueError:
        data = {}
    if isinstance(data, dict) and isinstance(data.get("error"), str) and data["error"]:
        return data["error"]
    return f"HTTP error! status: {response.status_code}"


def _require_fields(body: Any, *names: str) -> dict[str, str]:
    if not isinstance(body, dict):
        raise ApiError("Unexpected response shape: expected a JSON object")
    missing = [name for name in names if name not in body]
    if missing:
        raise ApiError(f"Response missing keys: {missing}")
    return {name: str(body[name]) for name in names}
