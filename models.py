"""Shared typed models for the bioscience API client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from errors import ApiError

SORT_KEYS: frozenset[str] = frozenset({"relevance", "title", "year"})
SORT_ORDERS: frozenset[str] = frozenset({"asc", "desc"})


@dataclass(frozen=True, slots=True)
class Publication:
    """One NASA bioscience publication as served by the backend."""

    id: str | int
    title: str
    link: str
    authors: str
    year: int
    abstract: str
    tags: tuple[str, ...]
    relevance: int
    pmc_id: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> Publication:
        if not isinstance(payload, dict):
            raise ApiError("Unexpected publication payload shape: expected an object")
        pub_id = payload.get("id")
        title = _as_str(payload.get("title"))
        if pub_id in (None, "") or not title:
            raise ApiError("Publication payload is missing id or title")

        return cls(
            id=pub_id,
            title=title,
            link=_as_str(payload.get("link")),
            authors=_as_str(payload.get("authors")),
            year=_as_int(payload.get("year")),
            abstract=_as_str(payload.get("abstract")),
            tags=tuple(tag for tag in payload.get("tags") or [] if isinstance(tag, str)),
            relevance=max(0, min(100, _as_int(payload.get("relevance")))),
            pmc_id=_as_str(payload.get("pmcId")) or None,
        )

    def summary_request(self) -> dict[str, Any]:
        """Body for the publication-summary endpoint."""
        return {
            "title": self.title,
            "authors": self.authors,
            "year": self.year,
            "tags": list(self.tags),
        }


@dataclass(frozen=True, slots=True)
class PublicationsResponse:
    """Pagination envelope around a page of publications."""

    publications: tuple[Publication, ...]
    total: int
    limit: int
    offset: int
    has_more: bool

    @classmethod
    def from_payload(cls, payload: Any) -> PublicationsResponse:
        if not isinstance(payload, dict):
            raise ApiError("Unexpected publications payload shape: expected an object")
        items = payload.get("publications")
        if not isinstance(items, list):
            raise ApiError("Unexpected publications payload shape: 'publications' is not a list")

        return cls(
            publications=tuple(Publication.from_payload(item) for item in items),
            total=_as_int(payload.get("total")),
            limit=_as_int(payload.get("limit")),
            offset=_as_int(payload.get("offset")),
            has_more=bool(payload.get("hasMore")),
        )


@dataclass(frozen=True, slots=True)
class PublicationStats:
    """Aggregate counts by year and tag plus the most recent publications."""

    total: int | None
    by_year: dict[str, int] = field(default_factory=dict)
    by_tag: dict[str, int] = field(default_factory=dict)
    recent: tuple[Publication, ...] | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> PublicationStats:
        if not isinstance(payload, dict):
            raise ApiError("Unexpected stats payload shape: expected an object")
        recent = payload.get("recent")
        total = payload.get("total")

        return cls(
            total=_as_int(total) if total is not None else None,
            by_year=_as_counts(payload.get("byYear")),
            by_tag=_as_counts(payload.get("byTag")),
            recent=(
                tuple(Publication.from_payload(item) for item in recent)
                if isinstance(recent, list)
                else None
            ),
        )


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """One turn of a conversation. The client owns the full history."""

    role: str
    content: str
    timestamp: str | None = None

    def __post_init__(self) -> None:
        if self.role not in ("user", "assistant"):
            raise ValueError(f"Unsupported chat role: {self.role!r}")

    def to_payload(self) -> dict[str, str]:
        data = {"role": self.role, "content": self.content}
        if self.timestamp:
            data["timestamp"] = self.timestamp
        return data


@dataclass(frozen=True, slots=True)
class AISummary:
    """Structured summary generated fresh for a single publication view."""

    objective: str
    findings: tuple[str, ...]
    implications: str

    @classmethod
    def from_payload(cls, payload: Any) -> AISummary:
        if not isinstance(payload, dict):
            raise ApiError("Unexpected summary payload shape: expected an object")
        findings = payload.get("findings")
        return cls(
            objective=_as_str(payload.get("objective")),
            findings=tuple(f for f in findings if isinstance(f, str)) if isinstance(findings, list) else (),
            implications=_as_str(payload.get("implications")),
        )


@dataclass(frozen=True, slots=True)
class HealthResponse:
    status: str
    model: str | None = None
    api_key: str | None = None
    error: str | None = None

    @property
    def healthy(self) -> bool:
        return self.status == "healthy"

    @classmethod
    def from_payload(cls, payload: Any) -> HealthResponse:
        if not isinstance(payload, dict):
            raise ApiError("Unexpected health payload shape: expected an object")
        status = "healthy" if payload.get("status") == "healthy" else "unhealthy"
        return cls(
            status=status,
            model=_as_str(payload.get("model")) or None,
            api_key=_as_str(payload.get("apiKey")) or None,
            error=_as_str(payload.get("error")) or None,
        )


@dataclass(frozen=True, slots=True)
class AskResponse:
    question: str
    answer: str
    model: str
    timestamp: str


@dataclass(frozen=True, slots=True)
class ChatResponse:
    message: str
    role: str
    timestamp: str


@dataclass(frozen=True, slots=True)
class SummarizeResponse:
    topic: str
    summary: str
    style: str
    timestamp: str


@dataclass(frozen=True, slots=True)
class ExtractResponse:
    extract_type: str
    extracted: str
    timestamp: str


@dataclass(frozen=True, slots=True)
class GapsResponse:
    area: str
    gaps: str
    timestamp: str


@dataclass(frozen=True, slots=True)
class CompareResponse:
    topic1: str
    topic2: str
    comparison: str
    timestamp: str


@dataclass(frozen=True, slots=True)
class PublicationQuery:
    """Parameters of the publications list endpoint.

    Falsy values are left out of the query string, and ``tags`` is sent as a
    repeated parameter, matching what the backend expects.
    """

    search: str | None = None
    limit: int | None = None
    offset: int | None = None
    sort_by: str | None = None
    sort_order: str | None = None
    year_from: int | None = None
    year_to: int | None = None
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.sort_by is not None and self.sort_by not in SORT_KEYS:
            raise ValueError(f"Unsupported sort key: {self.sort_by!r}")
        if self.sort_order is not None and self.sort_order not in SORT_ORDERS:
            raise ValueError(f"Unsupported sort order: {self.sort_order!r}")

    def to_params(self) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        if self.search:
            params.append(("search", self.search))
        if self.limit:
            params.append(("limit", str(self.limit)))
        if self.offset:
            params.append(("offset", str(self.offset)))
        if self.sort_by:
            params.append(("sortBy", self.sort_by))
        if self.sort_order:
            params.append(("sortOrder", self.sort_order))
        if self.year_from:
            params.append(("yearFrom", str(self.year_from)))
        if self.year_to:
            params.append(("yearTo", str(self.year_to)))
        for tag in self.tags:
            params.append(("tags", tag))
        return params


def _as_str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _as_counts(value: Any) -> dict[str, int]:
    if not isinstance(value, dict):
        return {}
    return {str(key): _as_int(count) for key, count in value.items()}
