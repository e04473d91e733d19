"""Cached read operations and the health poller."""

from __future__ import annotations

import logging
import threading

from api_client import ApiClient
from models import HealthResponse, Publication, PublicationQuery, PublicationsResponse, PublicationStats
from query_cache import QueryCache, QueryPolicy, make_query_key
from retry import RetryPolicy

HEALTH_REFETCH_SECONDS = 30.0
PUBLICATIONS_STALE_SECONDS = 5 * 60
PUBLICATION_STALE_SECONDS = 5 * 60
STATS_STALE_SECONDS = 10 * 60

HEALTH_POLICY = QueryPolicy(
    stale_time=0.0,
    retry=RetryPolicy(retries=3),
    refetch_interval=HEALTH_REFETCH_SECONDS,
)
PUBLICATIONS_POLICY = QueryPolicy(stale_time=PUBLICATIONS_STALE_SECONDS)
PUBLICATION_POLICY = QueryPolicy(stale_time=PUBLICATION_STALE_SECONDS)
STATS_POLICY = QueryPolicy(stale_time=STATS_STALE_SECONDS)

LOGGER = logging.getLogger(__name__)


class BioscienceQueries:
    """Read operations routed through a shared :class:`QueryCache`."""

    def __init__(self, client: ApiClient, cache: QueryCache | None = None) -> None:
        self.client = client
        self.cache = cache if cache is not None else QueryCache()

    def health_check(self) -> HealthResponse:
        return self.cache.fetch(make_query_key("health"), self.client.get_health, HEALTH_POLICY)

    def publications(self, query: PublicationQuery | None = None) -> PublicationsResponse:
        return self.cache.fetch(
            make_query_key("publications", query),
            lambda: self.client.get_publications(query),
            PUBLICATIONS_POLICY,
        )

    def publication(self, publication_id: str | int | None) -> Publication | None:
        """Single publication, or None without a request when no id is given."""
        if not publication_id:
            return None
        return self.cache.fetch(
            make_query_key("publication", str(publication_id)),
            lambda: self.client.get_publication(publication_id),
            PUBLICATION_POLICY,
        )

    def publication_stats(self) -> PublicationStats:
        return self.cache.fetch(
            make_query_key("publicationStats"),
            self.client.get_publication_stats,
            STATS_POLICY,
        )


class HealthMonitor:
    """Refetches the health check on a fixed interval, regardless of staleness.

    The poller runs in a daemon thread. A failed poll (after the health
    policy's retries) is recorded in ``last_error`` and polling continues.
    """

    def __init__(self, queries: BioscienceQueries, interval: float = HEALTH_REFETCH_SECONDS) -> None:
        self.queries = queries
        self.interval = interval
        self.last_health: HealthResponse | None = None
        self.last_error: Exception | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def healthy(self) -> bool:
        return self.last_error is None and self.last_health is not None and self.last_health.healthy

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> HealthResponse | None:
        try:
            self.last_health = self.queries.health_check()
            self.last_error = None
        except Exception as exc:
            self.last_error = exc
            LOGGER.warning("Health check failed: %s", exc)
            return None
        LOGGER.info("Backend status=%s model=%s", self.last_health.status, self.last_health.model)
        return self.last_health

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="health-monitor", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while True:
            self.poll_once()
            if self._stop.wait(self.interval):
                break
