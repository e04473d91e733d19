import threading
import time
from unittest.mock import MagicMock

import pytest

from errors import ApiError
from models import HealthResponse, PublicationQuery, PublicationStats
from queries import BioscienceQueries, HealthMonitor
from query_cache import QueryCache


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _queries(client: MagicMock, clock: FakeClock | None = None) -> BioscienceQueries:
    cache = QueryCache(clock=clock or FakeClock(), sleep=MagicMock())
    return BioscienceQueries(client, cache)


def test_health_check_retries_three_times_before_failing() -> None:
    client = MagicMock()
    client.get_health.side_effect = ApiError("connection refused")
    queries = _queries(client)

    with pytest.raises(ApiError, match="connection refused"):
        queries.health_check()

    assert client.get_health.call_count == 4


def test_health_check_is_refetched_on_every_read() -> None:
    client = MagicMock()
    client.get_health.return_value = HealthResponse(status="healthy")
    queries = _queries(client)

    queries.health_check()
    queries.health_check()

    assert client.get_health.call_count == 2


def test_publications_are_cached_for_five_minutes() -> None:
    clock = FakeClock()
    client = MagicMock()
    queries = _queries(client, clock)
    query = PublicationQuery(search="bone", limit=15)

    queries.publications(query)
    clock.now = 60
    queries.publications(PublicationQuery(search="bone", limit=15))
    assert client.get_publications.call_count == 1

    clock.now = 6 * 60
    queries.publications(query)
    assert client.get_publications.call_count == 2


def test_publications_list_is_not_retried() -> None:
    client = MagicMock()
    client.get_publications.side_effect = ApiError("HTTP error! status: 500", status_code=500)
    queries = _queries(client)

    with pytest.raises(ApiError):
        queries.publications()

    assert client.get_publications.call_count == 1


def test_different_filters_use_different_entries() -> None:
    client = MagicMock()
    queries = _queries(client)

    queries.publications(PublicationQuery(search="bone"))
    queries.publications(PublicationQuery(search="plant"))

    assert client.get_publications.call_count == 2


def test_publication_without_id_makes_no_request() -> None:
    client = MagicMock()
    queries = _queries(client)

    assert queries.publication("") is None
    assert queries.publication(None) is None
    client.get_publication.assert_not_called()


def test_publication_stats_cached_for_ten_minutes() -> None:
    clock = FakeClock()
    client = MagicMock()
    client.get_publication_stats.return_value = PublicationStats(total=3)
    queries = _queries(client, clock)

    queries.publication_stats()
    clock.now = 9 * 60
    queries.publication_stats()
    assert client.get_publication_stats.call_count == 1

    clock.now = 11 * 60
    queries.publication_stats()
    assert client.get_publication_stats.call_count == 2


def test_health_monitor_records_failure_and_recovers() -> None:
    client = MagicMock()
    client.get_health.side_effect = [ApiError("down")] * 4 + [HealthResponse(status="healthy", model="gpt")]
    monitor = HealthMonitor(_queries(client))

    assert monitor.poll_once() is None
    assert monitor.healthy is False
    assert str(monitor.last_error) == "down"

    health = monitor.poll_once()
    assert health is not None
    assert health.model == "gpt"
    assert monitor.healthy is True


def test_health_monitor_thread_polls_until_stopped() -> None:
    client = MagicMock()
    client.get_health.return_value = HealthResponse(status="healthy")
    monitor = HealthMonitor(_queries(client), interval=30)

    monitor.start()
    monitor.stop(timeout=5)

    assert client.get_health.call_count >= 1
    assert monitor.healthy is True


def test_health_monitor_polls_on_a_fixed_interval() -> None:
    polled_twice = threading.Event()
    calls: list[int] = []

    def get_health() -> HealthResponse:
        calls.append(1)
        if len(calls) >= 2:
            polled_twice.set()
        return HealthResponse(status="healthy")

    client = MagicMock()
    client.get_health.side_effect = get_health
    monitor = HealthMonitor(_queries(client), interval=0.01)

    monitor.start()
    assert polled_twice.wait(5) is True
    monitor.stop(timeout=5)

    assert len(calls) >= 2


def test_health_monitor_stop_ends_the_loop() -> None:
    client = MagicMock()
    client.get_health.return_value = HealthResponse(status="healthy")
    monitor = HealthMonitor(_queries(client), interval=0.01)

    monitor.start()
    assert monitor.running is True
    monitor.stop(timeout=5)
    calls_at_stop = client.get_health.call_count
    time.sleep(0.05)

    assert monitor.running is False
    assert client.get_health.call_count == calls_at_stop
