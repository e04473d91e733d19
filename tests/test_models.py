import pytest

from errors import ApiError
from models import AISummary, ChatMessage, HealthResponse, Publication, PublicationQuery, PublicationStats


def test_publication_from_payload_normalizes_fields() -> None:
    pub = Publication.from_payload(
        {
            "id": "abc",
            "title": "  Plant Growth in Reduced Gravity ",
            "authors": "Chen, L.",
            "year": "2022",
            "tags": ["Plant Biology", 3, "Microgravity"],
            "relevance": 140,
        }
    )

    assert pub.title == "Plant Growth in Reduced Gravity"
    assert pub.year == 2022
    assert pub.tags == ("Plant Biology", "Microgravity")
    assert pub.relevance == 100
    assert pub.link == ""
    assert pub.pmc_id is None


def test_publication_without_title_is_rejected() -> None:
    with pytest.raises(ApiError, match="missing id or title"):
        Publication.from_payload({"id": 1})


def test_stats_from_payload() -> None:
    stats = PublicationStats.from_payload({"total": 12, "byYear": {"2020": 5, "2021": 7}, "byTag": {}})

    assert stats.total == 12
    assert stats.by_year == {"2020": 5, "2021": 7}
    assert stats.recent is None


def test_health_status_other_than_healthy_is_unhealthy() -> None:
    assert HealthResponse.from_payload({"status": "degraded"}).status == "unhealthy"
    assert HealthResponse.from_payload({"status": "healthy", "apiKey": "configured"}).api_key == "configured"


def test_summary_ignores_non_string_findings() -> None:
    summary = AISummary.from_payload({"objective": "o", "findings": ["a", None, "b"], "implications": "i"})
    assert summary.findings == ("a", "b")


def test_chat_message_rejects_unknown_role() -> None:
    with pytest.raises(ValueError, match="role"):
        ChatMessage(role="system", content="hi")


def test_chat_message_payload_omits_missing_timestamp() -> None:
    assert ChatMessage(role="assistant", content="hi").to_payload() == {"role": "assistant", "content": "hi"}


def test_query_params_skip_falsy_values() -> None:
    query = PublicationQuery(search="", limit=15, offset=0, year_from=None)
    assert query.to_params() == [("limit", "15")]


def test_query_rejects_unknown_sort_key() -> None:
    with pytest.raises(ValueError, match="sort key"):
        PublicationQuery(sort_by="citations")
