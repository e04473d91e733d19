from models import Publication, PublicationStats
from stats import dashboard_cards, publications_by_year, recent_publications, top_tags


def _pub(pub_id: int) -> Publication:
    return Publication(
        id=pub_id,
        title=f"Study {pub_id}",
        link="",
        authors="Doe, J.",
        year=2021,
        abstract="",
        tags=(),
        relevance=50,
    )


def test_years_covered_counts_distinct_years() -> None:
    stats = PublicationStats.from_payload({"total": 12, "byYear": {"2020": 5, "2021": 7}, "byTag": {}})

    cards = dict(dashboard_cards(stats))

    assert cards["Years Covered"] == "2"
    assert cards["Total Publications"] == "12"
    assert cards["Research Areas"] == "0"


def test_cards_fall_back_when_stats_missing() -> None:
    cards = dict(dashboard_cards(None))

    assert cards == {
        "Total Publications": "608",
        "Research Areas": "0",
        "Years Covered": "0",
        "Recent Studies": "10",
    }


def test_recent_studies_counts_recent_list() -> None:
    stats = PublicationStats(total=3, recent=tuple(_pub(i) for i in range(7)))

    assert dict(dashboard_cards(stats))["Recent Studies"] == "7"
    assert [pub.id for pub in recent_publications(stats)] == [0, 1, 2, 3, 4]


def test_series_helpers_sort_results() -> None:
    stats = PublicationStats(
        total=20,
        by_year={"2022": 4, "2019": 1, "2021": 3},
        by_tag={"Microbiology": 2, "Human Physiology": 9, "Plant Biology": 9},
    )

    assert publications_by_year(stats) == [("2019", 1), ("2021", 3), ("2022", 4)]
    assert top_tags(stats, n=2) == [("Human Physiology", 9), ("Plant Biology", 9)]
