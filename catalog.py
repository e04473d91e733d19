"""Offline publication catalogue for development without a backend."""

from __future__ import annotations

from errors import ApiError
from models import Publication, PublicationQuery, PublicationsResponse

SAMPLE_PUBLICATIONS: tuple[Publication, ...] = (
    Publication(
        id=1,
        title="Effects of Microgravity on Bone Density in Long-Duration Spaceflight",
        link="",
        authors="Smith, J., Anderson, K., Martinez, R.",
        year=2022,
        abstract=(
            "This study examines the effects of prolonged exposure to microgravity on bone "
            "mineral density in astronauts during extended missions aboard the International "
            "Space Station..."
        ),
        tags=("Human Physiology", "Bone Health", "ISS", "Long-Duration"),
        relevance=98,
    ),
    Publication(
        id=2,
        title="Plant Growth Responses to Reduced Gravity Environments: Arabidopsis Studies",
        link="",
        authors="Chen, L., Wilson, P., Thompson, M.",
        year=2022,
        abstract=(
            "Investigation of plant morphology, gene expression, and growth patterns in "
            "Arabidopsis thaliana under simulated and actual microgravity conditions..."
        ),
        tags=("Plant Biology", "Arabidopsis", "Gene Expression", "Microgravity"),
        relevance=95,
    ),
    Publication(
        id=3,
        title="Microbial Behavior and Biofilm Formation in Space Station Environments",
        link="",
        authors="Johnson, R., Davis, A., Kumar, S.",
        year=2021,
        abstract=(
            "Analysis of bacterial growth patterns, antibiotic resistance, and biofilm formation "
            "in the ISS environment, with implications for crew health and hardware maintenance..."
        ),
        tags=("Microbiology", "Biofilm", "ISS", "Crew Health"),
        relevance=92,
    ),
    Publication(
        id=4,
        title="Cardiovascular Adaptations During Spaceflight: A Longitudinal Study",
        link="",
        authors="Lee, H., Brown, T., Garcia, F.",
        year=2021,
        abstract=(
            "Comprehensive examination of cardiovascular system changes including cardiac "
            "output, blood pressure regulation, and vascular remodeling during and after "
            "spaceflight..."
        ),
        tags=("Human Physiology", "Cardiovascular", "Adaptation", "ISS"),
        relevance=89,
    ),
    Publication(
        id=5,
        title="Circadian Rhythm Disruption in Space: Molecular Mechanisms",
        link="",
        authors="Wang, X., Rodriguez, M., Taylor, S.",
        year=2020,
        abstract=(
            "Study of molecular clock gene expression and melatonin production in astronauts, "
            "examining the effects of altered light-dark cycles on sleep patterns..."
        ),
        tags=("Human Physiology", "Circadian Rhythm", "Gene Expression", "Sleep"),
        relevance=87,
    ),
)


class LocalCatalog:
    """In-memory stand-in for the publications endpoints."""

    def __init__(self, publications: tuple[Publication, ...] = SAMPLE_PUBLICATIONS) -> None:
        self.publications = publications

    def search(self, text: str) -> list[Publication]:
        """Case-insensitive substring match on title, abstract, tags and authors."""
        if not text.strip():
            return list(self.publications)

        term = text.lower()
        return [
            pub
            for pub in self.publications
            if term in pub.title.lower()
            or term in pub.abstract.lower()
            or any(term in tag.lower() for tag in pub.tags)
            or term in pub.authors.lower()
        ]

    def list_publications(self, query: PublicationQuery | None = None) -> PublicationsResponse:
        query = query or PublicationQuery()
        matches = self.search(query.search or "")

        if query.year_from:
            matches = [pub for pub in matches if pub.year >= query.year_from]
        if query.year_to:
            matches = [pub for pub in matches if pub.year <= query.year_to]
        if query.tags:
            wanted = set(query.tags)
            matches = [pub for pub in matches if wanted.intersection(pub.tags)]

        sort_by = query.sort_by or "relevance"
        descending = (query.sort_order or "desc") == "desc"
        if sort_by == "title":
            matches.sort(key=lambda pub: pub.title.lower(), reverse=descending)
        elif sort_by == "year":
            matches.sort(key=lambda pub: pub.year, reverse=descending)
        else:
            matches.sort(key=lambda pub: pub.relevance, reverse=descending)

        offset = query.offset or 0
        limit = query.limit or len(matches)
        page = matches[offset : offset + limit]
        return PublicationsResponse(
            publications=tuple(page),
            total=len(matches),
            limit=limit,
            offset=offset,
            has_more=offset + len(page) < len(matches),
        )

    def get_publication(self, publication_id: str | int) -> Publication:
        for pub in self.publications:
            if str(pub.id) == str(publication_id):
                return pub
        raise ApiError(f"Publication {publication_id} not found", status_code=404)
