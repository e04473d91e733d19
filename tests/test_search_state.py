from unittest.mock import MagicMock

import pytest

from catalog import LocalCatalog
from errors import ApiError
from models import PublicationsResponse
from search_state import PAGE_SIZE, SearchState, offset_for, total_pages_for


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _page(total: int) -> PublicationsResponse:
    return PublicationsResponse(publications=(), total=total, limit=PAGE_SIZE, offset=0, has_more=False)


def _state(total: int = 100) -> tuple[SearchState, MagicMock, FakeClock]:
    fetch = MagicMock(return_value=_page(total))
    clock = FakeClock()
    state = SearchState(fetch, clock=clock)
    state.refresh()
    return state, fetch, clock


@pytest.mark.parametrize("page", range(1, total_pages_for(100) + 1))
def test_each_page_maps_to_its_offset(page: int) -> None:
    state, fetch, _ = _state(total=100)

    state.go_to_page(page)

    assert state.query().offset == (page - 1) * 15
    assert fetch.call_args.args[0].limit == 15


def test_total_pages_is_ceiling_of_total_over_page_size() -> None:
    assert total_pages_for(0) == 0
    assert total_pages_for(15) == 1
    assert total_pages_for(16) == 2
    assert offset_for(3) == 30


def test_page_navigation_is_clamped() -> None:
    state, _, _ = _state(total=40)

    state.go_to_page(99)
    assert state.current_page == 3
    state.next_page()
    assert state.current_page == 3
    state.go_to_page(-4)
    assert state.current_page == 1
    state.prev_page()
    assert state.current_page == 1


@pytest.mark.parametrize(
    "change",
    [
        lambda s: s.set_sort("title"),
        lambda s: s.set_sort("year", "asc"),
        lambda s: s.set_year_range(2020, 2023),
        lambda s: s.toggle_tag("Microgravity"),
        lambda s: s.clear_tags(),
    ],
)
def test_any_filter_change_resets_to_first_page(change) -> None:
    state, _, _ = _state(total=100)
    state.go_to_page(4)

    change(state)

    assert state.current_page == 1
    assert state.query().offset == 0


def test_debounced_query_resets_page() -> None:
    state, _, clock = _state(total=100)
    state.go_to_page(3)

    state.type_query("bone")
    clock.now += 0.3
    state.tick()

    assert state.current_page == 1
    assert state.query().search == "bone"


def test_debounce_collapses_keystrokes_into_one_fetch() -> None:
    state, fetch, clock = _state()
    fetch.reset_mock()

    for text in ("b", "bo", "bon", "bone"):
        state.type_query(text)
        clock.now += 0.1
        assert state.tick() is False
    assert state.state == "debouncing"

    clock.now += 0.3
    assert state.tick() is True

    fetch.assert_called_once()
    assert fetch.call_args.args[0].search == "bone"
    assert state.state == "success"


def test_fetch_error_moves_to_error_state() -> None:
    fetch = MagicMock(side_effect=ApiError("HTTP error! status: 502", status_code=502))
    state = SearchState(fetch, clock=FakeClock())

    state.refresh()

    assert state.state == "error"
    assert state.result is None
    assert state.total_pages == 0


def test_filter_change_during_debounce_keeps_debouncing() -> None:
    state, _, _ = _state()
    state.type_query("plant")

    state.toggle_tag("Plant Biology")

    assert state.state == "debouncing"
    assert state.query().search is None


def test_query_includes_filters() -> None:
    state, _, _ = _state()
    state.set_year_range(2020, 2022)
    state.toggle_tag("Microbiology")
    state.toggle_tag("Cell Biology")
    state.toggle_tag("Microbiology")

    query = state.query()
    assert (query.year_from, query.year_to) == (2020, 2022)
    assert query.tags == ("Cell Biology",)
    assert (query.sort_by, query.sort_order) == ("relevance", "desc")


@pytest.mark.parametrize(
    ("total", "page", "expected"),
    [
        (45, 1, [1, 2, 3]),
        (150, 1, [1, 2, 3, 4, 5, "...", 10]),
        (150, 5, [1, "...", 3, 4, 5, 6, 7, "...", 10]),
        (150, 10, [1, "...", 8, 9, 10]),
    ],
)
def test_page_numbers_window(total: int, page: int, expected: list) -> None:
    state, _, _ = _state(total=total)
    state.go_to_page(page)
    assert state.page_numbers() == expected


def test_bone_search_against_sample_catalogue() -> None:
    clock = FakeClock()
    state = SearchState(LocalCatalog().list_publications, clock=clock)

    state.type_query("bone")
    clock.now += 1
    state.tick()

    titles = [pub.title for pub in state.result.publications]
    assert titles == ["Effects of Microgravity on Bone Density in Long-Duration Spaceflight"]
