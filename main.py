"""CLI entrypoint for the NASA bioscience explorer."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable

from dotenv import load_dotenv

from api_client import EXTRACT_TYPES, SUMMARY_STYLES, ApiClient
from catalog import LocalCatalog
from chat_session import ChatSession
from config import Settings, load_settings
from errors import ApiError
from models import Publication, PublicationQuery, PublicationsResponse
from mutations import BioscienceMutations
from queries import BioscienceQueries, HealthMonitor
from query_cache import QueryCache
from search_state import FILTER_TAGS, SearchState
from stats import dashboard_cards, publications_by_year, recent_publications, top_tags
from typing_animation import play, stagger_delays

DASHBOARD_INSIGHT_TOPIC = "NASA space biology research trends and key findings"

LOGGER = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Explore NASA bioscience publications")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Use the built-in sample catalogue instead of the backend (search and show only)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("health", help="Show backend status")

    search = sub.add_parser("search", help="Search publications")
    search.add_argument("query", nargs="?", default="")
    search.add_argument("--year-from", type=int, default=None)
    search.add_argument("--year-to", type=int, default=None)
    search.add_argument("--tag", action="append", default=[], help=f"Filter tag, e.g. {FILTER_TAGS[0]!r}")
    search.add_argument("--sort-by", choices=["relevance", "title", "year"], default="relevance")
    search.add_argument("--sort-order", choices=["asc", "desc"], default="desc")
    search.add_argument("--page", type=int, default=1)

    show = sub.add_parser("show", help="Show one publication with an AI summary")
    show.add_argument("id")
    show.add_argument("--no-summary", action="store_true", help="Skip the AI summary")

    stats = sub.add_parser("stats", help="Dashboard statistics")
    stats.add_argument("--insight", action="store_true", help="Also generate an AI research insight")

    ask = sub.add_parser("ask", help="Ask a single question")
    ask.add_argument("question")
    ask.add_argument("--context", default=None)

    sub.add_parser("chat", help="Interactive research assistant chat")

    summarize = sub.add_parser("summarize", help="Summarize a topic")
    summarize.add_argument("topic")
    summarize.add_argument("--style", choices=sorted(SUMMARY_STYLES), default=None)

    extract = sub.add_parser("extract", help="Extract findings, organisms, methods or results from text")
    extract.add_argument("text", help="Text to analyze, or '-' to read stdin")
    extract.add_argument("--type", dest="extract_type", choices=sorted(EXTRACT_TYPES), default=None)

    gaps = sub.add_parser("gaps", help="Find research gaps")
    gaps.add_argument("--area", default=None)

    compare = sub.add_parser("compare", help="Compare two topics")
    compare.add_argument("topic1")
    compare.add_argument("topic2")

    return parser.parse_args(argv)


class App:
    """Wires the client, cache, queries and mutations from settings."""

    def __init__(self, settings: Settings, offline: bool = False) -> None:
        self.settings = settings
        self.offline = offline
        self.catalog = LocalCatalog()
        self.client = ApiClient(base_url=settings.api_url, timeout=settings.timeout_seconds)
        self.cache = QueryCache(max_entries=settings.cache_max_entries)
        self.queries = BioscienceQueries(self.client, self.cache)
        self.mutations = BioscienceMutations(self.client, self.cache)

    def fetch_page(self, query: PublicationQuery) -> PublicationsResponse:
        if self.offline:
            return self.catalog.list_publications(query)
        return self.queries.publications(query)

    def fetch_publication(self, publication_id: str) -> Publication | None:
        if self.offline:
            return self.catalog.get_publication(publication_id)
        return self.queries.publication(publication_id)


def cmd_health(app: App, args: argparse.Namespace) -> int:
    monitor = HealthMonitor(app.queries)
    health = monitor.poll_once()
    if health is None:
        print(f"Backend unreachable: {monitor.last_error}")
        return 1
    print(f"status: {health.status}")
    if health.model:
        print(f"model: {health.model}")
    if health.api_key:
        print(f"api key: {health.api_key}")
    if health.error:
        print(f"error: {health.error}")
    return 0 if health.healthy else 1


def cmd_search(app: App, args: argparse.Namespace) -> int:
    state = SearchState(app.fetch_page, debounce_seconds=0)
    state.year_from = args.year_from
    state.year_to = args.year_to
    state.selected_tags = list(args.tag)
    state.sort_by = args.sort_by
    state.sort_order = args.sort_order
    state.type_query(args.query)
    state.tick()
    if args.page != 1 and state.error is None:
        state.go_to_page(args.page)

    if state.error is not None:
        print(f"Search failed: {state.error}")
        return 1

    result = state.result
    if result is None or not result.publications:
        print("No publications found.")
        return 0

    for pub in result.publications:
        print(f"[{pub.id}] {pub.title} ({pub.year}) relevance={pub.relevance}")
        print(f"    {pub.authors}")
        if pub.tags:
            print(f"    tags: {', '.join(pub.tags)}")
    pages = " ".join(str(p) for p in state.page_numbers())
    print(f"\npage {state.current_page}/{state.total_pages} of {state.total} results  [{pages}]")
    return 0


def cmd_show(app: App, args: argparse.Namespace) -> int:
    try:
        pub = app.fetch_publication(args.id)
    except ApiError as exc:
        print(f"Publication not available: {exc}")
        return 1
    if pub is None:
        print("No publication id given.")
        return 1

    print(pub.title)
    print(f"{pub.authors} ({pub.year})")
    if pub.link:
        print(pub.link)
    if pub.pmc_id:
        print(f"PMC: {pub.pmc_id}")
    print()
    print(pub.abstract)

    if args.no_summary or app.offline:
        return 0

    summary_mutation = app.mutations.publication_summary
    summary_mutation.reset()
    summary = summary_mutation.mutate(pub)
    if summary is None:
        print(f"\nAI summary unavailable: {summary_mutation.error}")
        return 0

    _write_typed("\nObjective: ", summary.objective)
    print("\nKey findings:")
    for delay_ms, finding in zip(stagger_delays(len(summary.findings)), summary.findings):
        LOGGER.debug("Finding revealed at +%sms", delay_ms)
        print(f"  - {finding}")
    _write_typed("Implications: ", summary.implications)
    return 0


def cmd_stats(app: App, args: argparse.Namespace) -> int:
    try:
        stats = app.queries.publication_stats()
    except ApiError as exc:
        LOGGER.warning("Stats unavailable: %s", exc)
        stats = None

    for card in dashboard_cards(stats):
        print(f"{card.label}: {card.value}")

    if stats is not None:
        print("\nPublications by year:")
        for year, count in publications_by_year(stats):
            print(f"  {year}: {count}")
        print("\nTop research areas:")
        for tag, count in top_tags(stats):
            print(f"  {tag}: {count}")
        print("\nRecent studies:")
        for pub in recent_publications(stats):
            print(f"  [{pub.id}] {pub.title} ({pub.year})")

    if args.insight:
        response = app.mutations.summarize.mutate(DASHBOARD_INSIGHT_TOPIC, "technical")
        if response is None:
            print(f"\nAI insight unavailable: {app.mutations.summarize.error}")
        else:
            _write_typed("\nAI insight: ", response.summary)
    return 0 if stats is not None else 1


def cmd_ask(app: App, args: argparse.Namespace) -> int:
    return _print_mutation(app.mutations.ask.mutate(args.question, args.context), app.mutations.ask.error, "answer")


def cmd_chat(app: App, args: argparse.Namespace) -> int:
    session = ChatSession(app.mutations.chat)
    print("Research assistant chat. Empty line or Ctrl-D to quit.")
    while True:
        try:
            text = input("you> ")
        except EOFError:
            break
        if not text.strip():
            break
        reply = session.send(text)
        if reply is None:
            print(f"[error] {session.error}")
            continue
        _write_typed("assistant> ", reply.content)
    return 0


def cmd_summarize(app: App, args: argparse.Namespace) -> int:
    mutation = app.mutations.summarize
    return _print_mutation(mutation.mutate(args.topic, args.style), mutation.error, "summary")


def cmd_extract(app: App, args: argparse.Namespace) -> int:
    text = sys.stdin.read() if args.text == "-" else args.text
    mutation = app.mutations.extract
    return _print_mutation(mutation.mutate(text, args.extract_type), mutation.error, "extracted")


def cmd_gaps(app: App, args: argparse.Namespace) -> int:
    mutation = app.mutations.find_gaps
    return _print_mutation(mutation.mutate(args.area), mutation.error, "gaps")


def cmd_compare(app: App, args: argparse.Namespace) -> int:
    mutation = app.mutations.compare
    return _print_mutation(mutation.mutate(args.topic1, args.topic2), mutation.error, "comparison")


COMMANDS: dict[str, Callable[[App, argparse.Namespace], int]] = {
    "health": cmd_health,
    "search": cmd_search,
    "show": cmd_show,
    "stats": cmd_stats,
    "ask": cmd_ask,
    "chat": cmd_chat,
    "summarize": cmd_summarize,
    "extract": cmd_extract,
    "gaps": cmd_gaps,
    "compare": cmd_compare,
}
OFFLINE_COMMANDS = frozenset({"search", "show"})


def _print_mutation(result: object | None, error: Exception | None, field_name: str) -> int:
    if result is None:
        print(f"Request failed: {error}")
        return 1
    _write_typed("", str(getattr(result, field_name)))
    return 0


def _write_typed(prefix: str, text: str) -> None:
    sys.stdout.write(prefix)
    if sys.stdout.isatty():
        play(text, write=_flush_write)
    else:
        sys.stdout.write(text)
    sys.stdout.write("\n")


def _flush_write(chunk: str) -> None:
    sys.stdout.write(chunk)
    sys.stdout.flush()


def main(argv: list[str] | None = None) -> int:
    """Initialize config and run one command."""
    load_dotenv()
    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)

    if args.offline and args.command not in OFFLINE_COMMANDS:
        print(f"'{args.command}' needs the backend; --offline supports: {', '.join(sorted(OFFLINE_COMMANDS))}")
        return 2

    app = App(settings, offline=args.offline)
    LOGGER.debug("Using backend %s", settings.api_url)
    return COMMANDS[args.command](app, args)


if __name__ == "__main__":
    sys.exit(main())
