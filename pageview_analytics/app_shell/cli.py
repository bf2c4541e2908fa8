import argparse
import json
import logging
import sys
from pathlib import Path

from pageview_analytics.adapters.clock import SystemClock
from pageview_analytics.adapters.http_transport import HttpxTransport
from pageview_analytics.adapters.json_kv import JsonFileKeyValueStore
from pageview_analytics.adapters.sqlite_events import create_sqlite_event_store
from pageview_analytics.components.aggregate import QueryReportInput, run_report
from pageview_analytics.components.identity import create_identity_manager
from pageview_analytics.components.tracker import PageContext, PageViewTracker
from pageview_analytics.core.errors import AnalyticsError
from pageview_analytics.rules.loader import load_rules
from pageview_analytics.rules.models import AnalyticsRules

logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"
STATE_PATH = ".pva_state.json"


def get_rules(path: str | None) -> AnalyticsRules:
    rules_path = Path(path or RULES_PATH)
    if not rules_path.exists():
        if path:
            logger.error("Rules file %s not found.", rules_path)
            sys.exit(1)
        return AnalyticsRules()
    try:
        return load_rules(rules_path)
    except ValueError as e:
        logger.error("%s", e)
        sys.exit(1)


def handle_init_db(args: argparse.Namespace) -> None:
    create_sqlite_event_store(args.db)
    print(f"Event store ready at {args.db}")


def handle_report(args: argparse.Namespace) -> None:
    rules = get_rules(args.rules)
    config = rules.report_config()
    store = create_sqlite_event_store(args.db)

    report = run_report(
        QueryReportInput(range_name=args.range or config.default_range),
        event_query=store,
        time_port=SystemClock(),
        config=config,
    )
    print(json.dumps(report.to_payload(), indent=2))


def handle_track(args: argparse.Namespace) -> None:
    rules = get_rules(args.rules)
    identity = create_identity_manager(
        store=JsonFileKeyValueStore(args.state),
        config=rules.identity_config(),
    )
    tracker = PageViewTracker(identity=identity, transport=HttpxTransport(args.endpoint))

    context = PageContext(
        url=args.url,
        title=args.title,
        referrer=args.referrer,
        user_agent=args.user_agent,
    )
    if tracker.track_page_view(context):
        print(f"Tracked {args.url}")
    else:
        print(f"Tracking {args.url} failed (see debug log)")


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Page-view analytics CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # init-db
    init_parser = subparsers.add_parser("init-db", help="Create the event store schema")
    init_parser.add_argument("--db", required=True, help="Path to the SQLite database")

    # report
    report_parser = subparsers.add_parser("report", help="Print the metrics report as JSON")
    report_parser.add_argument("--db", required=True, help="Path to the SQLite database")
    report_parser.add_argument("--range", help="today, 7d or 30d (default from rules)")
    report_parser.add_argument("--rules", help=f"Rules file (default {RULES_PATH})")

    # track
    track_parser = subparsers.add_parser("track", help="Send one page view to an endpoint")
    track_parser.add_argument("--endpoint", required=True, help="Ingestion endpoint URL")
    track_parser.add_argument("--url", required=True, help="Page URL")
    track_parser.add_argument("--title", default="", help="Page title")
    track_parser.add_argument("--referrer", default="", help="Referrer URL")
    track_parser.add_argument("--user-agent", default="", help="User-agent string")
    track_parser.add_argument("--state", default=STATE_PATH, help="Visitor/session state file")
    track_parser.add_argument("--rules", help=f"Rules file (default {RULES_PATH})")

    args = parser.parse_args(argv)

    try:
        if args.command == "init-db":
            handle_init_db(args)
        elif args.command == "report":
            handle_report(args)
        elif args.command == "track":
            handle_track(args)
    except AnalyticsError as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
