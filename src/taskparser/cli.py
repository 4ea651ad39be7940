import argparse
import json
import logging
import sys
from typing import Any

from taskparser.config import settings
from taskparser.sentry import add_breadcrumb, capture_exception, init_sentry
from taskparser.sentry import flush as sentry_flush
from taskparser.services.models import TaskParserError

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def parse_task(text: str, reference: str | None, timezone: str | None) -> None:
    from taskparser.services.parser import parse_input

    result = parse_input(text, reference, timezone)
    _print_json(result.to_dict())


def disambiguate(text: str, reference: str | None, timezone: str | None) -> None:
    from taskparser.services.disambiguation import generate_disambiguation_suggestions

    elements = generate_disambiguation_suggestions(text, reference, timezone)
    _print_json([element.to_dict() for element in elements])


def parse_time_input(text: str) -> None:
    from taskparser.services.time_parser import parse_time

    _print_json(parse_time(text).to_dict())


def complete_time(partial: str) -> None:
    from taskparser.services.time_parser import get_auto_complete_suggestions

    _print_json(get_auto_complete_suggestions(partial))


def suggest_category(text: str) -> None:
    from taskparser.services.category import get_category_suggestion

    _print_json(get_category_suggestion(text).to_dict())


def show_keywords() -> None:
    from taskparser.services.category import get_category_keywords

    _print_json({category.value: words for category, words in get_category_keywords().items()})


def check_config() -> None:
    from taskparser.services.timezone import get_timezone_service

    service = get_timezone_service()
    _print_json(
        {
            "user_timezone": service.default_timezone or "local",
            "today": service.now().date().isoformat(),
            "log_level": settings.log_level,
            "sentry": settings.has_sentry,
            "max_input_length": settings.max_input_length,
            "max_date_text_length": settings.max_date_text_length,
            "end_of_month_window_days": settings.end_of_month_window_days,
        }
    )


def _add_reference_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--reference", help="Reference instant (ISO 8601), defaults to now")
    parser.add_argument("--timezone", help="IANA timezone, defaults to USER_TIMEZONE")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Free-text task parser")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    parse_cmd = subparsers.add_parser("parse", help="Parse a task description")
    parse_cmd.add_argument("text")
    _add_reference_args(parse_cmd)

    disambiguate_cmd = subparsers.add_parser(
        "disambiguate", help="Suggest dates for ambiguous phrases"
    )
    disambiguate_cmd.add_argument("text")
    _add_reference_args(disambiguate_cmd)

    time_cmd = subparsers.add_parser("time", help="Parse a time of day")
    time_cmd.add_argument("text")

    complete_cmd = subparsers.add_parser("complete", help="Autocomplete a partial time")
    complete_cmd.add_argument("partial", nargs="?", default="")

    category_cmd = subparsers.add_parser("category", help="Suggest a category")
    category_cmd.add_argument("text")

    subparsers.add_parser("keywords", help="List category keywords")
    subparsers.add_parser("check", help="Check configuration")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging()

    # Initialize Sentry for error tracking (disabled if no DSN configured)
    init_sentry(
        dsn=settings.sentry_dsn if settings.has_sentry else None,
        environment=settings.sentry_environment,
    )

    try:
        add_breadcrumb(f"command {args.command}", category="cli")
        if args.command == "parse":
            parse_task(args.text, args.reference, args.timezone)
        elif args.command == "disambiguate":
            disambiguate(args.text, args.reference, args.timezone)
        elif args.command == "time":
            parse_time_input(args.text)
        elif args.command == "complete":
            complete_time(args.partial)
        elif args.command == "category":
            suggest_category(args.text)
        elif args.command == "keywords":
            show_keywords()
        elif args.command == "check":
            check_config()
        else:
            parser.print_help()
            return 1
    except TaskParserError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        logger.exception(f"Command {args.command} failed")
        capture_exception(e)
        raise
    finally:
        # Flush any pending Sentry events before exit
        sentry_flush(timeout=2.0)

    return 0


if __name__ == "__main__":
    sys.exit(main())
