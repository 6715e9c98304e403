from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from googleapiclient.errors import HttpError

from .calendar_google import apply_split, find_instance, get_service, plan_split
from .config import CONFIG_PATH_DEFAULT, SEND_UPDATES_CHOICES, AppConfig, load_config
from .errors import CalsplitError, MalformedRecurrenceLine, MalformedTimestamp
from .instances import original_start_range
from .recurrence import recurrence_until, truncate_recurrence

EXIT_ERROR = 1
EXIT_BAD_DATA = 2

ONLINE_COMMANDS = {"instance", "split"}

logger = logging.getLogger(__name__)


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="calsplit",
        description="Split recurring Google Calendar series at an occurrence",
    )
    ap.add_argument("--config", default=CONFIG_PATH_DEFAULT)
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="command", required=True)

    rng = sub.add_parser("range", help="Query window for an occurrence's original start")
    rng.add_argument("token")

    until = sub.add_parser("until", help="UNTIL value that ends a series before an occurrence")
    until.add_argument("token")

    truncate = sub.add_parser("truncate", help="Truncate recurrence lines offline")
    truncate.add_argument("--cutoff", required=True)
    truncate.add_argument("lines", nargs="+")

    instance = sub.add_parser("instance", help="Look up one occurrence of a series")
    instance.add_argument("event_id")
    instance.add_argument("--original-start", required=True)
    instance.add_argument("--calendar")

    split = sub.add_parser("split", help="Edit this and following occurrences")
    split.add_argument("event_id")
    split.add_argument("--original-start", required=True)
    split.add_argument("--calendar")
    split.add_argument("--summary")
    split.add_argument("--location")
    split.add_argument("--description")
    split.add_argument("--send-updates", choices=SEND_UPDATES_CHOICES)
    split.add_argument("--dry-run", action="store_true")

    return ap


def _run(args: argparse.Namespace, cfg: Optional[AppConfig]) -> int:
    if args.command == "range":
        time_min, time_max = original_start_range(args.token)
        _print_json({"timeMin": time_min, "timeMax": time_max})
        return 0

    if args.command == "until":
        print(recurrence_until(args.token))
        return 0

    if args.command == "truncate":
        _print_json(truncate_recurrence(args.lines, args.cutoff))
        return 0

    if cfg is None:
        cfg = load_config(args.config)
    calendar_id = args.calendar or cfg.calendar_id
    service = get_service(cfg.google.credentials_json, cfg.google.token_json)

    if args.command == "instance":
        _print_json(find_instance(service, calendar_id, args.event_id, args.original_start))
        return 0

    plan = plan_split(
        service,
        calendar_id,
        args.event_id,
        args.original_start,
        summary=args.summary,
        location=args.location,
        description=args.description,
    )
    if not args.dry_run:
        plan = apply_split(service, plan, send_updates=args.send_updates or cfg.send_updates)
    _print_json(plan.to_dict())
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = _build_parser().parse_args(argv)

    cfg: Optional[AppConfig] = None
    if args.command in ONLINE_COMMANDS:
        try:
            cfg = load_config(args.config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            print(f"Could not load config {args.config}: {e}", file=sys.stderr)
            return EXIT_ERROR

    level = "DEBUG" if args.verbose else (cfg.log_level if cfg else "WARNING")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        return _run(args, cfg)
    except (MalformedTimestamp, MalformedRecurrenceLine) as e:
        print(f"could not interpret recurrence/timestamp data: {e.raw}", file=sys.stderr)
        logger.debug("validation failure", exc_info=True)
        return EXIT_BAD_DATA
    except CalsplitError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except HttpError as e:
        print(f"Calendar API request failed: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
