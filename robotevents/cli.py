#!/usr/bin/env python3
"""
cli.py
Command-line front end for the robotevents client.

    # Event details
    robotevents event RE-VRC-23-1234

    # Teams at an event, then keep printing registrations/withdrawals
    robotevents event RE-VRC-23-1234 --teams --watch --interval 30

    # Division 1 rankings
    robotevents event RE-VRC-23-1234 --rankings 1

    # A team and the events it is registered for
    robotevents team 1234A --events

Output is one JSON object per line. While watching, changes are printed as
"+ {...}" for additions and "- {...}" for removals.

Environment:
    ROBOTEVENTS_TOKEN
    ROBOTEVENTS_BASE_URL
    ROBOTEVENTS_POLL_INTERVAL
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, List, Optional

from . import events, teams
from .client import RobotEventsClient
from .errors import RobotEventsError
from .watchable import WatchableCollection

logger = logging.getLogger(__name__)


def _as_json(item: Any) -> str:
    data = getattr(item, "data", item)
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json", by_alias=True)
    return json.dumps(data, ensure_ascii=False)


def _print_collection(collection: WatchableCollection) -> None:
    for item in collection:
        print(_as_json(item))


async def _watch_forever(collection: WatchableCollection) -> None:
    collection.on("add", lambda item: print("+ " + _as_json(item), flush=True))
    collection.on("remove", lambda item: print("- " + _as_json(item), flush=True))
    collection.on("error", lambda err: logger.error("%s", err))
    collection.watch()
    try:
        await asyncio.Event().wait()
    finally:
        collection.close()


# ------------------------------------------------------------------------------
# Handlers
# ------------------------------------------------------------------------------

async def handle_event(args: argparse.Namespace, client: RobotEventsClient) -> None:
    ident: Any = int(args.identifier) if args.identifier.isdigit() else args.identifier
    event = await events.get(ident, client=client)

    kw = {"interval": args.interval}
    if args.teams:
        collection = await event.teams(**kw)
    elif args.skills:
        collection = await event.skills(**kw)
    elif args.awards:
        collection = await event.awards(**kw)
    elif args.matches is not None:
        collection = await event.matches(args.matches, **kw)
    elif args.rankings is not None:
        collection = await event.rankings(args.rankings, **kw)
    elif args.finalist_rankings is not None:
        collection = await event.finalist_rankings(args.finalist_rankings, **kw)
    else:
        print(_as_json(event))
        return

    _print_collection(collection)
    if args.watch:
        await _watch_forever(collection)


async def handle_team(args: argparse.Namespace, client: RobotEventsClient) -> None:
    ident: Any = int(args.identifier) if args.identifier.isdigit() else args.identifier
    team = await teams.get(ident, program=args.program, client=client)
    if not args.events:
        print(_as_json(team))
        return
    collection = await team.events(interval=args.interval)
    _print_collection(collection)
    if args.watch:
        await _watch_forever(collection)


# ------------------------------------------------------------------------------
# Parser
# ------------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="robotevents",
        description="RobotEvents client - look up and watch events and teams",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    p.add_argument("--token", default=None, help="API token (defaults to ROBOTEVENTS_TOKEN)")
    sub = p.add_subparsers(dest="command", required=True)

    # event
    p_ev = sub.add_parser("event", help="Resolve an event by SKU or id")
    p_ev.add_argument("identifier", help="Event SKU (e.g., RE-VRC-23-1234) or numeric id")
    which = p_ev.add_mutually_exclusive_group()
    which.add_argument("--teams", action="store_true", help="List teams at the event")
    which.add_argument("--skills", action="store_true", help="List skills runs")
    which.add_argument("--awards", action="store_true", help="List awards")
    which.add_argument("--matches", type=int, metavar="DIV", help="List matches in a division")
    which.add_argument("--rankings", type=int, metavar="DIV", help="List rankings in a division")
    which.add_argument(
        "--finalist-rankings", type=int, metavar="DIV", help="List finalist rankings in a division"
    )
    p_ev.add_argument("--watch", action="store_true", help="Keep polling and print changes")
    p_ev.add_argument("--interval", type=float, default=None, help="Seconds between polls")
    p_ev.set_defaults(func=handle_event)

    # team
    p_team = sub.add_parser("team", help="Resolve a team by number or id")
    p_team.add_argument("identifier", help="Team number (e.g., 1234A) or numeric id")
    p_team.add_argument("--program", type=int, default=None, help="Program id to disambiguate numbers")
    p_team.add_argument("--events", action="store_true", help="List events for the team")
    p_team.add_argument("--watch", action="store_true", help="Keep polling and print changes")
    p_team.add_argument("--interval", type=float, default=None, help="Seconds between polls")
    p_team.set_defaults(func=handle_team)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    client = RobotEventsClient(token=args.token)
    try:
        asyncio.run(args.func(args, client))
    except RobotEventsError as e:
        logging.error("%s", e)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.")
        return 130
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
