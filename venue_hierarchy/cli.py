#!/usr/bin/env python3
"""Command-line interface for the venue hierarchy service.

Commands:
  - venue-hierarchy geocode ADDRESS     : Geocode and print the normalised levels
  - venue-hierarchy resolve ADDRESS     : Geocode, build the term chain, link it to an event
  - venue-hierarchy render EVENT_ID     : Print an event's hierarchy
  - venue-hierarchy canonical SLUG      : Print the canonical target of a location archive
  - venue-hierarchy tree                : Print the location forest
  - venue-hierarchy init-db             : Create the PostgreSQL tables

Typical usage:
  venue-hierarchy geocode "Alexanderplatz 1, Berlin"
  venue-hierarchy resolve "Marienplatz 8, München" --event-id 42
  venue-hierarchy render 42 --start 2 --end 4 --show-venue --venue-name "Rathaus"
"""

from __future__ import annotations

import argparse
import json
import sys
from contextlib import contextmanager

from venue_hierarchy import __version__
from venue_hierarchy.configs.settings import get_settings
from venue_hierarchy.exceptions import TermStoreError
from venue_hierarchy.monitoring.logging import LoggingOptions, setup_logging
from venue_hierarchy.schemas.location import (
    DEFAULT_END_LEVEL,
    DisplayAttributes,
    TermNode,
    VenueInfo,
)
from venue_hierarchy.services.factory import ServiceFactory


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="venue-hierarchy", description="Venue Hierarchy CLI")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("--json-logs", action="store_true", help="Emit JSON logs")
    p.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    sub = p.add_subparsers(dest="cmd")

    # geocode
    pg = sub.add_parser("geocode", help="Geocode an address and print its levels")
    pg.add_argument("address", help="Free-text venue address")

    # resolve
    pr = sub.add_parser("resolve", help="Build the location chain for an address")
    pr.add_argument("address", help="Free-text venue address")
    pr.add_argument("--event-id", type=int, default=None, help="Link the chain to this event")
    pr.add_argument("--min-level", type=int, default=None, help="Lowest level to write")
    pr.add_argument("--max-level", type=int, default=None, help="Highest level to write")

    # render
    pd = sub.add_parser("render", help="Render an event's location hierarchy")
    pd.add_argument("event_id", type=int)
    pd.add_argument("--start", type=int, default=1, help="First level to show (1-based)")
    pd.add_argument("--end", type=int, default=DEFAULT_END_LEVEL, help="Last level to show")
    pd.add_argument("--links", action="store_true", help="Render HTML with archive links")
    pd.add_argument("--show-venue", action="store_true", help="Append the venue name")
    pd.add_argument("--venue-name", default=None)
    pd.add_argument("--venue-link", default=None)

    # canonical
    pc = sub.add_parser("canonical", help="Canonical target of a location archive")
    pc.add_argument("slug")

    # tree / init-db
    sub.add_parser("tree", help="Print the location forest")
    sub.add_parser("init-db", help="Create the PostgreSQL tables")

    return p.parse_args(argv)


@contextmanager
def _store(factory: ServiceFactory):
    """Open a store: PostgreSQL when DATABASE_URL is set, memory otherwise."""
    if not factory.settings.DATABASE_URL:
        yield factory.create_store()
        return

    import psycopg2

    conn = psycopg2.connect(**factory.settings.get_psycopg2_params())
    try:
        yield factory.create_store(conn)
    finally:
        conn.close()


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _print_tree(terms: list[TermNode]) -> None:
    children: dict[int | None, list[TermNode]] = {}
    ids = {t.term_id for t in terms}
    for t in terms:
        parent = t.parent_id if t.parent_id in ids else None
        children.setdefault(parent, []).append(t)

    def _walk(parent_id: int | None, depth: int, seen: set[int]) -> None:
        for t in children.get(parent_id, []):
            if t.term_id in seen:
                continue
            print(f"{'  ' * depth}{t.name} ({t.slug})")
            _walk(t.term_id, depth + 1, seen | {t.term_id})

    _walk(None, 0, set())


# ---------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------


def cmd_geocode(args: argparse.Namespace, factory: ServiceFactory) -> int:
    result = factory.create_geocoder().geocode(args.address)
    if result is None:
        print(f"Could not geocode: {args.address}", file=sys.stderr)
        return 1
    levels = factory.create_normalizer().normalize(result.address_components, result.country_code)
    _print_json(levels.model_dump(exclude_none=True))
    return 0


def cmd_resolve(args: argparse.Namespace, factory: ServiceFactory) -> int:
    with _store(factory) as store:
        service = factory.create_resolution_service(store)
        if args.event_id is not None:
            result = service.resolve_address(args.event_id, args.address)
            _print_json(
                {
                    "status": result.status.value,
                    "term_ids": result.term_ids,
                    "levels": result.levels.model_dump(exclude_none=True) if result.levels else None,
                    "reason": result.reason,
                }
            )
            return 0 if result.success else 1

        geocoded = service.geocoder.geocode(args.address)
        if geocoded is None:
            print(f"Could not geocode: {args.address}", file=sys.stderr)
            return 1
        levels = service.normalizer.normalize(geocoded.address_components, geocoded.country_code)
        allowed = None
        if args.min_level is not None or args.max_level is not None:
            low, high = service.builder.allowed_range()
            allowed = (args.min_level or low, args.max_level or high)
        term_ids = service.builder.build_chain(levels, allowed)
        _print_json({"levels": levels.model_dump(exclude_none=True), "term_ids": term_ids})
        return 0 if term_ids else 1


def cmd_render(args: argparse.Namespace, factory: ServiceFactory) -> int:
    attributes = DisplayAttributes(
        start_level=args.start,
        end_level=args.end,
        enable_links=args.links,
        show_venue=args.show_venue,
    )
    with _store(factory) as store:
        display = factory.create_display_service(store)
        if args.links:
            venue = VenueInfo(name=args.venue_name, permalink=args.venue_link)
            output = str(
                display.render_event(
                    args.event_id, factory.settings.OWNING_RECORD_TYPE, attributes, venue
                )
            )
        else:
            output = display.render_event_text(args.event_id, attributes, args.venue_name)
    print(output)
    return 0 if output else 1


def cmd_canonical(args: argparse.Namespace, factory: ServiceFactory) -> int:
    with _store(factory) as store:
        url = factory.create_display_service(store).canonical_for_slug(args.slug)
    print(url or "")
    return 0


def cmd_tree(args: argparse.Namespace, factory: ServiceFactory) -> int:
    with _store(factory) as store:
        try:
            terms = factory.create_display_service(store).list_terms()
        except TermStoreError as e:
            print(f"Could not list terms: {e}", file=sys.stderr)
            return 1
    _print_tree(terms)
    return 0


def cmd_init_db(args: argparse.Namespace, factory: ServiceFactory) -> int:
    if not factory.settings.DATABASE_URL:
        print("DATABASE_URL is not set.", file=sys.stderr)
        return 2
    with _store(factory) as store:
        try:
            store.ensure_schema()
        except TermStoreError as e:
            print(str(e), file=sys.stderr)
            return 1
    print("Schema ready.")
    return 0


COMMANDS = {
    "geocode": cmd_geocode,
    "resolve": cmd_resolve,
    "render": cmd_render,
    "canonical": cmd_canonical,
    "tree": cmd_tree,
    "init-db": cmd_init_db,
}


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.version:
        print(__version__)
        return 0
    if not args.cmd:
        _parse_args(["--help"])
        return 2

    settings = get_settings()
    setup_logging(
        LoggingOptions(
            level=args.log_level or settings.LOG_LEVEL,
            json_logs=args.json_logs or settings.LOG_JSON,
        )
    )
    return COMMANDS[args.cmd](args, ServiceFactory(settings))


if __name__ == "__main__":
    raise SystemExit(main())
