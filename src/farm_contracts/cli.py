from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace

from .config import AppConfig, config_path, load_config
from .errors import RemoteStoreError
from .listing import filter_opportunities
from .models import OPPORTUNITY_STATUSES, ContractFarmingOpportunity, format_rating, to_payload
from .query import ReadOptions
from .store import fetch_opportunities


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="farm-contracts", description="List contract farming opportunities"
    )
    parser.add_argument("--config", help="Path to config.toml")
    parser.add_argument("--id", dest="opportunity_id", help="Show a single opportunity")
    parser.add_argument("--status", choices=OPPORTUNITY_STATUSES, help="Filter by status")
    parser.add_argument("--crop", help="Filter by crop type")
    parser.add_argument("--search", default="", help="Case-insensitive text search")
    parser.add_argument(
        "--limit", type=int, help="Maximum number of opportunities, applied after --search"
    )
    parser.add_argument("--offset", type=int, default=0, help="Skip this many opportunities")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a listing")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    config = load_config(config_path(args.config))
    _configure_logging(config, args.verbose)

    try:
        options = ReadOptions(
            opportunity_id=args.opportunity_id,
            status=args.status,
            crop_type=args.crop,
            limit=args.limit,
            offset=args.offset,
        )
    except ValueError as exc:
        parser.error(str(exc))

    try:
        opportunities = run(config, options, search=args.search)
    except (RemoteStoreError, RuntimeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([to_payload(opp) for opp in opportunities], indent=2))
    else:
        for opportunity in opportunities:
            print(_format_line(opportunity))
        print(f"{len(opportunities)} opportunities")
    return 0


def run(
    config: AppConfig, options: ReadOptions, search: str = ""
) -> list[ContractFarmingOpportunity]:
    if not search:
        return fetch_opportunities(config, options)

    # The search runs locally, so the limit has to apply to its matches.
    opportunities = fetch_opportunities(config, replace(options, limit=None))
    matches = filter_opportunities(opportunities, search_term=search)
    return matches[: options.limit] if options.limit is not None else matches


def _format_line(opportunity: ContractFarmingOpportunity) -> str:
    return (
        f"- [{opportunity.status}] {opportunity.title} ({opportunity.company_name}) "
        f"{opportunity.crop_type} @ {opportunity.location} "
        f"rating {format_rating(opportunity)} docs {len(opportunity.documents)} "
        f"id {opportunity.id}"
    )


def _configure_logging(config: AppConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


if __name__ == "__main__":
    sys.exit(main())
