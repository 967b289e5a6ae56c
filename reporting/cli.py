#!/usr/bin/env python3
"""
CLI for valuing collectible video games from a JSON request.

Usage:
    python -m reporting.cli sample
    python -m reporting.cli value <request_json> [--now YYYY-MM-DD] [--json]

Examples:
    # Value the built-in sample request
    python -m reporting.cli sample

    # Value a request file as of a fixed date, printing JSON
    python -m reporting.cli value requests/mario.json --now 2024-06-01 --json
"""

import argparse
import json
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from core.price_lookup import PriceLookupService
from reporting.summary import format_summary
from utils.config import Config
from web.schemas import ValuationRequest


def create_sample_request(today: date) -> dict:
    """Five complete-in-box NES sales from the last ten days."""
    prices = [40, 42, 38, 45, 41]
    return {
        "target": {
            "name": "Super Mario Bros.",
            "platform_hint": "NES",
            "condition_bucket": "complete",
        },
        "comparables": [
            {
                "name": f"Super Mario Bros. NES CIB Complete #{i + 1}",
                "price": price,
                "sold_at": (today - timedelta(days=2 * i)).isoformat(),
                "source_label": "eBay",
                "condition_label": "Very Good",
            }
            for i, price in enumerate(prices)
        ],
    }


def parse_request(data: dict) -> ValuationRequest:
    """
    Validate a JSON dictionary as a ValuationRequest.

    Raises:
        pydantic.ValidationError: If the request is malformed
    """
    return ValuationRequest.model_validate(data)


def run_valuation(
    request: ValuationRequest,
    now: Optional[date],
    as_json: bool,
    config: Config,
) -> str:
    """Value a request and render it as text or JSON."""
    service = PriceLookupService(policy=config.valuation_policy())
    target = request.target.to_target()
    result = service.lookup(
        target=target,
        pricecharting=request.pricecharting,
        ebay=request.ebay,
        comparables=request.to_comparables(),
        now=now or request.now,
    )
    if as_json:
        return json.dumps(result.to_dict(), indent=2)
    return format_summary(target, result)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date: {value!r} (expected YYYY-MM-DD)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reporting.cli",
        description="Estimate the market value of a collectible video game.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    value = subparsers.add_parser("value", help="Value a JSON request file")
    value.add_argument("request", type=Path, help="Path to the request JSON")
    value.add_argument("--now", type=_parse_date, help="Reference date (default: today)")
    value.add_argument("--json", action="store_true", help="Print the result as JSON")

    sample = subparsers.add_parser("sample", help="Value a built-in sample request")
    sample.add_argument("--json", action="store_true", help="Print the result as JSON")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    config = Config.load()
    config.configure_logging()

    if args.command == "sample":
        today = date.today()
        request = parse_request(create_sample_request(today))
        print(run_valuation(request, today, args.json, config))
        return 0

    try:
        data = json.loads(args.request.read_text(encoding="utf-8"))
    except FileNotFoundError:
        print(f"Error: file not found: {args.request}", file=sys.stderr)
        return 1
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: could not read {args.request}: {e}", file=sys.stderr)
        return 1

    if not isinstance(data, dict):
        print("Error: request must be a JSON object", file=sys.stderr)
        return 1

    try:
        request = parse_request(data)
    except ValidationError as e:
        print(f"Error: invalid request:\n{e}", file=sys.stderr)
        return 1

    print(run_valuation(request, args.now, args.json, config))
    return 0


if __name__ == "__main__":
    sys.exit(main())
