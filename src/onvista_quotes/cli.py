import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .config import load_settings
from .errors import ConfigError, QuoteResolutionError
from .http import HttpJsonClient
from .interfaces import Success
from .models import QuoteWindow
from .resolver import ExchangeResolver, InstrumentResolver, QuoteResolver, TRANSIENT_ERRORS


def positive_int(value):
    """argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def get_settings_for_args(args):
    """Loads settings from --config, the environment and bundled defaults."""
    try:
        settings = load_settings(Path(args.config) if args.config else None)
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)
    return settings


def render_table(result: Success) -> str:
    lines = [
        f"{result.instrument.isin} @ {result.exchange.code_exchange} "
        f"(idNotation {result.exchange.id_notation})",
        f"{'Datum':<12}{'Schluss':>12}{'Tief':>12}{'Hoch':>12}",
    ]
    for q in result.quotes:
        lines.append(f"{q.date.isoformat():<12}{q.close:>12.4f}{q.low:>12.4f}{q.high:>12.4f}")
    return "\n".join(lines)


async def _quotes(args, settings):
    window = None
    if args.months is not None:
        window = QuoteWindow(months=args.months)
    async with HttpJsonClient(timeout=settings.http.timeout) as client:
        return await QuoteResolver(client, settings).resolve(args.isin, args.exchange, window)


def quotes_cmd(args):
    """Prints end-of-day quotes for an ISIN."""
    settings = get_settings_for_args(args)
    result = asyncio.run(_quotes(args, settings))

    if not result.found:
        print(f"Not found: {result.reason}")
        sys.exit(1)

    if args.json:
        print(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2))
    else:
        print(render_table(result))


async def _search(args, settings):
    async with HttpJsonClient(timeout=settings.http.timeout) as client:
        return await InstrumentResolver(client, settings).search(args.isin)


def search_cmd(args):
    """Resolves an ISIN to the upstream instrument."""
    settings = get_settings_for_args(args)
    try:
        instrument = asyncio.run(_search(args, settings))
    except (QuoteResolutionError, ValueError, *TRANSIENT_ERRORS) as e:
        print(f"Not found: {e}")
        sys.exit(1)

    print(f"ISIN: {instrument.isin}")
    print(f"Id:   {instrument.id}")
    print(f"Type: {instrument.type}")


async def _exchanges(args, settings):
    async with HttpJsonClient(timeout=settings.http.timeout) as client:
        instrument = await InstrumentResolver(client, settings).search(args.isin)
        return await ExchangeResolver(client, settings).list_exchanges(instrument)


def exchanges_cmd(args):
    """Lists the exchanges an ISIN is listed on, in upstream order."""
    settings = get_settings_for_args(args)
    try:
        exchanges = asyncio.run(_exchanges(args, settings))
    except (QuoteResolutionError, ValueError, *TRANSIENT_ERRORS) as e:
        print(f"Not found: {e}")
        sys.exit(1)

    for i, exchange in enumerate(exchanges):
        default = " (default)" if i == 0 else ""
        print(f"- {exchange.code_exchange:<8} {exchange.id_notation:<12} {exchange.name or ''}{default}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="onvista end-of-day quotes CLI")
    parser.add_argument("--config", help="Path to a YAML settings file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # quotes
    p_quotes = subparsers.add_parser("quotes", help="Show end-of-day quotes for an ISIN")
    p_quotes.add_argument("isin", help="ISIN to look up")
    p_quotes.add_argument("--exchange", help="Exchange code (e.g. XETR); first listing if omitted")
    p_quotes.add_argument("--months", type=positive_int, help="Months of history (overrides settings)")
    p_quotes.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    # search
    p_search = subparsers.add_parser("search", help="Resolve an ISIN to an instrument")
    p_search.add_argument("isin", help="ISIN to look up")

    # exchanges
    p_exchanges = subparsers.add_parser("exchanges", help="List available exchanges for an ISIN")
    p_exchanges.add_argument("isin", help="ISIN to look up")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "quotes":
        quotes_cmd(args)
    elif args.command == "search":
        search_cmd(args)
    elif args.command == "exchanges":
        exchanges_cmd(args)


if __name__ == "__main__":
    main()
