"""SmartFlow — command-line entry point.

Runs one analyzer action for a symbol and prints the response envelope as
JSON.  Exit status is non-zero when the action fails.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from smartflow.analyzer import ACTIONS, MarketAnalyzer
from smartflow.config import TIMEFRAMES, Config, load_config
from smartflow.feeds.binance_client import BinanceClient


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Smart Money Concepts market analysis for crypto pairs"
    )
    parser.add_argument("symbol", help="Trading pair, e.g. BTCUSDT")
    parser.add_argument(
        "--action",
        choices=ACTIONS,
        default="analyze",
        help="What to fetch (default: analyze)",
    )
    parser.add_argument(
        "--timeframe",
        choices=TIMEFRAMES,
        default=None,
        help="Candle timeframe (default: DEFAULT_TIMEFRAME from the environment)",
    )
    parser.add_argument("--env-file", default=None, help="Path to a .env file")
    return parser


def build_analyzer(config: Config) -> MarketAnalyzer:
    """Wire the Binance feed into an analyzer using *config*."""
    return MarketAnalyzer(
        BinanceClient(config),
        settings=config.analysis,
        candle_limit=config.candle_limit,
        analysis_window=config.analysis_window,
        default_timeframe=config.default_timeframe,
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Parse CLI arguments, run the action and print the result."""
    args = build_parser().parse_args(argv)

    config = load_config(args.env_file)
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    analyzer = build_analyzer(config)
    response = asyncio.run(
        analyzer.execute(args.action, args.symbol, args.timeframe)
    )

    print(json.dumps(response.to_dict(), indent=2))
    return 0 if response.success else 1


if __name__ == "__main__":
    sys.exit(main())
