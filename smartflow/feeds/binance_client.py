"""Binance public REST API async client.

Provides the two market-data feeds the analyzer depends on: the 24h ticker
(price feed) and klines (candle feed).
"""

import asyncio
import logging

import httpx

from smartflow.analysis.models import Candle
from smartflow.config import TIMEFRAMES, Config
from smartflow.errors import InvalidInputError, PriceFetchError, TechnicalDataFetchError
from smartflow.feeds.models import PriceSnapshot

logger = logging.getLogger("smartflow")

# Retry settings
_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 2.0  # seconds; doubles each attempt
_RETRYABLE_STATUS_CODES = {502, 503, 504, 429}

# Binance kline interval names
_INTERVALS: dict[str, str] = {
    "1h": "1h",
    "4h": "4h",
    "1d": "1d",
}


class BinanceClient:
    """Async client for the Binance spot market-data endpoints."""

    def __init__(self, config: Config) -> None:
        self._config = config
        self._base_url = config.binance_base_url.rstrip("/")
        self._timeout = config.request_timeout
        self._headers = {"Accept": "application/json"}
        if config.binance_api_key:
            self._headers["X-MBX-APIKEY"] = config.binance_api_key

    # ── Retry helper ─────────────────────────────────────────────────────

    async def _send_get(self, url: str, params: dict) -> httpx.Response:
        async with httpx.AsyncClient() as client:
            return await client.get(
                url,
                headers=self._headers,
                params=params,
                timeout=self._timeout,
            )

    async def _get_with_retry(self, url: str, params: dict) -> httpx.Response:
        """GET *url*, retrying transient failures with exponential backoff.

        Rate-limits (429), gateway errors (502, 503, 504) and transport
        failures are retried up to ``_MAX_RETRIES`` attempts in total.  Any
        other HTTP error is raised at once.  No delay follows the final
        attempt.
        """
        for attempt in range(1, _MAX_RETRIES + 1):
            try:
                resp = await self._send_get(url, params)
            except httpx.TransportError as exc:
                if attempt == _MAX_RETRIES:
                    raise
                problem = f"transport error ({exc})"
            else:
                if resp.status_code not in _RETRYABLE_STATUS_CODES:
                    resp.raise_for_status()
                    return resp
                if attempt == _MAX_RETRIES:
                    resp.raise_for_status()
                problem = f"returned {resp.status_code}"

            delay = _RETRY_BASE_DELAY * (2 ** (attempt - 1))
            logger.warning(
                "Binance GET %s %s — attempt %d/%d, next in %.1fs",
                url, problem, attempt, _MAX_RETRIES, delay,
            )
            await asyncio.sleep(delay)

        raise RuntimeError("retry loop exited without a response")

    # ── Price feed ───────────────────────────────────────────────────────

    async def fetch_ticker(self, symbol: str) -> PriceSnapshot:
        """Fetch last price and 24h statistics.

        Args:
            symbol: trading pair, e.g. ``"BTCUSDT"`` (case-insensitive).

        Raises:
            PriceFetchError: on HTTP failure or a malformed payload.
        """
        url = f"{self._base_url}/api/v3/ticker/24hr"
        pair = symbol.upper()

        try:
            resp = await self._get_with_retry(url, {"symbol": pair})
        except httpx.HTTPError as exc:
            raise PriceFetchError(pair, _describe(exc)) from exc

        try:
            data = resp.json()
            return PriceSnapshot(
                symbol=data["symbol"],
                price=float(data["lastPrice"]),
                change_24h_pct=float(data["priceChangePercent"]),
                high_24h=float(data["highPrice"]),
                low_24h=float(data["lowPrice"]),
                volume_24h=float(data["volume"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise PriceFetchError(pair, f"malformed ticker payload ({exc!r})") from exc

    # ── Candle feed ──────────────────────────────────────────────────────

    async def fetch_candles(
        self,
        symbol: str,
        timeframe: str = "4h",
        limit: int = 100,
    ) -> list[Candle]:
        """Fetch klines for *symbol*.

        Args:
            symbol: trading pair, e.g. ``"ETHUSDT"``
            timeframe: ``"1h"``, ``"4h"`` or ``"1d"``
            limit: number of candles to request (Binance max 1000)

        Returns:
            List of ``Candle`` objects ordered oldest-first.

        Raises:
            InvalidInputError: unsupported timeframe.
            TechnicalDataFetchError: on HTTP failure or a malformed payload.
        """
        if timeframe not in _INTERVALS:
            raise InvalidInputError(
                f"Unsupported timeframe '{timeframe}'. "
                f"Available: {', '.join(TIMEFRAMES)}"
            )

        url = f"{self._base_url}/api/v3/klines"
        pair = symbol.upper()
        params = {"symbol": pair, "interval": _INTERVALS[timeframe], "limit": limit}

        try:
            resp = await self._get_with_retry(url, params)
        except httpx.HTTPError as exc:
            raise TechnicalDataFetchError(pair, timeframe, _describe(exc)) from exc

        try:
            rows = resp.json()
            candles = [
                Candle(
                    timestamp=int(k[0]),
                    open=float(k[1]),
                    high=float(k[2]),
                    low=float(k[3]),
                    close=float(k[4]),
                    volume=float(k[5]),
                )
                for k in rows
            ]
        except (IndexError, TypeError, ValueError) as exc:
            raise TechnicalDataFetchError(
                pair, timeframe, f"malformed kline payload ({exc!r})"
            ) from exc

        return candles


def _describe(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code} {exc.response.reason_phrase}".strip()
    return str(exc) or type(exc).__name__
