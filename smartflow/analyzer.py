"""Analysis orchestration — fetch, analyse, and answer caller actions.

``MarketAnalyzer`` owns the per-request pipeline:

    price feed ─┐
                ├─ join ─→ run_analysis() ─→ AnalysisResult
    candle feed ┘

The two fetches are independent and run concurrently; analysis starts only
once both have completed.  A failure in either aborts the request.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from smartflow.analysis.engine import run_analysis
from smartflow.analysis.models import AnalysisResult, Candle
from smartflow.analysis.settings import AnalysisSettings
from smartflow.config import DEFAULT_TIMEFRAME, TIMEFRAMES
from smartflow.errors import InvalidInputError, SmartFlowError, UnknownActionError
from smartflow.feeds.models import PriceSnapshot, TechnicalData

logger = logging.getLogger("smartflow")

ACTIONS = ("analyze", "getPrice", "getTechnicals")


class MarketDataFeed(Protocol):
    """Interface the analyzer needs from a market-data source."""

    async def fetch_ticker(self, symbol: str) -> PriceSnapshot:
        ...

    async def fetch_candles(
        self, symbol: str, timeframe: str = "4h", limit: int = 100
    ) -> list[Candle]:
        ...


@dataclass(frozen=True)
class ToolResponse:
    """Envelope returned to callers of ``MarketAnalyzer.execute``."""

    success: bool
    data: Optional[dict] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    def to_dict(self) -> dict:
        out = {"success": self.success, "data": self.data}
        if self.error is not None:
            out["error"] = self.error
            out["errorType"] = self.error_type
        return out


class MarketAnalyzer:
    """Runs Smart Money Concepts analysis for a symbol."""

    def __init__(
        self,
        feed: MarketDataFeed,
        settings: Optional[AnalysisSettings] = None,
        candle_limit: int = 100,
        analysis_window: int = 50,
        default_timeframe: str = DEFAULT_TIMEFRAME,
    ) -> None:
        self._feed = feed
        self._settings = settings or AnalysisSettings()
        self._candle_limit = candle_limit
        self._analysis_window = analysis_window
        self._default_timeframe = default_timeframe

    def _resolve_timeframe(self, timeframe: Optional[str]) -> str:
        tf = timeframe or self._default_timeframe
        if tf not in TIMEFRAMES:
            raise InvalidInputError(
                f"Unsupported timeframe '{tf}'. Available: {', '.join(TIMEFRAMES)}"
            )
        return tf

    async def get_price(self, symbol: str) -> PriceSnapshot:
        """Return the latest price snapshot for *symbol*."""
        return await self._feed.fetch_ticker(symbol)

    async def get_technicals(
        self, symbol: str, timeframe: Optional[str] = None
    ) -> TechnicalData:
        """Return the analysis window of candles and the last close."""
        tf = self._resolve_timeframe(timeframe)
        candles = await self._feed.fetch_candles(symbol, tf, self._candle_limit)
        recent = candles[-self._analysis_window:]
        return TechnicalData(
            symbol=symbol,
            timeframe=tf,
            candles=tuple(recent),
            current_price=recent[-1].close if recent else 0.0,
        )

    async def analyze(
        self, symbol: str, timeframe: Optional[str] = None
    ) -> AnalysisResult:
        """Fetch market data for *symbol* and run the full analysis.

        Raises:
            PriceFetchError: the ticker could not be retrieved.
            TechnicalDataFetchError: the candles could not be retrieved.
            InvalidInputError: unsupported timeframe or unusable data.
        """
        tf = self._resolve_timeframe(timeframe)
        logger.info("Analysing %s on %s", symbol.upper(), tf)

        snapshot, candles = await self._fetch_market_data(symbol, tf)

        result = run_analysis(snapshot, candles[-self._analysis_window:], self._settings)
        logger.info(
            "%s %s: bias=%s trend=%s signal=%s (confidence %.0f)%s",
            result.symbol, tf, result.htf_bias, result.market_structure.trend,
            result.signal.action, result.signal.confidence,
            f" — {result.signal.reason}" if result.signal.reason else "",
        )
        return result

    async def _fetch_market_data(
        self, symbol: str, timeframe: str
    ) -> tuple[PriceSnapshot, list[Candle]]:
        """Run both fetches concurrently; the first failure cancels the other."""
        ticker_task = asyncio.create_task(self._feed.fetch_ticker(symbol))
        candles_task = asyncio.create_task(
            self._feed.fetch_candles(symbol, timeframe, self._candle_limit)
        )
        tasks = (ticker_task, candles_task)
        try:
            snapshot, candles = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return snapshot, candles

    async def execute(
        self,
        action: str,
        symbol: str,
        timeframe: Optional[str] = None,
    ) -> ToolResponse:
        """Dispatch a caller action and wrap the outcome in a ``ToolResponse``.

        Every ``SmartFlowError`` becomes a failure envelope naming the error
        type; nothing is raised to the caller.
        """
        try:
            if action == "analyze":
                data = (await self.analyze(symbol, timeframe)).to_dict()
            elif action == "getPrice":
                data = (await self.get_price(symbol)).to_dict()
            elif action == "getTechnicals":
                data = (await self.get_technicals(symbol, timeframe)).to_dict()
            else:
                raise UnknownActionError(action, ACTIONS)
        except SmartFlowError as exc:
            logger.error("%s %s failed: %s", action, symbol, exc)
            return ToolResponse(
                success=False,
                error=str(exc),
                error_type=type(exc).__name__,
            )
        return ToolResponse(success=True, data=data)
