"""Tests for the analysis orchestrator and action dispatcher.

Uses mock feeds to avoid real Binance calls.
"""

import asyncio
import logging
from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

import smartflow.analyzer as analyzer_module
from smartflow.analysis.models import Candle
from smartflow.analyzer import MarketAnalyzer
from smartflow.errors import (
    InvalidInputError,
    PriceFetchError,
    TechnicalDataFetchError,
)
from smartflow.feeds.models import PriceSnapshot


# ── Helpers ──────────────────────────────────────────────────────────────


def _candles(n: int) -> list[Candle]:
    return [
        Candle(
            timestamp=1_700_000_000_000 + i * 3_600_000,
            open=100.0 + i,
            high=101.5 + i,
            low=99.5 + i,
            close=101.0 + i,
            volume=500.0,
        )
        for i in range(n)
    ]


def _snapshot(symbol: str = "BTCUSDT", price: float = 200.0) -> PriceSnapshot:
    return PriceSnapshot(
        symbol=symbol, price=price, change_24h_pct=2.5,
        high_24h=205.0, low_24h=190.0, volume_24h=1_000.0,
    )


def _make_feed(candles=None, snapshot=None):
    feed = AsyncMock()
    feed.fetch_ticker.return_value = snapshot or _snapshot()
    feed.fetch_candles.return_value = candles if candles is not None else _candles(100)
    return feed


# ── analyze ──────────────────────────────────────────────────────────────


class TestAnalyze:
    @pytest.mark.asyncio
    async def test_fetches_and_analyses(self):
        feed = _make_feed()
        analyzer = MarketAnalyzer(feed)

        result = await analyzer.analyze("BTCUSDT")

        feed.fetch_ticker.assert_awaited_once_with("BTCUSDT")
        feed.fetch_candles.assert_awaited_once_with("BTCUSDT", "4h", 100)
        assert result.symbol == "BTCUSDT"
        assert result.current_price == 200.0
        assert result.price_change_24h == 2.5
        assert result.htf_bias == "BULLISH"
        assert result.market_structure.trend == "UPTREND"
        assert result.signal.action == "WAIT"

    @pytest.mark.asyncio
    async def test_custom_limit_and_timeframe(self):
        feed = _make_feed()
        analyzer = MarketAnalyzer(feed, candle_limit=200, default_timeframe="1d")
        await analyzer.analyze("ETHUSDT")
        feed.fetch_candles.assert_awaited_once_with("ETHUSDT", "1d", 200)

        feed.fetch_candles.reset_mock()
        await analyzer.analyze("ETHUSDT", "1h")
        feed.fetch_candles.assert_awaited_once_with("ETHUSDT", "1h", 200)

    @pytest.mark.asyncio
    async def test_analyses_only_the_recent_window(self):
        # Old history is a downtrend; the last 20 candles rise.
        falling = [
            Candle(1_600_000_000_000 + i * 3_600_000, 300.0 - i, 300.5 - i, 298.5 - i, 299.0 - i, 1.0)
            for i in range(80)
        ]
        candles = falling + _candles(20)
        feed = _make_feed(candles=candles)

        narrow = await MarketAnalyzer(feed, analysis_window=20).analyze("BTCUSDT")
        assert narrow.market_structure.trend == "UPTREND"

    @pytest.mark.asyncio
    async def test_fetches_run_concurrently(self):
        ticker_started = asyncio.Event()
        candles_started = asyncio.Event()

        # Each fetch completes only while the other is in flight.
        class _Feed:
            async def fetch_ticker(self, symbol):
                ticker_started.set()
                await candles_started.wait()
                return _snapshot(symbol)

            async def fetch_candles(self, symbol, timeframe="4h", limit=100):
                candles_started.set()
                await ticker_started.wait()
                return _candles(30)

        analyzer = MarketAnalyzer(_Feed())
        result = await asyncio.wait_for(analyzer.analyze("BTCUSDT"), timeout=2.0)
        assert result.symbol == "BTCUSDT"

    @pytest.mark.asyncio
    async def test_price_failure_aborts(self):
        feed = _make_feed()
        feed.fetch_ticker.side_effect = PriceFetchError("BTCUSDT", "HTTP 500")
        with pytest.raises(PriceFetchError):
            await MarketAnalyzer(feed).analyze("BTCUSDT")

    @pytest.mark.asyncio
    async def test_price_failure_cancels_candle_fetch(self):
        state = {"cancelled": False, "finished": False}
        release = asyncio.Event()

        class _Feed:
            async def fetch_ticker(self, symbol):
                raise PriceFetchError(symbol, "HTTP 500")

            async def fetch_candles(self, symbol, timeframe="4h", limit=100):
                try:
                    await release.wait()
                except asyncio.CancelledError:
                    state["cancelled"] = True
                    raise
                state["finished"] = True
                return _candles(30)

        with pytest.raises(PriceFetchError):
            await asyncio.wait_for(MarketAnalyzer(_Feed()).analyze("BTCUSDT"), timeout=2.0)

        # The candle fetch has already been torn down when analyze() returns.
        assert state["cancelled"] is True
        release.set()
        await asyncio.sleep(0)
        assert state["finished"] is False

    @pytest.mark.asyncio
    async def test_signal_reason_logged(self, monkeypatch, caplog):
        real_run = analyzer_module.run_analysis

        def _run_with_reason(snapshot, candles, settings):
            result = real_run(snapshot, candles, settings)
            signal = replace(result.signal, reason="Price inside bullish FVG 99-101")
            return replace(result, signal=signal)

        monkeypatch.setattr(analyzer_module, "run_analysis", _run_with_reason)

        with caplog.at_level(logging.INFO, logger="smartflow"):
            await MarketAnalyzer(_make_feed()).analyze("BTCUSDT")

        assert "Price inside bullish FVG 99-101" in caplog.text

    @pytest.mark.asyncio
    async def test_candle_failure_aborts(self):
        feed = _make_feed()
        feed.fetch_candles.side_effect = TechnicalDataFetchError("BTCUSDT", "4h", "timeout")
        with pytest.raises(TechnicalDataFetchError, match="BTCUSDT"):
            await MarketAnalyzer(feed).analyze("BTCUSDT")

    @pytest.mark.asyncio
    async def test_empty_history_is_invalid_input(self):
        feed = _make_feed(candles=[])
        with pytest.raises(InvalidInputError):
            await MarketAnalyzer(feed).analyze("BTCUSDT")

    @pytest.mark.asyncio
    async def test_unsupported_timeframe(self):
        feed = _make_feed()
        with pytest.raises(InvalidInputError, match="15m"):
            await MarketAnalyzer(feed).analyze("BTCUSDT", "15m")
        feed.fetch_ticker.assert_not_awaited()


# ── execute (action dispatch) ────────────────────────────────────────────


class TestExecute:
    @pytest.mark.asyncio
    async def test_analyze_action_envelope(self):
        response = await MarketAnalyzer(_make_feed()).execute("analyze", "BTCUSDT")
        assert response.success is True
        assert response.error is None
        assert response.data["htfBias"] == "BULLISH"
        assert response.data["signals"]["action"] == "WAIT"

    @pytest.mark.asyncio
    async def test_get_price_action(self):
        response = await MarketAnalyzer(_make_feed()).execute("getPrice", "BTCUSDT")
        assert response.success is True
        assert response.data == {
            "symbol": "BTCUSDT",
            "price": 200.0,
            "change24h": 2.5,
            "high24h": 205.0,
            "low24h": 190.0,
            "volume24h": 1_000.0,
        }

    @pytest.mark.asyncio
    async def test_get_technicals_action(self):
        response = await MarketAnalyzer(_make_feed()).execute(
            "getTechnicals", "BTCUSDT", "1h"
        )
        assert response.success is True
        data = response.data
        assert data["timeframe"] == "1h"
        assert len(data["candles"]) == 50
        assert data["candles"][0]["open"] == 150.0
        assert data["currentPrice"] == 200.0

    @pytest.mark.asyncio
    async def test_unknown_action_is_typed_failure(self):
        feed = _make_feed()
        response = await MarketAnalyzer(feed).execute("trade", "BTCUSDT")
        assert response.success is False
        assert response.data is None
        assert response.error_type == "UnknownActionError"
        assert "trade" in response.error
        feed.fetch_ticker.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetch_failure_is_typed_failure(self):
        feed = _make_feed()
        feed.fetch_ticker.side_effect = PriceFetchError("BTCUSDT", "HTTP 503")
        response = await MarketAnalyzer(feed).execute("analyze", "BTCUSDT")
        assert response.success is False
        assert response.error_type == "PriceFetchError"
        assert "BTCUSDT" in response.error
        assert response.to_dict() == {
            "success": False,
            "data": None,
            "error": response.error,
            "errorType": "PriceFetchError",
        }
