"""Market structure — trend classification and structure-break events.

Provides two pieces:
- ``detect_choch_events()``: every change-of-character in the window, in order.
- ``analyze_market_structure()``: half-window trend comparison plus the
  most recent change-of-character and the break-of-structure label.
"""

from dataclasses import dataclass
from typing import Literal, Optional

from smartflow.analysis.models import Candle, MarketStructure, Trend
from smartflow.analysis.settings import DEFAULT_CHOCH_LOOKBACK, DEFAULT_STRUCTURE_WINDOW

BULLISH_BOS = "Bullish BOS detected"
BEARISH_BOS = "Bearish BOS detected"
BULLISH_CHOCH = "Bullish CHOCH"
BEARISH_CHOCH = "Bearish CHOCH"


@dataclass(frozen=True)
class ChochEvent:
    """A change-of-character at *index* within the structure window."""

    index: int
    direction: Literal["bullish", "bearish"]

    @property
    def label(self) -> str:
        return BULLISH_CHOCH if self.direction == "bullish" else BEARISH_CHOCH


def _average(values: list[float]) -> float:
    return sum(values) / len(values)


def _classify_trend(window: list[Candle]) -> Trend:
    """Compare average highs and lows of the older and newer halves."""
    half = len(window) // 2
    older, newer = window[:half], window[half:]

    older_high = _average([c.high for c in older])
    newer_high = _average([c.high for c in newer])
    older_low = _average([c.low for c in older])
    newer_low = _average([c.low for c in newer])

    if newer_high > older_high and newer_low > older_low:
        return "UPTREND"
    if newer_high < older_high and newer_low < older_low:
        return "DOWNTREND"
    return "SIDEWAYS"


def detect_choch_events(
    window: list[Candle],
    lookback: int = DEFAULT_CHOCH_LOOKBACK,
) -> list[ChochEvent]:
    """Collect change-of-character events across *window*.

    Scans indices ``lookback .. len(window) - lookback - 1``.  A candle whose
    high exceeds every high of the preceding *lookback* candles is a bullish
    event; otherwise one whose low undercuts every preceding low is bearish.
    """
    events: list[ChochEvent] = []
    for i in range(lookback, len(window) - lookback):
        prior = window[i - lookback:i]
        candle = window[i]
        if candle.high > max(c.high for c in prior):
            events.append(ChochEvent(index=i, direction="bullish"))
        elif candle.low < min(c.low for c in prior):
            events.append(ChochEvent(index=i, direction="bearish"))
    return events


def analyze_market_structure(
    candles: list[Candle],
    window: int = DEFAULT_STRUCTURE_WINDOW,
    choch_lookback: int = DEFAULT_CHOCH_LOOKBACK,
) -> MarketStructure:
    """Classify trend and report the latest structure breaks.

    Operates on the last *window* candles.  With fewer candles than that the
    result is ``SIDEWAYS`` with no labels.

    Rules:
        - **UPTREND**: newer half has higher average high AND higher
          average low → bullish break of structure.
        - **DOWNTREND**: both averages lower → bearish break of structure.
        - **SIDEWAYS**: anything else, no break-of-structure label.

    The change-of-character label is taken from the most recent event found
    by ``detect_choch_events``; earlier events in the window are superseded.
    """
    if len(candles) < window:
        return MarketStructure()

    recent = candles[-window:]
    trend = _classify_trend(recent)

    last_bos: Optional[str] = None
    if trend == "UPTREND":
        last_bos = BULLISH_BOS
    elif trend == "DOWNTREND":
        last_bos = BEARISH_BOS

    events = detect_choch_events(recent, choch_lookback)
    last_choch = events[-1].label if events else None

    return MarketStructure(trend=trend, last_choch=last_choch, last_bos=last_bos)
