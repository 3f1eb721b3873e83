"""Fair value gap detection — three-candle imbalances. Pure functions, no I/O."""

from smartflow.analysis.models import Candle, FairValueGap, FvgZones
from smartflow.analysis.settings import DEFAULT_FVG_MIN_GAP_RATIO, DEFAULT_MAX_FVG_ZONES


def _average_range(prev: Candle, curr: Candle, nxt: Candle) -> float:
    return (prev.range + curr.range + nxt.range) / 3


def detect_fair_value_gaps(
    candles: list[Candle],
    min_gap_ratio: float = DEFAULT_FVG_MIN_GAP_RATIO,
    max_zones: int = DEFAULT_MAX_FVG_ZONES,
) -> FvgZones:
    """Find bullish and bearish fair value gaps.

    For each consecutive triple ``(prev, curr, next)``:

    * **Bullish** when ``next.low > prev.high``; zone is
      ``[prev.high, next.low]``.
    * **Bearish** when ``next.high < prev.low``; zone is
      ``[next.high, prev.low]``.

    A gap is kept only if it is strictly larger than *min_gap_ratio* times
    the average range of the three candles.  Overlapping zones are kept
    as-is.
    """
    bullish: list[FairValueGap] = []
    bearish: list[FairValueGap] = []

    for i in range(1, len(candles) - 1):
        prev, curr, nxt = candles[i - 1], candles[i], candles[i + 1]
        threshold = _average_range(prev, curr, nxt) * min_gap_ratio

        if nxt.low > prev.high and nxt.low - prev.high > threshold:
            bullish.append(FairValueGap(high=nxt.low, low=prev.high))

        if nxt.high < prev.low and prev.low - nxt.high > threshold:
            bearish.append(FairValueGap(high=prev.low, low=nxt.high))

    return FvgZones(bullish=tuple(bullish[-max_zones:]), bearish=tuple(bearish[-max_zones:]))
