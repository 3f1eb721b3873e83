"""Support/Resistance level detection — pure functions."""

from smartflow.analysis.models import Candle, KeyLevels
from smartflow.analysis.settings import DEFAULT_LEVEL_LOOKBACK, DEFAULT_MAX_LEVELS


def find_significant_levels(
    prices: list[float],
    is_resistance: bool,
    lookback: int = DEFAULT_LEVEL_LOOKBACK,
    max_levels: int = DEFAULT_MAX_LEVELS,
) -> list[float]:
    """Return prices that are strict local extremes within ±*lookback*.

    A resistance candidate must be higher than every other price in the
    ``[i - lookback, i + lookback]`` window; a support candidate must be
    lower.  Ties disqualify.  Only indices with a full window on both sides
    are considered, so the first and last *lookback* prices never qualify.

    Returns the most recent *max_levels* levels in the order found.
    """
    levels: list[float] = []
    for i in range(lookback, len(prices) - lookback):
        price = prices[i]
        is_significant = True
        for j in range(i - lookback, i + lookback + 1):
            if j == i:
                continue
            if is_resistance and prices[j] >= price:
                is_significant = False
                break
            if not is_resistance and prices[j] <= price:
                is_significant = False
                break
        if is_significant:
            levels.append(price)
    return levels[-max_levels:]


def identify_key_levels(
    candles: list[Candle],
    lookback: int = DEFAULT_LEVEL_LOOKBACK,
    max_levels: int = DEFAULT_MAX_LEVELS,
) -> KeyLevels:
    """Resistance from candle highs, support from candle lows."""
    highs = [c.high for c in candles]
    lows = [c.low for c in candles]
    return KeyLevels(
        support=tuple(find_significant_levels(lows, False, lookback, max_levels)),
        resistance=tuple(find_significant_levels(highs, True, lookback, max_levels)),
    )
