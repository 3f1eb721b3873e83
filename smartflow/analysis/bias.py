"""Higher-timeframe bias from swing counting."""

from smartflow.analysis.models import Bias, Candle
from smartflow.analysis.settings import DEFAULT_BIAS_WINDOW


def determine_htf_bias(candles: list[Candle], window: int = DEFAULT_BIAS_WINDOW) -> Bias:
    """Lean bullish, bearish or neutral from the last *window* candles.

    Each consecutive pair counts as a higher or lower high, and as a higher
    or lower low.  A pair that does not rise counts as lower.

    Returns ``"BULLISH"`` when higher highs and higher lows both
    outnumber their counterparts, ``"BEARISH"`` when lower highs and lower
    lows both do, else ``"NEUTRAL"`` (also for fewer than *window* candles).
    """
    if len(candles) < window:
        return "NEUTRAL"

    recent = candles[-window:]
    higher_highs = lower_highs = higher_lows = lower_lows = 0

    for prev, curr in zip(recent, recent[1:]):
        if curr.high > prev.high:
            higher_highs += 1
        else:
            lower_highs += 1
        if curr.low > prev.low:
            higher_lows += 1
        else:
            lower_lows += 1

    if higher_highs > lower_highs and higher_lows > lower_lows:
        return "BULLISH"
    if lower_highs > higher_highs and lower_lows > higher_lows:
        return "BEARISH"
    return "NEUTRAL"
