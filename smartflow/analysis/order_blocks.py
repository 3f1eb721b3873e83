"""Order block detection — momentum candles validated by a follow-through move.

A candle qualifies when its body is well above the local average body and
one of the next few candles extends price beyond it.  A bearish candle that
is followed by a sharp drop marks where buyers later defended (bullish
block); a bullish candle followed by a sharp rise marks a bearish block.
"""

from smartflow.analysis.models import Candle, OrderBlock, OrderBlocks
from smartflow.analysis.settings import AnalysisSettings


def _local_average_body(candles: list[Candle], index: int, radius: int) -> float:
    """Mean body of the ``2 * radius`` candles in ``[index - radius, index + radius)``."""
    window = candles[index - radius:index + radius]
    return sum(c.body for c in window) / (2 * radius)


def _is_confirmed(
    candle: Candle,
    following: list[Candle],
    move_pct: float,
) -> bool:
    """Check whether a later candle breaks the candle's extreme by *move_pct*."""
    for nxt in following:
        if candle.is_bearish and nxt.low < candle.low * (1 - move_pct):
            return True
        if candle.is_bullish and nxt.high > candle.high * (1 + move_pct):
            return True
    return False


def detect_order_blocks(
    candles: list[Candle],
    settings: AnalysisSettings = AnalysisSettings(),
) -> OrderBlocks:
    """Scan interior candles for confirmed order blocks.

    Candles within ``settings.ob_radius`` of either end are skipped so every
    candidate has a full averaging window and a confirmation horizon.

    Returns:
        ``OrderBlocks`` with at most ``settings.max_order_blocks`` entries
        per direction, most recent last.
    """
    radius = settings.ob_radius
    bullish: list[OrderBlock] = []
    bearish: list[OrderBlock] = []

    for i in range(radius, len(candles) - radius):
        candle = candles[i]
        body = candle.body
        avg_body = _local_average_body(candles, i, radius)

        if body <= avg_body * settings.ob_body_multiplier:
            continue

        following = candles[i + 1:i + 1 + settings.ob_confirmation_candles]
        if not _is_confirmed(candle, following, settings.ob_confirmation_move_pct):
            continue

        strength = body / avg_body
        if candle.is_bearish:
            bullish.append(OrderBlock(price=(candle.open + candle.low) / 2, strength=strength))
        else:
            bearish.append(OrderBlock(price=(candle.open + candle.high) / 2, strength=strength))

    limit = settings.max_order_blocks
    return OrderBlocks(bullish=tuple(bullish[-limit:]), bearish=tuple(bearish[-limit:]))
