"""Analysis engine — the pure pipeline from candles to ``AnalysisResult``.

No I/O: the caller supplies the candle history and a ``PriceSnapshot``.
Same input always produces an equal result.
"""

import logging

from smartflow.analysis.bias import determine_htf_bias
from smartflow.analysis.fvg import detect_fair_value_gaps
from smartflow.analysis.levels import identify_key_levels
from smartflow.analysis.models import AnalysisResult, Candle
from smartflow.analysis.order_blocks import detect_order_blocks
from smartflow.analysis.settings import AnalysisSettings
from smartflow.analysis.signals import generate_signal
from smartflow.analysis.structure import analyze_market_structure
from smartflow.errors import InvalidInputError
from smartflow.feeds.models import PriceSnapshot

logger = logging.getLogger("smartflow")


def validate_candles(candles: list[Candle]) -> None:
    """Raise ``InvalidInputError`` unless *candles* is non-empty and strictly ascending."""
    if not candles:
        raise InvalidInputError("Candle series is empty")
    for prev, curr in zip(candles, candles[1:]):
        if curr.timestamp <= prev.timestamp:
            raise InvalidInputError(
                f"Candle timestamps must be strictly ascending: "
                f"{curr.timestamp} follows {prev.timestamp}"
            )


def run_analysis(
    snapshot: PriceSnapshot,
    candles: list[Candle],
    settings: AnalysisSettings = AnalysisSettings(),
) -> AnalysisResult:
    """Run every detector over *candles* and derive the signal.

    The five detectors are independent; the signal generator runs last
    because it consumes all of their outputs.

    Raises:
        InvalidInputError: empty or unordered candles, or a non-positive
            current price.
    """
    validate_candles(candles)
    if snapshot.price <= 0:
        raise InvalidInputError(
            f"Current price for {snapshot.symbol} must be positive, got {snapshot.price}"
        )

    htf_bias = determine_htf_bias(candles, settings.bias_window)
    key_levels = identify_key_levels(candles, settings.level_lookback, settings.max_levels)
    order_blocks = detect_order_blocks(candles, settings)
    fvg_zones = detect_fair_value_gaps(
        candles, settings.fvg_min_gap_ratio, settings.max_fvg_zones
    )
    structure = analyze_market_structure(
        candles, settings.structure_window, settings.choch_lookback
    )
    signal = generate_signal(
        snapshot.price, htf_bias, order_blocks, fvg_zones, structure, settings
    )

    logger.debug(
        "%s: bias=%s trend=%s OBs=%d/%d FVGs=%d/%d levels=%d/%d → %s",
        snapshot.symbol, htf_bias, structure.trend,
        len(order_blocks.bullish), len(order_blocks.bearish),
        len(fvg_zones.bullish), len(fvg_zones.bearish),
        len(key_levels.support), len(key_levels.resistance),
        signal.action,
    )

    return AnalysisResult(
        symbol=snapshot.symbol,
        current_price=snapshot.price,
        price_change_24h=snapshot.change_24h_pct,
        volume_24h=snapshot.volume_24h,
        high_24h=snapshot.high_24h,
        low_24h=snapshot.low_24h,
        htf_bias=htf_bias,
        key_levels=key_levels,
        order_blocks=order_blocks,
        fvg_zones=fvg_zones,
        market_structure=structure,
        signal=signal,
    )
