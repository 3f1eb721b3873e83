"""Signal generation — pure functions, no I/O.

Combines bias, structure, order blocks and fair value gaps into a single
BUY/SELL/WAIT recommendation.  A trade is only proposed when bias and trend
agree (confluence) and price sits at a zone.  Checks run in fixed priority:

1. bullish order blocks
2. bearish order blocks
3. bullish fair value gaps
4. bearish fair value gaps

The first match wins; with no match the result is ``WAIT``.
"""

from typing import Optional

from smartflow.analysis.models import (
    Bias,
    EntryZone,
    FairValueGap,
    FvgZones,
    MarketStructure,
    OrderBlock,
    OrderBlocks,
    Signal,
)
from smartflow.analysis.settings import AnalysisSettings


def _is_near(price: float, level: float, proximity_pct: float) -> bool:
    """True when *level* is within *proximity_pct* of *price*."""
    return abs(price - level) / price < proximity_pct


def _order_block_confidence(block: OrderBlock, settings: AnalysisSettings) -> float:
    return min(
        settings.ob_max_confidence,
        settings.ob_base_confidence + block.strength * settings.ob_confidence_per_strength,
    )


def _order_block_signal(
    block: OrderBlock,
    action: str,
    settings: AnalysisSettings,
) -> Signal:
    """Build a signal anchored on the block's reference price."""
    price = block.price
    band = settings.ob_entry_band_pct
    if action == "BUY":
        stop = price * (1 - settings.ob_stop_pct)
        target = price * (1 + settings.ob_target_pct)
        kind = "bullish"
    else:
        stop = price * (1 + settings.ob_stop_pct)
        target = price * (1 - settings.ob_target_pct)
        kind = "bearish"
    return Signal(
        action=action,
        confidence=_order_block_confidence(block, settings),
        entry_zone=EntryZone(low=price * (1 - band), high=price * (1 + band)),
        stop_loss=stop,
        take_profit=target,
        risk_reward=settings.ob_risk_reward,
        reason=f"Price at {kind} order block {price:.8g} (strength {block.strength:.2f})",
    )


def _fvg_signal(zone: FairValueGap, action: str, settings: AnalysisSettings) -> Signal:
    """Build a signal that enters anywhere inside the gap."""
    if action == "BUY":
        stop = zone.low * (1 - settings.fvg_stop_pct)
        target = zone.high * (1 + settings.fvg_target_pct)
        kind = "bullish"
    else:
        stop = zone.high * (1 + settings.fvg_stop_pct)
        target = zone.low * (1 - settings.fvg_target_pct)
        kind = "bearish"
    return Signal(
        action=action,
        confidence=settings.fvg_confidence,
        entry_zone=EntryZone(low=zone.low, high=zone.high),
        stop_loss=stop,
        take_profit=target,
        risk_reward=settings.fvg_risk_reward,
        reason=f"Price inside {kind} FVG {zone.low:.8g}-{zone.high:.8g}",
    )


def _match_order_block(
    current_price: float,
    blocks: tuple[OrderBlock, ...],
    settings: AnalysisSettings,
) -> Optional[OrderBlock]:
    for block in blocks:
        if _is_near(current_price, block.price, settings.ob_proximity_pct):
            return block
    return None


def _match_fvg(current_price: float, zones: tuple[FairValueGap, ...]) -> Optional[FairValueGap]:
    for zone in zones:
        if zone.contains(current_price):
            return zone
    return None


def generate_signal(
    current_price: float,
    htf_bias: Bias,
    order_blocks: OrderBlocks,
    fvg_zones: FvgZones,
    market_structure: MarketStructure,
    settings: AnalysisSettings = AnalysisSettings(),
) -> Signal:
    """Produce the trading signal for *current_price*.

    Args:
        current_price: Live price; must be positive.
        htf_bias: Output of ``determine_htf_bias``.
        order_blocks: Output of ``detect_order_blocks``.
        fvg_zones: Output of ``detect_fair_value_gaps``.
        market_structure: Output of ``analyze_market_structure``.
        settings: Proximity, stop/target and confidence parameters.

    Returns:
        ``Signal``.  Non-``WAIT`` signals always carry an entry zone, stop,
        target and a risk-reward of at least ``MIN_RISK_REWARD``.
    """
    bullish_confluence = htf_bias == "BULLISH" and market_structure.trend == "UPTREND"
    bearish_confluence = htf_bias == "BEARISH" and market_structure.trend == "DOWNTREND"

    if bullish_confluence:
        block = _match_order_block(current_price, order_blocks.bullish, settings)
        if block is not None:
            return _order_block_signal(block, "BUY", settings)

    if bearish_confluence:
        block = _match_order_block(current_price, order_blocks.bearish, settings)
        if block is not None:
            return _order_block_signal(block, "SELL", settings)

    if bullish_confluence:
        zone = _match_fvg(current_price, fvg_zones.bullish)
        if zone is not None:
            return _fvg_signal(zone, "BUY", settings)

    if bearish_confluence:
        zone = _match_fvg(current_price, fvg_zones.bearish)
        if zone is not None:
            return _fvg_signal(zone, "SELL", settings)

    return Signal()
