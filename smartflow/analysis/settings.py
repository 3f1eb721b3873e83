"""Tunable thresholds for the analysis engine.

The module-level constants are the production defaults. ``AnalysisSettings``
bundles them so the orchestrator can pass an explicit configuration through
the pipeline instead of each detector reading literals.
"""

from dataclasses import dataclass


# ── Level finder ─────────────────────────────────────────────────────────
DEFAULT_LEVEL_LOOKBACK = 5
DEFAULT_MAX_LEVELS = 5

# ── Order blocks ─────────────────────────────────────────────────────────
# A momentum candle's body must exceed this multiple of the local average.
DEFAULT_OB_RADIUS = 5
DEFAULT_OB_BODY_MULTIPLIER = 1.5
DEFAULT_OB_CONFIRMATION_CANDLES = 3
DEFAULT_OB_CONFIRMATION_MOVE_PCT = 0.02
DEFAULT_MAX_ORDER_BLOCKS = 3

# ── Fair value gaps ──────────────────────────────────────────────────────
DEFAULT_FVG_MIN_GAP_RATIO = 0.1
DEFAULT_MAX_FVG_ZONES = 3

# ── Structure / bias ─────────────────────────────────────────────────────
DEFAULT_STRUCTURE_WINDOW = 20
DEFAULT_CHOCH_LOOKBACK = 5
DEFAULT_BIAS_WINDOW = 10

# ── Signal generation ────────────────────────────────────────────────────
DEFAULT_OB_PROXIMITY_PCT = 0.002
DEFAULT_OB_ENTRY_BAND_PCT = 0.001
DEFAULT_OB_STOP_PCT = 0.015
DEFAULT_OB_TARGET_PCT = 0.045
DEFAULT_OB_RISK_REWARD = 3.0
DEFAULT_OB_BASE_CONFIDENCE = 60.0
DEFAULT_OB_CONFIDENCE_PER_STRENGTH = 10.0
DEFAULT_OB_MAX_CONFIDENCE = 90.0
DEFAULT_FVG_STOP_PCT = 0.01
DEFAULT_FVG_TARGET_PCT = 0.06
DEFAULT_FVG_RISK_REWARD = 2.0
DEFAULT_FVG_CONFIDENCE = 70.0

# Every actionable signal must offer at least this reward per unit of risk.
MIN_RISK_REWARD = 2.0


@dataclass(frozen=True)
class AnalysisSettings:
    """Thresholds consumed by the detectors and the signal generator."""

    level_lookback: int = DEFAULT_LEVEL_LOOKBACK
    max_levels: int = DEFAULT_MAX_LEVELS

    ob_radius: int = DEFAULT_OB_RADIUS
    ob_body_multiplier: float = DEFAULT_OB_BODY_MULTIPLIER
    ob_confirmation_candles: int = DEFAULT_OB_CONFIRMATION_CANDLES
    ob_confirmation_move_pct: float = DEFAULT_OB_CONFIRMATION_MOVE_PCT
    max_order_blocks: int = DEFAULT_MAX_ORDER_BLOCKS

    fvg_min_gap_ratio: float = DEFAULT_FVG_MIN_GAP_RATIO
    max_fvg_zones: int = DEFAULT_MAX_FVG_ZONES

    structure_window: int = DEFAULT_STRUCTURE_WINDOW
    choch_lookback: int = DEFAULT_CHOCH_LOOKBACK
    bias_window: int = DEFAULT_BIAS_WINDOW

    ob_proximity_pct: float = DEFAULT_OB_PROXIMITY_PCT
    ob_entry_band_pct: float = DEFAULT_OB_ENTRY_BAND_PCT
    ob_stop_pct: float = DEFAULT_OB_STOP_PCT
    ob_target_pct: float = DEFAULT_OB_TARGET_PCT
    ob_risk_reward: float = DEFAULT_OB_RISK_REWARD
    ob_base_confidence: float = DEFAULT_OB_BASE_CONFIDENCE
    ob_confidence_per_strength: float = DEFAULT_OB_CONFIDENCE_PER_STRENGTH
    ob_max_confidence: float = DEFAULT_OB_MAX_CONFIDENCE
    fvg_stop_pct: float = DEFAULT_FVG_STOP_PCT
    fvg_target_pct: float = DEFAULT_FVG_TARGET_PCT
    fvg_risk_reward: float = DEFAULT_FVG_RISK_REWARD
    fvg_confidence: float = DEFAULT_FVG_CONFIDENCE

    def __post_init__(self) -> None:
        for name in ("ob_risk_reward", "fvg_risk_reward"):
            value = getattr(self, name)
            if value < MIN_RISK_REWARD:
                raise ValueError(
                    f"{name} must be at least {MIN_RISK_REWARD}, got {value}"
                )
        for name in (
            "level_lookback",
            "max_levels",
            "ob_radius",
            "ob_confirmation_candles",
            "max_order_blocks",
            "max_fvg_zones",
            "bias_window",
            "choch_lookback",
        ):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be a positive integer")
        if self.structure_window < 2:
            raise ValueError("structure_window must be at least 2")
        for name in (
            "ob_body_multiplier",
            "ob_confirmation_move_pct",
            "fvg_min_gap_ratio",
            "ob_proximity_pct",
            "ob_entry_band_pct",
            "ob_stop_pct",
            "ob_target_pct",
            "fvg_stop_pct",
            "fvg_target_pct",
        ):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"{name} must be positive, got {value}")
