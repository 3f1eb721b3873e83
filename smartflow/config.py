"""SmartFlow — application configuration.

Loads .env variables into a typed config object.
Validates values on startup.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from smartflow.analysis.settings import (
    DEFAULT_FVG_MIN_GAP_RATIO,
    DEFAULT_OB_BODY_MULTIPLIER,
    DEFAULT_OB_CONFIRMATION_MOVE_PCT,
    DEFAULT_OB_PROXIMITY_PCT,
    AnalysisSettings,
)

TIMEFRAMES = ("1h", "4h", "1d")
DEFAULT_TIMEFRAME = "4h"


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    binance_base_url: str = "https://api.binance.com"
    binance_api_key: Optional[str] = None
    default_timeframe: str = DEFAULT_TIMEFRAME
    candle_limit: int = 100
    analysis_window: int = 50
    request_timeout: float = 30.0
    log_level: str = "INFO"
    analysis: AnalysisSettings = field(default_factory=AnalysisSettings)


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(
            f"Invalid value for environment variable {name}: {raw!r}"
        ) from None


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` with a message naming the offending variable when a
    value cannot be parsed or is out of range.
    """
    load_dotenv(dotenv_path=env_path)

    timeframe = os.environ.get("DEFAULT_TIMEFRAME", DEFAULT_TIMEFRAME)
    if timeframe not in TIMEFRAMES:
        raise ValueError(
            f"Invalid value for environment variable DEFAULT_TIMEFRAME: "
            f"{timeframe!r} (expected one of {', '.join(TIMEFRAMES)})"
        )

    candle_limit = _env_number("CANDLE_LIMIT", 100, int)
    analysis_window = _env_number("ANALYSIS_WINDOW", 50, int)
    if candle_limit < 1 or analysis_window < 1:
        raise ValueError("CANDLE_LIMIT and ANALYSIS_WINDOW must be positive")

    analysis = AnalysisSettings(
        ob_body_multiplier=_env_number(
            "OB_BODY_MULTIPLIER", DEFAULT_OB_BODY_MULTIPLIER, float
        ),
        ob_confirmation_move_pct=_env_number(
            "OB_CONFIRMATION_MOVE_PCT", DEFAULT_OB_CONFIRMATION_MOVE_PCT, float
        ),
        ob_proximity_pct=_env_number(
            "OB_PROXIMITY_PCT", DEFAULT_OB_PROXIMITY_PCT, float
        ),
        fvg_min_gap_ratio=_env_number(
            "FVG_MIN_GAP_RATIO", DEFAULT_FVG_MIN_GAP_RATIO, float
        ),
    )

    return Config(
        binance_base_url=os.environ.get("BINANCE_BASE_URL", "https://api.binance.com"),
        binance_api_key=os.environ.get("BINANCE_API_KEY") or None,
        default_timeframe=timeframe,
        candle_limit=candle_limit,
        analysis_window=analysis_window,
        request_timeout=_env_number("REQUEST_TIMEOUT_SECONDS", 30.0, float),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        analysis=analysis,
    )
