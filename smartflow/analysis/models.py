"""Analysis data models — typed representations of engine inputs and outputs.

All records are frozen; collections are tuples so a result can never be
mutated after the engine builds it.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional

Bias = Literal["BULLISH", "BEARISH", "NEUTRAL"]
Trend = Literal["UPTREND", "DOWNTREND", "SIDEWAYS"]
Action = Literal["BUY", "SELL", "WAIT"]


@dataclass(frozen=True)
class Candle:
    """A single OHLCV bar. ``timestamp`` is the open time in epoch ms."""

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open

    def to_dict(self) -> dict:
        return {
            "time": self.timestamp,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


@dataclass(frozen=True)
class KeyLevels:
    """Significant support and resistance prices, oldest first."""

    support: tuple[float, ...] = ()
    resistance: tuple[float, ...] = ()

    def to_dict(self) -> dict:
        return {"support": list(self.support), "resistance": list(self.resistance)}


@dataclass(frozen=True)
class OrderBlock:
    """A confirmed momentum candle.

    ``price`` is the midpoint of the candle's open and its wick extreme;
    ``strength`` is its body divided by the local average body.
    """

    price: float
    strength: float

    def to_dict(self) -> dict:
        return {"price": self.price, "strength": self.strength}


@dataclass(frozen=True)
class OrderBlocks:
    bullish: tuple[OrderBlock, ...] = ()
    bearish: tuple[OrderBlock, ...] = ()

    def to_dict(self) -> dict:
        return {
            "bullish": [ob.to_dict() for ob in self.bullish],
            "bearish": [ob.to_dict() for ob in self.bearish],
        }


@dataclass(frozen=True)
class FairValueGap:
    """A price band skipped by a three-candle move."""

    high: float
    low: float

    def contains(self, price: float) -> bool:
        return self.low <= price <= self.high

    def to_dict(self) -> dict:
        return {"high": self.high, "low": self.low}


@dataclass(frozen=True)
class FvgZones:
    bullish: tuple[FairValueGap, ...] = ()
    bearish: tuple[FairValueGap, ...] = ()

    def to_dict(self) -> dict:
        return {
            "bullish": [z.to_dict() for z in self.bullish],
            "bearish": [z.to_dict() for z in self.bearish],
        }


@dataclass(frozen=True)
class MarketStructure:
    """Overall trend plus the most recent structure-break labels."""

    trend: Trend = "SIDEWAYS"
    last_choch: Optional[str] = None
    last_bos: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "trend": self.trend,
            "lastCHOCH": self.last_choch,
            "lastBOS": self.last_bos,
        }


@dataclass(frozen=True)
class EntryZone:
    low: float
    high: float

    def to_dict(self) -> dict:
        return {"high": self.high, "low": self.low}


@dataclass(frozen=True)
class Signal:
    """A trade recommendation.

    A ``WAIT`` signal carries zero confidence and no price fields.
    """

    action: Action = "WAIT"
    confidence: float = 0.0
    entry_zone: Optional[EntryZone] = None
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    risk_reward: Optional[float] = None
    reason: str = ""

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "confidence": self.confidence,
            "entryZone": self.entry_zone.to_dict() if self.entry_zone else None,
            "stopLoss": self.stop_loss,
            "takeProfit": self.take_profit,
            "riskReward": self.risk_reward,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Everything one analysis call produces for a symbol."""

    symbol: str
    current_price: float
    price_change_24h: float
    volume_24h: float
    high_24h: float
    low_24h: float
    htf_bias: Bias
    key_levels: KeyLevels
    order_blocks: OrderBlocks
    fvg_zones: FvgZones
    market_structure: MarketStructure
    signal: Signal = field(default_factory=Signal)

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "currentPrice": self.current_price,
            "priceChange24h": self.price_change_24h,
            "volume24h": self.volume_24h,
            "high24h": self.high_24h,
            "low24h": self.low_24h,
            "htfBias": self.htf_bias,
            "keyLevels": self.key_levels.to_dict(),
            "orderBlocks": self.order_blocks.to_dict(),
            "fvgZones": self.fvg_zones.to_dict(),
            "marketStructure": self.market_structure.to_dict(),
            "signals": self.signal.to_dict(),
        }
