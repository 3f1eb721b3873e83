"""Market-data feed models — typed representations of Binance REST payloads."""

from dataclasses import dataclass

from smartflow.analysis.models import Candle


@dataclass(frozen=True)
class PriceSnapshot:
    """Last price and rolling 24h statistics for a symbol."""

    symbol: str
    price: float
    change_24h_pct: float
    high_24h: float
    low_24h: float
    volume_24h: float

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "price": self.price,
            "change24h": self.change_24h_pct,
            "high24h": self.high_24h,
            "low24h": self.low_24h,
            "volume24h": self.volume_24h,
        }


@dataclass(frozen=True)
class TechnicalData:
    """Recent candles for a symbol/timeframe plus the last close."""

    symbol: str
    timeframe: str
    candles: tuple[Candle, ...]
    current_price: float

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "timeframe": self.timeframe,
            "candles": [c.to_dict() for c in self.candles],
            "currentPrice": self.current_price,
        }
