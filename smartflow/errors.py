"""SmartFlow error types.

Every failure that reaches a caller is one of these. Analytical components
do not raise for short input; they return neutral values instead.
"""

from typing import Optional


class SmartFlowError(Exception):
    """Base class for all SmartFlow failures."""


class PriceFetchError(SmartFlowError):
    """Raised when the 24h ticker for a symbol cannot be retrieved."""

    def __init__(self, symbol: str, reason: str) -> None:
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"Price fetch failed for {symbol}: {reason}")


class TechnicalDataFetchError(SmartFlowError):
    """Raised when the candle history for a symbol cannot be retrieved."""

    def __init__(self, symbol: str, timeframe: str, reason: str) -> None:
        self.symbol = symbol
        self.timeframe = timeframe
        self.reason = reason
        super().__init__(
            f"Technical data fetch failed for {symbol} ({timeframe}): {reason}"
        )


class InvalidInputError(SmartFlowError, ValueError):
    """Raised when analysis input is unusable (empty, unordered, bad price)."""


class UnknownActionError(SmartFlowError):
    """Raised when a caller requests an action the analyzer does not offer."""

    def __init__(self, action: Optional[str], available: tuple[str, ...] = ()) -> None:
        self.action = action
        message = f"Invalid action specified: '{action}'"
        if available:
            message += f". Available: {', '.join(available)}"
        super().__init__(message)
