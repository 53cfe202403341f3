"""
Host-native algorithm API exposed to embedded scripts.

Scripts subclass HostAlgorithm; every public operation is a ``host_call``,
so failures inside it are reported with the script's call site.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .boundary import host_call

logger = logging.getLogger(__name__)


@dataclass
class Security:
    """Tradable instrument registered with the algorithm"""
    symbol: str
    price: float = 0.0


@dataclass
class Order:
    """Order accepted by the host"""
    order_id: int
    symbol: str
    quantity: float
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class HostAlgorithm:
    """Base class for user algorithms running in the embedded runtime."""

    def __init__(self):
        self.securities: Dict[str, Security] = {}
        self.orders: List[Order] = []
        self.debug_messages: List[str] = []

    @host_call
    def add_security(self, ticker: str, price: float = 0.0) -> str:
        """Register a security and return its symbol."""
        if not isinstance(ticker, str) or not ticker.strip():
            raise ValueError(f"Ticker must be a non-empty string, got {ticker!r}")
        symbol = ticker.strip().upper()
        self.securities.setdefault(symbol, Security(symbol=symbol, price=price))
        return symbol

    @host_call
    def market_order(self, symbol: Optional[str], quantity: float) -> Order:
        """Submit a market order for a registered security."""
        security = self._security(symbol)
        if not quantity:
            raise ValueError("Order quantity must be non-zero")
        order = Order(
            order_id=len(self.orders) + 1,
            symbol=security.symbol,
            quantity=quantity
        )
        self.orders.append(order)
        return order

    @host_call
    def debug(self, message) -> None:
        """Record a debug message from the algorithm."""
        text = str(message)
        self.debug_messages.append(text)
        logger.debug("[%s] %s", type(self).__name__, text)

    def _security(self, symbol: Optional[str]) -> Security:
        if symbol is None:
            raise ValueError("Value cannot be null. (Parameter 'key')")
        try:
            return self.securities[symbol]
        except KeyError:
            raise KeyError(
                f"'{symbol}' wasn't found in the securities. "
                f"Add it with add_security() first"
            ) from None
