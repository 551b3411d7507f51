"""Collaborators and code under test shared by the runnable examples."""

from __future__ import annotations

import abc
import dataclasses as dc


@dc.dataclass(slots=True, frozen=True)
class Receipt:
    """Result of a successful checkout."""

    order_id: str
    charged: int


class PaymentGateway(abc.ABC):
    """Charges customers; implemented by a remote service in production."""

    @abc.abstractmethod
    def charge(self, customer: str, amount: int, *, currency: str = "EUR") -> str:
        """Charge *amount* minor units and return a transaction id."""

    @abc.abstractmethod
    def refund(self, transaction_id: str) -> bool:
        """Refund a transaction."""


class StockLevels:
    """Warehouse stock lookups."""

    def available(self, sku: str) -> int:
        raise NotImplementedError

    def reserve(self, sku: str, quantity: int) -> bool:
        raise NotImplementedError


class PriceList:
    """Price lookup with an overridable discount hook."""

    def price_of(self, sku: str, quantity: int) -> int:
        return self._discounted(100 * quantity, quantity)

    def _discounted(self, amount: int, quantity: int) -> int:
        return amount if quantity < 10 else amount * 9 // 10


class Checkout:
    """Places orders against the injected collaborators."""

    def __init__(
        self, gateway: PaymentGateway, stock: StockLevels, prices: PriceList
    ) -> None:
        self.gateway = gateway
        self.stock = stock
        self.prices = prices

    def place(self, order_id: str, customer: str, sku: str, quantity: int) -> Receipt:
        if self.stock.available(sku) < quantity:
            msg = f"not enough {sku} in stock"
            raise ValueError(msg)
        if not self.stock.reserve(sku, quantity):
            msg = f"could not reserve {sku}"
            raise ValueError(msg)
        amount = self.prices.price_of(sku, quantity)
        self.gateway.charge(customer, amount)
        return Receipt(order_id, amount)
