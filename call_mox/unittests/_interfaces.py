"""Sample collaborator interfaces shared by the unit tests."""

from __future__ import annotations

import abc
import dataclasses as dc
import datetime as dt
import enum
import typing as t
import uuid


@dc.dataclass(slots=True)
class Order:
    """A tiny value object passed through mocked repositories."""

    order_id: int
    customer: str
    total: float = 0.0


class Inventory:
    """Collaborator returned by :meth:`OrderRepository.inventory`."""

    def stock(self, sku: str) -> int:
        """Return the units of *sku* on hand."""
        raise NotImplementedError


class IdentifierComparer(abc.ABC):
    """Abstract comparer of three identifiers."""

    @abc.abstractmethod
    def compare(self, first: uuid.UUID, second: uuid.UUID, third: uuid.UUID) -> bool:
        """Return ``True`` when the identifiers satisfy the comparison."""


class OrderRepository(t.Protocol):
    """Repository protocol with a spread of return types."""

    def get(self, order_id: int) -> Order | None: ...

    def list_ids(self) -> list[int]: ...

    def count(self) -> int: ...

    def name_of(self, order_id: int) -> str: ...

    def totals(self) -> dict[str, float]: ...

    def is_open(self, order_id: int) -> bool: ...

    def save(self, order: Order, *, flush: bool = True) -> None: ...

    def inventory(self) -> Inventory: ...

    def tag(self, order_id: int, *tags: str) -> int: ...


class PriceCalculator:
    """Concrete class used for partial mocks and protected members."""

    def __init__(self, vat_rate: float = 0.0) -> None:
        self.vat_rate = vat_rate
        self._configure_rounding(2)

    def total(self, quantity: int, unit_price: float) -> float:
        """Return the discounted, taxed total."""
        net = self._apply_discount(quantity * unit_price)
        return round(net * (1 + self.vat_rate), 2)

    def currency(self) -> str:
        """Return the currency code."""
        return "EUR"

    def _apply_discount(self, amount: float) -> float:
        return amount

    def _configure_rounding(self, digits: int) -> None:
        self.rounding = digits

    def __secret(self) -> None:  # pragma: no cover - never called
        pass

    @staticmethod
    def helper() -> str:
        """Return a constant; static methods are not intercepted."""
        return "static"

    @classmethod
    def build(cls) -> PriceCalculator:
        """Return a default calculator; class methods are not intercepted."""
        return cls()

    @property
    def label(self) -> str:
        """Return a label; properties are not intercepted."""
        return "calculator"


class Colour(enum.Enum):
    """Enum returned by :meth:`Clock.colour`."""

    RED = "red"
    GREEN = "green"


class Clock:
    """Collaborator whose results cannot be replaced by stand-ins."""

    def now(self) -> dt.datetime:
        """Return the current time."""
        raise NotImplementedError

    def colour(self) -> Colour:
        """Return the colour of the hour."""
        raise NotImplementedError
