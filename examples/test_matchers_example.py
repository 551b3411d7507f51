"""Example tests demonstrating argument matchers and responses."""

from __future__ import annotations

import typing as t

import pytest

from call_mox import InRange, IsIn, Predicate, Regex, StartsWith
from examples._services import Checkout, PaymentGateway, PriceList, StockLevels

pytest_plugins = ("call_mox.pytest_plugin",)

if t.TYPE_CHECKING:  # pragma: no cover - typing only
    from call_mox import MockFactory


def test_matchers_constrain_arguments(call_mox: MockFactory) -> None:
    """Matchers accept families of values instead of one exact value."""
    stock = call_mox.create(StockLevels)
    stock.configure("available", StartsWith("sku-")).returns(50)
    stock.configure("reserve", Regex(r"^sku-\d+$"), InRange(1, 20)).returns(True)
    gateway = call_mox.create(PaymentGateway)
    gateway.configure(
        "charge", IsIn("ada", "grace"), Predicate(lambda amount: amount > 0), "EUR"
    ).returns("tx-1")

    receipt = Checkout(gateway.object, stock.object, PriceList()).place(
        "o-2", "grace", "sku-7", 10
    )

    assert receipt.charged == 900


def test_callbacks_and_sequences(call_mox: MockFactory) -> None:
    """Responses can be computed or consumed in order."""
    stock = call_mox.create(StockLevels)
    stock.configure("available", "sku-1").returns_in_sequence(3, 0)
    stock.configure("reserve", "sku-1", 1).runs(lambda sku, quantity: quantity > 0)
    checkout = Checkout(call_mox.create(PaymentGateway).object, stock.object, PriceList())

    assert checkout.place("o-3", "ada", "sku-1", 1).charged == 100
    with pytest.raises(ValueError, match="not enough"):
        checkout.place("o-4", "ada", "sku-1", 1)
