"""Tests for entity actions and the action dispatcher."""

from decimal import Decimal

import pytest

from catalogkeeper.actions import (
    ActionDispatcher,
    buy,
    register_builtin_actions,
    valid_quantity,
)
from catalogkeeper.validation.types import Result, ViolationKind


@pytest.fixture
def product():
    return {"id": "PRD-00001", "name": "widget-1", "price": 150, "categoryId": "CAT-00001"}


@pytest.fixture
def dispatcher():
    dispatcher = ActionDispatcher()
    register_builtin_actions(dispatcher)
    return dispatcher


class TestBuy:
    @pytest.mark.parametrize("quantity", [0, -5])
    def test_non_positive_quantity_fails(self, product, quantity):
        result = buy(product, quantity)

        assert not result.ok
        assert result.violation.message == f"Invalid quantity {quantity}"
        assert result.violation.code == "INVALID_QUANTITY"
        assert result.violation.kind == ViolationKind.INPUT

    @pytest.mark.parametrize("quantity", ["abc", "10", None, True, [1]])
    def test_non_numeric_quantity_fails(self, product, quantity):
        result = buy(product, quantity)
        assert result.messages == [f"Invalid quantity {quantity}"]

    def test_positive_quantity_succeeds(self, product):
        result = buy(product, 100)

        assert result.ok
        assert result.value == {"status": "You bought 100 product(s)"}

    def test_decimal_quantity_succeeds(self, product):
        result = buy(product, Decimal("5"))
        assert result.value == {"status": "You bought 5 product(s)"}

    def test_buy_does_not_mutate_product(self, product):
        before = dict(product)
        buy(product, 3)
        assert product == before

    @pytest.mark.parametrize("quantity,expected", [
        (1, True), (2.5, True), (0, False), (False, False),
        (Decimal("0.5"), True), (Decimal("0"), False), (Decimal("-1"), False),
    ])
    def test_valid_quantity(self, quantity, expected):
        assert valid_quantity(quantity) is expected


class TestActionDispatcher:
    def test_builtin_actions(self, dispatcher):
        assert dispatcher.has_action("Product", "buy")
        assert dispatcher.list_actions("Product") == ["buy"]
        assert dispatcher.list_actions("Category") == []

    def test_dispatch_buy(self, dispatcher, product):
        result = dispatcher.dispatch("Product", "buy", product, 100)
        assert result.value == {"status": "You bought 100 product(s)"}

    def test_dispatch_rejection(self, dispatcher, product):
        result = dispatcher.dispatch("Product", "buy", product, 0)
        assert result.messages == ["Invalid quantity 0"]

    def test_unknown_action_is_input_error(self, dispatcher, product):
        result = dispatcher.dispatch("Product", "refund", product, 1)

        assert not result.ok
        assert result.violation.code == "UNKNOWN_ACTION"
        assert result.violation.kind == ViolationKind.INPUT

    def test_register_is_idempotent(self, dispatcher, product):
        dispatcher.register("Product", "buy", lambda record, quantity: Result.success("other"))

        result = dispatcher.dispatch("Product", "buy", product, 1)
        assert result.value == {"status": "You bought 1 product(s)"}
