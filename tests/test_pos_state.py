"""
Tests for the register state transitions.
"""
from datetime import datetime, timezone

import pytest

from grocerypos.schemas.pos import CartItem, Product, Transaction
from grocerypos.services.pos_state import (
    AddToCart,
    ClearCart,
    CompleteTransaction,
    PosAction,
    PosState,
    RemoveFromCart,
    SetCurrentTransactionId,
    SetProducts,
    SetTransactions,
    ToggleCheckout,
    UpdateQuantity,
    calculate_total,
    pos_reducer,
)


@pytest.fixture
def chips():
    return Product(id="p1", name="Piattos", price=18.0, category="Snacks", stock=10)


@pytest.fixture
def soda():
    return Product(id="p2", name="Coke", price=75.0, category="Beverages", stock=5)


def make_transaction(tx_id, items, total):
    return Transaction(
        id=tx_id,
        items=items,
        total=total,
        cash_received=total,
        change=0.0,
        timestamp=datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
    )


class TestCart:
    """Cart actions."""

    def test_add_new_product_appends_with_quantity_one(self, chips, soda):
        state = pos_reducer(PosState(), AddToCart(product=chips))
        state = pos_reducer(state, AddToCart(product=soda))

        assert [item.id for item in state.cart] == ["p1", "p2"]
        assert all(item.quantity == 1 for item in state.cart)

    def test_adding_same_product_increments_in_place(self, chips, soda):
        state = PosState()
        for product in (chips, soda, chips):
            state = pos_reducer(state, AddToCart(product=product))

        assert [(item.id, item.quantity) for item in state.cart] == [("p1", 2), ("p2", 1)]

    def test_adding_beyond_stock_is_allowed(self):
        last_one = Product(id="p9", name="Candle", price=10.0, category="Others", stock=1)
        state = PosState()
        for _ in range(3):
            state = pos_reducer(state, AddToCart(product=last_one))

        assert state.cart[0].quantity == 3

    def test_remove_from_cart(self, chips, soda):
        state = PosState(cart=[CartItem(**chips.model_dump()), CartItem(**soda.model_dump())])
        state = pos_reducer(state, RemoveFromCart(product_id="p1"))

        assert [item.id for item in state.cart] == ["p2"]

    def test_remove_missing_product_leaves_cart(self, chips):
        state = PosState(cart=[CartItem(**chips.model_dump())])
        assert pos_reducer(state, RemoveFromCart(product_id="nope")).cart == state.cart

    def test_update_quantity_replaces_quantity(self, chips, soda):
        state = PosState(cart=[CartItem(**chips.model_dump()), CartItem(**soda.model_dump())])
        state = pos_reducer(state, UpdateQuantity(product_id="p2", quantity=4))

        assert [(item.id, item.quantity) for item in state.cart] == [("p1", 1), ("p2", 4)]

    def test_clear_cart(self, chips):
        state = PosState(cart=[CartItem(**chips.model_dump())])
        assert pos_reducer(state, ClearCart()).cart == []

    def test_calculate_total(self, chips, soda):
        cart = [CartItem(**chips.model_dump(), quantity=2), CartItem(**soda.model_dump())]
        assert calculate_total(cart) == pytest.approx(111.0)
        assert calculate_total([]) == 0


class TestTransactions:
    """Checkout and history actions."""

    def test_complete_transaction_prepends_and_clears_cart(self, chips):
        older = make_transaction("t1", [], 0.0)
        state = PosState(cart=[CartItem(**chips.model_dump())], transactions=[older])
        newer = make_transaction("t2", [CartItem(**chips.model_dump())], 18.0)

        state = pos_reducer(state, CompleteTransaction(transaction=newer))

        assert [t.id for t in state.transactions] == ["t2", "t1"]
        assert state.cart == []

    def test_set_transactions_replaces_history(self):
        state = PosState(transactions=[make_transaction("old", [], 0.0)])
        state = pos_reducer(state, SetTransactions(transactions=[make_transaction("new", [], 0.0)]))
        assert [t.id for t in state.transactions] == ["new"]

    def test_checkout_flags(self):
        state = pos_reducer(PosState(), ToggleCheckout(is_open=True))
        state = pos_reducer(state, SetCurrentTransactionId(transaction_id="t1"))
        assert state.is_checkout_open is True
        assert state.current_transaction_id == "t1"

        state = pos_reducer(state, SetCurrentTransactionId(transaction_id=None))
        assert state.current_transaction_id is None


def test_set_products_does_not_touch_cart(chips, soda):
    state = PosState(cart=[CartItem(**chips.model_dump())])
    state = pos_reducer(state, SetProducts(products=[soda]))
    assert [p.id for p in state.products] == ["p2"]
    assert [item.id for item in state.cart] == ["p1"]


def test_reducer_returns_new_state(chips):
    state = PosState()
    new_state = pos_reducer(state, AddToCart(product=chips))
    assert state.cart == []
    assert new_state is not state


def test_unknown_action_is_rejected():
    class Refund(PosAction):
        pass

    with pytest.raises(TypeError):
        pos_reducer(PosState(), Refund())
