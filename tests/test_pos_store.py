"""
Tests for the register store: loading, cart operations and checkout.
"""
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio

from grocerypos.backend.errors import DatabaseError
from grocerypos.services.checkout import build_cash_transaction


@pytest_asyncio.fixture
async def signed_in(backend, create_account):
    user = await create_account(email="ana@example.com", password="secret123", full_name="Ana Cruz")
    await backend.auth.sign_in_with_password("ana@example.com", "secret123")
    return user


@pytest.mark.asyncio
async def test_load_fetches_products_and_transactions(pos_store, create_product):
    await create_product(name="Piattos")
    await create_product(name="Coke", category="Beverages")

    await pos_store.load()

    assert [p.name for p in pos_store.state.products] == ["Coke", "Piattos"]
    assert pos_store.state.transactions == []


@pytest.mark.asyncio
async def test_failed_load_keeps_previous_state_and_notifies(pos_store, notifier, create_product):
    await create_product()
    await pos_store.fetch_products()

    with patch.object(pos_store.backend, "select_products", AsyncMock(side_effect=DatabaseError("down"))):
        products = await pos_store.fetch_products()

    assert len(products) == 1
    assert len(pos_store.state.products) == 1
    [notification] = notifier.drain()
    assert notification.description == "Failed to load products"
    assert notification.variant == "destructive"


@pytest.mark.asyncio
async def test_complete_transaction(pos_store, backend, notifier, signed_in, create_product):
    chips = await create_product(name="Piattos", price=18.0, stock=10)
    soda = await create_product(name="Coke", price=75.0, category="Beverages", stock=5)
    await pos_store.fetch_products()
    for product_id in (chips["id"], soda["id"], chips["id"]):
        pos_store.add_to_cart(pos_store.find_product(product_id))

    draft = build_cash_transaction(pos_store.state.cart, 200.0, cashier_name="Someone", cash_limit=10000.0)
    completed = await pos_store.complete_transaction(draft)

    assert completed is not None
    assert completed.cashier_name == "Ana Cruz"
    assert pos_store.state.cart == []
    assert pos_store.state.transactions[0].id == completed.id
    assert pos_store.state.current_transaction_id == completed.id
    assert (await backend.select_product(chips["id"]))["stock"] == 8
    assert (await backend.select_product(soda["id"]))["stock"] == 4
    assert notifier.drain()[-1].description == "Transaction completed successfully"

    [stored] = await pos_store.fetch_transactions()
    assert stored.id == completed.id
    assert [(i.name, i.quantity) for i in stored.items] == [("Piattos", 2), ("Coke", 1)]
    assert stored.change == pytest.approx(89.0)


@pytest.mark.asyncio
async def test_stock_never_goes_negative(pos_store, backend, signed_in, create_product):
    candle = await create_product(name="Candle", price=10.0, category="Others", stock=1)
    await pos_store.fetch_products()
    for _ in range(3):
        pos_store.add_to_cart(pos_store.find_product(candle["id"]))

    draft = build_cash_transaction(pos_store.state.cart, 30.0, cash_limit=10000.0)
    assert await pos_store.complete_transaction(draft) is not None

    assert (await backend.select_product(candle["id"]))["stock"] == 0


@pytest.mark.asyncio
async def test_failure_keeps_cart_and_notifies(pos_store, backend, notifier, signed_in, create_product):
    chips = await create_product(stock=10)
    await pos_store.fetch_products()
    pos_store.add_to_cart(pos_store.find_product(chips["id"]))
    draft = build_cash_transaction(pos_store.state.cart, 50.0, cash_limit=10000.0)

    with patch.object(backend, "decrement_stock", AsyncMock(side_effect=DatabaseError("Failed to decrement stock"))):
        result = await pos_store.complete_transaction(draft)

    assert result is None
    assert len(pos_store.state.cart) == 1
    assert pos_store.state.transactions == []
    assert pos_store.state.current_transaction_id is None
    assert notifier.drain()[-1].description == "Failed to complete transaction"


@pytest.mark.asyncio
async def test_requires_signed_in_user(pos_store, notifier, create_product):
    chips = await create_product()
    await pos_store.fetch_products()
    pos_store.add_to_cart(pos_store.find_product(chips["id"]))
    draft = build_cash_transaction(pos_store.state.cart, 50.0, cash_limit=10000.0)

    assert await pos_store.complete_transaction(draft) is None
    assert len(pos_store.state.cart) == 1
    assert notifier.drain()[-1].description == "Failed to complete transaction"
