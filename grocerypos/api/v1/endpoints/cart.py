"""
Cart and checkout API endpoints.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from grocerypos.api.deps import get_pos_store, require_session
from grocerypos.core.config import settings
from grocerypos.core.exceptions import ValidationError
from grocerypos.services.checkout import (
    build_cash_transaction,
    compute_change,
    parse_cash_amount,
    render_receipt,
)
from grocerypos.services.pos_store import PosStore
from grocerypos.services.session_store import SessionStore

router = APIRouter()


class AddItemRequest(BaseModel):
    """Request model for adding one unit of a product."""
    product_id: str = Field(..., description="Product ID")


class QuantityRequest(BaseModel):
    """Request model for setting a line's quantity."""
    quantity: int = Field(..., description="New quantity; values below 1 are clamped to 1")


class CashPaymentRequest(BaseModel):
    """Request model for completing a cash sale."""
    cash_received: str = Field(..., description="Cash received, as typed")


def cart_payload(pos_store: PosStore) -> Dict[str, Any]:
    state = pos_store.state
    return {
        "items": [{**item.model_dump(), "line_total": item.line_total} for item in state.cart],
        "total": pos_store.calculate_total(),
        "is_checkout_open": state.is_checkout_open,
        "current_transaction_id": state.current_transaction_id,
    }


@router.get("")
async def get_cart(
    _: SessionStore = Depends(require_session),
    pos_store: PosStore = Depends(get_pos_store),
):
    return cart_payload(pos_store)


@router.post("/items")
async def add_item(
    request: AddItemRequest,
    _: SessionStore = Depends(require_session),
    pos_store: PosStore = Depends(get_pos_store),
):
    product = pos_store.find_product(request.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    pos_store.add_to_cart(product)
    return cart_payload(pos_store)


@router.put("/items/{product_id}")
async def update_item_quantity(
    product_id: str,
    request: QuantityRequest,
    _: SessionStore = Depends(require_session),
    pos_store: PosStore = Depends(get_pos_store),
):
    pos_store.update_quantity(product_id, max(1, request.quantity))
    return cart_payload(pos_store)


@router.delete("/items/{product_id}")
async def remove_item(
    product_id: str,
    _: SessionStore = Depends(require_session),
    pos_store: PosStore = Depends(get_pos_store),
):
    pos_store.remove_from_cart(product_id)
    return cart_payload(pos_store)


@router.delete("")
async def clear_cart(
    _: SessionStore = Depends(require_session),
    pos_store: PosStore = Depends(get_pos_store),
):
    pos_store.clear_cart()
    return cart_payload(pos_store)


@router.post("/checkout/open")
async def open_checkout(
    _: SessionStore = Depends(require_session),
    pos_store: PosStore = Depends(get_pos_store),
):
    if not pos_store.state.cart:
        raise HTTPException(status_code=400, detail="Cart is empty")
    pos_store.toggle_checkout(True)
    return cart_payload(pos_store)


@router.post("/checkout/close")
async def close_checkout(
    _: SessionStore = Depends(require_session),
    pos_store: PosStore = Depends(get_pos_store),
):
    pos_store.toggle_checkout(False)
    pos_store.set_current_transaction_id(None)
    return cart_payload(pos_store)


@router.post("/checkout/preview")
async def preview_payment(
    request: CashPaymentRequest,
    _: SessionStore = Depends(require_session),
    pos_store: PosStore = Depends(get_pos_store),
):
    """Change due for the typed cash amount, and whether payment can complete."""
    try:
        cash_received = parse_cash_amount(request.cash_received)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    total = pos_store.calculate_total()
    return {
        "total": total,
        "cash_received": cash_received,
        "change": compute_change(cash_received, total),
        "cash_limit": settings.cash_limit,
        "can_complete": bool(pos_store.state.cart) and total <= cash_received <= settings.cash_limit,
    }


@router.post("/checkout/complete")
async def complete_checkout(
    request: CashPaymentRequest,
    session_store: SessionStore = Depends(require_session),
    pos_store: PosStore = Depends(get_pos_store),
):
    """
    Complete a cash sale.

    Blocked before any backend call when the cart is empty, the cash does not
    cover the total, or the cash exceeds the register's cash limit.
    """
    try:
        cash_received = parse_cash_amount(request.cash_received)
        draft = build_cash_transaction(
            pos_store.state.cart,
            cash_received,
            cashier_name=session_store.profile.full_name,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    completed = await pos_store.complete_transaction(draft)
    if completed is None:
        raise HTTPException(status_code=502, detail="Failed to complete transaction")

    return {
        "transaction": completed.model_dump(mode="json"),
        "receipt": render_receipt(completed),
        "cart": cart_payload(pos_store),
    }
