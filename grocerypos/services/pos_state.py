"""
Register state and its pure transition function.

``PosState`` is immutable; every action produces a new state through
``pos_reducer``. Side effects (backend calls, notifications) never happen
here: they happen in ``PosStore`` before an action is dispatched.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from grocerypos.schemas.pos import CartItem, Product, Transaction


class PosState(BaseModel):
    model_config = ConfigDict(frozen=True)

    products: List[Product] = []
    cart: List[CartItem] = []
    transactions: List[Transaction] = []  # newest first
    is_checkout_open: bool = False
    current_transaction_id: Optional[str] = None


class PosAction(BaseModel):
    """Base class of the closed set of register actions."""
    model_config = ConfigDict(frozen=True)


class SetProducts(PosAction):
    products: List[Product]


class SetTransactions(PosAction):
    transactions: List[Transaction]


class AddToCart(PosAction):
    product: Product


class RemoveFromCart(PosAction):
    product_id: str


class UpdateQuantity(PosAction):
    product_id: str
    quantity: int


class ClearCart(PosAction):
    pass


class ToggleCheckout(PosAction):
    is_open: bool


class CompleteTransaction(PosAction):
    transaction: Transaction


class SetCurrentTransactionId(PosAction):
    transaction_id: Optional[str] = None


def _add_to_cart(cart: List[CartItem], product: Product) -> List[CartItem]:
    if any(item.id == product.id for item in cart):
        return [
            item.model_copy(update={"quantity": item.quantity + 1}) if item.id == product.id else item
            for item in cart
        ]
    return cart + [CartItem(**product.model_dump(exclude={"quantity"}), quantity=1)]


def pos_reducer(state: PosState, action: PosAction) -> PosState:
    """Apply one action to ``state`` and return the new state."""
    if isinstance(action, SetProducts):
        return state.model_copy(update={"products": list(action.products)})

    if isinstance(action, SetTransactions):
        return state.model_copy(update={"transactions": list(action.transactions)})

    if isinstance(action, AddToCart):
        return state.model_copy(update={"cart": _add_to_cart(state.cart, action.product)})

    if isinstance(action, RemoveFromCart):
        return state.model_copy(
            update={"cart": [item for item in state.cart if item.id != action.product_id]}
        )

    if isinstance(action, UpdateQuantity):
        # Callers clamp to >= 1 before dispatching
        return state.model_copy(
            update={
                "cart": [
                    item.model_copy(update={"quantity": action.quantity})
                    if item.id == action.product_id else item
                    for item in state.cart
                ]
            }
        )

    if isinstance(action, ClearCart):
        return state.model_copy(update={"cart": []})

    if isinstance(action, ToggleCheckout):
        return state.model_copy(update={"is_checkout_open": action.is_open})

    if isinstance(action, CompleteTransaction):
        return state.model_copy(
            update={"transactions": [action.transaction] + state.transactions, "cart": []}
        )

    if isinstance(action, SetCurrentTransactionId):
        return state.model_copy(update={"current_transaction_id": action.transaction_id})

    raise TypeError(f"Unknown POS action: {type(action).__name__}")


def calculate_total(cart: List[CartItem]) -> float:
    """Sum of price x quantity over the cart."""
    return sum(item.price * item.quantity for item in cart)
