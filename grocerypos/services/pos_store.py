"""
Cart/checkout store for the register.
"""
import logging
from typing import List, Optional

from grocerypos.backend.client import BackendClient
from grocerypos.backend.errors import BackendError
from grocerypos.core.notifications import Notifier
from grocerypos.schemas.pos import Product, Transaction
from grocerypos.services.catalog_service import CatalogService
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

logger = logging.getLogger(__name__)


class PosStore:
    """Owns ``PosState``; the only place it is mutated."""

    def __init__(self, backend: BackendClient, notifier: Notifier, catalog: Optional[CatalogService] = None):
        self.backend = backend
        self.notifier = notifier
        self.catalog = catalog or CatalogService(backend)
        self._state = PosState()

    @property
    def state(self) -> PosState:
        return self._state

    def dispatch(self, action: PosAction) -> PosState:
        self._state = pos_reducer(self._state, action)
        logger.debug(f"Dispatched {type(action).__name__}")
        return self._state

    def reset(self) -> None:
        """Discard all in-memory state, e.g. when another user signs in."""
        self._state = PosState()

    # Cart operations

    def add_to_cart(self, product: Product) -> None:
        self.dispatch(AddToCart(product=product))

    def remove_from_cart(self, product_id: str) -> None:
        self.dispatch(RemoveFromCart(product_id=product_id))

    def update_quantity(self, product_id: str, quantity: int) -> None:
        self.dispatch(UpdateQuantity(product_id=product_id, quantity=quantity))

    def clear_cart(self) -> None:
        self.dispatch(ClearCart())

    def toggle_checkout(self, is_open: bool) -> None:
        self.dispatch(ToggleCheckout(is_open=is_open))

    def set_current_transaction_id(self, transaction_id: Optional[str]) -> None:
        self.dispatch(SetCurrentTransactionId(transaction_id=transaction_id))

    def calculate_total(self) -> float:
        return calculate_total(self._state.cart)

    def find_product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self._state.products if p.id == product_id), None)

    def find_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return next((t for t in self._state.transactions if t.id == transaction_id), None)

    # Data loading

    async def load(self) -> None:
        await self.fetch_products()
        await self.fetch_transactions()

    async def fetch_products(self) -> List[Product]:
        try:
            products = await self.catalog.fetch_products()
        except BackendError as e:
            logger.error(f"Error fetching products: {e}")
            self.notifier.error("Failed to load products")
            return self._state.products

        self.dispatch(SetProducts(products=products))
        return products

    async def fetch_transactions(self) -> List[Transaction]:
        try:
            transactions = await self.catalog.fetch_transactions()
        except BackendError as e:
            logger.error(f"Error fetching transactions: {e}")
            self.notifier.error("Failed to load transactions. Please try refreshing the page.")
            return self._state.transactions

        self.dispatch(SetTransactions(transactions=transactions))
        return transactions

    # Checkout

    async def complete_transaction(self, transaction: Transaction) -> Optional[Transaction]:
        """
        Persist a sale, then record it in memory.

        Steps: require an identity, resolve the cashier's name, insert the
        header, insert one line per cart entry with its price at sale,
        decrement stock per line on the server. ``CompleteTransaction`` is only
        dispatched after all of them succeed. A failure midway leaves whatever
        was already written; nothing is rolled back and the cart is kept.

        Returns the stored transaction, or None on failure.
        """
        try:
            user = await self.backend.auth.get_user()
            if user is None:
                raise BackendError("No authenticated user found")

            profile = await self.backend.select_profile(user.id)
            if profile is None:
                raise BackendError("Cashier profile not found")
            cashier_name = profile["full_name"]

            header = await self.backend.insert_transaction(
                {
                    "total": transaction.total,
                    "payment_method": transaction.payment_method,
                    "cash_received": transaction.cash_received,
                    "change_amount": transaction.change,
                    "status": transaction.status,
                    "cashier_id": user.id,
                    "cashier_name": cashier_name,
                    "created_at": transaction.timestamp,
                }
            )

            await self.backend.insert_transaction_items(
                [
                    {
                        "transaction_id": header["id"],
                        "product_id": item.id,
                        "quantity": item.quantity,
                        "price_at_time": item.price,
                    }
                    for item in transaction.items
                ]
            )

            for item in transaction.items:
                await self.backend.decrement_stock(item.id, item.quantity)
        except BackendError as e:
            logger.error(f"Error completing transaction: {e}")
            self.notifier.error("Failed to complete transaction")
            return None

        completed = transaction.model_copy(update={"id": header["id"], "cashier_name": cashier_name})
        self.dispatch(CompleteTransaction(transaction=completed))
        self.dispatch(SetCurrentTransactionId(transaction_id=completed.id))
        self.notifier.success("Transaction completed successfully")
        return completed
