"""
Database models for the Grocery POS application.
"""

from .catalog import Product, ProductCategory
from .profiles import AuthUser, Profile, UserRole
from .transactions import PaymentMethod, Transaction, TransactionItem, TransactionStatus

__all__ = [
    "Product", "ProductCategory",
    "AuthUser", "Profile", "UserRole",
    "Transaction", "TransactionItem", "PaymentMethod", "TransactionStatus",
]
