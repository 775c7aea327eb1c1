"""
Transaction models for recorded POS sales.
"""
import enum

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from grocerypos.core.database import Base
from grocerypos.models.catalog import new_id, utcnow


class PaymentMethod(enum.Enum):
    """Payment method enumeration."""
    CASH = "cash"


class TransactionStatus(enum.Enum):
    """Transaction status enumeration."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Transaction(Base):
    """Model for sale headers."""
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=new_id)
    total = Column(Float, nullable=False)

    # Payment information
    payment_method = Column(String(20), nullable=False, default=PaymentMethod.CASH.value)
    cash_received = Column(Float, nullable=True)
    change_amount = Column(Float, nullable=True)

    # Status
    status = Column(String(20), nullable=False, default=TransactionStatus.COMPLETED.value)

    # Cashier
    cashier_id = Column(String(36), nullable=True, index=True)
    cashier_name = Column(String(200), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    items = relationship("TransactionItem", back_populates="transaction", order_by="TransactionItem.created_at")

    def __repr__(self):
        return f"<Transaction(id='{self.id}', total={self.total}, status='{self.status}')>"


class TransactionItem(Base):
    """Model for sale lines; price is pinned at the time of sale."""
    __tablename__ = "transaction_items"

    id = Column(String(36), primary_key=True, default=new_id)
    transaction_id = Column(String(36), ForeignKey("transactions.id"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    price_at_time = Column(Float, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    transaction = relationship("Transaction", back_populates="items")
    product = relationship("Product")

    def __repr__(self):
        return f"<TransactionItem(id='{self.id}', product_id='{self.product_id}', quantity={self.quantity})>"
