"""
Catalog models for products.
"""
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text

from grocerypos.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class ProductCategory(enum.Enum):
    """Product category enumeration."""
    SNACKS = "Snacks"
    BEVERAGES = "Beverages"
    CANDIES = "Candies"
    INSTANT_NOODLES = "Instant Noodles"
    CANNED_GOODS = "Canned Goods"
    PERSONAL_CARE = "Personal Care"
    SOAP = "Soap"
    OTHERS = "Others"


class Product(Base):
    """Model for products. Rows are soft-deleted so sale lines keep resolving."""
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    price = Column(Float, nullable=False)
    category = Column(String(50), nullable=False, default=ProductCategory.OTHERS.value)
    stock = Column(Integer, nullable=False, default=0)
    image = Column(Text, nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Product(id='{self.id}', name='{self.name}', stock={self.stock})>"
