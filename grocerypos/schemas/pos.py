"""
Domain types shared by the stores, the data access layer and the API.
"""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Product(BaseModel):
    """Catalog product as shown on the register."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: float = Field(..., ge=0)
    category: str
    stock: int = Field(0, ge=0)
    image: Optional[str] = None


class CartItem(Product):
    """A product line in the cart."""
    quantity: int = Field(1, ge=1)

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class Transaction(BaseModel):
    """A completed (or cancelled) sale with its line snapshots."""
    model_config = ConfigDict(frozen=True)

    id: str
    items: List[CartItem]
    total: float
    payment_method: str = "cash"
    cash_received: Optional[float] = None
    change: Optional[float] = None
    timestamp: datetime
    status: str = "completed"
    cashier_name: str = "Unknown"

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, v):
        # Naive timestamps from the database are UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class Profile(BaseModel):
    """Profile of a signed-in cashier or admin."""
    id: str
    full_name: str
    role: str = "cashier"
    approved: bool = False
    active_session_token: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthUser(BaseModel):
    """Authenticated identity."""
    model_config = ConfigDict(frozen=True)

    id: str
    email: str


class AuthSession(BaseModel):
    """Session issued by the auth provider."""
    model_config = ConfigDict(frozen=True)

    access_token: str
    user: AuthUser


class AuthResult(BaseModel):
    """Outcome of a sign-in or sign-up attempt."""
    success: bool
    message: Optional[str] = None


class SalesByCategory(BaseModel):
    category: str
    amount: float


class SalesByDate(BaseModel):
    date: str
    amount: float


class CashierSales(BaseModel):
    cashier_name: str
    total_sales: float
    items_sold: int


class AnalyticsSummary(BaseModel):
    time_frame: str
    sales_by_category: List[SalesByCategory]
    sales_by_date: List[SalesByDate]
    total_sales: float
    total_transactions: int
    average_transaction_value: float
