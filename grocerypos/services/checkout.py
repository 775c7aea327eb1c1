"""
Cash checkout rules and receipt rendering.
"""
import re
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from grocerypos.core.config import settings
from grocerypos.core.exceptions import ValidationError
from grocerypos.core.formatting import format_currency
from grocerypos.schemas.pos import CartItem, Transaction
from grocerypos.services.pos_state import calculate_total

_CASH_TEXT_RE = re.compile(r"^\d*\.?\d*$")


def parse_cash_amount(text: str) -> float:
    """Parse the cash-received field. Empty or partial input (``""``, ``"."``) counts as 0."""
    text = (text or "").strip()
    if not _CASH_TEXT_RE.match(text):
        raise ValidationError("Cash received must be a number")
    try:
        return float(text)
    except ValueError:
        return 0.0


def compute_change(cash_received: float, total: float) -> float:
    """Change to show; never negative."""
    return max(round(cash_received - total, 2), 0.0)


def validate_cash_payment(total: float, cash_received: float, cash_limit: Optional[float] = None) -> None:
    """Raise unless the tendered cash covers the total and is within the cash limit."""
    cash_limit = settings.cash_limit if cash_limit is None else cash_limit
    if cash_received > cash_limit:
        raise ValidationError(f"Cash received exceeds the limit of {format_currency(cash_limit)}")
    if cash_received < total:
        raise ValidationError("Cash received is less than the total amount")


def build_cash_transaction(
    cart: List[CartItem],
    cash_received: float,
    cashier_name: Optional[str] = None,
    cash_limit: Optional[float] = None,
) -> Transaction:
    """Draft transaction for a cash sale; the id is replaced once it is persisted."""
    if not cart:
        raise ValidationError("Cart is empty")
    total = calculate_total(cart)
    validate_cash_payment(total, cash_received, cash_limit)
    return Transaction(
        id=str(uuid.uuid4()),
        items=list(cart),
        total=total,
        payment_method="cash",
        cash_received=cash_received,
        change=compute_change(cash_received, total),
        timestamp=datetime.now(timezone.utc),
        status="completed",
        cashier_name=cashier_name or "Unknown Cashier",
    )


def render_receipt(transaction: Transaction, store_name: Optional[str] = None, width: int = 40) -> str:
    """Plain-text receipt suitable for a receipt printer."""
    store_name = store_name or settings.store_name

    def row(left: str, right: str) -> str:
        space = max(width - len(left) - len(right), 1)
        return f"{left}{' ' * space}{right}"

    timestamp = transaction.timestamp.astimezone()
    lines = [
        store_name.center(width).rstrip(),
        timestamp.strftime("%m/%d/%Y, %I:%M:%S %p").center(width).rstrip(),
        f"Cashier: {transaction.cashier_name}".center(width).rstrip(),
        f"Receipt #: {transaction.id[:8]}".center(width).rstrip(),
        "-" * width,
    ]
    for item in transaction.items:
        lines.append(row(f"{item.name} x {item.quantity}", format_currency(item.price * item.quantity)))
    lines.append("-" * width)
    lines.append(row("Total", format_currency(transaction.total)))
    lines.append(row("Cash", format_currency(transaction.cash_received or 0)))
    lines.append(row("Change", format_currency(transaction.change or 0)))
    lines.append("")
    lines.append("Thank you for shopping!".center(width).rstrip())
    lines.append("Please come again".center(width).rstrip())
    return "\n".join(lines) + "\n"
