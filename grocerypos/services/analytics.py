"""
Sales analytics derived from the register's in-memory transaction history.

Everything here is recomputed on each call. ``now`` is taken once per
computation and never mutated, so every bound in one summary refers to the
same instant.
"""
import enum
from datetime import datetime
from typing import List, Optional

import pandas as pd

from grocerypos.schemas.pos import (
    AnalyticsSummary,
    CashierSales,
    SalesByCategory,
    SalesByDate,
    Transaction,
)


class TimeFrame(enum.Enum):
    """Time frame filter for category sales."""
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


def _snapshot(now: Optional[datetime]) -> datetime:
    """Local, timezone-aware 'now'."""
    return (now or datetime.now()).astimezone()


def time_frame_start(time_frame: TimeFrame, now: Optional[datetime] = None) -> Optional[datetime]:
    """Inclusive lower bound for ``time_frame``, or None when unfiltered."""
    now = _snapshot(now)
    if time_frame == TimeFrame.TODAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if time_frame == TimeFrame.WEEK:
        return (pd.Timestamp(now) - pd.Timedelta(days=7)).to_pydatetime()
    if time_frame == TimeFrame.MONTH:
        return (pd.Timestamp(now) - pd.DateOffset(months=1)).to_pydatetime()
    return None


def filter_by_time_frame(
    transactions: List[Transaction], time_frame: TimeFrame, now: Optional[datetime] = None
) -> List[Transaction]:
    start = time_frame_start(time_frame, now)
    if start is None:
        return list(transactions)
    return [t for t in transactions if t.timestamp >= start]


def sales_by_category(
    transactions: List[Transaction], time_frame: TimeFrame = TimeFrame.ALL, now: Optional[datetime] = None
) -> List[SalesByCategory]:
    """Line-item revenue per category over the time-filtered transactions, in encounter order."""
    lines = [
        {"category": item.category, "amount": item.price * item.quantity}
        for transaction in filter_by_time_frame(transactions, time_frame, now)
        for item in transaction.items
    ]
    if not lines:
        return []
    totals = pd.DataFrame(lines).groupby("category", sort=False)["amount"].sum()
    return [SalesByCategory(category=category, amount=float(amount)) for category, amount in totals.items()]


def date_key(timestamp: datetime) -> str:
    """Local calendar date as ``M/D/YYYY``."""
    local = timestamp.astimezone()
    return f"{local.month}/{local.day}/{local.year}"


def sales_by_date(transactions: List[Transaction]) -> List[SalesByDate]:
    """Transaction totals per calendar date, in encounter order. Ignores the time frame."""
    if not transactions:
        return []
    frame = pd.DataFrame(
        {"date": [date_key(t.timestamp) for t in transactions], "amount": [t.total for t in transactions]}
    )
    totals = frame.groupby("date", sort=False)["amount"].sum()
    return [SalesByDate(date=date, amount=float(amount)) for date, amount in totals.items()]


def total_sales(transactions: List[Transaction]) -> float:
    return float(sum(t.total for t in transactions))


def total_transactions(transactions: List[Transaction]) -> int:
    return len(transactions)


def average_transaction_value(transactions: List[Transaction]) -> float:
    count = total_transactions(transactions)
    return total_sales(transactions) / count if count > 0 else 0.0


def sales_by_cashier(transactions: List[Transaction]) -> List[CashierSales]:
    """Completed sales per cashier, highest total first."""
    rows = [
        {
            "cashier_name": t.cashier_name or "Unknown",
            "total_sales": t.total,
            "items_sold": sum(item.quantity for item in t.items),
        }
        for t in transactions
        if t.status == "completed"
    ]
    if not rows:
        return []
    grouped = (
        pd.DataFrame(rows)
        .groupby("cashier_name", sort=False)
        .agg(total_sales=("total_sales", "sum"), items_sold=("items_sold", "sum"))
        .sort_values("total_sales", ascending=False, kind="stable")
    )
    return [
        CashierSales(cashier_name=name, total_sales=float(row.total_sales), items_sold=int(row.items_sold))
        for name, row in grouped.iterrows()
    ]


def build_summary(
    transactions: List[Transaction], time_frame: TimeFrame = TimeFrame.TODAY, now: Optional[datetime] = None
) -> AnalyticsSummary:
    """
    Analytics tab view.

    Only the category breakdown honours ``time_frame``; the date timeline and
    the totals cover the whole history.
    """
    now = _snapshot(now)
    return AnalyticsSummary(
        time_frame=time_frame.value,
        sales_by_category=sales_by_category(transactions, time_frame, now),
        sales_by_date=sales_by_date(transactions),
        total_sales=total_sales(transactions),
        total_transactions=total_transactions(transactions),
        average_transaction_value=average_transaction_value(transactions),
    )
