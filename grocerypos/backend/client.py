"""
Table and RPC calls against the backend database.

Every call returns plain row dicts (timestamps as timezone-aware datetimes)
and raises ``DatabaseError`` on failure, so callers never see SQLAlchemy
types or exceptions.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy import case, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from grocerypos.backend.auth import AuthProvider
from grocerypos.backend.errors import DatabaseError
from grocerypos.backend.realtime import RealtimeClient
from grocerypos.backend.storage import ObjectStorage
from grocerypos.core.database import SessionLocal, get_db_context
from grocerypos.models.catalog import Product, utcnow
from grocerypos.models.profiles import Profile
from grocerypos.models.transactions import Transaction, TransactionItem

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = ("name", "price", "category", "stock", "image", "is_deleted")
PROFILE_FIELDS = ("full_name", "role", "approved", "active_session_token")


def _aware(value):
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def row_to_dict(obj) -> Dict[str, Any]:
    return {column.name: _aware(getattr(obj, column.name)) for column in obj.__table__.columns}


class BackendClient:
    """Facade over the backend: auth, tables, RPC, storage and realtime."""

    def __init__(
        self,
        session_factory=SessionLocal,
        auth: Optional[AuthProvider] = None,
        storage: Optional[ObjectStorage] = None,
        realtime: Optional[RealtimeClient] = None,
    ):
        self._session_factory = session_factory
        self.auth = auth or AuthProvider(session_factory=session_factory)
        self.storage = storage
        self.realtime = realtime

    def _execute(self, operation: str, fn: Callable[[Session], Any]) -> Any:
        try:
            with get_db_context(self._session_factory) as db:
                return fn(db)
        except SQLAlchemyError as e:
            logger.error(f"{operation} failed: {e}")
            raise DatabaseError(f"Failed to {operation}") from e

    # Products

    async def select_products(self, include_deleted: bool = False) -> List[Dict[str, Any]]:
        def query(db: Session):
            q = db.query(Product)
            if not include_deleted:
                q = q.filter(Product.is_deleted.is_(False))
            return [row_to_dict(p) for p in q.order_by(Product.name).all()]

        return self._execute("load products", query)

    async def select_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        def query(db: Session):
            product = db.get(Product, product_id)
            return row_to_dict(product) if product else None

        return self._execute("load product", query)

    async def upsert_product(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a product, or update it when ``values['id']`` already exists."""
        def write(db: Session):
            product_id = values.get("id")
            product = db.get(Product, product_id) if product_id else None
            if product is None:
                product = Product(id=product_id) if product_id else Product()
                db.add(product)
            for field in PRODUCT_FIELDS:
                if field in values:
                    setattr(product, field, values[field])
            product.updated_at = utcnow()
            db.flush()
            return row_to_dict(product)

        row = self._execute("save product", write)
        logger.info(f"Product saved: {row['id']}")
        return row

    async def update_product(self, product_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        def write(db: Session):
            product = db.get(Product, product_id)
            if product is None:
                raise DatabaseError(f"Product {product_id} not found")
            for field in PRODUCT_FIELDS:
                if field in values:
                    setattr(product, field, values[field])
            db.flush()
            return row_to_dict(product)

        return self._execute("update product", write)

    async def decrement_stock(self, product_id: str, amount: int) -> None:
        """Atomic ``stock = stock - amount`` on the server, floored at zero."""
        def write(db: Session):
            result = db.execute(
                update(Product)
                .where(Product.id == product_id)
                .values(
                    stock=case((Product.stock >= amount, Product.stock - amount), else_=0),
                    updated_at=utcnow(),
                )
            )
            if result.rowcount == 0:
                raise DatabaseError(f"Product {product_id} not found")

        self._execute("decrement stock", write)

    # Profiles

    async def select_profile(self, profile_id: str) -> Optional[Dict[str, Any]]:
        def query(db: Session):
            profile = db.get(Profile, profile_id)
            return row_to_dict(profile) if profile else None

        return self._execute("load profile", query)

    async def select_profiles(self, profile_ids: Iterable[str]) -> List[Dict[str, Any]]:
        ids = list({pid for pid in profile_ids if pid})
        if not ids:
            return []

        def query(db: Session):
            return [row_to_dict(p) for p in db.query(Profile).filter(Profile.id.in_(ids)).all()]

        return self._execute("load profiles", query)

    async def select_pending_profiles(self) -> List[Dict[str, Any]]:
        def query(db: Session):
            profiles = (
                db.query(Profile)
                .filter(Profile.approved.is_(False))
                .order_by(Profile.created_at)
                .all()
            )
            return [row_to_dict(p) for p in profiles]

        return self._execute("load pending profiles", query)

    async def insert_profile(self, values: Dict[str, Any]) -> Dict[str, Any]:
        def write(db: Session):
            profile = Profile(id=values["id"], **{k: values[k] for k in PROFILE_FIELDS if k in values})
            db.add(profile)
            db.flush()
            return row_to_dict(profile)

        return self._execute("create profile", write)

    async def update_profile(self, profile_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """Update a profile and publish the change on the profile's row channel."""
        def write(db: Session):
            profile = db.get(Profile, profile_id)
            if profile is None:
                raise DatabaseError(f"Profile {profile_id} not found")
            old = row_to_dict(profile)
            for field in PROFILE_FIELDS:
                if field in values:
                    setattr(profile, field, values[field])
            profile.updated_at = utcnow()
            db.flush()
            return old, row_to_dict(profile)

        old, new = self._execute("update profile", write)
        if self.realtime is not None:
            await self.realtime.publish_row_change("profiles", profile_id, new=new, old=old)
        return new

    # Transactions

    async def insert_transaction(self, values: Dict[str, Any]) -> Dict[str, Any]:
        def write(db: Session):
            transaction = Transaction(**values)
            db.add(transaction)
            db.flush()
            return row_to_dict(transaction)

        row = self._execute("record transaction", write)
        logger.info(f"Transaction recorded: {row['id']}")
        return row

    async def insert_transaction_items(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        def write(db: Session):
            base = utcnow()
            items = []
            for index, values in enumerate(rows):
                # Distinct timestamps keep the cart's line order on read
                item = TransactionItem(created_at=base + timedelta(microseconds=index), **values)
                db.add(item)
                items.append(item)
            db.flush()
            return [row_to_dict(item) for item in items]

        return self._execute("record transaction items", write)

    async def select_transactions(self) -> List[Dict[str, Any]]:
        """Transactions newest first, each with its items and each item's current product row."""
        def query(db: Session):
            transactions = (
                db.query(Transaction)
                .options(selectinload(Transaction.items).selectinload(TransactionItem.product))
                .order_by(Transaction.created_at.desc())
                .all()
            )
            result = []
            for transaction in transactions:
                row = row_to_dict(transaction)
                row["transaction_items"] = [
                    {
                        "quantity": item.quantity,
                        "price_at_time": item.price_at_time,
                        "product": row_to_dict(item.product) if item.product else None,
                    }
                    for item in transaction.items
                ]
                result.append(row)
            return result

        return self._execute("load transactions", query)
