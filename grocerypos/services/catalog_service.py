"""
Catalog & transaction data access.

Maps backend rows to domain types for the register: products, transaction
history and product maintenance. Nothing here is cached; every call goes to
the backend.
"""
import logging
import re
import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from grocerypos.backend.client import BackendClient
from grocerypos.core.config import settings
from grocerypos.core.exceptions import ValidationError
from grocerypos.models.catalog import ProductCategory
from grocerypos.schemas.pos import CartItem, Product, Transaction

logger = logging.getLogger(__name__)

CATEGORIES = [category.value for category in ProductCategory]
OTHERS = ProductCategory.OTHERS.value
ALL_CATEGORIES = "All"

_PRICE_RE = re.compile(r"^\d+(\.\d+)?$|^\.\d+$")
_STOCK_RE = re.compile(r"^\d+$")


class ProductForm(BaseModel):
    """Raw product form input; price and stock arrive as text."""
    name: str
    price: str
    category: str
    stock: str


class ImageUpload(BaseModel):
    filename: str
    content_type: str
    data: bytes


def product_from_row(row: Dict[str, Any]) -> Product:
    return Product(
        id=row["id"],
        name=row["name"],
        price=row["price"],
        category=row["category"],
        stock=row.get("stock") or 0,
        image=row.get("image"),
    )


def validate_product_form(form: ProductForm) -> Dict[str, Any]:
    """Parse and validate form input into column values."""
    name = form.name.strip()
    if not name:
        raise ValidationError("Product name is required")

    price_text = form.price.strip()
    if not _PRICE_RE.match(price_text):
        raise ValidationError("Price must be a valid number")

    stock_text = form.stock.strip()
    if not _STOCK_RE.match(stock_text):
        raise ValidationError("Stock must be a whole number")

    if form.category not in CATEGORIES:
        raise ValidationError(f"Category must be one of: {', '.join(CATEGORIES)}")

    return {
        "name": name,
        "price": float(price_text),
        "category": form.category,
        "stock": int(stock_text),
    }


def validate_image(image: ImageUpload) -> None:
    if not image.content_type.startswith("image/"):
        raise ValidationError("Product image must be an image file")
    if not image.data:
        raise ValidationError("Product image is empty")


def catalog_categories(products: List[Product]) -> List[str]:
    """Filter choices: All, the sorted distinct categories, then Others last."""
    distinct = sorted({p.category for p in products if p.category != OTHERS}, key=str.lower)
    return [ALL_CATEGORIES] + distinct + [OTHERS]


def filter_products(products: List[Product], search: str = "", category: str = ALL_CATEGORIES) -> List[Product]:
    """Case-insensitive search on name or category, then the category filter."""
    term = (search or "").lower()
    result = []
    for product in products:
        matches_search = term in product.name.lower() or term in product.category.lower()
        matches_category = category in (None, "", ALL_CATEGORIES) or product.category == category
        if matches_search and matches_category:
            result.append(product)
    return result


class CatalogService:
    """Request/response mapping between the register and the backend tables."""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def fetch_products(self) -> List[Product]:
        """All products that are not soft-deleted."""
        rows = await self.backend.select_products()
        return [product_from_row(row) for row in rows]

    async def fetch_transactions(self) -> List[Transaction]:
        """
        Transaction history, newest first.

        Line items carry the product's *current* name, category and image;
        only the price is the one stored at the time of sale.
        """
        rows = await self.backend.select_transactions()
        profiles = await self.backend.select_profiles(row.get("cashier_id") for row in rows)
        cashier_names = {p["id"]: p["full_name"] for p in profiles}

        transactions = []
        for row in rows:
            items = []
            for line in row["transaction_items"]:
                product = line.get("product") or {}
                items.append(
                    CartItem(
                        id=product.get("id", ""),
                        name=product.get("name", "Unknown product"),
                        price=line["price_at_time"],
                        category=product.get("category", OTHERS),
                        image=product.get("image"),
                        stock=0,
                        quantity=line["quantity"],
                    )
                )
            transactions.append(
                Transaction(
                    id=row["id"],
                    items=items,
                    total=row["total"],
                    payment_method=row["payment_method"],
                    cash_received=row.get("cash_received"),
                    change=row.get("change_amount"),
                    timestamp=row["created_at"],
                    status=row["status"],
                    cashier_name=(
                        cashier_names.get(row.get("cashier_id")) or row.get("cashier_name") or "Unknown"
                    ),
                )
            )
        return transactions

    async def save_product(
        self,
        form: ProductForm,
        image: Optional[ImageUpload] = None,
        product_id: Optional[str] = None,
    ) -> Product:
        """Create or update a product; a new image is uploaded before the row is written."""
        values = validate_product_form(form)
        if image is not None:
            validate_image(image)

        if product_id:
            existing = await self.backend.select_product(product_id)
            values["image"] = existing.get("image") if existing else None
            values["id"] = product_id

        if image is not None:
            extension = image.filename.rsplit(".", 1)[-1] if "." in image.filename else "bin"
            file_name = f"{uuid.uuid4()}.{extension}"
            bucket = settings.product_image_bucket
            await self.backend.storage.upload(bucket, file_name, image.data)
            values["image"] = self.backend.storage.get_public_url(bucket, file_name)

        row = await self.backend.upsert_product(values)
        logger.info(f"Product {'updated' if product_id else 'added'}: {row['id']}")
        return product_from_row(row)

    async def delete_product(self, product_id: str) -> None:
        """Soft delete: the row stays so historical sale lines still resolve."""
        await self.backend.update_product(product_id, {"is_deleted": True})
        logger.info(f"Product soft-deleted: {product_id}")
