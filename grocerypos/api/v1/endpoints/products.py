"""
Product API endpoints for browsing and maintaining the catalog.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from grocerypos.api.deps import get_catalog, get_notifier, get_pos_store, require_session
from grocerypos.backend.errors import BackendError
from grocerypos.core.exceptions import ValidationError
from grocerypos.core.notifications import Notifier
from grocerypos.services.catalog_service import (
    ALL_CATEGORIES,
    CATEGORIES,
    CatalogService,
    ImageUpload,
    ProductForm,
    catalog_categories,
    filter_products,
)
from grocerypos.services.pos_store import PosStore

router = APIRouter(dependencies=[Depends(require_session)])


@router.get("")
async def list_products(
    search: str = "",
    category: str = ALL_CATEGORIES,
    pos_store: PosStore = Depends(get_pos_store),
):
    """
    Products currently loaded on the register.

    Filters by a case-insensitive search on name or category and by category.
    """
    products = filter_products(pos_store.state.products, search, category)
    cart_ids = {item.id for item in pos_store.state.cart}
    return {
        "products": [{**p.model_dump(), "in_cart": p.id in cart_ids} for p in products],
        "count": len(products),
    }


@router.get("/categories")
async def list_categories(pos_store: PosStore = Depends(get_pos_store)):
    return {
        "filters": catalog_categories(pos_store.state.products),
        "choices": CATEGORIES,
    }


async def _image_from_upload(image: Optional[UploadFile]) -> Optional[ImageUpload]:
    if image is None or not image.filename:
        return None
    return ImageUpload(
        filename=image.filename,
        content_type=image.content_type or "",
        data=await image.read(),
    )


async def _save(
    catalog: CatalogService,
    pos_store: PosStore,
    notifier: Notifier,
    form: ProductForm,
    image: Optional[UploadFile],
    product_id: Optional[str] = None,
):
    try:
        product = await catalog.save_product(form, await _image_from_upload(image), product_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BackendError as e:
        notifier.error(e.message)
        raise HTTPException(status_code=502, detail=e.message)

    notifier.success(f"Product {'updated' if product_id else 'added'} successfully")
    await pos_store.fetch_products()
    return product


@router.post("", status_code=201)
async def create_product(
    name: str = Form(...),
    price: str = Form(...),
    category: str = Form(...),
    stock: str = Form(...),
    image: Optional[UploadFile] = File(None),
    catalog: CatalogService = Depends(get_catalog),
    pos_store: PosStore = Depends(get_pos_store),
    notifier: Notifier = Depends(get_notifier),
):
    """Add a product. Price and stock arrive as form text and are validated before saving."""
    form = ProductForm(name=name, price=price, category=category, stock=stock)
    return await _save(catalog, pos_store, notifier, form, image)


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    name: str = Form(...),
    price: str = Form(...),
    category: str = Form(...),
    stock: str = Form(...),
    image: Optional[UploadFile] = File(None),
    catalog: CatalogService = Depends(get_catalog),
    pos_store: PosStore = Depends(get_pos_store),
    notifier: Notifier = Depends(get_notifier),
):
    form = ProductForm(name=name, price=price, category=category, stock=stock)
    return await _save(catalog, pos_store, notifier, form, image, product_id)


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    catalog: CatalogService = Depends(get_catalog),
    pos_store: PosStore = Depends(get_pos_store),
    notifier: Notifier = Depends(get_notifier),
):
    """Soft-delete a product; past sales keep referencing it."""
    try:
        await catalog.delete_product(product_id)
    except BackendError as e:
        notifier.error(e.message)
        raise HTTPException(status_code=502, detail=e.message)

    notifier.success("Product deleted successfully")
    await pos_store.fetch_products()
    return {"id": product_id, "deleted": True}
