"""
Product API Endpoints.

Public catalog listing and seller-scoped product management.
"""

from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_blob_store, get_current_user_id
from storefront.api.serializers import serialize_product
from storefront.core.database import get_db
from storefront.modules.shop import CatalogService
from storefront.modules.storage import BlobStore, ImageUpload

router = APIRouter()


# ==================== Schemas ====================


class UpdateProductRequest(BaseModel):
    """Partial product update; omitted fields are left unchanged."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    price: Decimal | None = None
    quantity: int | None = None
    unit: str | None = None
    category: str | None = None
    description: str | None = None


# ==================== Catalog ====================


@router.get("/products")
async def get_products(
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
) -> dict[str, Any]:
    """Get all products."""
    catalog = CatalogService(db, store)
    products = await catalog.list_all()

    return {
        "message": "Products fetched successfully",
        "products": [serialize_product(p) for p in products],
    }


@router.get("/all-products/{seller_id}")
async def get_seller_products(
    seller_id: int,
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
) -> dict[str, Any]:
    """Get all products listed by a seller."""
    catalog = CatalogService(db, store)
    products = await catalog.list_by_seller(seller_id)

    return {
        "message": "Products fetched successfully",
        "products": [serialize_product(p) for p in products],
    }


# ==================== Seller management ====================


@router.post("/add-product", status_code=status.HTTP_201_CREATED)
async def add_product(
    name: str | None = Form(None),
    price: str | None = Form(None),
    quantity: str | None = Form(None),
    unit: str | None = Form(None),
    category: str | None = Form(None),
    description: str | None = Form(None),
    image: UploadFile | None = File(None),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
) -> dict[str, Any]:
    """
    Create a product owned by the caller.

    Accepts multipart form data with an optional ``image`` file.
    """
    upload = None
    if image is not None and image.filename:
        upload = ImageUpload(
            data=await image.read(),
            filename=image.filename,
            content_type=image.content_type,
        )

    catalog = CatalogService(db, store)
    product = await catalog.create(
        seller_id=user_id,
        name=name,
        price=price,
        quantity=quantity,
        unit=unit,
        category=category,
        description=description,
        image=upload,
    )

    return {
        "message": "Product added successfully!",
        "product": serialize_product(product),
    }


@router.patch("/update-product/{product_id}")
async def update_product(
    product_id: int,
    request: UpdateProductRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
) -> dict[str, Any]:
    """Update fields of a product the caller owns."""
    catalog = CatalogService(db, store)
    product = await catalog.update(
        seller_id=user_id,
        product_id=product_id,
        patch=request.model_dump(exclude_unset=True),
    )

    return {
        "message": "Product updated successfully",
        "product": serialize_product(product),
    }


@router.delete("/delete-product/{product_id}")
async def delete_product(
    product_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
) -> dict[str, Any]:
    """Delete a product the caller owns, together with its image."""
    catalog = CatalogService(db, store)
    product = await catalog.delete(seller_id=user_id, product_id=product_id)

    return {
        "message": "Product deleted successfully",
        "product": serialize_product(product),
    }
