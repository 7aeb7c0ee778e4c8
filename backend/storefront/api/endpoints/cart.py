"""
Cart API Endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_current_user_id
from storefront.api.serializers import serialize_user
from storefront.core.database import get_db
from storefront.modules.shop import CartService

router = APIRouter()


class AddToCartRequest(BaseModel):
    """Add, top up or remove a cart entry."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: int
    quantity: int = 1
    to_delete: bool = Field(False, alias="toDelete")


@router.patch("/add-to-cart")
async def add_to_cart(
    request: AddToCartRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """
    Add a product to the caller's cart.

    Quantities accumulate when the product is already in the cart.
    With ``toDelete`` the entry is removed instead.
    """
    cart = CartService(db)
    user = await cart.add_or_update(
        user_id=user_id,
        product_id=request.product_id,
        quantity=request.quantity,
        remove=request.to_delete,
    )

    return {
        "message": "Product removed from cart" if request.to_delete else "Cart updated successfully",
        "user": serialize_user(user),
    }


@router.get("/get-cart")
async def get_cart(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Get the caller's cart with current product details."""
    cart = CartService(db)
    return await cart.get_items(user_id)
