"""
Response serialization for ORM models.
"""

from typing import Any

from storefront.models.shop import Product
from storefront.models.user import User


def serialize_product(product: Product) -> dict[str, Any]:
    """Public representation of a product."""
    return {
        "id": product.id,
        "name": product.name,
        "price": float(product.price),
        "quantity": product.quantity,
        "unit": product.unit,
        "category": product.category,
        "description": product.description,
        "seller_id": product.seller_id,
        "image_url": product.image_url,
        "created_at": product.created_at.isoformat() if product.created_at else None,
        "updated_at": product.updated_at.isoformat() if product.updated_at else None,
    }


def serialize_user(user: User) -> dict[str, Any]:
    """Public representation of a user; never includes the password hash."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "userType": user.role.value,
        "cart": [
            {"product_id": item.product_id, "quantity": item.quantity}
            for item in user.cart
        ],
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }
