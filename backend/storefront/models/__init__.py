"""
ORM models.
"""

from storefront.models.shop import Product
from storefront.models.user import CartItem, User, UserRole

__all__ = [
    "CartItem",
    "Product",
    "User",
    "UserRole",
]
