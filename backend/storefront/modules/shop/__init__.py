"""
Shop Module - E-commerce functionality.

Features:
- Product catalog owned by sellers
- Product images in a blob store
- Shopping cart per user
"""

from storefront.modules.shop.cart import CartService
from storefront.modules.shop.service import CatalogService

__all__ = [
    "CatalogService",
    "CartService",
]
