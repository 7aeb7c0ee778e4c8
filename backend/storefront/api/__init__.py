"""
API Router.

Combines all endpoint routers; mounted under ``settings.api_prefix``.
"""

from fastapi import APIRouter

from storefront.api.endpoints import auth, cart, products

router = APIRouter()

# Include endpoint routers
router.include_router(auth.router, tags=["Accounts"])
router.include_router(products.router, tags=["Products"])
router.include_router(cart.router, tags=["Cart"])
