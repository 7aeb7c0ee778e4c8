"""
Storefront backend: accounts, seller-owned product catalog and shopping carts.
"""

__version__ = "1.0.0"
