"""
Accounts Module - Registration and login.
"""

from storefront.modules.accounts.service import AccountService

__all__ = [
    "AccountService",
]
