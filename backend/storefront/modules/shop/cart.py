"""
Cart Service - Shopping cart stored on the user record.
"""

from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import Conflict, NotFound, ValidationError
from storefront.models.shop import Product
from storefront.models.user import CartItem, User


class CartService:
    """
    Shopping cart service.

    Each user has one cart, an ordered list of product/quantity entries with
    at most one entry per product. Entries reference products weakly: a
    product deleted by its seller may still be referenced by carts.

    Usage:
        cart = CartService(db_session)
        user = await cart.add_or_update(user_id, product_id, quantity=2)
        lines = await cart.get_items(user_id)
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize cart service with database session."""
        self.db = db

    async def _get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFound("User not found")
        return user

    async def add_or_update(
        self,
        user_id: int,
        product_id: int,
        quantity: Any = 1,
        remove: bool = False,
    ) -> User:
        """
        Add a product to the cart, top up its quantity, or remove it.

        Args:
            user_id: Cart owner
            product_id: Product to add or remove
            quantity: Amount to add to the existing quantity (ignored on remove)
            remove: Remove the product's entry instead of adding

        Returns:
            Updated user with cart

        Raises:
            NotFound: Unknown user, or unknown product when adding
            ValidationError: Quantity is not a positive whole number
            Conflict: Entry vanished while recovering from a concurrent add
        """
        user = await self._get_user(user_id)
        item = user.find_cart_item(product_id)

        if remove:
            if item is not None:
                user.cart.remove(item)
                await self.db.commit()
                logger.info(f"User {user_id} removed product {product_id} from cart")
            return user

        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("quantity must be a positive whole number")

        if item is not None:
            item.quantity += quantity
            await self.db.commit()
        else:
            if await self.db.get(Product, product_id) is None:
                raise NotFound("Product not found")
            user.cart.append(CartItem(product_id=product_id, quantity=quantity))
            try:
                await self.db.commit()
            except IntegrityError:
                # Another request created the entry first; top it up instead
                await self.db.rollback()
                logger.info(f"Cart entry for product {product_id} already exists (user {user_id})")
                user = await self._reload_user(user_id)
                item = user.find_cart_item(product_id)
                if item is None:
                    raise Conflict("Cart was modified concurrently, please retry")
                item.quantity += quantity
                await self.db.commit()

        logger.info(f"User {user_id} added {quantity} of product {product_id} to cart")
        return user

    async def _reload_user(self, user_id: int) -> User:
        query = (
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        user = result.scalar_one_or_none()
        if not user:
            raise NotFound("User not found")
        return user

    async def get_items(self, user_id: int) -> list[dict[str, Any]]:
        """
        Get the cart joined with current product data.

        Entries whose product no longer exists are left out.

        Returns:
            Cart lines in cart order
        """
        user = await self._get_user(user_id)
        if not user.cart:
            return []

        product_ids = [item.product_id for item in user.cart]
        query = select(Product).where(Product.id.in_(product_ids))
        result = await self.db.execute(query)
        products = {p.id: p for p in result.scalars().all()}

        lines = []
        for item in user.cart:
            product = products.get(item.product_id)
            if product is None:
                logger.debug(
                    f"Skipping cart entry for deleted product {item.product_id} (user {user_id})"
                )
                continue

            lines.append(
                {
                    "productId": product.id,
                    "name": product.name,
                    "quantity": item.quantity,
                    "price": float(product.price),
                    "unit": product.unit,
                    "imageUrl": product.image_url,
                }
            )

        return lines
