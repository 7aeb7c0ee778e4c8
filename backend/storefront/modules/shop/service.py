"""
Catalog Service - Product management scoped to the owning seller.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import BlobStoreError, Forbidden, NotFound, ValidationError
from storefront.models.shop import DEFAULT_CATEGORY, DEFAULT_UNIT, Product
from storefront.modules.storage import BlobStore, ImageUpload

PRODUCT_NOT_FOUND = "Product not found or does not belong to the seller."

# Fields a seller may change after creation
PATCHABLE_FIELDS = frozenset({"name", "price", "quantity", "unit", "category", "description"})
NULLABLE_FIELDS = frozenset({"description"})

CENT = Decimal("0.01")


def parse_price(value: Any) -> Decimal:
    """Parse a positive price rounded to cents."""
    if value is None or isinstance(value, bool) or value == "":
        raise ValidationError("price is required")
    try:
        price = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError("price must be a number")
    if not price.is_finite():
        raise ValidationError("price must be a number")

    price = price.quantize(CENT, rounding=ROUND_HALF_UP)
    if price <= 0:
        raise ValidationError("price must be greater than 0")
    return price


def parse_quantity(value: Any) -> int:
    """Parse a non-negative whole quantity."""
    if value is None or isinstance(value, bool) or value == "":
        raise ValidationError("quantity is required")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError("quantity must be a whole number")
        value = int(value)
    try:
        quantity = int(str(value).strip())
    except ValueError:
        raise ValidationError("quantity must be a whole number")
    if quantity < 0:
        raise ValidationError("quantity must not be negative")
    return quantity


def _parse_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


class CatalogService:
    """
    Service for listing, creating, updating and deleting products.

    Writes are restricted to the seller that created the product. Images are
    kept in a blob store, uploaded before the record is written and removed
    when the product is deleted.

    Usage:
        catalog = CatalogService(db_session, blob_store)
        product = await catalog.create(seller_id, name="Apple", price=10, quantity=5)
    """

    def __init__(self, db: AsyncSession, blob_store: BlobStore) -> None:
        """Initialize catalog service with database session and image store."""
        self.db = db
        self.blob_store = blob_store

    # ==================== Queries ====================

    async def list_all(self) -> list[Product]:
        """Get all products in creation order."""
        query = select(Product).order_by(Product.id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_by_seller(self, seller_id: int) -> list[Product]:
        """Get products listed by one seller."""
        query = select(Product).where(Product.seller_id == seller_id).order_by(Product.id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_product(self, product_id: int) -> Product | None:
        """Get product by ID."""
        return await self.db.get(Product, product_id)

    async def get_owned_product(self, seller_id: int, product_id: int) -> Product:
        """
        Get a product the seller owns.

        Raises:
            NotFound: No product with that ID
            Forbidden: Product belongs to another seller
        """
        product = await self.get_product(product_id)
        if not product:
            raise NotFound(PRODUCT_NOT_FOUND)
        if product.seller_id != seller_id:
            logger.info(f"Seller {seller_id} denied access to product {product_id}")
            raise Forbidden(PRODUCT_NOT_FOUND)
        return product

    # ==================== Writes ====================

    async def create(
        self,
        seller_id: int,
        name: Any,
        price: Any,
        quantity: Any,
        unit: str | None = None,
        category: str | None = None,
        description: str | None = None,
        image: ImageUpload | None = None,
    ) -> Product:
        """
        Create a product owned by the calling seller.

        The image, when given, is uploaded first. If the upload fails nothing
        is written; if the insert fails the uploaded image is removed again.

        Args:
            seller_id: Calling user, becomes the owner
            name: Product name
            price: Unit price, greater than 0
            quantity: Stock on hand, 0 or more
            unit: Unit of measure (default "g")
            category: Category name (default "general")
            description: Free text
            image: Image file to store

        Returns:
            Created product

        Raises:
            ValidationError: Missing or malformed field
            BlobStoreError: Image upload failed
        """
        product = Product(
            name=_parse_text("name", name),
            price=parse_price(price),
            quantity=parse_quantity(quantity),
            unit=(unit or "").strip() or DEFAULT_UNIT,
            category=(category or "").strip() or DEFAULT_CATEGORY,
            description=(description or "").strip() or None,
            seller_id=seller_id,
        )

        if image is not None:
            blob = await self.blob_store.upload(image.data, image.filename, image.content_type)
            product.image_url = blob.url
            product.image_public_id = blob.public_id

        self.db.add(product)
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            if product.image_public_id:
                await self._discard_image(product.image_public_id)
            raise

        logger.info(f"Seller {seller_id} created product {product.id}")
        return product

    async def update(
        self,
        seller_id: int,
        product_id: int,
        patch: dict[str, Any],
    ) -> Product:
        """
        Apply a partial update to a product the seller owns.

        Only keys present in ``patch`` change; everything else keeps its value.

        Raises:
            NotFound: No product with that ID
            Forbidden: Product belongs to another seller
            ValidationError: Unknown field or invalid value
        """
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        changes: dict[str, Any] = {}
        for field, value in patch.items():
            if value is None and field not in NULLABLE_FIELDS:
                raise ValidationError(f"{field} cannot be empty")
            if field == "price":
                changes[field] = parse_price(value)
            elif field == "quantity":
                changes[field] = parse_quantity(value)
            elif field == "description":
                if value is not None and not isinstance(value, str):
                    raise ValidationError("description must be text")
                changes[field] = (value or "").strip() or None
            else:
                changes[field] = _parse_text(field, value)

        product = await self.get_owned_product(seller_id, product_id)

        for field, value in changes.items():
            setattr(product, field, value)

        await self.db.commit()
        logger.info(f"Seller {seller_id} updated product {product_id}: {sorted(changes)}")
        return product

    async def delete(self, seller_id: int, product_id: int) -> Product:
        """
        Delete a product the seller owns, along with its image.

        A failure to delete the image is logged and does not stop the
        product from being deleted.

        Returns:
            The deleted product as it was before deletion

        Raises:
            NotFound: No product with that ID
            Forbidden: Product belongs to another seller
        """
        product = await self.get_owned_product(seller_id, product_id)

        if product.image_public_id:
            await self._discard_image(product.image_public_id)

        await self.db.delete(product)
        await self.db.commit()

        logger.info(f"Seller {seller_id} deleted product {product_id}")
        return product

    async def _discard_image(self, public_id: str) -> None:
        """Delete an image, logging instead of raising on failure."""
        try:
            await self.blob_store.delete(public_id)
        except BlobStoreError as e:
            logger.warning(f"Failed to delete image {public_id}: {e}")
