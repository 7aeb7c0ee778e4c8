"""
Shop models for the product catalog.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.core.database import Base

DEFAULT_UNIT = "g"
DEFAULT_CATEGORY = "general"


class Product(Base):
    """Product listed by a seller."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)

    # Pricing and inventory
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    unit: Mapped[str] = mapped_column(String(20), default=DEFAULT_UNIT)
    category: Mapped[str] = mapped_column(String(100), default=DEFAULT_CATEGORY, index=True)

    # Owner, fixed at creation
    seller_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)

    # Media
    image_url: Mapped[str | None] = mapped_column(String(500))
    image_public_id: Mapped[str | None] = mapped_column(String(255))  # blob deletion handle

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<Product {self.id}: {self.name}>"
