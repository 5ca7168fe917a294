"""
Catalog API: Product SQLAlchemy Model
======================================

What:  ORM model representing the `products` table.
Why:   Maps Python objects to rows so query construction can work with typed
       column expressions instead of raw SQL.
Who:   Used by ProductService and product_query for CRUD and filtering, and
       by Alembic for schema management.

Table Design:
    - UUID primary key: opaque, assigned once on insert, never changed
    - title/category/image/price: required catalog fields
    - brand/strike_price/rating: optional fields used by GET /products/filter
    - created_at: UTC insert time; with id it defines store-default order

Generic SQLAlchemy types (Uuid, DateTime, Float) keep the model portable
between PostgreSQL in deployment and SQLite in tests.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base

# Range of the 32-bit INTEGER price column
PRICE_MIN = -2_147_483_648
PRICE_MAX = 2_147_483_647


class Product(Base):
    """
    A product in the catalog.

    Query Patterns:
        - Filter by category/brand: equality on indexed columns
        - Price band: strike_price > :low AND strike_price < :high
        - Title search: title ILIKE '%q%'
        - Paging: ORDER BY created_at, id LIMIT :limit OFFSET :offset
    """

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    image: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)

    brand: Mapped[str | None] = mapped_column(String(100), nullable=True)
    strike_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_products_category", "category"),
        Index("idx_products_brand", "brand"),
        Index("idx_products_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Product(id={self.id}, title='{self.title}', "
            f"category='{self.category}')>"
        )
