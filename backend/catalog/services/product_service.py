"""
Catalog API: Product Service (ProductQueryService)
===================================================

What:  One coroutine per products operation: create, list, filter, paginate,
       search, get, update, delete.
Why:   Keeps store access and error translation out of the route handlers.
How:   Criteria come from catalog.services.product_query; this module runs
       them against the session and converts SQLAlchemy failures into the
       application exception hierarchy.
Who:   Called by catalog.routes.products.

Error translation:
    IntegrityError / DataError → ValidationError (400, store rejected the write)
    other SQLAlchemyError      → DatabaseError   (500, logged with details)

Update and delete are single conditional statements (WHERE id = :id); the
affected row count decides between success and NotFoundError, so there is
no window between an existence check and the write.
"""

import logging
import uuid
from typing import List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.exceptions import DatabaseError, NotFoundError, ValidationError
from catalog.models.product import Product
from catalog.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from catalog.services.product_query import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_RATING_CEILING,
    build_category_criteria,
    build_equality_criteria,
    build_filter_criteria,
    build_title_search_criteria,
    default_order,
    page_offset,
    parse_sort_order,
)

logger = logging.getLogger(__name__)


class ProductService:
    """
    Business logic for product operations.

    Stateless: every method receives the request's AsyncSession, so one
    instance is shared by all requests.
    """

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _fetch(self, db: AsyncSession, query, operation: str) -> List[ProductResponse]:
        try:
            result = await db.execute(query)
            products = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve products. Please try again.",
                context={"operation": operation, "error_type": type(e).__name__},
            )
        return [ProductResponse.model_validate(p) for p in products]

    @staticmethod
    def _rejected_write(e: SQLAlchemyError, operation: str) -> ValidationError:
        detail = str(getattr(e, "orig", None) or e)
        logger.warning("Store rejected %s: %s", operation, detail)
        return ValidationError(
            message=f"Product could not be saved: {detail}",
            context={"operation": operation},
        )

    # ── Create ────────────────────────────────────────────────────────────

    async def create_product(self, db: AsyncSession, payload: ProductCreate) -> uuid.UUID:
        """
        Persist a new product.

        The id is assigned here rather than left to the flush so it is known
        even if the session is a test double.

        Raises:
            ValidationError: store rejected the row (constraint or data error)
            DatabaseError: any other store failure
        """
        product = Product(id=uuid.uuid4(), **payload.model_dump())
        try:
            db.add(product)
            await db.flush()
        except (IntegrityError, DataError) as e:
            raise self._rejected_write(e, "create")
        except SQLAlchemyError as e:
            logger.error("Database error creating product: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not add the product. Please try again.",
                context={"error_type": type(e).__name__},
            )
        logger.info("Product created: %s (%s)", product.id, product.title)
        return product.id

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_products(
        self,
        db: AsyncSession,
        params: Mapping[str, Sequence[str]],
    ) -> List[ProductResponse]:
        """Every query-string pair is an equality filter; no pairs returns everything."""
        criteria = build_equality_criteria(params)
        query = select(Product).where(*criteria).order_by(*default_order())
        return await self._fetch(db, query, "list")

    async def filter_products(
        self,
        db: AsyncSession,
        category: Optional[str] = None,
        brand: Optional[str] = None,
        strike_price: Optional[str] = None,
        rating: float = DEFAULT_RATING_CEILING,
        order: Optional[str] = None,
    ) -> List[ProductResponse]:
        """
        Category/brand/price-band filter with a rating ceiling and optional
        strike_price sort.

        Input errors (bad price label, bad order token) are raised before the
        store is touched.
        """
        criteria = build_filter_criteria(
            category=category,
            brand=brand,
            strike_price=strike_price,
            rating=rating,
        )
        ordering = parse_sort_order(order)
        query = select(Product).where(*criteria).order_by(*ordering)
        return await self._fetch(db, query, "filter")

    async def paginate_products(
        self,
        db: AsyncSession,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_SIZE,
        category: Optional[str] = None,
    ) -> Tuple[List[ProductResponse], int]:
        """
        One page of products in store-default order.

        Returns:
            (items, total_count) where total_count counts every product
            matching the category filter, ignoring paging
        """
        criteria = build_category_criteria(category)
        query = (
            select(Product)
            .where(*criteria)
            .order_by(*default_order())
            .limit(limit)
            .offset(page_offset(page, limit))
        )
        items = await self._fetch(db, query, "paginate")

        try:
            count_result = await db.execute(
                select(func.count(Product.id)).where(*criteria)
            )
            total_count = count_result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error counting products: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve products. Please try again.",
                context={"operation": "count", "error_type": type(e).__name__},
            )
        return items, total_count

    async def search_products(self, db: AsyncSession, q: Optional[str]) -> List[ProductResponse]:
        if q is None:
            logger.warning("Title search without 'q'; returning every product")
        criteria = build_title_search_criteria(q)
        query = select(Product).where(*criteria).order_by(*default_order())
        return await self._fetch(db, query, "search")

    async def get_product(self, db: AsyncSession, product_id: uuid.UUID) -> Optional[ProductResponse]:
        """Single product by id, or None when no record has that id."""
        try:
            result = await db.execute(select(Product).where(Product.id == product_id))
            product = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching product %s: %s", product_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the product. Please try again.",
                context={"product_id": str(product_id)},
            )
        if product is None:
            return None
        return ProductResponse.model_validate(product)

    # ── Mutations ─────────────────────────────────────────────────────────

    async def update_product(
        self,
        db: AsyncSession,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> None:
        """
        Merge the fields present in `payload` into the stored product.

        Raises:
            NotFoundError: no product has this id
            ValidationError: store rejected the new values
            DatabaseError: any other store failure
        """
        fields = payload.model_dump(exclude_unset=True)
        try:
            if fields:
                result = await db.execute(
                    update(Product)
                    .where(Product.id == product_id)
                    .values(**fields)
                    .execution_options(synchronize_session=False)
                )
                matched = result.rowcount
            else:
                # Nothing to write; still report a missing product
                result = await db.execute(select(Product.id).where(Product.id == product_id))
                matched = 0 if result.scalar_one_or_none() is None else 1
        except (IntegrityError, DataError) as e:
            raise self._rejected_write(e, "update")
        except SQLAlchemyError as e:
            logger.error("Database error updating product %s: %s", product_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the product. Please try again.",
                context={"product_id": str(product_id)},
            )

        if not matched:
            raise NotFoundError(resource="product", resource_id=str(product_id))
        logger.info("Product updated: %s (fields=%s)", product_id, sorted(fields))

    async def delete_product(self, db: AsyncSession, product_id: uuid.UUID) -> None:
        """
        Remove the product with this id.

        Raises:
            NotFoundError: no product has this id (including an already-deleted one)
            DatabaseError: store failure
        """
        try:
            result = await db.execute(
                delete(Product)
                .where(Product.id == product_id)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            logger.error("Database error deleting product %s: %s", product_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the product. Please try again.",
                context={"product_id": str(product_id)},
            )

        if not result.rowcount:
            raise NotFoundError(resource="product", resource_id=str(product_id))
        logger.info("Product deleted: %s", product_id)


# ── Singleton Instance ────────────────────────────────────────────────────
product_service = ProductService()
