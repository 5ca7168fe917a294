"""
Catalog API: Product Route Handlers
====================================

What:  The /products endpoints: add, list, filter, update, delete, paginate,
       search, and get-by-id.
How:   Extracts request parameters, delegates to ProductService, returns JSON.
       Errors raised by the service are turned into responses by the global
       exception handlers in main.py.

Endpoint map:
    POST   /products/add            create
    GET    /products/               list, query string = equality filter (also /products)
    GET    /products/filter         category/brand/price band/rating + sort
    PATCH  /products/{id}           partial update
    DELETE /products/{id}           delete
    GET    /products/pagination     page/limit/category, X-Total-Count header
    GET    /products/search         title substring search
    GET    /products/search/{id}    single product or null
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config import settings
from catalog.database import get_db_session
from catalog.schemas.product import (
    ErrorResponse,
    MessageResponse,
    ProductCreate,
    ProductCreatedResponse,
    ProductResponse,
    ProductUpdate,
)
from catalog.services.product_query import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_RATING_CEILING,
)
from catalog.services.product_service import product_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])

BAD_REQUEST = {400: {"description": "Bad Request", "model": ErrorResponse}}
NOT_FOUND = {404: {"description": "Product not found", "model": ErrorResponse}}


@router.post(
    "/add",
    response_model=ProductCreatedResponse,
    responses=BAD_REQUEST,
    summary="Add a new product",
)
async def add_product(
    payload: ProductCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ProductCreatedResponse:
    product_id = await product_service.create_product(db=db, payload=payload)
    return ProductCreatedResponse(msg="Product added successfully", id=product_id)


@router.get(
    "/",
    response_model=List[ProductResponse],
    responses=BAD_REQUEST,
    summary="List products, filtered by any product field",
    description=(
        "Every query-string pair is an equality filter on the product field of "
        "the same name (e.g. ?category=shirts&brand=acme). Repeating a key matches "
        "any of its values. Without parameters the whole catalog is returned."
    ),
)
@router.get("", response_model=List[ProductResponse], include_in_schema=False)
async def list_products(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> List[ProductResponse]:
    params = {
        key: request.query_params.getlist(key)
        for key in request.query_params.keys()
    }
    return await product_service.list_products(db=db, params=params)


@router.get(
    "/filter",
    response_model=List[ProductResponse],
    responses=BAD_REQUEST,
    summary="Filter products by category, brand, price band and rating",
)
async def filter_products(
    category: Optional[str] = Query(default=None),
    brand: Optional[str] = Query(default=None),
    strike_price: Optional[str] = Query(
        default=None,
        description="Price band label; tokens 2 and 5 are the bounds, e.g. '₹ 100 to ₹ 500'",
    ),
    rating: float = Query(
        default=DEFAULT_RATING_CEILING,
        description="Only products rated strictly below this value are returned",
    ),
    order: Optional[str] = Query(
        default=None,
        description="Sort by strike_price: asc, ascending, 1, desc, descending, -1",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[ProductResponse]:
    return await product_service.filter_products(
        db=db,
        category=category,
        brand=brand,
        strike_price=strike_price,
        rating=rating,
        order=order,
    )


@router.patch(
    "/{product_id}",
    response_model=MessageResponse,
    responses={**BAD_REQUEST, **NOT_FOUND},
    summary="Update a product by id",
)
async def update_product(
    product_id: UUID,
    payload: ProductUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await product_service.update_product(db=db, product_id=product_id, payload=payload)
    return MessageResponse(msg="Product updated successfully")


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    responses={**BAD_REQUEST, **NOT_FOUND},
    summary="Remove a product by id",
)
async def delete_product(
    product_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await product_service.delete_product(db=db, product_id=product_id)
    return MessageResponse(msg="Product deleted successfully")


@router.get(
    "/pagination",
    response_model=List[ProductResponse],
    responses=BAD_REQUEST,
    summary="List products one page at a time",
    description=(
        "Returns up to `limit` products skipping (page - 1) * limit, in insertion "
        "order. The X-Total-Count header carries the number of matching products."
    ),
)
async def paginate_products(
    response: Response,
    page: int = Query(default=DEFAULT_PAGE, ge=1, description="1-indexed page number"),
    limit: int = Query(
        default=DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.max_page_size,
        description="Items per page",
    ),
    category: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> List[ProductResponse]:
    items, total_count = await product_service.paginate_products(
        db=db,
        page=page,
        limit=limit,
        category=category,
    )
    response.headers["X-Total-Count"] = str(total_count)
    return items


@router.get(
    "/search",
    response_model=List[ProductResponse],
    responses=BAD_REQUEST,
    summary="Search products by title",
    description="Case-insensitive substring match of `q` against the product title.",
)
async def search_products(
    q: Optional[str] = Query(default=None, description="Text to look for in titles"),
    db: AsyncSession = Depends(get_db_session),
) -> List[ProductResponse]:
    return await product_service.search_products(db=db, q=q)


@router.get(
    "/search/{product_id}",
    response_model=Optional[ProductResponse],
    responses=BAD_REQUEST,
    summary="Get a product by id",
    description="Returns the product, or null when no product has this id.",
)
async def get_product(
    product_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> Optional[ProductResponse]:
    return await product_service.get_product(db=db, product_id=product_id)
