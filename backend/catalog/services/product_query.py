"""
Catalog API: Product Query Construction
========================================

What:  Translates loosely-typed query-string parameters into SQLAlchemy
       criteria, sort clauses, and paging offsets for the products table.
Why:   This is the only non-trivial logic of the service; keeping it free of
       sessions and HTTP makes every rule testable on its own.
How:   Each builder returns plain SQLAlchemy column expressions. The service
       layer feeds them into select(Product).where(*criteria).

Parameter formats:
    strike_price  "₹ 100 to ₹ 500"  split on single spaces; tokens 1 and 4
                                    are the exclusive lower/upper bounds
    order         asc | ascending | 1 | desc | descending | -1
    rating        filter keeps products with rating strictly below it
                  (defaults to 5 even when the caller sends nothing)
"""

import math
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import ColumnElement, UnaryExpression, asc, desc

from catalog.exceptions import ValidationError
from catalog.models.product import PRICE_MAX, PRICE_MIN, Product

DEFAULT_RATING_CEILING = 5.0
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 3

LIKE_ESCAPE = "\\"

# Plain decimal numbers only: no "nan", "inf" or digit separators
NUMBER_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
INTEGER_PATTERN = re.compile(r"[+-]?\d+")


def parse_number(raw: str) -> float:
    """Strict float parsing; raises ValueError for anything but a finite decimal."""
    if not NUMBER_PATTERN.fullmatch(raw):
        raise ValueError(f"not a number: {raw!r}")
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError(f"out of range: {raw!r}")
    return value


def parse_price(raw: str) -> int:
    if not INTEGER_PATTERN.fullmatch(raw):
        raise ValueError(f"not an integer: {raw!r}")
    value = int(raw)
    if not PRICE_MIN <= value <= PRICE_MAX:
        raise ValueError(f"out of range: {raw!r}")
    return value


# Query-string keys accepted by GET /products/ and how their values are coerced
FILTERABLE_FIELDS: Dict[str, Tuple[Any, Callable[[str], Any]]] = {
    "title": (Product.title, str),
    "category": (Product.category, str),
    "image": (Product.image, str),
    "price": (Product.price, parse_price),
    "brand": (Product.brand, str),
    "strike_price": (Product.strike_price, parse_number),
    "rating": (Product.rating, parse_number),
}

SORT_DIRECTIONS: Dict[str, Callable[[Any], UnaryExpression]] = {
    "asc": asc,
    "ascending": asc,
    "1": asc,
    "desc": desc,
    "descending": desc,
    "-1": desc,
}


def default_order() -> List[UnaryExpression]:
    """Store-default order: insertion time, then id as a stable tie-breaker."""
    return [asc(Product.created_at), asc(Product.id)]


# ── List-all ──────────────────────────────────────────────────────────────

def _coerce(field: str, caster: Callable[[str], Any], raw: str) -> Any:
    try:
        return caster(raw)
    except ValueError:
        raise ValidationError(
            message=f"Invalid value '{raw}' for '{field}'",
            field=field,
        )


def build_equality_criteria(params: Mapping[str, Sequence[str]]) -> List[ColumnElement]:
    """
    Turns every query-string pair into an equality filter on the same field.

    A key given once becomes `column == value`; a repeated key becomes
    `column IN (values...)`. An empty mapping yields no criteria, which
    matches the whole collection.

    Raises:
        ValidationError: unknown field or a value that cannot be coerced
    """
    criteria: List[ColumnElement] = []
    for field, raw_values in params.items():
        if field not in FILTERABLE_FIELDS:
            raise ValidationError(
                message=f"Cannot filter on unknown field '{field}'",
                field=field,
                context={"allowed_fields": sorted(FILTERABLE_FIELDS)},
            )
        column, caster = FILTERABLE_FIELDS[field]
        values = [_coerce(field, caster, raw) for raw in raw_values]
        if len(values) == 1:
            criteria.append(column == values[0])
        elif values:
            criteria.append(column.in_(values))
    return criteria


# ── Filter ────────────────────────────────────────────────────────────────

def parse_price_range(value: str) -> Tuple[float, float]:
    """
    Extracts (lower, upper) from a space-delimited price label.

    Only token positions matter: "₹ 100 to ₹ 500" and "x 100 x x 500" both
    give (100.0, 500.0). Splitting is on single spaces, so doubled spaces
    shift the positions.
    """
    tokens = value.split(" ")
    if len(tokens) < 5:
        raise ValidationError(
            message=(
                f"strike_price '{value}' must have at least 5 space-separated tokens, "
                "e.g. '₹ 100 to ₹ 500'"
            ),
            field="strike_price",
        )
    try:
        return parse_number(tokens[1]), parse_number(tokens[4])
    except ValueError:
        raise ValidationError(
            message=f"strike_price bounds in '{value}' must be numbers",
            field="strike_price",
        )


def parse_sort_order(order: Optional[str]) -> List[UnaryExpression]:
    """Sort clause on strike_price for the `order` token; store-default if absent."""
    if order is None:
        return default_order()
    direction = SORT_DIRECTIONS.get(order.strip().lower())
    if direction is None:
        raise ValidationError(
            message=f"Invalid order '{order}'. Must be one of: {sorted(SORT_DIRECTIONS)}",
            field="order",
        )
    return [direction(Product.strike_price), *default_order()]


def build_filter_criteria(
    category: Optional[str] = None,
    brand: Optional[str] = None,
    strike_price: Optional[str] = None,
    rating: float = DEFAULT_RATING_CEILING,
) -> List[ColumnElement]:
    """
    Criteria for GET /products/filter.

    The rating ceiling is always applied, so a request without parameters
    only returns products rated below 5. Products without a rating never
    match.
    """
    if not math.isfinite(rating):
        raise ValidationError(message=f"rating must be a finite number, got {rating}", field="rating")
    criteria: List[ColumnElement] = [Product.rating < rating]
    if category is not None:
        criteria.append(Product.category == category)
    if brand:
        criteria.append(Product.brand == brand)
    if strike_price is not None:
        lower, upper = parse_price_range(strike_price)
        criteria.append(Product.strike_price > lower)
        criteria.append(Product.strike_price < upper)
    return criteria


# ── Pagination ────────────────────────────────────────────────────────────

def build_category_criteria(category: Optional[str]) -> List[ColumnElement]:
    if category is None:
        return []
    return [Product.category == category]


def page_offset(page: int, limit: int) -> int:
    """Rows to skip for a 1-indexed page."""
    return (page - 1) * limit


# ── Search ────────────────────────────────────────────────────────────────

def escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def build_title_search_criteria(q: Optional[str]) -> List[ColumnElement]:
    """
    Case-insensitive substring match on title.

    `q` is matched literally. A missing `q` produces no criteria and so
    matches every product.
    """
    if q is None:
        return []
    return [Product.title.ilike(f"%{escape_like(q)}%", escape=LIKE_ESCAPE)]
