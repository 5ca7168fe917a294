"""
Catalog API: Pydantic Request/Response Schemas
===============================================

What:  Pydantic models defining the API contract for the products endpoints.
Why:   Request bodies are checked against an explicit shape before any store
       call; responses are serialized consistently and documented in OpenAPI.

Design Decision:
    Unknown body fields are rejected (extra="forbid") so that a typo such as
    "catagory" fails with 400 instead of being silently dropped.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from catalog.models.product import PRICE_MAX


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ProductCreate(BaseModel):
    """Body of POST /products/add."""
    title: str = Field(min_length=1, max_length=255, description="Product name")
    category: str = Field(min_length=1, max_length=100, description="Category of product")
    image: str = Field(min_length=1, description="Link of product image")
    price: int = Field(ge=0, le=PRICE_MAX, description="Price of product")
    brand: Optional[str] = Field(default=None, max_length=100)
    strike_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    rating: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)

    model_config = {"extra": "forbid"}


class ProductUpdate(BaseModel):
    """
    Body of PATCH /products/{id}.

    Every field is optional; only fields present in the request body are
    written (model_dump(exclude_unset=True)). Columns that are NOT NULL in
    the store cannot be cleared with an explicit null.
    """
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    image: Optional[str] = Field(default=None, min_length=1)
    price: Optional[int] = Field(default=None, ge=0, le=PRICE_MAX)
    brand: Optional[str] = Field(default=None, max_length=100)
    strike_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    rating: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "ProductUpdate":
        for name in ("title", "category", "image", "price"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"'{name}' cannot be null")
        return self


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ProductResponse(BaseModel):
    """A stored product as returned by every read endpoint."""
    id: uuid.UUID = Field(description="Store-assigned product identifier")
    title: str
    category: str
    image: str
    price: int
    brand: Optional[str] = None
    strike_price: Optional[float] = None
    rating: Optional[float] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    """Acknowledgment returned by update and delete."""
    msg: str = Field(description="Human-readable result message")


class ProductCreatedResponse(MessageResponse):
    """Acknowledgment returned by POST /products/add."""
    id: uuid.UUID = Field(description="Identifier of the new product")


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error envelope for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "Product with ID '...' was not found",
            "details": null,
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
