"""
Catalog API: Application Package Initializer
=============================================

What: Marks the `catalog` directory as a Python package.
Why:  Enables module imports like `from catalog.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The service follows a layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services + Query construction     │  ← criteria, sort, paging
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes read request parameters and shape responses; everything that turns
    a query string into store criteria lives in the services package and can
    be tested without HTTP.
"""

__version__ = "1.0.0"
