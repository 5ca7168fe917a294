"""Create products table

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates the `products` table backing every /products endpoint.
How:   Generic column types so the same revision runs on PostgreSQL and SQLite.

Rollback: downgrade() drops the table (all product data is lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("image", sa.Text(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("brand", sa.String(100), nullable=True),
        sa.Column("strike_price", sa.Float(), nullable=True),
        sa.Column("rating", sa.Float(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Equality filters of /filter, /pagination and list-all
    op.create_index("idx_products_category", "products", ["category"])
    op.create_index("idx_products_brand", "products", ["brand"])
    # Store-default order for every list endpoint
    op.create_index("idx_products_created_at", "products", ["created_at"])


def downgrade() -> None:
    op.drop_index("idx_products_created_at", table_name="products")
    op.drop_index("idx_products_brand", table_name="products")
    op.drop_index("idx_products_category", table_name="products")
    op.drop_table("products")
