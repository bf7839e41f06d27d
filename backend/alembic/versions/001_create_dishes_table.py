"""Create dishes table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `dishes` table backing the dish API.
How:   Integer surrogate key, unique index on the human-assigned dish_id,
       timezone-aware timestamps. Portable across PostgreSQL and SQLite.

Rollback: downgrade() drops the table (all dishes are lost).
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
        "dishes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "dish_id",
            sa.String(100),
            nullable=False,
            comment="Externally assigned identifier, unique across live records",
        ),
        sa.Column(
            "dish_name",
            sa.String(255),
            nullable=False,
            comment="Display name; the list endpoint orders by this",
        ),
        sa.Column(
            "image_url",
            sa.String(2048),
            nullable=False,
            comment="Image URL (validity is not enforced beyond non-empty)",
        ),
        sa.Column(
            "is_published",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        # Filled by the application (UTC); CURRENT_TIMESTAMP covers raw inserts
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Backs dishId uniqueness when two creates race past the pre-insert lookup
    op.create_index("ix_dishes_dish_id", "dishes", ["dish_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_dishes_dish_id", table_name="dishes")
    op.drop_table("dishes")
