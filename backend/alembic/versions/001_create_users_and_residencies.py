"""Create users and residencies tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema: users (with embedded booking/favorite arrays and an
       optimistic-lock version column) and residencies (owned by email).
Rollback: downgrade() drops both tables; all data is lost.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column(
            "email",
            sa.String(255),
            nullable=False,
            comment="Unique login/contact email; external key for all user endpoints",
        ),
        sa.Column("image", sa.String(1024), nullable=True),
        sa.Column("booked_visits", JSONType, nullable=False, server_default=sa.text("'[]'")),
        sa.Column("fav_residencies_id", JSONType, nullable=False, server_default=sa.text("'[]'")),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "residencies",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("address", sa.String(512), nullable=False),
        sa.Column("city", sa.String(255), nullable=False),
        sa.Column("country", sa.String(255), nullable=False),
        sa.Column("image", sa.String(1024), nullable=True),
        sa.Column("facilities", JSONType, nullable=False, server_default=sa.text("'{}'")),
        sa.Column("user_email", sa.String(255), nullable=False),
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
        sa.ForeignKeyConstraint(["user_email"], ["users.email"]),
        sa.UniqueConstraint("address", "user_email", name="uq_residencies_address_user_email"),
    )

    # Backs GET /residency/allresd (ORDER BY created_at DESC)
    op.create_index(
        "idx_residencies_created_at",
        "residencies",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_residencies_created_at", table_name="residencies")
    op.drop_table("residencies")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
