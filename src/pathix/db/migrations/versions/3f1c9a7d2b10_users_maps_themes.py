"""users, maps and themes

Learn: Initial schema. Map payloads and theme styling are JSON documents
(JSONB on PostgreSQL). The users check constraints mirror the model:
every account has either a password hash or a Google subject, the plan
is one of three values, and the scan counter never drops below zero.

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 09:12:44.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONDocument = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("name", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("organization", sa.String(200), nullable=True),
        sa.Column("google_id", sa.String(255), nullable=True),
        sa.Column("account_type", sa.String(20), nullable=False, server_default="Starter"),
        sa.Column("scan_left", sa.Integer(), nullable=False, server_default="50"),
        sa.Column("avatar", sa.Text(), nullable=True),
        sa.Column("avatar_type", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "password_hash IS NOT NULL OR google_id IS NOT NULL",
            name="ck_users_has_credential",
        ),
        sa.CheckConstraint(
            "account_type IN ('Starter', 'Pro', 'Enterprise')",
            name="ck_users_account_type",
        ),
        sa.CheckConstraint("scan_left >= 0", name="ck_users_scan_left_non_negative"),
    )

    op.create_table(
        "themes",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("assets", JSONDocument, nullable=False),
        sa.Column("background_image", sa.Text(), nullable=True),
        sa.Column("fonts", JSONDocument, nullable=False),
        sa.Column("road_style", JSONDocument, nullable=False),
        sa.Column("animations", JSONDocument, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "maps",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("data", JSONDocument, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_maps_user_created", "maps", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_maps_user_created", table_name="maps")
    op.drop_table("maps")
    op.drop_table("themes")
    op.drop_table("users")
