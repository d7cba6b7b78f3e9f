"""
============================================================
CRC CARD (Class / Responsibilities / Collaborators)
============================================================
Class: 001_initial (Alembic Migration)

Responsibilities:
  - Create the console schema from scratch: users, sees, ns_records.

Collaborators:
  - PostgreSQL 14+
  - infrastructure.repositories.postgres (uses this schema as its contract)

Policy:
  - Baseline migration; later changes go in additive migrations (002+).
  - Naming convention:
      pk_<table>                         - Primary keys
      uq_<table>_<col>                   - Unique constraints
      ix_<table>_<col>                   - Indexes
      fk_<table>_<col>__<ref_table>      - Foreign keys
============================================================
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # =========================================================
    # 1) USERS
    # =========================================================
    # Role is persisted as 0 (Viewer), 1 (Editor), 2 (Admin).
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column("role", sa.SmallInteger, nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint("role IN (0, 1, 2)", name="ck_users_role"),
    )

    # =========================================================
    # 2) SEES RECORDS
    # =========================================================
    op.create_table(
        "sees",
        sa.Column("id", sa.Integer, sa.Identity(always=False), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("target_domain", sa.String(255), nullable=False),
        sa.Column("redirect_url", sa.Text, nullable=False),
        sa.Column("note", sa.Text, nullable=True),
        sa.Column("preview_url", sa.Text, nullable=True),
        sa.Column(
            "template_variables",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        # Cloud resources; NULL when provisioning is disabled or failed.
        sa.Column("static_app_name", sa.String(255), nullable=True),
        sa.Column("static_app_url", sa.Text, nullable=True),
        sa.Column("dns_zone_name", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_sees"),
        sa.UniqueConstraint("target_domain", name="uq_sees_target_domain"),
    )
    op.create_index("ix_sees_created_at", "sees", ["created_at"])

    # =========================================================
    # 3) NS RECORDS
    # =========================================================
    op.create_table(
        "ns_records",
        sa.Column("id", sa.Integer, sa.Identity(always=False), nullable=False),
        sa.Column("sees_id", sa.Integer, nullable=False),
        sa.Column("name_server", sa.String(255), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_ns_records"),
        sa.ForeignKeyConstraint(
            ["sees_id"],
            ["sees.id"],
            name="fk_ns_records_sees_id__sees",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_ns_records_sees_id", "ns_records", ["sees_id"])


def downgrade() -> None:
    op.drop_index("ix_ns_records_sees_id", table_name="ns_records")
    op.drop_table("ns_records")
    op.drop_index("ix_sees_created_at", table_name="sees")
    op.drop_table("sees")
    op.drop_table("users")
