"""Create students, role_tags, users and user_role_tags tables

Revision ID: 001
Revises: None
Create Date: 2024-03-01 00:00:00.000000+00:00

What:  Initial schema for the academic management backend.
How:   BIGINT identity keys, TIMESTAMP WITH TIME ZONE audit columns, unique
       constraints on every natural key (email, CPF, SIAPE, enrollment
       number, role code) and on (user_id, role_tag_id).

Rollback: downgrade() drops all four tables (destructive, all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def _audit_columns():
    return [
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=True,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    ]


def upgrade() -> None:
    """Create the four tables, their unique constraints and lookup indexes."""
    op.create_table(
        "students",
        sa.Column("id", ID, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(150), nullable=False),
        # 11 digits, up to 14 characters punctuated
        sa.Column("cpf", sa.String(14), nullable=False),
        sa.Column("phone", sa.String(15), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=False),
        sa.Column("address", sa.String(200), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(2), nullable=True),
        sa.Column("zip_code", sa.String(10), nullable=True),
        sa.Column("enrollment_number", sa.String(20), nullable=True),
        sa.Column("course", sa.String(100), nullable=True),
        *_audit_columns(),
        sa.UniqueConstraint("email", name="uq_students_email"),
        sa.UniqueConstraint("cpf", name="uq_students_cpf"),
        sa.UniqueConstraint("enrollment_number", name="uq_students_enrollment_number"),
    )
    op.create_index("idx_students_name", "students", ["name"])

    op.create_table(
        "role_tags",
        sa.Column("id", ID, primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(30), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        *_audit_columns(),
        sa.UniqueConstraint("code", name="uq_role_tags_code"),
    )

    op.create_table(
        "users",
        sa.Column("id", ID, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(150), nullable=False),
        sa.Column("cpf", sa.String(11), nullable=False),
        sa.Column("siape", sa.String(7), nullable=False),
        sa.Column("phone", sa.String(15), nullable=True),
        sa.Column("education", sa.String(50), nullable=True),
        sa.Column("department", sa.String(50), nullable=True),
        *_audit_columns(),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("cpf", name="uq_users_cpf"),
        sa.UniqueConstraint("siape", name="uq_users_siape"),
    )
    op.create_index("idx_users_name", "users", ["name"])

    op.create_table(
        "user_role_tags",
        sa.Column("id", ID, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            ID,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role_tag_id", ID, sa.ForeignKey("role_tags.id"), nullable=False),
        sa.Column(
            "granted_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("revoked_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("notes", sa.String(255), nullable=True),
        sa.UniqueConstraint("user_id", "role_tag_id", name="uq_user_role_tags_user_role"),
    )
    op.create_index("idx_user_role_tags_role_tag_id", "user_role_tags", ["role_tag_id"])


def downgrade() -> None:
    """Drop every table, children first."""
    op.drop_index("idx_user_role_tags_role_tag_id", table_name="user_role_tags")
    op.drop_table("user_role_tags")
    op.drop_index("idx_users_name", table_name="users")
    op.drop_table("users")
    op.drop_table("role_tags")
    op.drop_index("idx_students_name", table_name="students")
    op.drop_table("students")
