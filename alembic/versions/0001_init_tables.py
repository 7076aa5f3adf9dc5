"""init tables

Revision ID: 0001_init_tables
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_init_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.dialects.postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.dialects.postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(32), nullable=False),
        sa.Column("color", sa.String(32), nullable=False),
        sa.Column("icon", sa.String(128), nullable=False),
    )

    op.create_table(
        "folders",
        sa.Column("id", sa.dialects.postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.dialects.postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column(
            "parent_folder_id",
            sa.dialects.postgresql.UUID(as_uuid=True),
            sa.ForeignKey("folders.id"),
            nullable=True,
        ),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("trashed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_folders_user_id", "folders", ["user_id"])
    op.create_index("ix_folders_parent_folder_id", "folders", ["parent_folder_id"])
    op.create_index("ix_folders_user_id_name", "folders", ["user_id", "name"])

    op.create_table(
        "records",
        sa.Column("id", sa.dialects.postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "folder_id",
            sa.dialects.postgresql.UUID(as_uuid=True),
            sa.ForeignKey("folders.id"),
            nullable=False,
        ),
        sa.Column(
            "category_id",
            sa.dialects.postgresql.UUID(as_uuid=True),
            sa.ForeignKey("categories.id"),
            nullable=True,
        ),
        sa.Column("amount", sa.Float(), nullable=True),
        sa.Column("company_name", sa.String(64), nullable=True),
        sa.Column("coupon_code", sa.String(32), nullable=True),
        sa.Column("description", sa.String(512), nullable=True),
        sa.Column("doc_type", sa.String(32), nullable=True),
        sa.Column("name", sa.String(32), nullable=True),
        sa.Column("product_id", sa.String(32), nullable=True),
        sa.Column("purchase_date", sa.Date(), nullable=True),
        sa.Column("exp_date", sa.Date(), nullable=True),
        sa.Column(
            "last_accessed_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("is_starred", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notify_on", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("origin_folder_id", sa.dialects.postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("trashed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_records_folder_id", "records", ["folder_id"])
    op.create_index("ix_records_exp_date", "records", ["exp_date"])

    op.create_table(
        "record_files",
        sa.Column("id", sa.dialects.postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "record_id",
            sa.dialects.postgresql.UUID(as_uuid=True),
            sa.ForeignKey("records.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("file_url", sa.String(256), nullable=False),
        sa.Column("file_key", sa.String(128), nullable=True),
        sa.Column("file_date", sa.Date(), nullable=True),
        sa.Column("ocr_data", sa.Text(), nullable=True),
    )
    op.create_index("ix_record_files_record_id", "record_files", ["record_id"])


def downgrade() -> None:
    op.drop_table("record_files")
    op.drop_table("records")
    op.drop_table("folders")
    op.drop_table("categories")
    op.drop_table("users")
