"""linkchecker baseline: content tables, field configs, link index

Revision ID: 7c1e2a9d4b10
Revises:
Create Date: 2026-10-19 09:12:44.218530

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "7c1e2a9d4b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "content_items",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("entity_type_id", sa.String(length=64), nullable=False),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("title", sa.String(length=500), nullable=True),
        sa.Column("langcode", sa.String(length=12), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_content_items_id", "content_items", ["id"])
    op.create_index("ix_content_items_entity_type_id", "content_items", ["entity_type_id"])

    op.create_table(
        "content_field_values",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("content_item_id", sa.Integer(), nullable=False),
        sa.Column("field_name", sa.String(length=128), nullable=False),
        sa.Column("langcode", sa.String(length=12), nullable=False),
        sa.Column("delta", sa.Integer(), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["content_item_id"], ["content_items.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_content_field_values_id", "content_field_values", ["id"])
    op.create_index(
        "ix_content_field_values_item_field",
        "content_field_values",
        ["content_item_id", "field_name"],
    )

    # Which fields are scanned for links, and by which extractor
    op.create_table(
        "field_configs",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("entity_type_id", sa.String(length=64), nullable=False),
        sa.Column("field_name", sa.String(length=128), nullable=False),
        sa.Column("scan", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("extractor", sa.String(length=64), nullable=False),
        sa.UniqueConstraint("entity_type_id", "field_name", name="uq_field_config_field"),
    )
    op.create_index("ix_field_configs_id", "field_configs", ["id"])

    # linkchecker_link: one row per URL occurrence; the parent reference is
    # polymorphic (type id + id) so there is no FK to content_items.
    op.create_table(
        "linkchecker_link",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("parent_entity_type_id", sa.String(length=64), nullable=False),
        sa.Column("parent_entity_id", sa.String(length=128), nullable=False),
        sa.Column("entity_field", sa.String(length=128), nullable=False),
        sa.Column("entity_langcode", sa.String(length=12), nullable=False),
        sa.Column("code", sa.Integer(), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("fail_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_check", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_linkchecker_link_id", "linkchecker_link", ["id"])
    op.create_index(
        "ix_linkchecker_link_parent",
        "linkchecker_link",
        ["parent_entity_type_id", "parent_entity_id"],
    )
    op.create_index("ix_linkchecker_link_last_check", "linkchecker_link", ["last_check"])

    op.create_table(
        "linkchecker_index",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("entity_type_id", sa.String(length=64), nullable=False),
        sa.Column("entity_id", sa.String(length=128), nullable=False),
        sa.Column("last_extracted_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("entity_type_id", "entity_id", name="uq_linkchecker_index_entity"),
    )
    op.create_index("ix_linkchecker_index_id", "linkchecker_index", ["id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_linkchecker_index_id", table_name="linkchecker_index")
    op.drop_table("linkchecker_index")

    op.drop_index("ix_linkchecker_link_last_check", table_name="linkchecker_link")
    op.drop_index("ix_linkchecker_link_parent", table_name="linkchecker_link")
    op.drop_index("ix_linkchecker_link_id", table_name="linkchecker_link")
    op.drop_table("linkchecker_link")

    op.drop_index("ix_field_configs_id", table_name="field_configs")
    op.drop_table("field_configs")

    op.drop_index("ix_content_field_values_item_field", table_name="content_field_values")
    op.drop_index("ix_content_field_values_id", table_name="content_field_values")
    op.drop_table("content_field_values")

    op.drop_index("ix_content_items_entity_type_id", table_name="content_items")
    op.drop_index("ix_content_items_id", table_name="content_items")
    op.drop_table("content_items")
