"""campaign pricing tables

Revision ID: 20261019_campaign_pricing
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_campaign_pricing"
down_revision = None
branch_labels = None
depends_on = None

RULE_TYPES = ("CATEGORY", "BRAND", "CART_AMOUNT", "USER_GROUP")
DISCOUNT_TYPES = ("PERCENTAGE", "FIXED")


def upgrade():
    op.create_table(
        "discount_rule",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("rule_type", sa.Enum(*RULE_TYPES, name="discount_rule_type"), nullable=False),
        sa.Column("target_value", sa.String(), nullable=True),
        sa.Column("discount_type", sa.Enum(*DISCOUNT_TYPES, name="discount_type"), nullable=False),
        sa.Column("discount_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("min_cart_amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_discount_rule_active_window", "discount_rule", ["is_active", "start_date", "end_date"])

    op.create_table(
        "catalog_item",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("category_id", sa.String(), nullable=True),
        sa.Column("brand_id", sa.String(), nullable=True),
        sa.Column("base_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("campaign_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("campaign_start", sa.DateTime(), nullable=True),
        sa.Column("campaign_end", sa.DateTime(), nullable=True),
        sa.Column("campaign_rule_id", sa.String(length=36), nullable=True),
    )
    op.create_index("ix_catalog_item_category_id", "catalog_item", ["category_id"])
    op.create_index("ix_catalog_item_brand_id", "catalog_item", ["brand_id"])
    op.create_index("ix_catalog_item_campaign_rule_id", "catalog_item", ["campaign_rule_id"])

    op.create_table(
        "discount_audit_log",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("rule_id", sa.String(length=36), nullable=False),
        sa.Column("item_id", sa.String(length=36), nullable=False),
        sa.Column("old_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("new_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("discount_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_discount_audit_log_rule_id", "discount_audit_log", ["rule_id"])
    op.create_index("ix_discount_audit_log_item_id", "discount_audit_log", ["item_id"])

    op.create_table(
        "engine_lock",
        sa.Column("name", sa.String(), primary_key=True),
        sa.Column("holder", sa.String(length=36), nullable=False),
        sa.Column("acquired_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
    )


def downgrade():
    op.drop_table("engine_lock")
    op.drop_index("ix_discount_audit_log_item_id", table_name="discount_audit_log")
    op.drop_index("ix_discount_audit_log_rule_id", table_name="discount_audit_log")
    op.drop_table("discount_audit_log")
    op.drop_index("ix_catalog_item_campaign_rule_id", table_name="catalog_item")
    op.drop_index("ix_catalog_item_brand_id", table_name="catalog_item")
    op.drop_index("ix_catalog_item_category_id", table_name="catalog_item")
    op.drop_table("catalog_item")
    op.drop_index("ix_discount_rule_active_window", table_name="discount_rule")
    op.drop_table("discount_rule")
