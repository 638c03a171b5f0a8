"""Cookbooks and meal plans

Revision ID: 002_cookbooks_meal_plans
Revises: 001_initial_schema
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "002_cookbooks_meal_plans"
down_revision: Union[str, None] = "001_initial_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "cookbooks",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("color", sa.String(20), nullable=True),
        sa.Column("is_default", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.BigInteger, nullable=False),
        sa.Column("updated_at", sa.BigInteger, nullable=False),
    )
    op.create_index("ix_cookbooks_user_order", "cookbooks", ["user_id", "sort_order"])

    op.create_table(
        "cookbook_recipes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("cookbook_id", sa.String(36), sa.ForeignKey("cookbooks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("recipe_id", sa.String(36), sa.ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("added_at", sa.BigInteger, nullable=False),
        sa.UniqueConstraint("cookbook_id", "recipe_id", name="uq_cookbook_recipe"),
    )
    op.create_index("ix_cookbook_recipes_recipe", "cookbook_recipes", ["recipe_id"])

    op.create_table(
        "meal_plans",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("meal_type", sa.String(10), nullable=False),
        sa.Column("recipe_id", sa.String(36), sa.ForeignKey("recipes.id", ondelete="CASCADE"), nullable=True),
        sa.Column("custom_meal_name", sa.String(200), nullable=True),
        sa.Column("servings", sa.Integer, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("created_at", sa.BigInteger, nullable=False),
        sa.UniqueConstraint("user_id", "date", "meal_type", name="uq_meal_plan_slot"),
    )
    op.create_index("ix_meal_plans_user_date", "meal_plans", ["user_id", "date"])
    op.create_index("ix_meal_plans_recipe", "meal_plans", ["recipe_id"])


def downgrade() -> None:
    op.drop_table("meal_plans")
    op.drop_table("cookbook_recipes")
    op.drop_table("cookbooks")
