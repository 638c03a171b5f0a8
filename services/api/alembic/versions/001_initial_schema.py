"""Initial schema: users, recipes, friendships, sharing, shopping lists

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users table
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("image_url", sa.String(1000), nullable=True),
        sa.Column("created_at", sa.BigInteger, nullable=False),
        sa.Column("updated_at", sa.BigInteger, nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"])

    # Recipes table
    op.create_table(
        "recipes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("servings", sa.Integer, nullable=False),
        sa.Column("prep_time", sa.Integer, nullable=True),
        sa.Column("cook_time", sa.Integer, nullable=True),
        sa.Column("difficulty", sa.String(10), nullable=True),
        sa.Column("cuisine", sa.String(80), nullable=True),
        sa.Column("source_url", sa.String(1000), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_global", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_favorite", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("cook_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_cooked_at", sa.BigInteger, nullable=True),
        sa.Column("created_at", sa.BigInteger, nullable=False),
        sa.Column("updated_at", sa.BigInteger, nullable=False),
    )
    op.create_index("ix_recipes_user_id", "recipes", ["user_id"])
    op.create_index("ix_recipes_user_created", "recipes", ["user_id", "created_at"])
    op.create_index("ix_recipes_user_favorite", "recipes", ["user_id", "is_favorite"])
    op.create_index("ix_recipes_is_global", "recipes", ["is_global"])

    # Recipe ingredients / steps
    op.create_table(
        "recipe_ingredients",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("recipe_id", sa.String(36), sa.ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("amount", sa.Float, nullable=True),
        sa.Column("unit", sa.String(50), nullable=True),
        sa.Column("preparation", sa.String(200), nullable=True),
        sa.Column("is_optional", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("sort_order", sa.Integer, nullable=False),
        sa.UniqueConstraint("recipe_id", "sort_order", name="uq_recipe_ingredient_order"),
    )
    op.create_index("ix_recipe_ingredients_recipe_id", "recipe_ingredients", ["recipe_id"])

    op.create_table(
        "recipe_steps",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("recipe_id", sa.String(36), sa.ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("step_number", sa.Integer, nullable=False),
        sa.Column("instruction", sa.Text, nullable=False),
        sa.Column("timer_minutes", sa.Integer, nullable=True),
        sa.Column("timer_label", sa.String(100), nullable=True),
        sa.Column("tips", sa.Text, nullable=True),
        sa.UniqueConstraint("recipe_id", "step_number", name="uq_recipe_step_number"),
    )
    op.create_index("ix_recipe_steps_recipe_id", "recipe_steps", ["recipe_id"])

    # Tags
    op.create_table(
        "tags",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=True),
        sa.Column("name", sa.String(80), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="custom"),
    )
    op.create_index("ix_tags_user_name", "tags", ["user_id", "name"])

    op.create_table(
        "recipe_tags",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("recipe_id", sa.String(36), sa.ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tag_id", sa.String(36), sa.ForeignKey("tags.id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("recipe_id", "tag_id", name="uq_recipe_tag"),
    )
    op.create_index("ix_recipe_tags_tag_id", "recipe_tags", ["tag_id"])

    # Friendships (one row per unordered pair)
    op.create_table(
        "friendships",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_low", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_high", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("requested_by", sa.String(36), nullable=False),
        sa.Column("blocked_by", sa.String(36), nullable=True),
        sa.Column("created_at", sa.BigInteger, nullable=False),
        sa.Column("updated_at", sa.BigInteger, nullable=False),
        sa.UniqueConstraint("user_low", "user_high", name="uq_friendship_pair"),
    )
    op.create_index("ix_friendships_low_status", "friendships", ["user_low", "status"])
    op.create_index("ix_friendships_high_status", "friendships", ["user_high", "status"])

    # Direct shares
    op.create_table(
        "recipe_shares",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("recipe_id", sa.String(36), sa.ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("shared_with_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("permission", sa.String(20), nullable=False, server_default="view"),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("expires_at", sa.BigInteger, nullable=True),
        sa.Column("shared_at", sa.BigInteger, nullable=False),
        sa.UniqueConstraint("recipe_id", "shared_with_id", name="uq_recipe_share_user"),
    )
    op.create_index("ix_recipe_shares_owner", "recipe_shares", ["owner_id"])
    op.create_index("ix_recipe_shares_shared_with", "recipe_shares", ["shared_with_id"])

    # Share links and their access log
    op.create_table(
        "share_links",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("recipe_id", sa.String(36), sa.ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("share_code", sa.String(32), nullable=False),
        sa.Column("created_at", sa.BigInteger, nullable=False),
        sa.Column("expires_at", sa.BigInteger, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("access_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_accessed_at", sa.BigInteger, nullable=True),
    )
    op.create_index("ix_share_links_share_code", "share_links", ["share_code"], unique=True)
    op.create_index("ix_share_links_owner", "share_links", ["owner_id"])
    op.create_index("ix_share_links_recipe", "share_links", ["recipe_id"])

    op.create_table(
        "share_link_accesses",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("share_link_id", sa.String(36), sa.ForeignKey("share_links.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("accessed_at", sa.BigInteger, nullable=False),
    )
    op.create_index("ix_share_link_accesses_link", "share_link_accesses", ["share_link_id"])

    # Shopping lists
    op.create_table(
        "shopping_lists",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.BigInteger, nullable=False),
        sa.Column("updated_at", sa.BigInteger, nullable=False),
    )
    op.create_index("ix_shopping_lists_user", "shopping_lists", ["user_id"])
    op.create_index("ix_shopping_lists_user_active", "shopping_lists", ["user_id", "is_active"])

    op.create_table(
        "shopping_items",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("list_id", sa.String(36), sa.ForeignKey("shopping_lists.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("amount", sa.Float, nullable=True),
        sa.Column("unit", sa.String(50), nullable=True),
        sa.Column("aisle", sa.String(50), nullable=True),
        sa.Column("recipe_id", sa.String(36), sa.ForeignKey("recipes.id", ondelete="SET NULL"), nullable=True),
        sa.Column("is_manual", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_checked", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("checked_at", sa.BigInteger, nullable=True),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
    )
    op.create_index("ix_shopping_items_list", "shopping_items", ["list_id"])
    op.create_index("ix_shopping_items_list_checked", "shopping_items", ["list_id", "is_checked"])
    op.create_index("ix_shopping_items_list_aisle", "shopping_items", ["list_id", "aisle"])

    op.create_table(
        "shopping_list_recipes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("list_id", sa.String(36), sa.ForeignKey("shopping_lists.id", ondelete="CASCADE"), nullable=False),
        sa.Column("recipe_id", sa.String(36), sa.ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("servings", sa.Integer, nullable=False),
        sa.Column("added_at", sa.BigInteger, nullable=False),
        sa.UniqueConstraint("list_id", "recipe_id", name="uq_shopping_list_recipe"),
    )
    op.create_index("ix_shopping_list_recipes_recipe", "shopping_list_recipes", ["recipe_id"])


def downgrade() -> None:
    op.drop_table("shopping_list_recipes")
    op.drop_table("shopping_items")
    op.drop_table("shopping_lists")
    op.drop_table("share_link_accesses")
    op.drop_table("share_links")
    op.drop_table("recipe_shares")
    op.drop_table("friendships")
    op.drop_table("recipe_tags")
    op.drop_table("tags")
    op.drop_table("recipe_steps")
    op.drop_table("recipe_ingredients")
    op.drop_table("recipes")
    op.drop_table("users")
