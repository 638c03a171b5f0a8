"""SQLAlchemy ORM models for recipebox.

Tables:
- users: Profiles keyed by the auth provider's subject id
- recipes: Personal, public and global (curated, ownerless) recipes
- recipe_ingredients / recipe_steps: Ordered recipe content
- tags / recipe_tags: Many-to-many recipe labels
- friendships: One row per unordered user pair (pending | accepted | blocked)
- recipe_shares: Owner -> friend view grants, optionally expiring
- share_links / share_link_accesses: Public code-addressed grants and their access log
- shopping_lists / shopping_items / shopping_list_recipes: Per-user lists and provenance
- cookbooks / cookbook_recipes: Named per-user recipe collections
- meal_plans: One planned meal per user, date and meal type

All timestamps are integer milliseconds since epoch.
"""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import (
    String,
    Text,
    Integer,
    BigInteger,
    Boolean,
    Float,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import false

from .core.clock import now_ms
from .db import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Profile row for an authenticated principal."""
    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_email", "email"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
    updated_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=now_ms, onupdate=now_ms
    )

    @property
    def display_name(self) -> str:
        return self.name or "Unknown"


class Recipe(Base):
    """Recipe owned by a user, or global (platform-curated) when is_global is set."""
    __tablename__ = "recipes"
    __table_args__ = (
        Index("ix_recipes_user_id", "user_id"),
        Index("ix_recipes_user_created", "user_id", "created_at"),
        Index("ix_recipes_user_favorite", "user_id", "is_favorite"),
        Index("ix_recipes_is_global", "is_global"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    # Absent for global recipes
    user_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=True
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    servings: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    prep_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    cook_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # easy | medium | hard
    difficulty: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    cuisine: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    source_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    is_global: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    is_favorite: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())

    cook_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_cooked_at: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
    updated_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=now_ms, onupdate=now_ms
    )

    # Relationships
    owner: Mapped[Optional["User"]] = relationship("User")
    ingredients: Mapped[list["RecipeIngredient"]] = relationship(
        "RecipeIngredient", back_populates="recipe", cascade="all, delete-orphan",
        order_by="RecipeIngredient.sort_order"
    )
    steps: Mapped[list["RecipeStep"]] = relationship(
        "RecipeStep", back_populates="recipe", cascade="all, delete-orphan",
        order_by="RecipeStep.step_number"
    )
    recipe_tags: Mapped[list["RecipeTag"]] = relationship(
        "RecipeTag", back_populates="recipe", cascade="all, delete-orphan"
    )

    @property
    def total_time(self) -> Optional[int]:
        if self.prep_time is None and self.cook_time is None:
            return None
        return (self.prep_time or 0) + (self.cook_time or 0)


class RecipeIngredient(Base):
    """Ingredient line; sort_order is unique per recipe."""
    __tablename__ = "recipe_ingredients"
    __table_args__ = (
        Index("ix_recipe_ingredients_recipe_id", "recipe_id"),
        UniqueConstraint("recipe_id", "sort_order", name="uq_recipe_ingredient_order"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    recipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    unit: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    preparation: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    is_optional: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False)

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="ingredients")


class RecipeStep(Base):
    """Ordered cooking step; step_number is 1-based and unique per recipe."""
    __tablename__ = "recipe_steps"
    __table_args__ = (
        Index("ix_recipe_steps_recipe_id", "recipe_id"),
        UniqueConstraint("recipe_id", "step_number", name="uq_recipe_step_number"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    recipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )

    step_number: Mapped[int] = mapped_column(Integer, nullable=False)
    instruction: Mapped[str] = mapped_column(Text, nullable=False)
    timer_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    timer_label: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    tips: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="steps")


class Tag(Base):
    __tablename__ = "tags"
    __table_args__ = (
        Index("ix_tags_user_name", "user_id", "name"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    user_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    # meal_type | cuisine | diet | course | custom
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="custom")


class RecipeTag(Base):
    __tablename__ = "recipe_tags"
    __table_args__ = (
        Index("ix_recipe_tags_tag_id", "tag_id"),
        UniqueConstraint("recipe_id", "tag_id", name="uq_recipe_tag"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    recipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    tag_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tags.id", ondelete="CASCADE"), nullable=False
    )

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="recipe_tags")
    tag: Mapped["Tag"] = relationship("Tag")


class Friendship(Base):
    """Relationship between two users, stored once per unordered pair.

    ``user_low``/``user_high`` are the two ids in sorted order. Each user sees a
    directed view of the row (see ``status_for``): a block is visible only to
    the blocker, matching a blocker-side row with the other side removed.
    """
    __tablename__ = "friendships"
    __table_args__ = (
        UniqueConstraint("user_low", "user_high", name="uq_friendship_pair"),
        Index("ix_friendships_low_status", "user_low", "status"),
        Index("ix_friendships_high_status", "user_high", "status"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    user_low: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    user_high: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    # pending | accepted | blocked
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    requested_by: Mapped[str] = mapped_column(String(36), nullable=False)
    blocked_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
    updated_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=now_ms, onupdate=now_ms
    )

    def involves(self, user_id: str) -> bool:
        return user_id in (self.user_low, self.user_high)

    def other(self, user_id: str) -> str:
        return self.user_high if user_id == self.user_low else self.user_low

    def status_for(self, user_id: str) -> Optional[str]:
        """Status of the directed edge user_id -> other, or None if absent."""
        if not self.involves(user_id):
            return None
        if self.status == "blocked" and self.blocked_by != user_id:
            return None
        return self.status


class RecipeShare(Base):
    """Direct view grant from a recipe owner to one friend."""
    __tablename__ = "recipe_shares"
    __table_args__ = (
        UniqueConstraint("recipe_id", "shared_with_id", name="uq_recipe_share_user"),
        Index("ix_recipe_shares_owner", "owner_id"),
        Index("ix_recipe_shares_shared_with", "shared_with_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    recipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    shared_with_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    # Only "view" today
    permission: Mapped[str] = mapped_column(String(20), nullable=False, default="view")
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    expires_at: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    shared_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)

    def is_active(self, now: int) -> bool:
        return self.expires_at is None or self.expires_at > now


class ShareLink(Base):
    """Public, code-addressed, revocable view grant."""
    __tablename__ = "share_links"
    __table_args__ = (
        Index("ix_share_links_owner", "owner_id"),
        Index("ix_share_links_recipe", "recipe_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    recipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    share_code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
    expires_at: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    access_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_accessed_at: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    accesses: Mapped[list["ShareLinkAccess"]] = relationship(
        "ShareLinkAccess", back_populates="link", cascade="all, delete-orphan"
    )

    def is_expired(self, now: int) -> bool:
        return self.expires_at is not None and self.expires_at < now


class ShareLinkAccess(Base):
    """Append-only access log entry for a share link."""
    __tablename__ = "share_link_accesses"
    __table_args__ = (
        Index("ix_share_link_accesses_link", "share_link_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    share_link_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("share_links.id", ondelete="CASCADE"), nullable=False
    )
    # None for anonymous access
    user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    accessed_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)

    link: Mapped["ShareLink"] = relationship("ShareLink", back_populates="accesses")


class ShoppingList(Base):
    """Per-user shopping list; at most one is active per user."""
    __tablename__ = "shopping_lists"
    __table_args__ = (
        Index("ix_shopping_lists_user", "user_id"),
        Index("ix_shopping_lists_user_active", "user_id", "is_active"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)

    items: Mapped[list["ShoppingItem"]] = relationship(
        "ShoppingItem", back_populates="list", cascade="all, delete-orphan",
        order_by="ShoppingItem.sort_order"
    )


class ShoppingItem(Base):
    """Item in a shopping list."""
    __tablename__ = "shopping_items"
    __table_args__ = (
        Index("ix_shopping_items_list", "list_id"),
        Index("ix_shopping_items_list_checked", "list_id", "is_checked"),
        Index("ix_shopping_items_list_aisle", "list_id", "aisle"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    list_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("shopping_lists.id", ondelete="CASCADE"), nullable=False
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    unit: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    aisle: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Source tracking
    recipe_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="SET NULL"), nullable=True
    )
    is_manual: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_checked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    checked_at: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    list: Mapped["ShoppingList"] = relationship("ShoppingList", back_populates="items")


class ShoppingListRecipe(Base):
    """Records that a recipe's ingredients were added to a list."""
    __tablename__ = "shopping_list_recipes"
    __table_args__ = (
        UniqueConstraint("list_id", "recipe_id", name="uq_shopping_list_recipe"),
        Index("ix_shopping_list_recipes_recipe", "recipe_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    list_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("shopping_lists.id", ondelete="CASCADE"), nullable=False
    )
    recipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    servings: Mapped[int] = mapped_column(Integer, nullable=False)
    added_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)


class Cookbook(Base):
    """Named, ordered recipe collection owned by one user."""
    __tablename__ = "cookbooks"
    __table_args__ = (
        Index("ix_cookbooks_user_order", "user_id", "sort_order"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    # Set on the Favorites cookbook
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)


class CookbookRecipe(Base):
    __tablename__ = "cookbook_recipes"
    __table_args__ = (
        UniqueConstraint("cookbook_id", "recipe_id", name="uq_cookbook_recipe"),
        Index("ix_cookbook_recipes_recipe", "recipe_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    cookbook_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("cookbooks.id", ondelete="CASCADE"), nullable=False
    )
    recipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    added_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)


class MealPlan(Base):
    """A planned meal; at most one per (user, date, meal_type) slot."""
    __tablename__ = "meal_plans"
    __table_args__ = (
        UniqueConstraint("user_id", "date", "meal_type", name="uq_meal_plan_slot"),
        Index("ix_meal_plans_user_date", "user_id", "date"),
        Index("ix_meal_plans_recipe", "recipe_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # ISO calendar date, YYYY-MM-DD
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    # breakfast | lunch | dinner | snack
    meal_type: Mapped[str] = mapped_column(String(10), nullable=False)

    recipe_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=True
    )
    # For meals that are not a stored recipe
    custom_meal_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    servings: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
