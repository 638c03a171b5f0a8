"""Pydantic schemas for the recipebox API.

Request/response models for:
- Users and profile stats
- Recipes (with nested ingredients and steps)
- Friends
- Direct shares and share links
- Shopping lists
- Cookbooks and meal plans

Timestamps are integer milliseconds since epoch.
"""

from typing import Optional, Literal

from pydantic import BaseModel, Field


class SuccessOut(BaseModel):
    success: bool = True


# --- Users ---

class UserOut(BaseModel):
    id: str
    name: Optional[str]
    email: Optional[str]
    image_url: Optional[str]
    created_at: int
    updated_at: int

    class Config:
        from_attributes = True


class ProfileCreate(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    email: Optional[str] = Field(None, max_length=320)


class ProfilePatch(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    email: Optional[str] = Field(None, max_length=320)
    image_url: Optional[str] = Field(None, max_length=1000)


class UserStatsOut(BaseModel):
    total_recipes: int
    total_favorites: int
    total_meals_cooked: int


# --- Recipe content ---

class IngredientIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    amount: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = Field(None, max_length=50)
    preparation: Optional[str] = Field(None, max_length=200)
    is_optional: bool = False


class StepIn(BaseModel):
    instruction: str = Field(..., min_length=1)
    timer_minutes: Optional[int] = Field(None, ge=0)
    timer_label: Optional[str] = Field(None, max_length=100)
    tips: Optional[str] = None


class IngredientOut(BaseModel):
    id: str
    name: str
    amount: Optional[float]
    unit: Optional[str]
    preparation: Optional[str]
    is_optional: bool
    sort_order: int

    class Config:
        from_attributes = True


class StepOut(BaseModel):
    id: str
    step_number: int
    instruction: str
    timer_minutes: Optional[int]
    timer_label: Optional[str]
    tips: Optional[str]

    class Config:
        from_attributes = True


# --- Recipes ---

Difficulty = Literal["easy", "medium", "hard"]


class RecipeCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    servings: int = Field(4, ge=1)
    prep_time: Optional[int] = Field(None, ge=0)
    cook_time: Optional[int] = Field(None, ge=0)
    difficulty: Optional[Difficulty] = None
    cuisine: Optional[str] = Field(None, max_length=80)
    source_url: Optional[str] = Field(None, max_length=1000)
    notes: Optional[str] = None
    is_public: bool = False
    ingredients: list[IngredientIn] = []
    steps: list[StepIn] = []
    tags: list[str] = []


class RecipePatch(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    servings: Optional[int] = Field(None, ge=1)
    prep_time: Optional[int] = Field(None, ge=0)
    cook_time: Optional[int] = Field(None, ge=0)
    difficulty: Optional[Difficulty] = None
    cuisine: Optional[str] = Field(None, max_length=80)
    source_url: Optional[str] = Field(None, max_length=1000)
    notes: Optional[str] = None
    is_public: Optional[bool] = None
    ingredients: Optional[list[IngredientIn]] = None  # Replaces all ingredients if provided
    steps: Optional[list[StepIn]] = None  # Replaces all steps if provided
    tags: Optional[list[str]] = None


class RecipeOut(BaseModel):
    id: str
    user_id: Optional[str]
    title: str
    description: Optional[str]
    servings: int
    prep_time: Optional[int]
    cook_time: Optional[int]
    total_time: Optional[int]
    difficulty: Optional[str]
    cuisine: Optional[str]
    source_url: Optional[str]
    notes: Optional[str]
    is_public: bool
    is_global: bool
    is_favorite: bool
    cook_count: int
    last_cooked_at: Optional[int]
    created_at: int
    updated_at: int
    ingredients: list[IngredientOut] = []
    steps: list[StepOut] = []
    tags: list[str] = []
    owner_name: str
    is_owner: bool

    # Set on recipes reached through a direct share or a share link
    is_shared: bool = False
    shared_at: Optional[int] = None
    share_message: Optional[str] = None
    is_shared_via_link: bool = False
    access_count: Optional[int] = None


class FavoriteOut(BaseModel):
    is_favorite: bool


class CookedOut(BaseModel):
    cook_count: int
    last_cooked_at: Optional[int]

    class Config:
        from_attributes = True


# --- Friends ---

class FriendRequestCreate(BaseModel):
    friend_id: str


class FriendshipOut(BaseModel):
    id: str
    user_low: str
    user_high: str
    status: str
    requested_by: str
    created_at: int
    updated_at: int

    class Config:
        from_attributes = True


class FriendOut(BaseModel):
    friendship_id: str
    friend_id: str
    name: str
    email: Optional[str]
    image_url: Optional[str]
    since: int


class PendingRequestOut(BaseModel):
    friendship_id: str
    user_id: str
    name: str
    email: Optional[str]
    image_url: Optional[str]
    requested_at: int


class PendingOut(BaseModel):
    incoming: list[PendingRequestOut]
    outgoing: list[PendingRequestOut]


class UserSearchOut(BaseModel):
    id: str
    name: Optional[str]
    email: Optional[str]
    image_url: Optional[str]

    class Config:
        from_attributes = True


class FriendStatsOut(BaseModel):
    friends: int
    pending_incoming: int
    pending_outgoing: int


class RemoveFriendOut(BaseModel):
    success: bool = True
    shares_removed: int


# --- Direct shares ---

class ShareCreate(BaseModel):
    friend_id: str
    message: Optional[str] = Field(None, max_length=500)
    expires_in_days: Optional[float] = Field(None, gt=0)


class ShareMultipleCreate(BaseModel):
    friend_ids: list[str] = Field(..., min_length=1)
    message: Optional[str] = Field(None, max_length=500)
    expires_in_days: Optional[float] = Field(None, gt=0)


class RecipeShareOut(BaseModel):
    id: str
    recipe_id: str
    owner_id: str
    shared_with_id: str
    permission: str
    message: Optional[str]
    shared_at: int
    expires_at: Optional[int]

    class Config:
        from_attributes = True


class ShareResultOut(BaseModel):
    friend_id: str
    success: bool
    share_id: Optional[str] = None
    error: Optional[str] = None


class SharedWithOut(BaseModel):
    share_id: str
    user_id: str
    name: str
    email: Optional[str]
    image_url: Optional[str]
    shared_at: int
    expires_at: Optional[int]
    message: Optional[str]


class CanShareOut(BaseModel):
    can_share: bool
    reason: Optional[str]


class RemovedOut(BaseModel):
    removed: int


# --- Share links ---

class ShareLinkCreate(BaseModel):
    recipe_id: str
    expires_in_days: Optional[float] = Field(None, gt=0)


class ShareLinkOut(BaseModel):
    id: str
    recipe_id: str
    share_code: str
    created_at: int
    expires_at: Optional[int]
    is_active: bool
    access_count: int
    last_accessed_at: Optional[int]

    class Config:
        from_attributes = True


class ShareLinkSummaryOut(BaseModel):
    link_id: str
    share_code: str
    recipe_id: str
    recipe_title: Optional[str] = None
    created_at: int
    expires_at: Optional[int]
    access_count: int
    last_accessed_at: Optional[int]
    is_active: bool
    is_expired: bool


# --- Public (share codes) ---

ShareCodeReason = Literal["not_found", "revoked", "expired"]


class ShareCodeValidationOut(BaseModel):
    valid: bool
    reason: Optional[ShareCodeReason]


class SharedRecipeOut(BaseModel):
    valid: bool
    reason: Optional[ShareCodeReason] = None
    recipe: Optional[RecipeOut] = None


class AccessRecordOut(BaseModel):
    success: bool
    reason: Optional[ShareCodeReason] = None


# --- Shopping lists ---

class ShoppingListCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class ShoppingItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    amount: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = Field(None, max_length=50)
    aisle: Optional[str] = Field(None, max_length=50)
    recipe_id: Optional[str] = None
    list_id: Optional[str] = None


class AddRecipeRequest(BaseModel):
    recipe_id: str
    list_id: Optional[str] = None


class AddRecipeResultOut(BaseModel):
    list_id: str
    items_added: int
    items_merged: int
    skipped_optional: int


class ShoppingListOut(BaseModel):
    id: str
    name: str
    is_active: bool
    created_at: int
    updated_at: int

    class Config:
        from_attributes = True


class ShoppingItemOut(BaseModel):
    id: str
    list_id: str
    name: str
    amount: Optional[float]
    unit: Optional[str]
    aisle: Optional[str]
    recipe_id: Optional[str]
    is_manual: bool
    is_checked: bool
    checked_at: Optional[int]
    sort_order: int

    class Config:
        from_attributes = True


class ShoppingItemDetailOut(ShoppingItemOut):
    recipe_title: Optional[str] = None


class ActiveListOut(ShoppingListOut):
    items: list[ShoppingItemDetailOut]
    grouped_items: dict[str, list[ShoppingItemDetailOut]]


class ShoppingListSummaryOut(ShoppingListOut):
    total_items: int
    checked_items: int


# --- Cookbooks ---

class CookbookCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)


class CookbookRecipeRequest(BaseModel):
    recipe_id: str


class CookbookResultOut(BaseModel):
    success: bool
    message: Optional[str] = None


class CookbookOut(BaseModel):
    id: str
    name: str
    description: Optional[str]
    color: Optional[str]
    is_default: bool
    sort_order: int
    created_at: int
    updated_at: int

    class Config:
        from_attributes = True


class CookbookSummaryOut(CookbookOut):
    recipe_count: int


class CookbookRecipeOut(RecipeOut):
    added_at: int


class CookbookDetailOut(CookbookOut):
    recipes: list[CookbookRecipeOut]


# --- Meal plans ---

MealType = Literal["breakfast", "lunch", "dinner", "snack"]


class MealPlanCreate(BaseModel):
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    meal_type: MealType
    recipe_id: Optional[str] = None
    custom_meal_name: Optional[str] = Field(None, max_length=200)
    servings: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = None


class MealPlanOut(BaseModel):
    id: str
    date: str
    meal_type: str
    recipe_id: Optional[str]
    custom_meal_name: Optional[str]
    servings: Optional[int]
    notes: Optional[str]
    created_at: int
    recipe: Optional[RecipeOut] = None
