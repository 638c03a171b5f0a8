import pytest

from recipebox.errors import NotOwner
from recipebox.models import (
    Recipe,
    RecipeShare,
    ShareLink,
    ShareLinkAccess,
    ShoppingItem,
    ShoppingListRecipe,
)
from recipebox.schemas import RecipeCreate, RecipePatch
from recipebox.services import friendships
from recipebox.services import recipe_shares as shares
from recipebox.services import recipes as recipe_service
from recipebox.services import share_links as links
from recipebox.services import shopping


def _befriend(db, a, b):
    request = friendships.send_request(db, a.id, b.id)
    friendships.accept_request(db, b.id, request.id)


# --- Create / update ---

def test_create_recipe_numbers_steps_and_dedupes_tags(db_session, alice):
    recipe = recipe_service.create_recipe(db_session, alice.id, RecipeCreate(
        title="**Banana  Bread**",
        ingredients=[{"name": "  ripe   bananas ", "amount": 3}, {"name": "Flour", "amount": 2, "unit": "cup"}],
        steps=[{"instruction": "Mash."}, {"instruction": "Bake.", "timer_minutes": 55}],
        tags=["Baking", "baking", " Breakfast "],
    ))

    payload = recipe_service.get_by_id(db_session, recipe.id, alice.id)

    assert payload["title"] == "Banana  Bread"
    assert [i["name"] for i in payload["ingredients"]] == ["ripe bananas", "Flour"]
    assert [s["step_number"] for s in payload["steps"]] == [1, 2]
    assert sorted(payload["tags"]) == ["Baking", "Breakfast"]
    assert payload["is_owner"] is True
    assert payload["is_global"] is False


def test_update_replaces_ingredients(db_session, make_recipe, alice):
    recipe = make_recipe(alice, "Soup", ingredients=[{"name": "Water", "amount": 1.0}, {"name": "Salt"}])

    recipe_service.update_recipe(db_session, alice.id, recipe.id, RecipePatch(
        servings=6,
        ingredients=[{"name": "Stock", "amount": 1}],
    ))

    payload = recipe_service.get_by_id(db_session, recipe.id, alice.id)
    assert payload["servings"] == 6
    assert [i["name"] for i in payload["ingredients"]] == ["Stock"]
    assert [s["instruction"] for s in payload["steps"]] == ["Cook it."]


def test_only_owner_may_modify(db_session, make_recipe, alice, bob):
    recipe = make_recipe(alice, "Soup", is_public=True)
    global_recipe = make_recipe(None, "Classic Omelette", is_global=True)

    with pytest.raises(NotOwner):
        recipe_service.update_recipe(db_session, bob.id, recipe.id, RecipePatch(title="Mine"))
    with pytest.raises(NotOwner):
        recipe_service.toggle_favorite(db_session, alice.id, global_recipe.id)
    with pytest.raises(NotOwner):
        recipe_service.delete_recipe(db_session, alice.id, global_recipe.id)


def test_favorite_and_cooked(db_session, make_recipe, alice):
    recipe = make_recipe(alice, "Soup")

    assert recipe_service.toggle_favorite(db_session, alice.id, recipe.id) is True
    assert recipe_service.toggle_favorite(db_session, alice.id, recipe.id) is False

    recipe_service.mark_cooked(db_session, alice.id, recipe.id)
    cooked = recipe_service.mark_cooked(db_session, alice.id, recipe.id)
    assert cooked.cook_count == 2
    assert cooked.last_cooked_at is not None


# --- Listing ---

def test_list_flags(db_session, make_recipe, alice, bob):
    _befriend(db_session, alice, bob)
    own = make_recipe(alice, "Alice Soup")
    bobs = make_recipe(bob, "Bob Stew")
    make_recipe(bob, "Bob Secret")
    glob = make_recipe(None, "Classic Omelette", is_global=True)
    shares.share(db_session, bob.id, bobs.id, alice.id)

    plain = recipe_service.list_recipes(db_session, alice.id)
    assert [r["id"] for r in plain] == [own.id]

    with_shared = recipe_service.list_recipes(db_session, alice.id, include_shared=True)
    assert [r["id"] for r in with_shared] == [own.id, bobs.id]
    assert [r["is_shared"] for r in with_shared] == [False, True]

    everything = recipe_service.list_recipes(db_session, alice.id, include_shared=True, include_global=True)
    assert [r["id"] for r in everything] == [own.id, bobs.id, glob.id]

    only_global = recipe_service.list_recipes(db_session, alice.id, global_only=True)
    assert [r["id"] for r in only_global] == [glob.id]
    assert only_global[0]["owner_name"] == "Unknown"


def test_anonymous_listing_sees_only_global(db_session, make_recipe, alice):
    make_recipe(alice, "Alice Soup", is_public=True)
    glob = make_recipe(None, "Classic Omelette", is_global=True)

    assert recipe_service.list_recipes(db_session, None) == []
    assert [r["id"] for r in recipe_service.list_recipes(db_session, None, include_global=True)] == [glob.id]


def test_expired_share_drops_out_of_listing(db_session, make_recipe, alice, bob):
    _befriend(db_session, alice, bob)
    recipe = make_recipe(bob, "Bob Stew")
    share = shares.share(db_session, bob.id, recipe.id, alice.id, expires_in_days=1)
    share.expires_at = 1
    db_session.commit()

    assert recipe_service.list_recipes(db_session, alice.id, include_shared=True) == []
    assert recipe_service.get_by_id(db_session, recipe.id, alice.id) is None


def test_search_respects_visibility(db_session, make_recipe, alice, bob):
    make_recipe(alice, "Tomato Soup")
    make_recipe(bob, "Tomato Salad", is_public=True)
    make_recipe(bob, "Tomato Secret")
    make_recipe(None, "Tomato Omelette", is_global=True)

    titles = [r["title"] for r in recipe_service.search(db_session, alice.id, "tomato")]
    assert titles == ["Tomato Omelette", "Tomato Salad", "Tomato Soup"]

    anonymous = [r["title"] for r in recipe_service.search(db_session, None, "tomato")]
    assert anonymous == ["Tomato Omelette", "Tomato Salad"]
    assert recipe_service.search(db_session, alice.id, "   ") == []


def test_search_treats_wildcards_literally(db_session, make_recipe, alice):
    make_recipe(alice, "Tomato Soup")
    make_recipe(alice, "100% Rye")

    assert recipe_service.search(db_session, alice.id, "_") == []
    assert [r["title"] for r in recipe_service.search(db_session, alice.id, "%")] == ["100% Rye"]


def test_favorites_are_own_recipes_only(db_session, make_recipe, alice, bob):
    mine = make_recipe(alice, "Mine")
    make_recipe(alice, "Not Favorite")
    theirs = make_recipe(bob, "Theirs", is_public=True)
    recipe_service.toggle_favorite(db_session, alice.id, mine.id)
    recipe_service.toggle_favorite(db_session, bob.id, theirs.id)

    assert [r["title"] for r in recipe_service.get_favorites(db_session, alice.id)] == ["Mine"]
    assert recipe_service.get_favorites(db_session, None) == []


def test_by_meal_type_matches_tag_name_any_case(db_session, alice, bob):
    recipe_service.create_recipe(db_session, alice.id, RecipeCreate(title="Pancakes", tags=["Breakfast"]))
    recipe_service.create_recipe(db_session, alice.id, RecipeCreate(title="Steak", tags=["dinner"]))
    recipe_service.create_recipe(db_session, bob.id, RecipeCreate(title="Bob's Waffles", tags=["breakfast"]))

    titles = [r["title"] for r in recipe_service.get_by_meal_type(db_session, alice.id, "breakfast")]
    assert titles == ["Pancakes"]
    assert recipe_service.get_by_meal_type(db_session, alice.id, "snack") == []


def test_quick_recipes_sum_prep_and_cook(db_session, alice):
    for title, prep, cook in [("Toast", 5, 5), ("Stew", 20, 120), ("Salad", 15, None), ("Edge", 10, 20)]:
        recipe_service.create_recipe(
            db_session, alice.id, RecipeCreate(title=title, prep_time=prep, cook_time=cook)
        )

    quick = {r["title"] for r in recipe_service.get_quick_recipes(db_session, alice.id)}
    assert quick == {"Toast", "Salad", "Edge"}
    assert {r["title"] for r in recipe_service.get_quick_recipes(db_session, alice.id, 10)} == {"Toast"}


# --- Delete ---

def test_delete_cascades_grants_and_detaches_list_items(db_session, make_recipe, alice, bob):
    _befriend(db_session, alice, bob)
    recipe = make_recipe(alice, "Pancakes", ingredients=[{"name": "Flour", "amount": 2.0}])
    shares.share(db_session, alice.id, recipe.id, bob.id)
    link = links.create_link(db_session, alice.id, recipe.id)
    links.record_access(db_session, link.share_code)
    shopping.add_recipe_ingredients(db_session, alice.id, recipe.id)
    recipe_id = recipe.id

    recipe_service.delete_recipe(db_session, alice.id, recipe_id)

    assert db_session.get(Recipe, recipe_id) is None
    assert db_session.query(RecipeShare).count() == 0
    assert db_session.query(ShareLink).count() == 0
    assert db_session.query(ShareLinkAccess).count() == 0
    assert db_session.query(ShoppingListRecipe).count() == 0
    item = db_session.query(ShoppingItem).one()
    assert item.name == "Flour"
    assert item.recipe_id is None


# --- HTTP ---

def test_private_recipe_reads_as_null(client, make_recipe, alice, bob, auth_headers):
    recipe = make_recipe(alice, "Secret Stew")

    assert client.get(f"/api/recipes/{recipe.id}", headers=auth_headers(bob)).json() is None
    assert client.get(f"/api/recipes/{recipe.id}").json() is None
    assert client.get("/api/recipes/does-not-exist").json() is None
    owned = client.get(f"/api/recipes/{recipe.id}", headers=auth_headers(alice)).json()
    assert owned["title"] == "Secret Stew"
    assert owned["owner_name"] == "Alice"


def test_public_recipe_readable_anonymously(client, make_recipe, alice):
    recipe = make_recipe(alice, "Open Soup", is_public=True)

    body = client.get(f"/api/recipes/{recipe.id}").json()

    assert body["title"] == "Open Soup"
    assert body["is_owner"] is False


def test_recipe_crud_over_http(client, alice, bob, auth_headers):
    created = client.post(
        "/api/recipes",
        json={
            "title": "Pancakes",
            "servings": 2,
            "ingredients": [{"name": "Flour", "amount": 2, "unit": "cup"}],
            "steps": [{"instruction": "Whisk."}],
        },
        headers=auth_headers(alice),
    )
    assert created.status_code == 201
    recipe_id = created.json()["id"]

    forbidden = client.patch(f"/api/recipes/{recipe_id}", json={"title": "Mine"}, headers=auth_headers(bob))
    assert forbidden.status_code == 403
    assert forbidden.json()["code"] == "not_owner"

    patched = client.patch(f"/api/recipes/{recipe_id}", json={"prep_time": 5, "cook_time": 10}, headers=auth_headers(alice))
    assert patched.json()["total_time"] == 15

    assert client.post(f"/api/recipes/{recipe_id}/favorite", headers=auth_headers(alice)).json() == {"is_favorite": True}
    assert client.post(f"/api/recipes/{recipe_id}/cooked", headers=auth_headers(alice)).json()["cook_count"] == 1

    assert client.delete(f"/api/recipes/{recipe_id}", headers=auth_headers(alice)).json() == {"success": True}
    assert client.get(f"/api/recipes/{recipe_id}", headers=auth_headers(alice)).json() is None


def test_create_requires_session(client):
    resp = client.post("/api/recipes", json={"title": "Nope"})
    assert resp.status_code == 401
    assert resp.json()["code"] == "unauthenticated"


def test_collection_routes_not_shadowed_by_recipe_id(client, make_recipe, alice, auth_headers):
    recipe = make_recipe(alice, "Quick Eggs")
    headers = auth_headers(alice)
    client.post(f"/api/recipes/{recipe.id}/favorite", headers=headers)

    favorites = client.get("/api/recipes/favorites", headers=headers).json()
    assert [r["title"] for r in favorites] == ["Quick Eggs"]
    quick = client.get("/api/recipes/quick", params={"max_minutes": 15}, headers=headers).json()
    assert [r["title"] for r in quick] == ["Quick Eggs"]
    assert client.get("/api/recipes/meal-type/breakfast", headers=headers).json() == []
