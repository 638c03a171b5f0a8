import pytest

from recipebox.core.clock import MS_PER_DAY, now_ms
from recipebox.errors import AlreadyShared, NotFound, NotFriends, NotOwner
from recipebox.models import RecipeShare
from recipebox.services import friendships as friends
from recipebox.services import recipe_shares as shares
from recipebox.services.access_control import can_read


@pytest.fixture
def friends_ab(db_session, alice, bob):
    request = friends.send_request(db_session, alice.id, bob.id)
    friends.accept_request(db_session, bob.id, request.id)


def test_share_requires_ownership(db_session, make_recipe, alice, bob, friends_ab):
    recipe = make_recipe(alice, "Alice Pie")

    with pytest.raises(NotOwner):
        shares.share(db_session, bob.id, recipe.id, alice.id)
    with pytest.raises(NotFound):
        shares.share(db_session, alice.id, "missing", bob.id)


def test_share_requires_accepted_friendship(db_session, make_recipe, alice, bob, carol):
    recipe = make_recipe(alice, "Alice Pie")
    friends.send_request(db_session, alice.id, carol.id)

    with pytest.raises(NotFriends):
        shares.share(db_session, alice.id, recipe.id, carol.id)
    with pytest.raises(NotFriends):
        shares.share(db_session, alice.id, recipe.id, bob.id)


def test_share_grants_read_and_rejects_duplicates(db_session, make_recipe, alice, bob, friends_ab):
    recipe = make_recipe(alice, "Alice Pie")
    assert not can_read(db_session, recipe, bob.id)

    share = shares.share(db_session, alice.id, recipe.id, bob.id, message="Try this")

    assert share.permission == "view"
    assert share.expires_at is None
    assert can_read(db_session, recipe, bob.id)
    with pytest.raises(AlreadyShared):
        shares.share(db_session, alice.id, recipe.id, bob.id)


def test_share_expiry_in_days(db_session, make_recipe, alice, bob, friends_ab):
    recipe = make_recipe(alice, "Alice Pie")
    before = now_ms()

    share = shares.share(db_session, alice.id, recipe.id, bob.id, expires_in_days=2)

    assert share.expires_at >= before + 2 * MS_PER_DAY
    assert can_read(db_session, recipe, bob.id, now=before + MS_PER_DAY)
    assert not can_read(db_session, recipe, bob.id, now=share.expires_at + 1)


def test_shared_with_me_skips_expired(db_session, make_recipe, alice, bob, friends_ab):
    live = make_recipe(alice, "Live")
    stale = make_recipe(alice, "Stale")
    now = now_ms()
    db_session.add_all([
        RecipeShare(recipe_id=live.id, owner_id=alice.id, shared_with_id=bob.id, message="hi"),
        RecipeShare(recipe_id=stale.id, owner_id=alice.id, shared_with_id=bob.id, expires_at=now - 1),
    ])
    db_session.commit()

    result = shares.get_shared_with_me(db_session, bob.id, now=now)

    assert [r["title"] for r in result] == ["Live"]
    assert result[0]["is_shared"] is True
    assert result[0]["share_message"] == "hi"
    assert result[0]["owner_name"] == "Alice"


def test_shared_with_is_owner_only(db_session, make_recipe, alice, bob, friends_ab):
    recipe = make_recipe(alice, "Alice Pie")
    shares.share(db_session, alice.id, recipe.id, bob.id)

    assert [s["user_id"] for s in shares.get_shared_with(db_session, alice.id, recipe.id)] == [bob.id]
    assert shares.get_shared_with(db_session, bob.id, recipe.id) == []


def test_can_share_reports_reason(db_session, make_recipe, alice, bob, carol, friends_ab):
    recipe = make_recipe(alice, "Alice Pie")

    assert shares.can_share(db_session, None, recipe.id, bob.id)["can_share"] is False
    assert shares.can_share(db_session, bob.id, recipe.id, alice.id)["reason"] == "Not the recipe owner"
    assert shares.can_share(db_session, alice.id, recipe.id, carol.id)["reason"] == "Not friends"
    assert shares.can_share(db_session, alice.id, recipe.id, bob.id) == {"can_share": True, "reason": None}

    shares.share(db_session, alice.id, recipe.id, bob.id)
    assert shares.can_share(db_session, alice.id, recipe.id, bob.id)["reason"] == "Already shared"


def test_share_with_multiple_reports_per_friend(db_session, make_recipe, alice, bob, carol, friends_ab):
    recipe = make_recipe(alice, "Alice Pie")

    results = shares.share_with_multiple(db_session, alice.id, recipe.id, [bob.id, carol.id, bob.id])

    assert results[0]["success"] is True
    assert results[1] == {"friend_id": carol.id, "success": False, "error": "Not friends"}
    assert results[2] == {"friend_id": bob.id, "success": False, "error": "Already shared"}
    assert db_session.query(RecipeShare).count() == 1


def test_unshare_and_unshare_all(db_session, make_recipe, alice, bob, carol, friends_ab):
    request = friends.send_request(db_session, alice.id, carol.id)
    friends.accept_request(db_session, carol.id, request.id)
    recipe = make_recipe(alice, "Alice Pie")
    shares.share_with_multiple(db_session, alice.id, recipe.id, [bob.id, carol.id])

    with pytest.raises(NotOwner):
        shares.unshare(db_session, bob.id, recipe.id, bob.id)

    assert shares.unshare(db_session, alice.id, recipe.id, bob.id) is True
    assert shares.unshare(db_session, alice.id, recipe.id, bob.id) is False
    assert shares.unshare_all(db_session, alice.id, recipe.id) == 1
    assert not can_read(db_session, recipe, carol.id)


# --- HTTP ---

def test_share_over_http(client, make_recipe, alice, bob, carol, auth_headers, friends_ab):
    recipe = make_recipe(alice, "Alice Pie")

    created = client.post(
        f"/api/recipe-shares/recipes/{recipe.id}",
        json={"friend_id": bob.id, "message": "Enjoy"},
        headers=auth_headers(alice),
    )
    assert created.status_code == 201
    assert created.json()["shared_with_id"] == bob.id

    not_friends = client.post(
        f"/api/recipe-shares/recipes/{recipe.id}",
        json={"friend_id": carol.id},
        headers=auth_headers(alice),
    )
    assert not_friends.status_code == 403
    assert not_friends.json()["code"] == "not_friends"

    visible = client.get(f"/api/recipes/{recipe.id}", headers=auth_headers(bob)).json()
    assert visible["title"] == "Alice Pie"
    assert visible["is_owner"] is False

    inbox = client.get("/api/recipe-shares/shared-with-me", headers=auth_headers(bob)).json()
    assert [r["id"] for r in inbox] == [recipe.id]

    forbidden = client.patch(
        f"/api/recipes/{recipe.id}",
        json={"title": "Bob's now"},
        headers=auth_headers(bob),
    )
    assert forbidden.status_code == 403
