from recipebox.core.clock import MS_PER_DAY, now_ms
from recipebox.models import RecipeShare
from recipebox.services.access_control import (
    ReadAccess,
    can_delete,
    can_modify,
    can_read,
    resolve_read,
)


def _share(db, recipe, owner, friend, expires_at=None):
    share = RecipeShare(
        recipe_id=recipe.id,
        owner_id=owner.id,
        shared_with_id=friend.id,
        expires_at=expires_at,
    )
    db.add(share)
    db.commit()
    return share


def test_global_recipe_readable_by_anyone(db_session, make_recipe, alice):
    recipe = make_recipe(None, "Curated Soup", is_global=True)

    assert can_read(db_session, recipe, None)
    assert can_read(db_session, recipe, alice.id)


def test_global_recipe_is_immutable_even_with_owner(db_session, make_recipe, alice):
    recipe = make_recipe(alice, "Imported Global", is_global=True)

    assert not can_modify(recipe, alice.id)
    assert not can_delete(recipe, alice.id)


def test_owner_reads_and_modifies_private_recipe(db_session, make_recipe, alice, bob):
    recipe = make_recipe(alice, "Secret Sauce")

    assert can_read(db_session, recipe, alice.id)
    assert can_modify(recipe, alice.id)
    assert not can_read(db_session, recipe, bob.id)
    assert not can_read(db_session, recipe, None)
    assert not can_modify(recipe, bob.id)
    assert not can_modify(recipe, None)


def test_public_recipe_readable_but_not_writable(db_session, make_recipe, alice, bob):
    recipe = make_recipe(alice, "Open Pancakes", is_public=True)

    assert can_read(db_session, recipe, None)
    assert can_read(db_session, recipe, bob.id)
    assert not can_modify(recipe, bob.id)


def test_share_grants_read_only(db_session, make_recipe, alice, bob):
    recipe = make_recipe(alice, "Shared Stew")
    _share(db_session, recipe, alice, bob)

    assert can_read(db_session, recipe, bob.id)
    assert not can_modify(recipe, bob.id)
    assert not can_delete(recipe, bob.id)


def test_expired_share_denies_read(db_session, make_recipe, alice, bob):
    now = now_ms()
    recipe = make_recipe(alice, "Old Stew")
    _share(db_session, recipe, alice, bob, expires_at=now - 1)

    assert not can_read(db_session, recipe, bob.id, now=now)


def test_share_expiry_is_evaluated_at_read_time(db_session, make_recipe, alice, bob):
    now = now_ms()
    recipe = make_recipe(alice, "Timed Stew")
    _share(db_session, recipe, alice, bob, expires_at=now + MS_PER_DAY)

    assert can_read(db_session, recipe, bob.id, now=now)
    assert not can_read(db_session, recipe, bob.id, now=now + 2 * MS_PER_DAY)


def test_resolve_read_distinguishes_missing_from_forbidden(db_session, make_recipe, alice, bob):
    recipe = make_recipe(alice, "Private")

    missing = resolve_read(db_session, "does-not-exist", bob.id)
    forbidden = resolve_read(db_session, recipe.id, bob.id)
    granted = resolve_read(db_session, recipe.id, alice.id)

    assert missing.outcome is ReadAccess.NOT_FOUND
    assert forbidden.outcome is ReadAccess.FORBIDDEN
    assert forbidden.recipe is None
    assert granted.granted
    assert granted.recipe.id == recipe.id
