import re

import pytest

from recipebox.core.clock import MS_PER_DAY, now_ms
from recipebox.errors import CodeGenerationExhausted, NotFound, NotOwner
from recipebox.models import ShareLink, ShareLinkAccess
from recipebox.services import share_links as links


def test_generated_codes_are_nine_alphanumerics():
    codes = {links.generate_share_code() for _ in range(200)}

    assert all(re.fullmatch(r"[A-Za-z0-9]{9}", c) for c in codes)
    assert len(codes) == 200


def test_create_link_requires_ownership(db_session, make_recipe, alice, bob):
    recipe = make_recipe(alice, "Alice Pie")

    with pytest.raises(NotOwner):
        links.create_link(db_session, bob.id, recipe.id)
    with pytest.raises(NotFound):
        links.create_link(db_session, alice.id, "missing")


def test_create_link_with_expiry(db_session, make_recipe, alice):
    recipe = make_recipe(alice, "Alice Pie")
    before = now_ms()

    link = links.create_link(db_session, alice.id, recipe.id, expires_in_days=7)

    assert link.is_active is True
    assert link.access_count == 0
    assert before + 7 * MS_PER_DAY <= link.expires_at <= now_ms() + 7 * MS_PER_DAY


def test_create_link_retries_on_collision(db_session, make_recipe, alice, monkeypatch):
    recipe = make_recipe(alice, "Alice Pie")
    first = links.create_link(db_session, alice.id, recipe.id)
    codes = iter([first.share_code, first.share_code, "FreshCode"])
    monkeypatch.setattr(links, "generate_share_code", lambda length=None: next(codes))

    second = links.create_link(db_session, alice.id, recipe.id)

    assert second.share_code == "FreshCode"


def test_create_link_gives_up_after_max_attempts(db_session, make_recipe, alice, monkeypatch):
    recipe = make_recipe(alice, "Alice Pie")
    taken = links.create_link(db_session, alice.id, recipe.id).share_code
    monkeypatch.setattr(links, "generate_share_code", lambda length=None: taken)

    with pytest.raises(CodeGenerationExhausted):
        links.create_link(db_session, alice.id, recipe.id)
    assert db_session.query(ShareLink).count() == 1


def test_lookup_reasons_are_distinct(db_session, make_recipe, alice):
    recipe = make_recipe(alice, "Alice Pie")
    revoked = links.create_link(db_session, alice.id, recipe.id)
    links.revoke(db_session, alice.id, revoked.id)
    expiring = links.create_link(db_session, alice.id, recipe.id, expires_in_days=1)
    later = expiring.expires_at + 1

    assert links.validate_code(db_session, "nope") == {"valid": False, "reason": "not_found"}
    assert links.validate_code(db_session, revoked.share_code)["reason"] == "revoked"
    assert links.validate_code(db_session, expiring.share_code, now=later)["reason"] == "expired"
    assert links.validate_code(db_session, expiring.share_code) == {"valid": True, "reason": None}


def test_get_recipe_by_code_does_not_count(db_session, make_recipe, alice):
    recipe = make_recipe(alice, "Alice Pie")
    link = links.create_link(db_session, alice.id, recipe.id)

    result = links.get_recipe_by_code(db_session, link.share_code)

    assert result["reason"] is None
    assert result["recipe"]["title"] == "Alice Pie"
    assert result["recipe"]["owner_name"] == "Alice"
    assert result["recipe"]["is_shared_via_link"] is True
    db_session.refresh(link)
    assert link.access_count == 0


def test_get_recipe_by_code_never_raises(db_session):
    assert links.get_recipe_by_code(db_session, "") == {"reason": "not_found", "recipe": None}


def test_record_access_counts_and_logs(db_session, make_recipe, alice, bob):
    recipe = make_recipe(alice, "Alice Pie")
    link = links.create_link(db_session, alice.id, recipe.id)

    assert links.record_access(db_session, link.share_code)["success"] is True
    assert links.record_access(db_session, link.share_code, user_id=bob.id)["success"] is True

    db_session.refresh(link)
    assert link.access_count == 2
    assert link.last_accessed_at is not None
    viewers = [a.user_id for a in db_session.query(ShareLinkAccess).order_by(ShareLinkAccess.accessed_at)]
    assert sorted(viewers, key=lambda v: v or "") == [None, bob.id]


def test_record_access_rejects_revoked(db_session, make_recipe, alice):
    recipe = make_recipe(alice, "Alice Pie")
    link = links.create_link(db_session, alice.id, recipe.id)
    links.revoke(db_session, alice.id, link.id)

    assert links.record_access(db_session, link.share_code) == {"success": False, "reason": "revoked"}

    links.reactivate(db_session, alice.id, link.id)
    assert links.record_access(db_session, link.share_code)["success"] is True


def test_revoke_requires_link_owner(db_session, make_recipe, alice, bob):
    recipe = make_recipe(alice, "Alice Pie")
    link = links.create_link(db_session, alice.id, recipe.id)

    with pytest.raises(NotOwner):
        links.revoke(db_session, bob.id, link.id)
    with pytest.raises(NotFound):
        links.revoke(db_session, alice.id, "missing")


def test_delete_link_cascades_access_log(db_session, make_recipe, alice):
    recipe = make_recipe(alice, "Alice Pie")
    link = links.create_link(db_session, alice.id, recipe.id)
    links.record_access(db_session, link.share_code)

    links.delete_link(db_session, alice.id, link.id)

    assert db_session.query(ShareLink).count() == 0
    assert db_session.query(ShareLinkAccess).count() == 0


def test_delete_all_for_recipe(db_session, make_recipe, alice):
    recipe = make_recipe(alice, "Alice Pie")
    other = make_recipe(alice, "Other Pie")
    for _ in range(3):
        link = links.create_link(db_session, alice.id, recipe.id)
        links.record_access(db_session, link.share_code)
    links.create_link(db_session, alice.id, other.id)

    assert links.delete_all_for_recipe(db_session, alice.id, recipe.id) == 3
    assert db_session.query(ShareLink).count() == 1
    assert db_session.query(ShareLinkAccess).count() == 0


def test_link_listings_flag_expiry(db_session, make_recipe, alice, bob):
    recipe = make_recipe(alice, "Alice Pie")
    link = links.create_link(db_session, alice.id, recipe.id, expires_in_days=1)
    link.expires_at = now_ms() - 1
    db_session.commit()

    mine = links.my_links(db_session, alice.id)
    assert mine[0]["is_expired"] is True
    assert mine[0]["recipe_title"] == "Alice Pie"
    assert links.links_for_recipe(db_session, bob.id, recipe.id) == []
    assert len(links.links_for_recipe(db_session, alice.id, recipe.id)) == 1


# --- HTTP ---

def test_public_share_code_flow(client, make_recipe, alice, auth_headers):
    recipe = make_recipe(alice, "Alice Pie")
    created = client.post(
        "/api/share-links",
        json={"recipe_id": recipe.id},
        headers=auth_headers(alice),
    )
    assert created.status_code == 201
    code = created.json()["share_code"]
    link_id = created.json()["id"]

    # Anonymous
    shared = client.get(f"/api/public/share/{code}").json()
    assert shared["valid"] is True
    assert shared["recipe"]["title"] == "Alice Pie"

    access = client.post(f"/api/public/share/{code}/access").json()
    assert access == {"success": True, "reason": None}

    client.post(f"/api/share-links/{link_id}/revoke", headers=auth_headers(alice))
    revoked = client.get(f"/api/public/share/{code}").json()
    assert revoked == {"valid": False, "reason": "revoked", "recipe": None}

    missing = client.get("/api/public/share/unknown1/validate").json()
    assert missing == {"valid": False, "reason": "not_found"}
