"""
Route tests for wishlists and their items.
"""
from underwraps.config.settings import settings


def create(client, world, who="carol", name=None):
    body = {"group_id": world.group_id}
    if name is not None:
        body["name"] = name
    return client.post("/api/v1/wishlists", json=body, headers=world.headers(who))


def test_default_names_increment(client, world):
    first = create(client, world)
    assert first.status_code == 201
    assert first.json()["wishlist"]["name"] == "Carol's Wishlist"
    assert first.json()["wishlist"]["is_default"] is True

    second = create(client, world).json()["wishlist"]
    assert second["name"] == "Carol's Wishlist 2"
    assert second["is_default"] is False


def test_default_name_retries_after_concurrent_insert(client, world):
    def concurrent_create(db, row):
        db.insert_row("wishlists", {**row})

    world.db.before_insert["wishlists"] = [concurrent_create]
    response = create(client, world)
    assert response.status_code == 201
    assert response.json()["wishlist"]["name"] == "Carol's Wishlist 2"
    names = sorted(w["name"] for w in world.db.rows("wishlists", user_id=world.ids["carol"]))
    assert names == ["Carol's Wishlist", "Carol's Wishlist 2"]


def test_default_name_gives_up_after_max_attempts(client, world, monkeypatch):
    monkeypatch.setattr(settings, "wishlist_name_max_attempts", 2)

    def concurrent_create(db, row):
        db.insert_row("wishlists", {**row})

    world.db.before_insert["wishlists"] = [concurrent_create, concurrent_create]
    response = create(client, world)
    assert response.status_code == 409
    assert response.json()["code"] == "name_contention"


def test_duplicate_chosen_name_conflicts(client, world):
    assert create(client, world, name="Birthday").status_code == 201
    duplicate = create(client, world, name="Birthday")
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "duplicate_name"


def test_same_name_allowed_for_different_users(client, world):
    assert create(client, world, who="carol", name="Birthday").status_code == 201
    assert create(client, world, who="dave", name="Birthday").status_code == 201


def test_non_member_cannot_create_or_list(client, world):
    assert create(client, world, who="erin").status_code == 403
    listed = client.get(f"/api/v1/wishlists?group_id={world.group_id}", headers=world.headers("erin"))
    assert listed.status_code == 403


def test_list_group_wishlists(client, world):
    create(client, world)
    response = client.get(f"/api/v1/wishlists?group_id={world.group_id}", headers=world.headers("dave"))
    assert response.status_code == 200
    assert [w["name"] for w in response.json()] == ["Alice's Wishlist", "Carol's Wishlist"]


def test_only_owner_deletes_wishlist(client, world):
    path = f"/api/v1/wishlists/{world.wishlist_id}"
    assert client.delete(path, headers=world.headers("bob")).status_code == 403
    response = client.delete(path, headers=world.headers("alice"))
    assert response.status_code == 200
    assert response.json() == {"success": True, "group_id": world.group_id}
    assert not world.db.rows("items", wishlist_id=world.wishlist_id)


def test_add_item_normalizes_currency(client, world):
    response = client.post(
        "/api/v1/items",
        json={"wishlist_id": world.wishlist_id, "title": " Scarf ", "price": 25, "currency": "eur"},
        headers=world.headers("alice"),
    )
    assert response.status_code == 201
    item = response.json()["item"]
    assert item["title"] == "Scarf"
    assert item["currency"] == "EUR"

    default = client.post(
        "/api/v1/items", json={"wishlist_id": world.wishlist_id, "title": "Socks"}, headers=world.headers("alice")
    ).json()["item"]
    assert default["currency"] == "USD"
    assert default["quantity"] == 1


def test_item_validation(client, world):
    blank = client.post(
        "/api/v1/items", json={"wishlist_id": world.wishlist_id, "title": "  "}, headers=world.headers("alice")
    )
    assert blank.status_code == 400
    negative = client.post(
        "/api/v1/items",
        json={"wishlist_id": world.wishlist_id, "title": "Hat", "price": -1},
        headers=world.headers("alice"),
    )
    assert negative.status_code == 400
    assert negative.json()["code"] == "invalid_input"
    unknown_field = client.post(
        "/api/v1/items",
        json={"wishlist_id": world.wishlist_id, "title": "Hat", "colour": "red"},
        headers=world.headers("alice"),
    )
    assert unknown_field.status_code == 400


def test_only_wishlist_owner_manages_items(client, world):
    added = client.post(
        "/api/v1/items", json={"wishlist_id": world.wishlist_id, "title": "Gloves"}, headers=world.headers("carol")
    )
    assert added.status_code == 403
    edited = client.put(
        f"/api/v1/items/{world.single_item_id}", json={"title": "Turntable"}, headers=world.headers("carol")
    )
    assert edited.status_code == 403
    deleted = client.delete(f"/api/v1/items/{world.single_item_id}", headers=world.headers("carol"))
    assert deleted.status_code == 403


def test_edit_replaces_item_fields(client, world):
    response = client.put(
        f"/api/v1/items/{world.single_item_id}",
        json={"title": "Turntable", "allow_multiple_claims": True},
        headers=world.headers("alice"),
    )
    assert response.status_code == 200
    item = response.json()["item"]
    assert item["title"] == "Turntable"
    assert item["price"] is None
    assert item["allow_multiple_claims"] is True


def test_delete_item_removes_claims(client, world):
    world.db.insert_row("item_claims", {
        "item_id": world.single_item_id,
        "claimer_id": world.ids["carol"],
        "group_id": world.group_id,
        "reveal_date": "2099-01-01",
    })
    response = client.delete(f"/api/v1/items/{world.single_item_id}", headers=world.headers("alice"))
    assert response.status_code == 200
    assert not world.db.rows("item_claims", item_id=world.single_item_id)
