from decimal import Decimal
import pytest

from glori.cart.view_model import CartViewModel
from glori.utils.security import require_user


@pytest.fixture
def cart_repo(monkeypatch, fake_repo):
    def _build(user):
        return CartViewModel(fake_repo, str(user["id"]), shipping=Decimal("24.55"), tax=Decimal("14.09"))

    monkeypatch.setattr("glori.cart.service.build_view_model", _build)
    return fake_repo


def test_get_cart(client, cart_repo, doc_factory):
    cart_repo.put(doc_factory("a", 80))
    cart_repo.put(doc_factory("b", 120, 200))
    r = client.get("/api/v1/cart")
    assert r.status_code == 200
    data = r.json()
    assert data["state"] == "ready"
    assert [i["id"] for i in data["items"]] == ["a", "b"]
    assert data["summary"]["grand_total"] == "338.64"


def test_get_empty_cart(client, cart_repo):
    r = client.get("/api/v1/cart")
    assert r.status_code == 200
    assert r.json()["empty"] is True
    assert r.json()["items"] == []


def test_get_cart_only_returns_own_items(client, cart_repo, doc_factory):
    cart_repo.put(doc_factory("mine", 80, owner_id="u1"))
    cart_repo.put(doc_factory("theirs", 80, owner_id="u2"))
    ids = [i["id"] for i in client.get("/api/v1/cart").json()["items"]]
    assert ids == ["mine"]


def test_get_cart_fetch_failure_is_503(client, cart_repo):
    cart_repo.fail_fetch = True
    r = client.get("/api/v1/cart")
    assert r.status_code == 503
    assert r.json()["detail"]


def test_adjust_item(client, cart_repo, doc_factory):
    cart_repo.put(doc_factory("x", 60, title="Santal"))
    r = client.put("/api/v1/cart/items/x", json={"size": 200, "quantity": 3})
    assert r.status_code == 200
    data = r.json()
    assert data["items"][0]["size"] == 200
    assert data["items"][0]["quantity"] == 3
    assert data["items"][0]["line_total"] == "280.00"
    assert data["notifications"][-1] == {"level": "success", "message": "Santal ajusté avec succès"}


@pytest.mark.parametrize("body", [{"size": 75, "quantity": 1}, {"size": 100, "quantity": 0}, {"size": 100, "quantity": 6}])
def test_adjust_item_invalid_values_are_422(client, cart_repo, doc_factory, body):
    cart_repo.put(doc_factory("x", 60))
    r = client.put("/api/v1/cart/items/x", json=body)
    assert r.status_code == 422
    assert cart_repo.update_calls == []


def test_adjust_unknown_item_is_404(client, cart_repo, doc_factory):
    cart_repo.put(doc_factory("x", 60))
    r = client.put("/api/v1/cart/items/ghost", json={"size": 100, "quantity": 1})
    assert r.status_code == 404


def test_adjust_store_failure_is_502(client, cart_repo, doc_factory):
    cart_repo.put(doc_factory("x", 60))
    cart_repo.fail_update = True
    r = client.put("/api/v1/cart/items/x", json={"size": 100, "quantity": 2})
    assert r.status_code == 502
    assert cart_repo.rows["x"]["size"] == 50


def test_delete_item(client, cart_repo, doc_factory):
    cart_repo.put(doc_factory("a", 80))
    r = client.delete("/api/v1/cart/items/a")
    assert r.status_code == 200
    assert r.json()["empty"] is True
    assert r.json()["summary"]["subtotal"] == "0.00"


def test_delete_failure_is_502(client, cart_repo, doc_factory):
    cart_repo.put(doc_factory("a", 80))
    cart_repo.fail_delete = True
    r = client.delete("/api/v1/cart/items/a")
    assert r.status_code == 502
    assert "a" in cart_repo.rows


def test_add_item(client, cart_repo):
    cart_repo.products["p1"] = {"id": "p1", "title": "Néroli", "photos": [], "price": "45.50"}
    r = client.post("/api/v1/cart/items", json={"product_id": "p1", "size": 100, "quantity": 2})
    assert r.status_code == 201
    data = r.json()
    assert data["item_count"] == 1
    assert data["items"][0]["line_total"] == "141.00"


def test_add_unknown_product_is_404(client, cart_repo):
    r = client.post("/api/v1/cart/items", json={"product_id": "nope"})
    assert r.status_code == 404


def test_item_link(client, cart_repo, doc_factory, monkeypatch):
    monkeypatch.setattr("glori.cart.service.BASE_URL", "https://glori.test")
    cart_repo.put(doc_factory("a", 80))
    r = client.get("/api/v1/cart/items/a/link")
    assert r.status_code == 200
    assert r.json() == {"url": "https://glori.test/perfumes/p-a"}


def test_unauthenticated_is_401(app, client, cart_repo):
    app.dependency_overrides.pop(require_user, None)
    r = client.get("/api/v1/cart")
    assert r.status_code == 401


def test_cookie_session_mutation_requires_csrf(client, cart_repo, doc_factory):
    cart_repo.put(doc_factory("a", 80))
    client.cookies.set("sb_access", "cookie-tok")
    r = client.delete("/api/v1/cart/items/a")
    assert r.status_code == 403
    assert "a" in cart_repo.rows

    client.cookies.set("csrf_token", "t0k")
    r = client.delete("/api/v1/cart/items/a", headers={"X-CSRF-Token": "t0k"})
    assert r.status_code == 200


def test_security_headers(client, cart_repo):
    r = client.get("/api/v1/cart")
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["X-Content-Type-Options"] == "nosniff"
