import asyncio
import os
from typing import Any, Dict, Generator, List, Optional
from unittest.mock import MagicMock

# Pas de Redis pendant les tests
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from fastapi.testclient import TestClient

from glori.app import app as fastapi_app
from glori.cart.errors import FetchFailure
from glori.cart.models import LineItem
from glori.utils.security import require_user

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid or nodeid.startswith("tests/unit/"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid or nodeid.startswith("tests/integration/"):
            item.add_marker(pytest.mark.integration)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_user(app):
    fake_user: Dict[str, Any] = {
        "id": "u1",
        "email": "test@example.com",
        "token": None,
    }
    app.dependency_overrides[require_user] = lambda: fake_user
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_user, None)

# Aucun accès réseau à Supabase pendant les tests
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("glori.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("glori.cart.repository.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("glori.cart.service.get_user_supabase", lambda token: MagicMock())
    monkeypatch.setattr("glori.health.service.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("glori.utils.security.get_supabase", lambda: MagicMock())


def make_doc(
    item_id: str,
    price: Any,
    size: Any = 50,
    quantity: Any = 1,
    owner_id: str = "u1",
    title: Optional[str] = None,
) -> Dict[str, Any]:
    """Ligne 'cart' telle que renvoyée par Supabase (jointure products en dict)."""
    return {
        "id": item_id,
        "user_id": owner_id,
        "product_id": f"p-{item_id}",
        "size": size,
        "quantity": quantity,
        "default_price": price,
        "products": {
            "id": f"p-{item_id}",
            "title": title or f"Parfum {item_id}",
            "photos": [f"https://cdn.test/{item_id}/0.jpg", f"https://cdn.test/{item_id}/1.jpg"],
            "price": price,
        },
    }


class FakeCartRepository:
    """
    Store en mémoire respectant le contrat CartRepository.
    - gates: un asyncio.Event par fetch à retenir (le snapshot est pris à l'appel).
    - update_gate / delete_gate: retient la mutation jusqu'à set().
    """

    def __init__(self):
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.fetch_calls = 0
        self.update_calls: List[tuple] = []
        self.delete_calls: List[str] = []
        self.fail_fetch = False
        self.fail_update = False
        self.fail_delete = False
        self.gates: List[asyncio.Event] = []
        self.update_gate: Optional[asyncio.Event] = None
        self.delete_gate: Optional[asyncio.Event] = None
        self.products: Dict[str, Dict[str, Any]] = {}
        self.added: List[tuple] = []

    def put(self, doc: Dict[str, Any]) -> None:
        self.rows[doc["id"]] = dict(doc)

    async def fetch_items(self, owner_id: str) -> List[LineItem]:
        self.fetch_calls += 1
        gate = self.gates.pop(0) if self.gates else None
        fail = self.fail_fetch
        snapshot = [LineItem.from_document(d) for d in self.rows.values() if d["user_id"] == owner_id]
        if gate is not None:
            await gate.wait()
        if fail:
            raise FetchFailure("Impossible de charger le panier")
        return snapshot

    async def update_item(self, item_id: str, size: int, quantity: int) -> bool:
        self.update_calls.append((item_id, size, quantity))
        if self.update_gate is not None:
            await self.update_gate.wait()
        if self.fail_update or item_id not in self.rows:
            return False
        self.rows[item_id] = {**self.rows[item_id], "size": size, "quantity": quantity}
        return True

    async def delete_item(self, item_id: str) -> bool:
        self.delete_calls.append(item_id)
        if self.delete_gate is not None:
            await self.delete_gate.wait()
        if self.fail_delete or item_id not in self.rows:
            return False
        del self.rows[item_id]
        return True

    async def get_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        return self.products.get(product_id)

    async def add_item(self, owner_id, product_id, size, quantity, default_price) -> bool:
        self.added.append((owner_id, product_id, size, quantity, default_price))
        product = self.products[product_id]
        item_id = f"new-{len(self.added)}"
        doc = make_doc(item_id, default_price, size, quantity, owner_id, product.get("title"))
        doc["products"]["id"] = product_id
        self.put(doc)
        return True


@pytest.fixture
def doc_factory():
    return make_doc

@pytest.fixture
def fake_repo() -> FakeCartRepository:
    return FakeCartRepository()
