import os

# Pas de Redis en tests: le lifespan désactive le rate limiting
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import copy
import pytest
from typing import Generator
from fastapi.testclient import TestClient

from payconnect.asgi import app as fastapi_app
from payconnect.errors import BackendRejectionError, NotFoundError
from payconnect.utils.security import require_session
from payconnect.utils.context import SessionContext, set_session_context, reset_session_context

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app, headers={"X-Session-Id": "sess-test"}) as c:
        yield c

@pytest.fixture
def session_ctx() -> SessionContext:
    return SessionContext(
        session_id="sess-test",
        cart_id="cart-1",
        payment_interface="paypal-ppcp",
        merchant_return_url="https://shop.example/confirmation",
    )

# Simuler une session de checkout valide pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_session(app, session_ctx):
    async def _fake_require_session():
        set_session_context(session_ctx)
        return session_ctx

    app.dependency_overrides[require_session] = _fake_require_session
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_session, None)

# Contexte de requête vierge pour chaque test
@pytest.fixture(autouse=True)
def _clean_session_context():
    token = set_session_context(None)
    try:
        yield
    finally:
        reset_session_context(token)

# Aucun appel réseau vers le backend commerce
@pytest.fixture(autouse=True)
def _no_commerce_network(monkeypatch):
    def _no_token():
        raise RuntimeError("Accès réseau au backend commerce désactivé en tests")

    monkeypatch.setattr("payconnect.infra.commerce_client.fetch_access_token", _no_token)


class FakeCommerceBackend:
    """
    Backend commerce en mémoire branché sur repository.request_json.
    Versions optimistes: toute écriture avec une version périmée -> 409.
    """

    def __init__(self):
        self.carts = {}
        self.payments = []
        self.orders = []
        self.calls = []
        self.fail_order_with = None

    def add_cart(self, cart):
        self.carts[cart["id"]] = copy.deepcopy(cart)
        return cart

    def _conflict(self, current):
        return BackendRejectionError(
            "Version conflict",
            errors=[{"code": "ConcurrentModification", "message": f"Expected version {current}"}],
            backend_status=409,
        )

    def request_json(self, method, path, *, client=None, **kwargs):
        body = kwargs.get("json")
        self.calls.append((method, path, copy.deepcopy(body)))
        parts = path.strip("/").split("/")

        if parts[0] == "carts":
            cart = self.carts.get(parts[1])
            if cart is None:
                raise NotFoundError(f"Ressource introuvable: {path}")
            if method == "GET":
                return copy.deepcopy(cart)
            if body["version"] != cart["version"]:
                raise self._conflict(cart["version"])
            cart["version"] += 1
            for action in body["actions"]:
                cart.setdefault("paymentInfo", {"payments": []})["payments"].append(action["payment"])
            return copy.deepcopy(cart)

        if parts[0] == "payments" and method == "POST":
            payment = dict(copy.deepcopy(body), id=f"pay-{len(self.payments) + 1}", version=1)
            self.payments.append(payment)
            return copy.deepcopy(payment)

        if parts[0] == "orders" and method == "POST":
            if self.fail_order_with is not None:
                raise self.fail_order_with
            cart = self.carts[body["cart"]["id"]]
            if body["version"] != cart["version"]:
                raise self._conflict(cart["version"])
            n = len(self.orders) + 1
            order = {
                "id": f"order-{n}",
                "orderNumber": f"10{n:03d}",
                "version": 1,
                "orderState": body["orderState"],
                "paymentState": body["paymentState"],
                "cartVersion": body["version"],
            }
            self.orders.append(order)
            return copy.deepcopy(order)

        raise AssertionError(f"Appel backend inattendu: {method} {path}")

    def paths(self):
        return [(m, p) for m, p, _ in self.calls]


@pytest.fixture
def commerce_backend(monkeypatch) -> FakeCommerceBackend:
    backend = FakeCommerceBackend()
    backend.add_cart({
        "id": "cart-1",
        "version": 3,
        "anonymousId": "anon-1",
        "totalPrice": {"currencyCode": "USD", "centAmount": 1999, "fractionDigits": 2},
    })
    monkeypatch.setattr("payconnect.commerce.repository.request_json", backend.request_json)
    return backend
