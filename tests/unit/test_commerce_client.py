import threading
import time
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest

import payconnect.infra.commerce_client as commerce_client
from payconnect.commerce import repository

# Fonction réelle, avant le garde réseau autouse de conftest
real_fetch_access_token = commerce_client.fetch_access_token


@pytest.fixture
def issued_tokens(monkeypatch):
    """Serveur d'auth factice: t1, t2, ... à chaque demande de jeton."""
    issued = []

    def _fetch():
        issued.append(f"t{len(issued) + 1}")
        return {"access_token": issued[-1], "expires_in": 172800}

    monkeypatch.setattr(commerce_client, "fetch_access_token", _fetch)
    return issued


def _client_with(handler, auth=None) -> httpx.Client:
    return httpx.Client(
        base_url="https://api.commerce.test/shop",
        auth=auth or commerce_client.CommerceAuth(),
        transport=httpx.MockTransport(handler),
    )


def test_token_is_cached_between_requests(issued_tokens):
    seen = []

    def handler(request):
        seen.append(request.headers["Authorization"])
        return httpx.Response(200, json={"id": "cart-1", "version": 1})

    client = _client_with(handler)
    client.get("/carts/cart-1")
    client.get("/carts/cart-1")

    assert issued_tokens == ["t1"]
    assert seen == ["Bearer t1", "Bearer t1"]


def test_401_renews_token_and_retries_once(issued_tokens, monkeypatch):
    seen = []

    def handler(request):
        seen.append(request.headers["Authorization"])
        if request.headers["Authorization"] == "Bearer t1":
            return httpx.Response(401, json={"message": "invalid_token"})
        return httpx.Response(200, json={"id": "cart-1", "version": 4})

    client = _client_with(handler)
    monkeypatch.setattr(commerce_client, "get_commerce_client", lambda: client)

    assert repository.get_cart("cart-1") == {"id": "cart-1", "version": 4}
    assert issued_tokens == ["t1", "t2"]
    assert seen == ["Bearer t1", "Bearer t2"]


def test_second_401_is_not_retried_again(issued_tokens):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(401, json={"message": "invalid_token"})

    resp = _client_with(handler).get("/carts/cart-1")

    assert resp.status_code == 401
    assert len(calls) == 2
    assert issued_tokens == ["t1", "t2"]


def test_expired_token_is_refreshed_before_request(monkeypatch):
    issued = []

    def _fetch():
        issued.append(f"t{len(issued) + 1}")
        return {"access_token": issued[-1], "expires_in": 120}

    monkeypatch.setattr(commerce_client, "fetch_access_token", _fetch)
    now = [1000.0]
    monkeypatch.setattr(commerce_client.time, "monotonic", lambda: now[0])
    seen = []

    def handler(request):
        seen.append(request.headers["Authorization"])
        return httpx.Response(200, json={})

    client = _client_with(handler)
    client.get("/carts/cart-1")
    now[0] += 30
    client.get("/carts/cart-1")
    # expires_in 120 - marge 60: périmé après 60s
    now[0] += 40
    client.get("/carts/cart-1")

    assert seen == ["Bearer t1", "Bearer t1", "Bearer t2"]


def test_fetch_access_token_returns_expiry(monkeypatch):
    monkeypatch.setattr(commerce_client, "COMMERCE_AUTH_URL", "https://auth.commerce.test")
    monkeypatch.setattr(commerce_client, "COMMERCE_CLIENT_ID", "cid")
    monkeypatch.setattr(commerce_client, "COMMERCE_CLIENT_SECRET", "csecret")
    captured = {}

    def _post(url, **kwargs):
        captured["url"] = url
        captured.update(kwargs)
        return httpx.Response(200, json={"access_token": "abc", "expires_in": 3600})

    monkeypatch.setattr(commerce_client.httpx, "post", _post)

    payload = real_fetch_access_token()

    assert payload == {"access_token": "abc", "expires_in": 3600}
    assert captured["url"] == "https://auth.commerce.test/oauth/token"
    assert captured["data"] == {"grant_type": "client_credentials"}
    assert captured["auth"] == ("cid", "csecret")


def test_singletons_built_once_under_concurrency(monkeypatch):
    monkeypatch.setattr(commerce_client, "COMMERCE_API_URL", "https://api.commerce.test")
    monkeypatch.setattr(commerce_client, "COMMERCE_PROJECT_KEY", "shop")
    monkeypatch.setattr(commerce_client, "_commerce_client", None)
    built = []
    lock = threading.Lock()

    def _slow_build(base_url):
        time.sleep(0.05)
        with lock:
            built.append(base_url)
        return object()

    monkeypatch.setattr(commerce_client, "_build_client", _slow_build)

    with ThreadPoolExecutor(max_workers=8) as pool:
        clients = list(pool.map(lambda _: commerce_client.get_commerce_client(), range(8)))

    assert built == ["https://api.commerce.test/shop"]
    assert all(c is clients[0] for c in clients)


def test_close_clients_resets_singletons(monkeypatch):
    closed = []

    class _Closable:
        def close(self):
            closed.append(self)

    monkeypatch.setattr(commerce_client, "_commerce_client", _Closable())
    monkeypatch.setattr(commerce_client, "_session_client", _Closable())

    commerce_client.close_clients()

    assert len(closed) == 2
    assert commerce_client._commerce_client is None
    assert commerce_client._session_client is None
