from fastapi import FastAPI, Depends
from fastapi.testclient import TestClient

from payconnect.utils import security as security_mod
from payconnect.utils import context
from payconnect.utils.context import SessionContext
from payconnect.utils.security import build_session_context, require_session

ACTIVE_SESSION = {
    "id": "sess-1",
    "state": "ACTIVE",
    "activeCartReference": {"typeId": "cart", "id": "cart-42"},
    "metadata": {"paymentInterface": "paypal-ppcp", "merchantReturnUrl": "https://shop.example/ok"},
}

def _make_app():
    app = FastAPI()

    @app.get("/ctx")
    async def ctx(session: SessionContext = Depends(require_session)):
        return {
            "cart": context.get_cart_id_from_context(),
            "interface": context.get_payment_interface_from_context(),
            "return_url": context.get_merchant_return_url_from_context(),
            "session": session.session_id,
        }

    return app

def test_missing_session_header_is_401():
    client = TestClient(_make_app())
    r = client.get("/ctx")
    assert r.status_code == 401
    assert r.json()["detail"] == "Session manquante"

def test_active_session_binds_request_context(monkeypatch):
    monkeypatch.setattr(security_mod.repository, "get_session", lambda sid: dict(ACTIVE_SESSION))
    client = TestClient(_make_app())

    r = client.get("/ctx", headers={"X-Session-Id": "sess-1"})
    assert r.status_code == 200
    assert r.json() == {
        "cart": "cart-42",
        "interface": "paypal-ppcp",
        "return_url": "https://shop.example/ok",
        "session": "sess-1",
    }
    # rien ne fuit hors de la requête
    assert context.get_cart_id_from_context() is None

def test_inactive_or_unknown_session_is_401(monkeypatch):
    client = TestClient(_make_app())

    monkeypatch.setattr(security_mod.repository, "get_session", lambda sid: dict(ACTIVE_SESSION, state="EXPIRED"))
    assert client.get("/ctx", headers={"X-Session-Id": "sess-1"}).status_code == 401

    monkeypatch.setattr(security_mod.repository, "get_session", lambda sid: None)
    r = client.get("/ctx", headers={"X-Session-Id": "sess-1"})
    assert r.status_code == 401
    assert "Session expirée" in r.json()["detail"]

def test_session_backend_failure_is_401(monkeypatch):
    def _boom(sid):
        raise RuntimeError("backend down")

    monkeypatch.setattr(security_mod.repository, "get_session", _boom)
    r = TestClient(_make_app()).get("/ctx", headers={"X-Session-Id": "sess-1"})
    assert r.status_code == 401

def test_build_session_context_falls_back_to_metadata_cart():
    ctx = build_session_context("s", {"metadata": {"cartId": "cart-meta"}})
    assert ctx == SessionContext(session_id="s", cart_id="cart-meta")

def test_session_context_manager_restores_previous_value():
    outer = SessionContext(session_id="a", cart_id="cart-a")
    inner = SessionContext(session_id="b", cart_id="cart-b")
    with context.session_context(outer):
        with context.session_context(inner):
            assert context.get_cart_id_from_context() == "cart-b"
        assert context.get_cart_id_from_context() == "cart-a"
    assert context.get_session_context() is None
