"""
Contexte de requête (session commerce) partagé entre la dépendance d'auth et les services.
"""
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass(frozen=True)
class SessionContext:
    session_id: str
    cart_id: Optional[str] = None
    payment_interface: Optional[str] = None
    merchant_return_url: Optional[str] = None


_session_ctx: ContextVar[Optional[SessionContext]] = ContextVar("payconnect_session", default=None)


def set_session_context(ctx: Optional[SessionContext]):
    """Lie le contexte à la tâche courante, retourne le token pour reset()."""
    return _session_ctx.set(ctx)


def reset_session_context(token) -> None:
    _session_ctx.reset(token)


@contextmanager
def session_context(ctx: SessionContext) -> Iterator[SessionContext]:
    token = set_session_context(ctx)
    try:
        yield ctx
    finally:
        reset_session_context(token)


def get_session_context() -> Optional[SessionContext]:
    return _session_ctx.get()


def get_cart_id_from_context() -> Optional[str]:
    ctx = _session_ctx.get()
    return ctx.cart_id if ctx else None


def get_payment_interface_from_context() -> Optional[str]:
    ctx = _session_ctx.get()
    return ctx.payment_interface if ctx else None


def get_merchant_return_url_from_context() -> Optional[str]:
    ctx = _session_ctx.get()
    return ctx.merchant_return_url if ctx else None
