from fastapi import Request, HTTPException, Depends
from typing import Optional, Dict, Any
import logging

from payconnect.commerce import repository
from payconnect.utils.context import SessionContext, set_session_context

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-Id"

def _session_metadata(session: Dict[str, Any]) -> Dict[str, Any]:
    return (session or {}).get("metadata") or {}

def build_session_context(session_id: str, session: Dict[str, Any]) -> SessionContext:
    """
    Extrait du document session le panier, l'interface de paiement et l'URL de retour.
    - Le panier est dans activeCartReference (ou metadata.cartId en repli).
    """
    meta = _session_metadata(session)
    active_cart = (session or {}).get("activeCartReference") or {}
    return SessionContext(
        session_id=session_id,
        cart_id=active_cart.get("id") or meta.get("cartId"),
        payment_interface=meta.get("paymentInterface"),
        merchant_return_url=meta.get("merchantReturnUrl"),
    )

def get_current_session(request: Request) -> Dict[str, Any]:
    session_id = (request.headers.get(SESSION_HEADER) or "").strip()
    if not session_id:
        raise HTTPException(status_code=401, detail="Session manquante")

    try:
        session: Optional[Dict[str, Any]] = repository.get_session(session_id)
    except Exception:
        logger.exception("utils.security.get_current_session failed session_id=%s", session_id)
        raise HTTPException(status_code=401, detail="Session expirée, veuillez recommencer le paiement")

    if not session or session.get("state") != "ACTIVE":
        raise HTTPException(status_code=401, detail="Session expirée, veuillez recommencer le paiement")
    session.setdefault("id", session_id)
    return session

async def require_session(session: Dict[str, Any] = Depends(get_current_session)) -> SessionContext:
    """
    Dépendance FastAPI: session valide + contexte de requête.
    Async pour s'exécuter dans la tâche de la requête: le contexte est visible
    dans les endpoints async et ne fuit pas vers les autres requêtes.
    """
    ctx = build_session_context(session["id"], session)
    set_session_context(ctx)
    return ctx
