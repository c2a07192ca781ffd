"""
Accès au backend commerce pour les paniers, paiements et sessions.
Aucun cache: chaque appel relit l'état courant (versions optimistes).
"""
from typing import Any, Dict, Optional
import logging
import httpx

# Importer le module (et non les fonctions) pour rester patchable en tests
import payconnect.infra.commerce_client as commerce_client
from payconnect.errors import BackendRejectionError, NotFoundError

logger = logging.getLogger(__name__)

# module payconnect.commerce.repository
def request_json(method: str, path: str, *, client: Optional[httpx.Client] = None, **kwargs) -> Dict[str, Any]:
    """
    Exécute une requête sur l'API commerce et retourne le corps JSON.
    - 404 -> NotFoundError
    - autre code >= 400 -> BackendRejectionError (message + sous-erreurs du backend)
    """
    http = client or commerce_client.get_commerce_client()
    resp = http.request(method, path, **kwargs)
    if resp.status_code == 404:
        raise NotFoundError(f"Ressource introuvable: {path}")
    if resp.status_code >= 400:
        raise BackendRejectionError.from_response(resp)
    return resp.json()

def get_cart(cart_id: str) -> Dict[str, Any]:
    """Lit le panier courant (id, version, totaux, client)."""
    try:
        return request_json("GET", f"/carts/{cart_id}")
    except NotFoundError:
        raise NotFoundError(f"Cart not found: {cart_id}")

def get_payment_amount(cart: Dict[str, Any]) -> Dict[str, Any]:
    """
    Montant à encaisser pour le panier.
    - taxedPrice.totalGross si le panier est taxé, sinon totalPrice.
    Retour: {"currencyCode": "EUR", "centAmount": 1999, "fractionDigits": 2}
    """
    money = ((cart or {}).get("taxedPrice") or {}).get("totalGross") or (cart or {}).get("totalPrice")
    if not money:
        raise BackendRejectionError(f"Panier sans montant: {(cart or {}).get('id')}")
    return {
        "currencyCode": money.get("currencyCode"),
        "centAmount": int(money.get("centAmount") or 0),
        "fractionDigits": int(money.get("fractionDigits") or 2),
    }

def create_payment(draft: Dict[str, Any]) -> Dict[str, Any]:
    """Crée un enregistrement de paiement (avec ses transactions)."""
    return request_json("POST", "/payments", json=draft)

def add_payment(resource: Dict[str, Any], payment_id: str) -> Dict[str, Any]:
    """
    Rattache un paiement au panier avec la version fournie.
    Un conflit de version remonte tel quel (pas de relecture/réessai).
    """
    body = {
        "version": resource["version"],
        "actions": [
            {"action": "addPayment", "payment": {"typeId": "payment", "id": payment_id}},
        ],
    }
    return request_json("POST", f"/carts/{resource['id']}", json=body)

def get_session(session_id: str) -> Optional[Dict[str, Any]]:
    """
    Lit une session de checkout. Retourne None si elle n'existe pas.
    """
    try:
        return request_json("GET", f"/sessions/{session_id}", client=commerce_client.get_session_client())
    except NotFoundError:
        return None
