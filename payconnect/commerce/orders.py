"""
Création de commandes côté backend commerce.
Réutilisable par tout chemin de règlement (PayPal aujourd'hui, autres fournisseurs ensuite).
"""
from typing import Any, Dict
import logging

from payconnect.commerce import repository
from payconnect.errors import BackendRejectionError

logger = logging.getLogger(__name__)

ORDER_ERROR_PREFIX = "Failed to create order from cart"

# module payconnect.commerce.orders
def create_order_from_cart(cart: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convertit le panier en commande.
    - Relit le panier juste avant l'envoi pour utiliser la version la plus fraîche.
    - En cas de refus, concatène les sous-erreurs du backend dans un seul message.
    """
    cart_id = cart["id"]
    try:
        latest_cart = repository.get_cart(cart_id)
        draft = {
            "cart": {"id": cart_id, "typeId": "cart"},
            "version": latest_cart["version"],
            "orderState": "Open",
            "shipmentState": "Pending",
            "paymentState": "Paid",
        }
        return repository.request_json("POST", "/orders", json=draft)
    except BackendRejectionError as e:
        logger.error(
            "commerce.orders.create_order_from_cart failed cart_id=%s status=%s errors=%s",
            cart_id, e.backend_status, e.errors,
        )
        err = BackendRejectionError(f"{ORDER_ERROR_PREFIX}: {e}", backend_status=e.backend_status)
        err.errors = e.errors
        raise err from e
    except Exception as e:
        logger.error("commerce.orders.create_order_from_cart failed cart_id=%s error=%s", cart_id, e)
        raise BackendRejectionError(f"{ORDER_ERROR_PREFIX}: {str(e) or 'Unknown error creating order'}") from e

def add_order_payment(order: Dict[str, Any], payment_id: str) -> Dict[str, Any]:
    """Rattache un paiement à une commande existante (version de la commande)."""
    body = {
        "version": order["version"],
        "actions": [
            {"action": "addPayment", "payment": {"typeId": "payment", "id": payment_id}},
        ],
    }
    return repository.request_json("POST", f"/orders/{order['id']}", json=body)
