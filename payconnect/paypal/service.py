"""
Cas d'usage 'paypal': enregistre dans le backend commerce un paiement déjà capturé côté client.
La capture PayPal elle-même a lieu dans le navigateur (SDK PayPal); ce service ne l'initie jamais.
Limites connues:
- pas de garde d'idempotence sur l'order id PayPal (deux appels = deux paiements);
- pas de compensation si la commande échoue après la création du paiement.
"""
from typing import Any, Dict
import logging

from payconnect import config
from payconnect.commerce import repository
from payconnect.commerce import orders
from payconnect.errors import ContextError, NotFoundError
from payconnect.utils import context
from .models import PayPalConfigResponse, SettlementResult, SupportedPaymentComponents, PaymentComponent

logger = logging.getLogger(__name__)

TRANSACTION_SUCCESS = "Success"

def _require_cart() -> Dict[str, Any]:
    cart_id = context.get_cart_id_from_context()
    if not cart_id:
        logger.error("paypal.service cart id not found in context")
        raise ContextError("Cart ID not found in context")
    cart = repository.get_cart(cart_id)
    if not cart:
        raise NotFoundError(f"Cart not found: {cart_id}")
    return cart

def get_config() -> PayPalConfigResponse:
    """
    Configuration PayPal pour le front: clientId, environnement et montant du panier.
    Un clientId vide signifie « PayPal non configuré » (le front n'affiche pas l'option).
    """
    cart = _require_cart()
    amount = repository.get_payment_amount(cart)
    return PayPalConfigResponse(
        client_id=config.PAYPAL_CLIENT_ID,
        environment=config.PAYPAL_ENVIRONMENT,
        currency=amount["currencyCode"],
        amount=amount["centAmount"],
    )

def get_supported_payment_components() -> SupportedPaymentComponents:
    return SupportedPaymentComponents(dropins=[], components=[PaymentComponent(type="paypal")])

def build_payment_draft(cart: Dict[str, Any], amount: Dict[str, Any], provider_order_id: str) -> Dict[str, Any]:
    """
    Brouillon de paiement pour une commande PayPal déjà autorisée et capturée.
    - Deux transactions (AUTHORIZATION puis CHARGE), toutes deux en succès,
      référencent l'order id PayPal comme interactionId.
    - Rattache le client du panier, ou à défaut son anonymousId.
    """
    draft: Dict[str, Any] = {
        "amountPlanned": amount,
        "interfaceId": provider_order_id,
        "paymentMethodInfo": {
            "paymentInterface": context.get_payment_interface_from_context() or config.PAYMENT_INTERFACE,
            "method": "paypal",
        },
        "transactions": [
            {
                "type": "Authorization",
                "amount": amount,
                "state": TRANSACTION_SUCCESS,
                "interactionId": provider_order_id,
            },
            {
                "type": "Charge",
                "amount": amount,
                "state": TRANSACTION_SUCCESS,
                "interactionId": provider_order_id,
            },
        ],
    }
    if cart.get("customerId"):
        draft["customer"] = {"typeId": "customer", "id": cart["customerId"]}
    elif cart.get("anonymousId"):
        draft["anonymousId"] = cart["anonymousId"]
    return draft

def settle_paypal_order(provider_order_id: str) -> SettlementResult:
    """
    Enregistre une commande PayPal capturée côté client puis crée la commande.
    Étapes (strictement séquentielles):
      1) panier depuis le contexte (ContextError si absent)
      2) lecture du panier (NotFoundError si inconnu)
      3) montant prévu
      4) paiement avec transactions AUTHORIZATION + CHARGE
      5) rattachement au panier avec sa version courante (conflit = erreur fatale)
      6) commande depuis le panier retourné par l'étape 5
    Toute erreur est journalisée (order id PayPal + panier) puis relancée telle quelle.
    """
    try:
        logger.info("paypal.service.settle start provider_order_id=%s", provider_order_id)
        cart = _require_cart()
        logger.info(
            "paypal.service.settle cart provider_order_id=%s cart_id=%s cart_version=%s",
            provider_order_id, cart["id"], cart.get("version"),
        )

        amount = repository.get_payment_amount(cart)
        logger.info(
            "paypal.service.settle amount provider_order_id=%s cart_id=%s amount=%s",
            provider_order_id, cart["id"], amount,
        )

        payment = repository.create_payment(build_payment_draft(cart, amount, provider_order_id))
        logger.info(
            "paypal.service.settle payment created provider_order_id=%s cart_id=%s payment_id=%s",
            provider_order_id, cart["id"], payment["id"],
        )

        updated_cart = repository.add_payment({"id": cart["id"], "version": cart["version"]}, payment["id"])
        logger.info(
            "paypal.service.settle payment attached provider_order_id=%s cart_id=%s cart_version=%s",
            provider_order_id, updated_cart["id"], updated_cart.get("version"),
        )

        order = orders.create_order_from_cart(updated_cart)
        logger.info(
            "paypal.service.settle order created provider_order_id=%s order_id=%s order_number=%s order_state=%s payment_state=%s",
            provider_order_id, order["id"], order.get("orderNumber"), order.get("orderState"), order.get("paymentState"),
        )

        return SettlementResult(
            provider_order_id=provider_order_id,
            payment_reference=payment["id"],
            order_id=order["id"],
            order_number=order.get("orderNumber"),
            merchant_return_url=context.get_merchant_return_url_from_context() or config.MERCHANT_RETURN_URL or None,
        )
    except Exception:
        logger.exception(
            "paypal.service.settle failed provider_order_id=%s cart_id=%s",
            provider_order_id, context.get_cart_id_from_context(),
        )
        raise
