"""
Bouton PayPal: requête de commande, URL du SDK et callbacks
(createOrder / onApprove / onError / onCancel).
"""
from decimal import Decimal
from typing import Any, Dict, Optional
from urllib.parse import urlencode
import logging

from payconnect.errors import ProviderValidationError
from .flows import PaymentFlows
from .models import WalletConfig
from .selector import MethodSelector

logger = logging.getLogger(__name__)

SDK_URLS = {
    "live": "https://www.paypal.com/sdk/js",
    "sandbox": "https://www.sandbox.paypal.com/sdk/js",
}

BUTTON_STYLE = {
    "layout": "horizontal",
    "color": "blue",
    "shape": "rect",
    "label": "paypal",
    "height": 44,
}


def format_amount(cent_amount: int) -> str:
    """1999 -> '19.99'"""
    return str((Decimal(cent_amount) / 100).quantize(Decimal("0.01")))


def build_order_request(config: WalletConfig) -> Dict[str, Any]:
    value = format_amount(config.amount)
    if Decimal(value) <= 0:
        logger.error("checkout.wallet cart total is zero or negative amount=%s", config.amount)
        raise ProviderValidationError("Cart total must be greater than zero")
    return {
        "intent": "CAPTURE",
        "purchase_units": [
            {
                "reference_id": "ORDER",
                "description": "Order Payment",
                "amount": {"currency_code": config.currency, "value": value},
            }
        ],
    }


def sdk_url(config: WalletConfig) -> str:
    base = SDK_URLS.get(config.environment, SDK_URLS["sandbox"])
    query = urlencode({
        "client-id": config.client_id,
        "currency": config.currency,
        "intent": "capture",
        "components": "buttons",
    })
    return f"{base}?{query}"


class WalletButtonHandlers:
    """
    Callbacks passés au bouton PayPal.
    - on_approve: capture côté PayPal puis enregistrement backend via PaymentFlows.
    - on_cancel: état terminal silencieux (aucun appel backend, aucun callback),
      la sélection revient au widget principal.
    """

    def __init__(self, config: WalletConfig, flows: PaymentFlows, selector: MethodSelector):
        self.config = config
        self.flows = flows
        self.selector = selector

    async def create_order(self, data: Optional[Dict[str, Any]], actions: Any) -> str:
        """Le SDK rappelle onError sur l'échec: le callback d'erreur est notifié une seule fois, par on_error."""
        try:
            return await actions.order.create(build_order_request(self.config))
        except Exception as e:
            logger.error("checkout.wallet.create_order failed error=%s", e)
            raise

    async def on_approve(self, data: Dict[str, Any], actions: Any) -> None:
        provider_order_id = data.get("orderID")
        try:
            capture_details = await actions.order.capture()
            logger.info(
                "checkout.wallet order captured provider_order_id=%s status=%s",
                provider_order_id, (capture_details or {}).get("status"),
            )
        except Exception as e:
            logger.error("checkout.wallet.on_approve capture failed provider_order_id=%s error=%s", provider_order_id, e)
            self.flows.notify_error(e)
            return
        # settle_wallet_payment route lui-même ses erreurs vers le callback
        await self.flows.settle_wallet_payment(provider_order_id)

    def on_error(self, err: BaseException) -> None:
        logger.error("checkout.wallet provider error=%s", err)
        self.flows.notify_error(err)

    def on_cancel(self, data: Optional[Dict[str, Any]] = None) -> None:
        logger.info("checkout.wallet payment cancelled by shopper")
        self.selector.reset()

    def button_options(self) -> Dict[str, Any]:
        return {
            "fundingSource": "paypal",
            "style": dict(BUTTON_STYLE),
            "createOrder": self.create_order,
            "onApprove": self.on_approve,
            "onError": self.on_error,
            "onCancel": self.on_cancel,
        }
