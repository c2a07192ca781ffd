"""
Orchestration des flux de paiement côté checkout.

submit():
  1) validation de la saisie du widget principal (erreur fournisseur => aucun appel backend)
  2) séquence selon le mode (table de dispatch):
     - payment:      intent backend -> confirmation Stripe -> confirmation backend
     - setup:        setup intent -> confirmation Stripe -> abonnement depuis le setup intent -> confirmation
     - subscription: abonnement backend (avec son client_secret) -> confirmation Stripe -> confirmation
  3) callback de complétion, ou callback d'erreur: jamais les deux, jamais aucun.
Aucune étape n'est rejouée automatiquement: le client resoumet lui-même.
"""
from typing import Any, Awaitable, Callable, Dict, Optional
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode
import logging

from .api import ProcessorApi
from .models import PaymentMode, PaymentResult
from .stripe_gateway import StripeService

logger = logging.getLogger(__name__)

CompleteCallback = Callable[[Dict[str, Any]], None]
ErrorCallback = Callable[[BaseException], None]


def build_return_url(merchant_return_url: str, params: Dict[str, str]) -> str:
    """Ajoute les paramètres de confirmation à l'URL de retour (en conservant sa query)."""
    parts = urlsplit(merchant_return_url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend(params.items())
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


class PaymentFlows:
    def __init__(
        self,
        api: ProcessorApi,
        stripe: StripeService,
        payment_mode: PaymentMode,
        *,
        on_complete: Optional[CompleteCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        navigate: Optional[Callable[[str], None]] = None,
    ):
        self.api = api
        self.stripe = stripe
        self.payment_mode = PaymentMode(payment_mode)
        self.on_complete = on_complete
        self.on_error = on_error
        self.navigate = navigate
        self._sequences: Dict[PaymentMode, Callable[[], Awaitable[PaymentResult]]] = {
            PaymentMode.PAYMENT: self.create_payment,
            PaymentMode.SUBSCRIPTION: self.create_subscription,
            PaymentMode.SETUP: self.create_setup_intent,
        }

    def notify_complete(self, result: PaymentResult) -> None:
        if self.on_complete:
            self.on_complete(result.to_dict())

    def notify_error(self, error: BaseException) -> None:
        if self.on_error:
            self.on_error(error)

    async def submit(self) -> None:
        try:
            submit_error = await self.stripe.submit_elements()
            if submit_error:
                raise submit_error
            result = await self._sequences[self.payment_mode]()
        except Exception as e:
            logger.warning("checkout.flows.submit failed mode=%s error=%s", self.payment_mode.value, e)
            self.notify_error(e)
            return
        self.notify_complete(result)

    async def create_payment(self) -> PaymentResult:
        ref = await self.api.get_payment()
        payment_intent_id = await self.stripe.confirm_payment(ref)
        await self.api.confirm_payment_intent(payment_intent_id, ref.payment_reference)
        return PaymentResult(payment_reference=ref.payment_reference, payment_intent=payment_intent_id)

    async def create_setup_intent(self) -> PaymentResult:
        setup = await self.api.create_setup_intent()
        setup_intent_id = await self.stripe.confirm_setup_intent(setup)
        subscription = await self.api.create_subscription_from_setup_intent(setup_intent_id)
        await self.api.confirm_subscription_payment(subscription.subscription_id, subscription.payment_reference)
        return PaymentResult(payment_reference=subscription.payment_reference, payment_intent=setup_intent_id)

    async def create_subscription(self) -> PaymentResult:
        subscription = await self.api.create_subscription()
        payment_intent_id = await self.stripe.confirm_payment(subscription)
        await self.api.confirm_subscription_payment(
            subscription.subscription_id, subscription.payment_reference, payment_intent_id
        )
        return PaymentResult(payment_reference=subscription.payment_reference, payment_intent=payment_intent_id)

    async def settle_wallet_payment(self, provider_order_id: str) -> Optional[PaymentResult]:
        """
        Après la capture PayPal côté navigateur: enregistrement backend (paiement + commande),
        callback de complétion puis redirection vers l'URL de retour marchand si fournie.
        """
        try:
            capture = await self.api.capture_paypal_order(provider_order_id)
        except Exception as e:
            logger.error("checkout.flows.settle_wallet_payment failed provider_order_id=%s error=%s", provider_order_id, e)
            self.notify_error(e)
            return None

        result = PaymentResult(
            payment_reference=capture.payment_reference,
            payment_intent=provider_order_id,
            order_id=capture.order_id,
            order_number=capture.order_number,
        )
        self.notify_complete(result)

        if capture.merchant_return_url:
            url = build_return_url(capture.merchant_return_url, {
                "paymentReference": capture.payment_reference or "",
                "orderId": capture.order_id or "",
                "orderNumber": capture.order_number or "",
                "paymentMethod": "paypal",
                "status": "completed",
            })
            logger.info("checkout.flows wallet order created, redirecting url=%s", url)
            if self.navigate:
                self.navigate(url)
        return result
