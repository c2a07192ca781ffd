"""
Adaptateur Stripe côté checkout.
- submit_elements(): valide la saisie du widget principal (aucun appel backend).
- confirm_payment() / confirm_setup_intent(): confirment l'intent avec la clé
  publique et le client_secret émis par le backend, retournent l'id de confirmation.
Le SDK stripe est synchrone: les appels passent par asyncio.to_thread.
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Union

import stripe

from payconnect import config
from payconnect.errors import ProviderValidationError
from .models import PaymentIntentRef, SetupIntentRef, SubscriptionRef

logger = logging.getLogger(__name__)

SECRET_SEPARATOR = "_secret_"
# Seuls statuts considérés comme confirmés (requires_action, requires_confirmation... => échec)
PAYMENT_INTENT_CONFIRMED = frozenset({"succeeded", "processing"})
SETUP_INTENT_CONFIRMED = frozenset({"succeeded"})


def intent_id_from_client_secret(client_secret: str) -> str:
    """'pi_123_secret_abc' -> 'pi_123'"""
    if not client_secret or SECRET_SEPARATOR not in client_secret:
        raise ProviderValidationError("client_secret invalide")
    return client_secret.split(SECRET_SEPARATOR, 1)[0]


class StripeService:
    def __init__(self, elements: Any, *, publishable_key: Optional[str] = None):
        """
        elements: widget principal exposant `async submit() -> {"error"?, "paymentMethod"?}`.
        """
        self.elements = elements
        self.publishable_key = publishable_key or config.STRIPE_PUBLISHABLE_KEY
        self._payment_method: Optional[str] = None

    async def submit_elements(self) -> Optional[ProviderValidationError]:
        result = await self.elements.submit() or {}
        error = result.get("error")
        if error:
            if isinstance(error, dict):
                return ProviderValidationError(
                    error.get("message") or "Saisie refusée par le fournisseur",
                    provider_code=error.get("code"),
                )
            return ProviderValidationError(str(error))
        self._payment_method = result.get("paymentMethod")
        return None

    def _confirm_params(self, client_secret: str, merchant_return_url: Optional[str]) -> Dict[str, Any]:
        params: Dict[str, Any] = {"client_secret": client_secret, "api_key": self.publishable_key}
        if self._payment_method:
            params["payment_method"] = self._payment_method
        if merchant_return_url:
            params["return_url"] = merchant_return_url
        return params

    async def _confirm(
        self,
        resource,
        client_secret: Optional[str],
        merchant_return_url: Optional[str],
        confirmed_statuses: frozenset,
    ) -> str:
        intent_id = intent_id_from_client_secret(client_secret or "")
        try:
            intent = await asyncio.to_thread(
                resource.confirm, intent_id, **self._confirm_params(client_secret, merchant_return_url)
            )
        except stripe.CardError as e:
            raise ProviderValidationError(e.user_message or str(e), provider_code=e.code) from e
        status = intent.get("status")
        if status not in confirmed_statuses:
            logger.warning("checkout.stripe_gateway intent not confirmed intent_id=%s status=%s", intent.get("id"), status)
            raise ProviderValidationError(f"Paiement non confirmé (status={status})", provider_code=status)
        logger.info("checkout.stripe_gateway confirmed intent_id=%s status=%s", intent["id"], intent.get("status"))
        return intent["id"]

    async def confirm_payment(self, ref: Union[PaymentIntentRef, SubscriptionRef]) -> str:
        return await self._confirm(stripe.PaymentIntent, ref.client_secret, ref.merchant_return_url, PAYMENT_INTENT_CONFIRMED)

    async def confirm_setup_intent(self, ref: SetupIntentRef) -> str:
        return await self._confirm(stripe.SetupIntent, ref.client_secret, ref.merchant_return_url, SETUP_INTENT_CONFIRMED)
