"""
Client async (httpx) du processeur de paiement, utilisé par le checkout.
Chaque appel porte l'en-tête X-Session-Id de la session de paiement.
"""
from typing import Any, Dict, Optional
import logging
import httpx

from payconnect.errors import BackendRejectionError
from payconnect.utils.security import SESSION_HEADER
from .models import PaymentIntentRef, SetupIntentRef, SubscriptionRef, WalletConfig, CaptureResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0


class ProcessorApi:
    def __init__(
        self,
        base_url: str,
        session_id: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.session_id = session_id
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def _request(self, method: str, path: str, *, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers = {SESSION_HEADER: self.session_id, "Content-Type": "application/json"}
        resp = await self._client.request(method, path, json=json, headers=headers)
        if resp.status_code >= 400:
            logger.warning("checkout.api %s %s failed status=%s", method, path, resp.status_code)
            body = None
            try:
                body = resp.json()
            except ValueError:
                pass
            # Erreur rendue par le processeur: {"status": "ERROR", "code", "detail"}
            if isinstance(body, dict) and body.get("detail") and not body.get("message"):
                raise BackendRejectionError(str(body["detail"]), backend_status=resp.status_code)
            raise BackendRejectionError.from_response(resp, fallback=f"{method} {path} failed")
        if not resp.content:
            return {}
        return resp.json()

    async def get_payment(self) -> PaymentIntentRef:
        return PaymentIntentRef.model_validate(await self._request("GET", "/payments"))

    async def confirm_payment_intent(self, payment_intent_id: str, payment_reference: str) -> None:
        await self._request(
            "POST",
            "/confirmPayments",
            json={"paymentIntentId": payment_intent_id, "paymentReference": payment_reference},
        )

    async def create_setup_intent(self) -> SetupIntentRef:
        return SetupIntentRef.model_validate(await self._request("POST", "/setupIntent"))

    async def create_subscription_from_setup_intent(self, setup_intent_id: str) -> SubscriptionRef:
        data = await self._request("POST", "/subscription/withSetupIntent", json={"setupIntentId": setup_intent_id})
        return SubscriptionRef.model_validate(data)

    async def create_subscription(self) -> SubscriptionRef:
        return SubscriptionRef.model_validate(await self._request("POST", "/subscription"))

    async def confirm_subscription_payment(
        self,
        subscription_id: str,
        payment_reference: str,
        payment_intent_id: Optional[str] = None,
    ) -> None:
        payload: Dict[str, Any] = {"subscriptionId": subscription_id, "paymentReference": payment_reference}
        if payment_intent_id:
            payload["paymentIntentId"] = payment_intent_id
        await self._request("POST", "/subscription/confirm", json=payload)

    async def get_paypal_config(self) -> WalletConfig:
        return WalletConfig.model_validate(await self._request("GET", "/paypal/config"))

    async def capture_paypal_order(self, provider_order_id: str) -> CaptureResponse:
        data = await self._request("POST", f"/paypal/orders/{provider_order_id}/capture")
        return CaptureResponse.model_validate(data)

    async def aclose(self) -> None:
        await self._client.aclose()
