
from fastapi import APIRouter, Depends, HTTPException

from payconnect.errors import PaymentError
from payconnect.utils.context import SessionContext
from payconnect.utils.security import require_session
from payconnect.utils.rate_limit import optional_rate_limit
from payconnect.paypal import service
from payconnect.paypal.models import PayPalConfigResponse, SettlementResult, SupportedPaymentComponents

router = APIRouter(tags=["PayPal API"])

# module payconnect.paypal.views
@router.get("/paypal/config", response_model=PayPalConfigResponse)
async def paypal_config(ctx: SessionContext = Depends(require_session)):
    """
    Configuration du bouton PayPal pour le panier de la session.
    - clientId vide: PayPal non configuré, le front se limite au widget principal.
    """
    return service.get_config()

@router.get("/operations/payment-components", response_model=SupportedPaymentComponents)
async def payment_components(ctx: SessionContext = Depends(require_session)):
    return service.get_supported_payment_components()

@router.post(
    "/paypal/orders/{order_id}/capture",
    response_model=SettlementResult,
    dependencies=[Depends(optional_rate_limit(times=10, seconds=60))],
)
async def capture_paypal_order(order_id: str, ctx: SessionContext = Depends(require_session)):
    """
    Enregistre une commande PayPal déjà capturée par le SDK côté navigateur.
    - Sécurité: require_session + rate limit (10 req / 60s)
    - Erreurs métier (PaymentError): rendues par le handler global avec status ERROR
    """
    order_id = (order_id or "").strip()
    if not order_id:
        raise HTTPException(status_code=400, detail="orderId manquant")
    try:
        return service.settle_paypal_order(order_id)
    except (HTTPException, PaymentError):
        raise
    except Exception:
        # Détail générique: l'erreur est déjà journalisée par le service
        raise HTTPException(status_code=500, detail="Erreur lors de l'enregistrement du paiement")
