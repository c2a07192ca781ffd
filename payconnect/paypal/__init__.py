"""
Module 'paypal' (feature-first): point d'entrée public.
Réunit configuration du bouton PayPal, schémas de réponse et règlement côté backend.
"""

from .models import PayPalConfigResponse, SettlementResult, PaymentComponent, SupportedPaymentComponents
from .service import (
    get_config,
    get_supported_payment_components,
    build_payment_draft,
    settle_paypal_order,
)

__all__ = [
    # models
    "PayPalConfigResponse",
    "SettlementResult",
    "PaymentComponent",
    "SupportedPaymentComponents",
    # services
    "get_config",
    "get_supported_payment_components",
    "build_payment_draft",
    "settle_paypal_order",
]
