"""
Module 'checkout' (feature-first): point d'entrée public côté client.
Réunit sélection du moyen de paiement, flux de confirmation, bouton PayPal,
adaptateur Stripe et client du processeur.
"""

from .models import (
    PaymentMode,
    ActiveMethod,
    PaymentIntentRef,
    SetupIntentRef,
    SubscriptionRef,
    WalletConfig,
    CaptureResponse,
    PaymentResult,
)
from .selector import MethodSelector, SelectionView, SelectionEvent
from .api import ProcessorApi
from .stripe_gateway import StripeService, intent_id_from_client_secret
from .flows import PaymentFlows, build_return_url
from .wallet import WalletButtonHandlers, build_order_request, sdk_url, format_amount
from .element import PaymentElementComponent, ComponentOptions

__all__ = [
    # models
    "PaymentMode",
    "ActiveMethod",
    "PaymentIntentRef",
    "SetupIntentRef",
    "SubscriptionRef",
    "WalletConfig",
    "CaptureResponse",
    "PaymentResult",
    # selector
    "MethodSelector",
    "SelectionView",
    "SelectionEvent",
    # processor / stripe
    "ProcessorApi",
    "StripeService",
    "intent_id_from_client_secret",
    # flows
    "PaymentFlows",
    "build_return_url",
    # wallet
    "WalletButtonHandlers",
    "build_order_request",
    "sdk_url",
    "format_amount",
    # widget
    "PaymentElementComponent",
    "ComponentOptions",
]
