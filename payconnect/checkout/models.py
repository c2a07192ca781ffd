"""
Modèles côté client (checkout): modes de paiement, sélection active et
réponses du processeur (JSON camelCase).
"""
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PaymentMode(str, Enum):
    """Forme de la transaction, fixée à la construction du flux."""
    PAYMENT = "payment"
    SUBSCRIPTION = "subscription"
    SETUP = "setup"


class ActiveMethod(str, Enum):
    PRIMARY_WIDGET = "primary-widget"
    ALTERNATIVE_WALLET = "alternative-wallet"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class PaymentIntentRef(_CamelModel):
    """Référence émise par le backend pour une soumission; consommée une seule fois."""
    payment_reference: str
    client_secret: Optional[str] = None
    merchant_return_url: Optional[str] = None
    billing_address: Optional[Dict[str, Any]] = None
    cart_id: Optional[str] = None


class SetupIntentRef(_CamelModel):
    client_secret: str
    merchant_return_url: Optional[str] = None
    billing_address: Optional[Dict[str, Any]] = None


class SubscriptionRef(_CamelModel):
    subscription_id: str
    payment_reference: str
    client_secret: Optional[str] = None
    merchant_return_url: Optional[str] = None
    billing_address: Optional[Dict[str, Any]] = None
    cart_id: Optional[str] = None


class WalletConfig(_CamelModel):
    client_id: str = ""
    environment: str = "sandbox"
    currency: str
    amount: int


class CaptureResponse(_CamelModel):
    """Réponse de la route de capture PayPal du processeur."""
    is_success: bool = True
    status: Optional[str] = None
    provider_order_id: Optional[str] = None
    payment_reference: str
    order_id: Optional[str] = None
    order_number: Optional[str] = None
    merchant_return_url: Optional[str] = None


class PaymentResult(_CamelModel):
    """
    Résultat remis au callback de complétion (une fois par soumission réussie).
    payment_intent: id de confirmation du fournisseur (intent Stripe ou order PayPal).
    """
    is_success: bool = True
    payment_reference: str
    payment_intent: str
    order_id: Optional[str] = None
    order_number: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
