"""
Schémas de réponse de la feature 'paypal' (JSON en camelCase côté client).
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PayPalConfigResponse(_CamelModel):
    client_id: str
    environment: str
    currency: str
    amount: int


class SettlementResult(_CamelModel):
    """Résultat d'un règlement PayPal enregistré dans le backend commerce."""
    is_success: bool = True
    status: str = "COMPLETED"
    provider_order_id: str
    payment_reference: str
    order_id: str
    order_number: Optional[str] = None
    merchant_return_url: Optional[str] = None


class PaymentComponent(_CamelModel):
    type: str


class SupportedPaymentComponents(_CamelModel):
    dropins: List[PaymentComponent] = []
    components: List[PaymentComponent] = []
