"""
Module 'commerce' (feature-first): point d'entrée public.
Réunit les appels panier/paiement/session et la création de commandes.
"""

from .repository import (
    request_json,
    get_cart,
    get_payment_amount,
    create_payment,
    add_payment,
    get_session,
)
from .orders import create_order_from_cart, add_order_payment

__all__ = [
    # repository
    "request_json",
    "get_cart",
    "get_payment_amount",
    "create_payment",
    "add_payment",
    "get_session",
    # orders
    "create_order_from_cart",
    "add_order_payment",
]
