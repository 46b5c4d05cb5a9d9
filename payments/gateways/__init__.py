"""
Payment gateway abstraction layer.

Provides a unified interface for interacting with different payment providers.
"""

from .base import (
    BasePaymentGateway,
    GatewayException,
    Order,
    Prospect,
    CreditCard,
    SubscriptionPlan,
    PaymentOptions,
    RefundOptions,
    CustomerOptions,
    SubscriptionOptions,
    TransactionResult,
    SubscriptionResult,
    CustomerProfileResult,
)
from .mappers import map_status, format_interval
from .mollie_gateway import MollieGateway
from .factory import get_gateway, register_gateway, list_available_gateways

__all__ = [
    'BasePaymentGateway',
    'GatewayException',
    'Order',
    'Prospect',
    'CreditCard',
    'SubscriptionPlan',
    'PaymentOptions',
    'RefundOptions',
    'CustomerOptions',
    'SubscriptionOptions',
    'TransactionResult',
    'SubscriptionResult',
    'CustomerProfileResult',
    'map_status',
    'format_interval',
    'MollieGateway',
    'get_gateway',
    'register_gateway',
    'list_available_gateways',
]
