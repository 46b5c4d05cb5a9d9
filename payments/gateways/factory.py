"""
Payment gateway factory.

Provides a centralized way to get payment gateway instances based on configuration.
Supports easy addition of new gateways without changing business logic.
"""

from typing import Optional
from django.conf import settings
from .base import BasePaymentGateway, GatewayException
from .mollie_gateway import MollieGateway


# Gateway registry - maps gateway names to their classes
GATEWAY_REGISTRY = {
    'mollie': MollieGateway,
}

# Settings holding the API key of each built-in gateway
GATEWAY_API_KEY_SETTINGS = {
    'mollie': 'MOLLIE_API_KEY',
}


def get_gateway(gateway_name: Optional[str] = None, api_key: Optional[str] = None) -> BasePaymentGateway:
    """
    Get a payment gateway instance.

    Args:
        gateway_name: Name of the gateway ('mollie', ...)
                     If None, uses DEFAULT_PAYMENT_GATEWAY from settings
        api_key: Explicit API key; read from settings when omitted

    Returns:
        Configured payment gateway instance

    Raises:
        GatewayException: If gateway is not supported or configuration is missing

    Example:
        >>> gateway = get_gateway('mollie')
        >>> result = gateway.get_transaction('tr_WDqYK6vllg')
    """
    # Use default gateway if none specified
    if gateway_name is None:
        gateway_name = getattr(settings, 'DEFAULT_PAYMENT_GATEWAY', 'mollie')

    gateway_name = gateway_name.lower().strip()

    if gateway_name not in GATEWAY_REGISTRY:
        supported = ', '.join(GATEWAY_REGISTRY.keys())
        raise GatewayException(
            message=f"Unsupported payment gateway: {gateway_name}. Supported gateways: {supported}",
            error_code='unsupported_gateway'
        )

    gateway_class = GATEWAY_REGISTRY[gateway_name]

    if api_key is None:
        setting_name = GATEWAY_API_KEY_SETTINGS.get(gateway_name)
        if setting_name is None:
            raise GatewayException(
                message=f"Configuration not found for gateway: {gateway_name}",
                error_code='gateway_config_missing'
            )

        try:
            api_key = getattr(settings, setting_name)
        except AttributeError as e:
            raise GatewayException(
                message=f"Missing configuration for {gateway_name}: {str(e)}",
                error_code='gateway_config_missing'
            )

    return gateway_class(api_key=api_key)


def register_gateway(name: str, gateway_class: type, api_key_setting: Optional[str] = None):
    """
    Register a new payment gateway.

    Allows adding custom payment gateways at runtime.

    Args:
        name: Gateway identifier (e.g., 'custom_gateway')
        gateway_class: Gateway class that extends BasePaymentGateway
        api_key_setting: Name of the Django setting holding its API key

    Example:
        >>> from myapp.gateways import CustomGateway
        >>> register_gateway('custom', CustomGateway, 'CUSTOM_API_KEY')
    """
    if not isinstance(gateway_class, type) or not issubclass(gateway_class, BasePaymentGateway):
        raise GatewayException(
            message="Gateway class must extend BasePaymentGateway",
            error_code='invalid_gateway_class'
        )

    GATEWAY_REGISTRY[name.lower()] = gateway_class
    if api_key_setting:
        GATEWAY_API_KEY_SETTINGS[name.lower()] = api_key_setting


def list_available_gateways():
    """
    List all registered payment gateways.

    Returns:
        List of gateway names
    """
    return list(GATEWAY_REGISTRY.keys())
