"""
Tests for payment gateway factory.

Tests cover:
- Gateway selection based on configuration
- Gateway registration
- Error handling for unsupported gateways
- Configuration validation
"""

import pytest
from unittest.mock import patch
from django.conf import settings

from payments.gateways.factory import (
    get_gateway,
    register_gateway,
    list_available_gateways,
    GATEWAY_REGISTRY,
    GATEWAY_API_KEY_SETTINGS,
)
from payments.gateways.base import BasePaymentGateway, GatewayException
from payments.gateways.mollie_gateway import MollieGateway


class DummyGateway(BasePaymentGateway):
    """Minimal gateway used to exercise the registry"""

    def submit_transaction(self, order, credit_card, prospect, options=None):
        pass

    def authorize_transaction(self, order, credit_card, prospect, options=None):
        pass

    def get_transaction(self, transaction_id):
        pass

    def refund_transaction(self, transaction_id, options=None):
        pass

    def void_transaction(self, transaction_id, options=None):
        pass

    def create_subscription(self, credit_card, prospect, subscription_plan, options=None):
        pass

    def create_customer_profile(self, credit_card, prospect, options=None):
        pass

    def charge_customer(self, profile_id, payment_profile_id, order, options=None):
        pass


@pytest.fixture(autouse=True)
def mock_mollie_client():
    """Keep the real Mollie client out of factory tests"""
    with patch('payments.gateways.mollie_gateway.Client') as mock_client:
        yield mock_client


@pytest.fixture(autouse=True)
def mollie_api_key(settings):
    """Configure a Mollie key, which is unset by default"""
    settings.MOLLIE_API_KEY = 'test_settingskey'
    return settings.MOLLIE_API_KEY


@pytest.fixture
def registry():
    """Restore the gateway registry after a test changes it"""
    original_registry = dict(GATEWAY_REGISTRY)
    original_settings = dict(GATEWAY_API_KEY_SETTINGS)
    yield GATEWAY_REGISTRY
    GATEWAY_REGISTRY.clear()
    GATEWAY_REGISTRY.update(original_registry)
    GATEWAY_API_KEY_SETTINGS.clear()
    GATEWAY_API_KEY_SETTINGS.update(original_settings)


class TestGetGateway:
    """Tests for get_gateway function"""

    def test_get_mollie_gateway_explicit(self, mock_mollie_client):
        """Test getting Mollie gateway by name"""
        gateway = get_gateway('mollie')

        assert isinstance(gateway, MollieGateway)
        assert gateway.api_key == settings.MOLLIE_API_KEY
        mock_mollie_client.return_value.set_api_key.assert_called_once_with(settings.MOLLIE_API_KEY)

    def test_get_mollie_gateway_case_insensitive(self):
        """Test gateway name is case-insensitive and ignores whitespace"""
        gateways = [get_gateway('MOLLIE'), get_gateway('Mollie'), get_gateway('  mollie  ')]

        assert all(isinstance(g, MollieGateway) for g in gateways)

    @patch.object(settings, 'DEFAULT_PAYMENT_GATEWAY', 'mollie')
    def test_get_gateway_uses_default(self):
        """Test getting gateway without specifying name uses default"""
        gateway = get_gateway()

        assert isinstance(gateway, MollieGateway)

    def test_get_gateway_explicit_api_key(self):
        """Test an explicit API key overrides settings"""
        gateway = get_gateway('mollie', api_key='test_explicitkey')

        assert gateway.api_key == 'test_explicitkey'

    def test_get_unsupported_gateway(self):
        """Test error when requesting unsupported gateway"""
        with pytest.raises(GatewayException) as exc_info:
            get_gateway('unsupported_gateway')

        assert 'Unsupported payment gateway' in str(exc_info.value)
        assert exc_info.value.error_code == 'unsupported_gateway'
        assert 'mollie' in str(exc_info.value).lower()

    def test_get_gateway_missing_config(self, settings):
        """Test error when the API key setting is missing"""
        del settings.MOLLIE_API_KEY

        with pytest.raises(GatewayException) as exc_info:
            get_gateway('mollie')

        assert 'Missing configuration' in str(exc_info.value)
        assert exc_info.value.error_code == 'gateway_config_missing'

    def test_get_gateway_empty_api_key(self, settings):
        """Test an empty API key setting fails gateway construction"""
        settings.MOLLIE_API_KEY = ''

        with pytest.raises(GatewayException) as exc_info:
            get_gateway('mollie')

        assert 'apiKey is required' in str(exc_info.value)

    def test_get_gateway_unset_api_key(self, settings, mock_mollie_client):
        """Test an unset API key is reported instead of using a placeholder"""
        settings.MOLLIE_API_KEY = None

        with pytest.raises(GatewayException) as exc_info:
            get_gateway('mollie')

        assert 'apiKey is required' in str(exc_info.value)
        assert exc_info.value.error_code == 'gateway_config_missing'
        mock_mollie_client.assert_not_called()

    def test_default_settings_leave_api_key_unset(self, monkeypatch):
        """Test the settings module has no built-in Mollie key"""
        import importlib
        import config.settings

        monkeypatch.delenv('MOLLIE_API_KEY', raising=False)
        reloaded = importlib.reload(config.settings)

        assert reloaded.MOLLIE_API_KEY is None

    def test_registered_gateway_without_key_setting(self, registry):
        """Test error when a custom gateway has no configured key setting"""
        register_gateway('dummy', DummyGateway)

        with pytest.raises(GatewayException) as exc_info:
            get_gateway('dummy')

        assert exc_info.value.error_code == 'gateway_config_missing'

    def test_registered_gateway_with_key_setting(self, registry, settings):
        settings.DUMMY_API_KEY = 'dummy_key'
        register_gateway('dummy', DummyGateway, 'DUMMY_API_KEY')

        gateway = get_gateway('dummy')

        assert isinstance(gateway, DummyGateway)
        assert gateway.api_key == 'dummy_key'


class TestRegisterGateway:
    """Tests for register_gateway function"""

    def test_register_custom_gateway(self, registry):
        """Test registering a custom gateway"""
        register_gateway('Custom', DummyGateway)

        assert registry['custom'] is DummyGateway
        assert 'custom' in list_available_gateways()

    def test_register_gateway_invalid_class(self, registry):
        """Test registering gateway with invalid class"""
        class NotAGateway:
            pass

        with pytest.raises(GatewayException) as exc_info:
            register_gateway('invalid', NotAGateway)

        assert 'must extend BasePaymentGateway' in str(exc_info.value)
        assert exc_info.value.error_code == 'invalid_gateway_class'
        assert 'invalid' not in registry

    def test_register_gateway_rejects_instances(self, registry):
        with pytest.raises(GatewayException):
            register_gateway('instance', object())

    def test_register_gateway_overwrites_existing(self, registry):
        """Test that registering gateway with existing name overwrites"""
        register_gateway('mollie', DummyGateway)

        assert registry['mollie'] is DummyGateway


class TestGatewayRegistry:
    """Tests for gateway registry behavior"""

    def test_registry_contains_mollie(self):
        """Test that registry contains Mollie by default"""
        assert GATEWAY_REGISTRY['mollie'] is MollieGateway
        assert 'mollie' in list_available_gateways()

    def test_registry_keys_are_lowercase(self):
        for key in GATEWAY_REGISTRY.keys():
            assert key == key.lower()

    def test_gateway_has_all_required_methods(self):
        """Test that gateway has all required BasePaymentGateway methods"""
        gateway = get_gateway('mollie')

        required_methods = [
            'submit_transaction',
            'authorize_transaction',
            'get_transaction',
            'refund_transaction',
            'void_transaction',
            'create_subscription',
            'create_customer_profile',
            'charge_customer',
        ]

        for method_name in required_methods:
            assert callable(getattr(gateway, method_name))
