"""
Base classes for payment gateway abstraction.

This module defines the interface that all payment gateways must implement,
together with the normalized value types passed into and returned from every
gateway operation. Gateways translate these into provider-specific requests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields, asdict
from decimal import Decimal
from typing import Optional, Dict, Any, Mapping, Type, TypeVar, Union


# Normalized transaction statuses shared by every gateway
STATUS_PENDING = 'pending'
STATUS_AUTHORIZED = 'authorized'
STATUS_SETTLED = 'settled'
STATUS_FAILED = 'failed'
STATUS_VOIDED = 'voided'
STATUS_UNKNOWN = 'unknown'

NORMALIZED_STATUSES = frozenset({
    STATUS_PENDING,
    STATUS_AUTHORIZED,
    STATUS_SETTLED,
    STATUS_FAILED,
    STATUS_VOIDED,
    STATUS_UNKNOWN,
})

DEFAULT_CURRENCY = 'EUR'


class GatewayException(Exception):
    """
    Custom exception for payment gateway errors.

    Raised when a gateway cannot be configured or instantiated. Errors coming
    back from a provider are not wrapped in this exception.
    """
    def __init__(self, message: str, error_code: Optional[str] = None, gateway_response: Optional[Dict] = None):
        self.message = message
        self.error_code = error_code
        self.gateway_response = gateway_response
        super().__init__(self.message)


# Inputs

@dataclass(frozen=True)
class Order:
    """
    Order being paid for.

    Attributes:
        amount: Amount in major currency units (e.g. 10.00)
        currency: ISO 4217 currency code
        order_id: Merchant-side order identifier
    """
    amount: Decimal
    currency: str = DEFAULT_CURRENCY
    order_id: Optional[str] = None


@dataclass(frozen=True)
class Prospect:
    """Customer details used for metadata and customer records."""
    customer_first_name: Optional[str] = None
    customer_last_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.customer_first_name or ''} {self.customer_last_name or ''}".strip()


@dataclass(frozen=True)
class CreditCard:
    """
    Card details.

    Hosted-checkout providers never receive card data; the type exists so
    every gateway shares one signature.
    """
    number: Optional[str] = None
    expiration_month: Optional[str] = None
    expiration_year: Optional[str] = None
    cvv: Optional[str] = None
    holder_name: Optional[str] = None


@dataclass(frozen=True)
class SubscriptionPlan:
    """
    Recurring billing plan.

    Attributes:
        id: Plan identifier, stored in subscription metadata
        amount: Amount charged every period
        currency: ISO 4217 currency code
        period_length: Number of units between charges
        period_unit: 'days', 'weeks', 'months' or 'years'
        description: Description shown on the provider dashboard
    """
    id: Optional[str]
    amount: Decimal
    currency: str = DEFAULT_CURRENCY
    period_length: Union[int, str, None] = 1
    period_unit: str = 'months'
    description: str = 'Subscription'


# Per-operation options

OptionsT = TypeVar('OptionsT', bound='GatewayOptions')


def _snake_case(name: str) -> str:
    return ''.join(f"_{c.lower()}" if c.isupper() else c for c in name)


@dataclass(frozen=True)
class GatewayOptions:
    """Base class for the option structures accepted by gateway operations."""

    @classmethod
    def coerce(cls: Type[OptionsT], options: Union[OptionsT, Mapping[str, Any], None]) -> OptionsT:
        """
        Build options from an instance, a mapping or None.

        Options of another operation keep only the fields this one shares.

        Mapping keys may be snake_case or camelCase ('webhookUrl').
        Unrecognized keys are ignored.
        """
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if isinstance(options, GatewayOptions):
            options = asdict(options)

        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in options.items():
            name = _snake_case(key)
            if name in known:
                values[name] = value
        return cls(**values)


@dataclass(frozen=True)
class PaymentOptions(GatewayOptions):
    """
    Options for creating a payment.

    Attributes:
        payment_method: Provider payment method (e.g. 'ideal', 'creditcard')
        description: Payment description; a generated one is used if omitted
        redirect_url: URL the customer returns to after checkout
        webhook_url: URL the provider calls on status changes
    """
    payment_method: Optional[str] = None
    description: Optional[str] = None
    redirect_url: Optional[str] = None
    webhook_url: Optional[str] = None


@dataclass(frozen=True)
class RefundOptions(GatewayOptions):
    """Options for refunds. Omitting amount refunds the full payment."""
    amount: Optional[Decimal] = None
    currency: str = DEFAULT_CURRENCY
    description: Optional[str] = None


@dataclass(frozen=True)
class CustomerOptions(GatewayOptions):
    metadata: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class SubscriptionOptions(GatewayOptions):
    """
    Options for subscriptions.

    Attributes:
        customer_id: Existing provider customer; a new one is created if omitted
        webhook_url: URL the provider calls for every subscription payment
        metadata: Metadata for the customer created on the fly
    """
    customer_id: Optional[str] = None
    webhook_url: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


# Results

@dataclass
class TransactionResult:
    """
    Standardized result of a payment, refund or cancellation.

    Attributes:
        transaction_id: Provider id of the payment (or refund)
        success: Whether the operation reached its goal
        amount: Amount of the payment or refund
        status: One of NORMALIZED_STATUSES
        checkout_url: Redirect target for hosted checkout
        captured: Whether funds have been collected
        payment_id: Original payment id (refunds)
        profile_id: Customer profile charged (saved-customer charges)
        message: Provider message when an operation was refused
        gateway_response: Raw provider object for callers needing provider detail
    """
    transaction_id: str
    success: bool
    amount: Optional[Decimal] = None
    status: str = STATUS_UNKNOWN
    checkout_url: Optional[str] = None
    captured: bool = False
    payment_id: Optional[str] = None
    profile_id: Optional[str] = None
    message: Optional[str] = None
    gateway_response: Optional[Any] = field(default=None, repr=False)


@dataclass
class SubscriptionResult:
    subscription_id: str
    customer_id: str
    plan_id: Optional[str]
    status: Optional[str]
    success: bool
    gateway_response: Optional[Any] = field(default=None, repr=False)


@dataclass
class CustomerProfileResult:
    profile_id: str
    success: bool
    gateway_response: Optional[Any] = field(default=None, repr=False)


OptionsArg = Union[GatewayOptions, Mapping[str, Any], None]


class BasePaymentGateway(ABC):
    """
    Abstract base class for payment gateway implementations.

    All payment gateways must implement these methods to ensure consistent
    behavior across different providers. Provider errors propagate to the
    caller unchanged.

    Methods:
        - Transactions (submit, authorize, get, refund, void)
        - Recurring billing (create subscription)
        - Saved customers (create profile, charge profile)
    """

    def __init__(self, api_key: str):
        """
        Initialize the payment gateway.

        Args:
            api_key: Secret API key
        """
        self.api_key = api_key

    # Transactions

    @abstractmethod
    def submit_transaction(
        self,
        order: Order,
        credit_card: Optional[CreditCard],
        prospect: Optional[Prospect],
        options: OptionsArg = None
    ) -> TransactionResult:
        """
        Create and submit a payment.

        Returns:
            TransactionResult for the created payment
        """
        pass

    @abstractmethod
    def authorize_transaction(
        self,
        order: Order,
        credit_card: Optional[CreditCard],
        prospect: Optional[Prospect],
        options: OptionsArg = None
    ) -> TransactionResult:
        """
        Authorize a payment without capturing funds.

        Returns:
            TransactionResult for the authorized payment
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> TransactionResult:
        """
        Retrieve a payment.

        Args:
            transaction_id: Gateway payment ID
        """
        pass

    @abstractmethod
    def refund_transaction(self, transaction_id: str, options: OptionsArg = None) -> TransactionResult:
        """
        Refund a payment, fully or partially.

        Returns:
            TransactionResult with the refund id as transaction_id and the
            original payment id as payment_id
        """
        pass

    @abstractmethod
    def void_transaction(self, transaction_id: str, options: OptionsArg = None) -> TransactionResult:
        """
        Cancel a payment that has not been paid yet.

        Returns:
            TransactionResult; success is False with a message when the
            provider refuses the cancellation
        """
        pass

    # Recurring billing

    @abstractmethod
    def create_subscription(
        self,
        credit_card: Optional[CreditCard],
        prospect: Optional[Prospect],
        subscription_plan: SubscriptionPlan,
        options: OptionsArg = None
    ) -> SubscriptionResult:
        """
        Create a subscription, creating a customer first when needed.
        """
        pass

    # Saved customers

    @abstractmethod
    def create_customer_profile(
        self,
        credit_card: Optional[CreditCard],
        prospect: Optional[Prospect],
        options: OptionsArg = None
    ) -> CustomerProfileResult:
        """
        Create a customer profile for future charges.
        """
        pass

    @abstractmethod
    def charge_customer(
        self,
        profile_id: str,
        payment_profile_id: Optional[str],
        order: Order,
        options: OptionsArg = None
    ) -> TransactionResult:
        """
        Charge a saved customer profile.

        Args:
            profile_id: Gateway customer ID
            payment_profile_id: Gateway payment profile/mandate ID, if the provider uses one
            order: Order being charged
        """
        pass
