"""
Mollie payment gateway implementation.

Implements the BasePaymentGateway interface for Mollie, handling payments,
refunds, cancellations, customers and subscriptions.
"""

import logging
import time
from typing import Optional, Dict, Any

from mollie.api.client import Client
from mollie.api.error import UnprocessableEntityError

from .base import (
    BasePaymentGateway,
    GatewayException,
    TransactionResult,
    SubscriptionResult,
    CustomerProfileResult,
    Order,
    Prospect,
    CreditCard,
    SubscriptionPlan,
    PaymentOptions,
    RefundOptions,
    CustomerOptions,
    SubscriptionOptions,
    OptionsArg,
    DEFAULT_CURRENCY,
)
from .mappers import map_status, map_refund_status, format_interval, parse_amount, money

logger = logging.getLogger(__name__)

MOLLIE_PAID = 'paid'
MOLLIE_AUTHORIZED = 'authorized'
MOLLIE_CANCELED = 'canceled'

NOT_CANCELABLE_MESSAGE = 'cannot be canceled'


def is_not_cancelable_error(error: Exception) -> bool:
    """
    Check whether a cancel call failed because of the payment's state.

    Mollie answers a cancel on a non-cancelable payment with HTTP 422. Errors
    without that signal are matched on their message.
    """
    if isinstance(error, UnprocessableEntityError):
        return True
    return NOT_CANCELABLE_MESSAGE in str(error)


class MollieGateway(BasePaymentGateway):
    """
    Mollie gateway implementation.

    Mollie payments are completed through a hosted checkout, so card data is
    never sent and new payments are never captured at creation time.
    """

    def __init__(self, api_key: Optional[str] = None):
        """
        Initialize Mollie client.

        Args:
            api_key: Mollie API key (starts with test_ or live_)
        """
        if not api_key:
            raise GatewayException(
                message="apiKey is required for Mollie gateway",
                error_code='gateway_config_missing'
            )
        super().__init__(api_key)
        self.client = Client()
        self.client.set_api_key(api_key)

    # Transactions

    def submit_transaction(
        self,
        order: Order,
        credit_card: Optional[CreditCard],
        prospect: Optional[Prospect],
        options: OptionsArg = None
    ) -> TransactionResult:
        """
        Create a Mollie payment.

        The customer completes the payment at the returned checkout URL.
        """
        options = PaymentOptions.coerce(options)
        payment_data = self._build_payment_data(order, options)

        metadata = {}
        if prospect is not None:
            if prospect.full_name:
                metadata['customerName'] = prospect.full_name
            if prospect.customer_email:
                metadata['customerEmail'] = prospect.customer_email
        if order.order_id:
            metadata['orderId'] = order.order_id
        payment_data['metadata'] = metadata

        payment = self._create_payment(payment_data)

        return TransactionResult(
            transaction_id=payment.id,
            amount=order.amount,
            status=map_status(payment.status),
            checkout_url=payment.checkout_url,
            captured=False,
            success=payment.status == MOLLIE_PAID,
            gateway_response=payment
        )

    def authorize_transaction(
        self,
        order: Order,
        credit_card: Optional[CreditCard],
        prospect: Optional[Prospect],
        options: OptionsArg = None
    ) -> TransactionResult:
        """
        Authorize a payment.

        Mollie has no separate authorization step, so this creates a payment
        exactly like submit_transaction.
        """
        return self.submit_transaction(order, credit_card, prospect, options)

    def get_transaction(self, transaction_id: str) -> TransactionResult:
        """
        Retrieve a Mollie payment.
        """
        payment = self.client.payments.get(transaction_id)

        return TransactionResult(
            transaction_id=payment.id,
            amount=parse_amount(payment.amount['value']),
            status=map_status(payment.status),
            captured=payment.status == MOLLIE_PAID,
            success=payment.status in (MOLLIE_PAID, MOLLIE_AUTHORIZED),
            gateway_response=payment
        )

    def refund_transaction(self, transaction_id: str, options: OptionsArg = None) -> TransactionResult:
        """
        Refund a Mollie payment.

        Without an amount the full payment is refunded.
        """
        options = RefundOptions.coerce(options)

        refund_data = {}
        if options.amount:
            refund_data['amount'] = money(options.amount, options.currency or DEFAULT_CURRENCY)
        if options.description:
            refund_data['description'] = options.description

        payment = self.client.payments.get(transaction_id)
        try:
            refund = payment.refunds.create(refund_data)
        except Exception as e:
            logger.warning(
                "Failed to refund Mollie payment",
                extra={'payment_id': transaction_id, 'error': str(e)}
            )
            raise

        logger.info(
            "Refunded Mollie payment",
            extra={'payment_id': transaction_id, 'refund_id': refund.id}
        )

        return TransactionResult(
            transaction_id=refund.id,
            payment_id=transaction_id,
            amount=parse_amount(refund.amount['value']),
            status=map_refund_status(refund.status),
            success=True,
            gateway_response=refund
        )

    def void_transaction(self, transaction_id: str, options: OptionsArg = None) -> TransactionResult:
        """
        Cancel a Mollie payment.

        Mollie only allows canceling payments that have not been paid yet;
        a refused cancellation is reported as an unsuccessful result.
        """
        try:
            payment = self.client.payments.get(transaction_id)
            canceled_payment = self.client.payments.delete(payment.id)
        except Exception as e:
            if not is_not_cancelable_error(e):
                raise
            logger.info(
                "Mollie payment cannot be canceled",
                extra={'payment_id': transaction_id, 'error': str(e)}
            )
            return TransactionResult(
                transaction_id=transaction_id,
                success=False,
                message=str(e)
            )

        return TransactionResult(
            transaction_id=canceled_payment.id,
            status=map_status(canceled_payment.status),
            success=canceled_payment.status == MOLLIE_CANCELED,
            gateway_response=canceled_payment
        )

    # Recurring billing

    def create_subscription(
        self,
        credit_card: Optional[CreditCard],
        prospect: Optional[Prospect],
        subscription_plan: SubscriptionPlan,
        options: OptionsArg = None
    ) -> SubscriptionResult:
        """
        Create a subscription in Mollie.

        Mollie subscriptions belong to a customer, so one is created first
        unless options.customer_id is given.
        """
        options = SubscriptionOptions.coerce(options)

        customer_id = options.customer_id
        if not customer_id:
            profile = self.create_customer_profile(
                credit_card,
                prospect,
                CustomerOptions(metadata=options.metadata)
            )
            customer_id = profile.profile_id

        subscription_data = {
            'amount': money(subscription_plan.amount, subscription_plan.currency or DEFAULT_CURRENCY),
            'interval': format_interval(
                subscription_plan.period_length,
                subscription_plan.period_unit or 'months'
            ),
            'description': subscription_plan.description or 'Subscription',
            'metadata': {'planId': subscription_plan.id}
        }

        if options.webhook_url:
            subscription_data['webhookUrl'] = options.webhook_url

        customer = self.client.customers.get(customer_id)
        try:
            subscription = customer.subscriptions.create(subscription_data)
        except Exception as e:
            logger.warning(
                "Failed to create Mollie subscription",
                extra={'customer_id': customer_id, 'plan_id': subscription_plan.id, 'error': str(e)}
            )
            raise

        return SubscriptionResult(
            subscription_id=subscription.id,
            customer_id=customer_id,
            plan_id=subscription_plan.id,
            status=subscription.status,
            success=True,
            gateway_response=subscription
        )

    # Saved customers

    def create_customer_profile(
        self,
        credit_card: Optional[CreditCard],
        prospect: Optional[Prospect],
        options: OptionsArg = None
    ) -> CustomerProfileResult:
        """
        Create a customer in Mollie.
        """
        options = CustomerOptions.coerce(options)
        prospect = prospect or Prospect()

        customer_data = {
            'name': prospect.customer_name or prospect.full_name,
            'email': prospect.customer_email
        }

        if options.metadata:
            customer_data['metadata'] = options.metadata

        try:
            customer = self.client.customers.create(customer_data)
        except Exception as e:
            logger.warning(
                "Failed to create Mollie customer",
                extra={'email': prospect.customer_email, 'error': str(e)}
            )
            raise

        return CustomerProfileResult(
            profile_id=customer.id,
            success=True,
            gateway_response=customer
        )

    def charge_customer(
        self,
        profile_id: str,
        payment_profile_id: Optional[str],
        order: Order,
        options: OptionsArg = None
    ) -> TransactionResult:
        """
        Create a payment for an existing Mollie customer.

        payment_profile_id is not used; Mollie picks the customer's mandate.
        """
        options = PaymentOptions.coerce(options)

        payment_data = {'customerId': profile_id}
        payment_data.update(self._build_payment_data(order, options))
        payment_data['metadata'] = {'orderId': order.order_id}

        payment = self._create_payment(payment_data)

        return TransactionResult(
            transaction_id=payment.id,
            profile_id=profile_id,
            amount=order.amount,
            status=map_status(payment.status),
            checkout_url=payment.checkout_url,
            captured=payment.status == MOLLIE_PAID,
            success=payment.status == MOLLIE_PAID,
            gateway_response=payment
        )

    # Helpers

    def _build_payment_data(self, order: Order, options: PaymentOptions) -> Dict[str, Any]:
        payment_data = {
            'amount': money(order.amount, order.currency or DEFAULT_CURRENCY),
            'description': options.description or f"Order {order.order_id or int(time.time() * 1000)}"
        }

        if options.redirect_url:
            payment_data['redirectUrl'] = options.redirect_url
        if options.webhook_url:
            payment_data['webhookUrl'] = options.webhook_url
        if options.payment_method:
            payment_data['method'] = options.payment_method

        return payment_data

    def _create_payment(self, payment_data: Dict[str, Any]):
        try:
            payment = self.client.payments.create(payment_data)
        except Exception as e:
            logger.warning(
                "Failed to create Mollie payment",
                extra={'description': payment_data.get('description'), 'error': str(e)}
            )
            raise

        logger.info(
            "Created Mollie payment",
            extra={'payment_id': payment.id, 'status': payment.status}
        )
        return payment
