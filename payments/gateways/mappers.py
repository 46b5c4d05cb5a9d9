"""
Translation helpers between Mollie values and normalized gateway values.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Union

from .base import (
    STATUS_PENDING,
    STATUS_AUTHORIZED,
    STATUS_SETTLED,
    STATUS_FAILED,
    STATUS_VOIDED,
    STATUS_UNKNOWN,
)


MOLLIE_STATUS_MAP = {
    'open': STATUS_PENDING,
    'pending': STATUS_PENDING,
    'authorized': STATUS_AUTHORIZED,
    'paid': STATUS_SETTLED,
    'expired': STATUS_FAILED,
    'canceled': STATUS_VOIDED,
    'failed': STATUS_FAILED,
}

MOLLIE_REFUND_STATUS_MAP = {
    'queued': STATUS_PENDING,
    'pending': STATUS_PENDING,
    'processing': STATUS_PENDING,
    'refunded': STATUS_SETTLED,
    'failed': STATUS_FAILED,
    'canceled': STATUS_VOIDED,
}

TWO_PLACES = Decimal('0.01')


def map_status(mollie_status: Any) -> str:
    """
    Map a Mollie payment status to a normalized status.

    Statuses outside the table map to 'unknown'.
    """
    try:
        return MOLLIE_STATUS_MAP.get(mollie_status, STATUS_UNKNOWN)
    except TypeError:
        # unhashable input
        return STATUS_UNKNOWN


def map_refund_status(mollie_status: Any) -> str:
    """Map a Mollie refund status to a normalized status."""
    try:
        return MOLLIE_REFUND_STATUS_MAP.get(mollie_status, STATUS_UNKNOWN)
    except TypeError:
        return STATUS_UNKNOWN


def format_interval(length: Union[int, str, None], unit: str) -> str:
    """
    Format a subscription interval the way Mollie expects it.

    Examples:
        >>> format_interval(1, 'months')
        '1 month'
        >>> format_interval(2, 'week')
        '2 weeks'
    """
    try:
        # leading integer part, so "3.0" and "2.5" give 3 and 2
        length = int(Decimal(str(length).strip()))
    except (TypeError, ValueError, InvalidOperation, OverflowError):
        length = 1
    if not length:
        length = 1

    if length == 1:
        if unit.endswith('s'):
            unit = unit[:-1]
        return f"{length} {unit}"

    if not unit.endswith('s'):
        unit = f"{unit}s"

    return f"{length} {unit}"


def format_amount(amount: Union[Decimal, float, int, str]) -> str:
    """Format an amount as a two-decimal string, e.g. '10.00'."""
    return str(Decimal(str(amount)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def parse_amount(value: Union[Decimal, float, int, str, None]):
    """Parse a Mollie amount value ('10.00') into a Decimal."""
    if value is None:
        return None
    return Decimal(str(value))


def money(amount: Union[Decimal, float, int, str], currency: str) -> dict:
    """Build a Mollie amount object."""
    return {
        'currency': currency,
        'value': format_amount(amount),
    }
