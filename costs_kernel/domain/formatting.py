"""
Currency formatting -- pure rendering of cost figures for display.

The template is a plain string with two placeholders:

    %n  the amount, rounded half-up to the currency's decimal places
    %u  the unit (the configured unit, or the currency code)

Negative amounts are rendered as ``-`` followed by the formatted template,
so ``-5`` with ``%n %u`` becomes ``-5.00 EUR``.  No digit grouping is
applied.  Stored amounts are never modified.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal

from costs_kernel.domain.models import CurrencySettings
from costs_kernel.domain.values import Money
from costs_kernel.exceptions import CurrencyMismatchError

_PLACEHOLDER = re.compile(r"%([nu])")


def format_number(amount: Decimal, decimal_places: int) -> str:
    """Round half-up and render without exponent or grouping."""
    quantum = Decimal(1).scaleb(-decimal_places)
    return f"{amount.quantize(quantum, rounding=ROUND_HALF_UP):f}"


def format_currency(amount: Money | Decimal, settings: CurrencySettings) -> str:
    """Render ``amount`` with the project's currency template.

    Raises:
        CurrencyMismatchError: if ``amount`` is Money in another currency.
    """
    currency = settings.currency
    if isinstance(amount, Money):
        if amount.currency != currency:
            raise CurrencyMismatchError(amount.currency.code, currency.code)
        value = amount.amount
    else:
        value = Decimal(amount)

    number = format_number(abs(value), currency.decimal_places)
    substitutions = {"n": number, "u": settings.display_unit}
    rendered = _PLACEHOLDER.sub(lambda m: substitutions[m.group(1)], settings.format)

    if value < 0 and number.strip("0.") != "":
        return f"-{rendered}"
    return rendered
