"""
Currency Conversion

Rates are "units of base currency (YER) per 1 unit". A currency missing
from the table is treated as already being in base units.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Optional

from home_ledger.models.ledger import BASE_CURRENCY, Currency

ExchangeRates = Mapping[Currency, Decimal]

_CENTS = Decimal("0.01")
_RATE_PLACES = Decimal("0.0001")


def rate_for(currency: Currency, rates: ExchangeRates) -> Decimal:
    """Rate of a currency, defaulting to 1 for the base or an unmapped currency."""
    return rates.get(currency) or Decimal("1")


def convert(amount: Decimal, currency: Currency, rates: ExchangeRates) -> Decimal:
    """Convert an amount to the base currency."""
    return amount * rate_for(currency, rates)


def suggest_exchange_rate(
    from_currency: Currency,
    to_currency: Currency,
    rates: ExchangeRates,
) -> Optional[Decimal]:
    """
    Rate to pre-fill when exchanging between two currencies.

    Against YER this is the foreign currency's own rate; between two
    foreign currencies it is the cross rate through YER. None when a
    needed rate is unknown.
    """
    if from_currency == BASE_CURRENCY:
        return rates.get(to_currency)
    if to_currency == BASE_CURRENCY:
        return rates.get(from_currency)

    from_rate = rates.get(from_currency) or Decimal("0")
    to_rate = rates.get(to_currency) or Decimal("0")
    if from_rate > 0 and to_rate > 0:
        return (from_rate / to_rate).quantize(_RATE_PLACES, rounding=ROUND_HALF_UP)
    return None


def preview_exchange(
    amount_to_sell: Decimal,
    from_currency: Currency,
    to_currency: Currency,
    rate: Decimal,
    rates: ExchangeRates,
) -> Decimal:
    """
    Amount received for selling amount_to_sell at the quoted rate.

    Rounded to 2 places; this is the value the caller commits with
    exchange_currencies.
    """
    if amount_to_sell <= 0 or rate <= 0:
        return Decimal("0")

    if from_currency == BASE_CURRENCY:
        received = amount_to_sell / rate
    elif to_currency == BASE_CURRENCY:
        received = amount_to_sell * rate
    else:
        from_rate = rates.get(from_currency) or Decimal("0")
        to_rate = rates.get(to_currency) or Decimal("0")
        if from_rate <= 0 or to_rate <= 0:
            return Decimal("0")
        received = (amount_to_sell * from_rate) / to_rate

    return received.quantize(_CENTS, rounding=ROUND_HALF_UP)
