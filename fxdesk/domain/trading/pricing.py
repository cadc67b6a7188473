"""
Quote simulation arithmetic.

Computes the next bid/ask for an instrument from a pair of random
deltas. Pure functions; the random source and clock are passed in.

Prices carry 5 fractional digits, percentages 2. Deltas are quantized
before they are applied, so ``change`` is always exactly
``new_bid - old_bid``.
"""

import random
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from fxdesk.domain.trading.entities import (
    CurrencyPair,
    PositionType,
    QuoteUpdate,
    TradingPosition,
)

PRICE_QUANT = Decimal("0.00001")
PERCENT_QUANT = Decimal("0.01")
MONEY_QUANT = Decimal("0.01")
HUNDRED = Decimal("100")


def quantize_price(value: Decimal) -> Decimal:
    """Round a price to 5 decimal places."""
    return value.quantize(PRICE_QUANT, rounding=ROUND_HALF_UP)


def quantize_percent(value: Decimal) -> Decimal:
    """Round a percentage to 2 decimal places."""
    return value.quantize(PERCENT_QUANT, rounding=ROUND_HALF_UP)


def realized_pnl(position: TradingPosition, close_price: Decimal) -> Decimal:
    """Return the profit of closing a position at ``close_price``, 2dp."""
    move = close_price - position.open_price
    if position.type is PositionType.SELL:
        move = -move
    return (move * position.amount).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def draw_delta(rng: random.Random, max_delta: Decimal) -> Decimal:
    """Draw a uniform delta in [-max_delta, +max_delta], quantized to 5dp."""
    bound = float(max_delta)
    return quantize_price(Decimal(str(rng.uniform(-bound, bound))))


def apply_tick(
    pair: CurrencyPair,
    bid_delta: Decimal,
    ask_delta: Decimal,
    now: datetime,
) -> Optional[QuoteUpdate]:
    """Compute the quote update for one instrument.

    Args:
        pair: Current instrument state (read before any write).
        bid_delta: Change applied to the bid.
        ask_delta: Change applied to the ask.
        now: Timestamp recorded as ``last_updated``.

    Returns:
        The new quote, or None when the current bid is not positive
        (percentage change would be undefined).
    """
    if pair.bid <= 0:
        return None

    change = quantize_price(bid_delta)
    return QuoteUpdate(
        pair_id=pair.id,
        bid=quantize_price(pair.bid + change),
        ask=quantize_price(pair.ask + quantize_price(ask_delta)),
        change=change,
        change_percent=quantize_percent(change / pair.bid * HUNDRED),
        last_updated=now,
    )
