"""
Proportional allocation with an exact-sum guarantee, and the invoice discount allocator
"""
from __future__ import annotations
import math
from fractions import Fraction
from typing import List, Optional, Sequence

import structlog

from models import DiscountKind, PricedLine, TransactionDiscount
from money import Fixed, MONEY_PLACES, ZERO, exact

logger = structlog.get_logger()


def largest_remainder(total_units: int, weights: Sequence[Fraction]) -> List[int]:
    """
    Split `total_units` across `weights` proportionally.

    Every exact share is rounded down, then the units still missing go one
    at a time to the shares with the largest fractional remainder (earlier
    entries win ties). The result always sums to `total_units`. A zero
    weight base yields all zeros.
    """
    base = sum(weights, Fraction(0))
    if base <= 0 or total_units == 0:
        if base <= 0 and total_units:
            logger.debug("degenerate_allocation_base", total_units=total_units, entries=len(weights))
        return [0] * len(weights)

    shares = []
    remainders = []
    for i, w in enumerate(weights):
        share = Fraction(total_units) * w / base
        whole = math.floor(share)
        shares.append(whole)
        remainders.append((share - whole, i))

    leftover = total_units - sum(shares)
    remainders.sort(key=lambda x: (-x[0], x[1]))
    for _, i in remainders[:leftover]:
        shares[i] += 1
    return shares


def allocate(amount: Fixed, weights: Sequence[Fixed]) -> List[Fixed]:
    """Largest-remainder split of a money amount by money weights"""
    units = largest_remainder(amount.units, [exact(w) for w in weights])
    return [Fixed(u, amount.places) for u in units]


def invoice_discount_amount(discount: Optional[TransactionDiscount], base: Fixed) -> Fixed:
    """Invoice discount in money, capped at the discountable base"""
    if discount is None or base <= 0:
        return ZERO
    if discount.kind == DiscountKind.PERCENT:
        amount = base.times(discount.amount.exact() / 100, MONEY_PLACES)
    elif discount.kind == DiscountKind.FIXED_TOTAL:
        amount = discount.amount.rescaled(MONEY_PLACES)
    else:
        raise ValueError(f"Unsupported transaction discount kind: {discount.kind}")
    return min(max(ZERO, amount), base)


def allocate_transaction_discount(
    lines: Sequence[PricedLine],
    discount: Optional[TransactionDiscount],
) -> List[Fixed]:
    """
    Per-line share of the invoice discount, in line order.

    Shares are not floor-checked, so a line's final subtotal can drop below
    floor price x quantity once its share is taken off. The shares always add
    up to the invoice discount amount.
    """
    subtotals = [line.line_subtotal for line in lines]
    amount = invoice_discount_amount(discount, sum(subtotals, ZERO))
    return allocate(amount, subtotals)
