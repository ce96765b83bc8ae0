"""
SNAP/EBT allocator: which part of each eligible line the SNAP tender pays for
"""
from __future__ import annotations
from dataclasses import dataclass
from fractions import Fraction
from typing import List, Sequence

import structlog

from allocation import allocate
from models import Tender, TenderMethod
from money import Fixed, ZERO

logger = structlog.get_logger()


@dataclass(frozen=True)
class SnapShare:
    paid: Fixed
    fraction: Fraction  # paid / line subtotal


NO_SNAP = SnapShare(ZERO, Fraction(0))


def snap_tendered(tenders: Sequence[Tender]) -> Fixed:
    return sum((t.amount for t in tenders if t.method == TenderMethod.SNAP), ZERO)


def eligible_total(subtotals: Sequence[Fixed], eligible: Sequence[bool]) -> Fixed:
    return sum((s for s, e in zip(subtotals, eligible) if e), ZERO)


def allocate_snap(
    tender_amount: Fixed,
    subtotals: Sequence[Fixed],
    eligible: Sequence[bool],
) -> List[SnapShare]:
    """
    Apportion a SNAP tender over the eligible lines.

    A tender that covers the whole eligible total pays every eligible line in
    full. A smaller one is split in proportion to the eligible subtotals so
    that the paid amounts add up to the tender exactly. Ineligible lines are
    never paid by SNAP.
    """
    if len(subtotals) != len(eligible):
        raise ValueError("subtotals and eligible must have the same length")

    total = eligible_total(subtotals, eligible)
    if tender_amount <= 0 or total <= 0:
        return [NO_SNAP] * len(subtotals)

    if tender_amount >= total:
        logger.debug("snap_tender_covers_eligible", tendered=str(tender_amount), eligible=str(total))
        return [SnapShare(s, Fraction(1)) if e else NO_SNAP for s, e in zip(subtotals, eligible)]

    weights = [s if e else ZERO for s, e in zip(subtotals, eligible)]
    paid = allocate(tender_amount, weights)
    out = []
    for amount, subtotal, e in zip(paid, subtotals, eligible):
        if not e or subtotal.is_zero():
            out.append(NO_SNAP)
        else:
            out.append(SnapShare(amount, amount.exact() / subtotal.exact()))
    return out
