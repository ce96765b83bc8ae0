"""
Tax engine: taxable base after SNAP exemption, per-authority tax, aggregation
"""
from __future__ import annotations
from fractions import Fraction
from typing import Dict, Iterable, Sequence, Tuple

from models import TaxRate
from money import Fixed, MONEY_PLACES, WORK_PLACES, ZERO

AuthorityTaxes = Tuple[Tuple[str, Fixed], ...]


def taxable_base(subtotal: Fixed, container: Fixed, snap_fraction: Fraction) -> Fixed:
    """(subtotal + container value) x (1 - SNAP-paid fraction), at working precision"""
    taxable_fraction = 1 - Fraction(snap_fraction)
    if taxable_fraction <= 0:
        return Fixed(0, WORK_PLACES)
    return (subtotal + container).times(taxable_fraction, WORK_PLACES)


def authority_tax(base: Fixed, rate: TaxRate) -> Fixed:
    """Tax owed to one authority, rounded half up to cents"""
    if base <= 0 or rate.percent <= 0:
        return ZERO
    return base.times(rate.percent.exact() / 100, MONEY_PLACES)


def line_taxes(base: Fixed, rates: Sequence[TaxRate]) -> AuthorityTaxes:
    """Each authority rounded on its own; repeated authority ids are added together"""
    out: Dict[str, Fixed] = {}
    for rate in rates:
        out[rate.authority_id] = out.get(rate.authority_id, ZERO) + authority_tax(base, rate)
    return tuple(out.items())


def combined_rate_tax(base: Fixed, rates: Sequence[TaxRate]) -> Fixed:
    """
    Tax at the summed rate, rounded once.

    Only for comparison with the itemized amounts; it can differ from the
    per-authority total by a cent or more and is never used for totals.
    """
    percent = sum((r.percent for r in rates), ZERO)
    return authority_tax(base, TaxRate("combined", percent))


def merge_taxes(groups: Iterable[AuthorityTaxes]) -> AuthorityTaxes:
    """Per-authority totals across lines, ordered by authority id"""
    out: Dict[str, Fixed] = {}
    for taxes in groups:
        for authority, amount in taxes:
            out[authority] = out.get(authority, ZERO) + amount
    return tuple(sorted(out.items()))


def tax_total(taxes: AuthorityTaxes) -> Fixed:
    return sum((amount for _, amount in taxes), ZERO)
