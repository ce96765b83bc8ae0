"""
Calculation pass: cart snapshot in, Totals out
"""
from __future__ import annotations
from dataclasses import replace
from typing import List, Optional, Sequence

import structlog

from allocation import allocate_transaction_discount
from config import EngineConfig
from errors import EngineError, Err, Ok, Result
from models import LineTotals, PricedLine, Snapshot, Totals
from money import Fixed, ZERO
from payments import reconcile
from pricing import price_line, validate_quantity
from snap import SnapShare, allocate_snap, snap_tendered
from tax import line_taxes, merge_taxes, tax_total, taxable_base

logger = structlog.get_logger()


def price_lines(snapshot: Snapshot) -> List[PricedLine]:
    """Price every line still in the cart. Quantities are checked before anything is priced."""
    active = [(i, item) for i, item in enumerate(snapshot.lines) if not item.removed]
    for i, item in active:
        validate_quantity(item, i)
    return [price_line(item, i) for i, item in active]


def line_totals(line: PricedLine, invoice_share: Fixed, snap: SnapShare) -> LineTotals:
    subtotal = line.line_subtotal - invoice_share
    base = taxable_base(subtotal, line.container_total, snap.fraction)
    taxes = line_taxes(base, line.item.tax_rates)
    return LineTotals(
        index=line.index,
        line_id=line.item.line_id,
        quantity=line.item.quantity,
        effective_price=line.effective_price,
        line_discount=line.line_discount,
        invoice_discount=invoice_share,
        subtotal=subtotal,
        container_total=line.container_total,
        snap_eligible=line.item.snap_eligible,
        snap_paid=snap.paid,
        snap_fraction=snap.fraction,
        taxable_base=base,
        taxes=taxes,
        tax=tax_total(taxes),
        savings=max(ZERO, line.regular_subtotal - subtotal),
    )


def summarize(lines: Sequence[LineTotals], refund: bool = False) -> Totals:
    """Aggregate line detail. Used for sales and refunds alike."""
    def total(attr: str, only=None) -> Fixed:
        return sum((getattr(l, attr) for l in lines if only is None or only(l)), ZERO)

    subtotal = total("subtotal")
    container = total("container_total")
    taxes = merge_taxes(l.taxes for l in lines)
    tax = total("tax")
    return Totals(
        subtotal=subtotal,
        container_total=container,
        tax_total=tax,
        taxes=taxes,
        grand_total=subtotal + container + tax,
        savings_total=total("savings"),
        line_discount_total=total("line_discount"),
        invoice_discount_total=total("invoice_discount"),
        snap_paid_total=total("snap_paid"),
        snap_eligible_total=total("subtotal", lambda l: l.snap_eligible),
        non_snap_total=total("subtotal", lambda l: not l.snap_eligible),
        lines=tuple(lines),
        is_refund=refund,
    )


def compute_totals(snapshot: Snapshot, config: Optional[EngineConfig] = None) -> Totals:
    """
    Run one calculation pass and reconcile the tenders.
    Raises EngineError on bad input; see calculate() for the result-typed form.
    """
    config = config or EngineConfig()
    priced = price_lines(snapshot)
    shares = allocate_transaction_discount(priced, snapshot.transaction_discount)
    subtotals = [p.line_subtotal - s for p, s in zip(priced, shares)]
    snap = allocate_snap(
        snap_tendered(snapshot.tenders),
        subtotals,
        [p.item.snap_eligible for p in priced],
    )
    totals = summarize([line_totals(p, s, n) for p, s, n in zip(priced, shares, snap)])
    payment = reconcile(
        snapshot.tenders,
        totals.grand_total,
        snap_limit=totals.snap_eligible_total,
        change_methods=config.change_methods,
    )
    return replace(totals, payment=payment)


def calculate(snapshot: Snapshot, config: Optional[EngineConfig] = None) -> Result:
    """Pure calculation entry point: Ok(Totals) or Err(EngineError)"""
    try:
        totals = compute_totals(snapshot, config)
    except EngineError as e:
        logger.warning("calculation_rejected", kind=e.kind.value, message=e.message)
        return Err(e)
    logger.debug("totals_calculated", grand_total=str(totals.grand_total), lines=len(totals.lines))
    return Ok(totals)
