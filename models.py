"""
Data models for the POS totals engine
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from fractions import Fraction
from typing import Dict, Optional, Tuple

from money import Fixed, ZERO


class DiscountKind(str, Enum):
    PERCENT = "percent"
    FIXED_PER_UNIT = "fixed_per_unit"
    FIXED_TOTAL = "fixed_total"


class TenderMethod(str, Enum):
    CASH = "cash"
    CREDIT = "credit"
    DEBIT = "debit"
    SNAP = "snap"  # EBT food benefits
    EBT_CASH = "ebt_cash"
    CHECK = "check"
    ON_ACCOUNT = "on_account"


class PriceSource(str, Enum):
    PROMPTED = "prompted"
    SALE = "sale"
    REGULAR = "regular"


class ReturnReason(str, Enum):
    DEFECTIVE = "DEF"
    WRONG_ITEM = "WRG"
    CHANGED_MIND = "CHM"
    QUALITY = "QLT"
    OTHER = "OTH"


class TransactionState(str, Enum):
    OPEN = "open"
    COMPLETED = "completed"
    PARTIALLY_RETURNED = "partially_returned"
    RETURNED = "returned"
    VOIDED = "voided"


@dataclass(frozen=True)
class TaxRate:
    """One taxing authority's rate, as a percentage (8.5 means 8.5%)"""
    authority_id: str
    percent: Fixed


@dataclass(frozen=True)
class LineDiscount:
    kind: DiscountKind
    amount: Fixed  # percent for PERCENT, money otherwise


@dataclass(frozen=True)
class LineItem:
    """One cart row as handed over by the cart layer"""
    line_id: str
    regular_price: Fixed
    quantity: Fixed  # count (0 places) or weight (3 places)
    sale_price: Optional[Fixed] = None
    prompted_price: Optional[Fixed] = None  # keyed in or decoded from an embedded-price barcode
    container_value: Fixed = ZERO  # CRV per unit
    tax_rates: Tuple[TaxRate, ...] = ()
    snap_eligible: bool = False
    floor_price: Optional[Fixed] = None
    floor_override: bool = False
    discount: Optional[LineDiscount] = None
    sold_by_weight: bool = False
    removed: bool = False
    description: str = ""


@dataclass(frozen=True)
class TransactionDiscount:
    """Invoice-level discount; kind is PERCENT or FIXED_TOTAL"""
    kind: DiscountKind
    amount: Fixed


@dataclass(frozen=True)
class Tender:
    method: TenderMethod
    amount: Fixed
    sequence: int = 0
    reference: str = ""  # auth code / reference number from the terminal


@dataclass(frozen=True)
class Snapshot:
    """Everything one calculation pass looks at"""
    lines: Tuple[LineItem, ...]
    tenders: Tuple[Tender, ...] = ()
    transaction_discount: Optional[TransactionDiscount] = None


@dataclass(frozen=True)
class PricedLine:
    """Line Item Pricer output"""
    item: LineItem
    index: int
    effective_price: Fixed
    price_source: PriceSource
    regular_subtotal: Fixed  # regular price x qty
    gross_subtotal: Fixed  # effective price x qty, before the line discount
    requested_discount: Fixed
    line_discount: Fixed  # realized, after floor enforcement; zero when the floor lifts the price
    line_subtotal: Fixed
    final_unit_price: Fixed
    floor_clamped: bool
    container_total: Fixed


@dataclass(frozen=True)
class LineTotals:
    """Per-line detail of a calculation pass (or of a refund when negative)"""
    index: int
    line_id: str
    quantity: Fixed
    effective_price: Fixed
    line_discount: Fixed
    invoice_discount: Fixed
    subtotal: Fixed  # after line and invoice discounts
    container_total: Fixed
    snap_eligible: bool
    snap_paid: Fixed
    snap_fraction: Fraction
    taxable_base: Fixed
    taxes: Tuple[Tuple[str, Fixed], ...]  # (authority id, amount)
    tax: Fixed
    savings: Fixed

    def scaled(self, fraction: Fraction) -> "LineTotals":
        """Negative share of this line, as refunded when `fraction` of it comes back"""
        def part(value: Fixed) -> Fixed:
            return Fixed.from_fraction(-value.exact() * fraction, value.places)

        taxes = tuple((authority, part(amount)) for authority, amount in self.taxes)
        return replace(
            self,
            quantity=part(self.quantity),
            line_discount=part(self.line_discount),
            invoice_discount=part(self.invoice_discount),
            subtotal=part(self.subtotal),
            container_total=part(self.container_total),
            snap_paid=part(self.snap_paid),
            taxable_base=part(self.taxable_base),
            taxes=taxes,
            tax=sum((amount for _, amount in taxes), ZERO),
            savings=part(self.savings),
        )


@dataclass(frozen=True)
class TenderApplication:
    tender: Tender
    applied: Fixed
    change: Fixed
    remaining_after: Fixed


@dataclass(frozen=True)
class Reconciliation:
    """Payment Reconciler output"""
    grand_total: Fixed
    applications: Tuple[TenderApplication, ...]
    remaining: Fixed
    change_due: Fixed

    @property
    def is_complete(self) -> bool:
        return self.remaining.is_zero()

    def applied_by_method(self) -> Dict[TenderMethod, Fixed]:
        """Partition of the grand total by tender method"""
        out: Dict[TenderMethod, Fixed] = {}
        for a in self.applications:
            out[a.tender.method] = out.get(a.tender.method, ZERO) + a.applied
        return out


@dataclass(frozen=True)
class Totals:
    """Result of one calculation pass; never mutated afterwards"""
    subtotal: Fixed
    container_total: Fixed
    tax_total: Fixed
    taxes: Tuple[Tuple[str, Fixed], ...]
    grand_total: Fixed
    savings_total: Fixed
    line_discount_total: Fixed
    invoice_discount_total: Fixed
    snap_paid_total: Fixed
    snap_eligible_total: Fixed
    non_snap_total: Fixed
    lines: Tuple[LineTotals, ...] = ()
    is_refund: bool = False
    payment: Optional[Reconciliation] = None


@dataclass(frozen=True)
class ReturnRequest:
    line_index: int
    quantity: Fixed
    already_returned: Fixed = ZERO
    reason: Optional[ReturnReason] = None
