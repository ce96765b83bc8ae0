# tests/test_computations.py
from fractions import Fraction

from hypothesis import given, settings

from allocation import invoice_discount_amount
from computations import calculate
from config import EngineConfig
from errors import Err, ErrorKind, Ok
from models import (
    DiscountKind,
    LineDiscount,
    Snapshot,
    Tender,
    TenderMethod,
    TransactionDiscount,
)
from money import Fixed
from strategies import snapshots

M = Fixed.parse


def totals_of(snapshot, config=None):
    result = calculate(snapshot, config)
    assert isinstance(result, Ok), result
    return result.value


def test_single_line_with_container_value_and_cash(make_line):
    item = make_line(price="2.99", taxes=[("STATE", "8.5")], container_value=M("0.10"))
    totals = totals_of(Snapshot((item,), (Tender(TenderMethod.CASH, M("5.00")),)))
    assert totals.subtotal == M("2.99")
    assert totals.container_total == M("0.10")
    assert totals.tax_total == M("0.26")
    assert totals.grand_total == M("3.35")
    assert totals.payment.change_due == M("1.65")
    assert totals.payment.is_complete


def test_line_discount_then_tax(make_line):
    item = make_line(
        price="7.99",
        taxes=[("STATE", "8.5")],
        discount=LineDiscount(DiscountKind.PERCENT, M("10", 3)),
    )
    totals = totals_of(Snapshot((item,), (Tender(TenderMethod.CASH, M("10.00")),)))
    assert totals.line_discount_total == M("0.80")
    assert totals.subtotal == M("7.19")
    assert totals.tax_total == M("0.61")
    assert totals.grand_total == M("7.80")
    assert totals.payment.change_due == M("2.20")
    assert totals.savings_total == M("0.80")


def test_floor_price_limits_the_realized_discount(make_line):
    item = make_line(
        price="7.99",
        floor_price=M("5.00"),
        discount=LineDiscount(DiscountKind.FIXED_TOTAL, M("4.00")),
    )
    totals = totals_of(Snapshot((item,)))
    assert totals.line_discount_total == M("2.99")
    assert totals.subtotal == M("5.00")


def test_invoice_discount_share_can_go_below_floor(make_line):
    item = make_line(
        price="7.99",
        floor_price=M("5.00"),
        discount=LineDiscount(DiscountKind.FIXED_TOTAL, M("4.00")),
    )
    invoice = TransactionDiscount(DiscountKind.FIXED_TOTAL, M("1.00"))
    totals = totals_of(Snapshot((item,), transaction_discount=invoice))
    assert totals.invoice_discount_total == M("1.00")
    assert totals.subtotal == M("4.00")


def test_invoice_discount_split_across_lines(make_line):
    food = make_line("food", price="4.99", snap_eligible=True)
    other = make_line("other", price="4.49", taxes=[("STATE", "8.5")])
    discount = TransactionDiscount(DiscountKind.PERCENT, M("5", 3))
    totals = totals_of(Snapshot((food, other), transaction_discount=discount))
    assert [l.invoice_discount for l in totals.lines] == [M("0.25"), M("0.22")]
    assert totals.invoice_discount_total == M("0.47")
    assert totals.tax_total == M("0.36")
    assert totals.grand_total == M("9.37")
    assert totals.snap_eligible_total == M("4.74")
    assert totals.non_snap_total == M("4.27")
    assert totals.savings_total == M("0.47")


def test_partial_snap_payment_reduces_tax(make_line):
    item = make_line(price="10.00", taxes=[("STATE", "2")], snap_eligible=True)
    tenders = (
        Tender(TenderMethod.SNAP, M("6.00"), sequence=1),
        Tender(TenderMethod.CASH, M("5.00"), sequence=2),
    )
    totals = totals_of(Snapshot((item,), tenders))
    line = totals.lines[0]
    assert 1 - line.snap_fraction == Fraction(2, 5)
    assert line.tax == M("0.08")
    assert totals.grand_total == M("10.08")
    assert totals.snap_paid_total == M("6.00")
    assert totals.payment.change_due == M("0.92")


def test_full_snap_payment_makes_line_tax_free(make_line):
    food = make_line("food", price="3.00", taxes=[("STATE", "8.5")], snap_eligible=True, container_value=M("0.10"))
    other = make_line("other", price="2.00", taxes=[("STATE", "8.5")])
    totals = totals_of(Snapshot((food, other), (Tender(TenderMethod.SNAP, M("3.00")),)))
    assert totals.lines[0].snap_fraction == 1
    assert totals.lines[0].tax == M("0.00")
    assert totals.tax_total == M("0.17")
    assert totals.payment.remaining == M("2.27")


def test_multi_authority_breakdown(make_line):
    a = make_line("a", price="1.00", taxes=[("STATE", "2.5"), ("CITY", "2.5")])
    b = make_line("b", price="3.00", taxes=[("STATE", "2.5")])
    totals = totals_of(Snapshot((a, b)))
    assert totals.taxes == (("CITY", M("0.03")), ("STATE", M("0.11")))
    assert totals.tax_total == M("0.14")


def test_removed_lines_are_ignored(make_line):
    kept = make_line("kept", price="1.00")
    gone = make_line("gone", price="9.00", removed=True)
    totals = totals_of(Snapshot((gone, kept)))
    assert totals.subtotal == M("1.00")
    assert [l.index for l in totals.lines] == [1]


def test_invalid_quantity_returns_error_without_totals(make_line):
    result = calculate(Snapshot((make_line(price="1.00"), make_line(qty=0))))
    assert isinstance(result, Err)
    assert not result.ok
    assert result.kind == ErrorKind.INVALID_QUANTITY
    assert result.error.line_index == 1


def test_over_tender_returns_error(make_line):
    result = calculate(Snapshot((make_line(price="1.00"),), (Tender(TenderMethod.DEBIT, M("5.00")),)))
    assert isinstance(result, Err)
    assert result.kind == ErrorKind.OVER_ALLOCATED_TENDER


def test_config_controls_change_methods(make_line):
    snapshot = Snapshot((make_line(price="1.00"),), (Tender(TenderMethod.CHECK, M("5.00")),))
    config = EngineConfig(change_methods=frozenset({TenderMethod.CASH, TenderMethod.CHECK}))
    assert totals_of(snapshot, config).payment.change_due == M("4.00")


def test_invoice_discount_on_empty_cart_is_zero():
    discount = TransactionDiscount(DiscountKind.FIXED_TOTAL, M("5.00"))
    totals = totals_of(Snapshot((), transaction_discount=discount))
    assert totals.invoice_discount_total == M("0.00")
    assert totals.grand_total == M("0.00")


@settings(max_examples=150, deadline=None)
@given(snapshot=snapshots())
def test_totals_invariants(snapshot):
    totals = totals_of(snapshot)
    assert totals.grand_total == totals.subtotal + totals.container_total + totals.tax_total
    assert totals.tax_total == sum((l.tax for l in totals.lines), Fixed(0))
    assert sum((a for _, a in totals.taxes), Fixed(0)) == totals.tax_total
    assert totals.savings_total >= 0
    shares = sum((l.invoice_discount for l in totals.lines), Fixed(0))
    base = sum((l.subtotal + l.invoice_discount for l in totals.lines), Fixed(0))
    assert shares == invoice_discount_amount(snapshot.transaction_discount, base)
    for line in totals.lines:
        if line.snap_fraction == 1:
            assert line.tax == 0
    tendered = sum((t.amount for t in snapshot.tenders), Fixed(0))
    if not tendered.is_zero() and tendered < totals.snap_eligible_total:
        assert totals.snap_paid_total == tendered


@settings(max_examples=50, deadline=None)
@given(snapshot=snapshots())
def test_recalculation_is_deterministic(snapshot):
    assert calculate(snapshot) == calculate(snapshot)
