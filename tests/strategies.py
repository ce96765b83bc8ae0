# tests/strategies.py
# Hypothesis strategies shared by the property tests.
from hypothesis import strategies as st

from computations import calculate
from models import (
    DiscountKind,
    LineDiscount,
    LineItem,
    Snapshot,
    TaxRate,
    Tender,
    TenderMethod,
    TransactionDiscount,
)
from money import Fixed

cents = st.integers(1, 5000).map(lambda u: Fixed(u, 2))


@st.composite
def snapshots(draw):
    """Random cart with discounts, floors, CRV, several authorities and an optional SNAP tender"""
    lines = []
    for i in range(draw(st.integers(1, 6))):
        rates = draw(st.lists(
            st.tuples(st.sampled_from(["STATE", "COUNTY", "CITY"]), st.integers(0, 10000)),
            max_size=3,
        ))
        discount = draw(st.one_of(
            st.none(),
            st.integers(0, 100).map(lambda p: LineDiscount(DiscountKind.PERCENT, Fixed(p, 0))),
            cents.map(lambda a: LineDiscount(DiscountKind.FIXED_PER_UNIT, a)),
        ))
        lines.append(LineItem(
            line_id=str(i),
            regular_price=draw(cents),
            quantity=Fixed(draw(st.integers(1, 5)), 0),
            container_value=draw(st.sampled_from([Fixed(0), Fixed(5), Fixed(10)])),
            tax_rates=tuple(TaxRate(a, Fixed(p, 3)) for a, p in rates),
            snap_eligible=draw(st.booleans()),
            floor_price=draw(st.one_of(st.none(), cents)),
            discount=discount,
        ))
    invoice = draw(st.one_of(
        st.none(),
        st.integers(0, 50).map(lambda p: TransactionDiscount(DiscountKind.PERCENT, Fixed(p, 0))),
        cents.map(lambda a: TransactionDiscount(DiscountKind.FIXED_TOTAL, a)),
    ))
    snapshot = Snapshot(tuple(lines), transaction_discount=invoice)
    eligible = calculate(snapshot).value.snap_eligible_total
    snap = draw(st.integers(0, eligible.units))
    if snap:
        snapshot = Snapshot(snapshot.lines, (Tender(TenderMethod.SNAP, Fixed(snap, 2)),), invoice)
    return snapshot
