"""
Payment reconciliation and the transaction state machine
"""
from __future__ import annotations
from typing import AbstractSet, Dict, FrozenSet, List, Optional, Sequence, Tuple

import structlog

from errors import (
    InvalidTenderError,
    InvalidTransitionError,
    OverAllocatedTenderError,
    errmsg,
)
from models import (
    Reconciliation,
    Tender,
    TenderApplication,
    TenderMethod,
    TransactionState,
)
from money import Fixed, ZERO

logger = structlog.get_logger()

CHANGE_METHODS: FrozenSet[TenderMethod] = frozenset({TenderMethod.CASH})

TRANSITIONS: Dict[TransactionState, FrozenSet[TransactionState]] = {
    TransactionState.OPEN: frozenset({
        TransactionState.OPEN,
        TransactionState.COMPLETED,
        TransactionState.VOIDED,
    }),
    TransactionState.COMPLETED: frozenset({
        TransactionState.PARTIALLY_RETURNED,
        TransactionState.RETURNED,
    }),
    TransactionState.PARTIALLY_RETURNED: frozenset({
        TransactionState.PARTIALLY_RETURNED,
        TransactionState.RETURNED,
    }),
    TransactionState.RETURNED: frozenset(),
    TransactionState.VOIDED: frozenset(),
}


def _in_sequence(tenders: Sequence[Tender]) -> List[Tuple[int, Tender]]:
    """(position in the caller's list, tender) pairs in application order"""
    return sorted(enumerate(tenders), key=lambda x: (x[1].sequence, x[0]))


def ordered_tenders(tenders: Sequence[Tender]) -> List[Tender]:
    """Application order: by sequence, then by position"""
    return [t for _, t in _in_sequence(tenders)]


def _reject(error):
    logger.warning("tender_rejected", kind=error.kind.value, message=error.message, tender_index=error.tender_index)
    raise error


def reconcile(
    tenders: Sequence[Tender],
    grand_total: Fixed,
    snap_limit: Optional[Fixed] = None,
    change_methods: AbstractSet[TenderMethod] = CHANGE_METHODS,
) -> Reconciliation:
    """
    Apply tenders against the grand total in order.

    Each tender pays min(amount, remaining). Only `change_methods` may
    tender more than the remaining balance; the excess becomes change.
    Any other tender larger than the remaining balance, and SNAP tenders
    adding up to more than `snap_limit`, are rejected rather than trimmed.
    Rejections carry the tender's position in `tenders`, not in the
    application order.
    """
    remaining = grand_total
    change_due = ZERO
    snap_used = ZERO
    applications = []

    for i, tender in _in_sequence(tenders):
        if tender.amount <= 0:
            _reject(InvalidTenderError(
                f"{errmsg.TENDER_POSITIVE}: {tender.method.value} {tender.amount}",
                tender_index=i,
            ))
        if tender.method == TenderMethod.SNAP and snap_limit is not None:
            snap_used = snap_used + tender.amount
            if snap_used > snap_limit:
                _reject(OverAllocatedTenderError(
                    f"{errmsg.SNAP_EXCEEDS_ELIGIBLE}: {snap_used} > {snap_limit}",
                    tender_index=i,
                ))
        if tender.amount > remaining and tender.method not in change_methods:
            _reject(OverAllocatedTenderError(
                f"{errmsg.TENDER_EXCEEDS_BALANCE}: {tender.method.value} {tender.amount} > {remaining}",
                tender_index=i,
            ))

        applied = min(tender.amount, remaining)
        change = tender.amount - applied
        remaining = remaining - applied
        change_due = change_due + change
        applications.append(TenderApplication(tender, applied, change, remaining))

    return Reconciliation(
        grand_total=grand_total,
        applications=tuple(applications),
        remaining=remaining,
        change_due=change_due,
    )


def transition(current: TransactionState, target: TransactionState) -> TransactionState:
    if target not in TRANSITIONS[current]:
        raise InvalidTransitionError(f"{errmsg.INVALID_TRANSITION}: {current.value} -> {target.value}")
    return target


def state_after_payment(reconciliation: Reconciliation) -> TransactionState:
    target = TransactionState.COMPLETED if reconciliation.is_complete else TransactionState.OPEN
    return transition(TransactionState.OPEN, target)


def void(current: TransactionState) -> TransactionState:
    """Voiding discards tenders and is only possible before completion"""
    return transition(current, TransactionState.VOIDED)
